"""
DAYFLOW Planner API - Authentication Module

Bearer-token verification; every endpoint is scoped to the token's user.
"""

from dayflow.auth.dependencies import get_current_user, CurrentUser

__all__ = ["get_current_user", "CurrentUser"]
