"""
DAYFLOW Planner API - Auth Models
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthenticatedUser:
    """The caller identified by a verified bearer token."""

    id: str
