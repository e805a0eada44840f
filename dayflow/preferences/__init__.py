"""
DAYFLOW Planner API - Preferences Module

Per-user scheduling preferences (work hours, breaks, blocked times).
"""
