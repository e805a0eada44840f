"""
DAYFLOW Planner API - Task Generation Module

Goal breakdowns and onboarding conversations turned into sanitized tasks.
"""
