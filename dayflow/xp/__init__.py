"""
DAYFLOW Planner API - XP Module

Experience points awarded on task completion.
"""
