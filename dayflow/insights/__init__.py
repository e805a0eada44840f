"""
DAYFLOW Planner API - Insights Module

Task statistics per day, week or month.
"""
