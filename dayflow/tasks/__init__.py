"""
DAYFLOW Planner API - Tasks Module

Task records and their lifecycle.
"""
