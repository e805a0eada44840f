"""
DAYFLOW Planner API - Reasoning Module

Structured proposals from the external language model.
"""
