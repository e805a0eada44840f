"""
DAYFLOW Planner API - Scheduling Module

Daily schedule generation: constraint gathering, energy analysis,
reasoning-service requests, fallback placement, scoring and storage.
"""
