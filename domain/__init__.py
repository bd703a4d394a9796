"""
Domain layer - Business entities, models, schemas, and enums.
"""
