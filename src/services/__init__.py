"""
Services for business logic.

Import service classes from their modules (e.g. ``src.services.attendance``).
"""
