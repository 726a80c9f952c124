"""
Core utilities shared across the roster app.

This package hosts configuration helpers (env vars, paths), the logger
factory, CSRF helpers and the exception hierarchy used by services and
routers. Modules here must not import from services or routers.
"""
