"""
Core application utilities for settings and FastAPI dependencies.

This package provides:
- Application-level settings (separate from DB settings)
- Token, password and slug helpers
- Dependency helpers (session-bound owner id, authorized form actions)
"""
