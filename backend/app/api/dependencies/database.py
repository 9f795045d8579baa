# backend/app/api/dependencies/database.py
"""
Database-related dependencies.

``get_db`` is re-exported unchanged so a single
``app.dependency_overrides[get_db]`` covers routes and dependencies alike.
"""

from ...database import get_db

__all__ = ["get_db"]
