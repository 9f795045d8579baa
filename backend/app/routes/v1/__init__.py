# backend/app/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import (
    account,
    auth,
    catalog,
    favorite_screenings,
    health,
    planner,
    privacy,
    prometheus,
    reviews,
    timetable,
    user_entries,
    users,
)

__all__ = [
    "account",
    "auth",
    "catalog",
    "favorite_screenings",
    "health",
    "planner",
    "privacy",
    "prometheus",
    "reviews",
    "timetable",
    "user_entries",
    "users",
]
