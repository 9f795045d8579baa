"""
Database models for the festival archive.

The static festival catalog (films, entries, screenings, editions) is JSON
reference data and has no tables; the models here hold user-owned state:
- User accounts and login lockouts
- Follow / block edges
- Film entries (rating + short review) and likes on them
- Favorite screenings
- Privacy settings
"""

from .favorite_screening import FavoriteScreening
from .login_attempt import LoginAttempt
from .privacy import UserPrivacy
from .social import Block, Follow
from .user import User
from .user_entry import EntryLike, UserEntry

__all__ = [
    "Block",
    "EntryLike",
    "FavoriteScreening",
    "Follow",
    "LoginAttempt",
    "User",
    "UserEntry",
    "UserPrivacy",
]
