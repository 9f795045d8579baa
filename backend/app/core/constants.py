"""Application-wide constants for the festival archive."""

from __future__ import annotations

BRAND_NAME = "OOFF"
API_VERSION = "1.0.0"
API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = f"Backend API for {BRAND_NAME} - a personal film festival archive and screening planner"

# Catalog
DEFAULT_RUNTIME_MINUTES = 120
PLANNER_DEFAULT_RUNTIME_MINUTES = 100
EDITION_LABELS = {
    "edition_jiff_2025": "JIFF 2025",
    "edition_biff_2025": "BIFF 2025",
}
JIFF_EDITION_PREFIX = "edition_jiff_"
BIFF_EDITION_PREFIX = "edition_biff_"

# Ratings and reviews
MIN_RATING = 0.0
MAX_RATING = 5.0
MAX_SHORT_REVIEW_LENGTH = 200

# Profile constraints
MIN_NICKNAME_LENGTH = 2
MAX_NICKNAME_LENGTH = 20
NICKNAME_PATTERN = r"^[a-zA-Z0-9가-힣._-]+$"
MAX_BIO_LENGTH = 160
LETTERBOXD_ID_PATTERN = r"^[A-Za-z0-9_]{1,30}$"
MIN_PASSWORD_LENGTH = 8

# Query limits
USER_SEARCH_LIMIT = 10
USER_RATINGS_LIMIT = 50
FEED_PAGE_SIZE = 20
TASTE_CONTEXT_LIMIT = 20
TASTE_MIN_RATING = 4

# Privacy
VISIBILITY_PRIVATE = "private"
VISIBILITY_FRIENDS = "friends"
VISIBILITY_PUBLIC = "public"
VISIBILITY_VALUES = (VISIBILITY_PRIVATE, VISIBILITY_FRIENDS, VISIBILITY_PUBLIC)

# SSE (Server-Sent Events) configuration
SSE_PATH_PREFIX = "/api/v1/planner/chat/stream"

# ULID path parameter pattern
ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"
