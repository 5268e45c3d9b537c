"""
Configuration settings.

Values that depend on the deployment (catalogue endpoint, timeouts, debug)
come from environment variables; the rest are fixed tunables shared by the
resolver, the date window normalizer and the search engine.
"""

from __future__ import annotations

import os

# Catalogue source
CATALOGUE_URL = os.getenv("COURSEFINDER_CATALOGUE_URL") or None
TIMEOUT = float(os.getenv("COURSEFINDER_TIMEOUT", "30"))

# Logging
DEBUG = os.getenv("COURSEFINDER_DEBUG", "0").lower() in {"1", "true", "yes"}

# Date windows
DEFAULT_WINDOW_DAYS = 56

# Suggestions / diagnostics
SUGGESTION_LIMIT = 3
MAX_SUGGESTION_DISTANCE = 3
NEAREST_LIMIT = 3

# Results returned to the caller after ranking
MAX_RESULTS = 8
