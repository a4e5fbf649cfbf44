"""Centralized constants for deploymark."""

# Markers
DEFAULT_TAG = "last-deploy"
DEFAULT_REMOTE = "origin"

# Git backend
GIT_COMMAND_TIMEOUT = 120  # seconds
GIT_STDERR_LIMIT = 500

# Typo suggestions
SUGGESTION_MAX_DISTANCE = 2
SUGGESTION_LIMIT = 5
