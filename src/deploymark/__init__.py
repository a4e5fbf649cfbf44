"""deploymark: deployment markers kept as git tags.

Answers "has anything changed since the last deploy?" and moves the
deploy marker to the current commit once a deploy has gone out.
"""

__version__ = "0.1.0"
