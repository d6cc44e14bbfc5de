"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SELF_HISTORY_PAGE_SIZE = 10
STUDENT_HISTORY_PAGE_SIZE = 20
MAX_NOTES_LENGTH = 1000
MIN_PASSWORD_LENGTH = 8
