"""Constants for autodown.

This module centralizes default values used throughout the application.
"""

# Retention
DEFAULT_SCHEDULE_RETENTION_DAYS = 30  # canceled schedules, by updated_at
DEFAULT_AUDIT_RETENTION_DAYS = 90  # audit entries, by created_at

# Audit log queries
DEFAULT_AUDIT_QUERY_LIMIT = 100
MAX_AUDIT_QUERY_LIMIT = 1000

# Audit log description column bound
DESCRIPTION_MAX_LENGTH = 65535

# Provenance recorded when no operator is given
SYSTEM_ACTOR = "system"

DATETIME_DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"
