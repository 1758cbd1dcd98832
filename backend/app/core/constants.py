"""
Centralized constants for storage keys, id formats and scheduler jobs.

Change job IDs or keys here instead of scattering literals across main and services.
Env-driven tunables (limits, poll budget, intervals) live in booking_config.
"""

# record_cache row holding the JSON array of local bookings
LOCAL_BOOKINGS_KEY = "go_sauna_local_bookings_v1"

# Ids minted here (not yet confirmed by the remote API) start with this prefix
LOCAL_ID_PREFIX = "local_"

# Scheduler job IDs (must match ids used in main.py / watcher add_job)
CONFIRMATION_WATCH_JOB_ID = "booking_confirmation_watch"
BOOKING_SYNC_JOB_ID = "booking_sync"

# Data-source modes reported to the console banner
DATA_MODE_REMOTE_LOCAL = "remote_local"
DATA_MODE_LOCAL_ONLY = "local_only"

# Outcome statuses returned by core services; the HTTP layer picks the message to show
STATUS_OK = "ok"
STATUS_DEGRADED = "degraded"
STATUS_FAILED = "failed"
