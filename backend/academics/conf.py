"""Access to the ``ACADEMICS`` settings dict with defaults applied."""
from django.conf import settings

DEFAULTS = {
    "INSTITUTION_EMAIL_DOMAIN": "students.example.edu",
    "SUB_BATCH_SIZE": 50,
    "WRITE_WORKERS": 4,
    "BATCH_LISTING_LIMIT": 20,
    "ALLOCATION_RETRIES": 5,
    "STUDENT_GROUP": "Student",
    "MAX_UPLOAD_BYTES": 20 * 1024 * 1024,
    "RUN_LOG_DETAIL_LIMIT": 200,
}


def ingest_setting(name):
    configured = getattr(settings, "ACADEMICS", None) or {}
    if name in configured:
        return configured[name]
    try:
        return DEFAULTS[name]
    except KeyError:
        raise KeyError(f"Unknown ACADEMICS setting: {name}") from None
