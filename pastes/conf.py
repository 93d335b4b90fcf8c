from pathlib import Path
from typing import Any, Dict

from django.conf import settings

DEFAULTS: Dict[str, Any] = {
    "BUCKET": "files",
    "NAME_LENGTH": 3,
    "MAX_UPLOAD_SIZE": 2 << 20,  # bytes
    "MAX_EDIT_SIZE": 10 << 20,  # bytes
    "REAPER_INTERVAL": 60 * 60,  # seconds
    "REAPER_GRACE": 4 * 60 * 60,  # seconds
    "REAPER_AUTOSTART": True,
    "HELP_FILE": None,
}


def get_setting(key: str) -> Any:
    """
    Read one value from the ``PASTES`` settings dict, falling back to DEFAULTS.
    """
    overrides = getattr(settings, "PASTES", {})
    if key in overrides:
        return overrides[key]
    if key == "HELP_FILE":
        return Path(settings.BASE_DIR) / "README.md"
    return DEFAULTS[key]
