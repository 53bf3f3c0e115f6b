"""Application service for runtime store settings.

Reads/writes the behaviour switches to a JSON file so they persist across
restarts without editing ``.env``.
"""

import json
import logging
from typing import Any

from tripstore import config
from tripstore.config import RUNTIME_KEYS, get_settings

logger = logging.getLogger(__name__)

RUNTIME_LABELS = {
    "bootstrap_seed_on_empty": "Seed empty collections on first open",
    "reset_concurrent_phases": "Run reset phases concurrently",
}


def _read_overrides() -> dict[str, Any]:
    """Read the JSON overrides file, returning {} if missing or corrupt."""
    path = config.SETTINGS_FILE
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text("utf-8"))
    except (OSError, ValueError):
        logger.warning("Could not read %s, using defaults", path)
        return {}
    return data if isinstance(data, dict) else {}


def _write_overrides(data: dict[str, Any]) -> None:
    path = config.SETTINGS_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def get_runtime_settings() -> dict[str, bool]:
    """Return the effective value of each runtime switch."""
    settings = get_settings()
    return {key: bool(getattr(settings, key)) for key in sorted(RUNTIME_KEYS)}


def update_runtime_settings(updates: dict[str, bool]) -> dict[str, bool]:
    """Persist overrides and return the new effective values.

    Unknown keys are ignored. The Settings cache is cleared so the next
    ``get_settings()`` call sees the new values; stores that already
    bootstrapped are not affected.
    """
    overrides = _read_overrides()
    for key in sorted(RUNTIME_KEYS):
        if key in updates:
            overrides[key] = bool(updates[key])
    _write_overrides(overrides)

    get_settings.cache_clear()

    logger.info("Runtime settings updated: %s", {k: overrides.get(k) for k in sorted(RUNTIME_KEYS)})
    return get_runtime_settings()
