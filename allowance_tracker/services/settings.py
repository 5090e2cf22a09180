# allowance_tracker/services/settings.py
import json
import logging
import os
from typing import Dict, Any

logger = logging.getLogger(__name__)

SETTINGS_PATH = os.getenv("SETTINGS_PATH", "data/settings.json")
DEFAULTS: Dict[str, Any] = {
    "currency_symbol": "₱",
    "api_url": "http://localhost:3000/api",
    "storage_path": "data/storage.json",
}

def load_settings(path: str = None) -> Dict[str, Any]:
    path = path or SETTINGS_PATH
    if not os.path.exists(path):
        save_settings(DEFAULTS, path)
        return DEFAULTS.copy()
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
            # merge defaults
            out = DEFAULTS.copy()
            out.update(data or {})
            return out
    except (OSError, ValueError) as exc:
        # if file is corrupted, overwrite with defaults
        logger.warning("Settings file %s unreadable, restoring defaults: %s", path, exc)
        save_settings(DEFAULTS, path)
        return DEFAULTS.copy()

def save_settings(settings: Dict[str, Any], path: str = None) -> None:
    path = path or SETTINGS_PATH
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(settings, fh, indent=2, ensure_ascii=False)
