"""API key authentication.

Keys live in <data_dir>/.api-keys.json as {key: user_id}. A key for the local
user is generated on first server start. Clients pass the key via the
X-API-Key header and every request runs as the key's user.
"""

import json
import secrets
from pathlib import Path

from fastapi import Depends, HTTPException, Security
from fastapi.security import APIKeyHeader

from config_loader import Settings

from .dependencies import get_settings

API_KEYS_FILENAME = ".api-keys.json"
DEFAULT_USER = "local"

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def _keys_file(settings: Settings) -> Path:
    return Path(settings.data_dir) / API_KEYS_FILENAME


def load_api_keys(settings: Settings) -> dict[str, str]:
    """Read the key -> user_id mapping. Missing file means no keys."""
    keys_file = _keys_file(settings)
    if not keys_file.exists():
        return {}
    with open(keys_file) as f:
        return json.load(f)


def get_or_create_api_key(settings: Settings, user_id: str = DEFAULT_USER) -> str:
    """Get the user's existing API key or generate a new one."""
    keys = load_api_keys(settings)
    for key, owner in keys.items():
        if owner == user_id:
            return key

    key = secrets.token_urlsafe(32)
    keys[key] = user_id

    keys_file = _keys_file(settings)
    keys_file.parent.mkdir(parents=True, exist_ok=True)
    with open(keys_file, "w") as f:
        json.dump(keys, f, indent=2)
    return key


async def verify_api_key(
    api_key: str | None = Security(api_key_header),
    settings: Settings = Depends(get_settings),
) -> str:
    """FastAPI dependency that verifies X-API-Key and returns the caller's user ID."""
    if not api_key:
        raise HTTPException(status_code=401, detail="Missing X-API-Key header")

    user_id = load_api_keys(settings).get(api_key)
    if not user_id:
        raise HTTPException(status_code=403, detail="Invalid API key")

    return user_id
