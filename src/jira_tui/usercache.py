"""Local cache of Jira users for the assignee picker."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from jira_tui.models import CachedUser

logger = logging.getLogger(__name__)

USER_CACHE_FILE = "users.json"


def user_cache_path(config_dir: Path) -> Path:
    return config_dir / USER_CACHE_FILE


def load_user_cache(path: Path) -> list[CachedUser]:
    """Load cached users. A missing or unreadable cache is an empty list."""
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        logger.warning("Ignoring unreadable user cache %s", path, exc_info=True)
        return []
    if not isinstance(data, list):
        return []
    users: list[CachedUser] = []
    for item in data:
        if isinstance(item, dict) and item.get("accountId"):
            users.append(CachedUser(
                account_id=str(item["accountId"]),
                display_name=str(item.get("displayName", "")),
                email=str(item.get("emailAddress", "") or ""),
            ))
    return users


def save_user_cache(path: Path, users: list[CachedUser]) -> None:
    """Write users to the cache file, creating its directory if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = []
    for user in users:
        entry = {"accountId": user.account_id, "displayName": user.display_name}
        if user.email:
            entry["emailAddress"] = user.email
        data.append(entry)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
