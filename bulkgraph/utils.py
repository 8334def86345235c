"""
Utility Functions
=================

Common utilities used across the Bulk Graph system: durable key/value
storage and handle/text normalization.
"""

import html
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .config import (
    AVATAR_URL_TEMPLATE,
    DEVICE_STORAGE_DIR,
    DISALLOWED_HANDLE_CHARS,
    PROFILE_URL_TEMPLATE,
    TEXT_FIELD_LIMIT,
)

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    Simple file-based key/value store with string values.

    Mirrors the semantics of browser local storage: values survive
    restarts, unknown keys read as None, and a damaged file reads as empty.
    Writes re-read the file first, so several handles on one path only
    replace the keys they touch.
    """

    def __init__(self, path: str):
        """
        Initialize storage.

        Args:
            path: JSON file backing the store (created on first write)
        """
        self.path = Path(path)
        self._data: Dict[str, str] = self._read()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError, UnicodeDecodeError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring malformed storage file %s", self.path)
            return {}

        return {str(k): str(v) for k, v in data.items()}

    def reload(self) -> None:
        """Refresh the in-memory copy from disk."""
        self._data = self._read()

    def _write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(self._data, f, indent=2)
        except IOError as e:
            logger.warning("Could not write storage file %s: %s", self.path, e)

    def get(self, key: str) -> Optional[str]:
        """Get value from storage."""
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        """Set value in storage."""
        self.reload()
        self._data[key] = str(value)
        self._write()

    def remove(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""
        self.reload()
        if self._data.pop(key, None) is not None:
            self._write()

    def clear(self) -> int:
        """Clear all keys. Returns number of keys deleted."""
        count = len(self._data)
        self._data = {}
        self._write()
        return count


def sanitize_handle(text: Any) -> str:
    """
    Strip markup-sensitive characters from user input.

    Args:
        text: Raw input (non-strings yield an empty string)

    Returns:
        Cleaned, trimmed text
    """
    if not isinstance(text, str):
        return ''
    cleaned = ''.join(c for c in text if c not in DISALLOWED_HANDLE_CHARS)
    return cleaned.strip()


def normalize_handle(text: Any) -> str:
    """
    Turn raw login input into a canonical ``@handle``.

    Returns an empty string when nothing usable is left.
    """
    handle = sanitize_handle(text).lower()
    if not handle:
        return ''
    return handle if handle.startswith('@') else '@' + handle


def clean_text(value: Optional[Any], limit: int = TEXT_FIELD_LIMIT) -> str:
    """Trim a text field and cap its length."""
    if value is None:
        return ''
    return str(value).strip()[:limit]


def bare_handle(handle: str) -> str:
    """Handle without the ``@`` marker, as used in profile URLs."""
    return (handle or '').replace('@', '')


def avatar_url(handle: str) -> str:
    return AVATAR_URL_TEMPLATE.format(handle=bare_handle(handle))


def profile_url(handle: str) -> str:
    return PROFILE_URL_TEMPLATE.format(handle=bare_handle(handle))


def coerce_trust_score(value: Any) -> int:
    """
    Coerce a stored trust score into a non-negative integer.

    Accepts ints, floats and numeric strings; anything else counts as 0.
    """
    if isinstance(value, bool):
        return 0
    try:
        score = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, score)


def device_storage_path(fingerprint: str, root: str = DEVICE_STORAGE_DIR) -> str:
    """Session file for one device, so browsers never share a session."""
    return str(Path(root) / f"{fingerprint}.json")


def node_card_html(
    name: str,
    handle: str,
    trust_score: int,
    image_url: str,
    bio: str = ""
) -> str:
    """
    Markup for a member card.

    Every field is HTML-escaped; names, handles and bios come from the
    candidate store or generated text.
    """
    return f"""
    <div class="node-card">
        <img src="{html.escape(image_url)}" width="64" style="border-radius: 16px;" />
        <div class="node-name">{html.escape(name)}</div>
        <div class="node-handle">{html.escape(handle)} · ★ {int(trust_score)}</div>
        <div class="node-bio">{html.escape(bio)}</div>
    </div>
    """
