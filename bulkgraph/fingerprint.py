"""
Device Fingerprinting
=====================

Derives a short, pseudo-stable identifier for the current device from a
handful of environment strings. The identifier only discourages one device
from claiming several handles; it is not an authentication mechanism and
collisions between devices are accepted.
"""

import locale
import platform
import shutil
from dataclasses import dataclass

from .config import FINGERPRINT_PREFIX


@dataclass(frozen=True)
class DeviceEnvironment:
    """Environment signals the fingerprint is derived from."""
    user_agent: str
    screen_width: int
    screen_height: int
    language: str

    def signature(self) -> str:
        return f"{self.user_agent}|{self.screen_width}x{self.screen_height}|{self.language}"

    @classmethod
    def detect(cls, user_agent: str = "") -> "DeviceEnvironment":
        """
        Best-effort environment for the running host.

        Args:
            user_agent: Client identity string when one is available
                (e.g. a web request's User-Agent header)
        """
        size = shutil.get_terminal_size(fallback=(80, 24))
        language = locale.getlocale()[0] or "en_US"
        return cls(
            user_agent=user_agent or f"{platform.system()}/{platform.release()} Python/{platform.python_version()}",
            screen_width=size.columns,
            screen_height=size.lines,
            language=language,
        )


def fold_hash(text: str) -> int:
    """
    Polynomial rolling hash (``h = h * 31 + unit``) wrapped to signed 32 bits.

    Iterates over UTF-16 code units so non-BMP characters hash the same way
    a browser would hash them. Lone surrogates are hashed as their own unit.
    """
    raw = text.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(raw), 2):
        unit = raw[i] | (raw[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def device_fingerprint(env: DeviceEnvironment) -> str:
    """Identifier for ``env``, e.g. ``node-1234567``."""
    return f"{FINGERPRINT_PREFIX}{abs(fold_hash(env.signature()))}"
