"""
Configuration and constants for the Bulk Graph recognition system.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# CANDIDATE STORE (Supabase / PostgREST)
# =============================================================================
SUPABASE_URL = os.environ.get("BULK_SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.environ.get("BULK_SUPABASE_ANON_KEY", "")
CANDIDATES_TABLE = os.environ.get("BULK_CANDIDATES_TABLE", "candidates")
REQUEST_TIMEOUT = float(os.environ.get("BULK_REQUEST_TIMEOUT", "10"))

# =============================================================================
# GENERATIVE TEXT (Gemini)
# =============================================================================
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY", "")
GEMINI_MODEL = os.environ.get("BULK_GEMINI_MODEL", "gemini-2.0-flash")

FALLBACK_BIO = "Active contributor in the social community graph."
FALLBACK_ANALYSIS = "Identity node synchronized."

# =============================================================================
# VOTING
# =============================================================================
MAX_VOTES_PER_USER = int(os.environ.get("BULK_MAX_VOTES", "10"))

# =============================================================================
# LOCAL STORAGE
# =============================================================================
STORAGE_PATH = os.environ.get(
    "BULK_STORAGE_PATH",
    str(Path.home() / ".bulkgraph" / "storage.json"),
)

# Per-device session files for the web app, one per fingerprint
DEVICE_STORAGE_DIR = os.environ.get(
    "BULK_DEVICE_STORAGE_DIR",
    str(Path(STORAGE_PATH).parent / "devices"),
)

STORAGE_KEYS = {
    "votes_today": "bulk_votes_v8_today",
    "logged_user": "bulk_current_user_handle",
    "voted_ids": "bulk_voted_ids_list",
}

# =============================================================================
# CANDIDATE NORMALIZATION
# =============================================================================
TEXT_FIELD_LIMIT = 150
FINGERPRINT_PREFIX = "node-"
PLATFORM = "Twitter"
AVATAR_URL_TEMPLATE = "https://unavatar.io/twitter/{handle}"
PROFILE_URL_TEMPLATE = "https://x.com/{handle}"
SHARE_URL_TEMPLATE = "https://twitter.com/intent/tweet?text={text}"

# Characters stripped from any user-supplied handle
DISALLOWED_HANDLE_CHARS = "<>\"'/"

# =============================================================================
# LEADERBOARD TIERS
# =============================================================================
@dataclass
class TierConfig:
    """Band sizes for the leaderboard, in rank order."""
    diamond: int = 3
    gold: int = 7
    silver: int = 90

    @property
    def capacity(self) -> int:
        return self.diamond + self.gold + self.silver

    def to_dict(self) -> Dict[str, int]:
        return {
            "diamond": self.diamond,
            "gold": self.gold,
            "silver": self.silver,
        }

DEFAULT_TIERS = TierConfig()

# =============================================================================
# ENGINE
# =============================================================================
@dataclass
class EngineConfig:
    """Settings shared by the recognition engine and its components."""
    max_votes_per_user: int = MAX_VOTES_PER_USER
    tiers: TierConfig = field(default_factory=TierConfig)
    fallback_bio: str = FALLBACK_BIO
    fallback_analysis: str = FALLBACK_ANALYSIS

DEFAULT_ENGINE_CONFIG = EngineConfig()

# =============================================================================
# SAMPLE DIRECTORY (used whenever the candidate store is unreachable or empty)
# =============================================================================
SAMPLE_CANDIDATES: List[Dict] = [
    {"id": "sample-1", "name": "Vitalik Buterin", "handle": "@VitalikButerin",
     "created_at": "2024-01-03T10:00:00Z", "trust_score": 42},
    {"id": "sample-2", "name": "Naval", "handle": "@naval",
     "created_at": "2024-01-05T12:30:00Z", "trust_score": 37},
    {"id": "sample-3", "name": "Balaji", "handle": "@balajis",
     "created_at": "2024-01-09T08:15:00Z", "trust_score": 31},
    {"id": "sample-4", "name": "Chris Dixon", "handle": "@cdixon",
     "created_at": "2024-02-01T16:45:00Z", "trust_score": 24},
    {"id": "sample-5", "name": "Hayden Adams", "handle": "@haydenzadams",
     "created_at": "2024-02-11T09:20:00Z", "trust_score": 19},
    {"id": "sample-6", "name": "Packy McCormick", "handle": "@packyM",
     "created_at": "2024-03-02T14:05:00Z", "trust_score": 12},
    {"id": "sample-7", "name": "Linda Xie", "handle": "@ljxie",
     "created_at": "2024-03-18T11:40:00Z", "trust_score": 9},
    {"id": "sample-8", "name": "Cobie", "handle": "@cobie",
     "created_at": "2024-04-07T19:10:00Z", "trust_score": 5},
]
