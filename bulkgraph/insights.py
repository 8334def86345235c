"""
Insight Generator
=================

Flavor text from the Gemini generative-text API:
- Parsing a profile link into a display name and handle
- A one-sentence bio for a voting card
- A short "social fingerprint" analysis for the passport

All of it is best-effort. Every call has a static fallback, and without an
API key no request is made at all.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

# TODO: port to google-genai (genai.Client); this SDK no longer receives updates
import google.generativeai as genai

from .config import (
    FALLBACK_ANALYSIS,
    FALLBACK_BIO,
    GEMINI_API_KEY,
    GEMINI_MODEL,
)

logger = logging.getLogger(__name__)


PARSE_PROMPT = (
    "Extract a username and full name from this Twitter link: {url}. "
    "Return a JSON object with 'name' and 'handle'."
)

BIO_PROMPT = (
    "Write a 1-sentence friendly and social bio for a community member named "
    "{name} who is part of a social map. Focus on their presence and "
    "contributions to the group. Keep it warm and social."
)

ANALYSIS_PROMPT = (
    "Analyze a user's social profile in a Web3 recognition graph. "
    "Handle: {handle}, Votes cast: {votes}. Write a 2-sentence sophisticated "
    "analysis of their \"Social Fingerprint\". Use terms like 'decentralized "
    "influence', 'community trust', and 'network node'. Keep it encouraging "
    "and high-tech."
)


@dataclass
class ProfileInfo:
    """Display name and handle parsed from a profile link."""
    name: str
    handle: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "handle": self.handle}


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Pull the outermost JSON object out of a model response."""
    start = text.find('{')
    end = text.rfind('}')
    if start == -1 or end == -1 or end < start:
        return None
    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


class InsightGenerator:
    """
    Wrapper around a Gemini model with per-call fallbacks.

    Attributes:
        model: Generative model, or None when no API key is configured
    """

    def __init__(
        self,
        api_key: str = GEMINI_API_KEY,
        model_name: str = GEMINI_MODEL,
        fallback_bio: str = FALLBACK_BIO,
        fallback_analysis: str = FALLBACK_ANALYSIS,
        model: Any = None
    ):
        """
        Initialize the generator.

        Args:
            api_key: Gemini API key
            model_name: Model to use
            fallback_bio: Text used when bio generation fails
            fallback_analysis: Text used when analysis generation fails
            model: Preconfigured model object (skips configuration)
        """
        self.fallback_bio = fallback_bio
        self.fallback_analysis = fallback_analysis

        if model is not None:
            self.model = model
        elif api_key:
            genai.configure(api_key=api_key)
            self.model = genai.GenerativeModel(model_name)
        else:
            logger.info("No Gemini API key; insights will use fallback text")
            self.model = None

    @property
    def enabled(self) -> bool:
        return self.model is not None

    def _generate(self, prompt: str, **kwargs) -> Optional[str]:
        if self.model is None:
            return None
        try:
            response = self.model.generate_content(prompt, **kwargs)
            text = (response.text or "").strip()
        except Exception as e:
            logger.warning("Generative text request failed: %s", e)
            return None
        return text or None

    def parse_profile_link(self, url: str) -> Optional[ProfileInfo]:
        """
        Extract a display name and handle from a profile URL.

        Returns:
            ProfileInfo, or None if the model is unavailable or its reply
            cannot be parsed
        """
        text = self._generate(
            PARSE_PROMPT.format(url=url),
            generation_config={"response_mime_type": "application/json"},
        )
        if text is None:
            return None

        data = extract_json_object(text)
        if not data or not data.get("name") or not data.get("handle"):
            logger.warning("Could not parse profile response for %s", url)
            return None

        return ProfileInfo(name=str(data["name"]), handle=str(data["handle"]))

    def generate_bio(self, name: str) -> str:
        """One-sentence bio for a voting card."""
        return self._generate(BIO_PROMPT.format(name=name)) or self.fallback_bio

    def generate_fingerprint_analysis(self, handle: str, vote_count: int) -> str:
        """Two-sentence passport analysis."""
        text = self._generate(ANALYSIS_PROMPT.format(handle=handle, votes=vote_count))
        return text or self.fallback_analysis
