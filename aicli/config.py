"""Runtime configuration and build information."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

COMMIT_HASH = "unknown"
BUILD_TIME = "1970-01-01T00:00:00Z"
VERSION = "0.0.0"
BINARY_NAME = "ai-cli"

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


@dataclass
class Config:
    """User preferences for inference selection."""

    google_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    inference: Optional[str] = None
    model: Optional[str] = None


def load_config() -> Config:
    """Build a configuration from the environment."""
    return Config(
        google_api_key=os.environ.get("GEMINI_API_KEY", ""),
        gemini_model=DEFAULT_GEMINI_MODEL,
    )