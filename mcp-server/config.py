"""
Runtime settings for the Gemini CLI MCP server.

Read once at startup, after load_dotenv() has pulled in any local .env file.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from gemini_cli import DEFAULT_BINARY

DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    gemini_bin: str = DEFAULT_BINARY
    # None means calls may run as long as gemini does
    timeout_seconds: Optional[float] = None
    log_level: str = DEFAULT_LOG_LEVEL


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"GEMINI_TIMEOUT_SECONDS must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"GEMINI_TIMEOUT_SECONDS must not be negative, got {raw!r}")
    return value or None


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from GEMINI_BIN, GEMINI_TIMEOUT_SECONDS and LOG_LEVEL."""
    if env is None:
        env = os.environ
    return Settings(
        gemini_bin=env.get("GEMINI_BIN", "").strip() or DEFAULT_BINARY,
        timeout_seconds=_parse_timeout(env.get("GEMINI_TIMEOUT_SECONDS")),
        log_level=env.get("LOG_LEVEL", "").strip().upper() or DEFAULT_LOG_LEVEL,
    )
