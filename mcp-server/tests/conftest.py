"""
Pytest fixtures for Gemini CLI MCP server tests.
"""

import os
import stat
import sys
from pathlib import Path
from textwrap import dedent
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Add server directory to path for imports
SERVER_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(SERVER_DIR))


@pytest.fixture
def fake_gemini(tmp_path):
    """Factory that writes an executable shell script standing in for gemini.

    Returns the script path, suitable as GeminiCLI(binary=...).
    """
    def _make(body: str, name: str = "gemini") -> str:
        script = tmp_path / name
        script.write_text("#!/bin/sh\n" + dedent(body).lstrip())
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _make


@pytest.fixture
def clean_env():
    """Process environment without GOOGLE_CLOUD_PROJECT."""
    env = {k: v for k, v in os.environ.items() if k != "GOOGLE_CLOUD_PROJECT"}
    with patch.dict(os.environ, env, clear=True):
        yield env


@pytest.fixture
def mock_process():
    """Mock asyncio subprocess; set .returncode and .communicate.return_value per test."""
    proc = MagicMock()
    proc.pid = 4242
    proc.returncode = 0
    proc.communicate = AsyncMock(return_value=(b"", b""))
    proc.wait = AsyncMock(return_value=0)
    return proc


@pytest.fixture
def mock_exec(mock_process):
    """Patch asyncio.create_subprocess_exec to return mock_process."""
    with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=mock_process)) as mock:
        yield mock
