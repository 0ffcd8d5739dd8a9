#!/usr/bin/env python3
"""
Thin async wrapper around the `gemini` CLI for the MCP server.

Every call spawns exactly one `gemini` process, closes its stdin so the CLI
never waits on an interactive read, and maps the exit status to either the
trimmed stdout or an error:

- SpawnError: the binary could not be started (not found, permission denied)
- ExternalToolError: gemini ran and exited non-zero (or hit the optional timeout)

Nothing is retried and no state is shared between calls.
"""

import asyncio
import logging
import os
import signal
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_BINARY = "gemini"
DEFAULT_MODEL = "gemini-2.5-pro"
# Passed through to the child when present in the adapter's environment
FORWARDED_ENV_VARS = ("GOOGLE_CLOUD_PROJECT",)


class GeminiCLIError(Exception):
    """Base class for failed gemini invocations."""


class SpawnError(GeminiCLIError):
    """The gemini process could not be started at all."""


class ExternalToolError(GeminiCLIError):
    """The gemini process ran but did not succeed."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class EnvironmentProvider(Protocol):
    """Anything that answers `get(name)` with a string or None (os.environ, a dict)."""

    def get(self, name: str) -> Optional[str]:
        ...


@dataclass(frozen=True)
class GeminiResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def build_prompt_args(prompt: str, model: Optional[str] = None) -> list[str]:
    """Build the argument list for a one-shot prompt.

    Only --prompt and --model are forwarded; the gemini CLI has no flags for
    max tokens or temperature.
    """
    args = ["--prompt", prompt]
    if model is not None:
        args.extend(["--model", model])
    return args


def _decode(data: Optional[bytes]) -> str:
    return (data or b"").decode("utf-8", errors="replace").strip()


async def _kill(proc: asyncio.subprocess.Process) -> None:
    # The child leads its own process group (start_new_session), so this also
    # reaches anything gemini spawned, even after gemini itself has exited.
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    await proc.wait()


class GeminiCLI:
    """Runs the gemini binary, one process per call."""

    def __init__(
        self,
        binary: str = DEFAULT_BINARY,
        env: Optional[EnvironmentProvider] = None,
        timeout: Optional[float] = None,
    ):
        self.binary = binary
        self.env = os.environ if env is None else env
        self.timeout = timeout or None

    def child_env(self) -> Optional[dict[str, str]]:
        """Environment for the child, or None to inherit ours unchanged."""
        overrides = {}
        for name in FORWARDED_ENV_VARS:
            value = self.env.get(name)
            if value is not None:
                overrides[name] = value
        if not overrides:
            return None
        return {**os.environ, **overrides}

    async def run(self, args: list[str]) -> GeminiResult:
        """Spawn gemini with `args` and wait for it to exit.

        Raises SpawnError if the process cannot be started and
        ExternalToolError if the configured timeout expires. If the calling
        task is cancelled the child is killed before the cancellation
        propagates.
        """
        logger.debug("Running %s command with args: %s", self.binary, args)

        try:
            proc = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.child_env(),
                start_new_session=True,
            )
        except OSError as e:
            logger.warning("Failed to spawn %s: %s", self.binary, e)
            raise SpawnError(f"Failed to spawn {self.binary} command: {e}") from e

        # EOF on stdin so gemini never waits on an interactive read
        proc.stdin.close()

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), self.timeout)
        except asyncio.TimeoutError:
            await _kill(proc)
            logger.warning("%s timed out after %ss", self.binary, self.timeout)
            raise ExternalToolError(f"Gemini command timed out after {self.timeout:g}s") from None
        except asyncio.CancelledError:
            logger.debug("Call cancelled; killing %s (pid %s)", self.binary, proc.pid)
            await _kill(proc)
            raise

        result = GeminiResult(returncode=proc.returncode, stdout=_decode(stdout), stderr=_decode(stderr))
        logger.debug("Command stdout: %s", result.stdout)
        logger.debug("Command stderr: %s", result.stderr)
        return result

    async def run_checked(self, args: list[str]) -> str:
        """Run gemini and return trimmed stdout, raising on a non-zero exit."""
        result = await self.run(args)
        if not result.ok:
            logger.warning("gemini failed (exit %d): %s", result.returncode, result.stderr[:500])
            raise ExternalToolError(
                f"Gemini command failed: {result.stderr}",
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result.stdout

    async def prompt(
        self,
        prompt: str,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Send one prompt. max_tokens and temperature are accepted but not forwarded."""
        if max_tokens is not None or temperature is not None:
            logger.debug(
                "Dropping unsupported sampling options (max_tokens=%s, temperature=%s)",
                max_tokens,
                temperature,
            )
        logger.info("Calling gemini with prompt")
        return await self.run_checked(build_prompt_args(prompt, model))

    async def list_models(self) -> str:
        logger.info("Listing gemini models")
        return await self.run_checked(["models"])
