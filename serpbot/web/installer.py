"""Install Playwright browser binaries on first use."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Sequence

from loguru import logger

_INSTALL_LOCK = asyncio.Lock()
_INSTALL_TIMEOUT_S = 10 * 60
_installed: set[str] = set()


class BrowserInstallError(RuntimeError):
    """Raised when `playwright install` fails."""


def is_missing_browser_error(exc: Exception) -> bool:
    """Detect Playwright launch failures caused by missing browser binaries."""
    text = str(exc).lower()
    patterns = (
        "executable doesn't exist",
        "please run the following command",
        "browser has not been found",
    )
    return any(p in text for p in patterns)


async def ensure_browsers_installed(
    browsers: Sequence[str],
    *,
    timeout_s: int = _INSTALL_TIMEOUT_S,
) -> None:
    """Run `python -m playwright install` once per browser per process."""
    async with _INSTALL_LOCK:
        missing = [b for b in dict.fromkeys(browsers) if b and b not in _installed]
        if not missing:
            return

        logger.warning("Playwright browsers not found, installing: {}", ", ".join(missing))
        process = await asyncio.create_subprocess_exec(
            sys.executable,
            "-m",
            "playwright",
            "install",
            *missing,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout_s)
        except asyncio.TimeoutError as e:
            process.kill()
            raise BrowserInstallError(f"playwright install timed out after {timeout_s}s") from e

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()[-2000:]
            raise BrowserInstallError(
                detail or f"playwright install exited with code {process.returncode}"
            )

        _installed.update(missing)
        logger.info("Installed Playwright browsers: {}", ", ".join(missing))
