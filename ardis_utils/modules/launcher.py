from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
import webbrowser
from pathlib import Path
from typing import List, Optional

from ardis_utils.core.config import (
    BROWSER_EXECUTABLES,
    BROWSER_PRIVATE_FLAGS,
    BROWSER_WINDOWS_PATHS,
    BROWSERS,
)
from ardis_utils.core.errors import ExternalDependencyError, ResourceNotFoundError, ValidationError

log = logging.getLogger(__name__)


def open_path(path: str | Path) -> None:
    """Opens a file with the platform's default application."""
    target = str(path)
    try:
        if sys.platform == "win32":
            os.startfile(target)  # type: ignore[attr-defined]
        elif sys.platform == "darwin":
            subprocess.Popen(["open", target])
        else:
            subprocess.Popen(["xdg-open", target], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError as e:
        raise ExternalDependencyError(f"Could not open {target}: {e}") from e
    log.info("Opened %s", target)


def _windows_candidates(browser: str) -> List[Path]:
    roots = [os.environ.get(v) for v in ("ProgramFiles", "ProgramFiles(x86)", "LocalAppData")]
    return [Path(r) / rel for r in roots if r for rel in BROWSER_WINDOWS_PATHS.get(browser, ())]


def find_browser(browser: str) -> str:
    """Path of the browser executable: PATH first, then the usual Windows locations."""
    for name in BROWSER_EXECUTABLES.get(browser, ()):
        found = shutil.which(name)
        if found:
            return found

    if sys.platform == "win32":
        for candidate in _windows_candidates(browser):
            if candidate.is_file():
                return str(candidate)

    raise ResourceNotFoundError(f"Browser not found: {browser}")


def build_browser_command(executable: str, browser: str, url: str, private: bool = False) -> List[str]:
    cmd = [executable]
    if private:
        cmd.append(BROWSER_PRIVATE_FLAGS[browser])
    cmd.append(url)
    return cmd


def launch_browser(url: str, browser: str = "default", private: bool = False) -> Optional[List[str]]:
    """
    Opens `url` in the chosen browser. Returns the command line used, or
    None when the system default browser handled it.
    """
    browser = browser.strip().lower()
    if browser not in BROWSERS:
        raise ValidationError(f"Unknown browser: {browser!r}. Valid: {', '.join(BROWSERS)}")
    url = url.strip()
    if not url:
        raise ValidationError("Empty URL.")

    if browser == "default":
        if private:
            raise ValidationError("Private mode needs an explicit browser (chrome, firefox, edge, brave).")
        if not webbrowser.open(url):
            raise ResourceNotFoundError("No default browser available.")
        return None

    cmd = build_browser_command(find_browser(browser), browser, url, private)
    log.debug("Launching %s", cmd)
    try:
        subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError as e:
        raise ExternalDependencyError(f"Could not start {browser} for {url}: {e}") from e
    return cmd
