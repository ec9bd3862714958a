from __future__ import annotations

import logging
import math
import os
import stat
import subprocess
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Tuple

from ardis_utils.core.errors import ExternalDependencyError, ResourceNotFoundError, ValidationError
from ardis_utils.core.models import FileProperty, SizeDurationRatio

log = logging.getLogger(__name__)

# (index, name, value)
RawProperty = Tuple[int, str, str]

DURATION_PROPERTY = "Length"
# Columns probed through Shell.Application.GetDetailsOf.
MAX_SHELL_INDEX = 400

_SHELL_SCRIPT = r"""
$ErrorActionPreference = 'Stop'
[Console]::OutputEncoding = [System.Text.Encoding]::UTF8
$shell = New-Object -ComObject Shell.Application
$folder = $shell.Namespace('{folder}')
$item = $folder.ParseName('{name}')
if ($null -eq $item) {{ exit 2 }}
for ($i = 0; $i -lt {max_index}; $i++) {{
    $n = $folder.GetDetailsOf($null, $i)
    if ($n) {{ "{{0}}`t{{1}}`t{{2}}" -f $i, $n, $folder.GetDetailsOf($item, $i) }}
}}
"""

# Explorer wraps some values (dates) in bidi marks.
_INVISIBLE = dict.fromkeys(map(ord, "\u200e\u200f\u202a\u202c"), None)


class MetadataProvider(Protocol):
    def properties(self, path: Path) -> List[RawProperty]: ...


def _ps_quote(value: str) -> str:
    return value.replace("'", "''")


def _run_powershell(script: str, timeout: int = 30) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            ["powershell", "-NoProfile", "-NonInteractive", "-ExecutionPolicy", "Bypass", "-Command", script],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise ExternalDependencyError("PowerShell is not available on this system.") from e
    except subprocess.TimeoutExpired as e:
        raise ExternalDependencyError(f"PowerShell timed out after {timeout}s.") from e


class ShellMetadataProvider:
    """
    Windows only: asks Explorer (Shell.Application COM object) for every
    detail column of the file, the same columns shown in the Details view.
    """

    def __init__(self, max_index: int = MAX_SHELL_INDEX, timeout: int = 30) -> None:
        self.max_index = max_index
        self.timeout = timeout

    def properties(self, path: Path) -> List[RawProperty]:
        path = path.resolve()
        script = _SHELL_SCRIPT.format(
            folder=_ps_quote(str(path.parent)),
            name=_ps_quote(path.name),
            max_index=self.max_index,
        )
        proc = _run_powershell(script, timeout=self.timeout)
        if proc.returncode == 2:
            raise ResourceNotFoundError(f"Shell could not find: {path}")
        if proc.returncode != 0:
            err = (proc.stderr or proc.stdout or "").strip()
            raise ExternalDependencyError(f"Shell property lookup failed for {path}: {err or proc.returncode}")

        out: List[RawProperty] = []
        for line in (proc.stdout or "").splitlines():
            parts = line.split("\t", 2)
            if len(parts) != 3:
                continue
            try:
                idx = int(parts[0])
            except ValueError:
                continue
            out.append((idx, parts[1].strip(), parts[2].translate(_INVISIBLE).strip()))
        return out


def _human_size(size: int) -> str:
    if size < 1024:
        return f"{size} bytes"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.2f} {unit}"
        value /= 1024
    return f"{value:.2f} GB"


def _fmt_ts(ts: float) -> str:
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M")


class StatMetadataProvider:
    """
    Portable fallback built on os.stat. Uses the Explorer column indices for
    the few properties it can answer; no media duration.
    """

    def properties(self, path: Path) -> List[RawProperty]:
        st = path.stat()
        suffix = path.suffix.lstrip(".").upper()
        created = getattr(st, "st_birthtime", st.st_ctime)
        return [
            (0, "Name", path.name),
            (1, "Size", _human_size(st.st_size)),
            (2, "Item type", f"{suffix} File" if suffix else "File"),
            (3, "Date modified", _fmt_ts(st.st_mtime)),
            (4, "Date created", _fmt_ts(created)),
            (5, "Date accessed", _fmt_ts(st.st_atime)),
            (6, "Attributes", stat.filemode(st.st_mode)),
        ]


def default_provider() -> MetadataProvider:
    if sys.platform == "win32":
        return ShellMetadataProvider()
    log.debug("Platform %s has no shell metadata; using os.stat fallback.", sys.platform)
    return StatMetadataProvider()


def _existing_file(path: str | Path) -> Path:
    p = Path(path)
    if not p.is_file():
        raise ResourceNotFoundError(f"File not found: {path}")
    return p


def get_file_properties(
    path: str | Path,
    provider: Optional[MetadataProvider] = None,
    names: Optional[Iterable[str]] = None,
    indices: Optional[Iterable[int]] = None,
    include_empty: bool = False,
) -> List[FileProperty]:
    """
    Extended properties of one file, filtered by property name
    (case-insensitive) and/or index. Empty values are skipped unless
    include_empty is set.
    """
    p = _existing_file(path)
    provider = provider or default_provider()

    wanted_names = {n.strip().lower() for n in names} if names else None
    wanted_idx = set(indices) if indices else None
    if wanted_idx and any(i < 0 for i in wanted_idx):
        raise ValidationError("Property indices must be >= 0.")

    result: List[FileProperty] = []
    for idx, name, value in provider.properties(p):
        if wanted_names is not None and name.lower() not in wanted_names:
            continue
        if wanted_idx is not None and idx not in wanted_idx:
            continue
        if not value and not include_empty:
            continue
        result.append(FileProperty(path=str(p), index=idx, name=name, value=value))
    return result


def parse_duration(value: str) -> float:
    """
    "01:02:03" -> 3723.0, "02:03" -> 123.0, "42" / "42.5" -> seconds.
    Raises ValueError on anything else.
    """
    value = value.translate(_INVISIBLE).strip()
    if not value:
        raise ValueError("empty duration")
    parts = value.split(":")
    if len(parts) > 3:
        raise ValueError(f"bad duration: {value!r}")
    seconds = 0.0
    for part in parts:
        seconds = seconds * 60 + float(part)
    if not math.isfinite(seconds):
        raise ValueError(f"bad duration: {value!r}")
    return seconds


def get_size_duration_ratio(
    path: str | Path,
    provider: Optional[MetadataProvider] = None,
) -> SizeDurationRatio:
    """Size in KB divided by duration in seconds (KB/s)."""
    p = _existing_file(path)
    provider = provider or default_provider()

    duration_raw = ""
    for _, name, value in provider.properties(p):
        if name.lower() == DURATION_PROPERTY.lower():
            duration_raw = value
            break

    try:
        duration = parse_duration(duration_raw)
    except ValueError:
        raise ResourceNotFoundError(f"No duration metadata for: {p}") from None
    if duration <= 0:
        raise ResourceNotFoundError(f"Zero duration for: {p}")

    size_kb = os.path.getsize(p) / 1024
    return SizeDurationRatio(
        path=str(p),
        name=p.name,
        size_kb=round(size_kb, 2),
        duration_s=duration,
        ratio=round(size_kb / duration, 2),
    )
