from __future__ import annotations

import logging
import os
import random
import time
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from ardis_utils.core.config import CACHE_SUFFIX, FILE_CATEGORIES
from ardis_utils.core.errors import ExternalDependencyError, ResourceNotFoundError, ValidationError

log = logging.getLogger(__name__)


def validate_category(category: str, categories: Mapping[str, Tuple[str, ...]] = FILE_CATEGORIES) -> str:
    c = category.strip().lower()
    if c not in categories:
        raise ValidationError(f"Invalid category: {category!r}. Valid: {', '.join(categories)}")
    return c


def cache_path(directory: str | Path, category: str) -> Path:
    return Path(directory) / f"{category}{CACHE_SUFFIX}"


def _slashes(path: str) -> str:
    return path.replace("\\", "/")


def scan_directory(
    directory: str | Path,
    category: str,
    categories: Mapping[str, Tuple[str, ...]] = FILE_CATEGORIES,
) -> List[str]:
    """
    Walks `directory` recursively and returns the paths (relative to it)
    whose extension belongs to `category`. Cache files are skipped.
    """
    root = Path(directory)
    extensions = set(categories[category])

    start_time = time.monotonic()
    found: List[str] = []
    for dirpath, _, files in os.walk(root):
        for filename in files:
            if filename.endswith(CACHE_SUFFIX):
                continue
            if os.path.splitext(filename)[1].lower() in extensions:
                found.append(os.path.relpath(os.path.join(dirpath, filename), root))

    found.sort()
    log.info("Scanned %s for %s files: %d found in %.2fs", root, category, len(found), time.monotonic() - start_time)
    return found


def build_cache(
    directory: str | Path,
    category: str,
    categories: Mapping[str, Tuple[str, ...]] = FILE_CATEGORIES,
) -> List[str]:
    """Rescans and (over)writes <category>-cache.txt. Last writer wins."""
    category = validate_category(category, categories)
    files = scan_directory(directory, category, categories)
    path = cache_path(directory, category)
    try:
        path.write_text("".join(f"{f}\n" for f in files), encoding="utf-8")
    except OSError as e:
        log.warning("Could not write cache %s: %s", path, e)
    else:
        log.debug("Wrote cache %s (%d entries)", path, len(files))
    return files


def load_file_list(
    directory: str | Path,
    category: str,
    refresh: bool = False,
    categories: Mapping[str, Tuple[str, ...]] = FILE_CATEGORIES,
) -> List[str]:
    """
    Reads the category cache, building it on first use.
    The cache is only invalidated by deleting it (or refresh=True).
    """
    category = validate_category(category, categories)
    path = cache_path(directory, category)

    if refresh and path.exists():
        try:
            path.unlink()
        except OSError as e:
            raise ExternalDependencyError(f"Could not delete cache {path}: {e}") from e

    if not path.exists():
        return build_cache(directory, category, categories)

    log.debug("Using cache %s", path)
    lines = path.read_text(encoding="utf-8").splitlines()
    return [line for line in lines if line.strip()]


def pick_random_files(
    directory: str | Path,
    category: str = "all",
    count: int = 1,
    subfolder: Optional[str] = None,
    refresh: bool = False,
    rng: Optional[random.Random] = None,
    categories: Mapping[str, Tuple[str, ...]] = FILE_CATEGORIES,
) -> List[Path]:
    """
    `count` distinct files drawn uniformly from the category under
    `directory`, restricted to paths containing `subfolder`.
    Never returns fewer than `count`: raises instead.
    """
    category = validate_category(category, categories)
    if count < 1:
        raise ValidationError(f"Invalid count: {count}. Must be >= 1.")
    root = Path(directory)
    if not root.is_dir():
        raise ResourceNotFoundError(f"Directory not found: {directory}")

    files = load_file_list(root, category, refresh=refresh, categories=categories)
    if subfolder:
        needle = _slashes(subfolder)
        files = [f for f in files if needle in _slashes(f)]

    if not files:
        where = f" matching {subfolder!r}" if subfolder else ""
        raise ResourceNotFoundError(f"No matching {category} files{where} in {root}")
    if count > len(files):
        raise ResourceNotFoundError(
            f"Requested {count} {category} files but only {len(files)} match in {root}"
        )

    rng = rng or random.Random()
    return [root / f for f in rng.sample(files, count)]
