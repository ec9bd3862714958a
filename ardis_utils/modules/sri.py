from __future__ import annotations

import base64
import html
import logging
from pathlib import Path
from urllib.parse import urlparse

import requests

from ardis_utils.core.config import DEFAULT_HTTP_TIMEOUT_S, DEFAULT_SRI_ALGORITHM, SRI_ALGORITHMS
from ardis_utils.core.errors import ExternalDependencyError, ResourceNotFoundError, ValidationError
from ardis_utils.core.models import SriRecord
from ardis_utils.modules.string_hash import digest_bytes

log = logging.getLogger(__name__)


def is_url(source: str) -> bool:
    return urlparse(source).scheme.lower() in ("http", "https")


def validate_sri_algorithm(algorithm: str) -> str:
    alg = algorithm.strip().lower()
    if alg not in SRI_ALGORITHMS:
        raise ValidationError(
            f"Unsupported SRI algorithm: {algorithm!r}. Valid: {', '.join(SRI_ALGORITHMS)}"
        )
    return alg


def html_tag(source: str, integrity: str) -> str:
    """<link> for stylesheets, <script> for everything else."""
    path = urlparse(source).path if is_url(source) else source
    src = html.escape(source, quote=True)
    if path.lower().endswith(".css"):
        return f'<link rel="stylesheet" href="{src}" integrity="{integrity}" crossorigin="anonymous">'
    return f'<script src="{src}" integrity="{integrity}" crossorigin="anonymous"></script>'


def compute_sri(data: bytes, algorithm: str = DEFAULT_SRI_ALGORITHM, source: str = "") -> SriRecord:
    alg = validate_sri_algorithm(algorithm)
    raw = digest_bytes(data, alg)
    integrity = f"{alg}-{base64.b64encode(raw).decode('ascii')}"
    return SriRecord(
        algorithm=alg,
        hash=raw.hex().upper(),
        source=source,
        integrity=integrity,
        html=html_tag(source, integrity),
    )


def fetch_source(source: str, timeout: float = DEFAULT_HTTP_TIMEOUT_S) -> bytes:
    """
    Reads a local file or downloads an http(s) URL.
    No retries: any failure is final for this source.
    """
    if is_url(source):
        log.debug("GET %s (timeout=%ss)", source, timeout)
        try:
            resp = requests.get(source, timeout=timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise ExternalDependencyError(f"Could not download {source}: {e}") from e
        return resp.content

    p = Path(source)
    if not p.is_file():
        raise ResourceNotFoundError(f"File not found: {source}")
    try:
        return p.read_bytes()
    except OSError as e:
        raise ExternalDependencyError(f"Could not read {source}: {e}") from e


def get_sri_hash(
    source: str,
    algorithm: str = DEFAULT_SRI_ALGORITHM,
    timeout: float = DEFAULT_HTTP_TIMEOUT_S,
) -> SriRecord:
    alg = validate_sri_algorithm(algorithm)
    if not source.strip():
        raise ValidationError("Empty source.")
    data = fetch_source(source.strip(), timeout=timeout)
    return compute_sri(data, alg, source.strip())
