from __future__ import annotations

import base64
from typing import Callable, Dict

from cryptography.hazmat.primitives import hashes

from ardis_utils.core.config import DEFAULT_HASH_ALGORITHM, HASH_ALGORITHMS
from ardis_utils.core.errors import ValidationError
from ardis_utils.core.models import HashResult

_HASHES: Dict[str, Callable[[], hashes.HashAlgorithm]] = {
    "MD5": hashes.MD5,
    "SHA1": hashes.SHA1,
    "SHA256": hashes.SHA256,
    "SHA384": hashes.SHA384,
    "SHA512": hashes.SHA512,
    "SHA3-256": hashes.SHA3_256,
    "SHA3-512": hashes.SHA3_512,
}

OUTPUT_FORMATS = ("hex", "base64")


def normalize_algorithm(name: str) -> str:
    """
    Accepts "sha256", "SHA-256", "Sha256"...
    Returns the canonical name from HASH_ALGORITHMS.
    """
    key = name.strip().upper()
    if key not in _HASHES:
        # "SHA-256" -> "SHA256", but keep the dash in SHA3 variants
        key = key.replace("SHA-", "SHA") if not key.startswith("SHA3") else key
    if key not in _HASHES:
        raise ValidationError(
            f"Unsupported algorithm: {name!r}. Valid: {', '.join(HASH_ALGORITHMS)}"
        )
    return key


def digest_bytes(data: bytes, algorithm: str) -> bytes:
    h = hashes.Hash(_HASHES[normalize_algorithm(algorithm)]())
    h.update(data)
    return h.finalize()


def get_string_hash(
    text: str,
    algorithm: str = DEFAULT_HASH_ALGORITHM,
    output: str = "hex",
) -> HashResult:
    alg = normalize_algorithm(algorithm)
    if output not in OUTPUT_FORMATS:
        raise ValidationError(f"Unsupported output format: {output!r}. Valid: {', '.join(OUTPUT_FORMATS)}")

    raw = digest_bytes(text.encode("utf-8"), alg)
    if output == "base64":
        value = base64.b64encode(raw).decode("ascii")
    else:
        value = raw.hex().upper()

    return HashResult(algorithm=alg, hash=value, input=text)
