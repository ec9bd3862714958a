from __future__ import annotations

import base64
import binascii

from ardis_utils.core.errors import ValidationError


def to_base64(text: str) -> str:
    """UTF-8 bytes of `text`, base64 encoded (standard alphabet, padded)."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def from_base64(encoded: str) -> str:
    try:
        raw = base64.b64decode(encoded.strip(), validate=True)
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValidationError(f"Invalid base64 input: {e}") from e
