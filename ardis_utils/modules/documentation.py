from __future__ import annotations

import random
from typing import Optional, Sequence

from ardis_utils.core.config import (
    IPV4_DOCUMENTATION_PREFIXES,
    IPV6_DOCUMENTATION_PREFIX,
    NANP_AREA_CODES,
    NANP_EXCHANGE,
    NANP_LINE_MAX,
    NANP_LINE_MIN,
)
from ardis_utils.core.errors import ValidationError

IP_VERSIONS = ("4", "6")
PHONE_FORMATS = ("national", "dashed", "dotted", "e164")


def documentation_ip(
    version: str = "4",
    rng: Optional[random.Random] = None,
    ipv4_prefixes: Sequence[str] = IPV4_DOCUMENTATION_PREFIXES,
    ipv6_prefix: str = IPV6_DOCUMENTATION_PREFIX,
) -> str:
    """
    Random address from the ranges reserved for documentation:
      "4" -> 192.0.2.x / 198.51.100.x / 203.0.113.x  (RFC 5737)
      "6" -> 2001:0DB8:xxxx:xxxx:xxxx:xxxx:xxxx:xxxx  (RFC 3849)
    """
    rng = rng or random.Random()
    version = str(version).strip().lower().lstrip("ipv")

    if version == "4":
        return f"{rng.choice(ipv4_prefixes)}.{rng.randint(1, 254)}"
    if version == "6":
        groups = [f"{rng.randint(0, 0xFFFF):04X}" for _ in range(6)]
        return ":".join([ipv6_prefix, *groups])

    raise ValidationError(f"Invalid IP version: {version!r}. Valid: {', '.join(IP_VERSIONS)}")


def documentation_phone(
    fmt: str = "national",
    area_code: Optional[str] = None,
    rng: Optional[random.Random] = None,
    area_codes: Sequence[str] = NANP_AREA_CODES,
) -> str:
    """
    Fictional NANP number: approved area code, exchange 555, line 0100-0199.
    """
    rng = rng or random.Random()
    fmt = fmt.strip().lower()
    if fmt not in PHONE_FORMATS:
        raise ValidationError(f"Invalid format: {fmt!r}. Valid: {', '.join(PHONE_FORMATS)}")

    if area_code is None:
        area = rng.choice(area_codes)
    else:
        area = area_code.strip()
        if area not in area_codes:
            raise ValidationError(f"Area code not in the approved list: {area_code!r}")

    line = f"{rng.randint(NANP_LINE_MIN, NANP_LINE_MAX):04d}"

    if fmt == "dashed":
        return f"{area}-{NANP_EXCHANGE}-{line}"
    if fmt == "dotted":
        return f"{area}.{NANP_EXCHANGE}.{line}"
    if fmt == "e164":
        return f"+1{area}{NANP_EXCHANGE}{line}"
    return f"({area}) {NANP_EXCHANGE}-{line}"
