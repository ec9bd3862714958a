# core/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

# --- Random file picker ---
# Extensions per category (lower case, with the leading dot).
VIDEO_EXTENSIONS = (
    ".mp4", ".mkv", ".avi", ".mov", ".wmv", ".flv", ".webm", ".m4v", ".mpg", ".mpeg",
)
AUDIO_EXTENSIONS = (
    ".mp3", ".wav", ".flac", ".aac", ".ogg", ".wma", ".m4a", ".opus",
)
IMAGE_EXTENSIONS = (
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tif", ".tiff", ".webp", ".heic",
)
DOCUMENT_EXTENSIONS = (
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    ".odt", ".ods", ".odp", ".rtf", ".txt", ".md", ".csv",
)

FILE_CATEGORIES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "all": VIDEO_EXTENSIONS + AUDIO_EXTENSIONS + IMAGE_EXTENSIONS + DOCUMENT_EXTENSIONS,
    "video": VIDEO_EXTENSIONS,
    "audio": AUDIO_EXTENSIONS,
    "image": IMAGE_EXTENSIONS,
    "document": DOCUMENT_EXTENSIONS,
})

CACHE_SUFFIX = "-cache.txt"

# --- Documentation values ---
# RFC 5737 (TEST-NET-1/2/3)
IPV4_DOCUMENTATION_PREFIXES = ("192.0.2", "198.51.100", "203.0.113")
# RFC 3849
IPV6_DOCUMENTATION_PREFIX = "2001:0DB8"

# Geographic NANP area codes (US + Canada) used for fictional numbers.
NANP_AREA_CODES = (
    "201", "202", "203", "205", "206", "207", "208", "210", "212", "213",
    "214", "215", "216", "217", "218", "219", "224", "225", "228", "229",
    "231", "234", "239", "248", "251", "252", "253", "254", "256", "260",
    "262", "267", "269", "270", "276", "281", "301", "302", "303", "304",
    "305", "307", "308", "309", "310", "312", "313", "314", "315", "316",
    "317", "318", "319", "320", "321", "323", "330", "334", "336", "337",
    "352", "360", "361", "385", "401", "402", "404", "405", "406", "407",
    "408", "409", "410", "412", "413", "414", "415", "416", "417", "419",
    "423", "425", "432", "434", "435", "440", "443", "469", "478", "479",
    "480", "501", "502", "503", "504", "505", "507", "508", "509", "510",
    "512", "513", "514", "515", "516", "517", "518", "520", "530", "540",
    "541", "559", "561", "562", "563", "567", "570", "571", "573", "574",
    "580", "585", "586", "601", "602", "603", "604", "605", "606", "607",
    "608", "609", "610", "612", "613", "614", "615", "616", "617", "618",
    "619", "620", "623", "626", "630", "631", "636", "641", "646", "647",
    "650", "651", "660", "661", "662", "678", "682", "701", "702", "703",
    "704", "706", "707", "708", "712", "713", "714", "715", "716", "717",
    "718", "719", "720", "724", "727", "731", "732", "734", "740", "754",
    "757", "760", "763", "765", "770", "772", "773", "774", "775", "780",
    "781", "785", "786", "801", "802", "803", "804", "805", "806", "808",
    "810", "812", "813", "814", "815", "816", "817", "818", "828", "830",
    "831", "832", "843", "845", "847", "848", "850", "856", "857", "858",
    "859", "860", "862", "863", "864", "865", "870", "901", "903", "904",
    "905", "906", "907", "908", "909", "910", "912", "913", "914", "915",
    "916", "917", "918", "919", "920", "925", "928", "931", "936", "937",
    "940", "941", "947", "949", "951", "952", "954", "956", "970", "971",
    "972", "973", "978", "979", "980", "985", "989",
)
NANP_EXCHANGE = "555"
# 555-0100 .. 555-0199 are the lines reserved for fictional use.
NANP_LINE_MIN = 100
NANP_LINE_MAX = 199

# --- Hashing ---
HASH_ALGORITHMS = ("MD5", "SHA1", "SHA256", "SHA384", "SHA512", "SHA3-256", "SHA3-512")
DEFAULT_HASH_ALGORITHM = "SHA256"
SRI_ALGORITHMS = ("sha256", "sha384", "sha512")
DEFAULT_SRI_ALGORITHM = "sha384"

# --- Network ---
DEFAULT_PORT_TIMEOUT_MS = 200
DEFAULT_HTTP_TIMEOUT_S = 10.0

# --- Browsers ---
# Executable names searched on PATH, in order.
BROWSER_EXECUTABLES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "chrome": ("google-chrome", "google-chrome-stable", "chromium", "chromium-browser", "chrome"),
    "firefox": ("firefox",),
    "edge": ("microsoft-edge", "microsoft-edge-stable", "msedge"),
    "brave": ("brave-browser", "brave"),
})
# Well-known Windows install locations, relative to %ProgramFiles%,
# %ProgramFiles(x86)% and %LocalAppData%.
BROWSER_WINDOWS_PATHS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "chrome": ("Google\\Chrome\\Application\\chrome.exe",),
    "firefox": ("Mozilla Firefox\\firefox.exe",),
    "edge": ("Microsoft\\Edge\\Application\\msedge.exe",),
    "brave": ("BraveSoftware\\Brave-Browser\\Application\\brave.exe",),
})
BROWSER_PRIVATE_FLAGS: Mapping[str, str] = MappingProxyType({
    "chrome": "--incognito",
    "firefox": "-private-window",
    "edge": "-inprivate",
    "brave": "--incognito",
})
BROWSERS = ("default",) + tuple(BROWSER_EXECUTABLES)

# --- Environment ---
LOG_LEVEL_ENV = "ARDIS_LOG_LEVEL"
LOG_FILE_ENV = "ARDIS_LOG_FILE"
HTTP_TIMEOUT_ENV = "ARDIS_HTTP_TIMEOUT"
PORT_TIMEOUT_ENV = "ARDIS_PORT_TIMEOUT_MS"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class ToolkitConfig:
    """Settings and constant tables handed to every command handler."""

    log_level: int = logging.WARNING
    log_file: Optional[str] = None
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    port_timeout_ms: int = DEFAULT_PORT_TIMEOUT_MS
    file_categories: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: FILE_CATEGORIES)
    area_codes: Tuple[str, ...] = NANP_AREA_CODES
    ipv4_prefixes: Tuple[str, ...] = IPV4_DOCUMENTATION_PREFIXES
    ipv6_prefix: str = IPV6_DOCUMENTATION_PREFIX

    @classmethod
    def from_env(cls) -> "ToolkitConfig":
        level_name = (os.getenv(LOG_LEVEL_ENV) or "WARNING").strip().upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            level = logging.WARNING
        return cls(
            log_level=level,
            log_file=os.getenv(LOG_FILE_ENV) or None,
            http_timeout_s=_env_float(HTTP_TIMEOUT_ENV, DEFAULT_HTTP_TIMEOUT_S),
            port_timeout_ms=int(_env_float(PORT_TIMEOUT_ENV, DEFAULT_PORT_TIMEOUT_MS)),
        )
