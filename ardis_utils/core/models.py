# core/models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class HashResult:
    algorithm: str
    hash: str          # upper-case hex or base64
    input: str

    def as_row(self) -> Dict[str, object]:
        return {"algorithm": self.algorithm, "hash": self.hash, "input": self.input}


@dataclass(frozen=True)
class PortProbeResult:
    host: str
    port: int
    open: bool
    protocol: str = "TCP"

    def as_row(self) -> Dict[str, object]:
        return {"host": self.host, "protocol": self.protocol, "port": self.port, "open": self.open}


@dataclass(frozen=True)
class FileProperty:
    path: str
    index: int
    name: str
    value: str

    def as_row(self) -> Dict[str, object]:
        return {"path": self.path, "index": self.index, "name": self.name, "value": self.value}


@dataclass(frozen=True)
class SizeDurationRatio:
    path: str
    name: str
    size_kb: float
    duration_s: float
    ratio: float

    def as_row(self) -> Dict[str, object]:
        return {
            "path": self.path,
            "name": self.name,
            "size_kb": self.size_kb,
            "duration_s": self.duration_s,
            "ratio": self.ratio,
        }


@dataclass(frozen=True)
class SriRecord:
    algorithm: str
    hash: str          # hex digest
    source: str        # file path or URL
    integrity: str     # "<alg>-<base64>"
    html: str

    def as_row(self) -> Dict[str, object]:
        return {
            "algorithm": self.algorithm,
            "hash": self.hash,
            "source": self.source,
            "integrity": self.integrity,
            "html": self.html,
        }


@dataclass(frozen=True)
class ItemFailure:
    item: str
    error: str
