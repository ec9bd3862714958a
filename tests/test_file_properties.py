"""Extended file properties and size/duration ratios with injected providers."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List

import pytest

from ardis_utils.core.errors import ExternalDependencyError, ResourceNotFoundError, ValidationError
from ardis_utils.modules import file_properties
from ardis_utils.modules.file_properties import (
    ShellMetadataProvider,
    StatMetadataProvider,
    get_file_properties,
    get_size_duration_ratio,
    parse_duration,
)


class FakeProvider:
    def __init__(self, props: List[tuple]) -> None:
        self.props = props

    def properties(self, path: Path) -> List[tuple]:
        return list(self.props)


@pytest.fixture
def media(tmp_path: Path) -> Path:
    p = tmp_path / "clip.mp4"
    p.write_bytes(b"\0" * 10240)  # 10 KB
    return p


def test_filters_by_name_and_index(media: Path) -> None:
    provider = FakeProvider([(0, "Name", "clip.mp4"), (21, "Title", ""), (27, "Length", "00:00:05")])

    by_name = get_file_properties(media, provider, names=["length"])
    by_index = get_file_properties(media, provider, indices=[0])
    everything = get_file_properties(media, provider, include_empty=True)

    assert [(p.index, p.name, p.value) for p in by_name] == [(27, "Length", "00:00:05")]
    assert [p.name for p in by_index] == ["Name"]
    assert [p.name for p in everything] == ["Name", "Title", "Length"]
    assert all(p.path == str(media) for p in everything)


def test_empty_values_skipped_by_default(media: Path) -> None:
    provider = FakeProvider([(21, "Title", "")])

    assert get_file_properties(media, provider) == []


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ResourceNotFoundError):
        get_file_properties(tmp_path / "nope.mp4", FakeProvider([]))


def test_negative_index_rejected(media: Path) -> None:
    with pytest.raises(ValidationError):
        get_file_properties(media, FakeProvider([]), indices=[-1])


def test_stat_provider_reports_basic_columns(media: Path) -> None:
    props = get_file_properties(media, StatMetadataProvider())
    by_name = {p.name: p for p in props}

    assert by_name["Name"].index == 0
    assert by_name["Name"].value == "clip.mp4"
    assert by_name["Size"].value == "10.00 KB"
    assert by_name["Item type"].value == "MP4 File"
    assert "Length" not in by_name


@pytest.mark.parametrize("raw,expected", [
    ("00:03:25", 205.0),
    ("01:02:03", 3723.0),
    ("02:03", 123.0),
    ("42", 42.0),
    ("\u200e00:00:10", 10.0),
])
def test_parse_duration(raw: str, expected: float) -> None:
    assert parse_duration(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "1:2:3:4", "nan", "inf", "00:nan"])
def test_parse_duration_rejects(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_duration(raw)


def test_size_duration_ratio(media: Path) -> None:
    ratio = get_size_duration_ratio(media, FakeProvider([(27, "Length", "00:00:04")]))

    assert ratio.name == "clip.mp4"
    assert ratio.size_kb == 10.0
    assert ratio.duration_s == 4.0
    assert ratio.ratio == 2.5


def test_ratio_without_duration_is_resource_error(media: Path) -> None:
    with pytest.raises(ResourceNotFoundError, match="No duration"):
        get_size_duration_ratio(media, FakeProvider([(0, "Name", "clip.mp4")]))


def test_ratio_with_zero_duration(media: Path) -> None:
    with pytest.raises(ResourceNotFoundError, match="Zero duration"):
        get_size_duration_ratio(media, FakeProvider([(27, "Length", "00:00:00")]))


def test_shell_provider_parses_powershell_output(monkeypatch: pytest.MonkeyPatch, media: Path) -> None:
    seen = {}

    def fake_run(cmd, **kwargs):
        seen["cmd"] = cmd
        out = "0\tName\tclip.mp4\n27\tLength\t00:01:00\nnoise line\n"
        return subprocess.CompletedProcess(cmd, 0, stdout=out, stderr="")

    monkeypatch.setattr(file_properties.subprocess, "run", fake_run)

    props = ShellMetadataProvider().properties(media)

    assert props == [(0, "Name", "clip.mp4"), (27, "Length", "00:01:00")]
    assert seen["cmd"][0] == "powershell"
    assert "Shell.Application" in seen["cmd"][-1]


def test_shell_provider_without_powershell(monkeypatch: pytest.MonkeyPatch, media: Path) -> None:
    def missing(cmd, **kwargs):
        raise FileNotFoundError("powershell")

    monkeypatch.setattr(file_properties.subprocess, "run", missing)

    with pytest.raises(ExternalDependencyError):
        ShellMetadataProvider().properties(media)


def test_shell_provider_failure_names_file(monkeypatch: pytest.MonkeyPatch, media: Path) -> None:
    monkeypatch.setattr(
        file_properties.subprocess,
        "run",
        lambda cmd, **kw: subprocess.CompletedProcess(cmd, 1, stdout="", stderr="COM error"),
    )

    with pytest.raises(ExternalDependencyError, match="clip.mp4"):
        ShellMetadataProvider().properties(media)


def test_default_provider_is_platform_gated(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(file_properties.sys, "platform", "linux")
    assert isinstance(file_properties.default_provider(), StatMetadataProvider)

    monkeypatch.setattr(file_properties.sys, "platform", "win32")
    assert isinstance(file_properties.default_provider(), ShellMetadataProvider)


def test_size_duration_ratio_rejects_nan_length(media: Path) -> None:
    with pytest.raises(ResourceNotFoundError, match="No duration metadata"):
        get_size_duration_ratio(media, FakeProvider([(27, "Length", "nan")]))
