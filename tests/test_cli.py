"""End-to-end command dispatch through main()."""

from __future__ import annotations

import csv
import hashlib
import io
import random
import socket
from pathlib import Path

import pytest

from ardis_utils import main as cli
from ardis_utils.main import COMMANDS, build_parser, main, run_batch
from ardis_utils.core.errors import ResourceNotFoundError


def test_every_command_has_a_subparser() -> None:
    _, subparsers = build_parser()

    assert set(subparsers) == set(COMMANDS) == {
        "base64", "hash", "sri", "port", "doc-ip", "doc-phone", "file-props",
        "size-ratio", "random-file", "help-markdown", "browser",
    }


def test_base64_positional(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["base64", "hello world", "ação"]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == ["aGVsbG8gd29ybGQ=", "YcOnw6Nv"]


def test_values_from_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("abc\n\nxyz\n"))

    assert main(["hash", "-a", "md5"]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == [
        f"{hashlib.md5(b'abc').hexdigest().upper()}  abc",
        f"{hashlib.md5(b'xyz').hexdigest().upper()}  xyz",
    ]


def test_stdin_lines_keep_surrounding_spaces(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("  abc \r\n"))

    assert main(["hash", "-a", "md5"]) == 0

    out = capsys.readouterr().out.splitlines()
    assert out == [f"{hashlib.md5(b'  abc ').hexdigest().upper()}    abc "]


def test_no_input_is_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["hash"]) == 2
    assert "no input" in capsys.readouterr().out


def test_invalid_choice_rejected_by_argparse() -> None:
    with pytest.raises(SystemExit) as exc:
        main(["hash", "-a", "crc32", "abc"])
    assert exc.value.code == 2


def test_batch_failure_does_not_stop_siblings(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    good = tmp_path / "app.js"
    good.write_bytes(b"x")
    csv_path = tmp_path / "sri.csv"

    code = main(["sri", str(tmp_path / "missing.js"), str(good), "--csv", str(csv_path)])

    out = capsys.readouterr().out
    assert code == 1
    assert "missing.js: File not found" in out
    assert f"[+] {good}" in out
    with csv_path.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["source"] for r in rows] == [str(good)]


def test_run_batch_collects_failures() -> None:
    def action(item: str) -> str:
        if item == "bad":
            raise ResourceNotFoundError("gone")
        return item.upper()

    done, failures = run_batch(["a", "bad", "c"], action)

    assert done == [("a", "A"), ("c", "C")]
    assert [(f.item, f.error) for f in failures] == [("bad", "gone")]


def test_port_command(capsys: pytest.CaptureFixture[str]) -> None:
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    port = server.getsockname()[1]
    try:
        assert main(["port", "127.0.0.1", "-p", str(port)]) == 0
    finally:
        server.close()

    assert capsys.readouterr().out.strip() == f"127.0.0.1:{port}/TCP  OPEN"


def test_port_command_bad_spec(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["port", "127.0.0.1", "-p", "99999"]) == 2
    assert "Invalid port" in capsys.readouterr().out


def test_doc_commands_are_seedable(capsys: pytest.CaptureFixture[str]) -> None:
    main(["doc-ip", "-V", "6", "-n", "2", "--seed", "5"])
    first = capsys.readouterr().out
    main(["doc-ip", "-V", "6", "-n", "2", "--seed", "5"])

    assert capsys.readouterr().out == first
    assert all(line.startswith("2001:0DB8:") for line in first.splitlines())
    assert len(first.splitlines()) == 2

    assert main(["doc-phone", "-f", "dashed", "-a", "415", "--seed", "1"]) == 0
    assert capsys.readouterr().out.strip().startswith("415-555-01")


def test_doc_phone_unknown_area_code(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["doc-phone", "-a", "999"]) == 2
    assert "approved list" in capsys.readouterr().out


def test_random_file_opens_each_pick(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    for name in ("a.mp4", "b.mp4", "c.jpg"):
        (tmp_path / name).write_text("x", encoding="utf-8")
    opened = []
    monkeypatch.setattr(cli, "open_path", lambda p: opened.append(p))

    code = main(["random-file", "-d", str(tmp_path), "-c", "video", "-n", "2", "--seed", "3"])

    assert code == 0
    assert sorted(Path(p).name for p in opened) == ["a.mp4", "b.mp4"]
    assert (tmp_path / "video-cache.txt").exists()


def test_random_file_too_many(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "a.mp4").write_text("x", encoding="utf-8")

    assert main(["random-file", "-d", str(tmp_path), "-c", "video", "-n", "2", "--no-open"]) == 1
    assert "only 1 match" in capsys.readouterr().out


def test_file_props_and_size_ratio_without_duration(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    from ardis_utils.modules import file_properties

    monkeypatch.setattr(file_properties.sys, "platform", "linux")
    f = tmp_path / "song.mp3"
    f.write_bytes(b"123")

    assert main(["file-props", str(f), "--name", "Name"]) == 0
    assert "   0  Name: song.mp3" in capsys.readouterr().out

    assert main(["size-ratio", str(f)]) == 1
    assert "No duration metadata" in capsys.readouterr().out


def test_help_markdown_to_file(tmp_path: Path) -> None:
    out = tmp_path / "README.md"

    assert main(["help-markdown", "-o", str(out)]) == 0

    text = out.read_text(encoding="utf-8")
    assert text.startswith("# Ardis Utilities")
    for name in COMMANDS:
        assert f"## {name}" in text


def test_help_markdown_unknown_command(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["help-markdown", "hash", "nope"]) == 1

    out = capsys.readouterr().out
    assert "## hash" in out
    assert "nope: Unknown command" in out


def test_browser_command(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    launched = []
    monkeypatch.setattr(cli, "launch_browser", lambda url, browser, private: launched.append((url, browser, private)))

    assert main(["browser", "-b", "firefox", "-P", "https://example.com"]) == 0
    assert launched == [("https://example.com", "firefox", True)]


def test_no_command_without_tty_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 2
    assert "usage: ardis" in capsys.readouterr().out


def test_menu_runs_selected_command(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    class TtyInput(io.StringIO):
        def isatty(self) -> bool:
            return True

    monkeypatch.setattr("sys.stdin", TtyInput(""))
    answers = iter(["1", "hi", "", "0"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))

    assert main([]) == 0
    assert "aGk=" in capsys.readouterr().out


def test_random_file_with_read_only_cache(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "a.mp4").write_text("x", encoding="utf-8")

    def deny(self, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "write_text", deny)

    assert main(["random-file", "-d", str(tmp_path), "-c", "video", "--no-open"]) == 0
    assert "a.mp4" in capsys.readouterr().out


def test_no_command_without_stdin_prints_help(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr("sys.stdin", None)

    assert main([]) == 2
    assert "usage: ardis" in capsys.readouterr().out
