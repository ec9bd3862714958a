#!/usr/bin/env python3
"""
Ardis Utilities - CLI
- Input validation (argparse choices + module validators)
- One handler per command, dispatched from COMMANDS
- Interactive menu when started without a command
"""

from __future__ import annotations

import argparse
import logging
import random
import shlex
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from ardis_utils import __version__
from ardis_utils.core.config import (
    BROWSERS,
    DEFAULT_HASH_ALGORITHM,
    DEFAULT_SRI_ALGORITHM,
    FILE_CATEGORIES,
    HASH_ALGORITHMS,
    SRI_ALGORITHMS,
    ToolkitConfig,
)
from ardis_utils.core.csv_utils import write_records_csv
from ardis_utils.core.errors import ToolkitError, ValidationError
from ardis_utils.core.logger_setup import setup_logger
from ardis_utils.core.models import ItemFailure
from ardis_utils.modules.documentation import (
    IP_VERSIONS,
    PHONE_FORMATS,
    documentation_ip,
    documentation_phone,
)
from ardis_utils.modules.encoding import from_base64, to_base64
from ardis_utils.modules.file_properties import get_file_properties, get_size_duration_ratio
from ardis_utils.modules.help_markdown import document_markdown
from ardis_utils.modules.launcher import launch_browser, open_path
from ardis_utils.modules.port_probe import parse_ports, probe_ports
from ardis_utils.modules.random_file import pick_random_files
from ardis_utils.modules.sri import get_sri_hash
from ardis_utils.modules.string_hash import OUTPUT_FORMATS, get_string_hash

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

T = TypeVar("T")


@dataclass(frozen=True)
class Command:
    name: str
    summary: str
    configure: Callable[[argparse.ArgumentParser], None]
    handler: Callable[[argparse.Namespace, ToolkitConfig], int]
    examples: Tuple[str, ...] = ()


# -------------------------
# Input / batch helpers
# -------------------------

def stdin_is_tty() -> bool:
    return sys.stdin is not None and sys.stdin.isatty()


def read_values(values: Optional[Sequence[str]], strip: bool = True) -> List[str]:
    """
    Positional values win; otherwise one value per non-empty stdin line
    (only when stdin is redirected). With strip=False only the line ending
    is removed, so text commands see the line exactly as piped.
    """
    if values:
        return list(values)
    if sys.stdin is None or stdin_is_tty():
        return []
    if not strip:
        lines = (line.rstrip("\r\n") for line in sys.stdin)
        return [line for line in lines if line]
    return [line.strip() for line in sys.stdin if line.strip()]


def run_batch(
    items: Iterable[str],
    action: Callable[[str], T],
) -> Tuple[List[Tuple[str, T]], List[ItemFailure]]:
    """
    Applies `action` to every item. A ToolkitError only fails its own item;
    the rest of the batch keeps going.
    """
    done: List[Tuple[str, T]] = []
    failures: List[ItemFailure] = []
    for item in items:
        try:
            done.append((item, action(item)))
        except ToolkitError as e:
            log.warning("%s failed: %s", item, e)
            print(f"[!] {item}: {e}")
            failures.append(ItemFailure(item=item, error=str(e)))
    return done, failures


def finish(args: argparse.Namespace, records: Sequence[object], failures: Sequence[ItemFailure]) -> int:
    csv_path = getattr(args, "csv", None)
    if csv_path:
        try:
            path = write_records_csv(csv_path, records)  # type: ignore[arg-type]
            print(f"[+] CSV saved to: {path}")
        except OSError as e:
            print(f"[!] Error writing CSV: {e}")
            return EXIT_FAILED
    if failures:
        print(f"[i] {len(failures)} item(s) failed.", file=sys.stderr)
        return EXIT_FAILED
    return EXIT_OK


def _no_input(name: str) -> int:
    print(f"[!] {name}: no input. Pass values as arguments or pipe them through stdin.")
    return EXIT_USAGE


def _add_values(p: argparse.ArgumentParser, metavar: str, help_text: str) -> None:
    p.add_argument("values", nargs="*", metavar=metavar, help=help_text)


def _add_csv(p: argparse.ArgumentParser) -> None:
    p.add_argument("--csv", metavar="PATH", help="Also export the records to a CSV file.")


def _add_seed(p: argparse.ArgumentParser) -> None:
    p.add_argument("--seed", type=int, help="Seed for reproducible output.")


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {raw!r}")
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1: {value}")
    return value


# -------------------------
# Handlers
# -------------------------

def configure_base64(p: argparse.ArgumentParser) -> None:
    _add_values(p, "TEXT", "String(s) to encode (stdin if omitted).")
    p.add_argument("-d", "--decode", action="store_true", help="Decode base64 back to text instead.")


def handle_base64(args: argparse.Namespace, cfg: ToolkitConfig) -> int:
    values = read_values(args.values, strip=False)
    if not values:
        return _no_input("base64")

    convert = from_base64 if args.decode else to_base64
    done, failures = run_batch(values, convert)
    for _, out in done:
        print(out)
    return finish(args, [], failures)


def configure_hash(p: argparse.ArgumentParser) -> None:
    _add_values(p, "TEXT", "String(s) to hash (stdin if omitted).")
    p.add_argument(
        "-a", "--algorithm",
        type=str.upper,
        choices=HASH_ALGORITHMS,
        default=DEFAULT_HASH_ALGORITHM,
        help="Hash algorithm (default: %(default)s).",
    )
    p.add_argument("-f", "--format", choices=OUTPUT_FORMATS, default="hex", help="Digest encoding (default: %(default)s).")
    _add_csv(p)


def handle_hash(args: argparse.Namespace, cfg: ToolkitConfig) -> int:
    values = read_values(args.values, strip=False)
    if not values:
        return _no_input("hash")

    done, failures = run_batch(values, lambda v: get_string_hash(v, args.algorithm, args.format))
    for _, r in done:
        print(f"{r.hash}  {r.input}")
    return finish(args, [r for _, r in done], failures)


def configure_sri(p: argparse.ArgumentParser) -> None:
    _add_values(p, "SOURCE", "Local file(s) or http(s) URL(s) (stdin if omitted).")
    p.add_argument(
        "-a", "--algorithm",
        type=str.lower,
        choices=SRI_ALGORITHMS,
        default=DEFAULT_SRI_ALGORITHM,
        help="Digest algorithm (default: %(default)s).",
    )
    _add_csv(p)


def handle_sri(args: argparse.Namespace, cfg: ToolkitConfig) -> int:
    sources = read_values(args.values)
    if not sources:
        return _no_input("sri")

    done, failures = run_batch(sources, lambda s: get_sri_hash(s, args.algorithm, timeout=cfg.http_timeout_s))
    for _, r in done:
        print(f"[+] {r.source}")
        print(f"    {r.integrity}")
        print(f"    {r.html}")
    return finish(args, [r for _, r in done], failures)


def configure_port(p: argparse.ArgumentParser) -> None:
    _add_values(p, "HOST", "Host name(s) or IP(s) (stdin if omitted).")
    p.add_argument("-p", "--port", required=True, help="Port(s): 22 | 22,80,443 | 1-1024 | 22,80-90.")
    p.add_argument("-t", "--timeout", type=_positive_int, help="Timeout per port in ms (default: 200).")
    _add_csv(p)


def handle_port(args: argparse.Namespace, cfg: ToolkitConfig) -> int:
    hosts = read_values(args.values)
    if not hosts:
        return _no_input("port")

    ports = parse_ports(args.port)
    timeout_ms = args.timeout or cfg.port_timeout_ms

    done, failures = run_batch(hosts, lambda h: probe_ports(h, ports, timeout_ms))
    records = []
    for _, results in done:
        for r in results:
            state = "OPEN" if r.open else "CLOSED"
            print(f"{r.host}:{r.port}/{r.protocol}  {state}")
            records.append(r)
    return finish(args, records, failures)


def configure_doc_ip(p: argparse.ArgumentParser) -> None:
    p.add_argument("-V", "--ip-version", choices=IP_VERSIONS, default="4", help="IP version (default: %(default)s).")
    p.add_argument("-n", "--count", type=_positive_int, default=1, help="How many addresses (default: %(default)s).")
    _add_seed(p)


def handle_doc_ip(args: argparse.Namespace, cfg: ToolkitConfig) -> int:
    rng = random.Random(args.seed)
    for _ in range(args.count):
        print(documentation_ip(args.ip_version, rng, cfg.ipv4_prefixes, cfg.ipv6_prefix))
    return EXIT_OK


def configure_doc_phone(p: argparse.ArgumentParser) -> None:
    p.add_argument("-f", "--format", choices=PHONE_FORMATS, default="national", help="Output format (default: %(default)s).")
    p.add_argument("-a", "--area-code", help="Use this area code (must be in the approved list).")
    p.add_argument("-n", "--count", type=_positive_int, default=1, help="How many numbers (default: %(default)s).")
    _add_seed(p)


def handle_doc_phone(args: argparse.Namespace, cfg: ToolkitConfig) -> int:
    rng = random.Random(args.seed)
    for _ in range(args.count):
        print(documentation_phone(args.format, args.area_code, rng, cfg.area_codes))
    return EXIT_OK


def configure_file_props(p: argparse.ArgumentParser) -> None:
    _add_values(p, "PATH", "File(s) to inspect (stdin if omitted).")
    p.add_argument("--name", action="append", help="Only this property name (repeatable).")
    p.add_argument("--index", action="append", type=int, help="Only this property index (repeatable).")
    p.add_argument("--all", action="store_true", help="Include properties with empty values.")
    _add_csv(p)


def handle_file_props(args: argparse.Namespace, cfg: ToolkitConfig) -> int:
    paths = read_values(args.values)
    if not paths:
        return _no_input("file-props")

    done, failures = run_batch(
        paths,
        lambda p: get_file_properties(p, names=args.name, indices=args.index, include_empty=args.all),
    )
    records = []
    for path, props in done:
        print(f"== {path} ==")
        if not props:
            print("(no properties)")
        for prop in props:
            print(f"{prop.index:>4}  {prop.name}: {prop.value}")
        records.extend(props)
    return finish(args, records, failures)


def configure_size_ratio(p: argparse.ArgumentParser) -> None:
    _add_values(p, "PATH", "Media file(s) (stdin if omitted).")
    _add_csv(p)


def handle_size_ratio(args: argparse.Namespace, cfg: ToolkitConfig) -> int:
    paths = read_values(args.values)
    if not paths:
        return _no_input("size-ratio")

    done, failures = run_batch(paths, get_size_duration_ratio)
    for _, r in done:
        print(f"{r.name}: {r.size_kb:.2f} KB / {r.duration_s:g}s = {r.ratio:.2f} KB/s")
    return finish(args, [r for _, r in done], failures)


def configure_random_file(p: argparse.ArgumentParser) -> None:
    p.add_argument("-d", "--dir", default=".", help="Working directory to pick from (default: current).")
    p.add_argument(
        "-c", "--category",
        type=str.lower,
        choices=tuple(FILE_CATEGORIES),
        default="all",
        help="File category (default: %(default)s).",
    )
    p.add_argument("-n", "--count", type=_positive_int, default=1, help="How many files (default: %(default)s).")
    p.add_argument("-s", "--subfolder", help="Only paths containing this text.")
    p.add_argument("--refresh", action="store_true", help="Rebuild the <category>-cache.txt file first.")
    p.add_argument("--no-open", action="store_true", help="Print the picks without opening them.")
    _add_seed(p)


def handle_random_file(args: argparse.Namespace, cfg: ToolkitConfig) -> int:
    picks = pick_random_files(
        args.dir,
        args.category,
        args.count,
        subfolder=args.subfolder,
        refresh=args.refresh,
        rng=random.Random(args.seed),
        categories=cfg.file_categories,
    )
    for path in picks:
        print(path)
    if args.no_open:
        return EXIT_OK

    _, failures = run_batch([str(p) for p in picks], open_path)
    return finish(args, [], failures)


def configure_help_markdown(p: argparse.ArgumentParser) -> None:
    _add_values(p, "COMMAND", "Command(s) to document (default: all).")
    p.add_argument("-o", "--output", help="Write the Markdown to this file instead of stdout.")
    p.add_argument("--title", default="Ardis Utilities", help="Document title (default: %(default)s).")


def handle_help_markdown(args: argparse.Namespace, cfg: ToolkitConfig) -> int:
    _, subparsers = build_parser()
    names = read_values(args.values) or list(COMMANDS)

    def section(name: str):
        if name not in COMMANDS:
            raise ValidationError(f"Unknown command. Valid: {', '.join(COMMANDS)}")
        cmd = COMMANDS[name]
        return name, subparsers[name], cmd.summary, cmd.examples

    done, failures = run_batch(names, section)
    markdown = document_markdown(args.title, [s for _, s in done])

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(markdown, encoding="utf-8")
        print(f"[+] Markdown saved to: {out}")
    else:
        sys.stdout.write(markdown)
    return finish(args, [], failures)


def configure_browser(p: argparse.ArgumentParser) -> None:
    _add_values(p, "URL", "URL(s) to open (stdin if omitted).")
    p.add_argument("-b", "--browser", type=str.lower, choices=BROWSERS, default="default", help="Browser (default: %(default)s).")
    p.add_argument("-P", "--private", action="store_true", help="Private / incognito window.")


def handle_browser(args: argparse.Namespace, cfg: ToolkitConfig) -> int:
    urls = read_values(args.values)
    if not urls:
        return _no_input("browser")

    done, failures = run_batch(urls, lambda u: launch_browser(u, args.browser, args.private))
    for url, _ in done:
        print(f"[+] Opened {url}")
    return finish(args, [], failures)


COMMANDS: Dict[str, Command] = {c.name: c for c in (
    Command("base64", "Encode a string as base64 (UTF-8).", configure_base64, handle_base64,
            ("ardis base64 'hello world'", "ardis base64 --decode aGVsbG8gd29ybGQ=")),
    Command("hash", "Hash a string.", configure_hash, handle_hash,
            ("ardis hash -a SHA512 password", "cat words.txt | ardis hash --csv hashes.csv")),
    Command("sri", "Compute a subresource integrity hash for a file or URL.", configure_sri, handle_sri,
            ("ardis sri https://code.jquery.com/jquery-3.7.1.min.js", "ardis sri -a sha256 site.css")),
    Command("port", "Test whether TCP ports are reachable.", configure_port, handle_port,
            ("ardis port example.com -p 443", "ardis port 192.168.1.10 -p 22,80-90 -t 500")),
    Command("doc-ip", "Generate an IP address reserved for documentation.", configure_doc_ip, handle_doc_ip,
            ("ardis doc-ip", "ardis doc-ip -V 6 -n 3")),
    Command("doc-phone", "Generate a fictional NANP phone number (555-01XX).", configure_doc_phone, handle_doc_phone,
            ("ardis doc-phone", "ardis doc-phone -f e164 -a 212")),
    Command("file-props", "Show extended file properties.", configure_file_props, handle_file_props,
            ("ardis file-props movie.mp4", "ardis file-props song.mp3 --name Length --name Title")),
    Command("size-ratio", "Size (KB) to duration (s) ratio of media files.", configure_size_ratio, handle_size_ratio,
            ("ardis size-ratio clip.mp4", "ls *.mp4 | ardis size-ratio --csv ratios.csv")),
    Command("random-file", "Open random files of a category.", configure_random_file, handle_random_file,
            ("ardis random-file -c video -n 3", "ardis random-file -c image -s Holidays --no-open")),
    Command("help-markdown", "Render command help as Markdown.", configure_help_markdown, handle_help_markdown,
            ("ardis help-markdown -o README.md", "ardis help-markdown hash sri")),
    Command("browser", "Open a URL in a browser.", configure_browser, handle_browser,
            ("ardis browser https://example.com", "ardis browser -b firefox --private https://example.com")),
)}


def build_parser() -> Tuple[argparse.ArgumentParser, Dict[str, argparse.ArgumentParser]]:
    parser = argparse.ArgumentParser(prog="ardis", description="Personal shell-utility toolkit.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr.")
    parser.add_argument("--log-file", help="Also write logs to this file.")

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers: Dict[str, argparse.ArgumentParser] = {}
    for cmd in COMMANDS.values():
        p = sub.add_parser(cmd.name, help=cmd.summary, description=cmd.summary)
        cmd.configure(p)
        subparsers[cmd.name] = p
    return parser, subparsers


def dispatch(args: argparse.Namespace, cfg: ToolkitConfig) -> int:
    cmd = COMMANDS[args.command]
    log.debug("Running %s", cmd.name)
    try:
        return cmd.handler(args, cfg)
    except ValidationError as e:
        print(f"[!] {cmd.name}: {e}")
        return EXIT_USAGE
    except ToolkitError as e:
        print(f"[!] {cmd.name}: {e}")
        return EXIT_FAILED


# -------------------------
# Interactive menu
# -------------------------

def clear_screen() -> None:
    # Kept simple and portable (no 'clear' / 'cls')
    print("\n" * 3)


def pause(msg: str = "Enter to continue...") -> None:
    try:
        input(msg)
    except (EOFError, KeyboardInterrupt):
        # CTRL+D/CTRL+C here just goes back to the menu
        print()


def read_choice(prompt: str, valid_keys: set[str]) -> str:
    while True:
        try:
            choice = input(prompt).strip()
        except (EOFError, KeyboardInterrupt):
            print("\n[!] Input interrupted. Exiting.")
            sys.exit(0)

        if choice in valid_keys:
            return choice

        print(f"[!] Invalid option: {choice!r}. Valid: {', '.join(sorted(valid_keys))}")


def print_menu(title: str, options: Dict[str, str]) -> None:
    print("=" * 60)
    print(title)
    print("=" * 60)
    # "0 - Exit" goes last
    for key in sorted(options, key=lambda k: (k == "0", len(k), k)):
        print(f"{key} - {options[key]}")
    print("-" * 60)


def run_from_menu(parser: argparse.ArgumentParser, name: str, cfg: ToolkitConfig) -> None:
    clear_screen()
    cmd = COMMANDS[name]
    print(f"== {cmd.name}: {cmd.summary} ==")
    for ex in cmd.examples:
        print(f"   e.g. {ex}")
    print()

    try:
        line = input(f"Arguments for {name} (-h for help): ")
        argv = shlex.split(line)
    except (EOFError, KeyboardInterrupt):
        print()
        return
    except ValueError as e:
        print(f"[!] Error: {e}")
        pause()
        return

    try:
        args = parser.parse_args([name, *argv])
    except SystemExit:
        # argparse already printed usage/help
        pause()
        return

    try:
        dispatch(args, cfg)
    except KeyboardInterrupt:
        print("\n[!] Interrupted.")
    pause()


def main_menu(parser: argparse.ArgumentParser, cfg: ToolkitConfig) -> None:
    names = list(COMMANDS)
    options = {str(i): f"{n} ({COMMANDS[n].summary})" for i, n in enumerate(names, start=1)}
    options["h"] = "About / Help"
    options["0"] = "Exit"

    while True:
        clear_screen()
        print_menu(f"Ardis Utilities {__version__} - Main Menu", options)
        choice = read_choice("Choose an option: ", set(options))
        if choice == "0":
            return
        if choice == "h":
            clear_screen()
            parser.print_help()
            pause("Enter to go back to the menu...")
            continue
        run_from_menu(parser, names[int(choice) - 1], cfg)


def main(argv: Optional[list[str]] = None) -> int:
    cfg = ToolkitConfig.from_env()
    parser, _ = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    level = logging.DEBUG if args.verbose else cfg.log_level
    setup_logger(level, args.log_file or cfg.log_file)

    try:
        if not args.command:
            if not stdin_is_tty():
                parser.print_help()
                return EXIT_USAGE
            main_menu(parser, cfg)
            return EXIT_OK
        return dispatch(args, cfg)
    except SystemExit as e:
        return int(e.code) if isinstance(e.code, int) else EXIT_OK
    except KeyboardInterrupt:
        print("\n[!] Interrupted. Exiting.")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    raise SystemExit(main())
