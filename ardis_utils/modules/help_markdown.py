from __future__ import annotations

import argparse
from typing import Iterable, List, Sequence, Tuple


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _is_required(action: argparse.Action) -> bool:
    if action.option_strings:
        return bool(action.required)
    return action.nargs not in ("?", "*", argparse.REMAINDER)


def _default_text(action: argparse.Action) -> str:
    if action.default in (None, argparse.SUPPRESS) or isinstance(action, argparse._StoreTrueAction):
        return ""
    if isinstance(action.default, (list, tuple)):
        return ", ".join(str(v) for v in action.default)
    return str(action.default)


def parameter_rows(parser: argparse.ArgumentParser) -> List[Tuple[str, str, str, str, str]]:
    """(name, required, default, choices, description) per argument, help flag excluded."""
    rows = []
    for action in parser._actions:
        if isinstance(action, argparse._HelpAction):
            continue
        name = ", ".join(action.option_strings) if action.option_strings else (action.metavar or action.dest)
        choices = ", ".join(str(c) for c in action.choices) if action.choices else ""
        rows.append((
            name,
            "yes" if _is_required(action) else "no",
            _default_text(action),
            choices,
            (action.help or "").replace("%(default)s", _default_text(action)),
        ))
    return rows


def command_markdown(
    name: str,
    parser: argparse.ArgumentParser,
    summary: str = "",
    examples: Sequence[str] = (),
) -> str:
    """One command's help as a Markdown section."""
    lines = [f"## {name}", ""]
    if summary:
        lines += [summary, ""]
    if parser.description and parser.description != summary:
        lines += [parser.description, ""]

    lines += ["### Syntax", "", "```text", parser.format_usage().strip(), "```", ""]

    rows = parameter_rows(parser)
    if rows:
        lines += [
            "### Parameters",
            "",
            "| Name | Required | Default | Choices | Description |",
            "|------|----------|---------|---------|-------------|",
        ]
        for row in rows:
            lines.append("| " + " | ".join(_escape_cell(c) for c in row) + " |")
        lines.append("")

    if examples:
        lines += ["### Examples", ""]
        for ex in examples:
            lines += ["```sh", ex, "```", ""]

    return "\n".join(lines)


def document_markdown(
    title: str,
    sections: Iterable[Tuple[str, argparse.ArgumentParser, str, Sequence[str]]],
) -> str:
    """Full README: title, index of commands, then one section per command."""
    sections = list(sections)
    out = [f"# {title}", ""]
    for name, _, summary, _ in sections:
        out.append(f"- [{name}](#{name}) - {summary}" if summary else f"- [{name}](#{name})")
    out.append("")
    for name, parser, summary, examples in sections:
        out.append(command_markdown(name, parser, summary, examples))
    return "\n".join(out).rstrip() + "\n"
