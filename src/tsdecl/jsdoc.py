"""Rewrite documentation comments for the generated declarations."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from pathlib import Path

_LOCAL_LINK_RE = re.compile(r"\{@link #([^}]+)\}")
_TYPED_TAG_RE = re.compile(r"@param|@return")


def qualify_links(line: str, class_name: str) -> str:
    """Turn ``{@link #member}`` into ``{@link pkg.Class.member}``."""
    return _LOCAL_LINK_RE.sub(lambda m: f"{{@link {class_name}.{m.group(1)}}}", line)


def find_type_expression(line: str) -> tuple[int, int] | None:
    """Locate the ``{...}`` type of a ``@param`` / ``@return`` tag.

    Returns the index of the opening brace and the index just past the
    matching closing brace, or None.  Nested braces (record types) are
    balanced; inline ``{@link ...}`` tags are not types.
    """
    tag = _TYPED_TAG_RE.search(line)
    if tag is None:
        return None
    start = line.find("{", tag.end())
    if start < 0 or line.startswith("{@", start):
        return None
    depth = 0
    for i in range(start, len(line)):
        if line[i] == "{":
            depth += 1
        elif line[i] == "}":
            depth -= 1
            if depth == 0:
                return start, i + 1
    return None


def strip_type_expression(line: str) -> str:
    span = find_type_expression(line)
    if span is None:
        return line
    start, end = span
    return line[:start].strip() + " " + line[end:].strip()


def rewrite_lines(jsdoc: Iterable[str], class_name: str) -> list[str]:
    """Normalise raw doc lines for output.

    Entries may hold several lines; blank lines are dropped and the rest
    are trimmed. Markdown bullets and emphasis are kept as written.
    """
    lines = "\n".join(jsdoc).split("\n")
    out: list[str] = []
    for line in lines:
        if not line.strip():
            continue
        line = strip_type_expression(qualify_links(line, class_name))
        out.append(line.strip())
    return out


def source_link(output_to: str, root_dir: str, class_filename: str) -> str:
    """Path of the class's source file relative to the output file's directory."""
    source = Path.cwd() / root_dir / class_filename
    output_dir = Path(output_to).absolute().parent
    return Path(os.path.relpath(source, output_dir)).as_posix()


def render_jsdoc(lines: list[str], source_path: str, indent: str) -> str:
    """Render a doc comment block ending with a link to the source code."""
    body = list(lines)
    if body:
        body.append("")
    body.append(f"[source code]({source_path})")
    rendered = [f"{indent}/**"]
    rendered.extend(f"{indent} * {line}".rstrip() for line in body)
    rendered.append(f"{indent} */")
    return "\n".join(rendered) + "\n"
