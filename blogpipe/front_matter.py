"""Split a post into its YAML front matter and the untouched body.

A front matter block opens with a line that is exactly ``---`` at the
very top of the document and closes at the next ``---`` line. Everything
after the closing line is the body; at most one newline separating the
two is dropped, the rest is returned verbatim.

PyYAML is required (pip install pyyaml).
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

import yaml

from .errors import MalformedFrontMatter

DELIMITER = "---"
BOM = "\ufeff"


class _UniqueKeyLoader(yaml.SafeLoader):
    """Safe loader that refuses repeated keys instead of keeping the last one."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            if not isinstance(key_node, yaml.ScalarNode):
                continue
            key = self.construct_scalar(key_node)
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key {key!r}",
                    key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER


def _strip_one_newline(body: str) -> str:
    if body.startswith("\r\n"):
        return body[2:]
    if body.startswith("\n"):
        return body[1:]
    return body


def parse_front_matter(text: str, source: str = "<string>") -> tuple[dict[str, Any], str]:
    """Return (front_matter_dict, body).

    Documents without an opening delimiter have no front matter; the whole
    text is the body.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]

    lines = text.splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0]):
        return {}, text

    for idx in range(1, len(lines)):
        if _is_delimiter(lines[idx]):
            closing_index = idx
            break
    else:
        raise MalformedFrontMatter(source, "opening '---' has no closing '---'", line=1)

    fm_text = "".join(lines[1:closing_index])
    body = _strip_one_newline("".join(lines[closing_index + 1:]))

    if not fm_text.strip():
        return {}, body

    try:
        data = yaml.load(fm_text, Loader=_UniqueKeyLoader)
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark or exc.context_mark
        # Block lines start on the second line of the document.
        line = mark.line + 2 if mark is not None else None
        problem = exc.problem or str(exc)
        raise MalformedFrontMatter(source, f"expected 'key: value' lines ({problem})", line=line) from exc
    except yaml.YAMLError as exc:
        raise MalformedFrontMatter(source, str(exc)) from exc

    if data is None:
        return {}, body
    if not isinstance(data, dict):
        raise MalformedFrontMatter(source, f"expected 'key: value' lines, got a {type(data).__name__}")

    bad_keys = [key for key in data if not isinstance(key, str)]
    if bad_keys:
        raise MalformedFrontMatter(source, f"keys must be strings, got {bad_keys[0]!r}")

    return data, body


def serialize_front_matter(metadata: dict[str, Any], body: str) -> str:
    """Inverse of :func:`parse_front_matter`."""
    yaml_txt = yaml.safe_dump(
        metadata, allow_unicode=True, sort_keys=False, default_flow_style=False, width=1000
    )
    return f"{DELIMITER}\n{yaml_txt}{DELIMITER}\n\n{body}"


def normalize_sequence(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return []
        # A string that already looks like a YAML/JSON array is loaded again.
        if stripped.startswith("[") and stripped.endswith("]"):
            try:
                parsed = yaml.safe_load(stripped)
            except yaml.YAMLError:
                parsed = None
            if isinstance(parsed, list):
                return normalize_sequence(parsed)
        pieces = [part.strip() for part in re.split(r"[,\n]+", value)]
        return [p for p in pieces if p]
    if isinstance(value, Iterable) and not isinstance(value, (dict, bytes)):
        result = []
        for item in value:
            if item is None:
                continue
            text = str(item).strip()
            if text:
                result.append(text)
        return result
    return [str(value).strip()]
