"""
Indentation and trailing-newline detection for JSON-family manifests.

Rewritten manifests reuse the style found in the original file so that a
rewrite only produces a diff for the lines that actually changed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

Indent = Union[str, int]

_LEADING_WHITESPACE = re.compile(r"^(?: +|\t+)")


@dataclass(frozen=True)
class FileFormatting:
    indent: Optional[Indent] = None
    insert_final_newline: bool = True


def detect_indent(text: str) -> str:
    """
    Return the most frequently used indentation step in ``text``.

    Each non-empty line is compared with the previous indented line; the
    absolute difference in leading whitespace (tabs and spaces tracked
    separately) is counted as one use of that step. Lines that keep the
    same depth add weight to the step that introduced it, which breaks ties.
    Returns ``""`` when the text carries no indentation at all.
    """

    # (kind, size) -> [uses, weight]
    steps: Dict[Tuple[str, int], list[int]] = {}
    previous_kind = ""
    previous_size = 0
    current_key: Optional[Tuple[str, int]] = None

    for line in text.splitlines():
        if not line.strip():
            continue
        match = _LEADING_WHITESPACE.match(line)
        if match is None:
            previous_kind = ""
            previous_size = 0
            continue

        leading = match.group(0)
        kind = "tab" if leading[0] == "\t" else "space"
        size = len(leading)
        if kind != previous_kind:
            previous_size = 0
        difference = abs(size - previous_size)
        previous_kind = kind
        previous_size = size

        if difference == 0:
            if current_key is not None:
                steps[current_key][1] += 1
            continue

        current_key = (kind, difference)
        entry = steps.setdefault(current_key, [0, 0])
        entry[0] += 1

    if not steps:
        return ""
    kind, size = max(steps, key=lambda key: (steps[key][0], steps[key][1]))
    return ("\t" if kind == "tab" else " ") * size


def detect_file_formatting(text: str) -> FileFormatting:
    return FileFormatting(
        indent=detect_indent(text),
        insert_final_newline=text.endswith("\n"),
    )
