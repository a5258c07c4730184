#!/usr/bin/env python3
"""
KUBECENSUS SECTION MARKERS
--------------------------
Single-file captures are a concatenation of sections, each introduced by a
one-line marker:

    --- # Resource: <name>

The marker doubles as a YAML document separator with a trailing comment, so
the file stays loadable by any YAML parser. The serializer writes markers
with `format_marker` and the diff engine and importer read them back with
`parse_marker`; nothing else may build or scan for the string.

Author: KubeCensus Team
Date: 2026-10-18
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

MARKER_VERSION = 1
MARKER_PREFIX = "--- # Resource:"

# Tolerant of extra whitespace so hand-edited files still parse
_MARKER_PATTERN = re.compile(r"^---\s*#\s*Resource:\s*(?P<name>.+?)\s*$")


def format_marker(name: str) -> str:
    """The marker line for a section, without the trailing newline."""
    return f"{MARKER_PREFIX} {name}"


def parse_marker(line: str) -> Optional[str]:
    """Returns the section name if `line` is a marker, otherwise None."""
    match = _MARKER_PATTERN.match(line.strip())
    if not match:
        return None
    return match.group("name")


def extract_names(lines: Iterable[str]) -> List[str]:
    """Every section name in stream order, duplicates included."""
    names = []
    for line in lines:
        name = parse_marker(line)
        if name is not None:
            names.append(name)
    return names


@dataclass
class Section:
    name: str
    body: str


def split_sections(text: str) -> List[Section]:
    """
    Cuts a single-file capture into its sections. Text before the first
    marker is not part of any section and is discarded.
    """
    sections: List[Section] = []
    current: Optional[str] = None
    body: List[str] = []

    for line in text.splitlines():
        name = parse_marker(line)
        if name is not None:
            if current is not None:
                sections.append(Section(current, "\n".join(body) + "\n"))
            current, body = name, []
        elif current is not None:
            body.append(line)

    if current is not None:
        sections.append(Section(current, "\n".join(body) + "\n"))
    return sections
