"""Recover one JSON object from free-form model output.

Models are asked for bare JSON but routinely wrap it in prose, markdown fences
or slightly broken syntax. Each strategy below is a pure ``text -> dict | None``
function; ``extract_json`` tries them in order and stops at the first object.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable

logger = logging.getLogger(__name__)

Strategy = Callable[[str], "dict | None"]

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```", re.IGNORECASE)
_FENCE_MARKERS = re.compile(r"```(?:json)?", re.IGNORECASE)
_TRAILING_COMMA_OBJECT = re.compile(r",\s*}")
_TRAILING_COMMA_ARRAY = re.compile(r",\s*]")
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_]\w*)\s*:")
_BARE_VALUE = re.compile(r":\s*([^\",{\[\]}\s][^\",{\[\]}]*?)(\s*[,}])")
_JSON_LITERAL = re.compile(r"-?\d+(\.\d+)?([eE][+-]?\d+)?|true|false|null")
_STRING_LITERAL = re.compile(r'"(?:\\.|[^"\\])*"')


def _loads_object(candidate: str) -> dict | None:
    try:
        parsed: Any = json.loads(candidate)
    except (json.JSONDecodeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _balanced_end(text: str, start: int) -> int | None:
    """Index of the brace closing the one at *start*, ignoring braces inside strings."""
    depth = 0
    in_string = False
    escape = False

    for i in range(start, len(text)):
        ch = text[i]

        if escape:
            escape = False
            continue

        if ch == "\\":
            if in_string:
                escape = True
            continue

        if ch == '"':
            in_string = not in_string
            continue

        if in_string:
            continue

        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i

    return None


def first_balanced_object(text: str) -> dict | None:
    """Parse the first top-level balanced ``{...}`` span that is valid JSON.

    A span that fails to parse is skipped as a whole, so a nested object is
    never returned in place of its malformed parent.
    """
    pos = text.find("{")
    while pos != -1:
        end = _balanced_end(text, pos)
        if end is None:
            return None
        parsed = _loads_object(text[pos : end + 1])
        if parsed is not None:
            return parsed
        pos = text.find("{", end + 1)
    return None


def fenced_code_block(text: str) -> dict | None:
    """Parse the body of the first markdown code fence holding an object."""
    match = _FENCED_BLOCK.search(text)
    if not match:
        return None
    return _loads_object(match.group(1))


def line_scan_block(text: str) -> dict | None:
    """Join lines from the first one starting with ``{`` until brace depth returns to zero."""
    lines = text.split("\n")
    start = None
    depth = 0

    for i, raw_line in enumerate(lines):
        line = raw_line.strip()
        if start is None:
            if not line.startswith("{"):
                continue
            start = i
        depth += line.count("{") - line.count("}")
        if depth <= 0:
            return _loads_object("\n".join(lines[start : i + 1]))

    return None


def _quote_bare_value(match: re.Match) -> str:
    value, terminator = match.group(1), match.group(2)
    if _JSON_LITERAL.fullmatch(value.strip()):
        return f":{value}{terminator}"
    return f':"{value.strip()}"{terminator}'


def _repair_segment(segment: str) -> str:
    segment = _TRAILING_COMMA_OBJECT.sub("}", segment)
    segment = _TRAILING_COMMA_ARRAY.sub("]", segment)
    segment = _BARE_KEY.sub(r'\1"\2":', segment)
    return _BARE_VALUE.sub(_quote_bare_value, segment)


def _outside_strings(text: str, fix: Callable[[str], str]) -> str:
    """Apply *fix* to the stretches between string literals; literals are kept as-is."""
    parts = []
    pos = 0
    for match in _STRING_LITERAL.finditer(text):
        parts.append(fix(text[pos : match.start()]))
        parts.append(match.group(0))
        pos = match.end()
    parts.append(fix(text[pos:]))
    return "".join(parts)


def repair_common_defects(text: str) -> dict | None:
    """Fix typical formatting slips and parse the result.

    Strips fences, trims prose around the outermost braces, drops trailing
    commas, quotes bare keys and quotes bare non-literal values. Text inside
    double-quoted strings is never rewritten.
    """
    cleaned = _FENCE_MARKERS.sub("", text).strip()

    first, last = cleaned.find("{"), cleaned.rfind("}")
    if first != -1 and last > first:
        cleaned = cleaned[first : last + 1]

    return _loads_object(_outside_strings(cleaned, _repair_segment))


RECOVERY_STRATEGIES: tuple[Strategy, ...] = (
    first_balanced_object,
    fenced_code_block,
    line_scan_block,
    repair_common_defects,
)


def extract_json(text: Any) -> dict | None:
    """Return the first object any strategy recovers from *text*, else ``None``."""
    if not isinstance(text, str) or not text.strip():
        return None

    for strategy in RECOVERY_STRATEGIES:
        result = strategy(text)
        if result is not None:
            logger.debug("Recovered model JSON via %s", strategy.__name__)
            return result

    logger.warning("All JSON extraction strategies failed: %s", text[:200])
    return None
