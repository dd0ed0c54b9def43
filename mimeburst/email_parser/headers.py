"""
mimeburst/email_parser/headers.py
---------------------------------
Header block parsing into a case-insensitive, multi-valued field map.

Malformed lines (no colon, or nothing before it) are skipped, as are
continuation lines that show up before the first field.
"""

from typing import Dict, Iterable, Iterator, List, Tuple

HEADER_CHARSET = "utf-8"


class PartHeader:
    """
    Field name (lowercased) -> ordered list of raw values.
    The first-seen spelling of each name is kept for display.
    """

    def __init__(self, fields: Iterable[Tuple[str, str]] = ()):
        self._values: Dict[str, List[str]] = {}
        self._names: Dict[str, str] = {}
        for name, value in fields:
            key = name.lower()
            if key not in self._values:
                self._values[key] = []
                self._names[key] = name
            self._values[key].append(value)

    def first_value(self, name: str) -> str:
        values = self._values.get(name.lower())
        return values[0] if values else ""

    def all_values(self, name: str) -> List[str]:
        return list(self._values.get(name.lower(), []))

    def items(self) -> Iterator[Tuple[str, List[str]]]:
        for key, values in self._values.items():
            yield self._names[key], list(values)

    def __contains__(self, name) -> bool:
        return isinstance(name, str) and name.lower() in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"PartHeader({dict(self.items())!r})"


def _strip_eol(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n") or line.endswith("\r"):
        return line[:-1]
    return line


def parse_header_lines(lines: Iterable[str]) -> PartHeader:
    """
    Build a PartHeader from raw header lines (line endings optional).
    Folded continuation lines are joined to the previous value with one space.
    """
    fields: List[List[str]] = []

    for raw in lines:
        line = _strip_eol(raw)
        if not line:
            continue

        if line[0] in " \t":
            if fields:
                fields[-1][1] += " " + line.lstrip(" \t")
            continue

        name, sep, value = line.partition(":")
        name = name.strip()
        if not sep or not name:
            continue
        fields.append([name, value.strip(" \t")])

    return PartHeader((name, value.rstrip(" \t")) for name, value in fields)


def parse_header_block(block: bytes) -> PartHeader:
    """
    Parse a header block as cut out of the stream by the tokenizer.
    """
    text = block.decode(HEADER_CHARSET, "replace")
    return parse_header_lines(text.split("\n"))
