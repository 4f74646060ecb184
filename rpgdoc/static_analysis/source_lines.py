"""Line Source for RPG Static Analysis

Splits raw source text into an ordered, immutable sequence of lines and
classifies each one by specification type. No further lexing happens here;
statement shapes are recognized by the extractors (see statements.py).

Fixed-form layout:
- Columns 1-5: sequence area (blank or digits)
- Column 6: specification letter (H, F, D, C, I, O, P)
- Column 7: '*' marks a comment
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple

SPEC_LETTERS = "HFDCIOP"

_LINE_BREAK = re.compile(r'\r\n|\r|\n')
_LOOSE_FILE_SPEC = re.compile(r'^F\w+\s+[IOUC]', re.IGNORECASE)


@dataclass(frozen=True)
class SourceLine:
    """One physical line of RPG source"""
    number: int          # 1-based line number
    raw: str             # Line as written
    spec: str            # Specification letter, '' when unknown
    body: str            # Text after the specification letter
    is_comment: bool = False

    @property
    def is_blank(self) -> bool:
        return not self.raw.strip()

    def is_spec(self, letter: str) -> bool:
        return self.spec == letter and not self.is_comment


def _classify(raw: str) -> Tuple[str, str, bool]:
    """Return (spec letter, body, is_comment) for a raw line"""
    stripped = raw.strip()
    if not stripped:
        return "", "", False
    if stripped.startswith("//"):
        return "", stripped, True

    # Column-aligned fixed form
    area = raw[:5]
    if (len(raw) >= 6 and raw[5].upper() in SPEC_LETTERS
            and (not area.strip() or area.strip().isdigit())):
        body = raw[6:].rstrip()
        return raw[5].upper(), body, body.startswith("*")

    if stripped.startswith("*"):
        return "", stripped, True

    # Misaligned text (pasted or OCR-captured): trust the first letter only
    # when the rest of the line cannot be mistaken for an identifier
    letter = stripped[0].upper()
    if letter in SPEC_LETTERS:
        if len(stripped) == 1 or stripped[1] in " \t":
            body = stripped[1:].rstrip()
            return letter, body, body.strip().startswith("*")
        if letter == "F" and _LOOSE_FILE_SPEC.match(stripped):
            return "F", stripped[1:].rstrip(), False

    return "", stripped, False


def split_lines(source_text: str) -> List[SourceLine]:
    """Split source text into classified lines, preserving order and blanks"""
    lines = []
    for index, raw in enumerate(_LINE_BREAK.split(source_text or "")):
        spec, body, is_comment = _classify(raw)
        lines.append(SourceLine(
            number=index + 1,
            raw=raw,
            spec=spec,
            body=body,
            is_comment=is_comment,
        ))
    return lines


def scan_window(lines: Sequence[SourceLine], start: int, max_window: int,
                stop: Optional[Callable[[SourceLine], bool]] = None,
                match: Optional[Callable[[SourceLine], Any]] = None
                ) -> Iterator[Tuple[int, Any]]:
    """
    Bounded forward scan over lines[start:start + max_window].

    Yields (index, value) for every line where match returns a value other
    than None. A line that does not match but satisfies stop ends the scan.
    Reaching the end of the window or of the source ends it as well.
    """
    end = min(len(lines), max(start, 0) + max(max_window, 0))
    for index in range(max(start, 0), end):
        line = lines[index]
        value = match(line) if match else None
        if value is not None:
            yield index, value
        elif stop is not None and stop(line):
            return
