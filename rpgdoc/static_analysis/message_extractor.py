"""Message handling

- MessageTableBuilder: classifies the optional annotation text as either a
  message table (id -> text) or free-form guidance text.
- MessageReferenceExtractor: finds message ids referenced in the source and
  resolves their text through the table.

A message id is 3 letters followed by 4 digits (CPF1234, USR0001).
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .rules import MatchRule, RuleCascade
from .source_lines import SourceLine
from .statements import MESSAGE_ID
from ..config import ANALYZER_CONFIG

logger = logging.getLogger(__name__)

CATALOG_TABLE = "message_table"
CATALOG_GUIDANCE = "guidance"
CATALOG_EMPTY = "empty"

# USR0001  10 / Customer number is required
TABLE_ROW = re.compile(r'^\s*([A-Za-z]{3}\d{4})\s+\d+\s*/?\s*(\S.*?)\s*$')


def _gated_id(match: re.Match) -> Optional[str]:
    """Format gate: exactly 3 letters + 4 digits after case normalization"""
    candidate = match.group(1).upper()
    return candidate if MESSAGE_ID.match(candidate) else None


MESSAGE_ID_RULES = RuleCascade([
    MatchRule.regex("directive",
                    r'\b(?:MSGID|MSG|MESSAGE)\s*\(?\s*[\'"]?([A-Za-z]{3}\d{4})\b',
                    _gated_id),
    MatchRule.regex("quoted", r'[\'"]([A-Za-z]{3}\d{4})[\'"]', _gated_id),
    MatchRule.regex("bare", r'\b([A-Za-z]{3}\d{4})\b', _gated_id),
])


def find_message_id(text: str) -> Optional[str]:
    """First message id on a line, by directive, quoted, then bare token"""
    hit = MESSAGE_ID_RULES.first(text)
    return hit.value if hit else None


@dataclass(frozen=True)
class MessageCatalog:
    """Classified annotation text"""
    kind: str
    entries: Dict[str, str] = field(default_factory=dict)
    guidance: str = ""

    @property
    def is_table(self) -> bool:
        return self.kind == CATALOG_TABLE

    def lookup(self, message_id: str) -> Optional[str]:
        return self.entries.get(message_id.upper())

    def to_dict(self) -> Dict:
        return {"kind": self.kind, "entries": dict(self.entries), "guidance": self.guidance}


@dataclass(frozen=True)
class Message:
    """A message referenced by the program"""
    id: str
    text: str
    line_number: int = 0

    def to_dict(self) -> Dict:
        return {"id": self.id, "text": self.text, "line_number": self.line_number}


class MessageTableBuilder:
    """
    Classify annotation text.

    At least `message_table_min_rows` rows shaped like
    "ABC1234 <number> [/] <text>" make it a message table and every other line
    is discarded. Fewer rows make the whole text guidance, kept verbatim.
    """

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or ANALYZER_CONFIG
        self.min_rows = self.config["message_table_min_rows"]

    def build(self, annotation_text: Optional[str]) -> MessageCatalog:
        if not annotation_text or not annotation_text.strip():
            return MessageCatalog(kind=CATALOG_EMPTY)

        entries: Dict[str, str] = {}
        rows = 0
        for raw in annotation_text.splitlines():
            match = TABLE_ROW.match(raw)
            if not match:
                continue
            rows += 1
            message_id = match.group(1).upper()
            if message_id not in entries:
                entries[message_id] = match.group(2)

        if rows >= self.min_rows:
            logger.info(f"Annotation classified as message table ({len(entries)} messages)")
            return MessageCatalog(kind=CATALOG_TABLE, entries=entries)

        logger.info(f"Annotation classified as guidance text ({rows} table-shaped row(s))")
        return MessageCatalog(kind=CATALOG_GUIDANCE, guidance=annotation_text)


class MessageReferenceExtractor:
    """Message ids referenced in the source, deduplicated in first-seen order"""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or ANALYZER_CONFIG
        self.not_found = self.config["sentinels"]["message_not_found"]

    def extract(self, lines: List[SourceLine], catalog: MessageCatalog) -> List[Message]:
        messages: Dict[str, Message] = {}

        for line in lines:
            message_id = find_message_id(line.raw)
            if message_id is None or message_id in messages:
                continue
            messages[message_id] = Message(
                id=message_id,
                text=catalog.lookup(message_id) or self.not_found,
                line_number=line.number,
            )

        resolved = sum(1 for m in messages.values() if m.text != self.not_found)
        logger.info(f"Found {len(messages)} message reference(s), {resolved} resolved")
        return list(messages.values())
