"""Validation Extractor

Classifies statements into validation categories, independently of the
business rule scan:
- Empty Field Check: conditional comparing to '' / ' ' / *BLANK(S)
- Numeric Range Validation: conditional comparing to a numeric literal
- Record Existence Check: keyed read followed by a status test
- Message File Reference: explicit MSGF / MSGFILE reference

The first three look ahead a few lines for the nearest message id and
attach it with its text from the message table.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from .message_extractor import MessageCatalog, find_message_id
from .source_lines import SourceLine, scan_window
from .statements import (
    COMPARISON_SUFFIXES, CONDITIONAL_OPCODES, WHEN_OPCODES, parse_calc,
)
from ..config import ANALYZER_CONFIG

logger = logging.getLogger(__name__)

EMPTY_FIELD_CHECK = "Empty Field Check"
NUMERIC_RANGE_VALIDATION = "Numeric Range Validation"
RECORD_EXISTENCE_CHECK = "Record Existence Check"
MESSAGE_FILE_REFERENCE = "Message File Reference"

EMPTY_COMPARISON = re.compile(
    r'(\w+)\s*(?:=|<>)\s*(?:\'\s*\'|"\s*"|\*BLANKS?\b)', re.IGNORECASE
)
NUMERIC_COMPARISON = re.compile(
    r'([\w%()]+)\s*(<>|<=|>=|<|>)\s*(-?\d+(?:\.\d+)?|\*ZEROS?\b)', re.IGNORECASE
)
STATUS_TEST = re.compile(
    r'%FOUND|%EOF|%EQUAL|%ERROR|\*IN\s*\(?\s*\d{2}', re.IGNORECASE
)
MESSAGE_FILE_KEYWORD = re.compile(
    r'\bMSGF(?:ILE)?\s*\(\s*(?:\*LIBL/|\w+/)?([A-Za-z@#$][\w@#$]*)', re.IGNORECASE
)
MESSAGE_FILE_BARE = re.compile(
    r'\bMSGF(?:ILE)?\s+(?:\*LIBL/|\w+/)?([A-Za-z@#$][\w@#$]*)', re.IGNORECASE
)
_DECLARATION = re.compile(r'\bDCL-', re.IGNORECASE)

_EXISTENCE_OPCODES = {'CHAIN', 'SETLL', 'READE'}
_STATUS_OPCODES = CONDITIONAL_OPCODES | {'DOW', 'DOU', 'ELSEIF'} | WHEN_OPCODES


@dataclass(frozen=True)
class Validation:
    """A detected field or record validation"""
    validation_type: str
    description: str
    message_id: str
    message_text: str = ""
    line_number: int = 0

    def to_dict(self) -> Dict:
        return {
            "type": self.validation_type,
            "description": self.description,
            "message_id": self.message_id,
            "message_text": self.message_text,
            "line_number": self.line_number,
        }


def message_file_name(line: SourceLine) -> Optional[str]:
    """Name of the message file referenced on a line, if any"""
    match = MESSAGE_FILE_KEYWORD.search(line.raw)
    # MSGF as a declared field name: D  MSGF  S  10A, DCL-S MSGF CHAR(10)
    if match is None and not line.is_spec('D') and not _DECLARATION.search(line.raw):
        match = MESSAGE_FILE_BARE.search(line.raw)
    return match.group(1).upper() if match else None


def _status_test(line: SourceLine) -> Optional[str]:
    calc = parse_calc(line)
    if calc and calc.opcode in _STATUS_OPCODES and STATUS_TEST.search(calc.condition):
        return calc.condition
    return None


class ValidationExtractor:
    """Find validations and attach the nearest following message id"""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or ANALYZER_CONFIG
        windows = self.config["windows"]
        self.message_window = windows["message_lookahead"]
        self.status_window = windows["status_check"]
        self.not_available = self.config["sentinels"]["not_available"]

    def extract(self, lines: List[SourceLine], catalog: MessageCatalog) -> List[Validation]:
        validations: List[Validation] = []

        for index, line in enumerate(lines):
            if line.is_comment or line.is_blank:
                continue

            table_name = message_file_name(line)
            if table_name:
                validations.append(Validation(
                    validation_type=MESSAGE_FILE_REFERENCE,
                    description=f"Retrieves message text from message file {table_name}",
                    message_id=self.not_available,
                    line_number=line.number,
                ))

            calc = parse_calc(line)
            if calc is None:
                continue

            found = []
            if calc.opcode in CONDITIONAL_OPCODES or calc.opcode in WHEN_OPCODES:
                condition = self._fixed_form_condition(calc)
                empty = EMPTY_COMPARISON.search(condition)
                if empty:
                    found.append((EMPTY_FIELD_CHECK,
                                  f"Validates that required field {empty.group(1)} is not empty"))
                numeric = NUMERIC_COMPARISON.search(condition)
                if numeric:
                    found.append((NUMERIC_RANGE_VALIDATION,
                                  f"Validates numeric field {numeric.group(1)} within "
                                  f"acceptable range ({numeric.group(0)})"))

            elif calc.opcode in _EXISTENCE_OPCODES and calc.factor2:
                status = next(scan_window(lines, index + 1, self.status_window,
                                          match=_status_test), None)
                if status is not None:
                    key = calc.factor1 or self.not_available
                    found.append((RECORD_EXISTENCE_CHECK,
                                  f"Validates that record exists in {calc.factor2.upper()} "
                                  f"(key: {key}; status: {status[1]})"))

            if not found:
                continue

            message_id, message_text = self._nearest_message(lines, index, catalog)
            for validation_type, description in found:
                validations.append(Validation(
                    validation_type=validation_type,
                    description=description,
                    message_id=message_id,
                    message_text=message_text,
                    line_number=line.number,
                ))

        logger.info(f"Detected {len(validations)} validation(s)")
        return validations

    @staticmethod
    def _fixed_form_condition(calc) -> str:
        # NAME IFEQ ' ': the blank literal spans two tokens, extended keeps it whole
        if calc.opcode[-2:] in COMPARISON_SUFFIXES and len(calc.opcode) > 2 and calc.factor1:
            return f"{calc.factor1} {COMPARISON_SUFFIXES[calc.opcode[-2:]]} {calc.extended}"
        return calc.condition

    def _nearest_message(self, lines: List[SourceLine], index: int,
                         catalog: MessageCatalog):
        hit = next(scan_window(
            lines, index + 1, self.message_window,
            match=lambda l: None if l.is_comment else find_message_id(l.raw),
        ), None)
        if hit is None:
            return self.not_available, ""
        message_id = hit[1]
        return message_id, catalog.lookup(message_id) or ""
