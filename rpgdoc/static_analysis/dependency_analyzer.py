"""Dependency Analyzer for RPG

External programs, display files, database files and message files the
program relies on, plus the ordered call stack.

- CALL / CALLB 'PGM' followed by PARM lines; CALLP PGM(a:b)
- EXFMT FORMAT (screen interaction)
- Declared files (by device) and MSGF references

Housekeeping calls (help, command execution, exit programs) are dropped
before anything is numbered.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List

from .file_operation_extractor import FileOperation
from .source_lines import SourceLine, scan_window
from .statements import CALL_OPCODES, CalcStatement, parm_field, parse_calc
from .validation_extractor import message_file_name

logger = logging.getLogger(__name__)

DATABASE_FILE = "Database File"
PROGRAM = "Program"
DISPLAY_FILE = "Display File"
PRINTER_FILE = "Printer File"
MESSAGE_FILE = "Message File"

HELP_PATTERN = re.compile(r'HELP|HLP|TXT', re.IGNORECASE)
HOUSEKEEPING_PATTERN = re.compile(r'HELP|HLP|QCMD|CMDEXC|EXIT', re.IGNORECASE)

_CALLP_TARGET = re.compile(r'^([A-Za-z@#$][\w@#$]*)\s*(?:\((.*)\))?')


@dataclass(frozen=True)
class Dependency:
    """Something outside the program that it relies on"""
    kind: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind}: {self.name}"

    def to_dict(self) -> Dict:
        return {"kind": self.kind, "name": self.name}


@dataclass(frozen=True)
class CallStackEntry:
    """One call or screen interaction, numbered in source order"""
    sequence: int
    called_name: str
    description: str
    parameters: List[str] = field(default_factory=list)
    line_number: int = 0

    def to_dict(self) -> Dict:
        return {
            "sequence": self.sequence,
            "called_name": self.called_name,
            "description": self.description,
            "parameters": list(self.parameters),
            "line_number": self.line_number,
        }


@dataclass(frozen=True)
class _Interaction:
    kind: str                 # PROGRAM or DISPLAY_FILE
    name: str
    parameters: List[str]
    line_number: int


def _call_target(calc: CalcStatement):
    """(program name, inline parameters) for a call statement"""
    if calc.opcode == 'CALLP':
        match = _CALLP_TARGET.match(calc.extended)
        if not match:
            return None, []
        args = [a.strip() for a in (match.group(2) or "").split(':') if a.strip()]
        return match.group(1).upper(), args
    target = (calc.factor2 or "").strip('\'"')
    return (target.upper() or None), []


class DependencyAnalyzer:
    """Build the dependency list and the call stack"""

    def _interactions(self, lines: List[SourceLine]) -> List[_Interaction]:
        interactions: List[_Interaction] = []

        for index, line in enumerate(lines):
            calc = parse_calc(line)
            if calc is None:
                continue

            if calc.opcode in CALL_OPCODES:
                name, parameters = _call_target(calc)
                if not name:
                    continue
                if HOUSEKEEPING_PATTERN.search(name):
                    logger.debug(f"Housekeeping call {name} on line {line.number} dropped")
                    continue
                if calc.opcode != 'CALLP':
                    parameters = [
                        value for _, value in scan_window(
                            lines, index + 1, len(lines),
                            stop=lambda l: True,
                            match=parm_field,
                        )
                    ]
                interactions.append(_Interaction(PROGRAM, name, parameters, line.number))

            elif calc.opcode == 'EXFMT' and calc.factor2:
                name = calc.factor2.upper()
                if HELP_PATTERN.search(name):
                    logger.debug(f"Help screen {name} on line {line.number} dropped")
                    continue
                interactions.append(_Interaction(DISPLAY_FILE, name, [], line.number))

        return interactions

    def call_stack(self, lines: List[SourceLine]) -> List[CallStackEntry]:
        entries = []
        for sequence, item in enumerate(self._interactions(lines), start=1):
            description = ("Program call operation" if item.kind == PROGRAM
                           else "Display file interaction")
            entries.append(CallStackEntry(
                sequence=sequence,
                called_name=item.name,
                description=description,
                parameters=list(item.parameters),
                line_number=item.line_number,
            ))
        logger.info(f"Built call stack with {len(entries)} entries")
        return entries

    def dependencies(self, lines: List[SourceLine],
                     file_operations: List[FileOperation]) -> List[Dependency]:
        found: Dict[Dependency, None] = {}

        for operation in file_operations:
            if HELP_PATTERN.search(operation.file_name):
                continue
            if operation.device == 'WORKSTN':
                kind = DISPLAY_FILE
            elif operation.device == 'PRINTER':
                kind = PRINTER_FILE
            else:
                kind = DATABASE_FILE
            found.setdefault(Dependency(kind, operation.file_name), None)

        for item in self._interactions(lines):
            found.setdefault(Dependency(item.kind, item.name), None)

        for line in lines:
            if line.is_comment:
                continue
            table_name = message_file_name(line)
            if table_name:
                found.setdefault(Dependency(MESSAGE_FILE, table_name), None)

        logger.info(f"Found {len(found)} dependencies")
        return list(found)
