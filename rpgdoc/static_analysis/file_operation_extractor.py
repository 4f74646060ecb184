"""File Operation Extractor

Per declared file: purpose, access method and key fields.

Two passes over the source:
1. KeyListResolver builds the KLIST table (name -> ordered KFLD fields)
2. Each F-spec is described, then every keyed operation (CHAIN, SETLL, ...)
   against that file contributes a key candidate. A factor 1 that names a
   key list is a composite candidate; anything else is a simple candidate.
   Composite candidates always win, wherever they appear in the source.

The first declaration of a file name is authoritative.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .source_lines import SourceLine, scan_window
from .statements import (
    KEYED_READ_OPCODES, FileSpec, is_identifier, parse_calc, parse_file_spec,
)
from ..config import ANALYZER_CONFIG

logger = logging.getLogger(__name__)

PURPOSE_INPUT = "Input"
PURPOSE_OUTPUT = "Output"
PURPOSE_UPDATE = "Update"
PURPOSE_INPUT_OUTPUT = "Input/Output"

ACCESS_KEYED = "Keyed"
ACCESS_SEQUENTIAL = "Sequential"

KEY_PRIMARY = "Primary Key"
KEY_COMPOSITE = "Composite Key"


@dataclass(frozen=True)
class KeyListDefinition:
    """A named KLIST and its ordered KFLD members"""
    name: str
    fields: Tuple[str, ...]
    line_number: int = 0


@dataclass(frozen=True)
class FileOperation:
    """How the program uses one declared file"""
    file_name: str
    purpose: str
    access_type: str
    key_fields: str
    key_field_kind: str
    device: str = "DISK"
    line_number: int = 0

    def to_dict(self) -> Dict:
        return {
            "file_name": self.file_name,
            "purpose": self.purpose,
            "access_type": self.access_type,
            "key_fields": self.key_fields,
            "key_field_kind": self.key_field_kind,
            "device": self.device,
            "line_number": self.line_number,
        }


class KeyListResolver:
    """
    Collect KLIST definitions.

    Each KLIST opens a bounded window (config windows.key_list_members);
    KFLD lines are members, blank lines are skipped, anything else ends the
    run. Key lists without members are dropped; the first definition of a
    name wins.
    """

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or ANALYZER_CONFIG
        self.window = self.config["windows"]["key_list_members"]

    def resolve(self, lines: List[SourceLine]) -> Dict[str, KeyListDefinition]:
        key_lists: Dict[str, KeyListDefinition] = {}

        for index, line in enumerate(lines):
            calc = parse_calc(line)
            if not calc or calc.opcode != 'KLIST' or not is_identifier(calc.factor1):
                continue

            name = calc.factor1.upper()
            members = [
                value for _, value in scan_window(
                    lines, index + 1, self.window,
                    stop=lambda l: not l.is_blank,
                    match=_key_field,
                )
            ]

            if not members:
                logger.debug(f"Key list {name} on line {line.number} has no KFLD members")
                continue
            if name in key_lists:
                logger.debug(f"Duplicate key list {name} on line {line.number} ignored")
                continue

            key_lists[name] = KeyListDefinition(
                name=name, fields=tuple(members), line_number=line.number
            )

        logger.info(f"Resolved {len(key_lists)} key list(s)")
        return key_lists


def _key_field(line: SourceLine) -> Optional[str]:
    calc = parse_calc(line)
    if calc and calc.opcode == 'KFLD' and calc.result:
        return calc.result.upper()
    return None


class FileOperationExtractor:
    """Describe every declared file"""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or ANALYZER_CONFIG
        self.not_available = self.config["sentinels"]["not_available"]
        self.key_lists = KeyListResolver(self.config)

    def extract(self, lines: List[SourceLine],
                key_lists: Optional[Dict[str, KeyListDefinition]] = None) -> List[FileOperation]:
        """
        Extract file operations.

        Args:
            lines: Source lines
            key_lists: Pre-built KLIST table; resolved here when omitted

        Returns:
            FileOperations in declaration order
        """
        if key_lists is None:
            key_lists = self.key_lists.resolve(lines)

        operations: Dict[str, FileOperation] = {}
        for line in lines:
            spec = parse_file_spec(line)
            if spec is None:
                continue
            if spec.name in operations:
                logger.debug(f"Redeclaration of {spec.name} on line {line.number} ignored")
                continue

            key_fields, key_kind = self._resolve_keys(lines, spec.name, key_lists)
            operations[spec.name] = FileOperation(
                file_name=spec.name,
                purpose=self._purpose(spec),
                access_type=ACCESS_KEYED if spec.keyed else ACCESS_SEQUENTIAL,
                key_fields=key_fields,
                key_field_kind=key_kind,
                device=spec.device,
                line_number=line.number,
            )

        logger.info(f"Found {len(operations)} file declaration(s)")
        return list(operations.values())

    @staticmethod
    def _purpose(spec: FileSpec) -> str:
        if spec.file_type == 'U':
            return PURPOSE_UPDATE
        if spec.file_type == 'C' or (spec.file_type == 'I' and spec.addition):
            return PURPOSE_INPUT_OUTPUT
        if spec.file_type == 'O':
            return PURPOSE_OUTPUT
        return PURPOSE_INPUT

    def _resolve_keys(self, lines: List[SourceLine], file_name: str,
                      key_lists: Dict[str, KeyListDefinition]) -> Tuple[str, str]:
        composite: List[KeyListDefinition] = []
        simple: List[str] = []

        for line in lines:
            calc = parse_calc(line)
            if not calc or calc.opcode not in KEYED_READ_OPCODES:
                continue
            if (calc.factor2 or "").upper() != file_name:
                continue
            key = (calc.factor1 or "").upper()
            if not is_identifier(key):
                continue

            if key in key_lists:
                composite.append(key_lists[key])
            elif key not in simple:
                simple.append(key)

        if composite:
            # First composite key list in source order
            return ", ".join(composite[0].fields), KEY_COMPOSITE
        if simple:
            return ", ".join(simple), KEY_PRIMARY
        return self.not_available, self.not_available
