"""Data Mapping Extractor

Source -> target field movements:
- MOVE / MOVEL / Z-ADD between fields           -> "direct assignment"
- EVAL TARGET = FIELD                           -> "direct assignment"
- EVAL TARGET = expression, ADD/SUB/MULT/DIV    -> "expression: <expr>"
- option literals in the WHEN branches following a SELECT
                                                -> "option 'X' triggers action"
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from .screen_action_extractor import option_dispatch
from .source_lines import SourceLine, scan_window
from .statements import WHEN_OPCODES, CalcStatement, is_identifier, parse_calc
from ..config import ANALYZER_CONFIG

logger = logging.getLogger(__name__)

DIRECT_ASSIGNMENT = "direct assignment"
CALCULATED = "Calculated"
OPTION_ACTION = "Program action"

_MOVE_OPCODES = {'MOVE', 'MOVEL', 'Z-ADD'}
_ARITHMETIC = {'ADD': '+', 'SUB': '-', 'MULT': '*', 'DIV': '/'}

# TARGET = expr, TARGET += expr
_ASSIGNMENT = re.compile(r'^([A-Za-z@#$][\w@#$.]*(?:\([^)]*\))?)\s*([-+*/]?)=\s*(.+)$')


@dataclass(frozen=True)
class DataMapping:
    """One field movement"""
    source_field: str
    target_field: str
    target_file: str
    transform_notes: str
    line_number: int = 0

    def to_dict(self) -> Dict:
        return {
            "source_field": self.source_field,
            "target_field": self.target_field,
            "target_file": self.target_file,
            "transform_notes": self.transform_notes,
            "line_number": self.line_number,
        }


class DataMappingExtractor:
    """Collect field movements and option dispatch mappings in source order"""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or ANALYZER_CONFIG
        self.option_window = self.config["windows"]["option_lookahead"]
        self.target_file = self.config["sentinels"]["target_file"]

    def extract(self, lines: List[SourceLine]) -> List[DataMapping]:
        mappings: List[DataMapping] = []
        seen_branches: Set[int] = set()

        for index, line in enumerate(lines):
            calc = parse_calc(line)
            if calc is None:
                continue

            if calc.opcode == 'SELECT':
                mappings.extend(self._option_mappings(lines, index, seen_branches))
                continue

            mapping = self._assignment(calc)
            if mapping is not None:
                mappings.append(mapping)

        logger.info(f"Found {len(mappings)} data mapping(s)")
        return mappings

    def _assignment(self, calc: CalcStatement) -> Optional[DataMapping]:
        if calc.opcode in _MOVE_OPCODES:
            source, target = calc.factor2, calc.result
            if len(calc.operands) < 2 or not is_identifier(source) or not is_identifier(target):
                return None
            return self._mapping(source.upper(), target, DIRECT_ASSIGNMENT, calc)

        if calc.opcode in ('EVAL', 'EVALR'):
            match = _ASSIGNMENT.match(calc.extended)
            if not match:
                return None
            target, operator, expression = match.group(1), match.group(2), match.group(3).strip()
            if operator:
                expression = f"{target} {operator} {expression}"
            elif is_identifier(expression):
                return self._mapping(expression.upper(), target, DIRECT_ASSIGNMENT, calc)
            return self._mapping(CALCULATED, target, f"expression: {expression}", calc)

        if calc.opcode in _ARITHMETIC and len(calc.operands) >= 2:
            target = calc.result
            if not is_identifier(target):
                return None
            left = calc.factor1 or target
            expression = f"{left} {_ARITHMETIC[calc.opcode]} {calc.factor2}"
            return self._mapping(CALCULATED, target, f"expression: {expression}", calc)

        return None

    def _mapping(self, source: str, target: str, notes: str,
                 calc: CalcStatement) -> DataMapping:
        return DataMapping(
            source_field=source,
            target_field=target.upper() if is_identifier(target) else target,
            target_file=self.target_file,
            transform_notes=notes,
            line_number=calc.line_number,
        )

    def _option_mappings(self, lines: List[SourceLine], index: int,
                         seen_branches: Set[int]) -> List[DataMapping]:
        def branch(line: SourceLine):
            calc = parse_calc(line)
            if calc is None or calc.opcode not in WHEN_OPCODES:
                return None
            return option_dispatch(calc)

        def end_of_select(line: SourceLine) -> bool:
            calc = parse_calc(line)
            return calc is not None and calc.opcode == 'ENDSL'

        found = []
        for position, dispatch in scan_window(lines, index + 1, self.option_window,
                                              stop=end_of_select, match=branch):
            if position in seen_branches:
                continue
            seen_branches.add(position)
            found.append(DataMapping(
                source_field=dispatch.field,
                target_field=OPTION_ACTION,
                target_file=self.target_file,
                transform_notes=f"option '{dispatch.literal}' triggers action",
                line_number=lines[position].number,
            ))
        return found
