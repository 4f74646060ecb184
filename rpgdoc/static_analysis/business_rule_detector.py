"""Business Rule Detector for RPG

Conditional, looping and selection constructs in calculation specs.

Rule kinds, evaluated in order per statement:
- error_bookkeeping: indicator housekeeping (SETON/SETOFF, *INxx assignment)
  with no conditional, loop or selection opcode -> skipped
- screen_filter: conditional comparing a screen/format field -> "Screen Filter Rule N"
- conditional: any other IF / IFxx -> "Business Rule N"
- loop: DOW / DOU / DO / FOR -> "Business Rule N"
- selection: SELECT -> "Business Rule N"
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List

from .rules import MatchRule, RuleCascade
from .source_lines import SourceLine
from .statements import (
    CONDITIONAL_OPCODES, LOOP_OPCODES, CalcStatement, parse_calc,
)

logger = logging.getLogger(__name__)

RULE_PREFIX = "Business Rule"
SCREEN_RULE_PREFIX = "Screen Filter Rule"

INDICATOR_REFERENCE = re.compile(r'\*IN\s*\(?\s*\d{2}\s*\)?|\*IN[A-Z]{2}\b', re.IGNORECASE)

# Display-file field naming conventions: subfile/screen prefixes, option fields
SCREEN_FIELD = re.compile(
    r'\b(?:SFL|SCR|SCN|S\d|D\d|OPT|SEL)\w*|\b\w+OPT(?:ION)?\w*',
    re.IGNORECASE
)
COMPARISON = re.compile(r'<>|<=|>=|=|<|>')
QUOTED_LITERAL = re.compile(r"'[^']*'|\"[^\"]*\"")

_BOOKKEEPING_OPCODES = {'SETON', 'SETOFF'}
_ASSIGNMENT_OPCODES = {'EVAL', 'MOVE', 'MOVEL'}
_BRANCHING_OPCODES = CONDITIONAL_OPCODES | LOOP_OPCODES | {'SELECT'}


@dataclass(frozen=True)
class BusinessRule:
    """A detected business rule"""
    name: str
    description: str
    rule_type: str
    line_number: int = 0

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "description": self.description,
            "rule_type": self.rule_type,
            "line_number": self.line_number,
        }


def _is_error_bookkeeping(calc: CalcStatement) -> bool:
    if calc.opcode in _BRANCHING_OPCODES:
        return False
    if calc.opcode in _BOOKKEEPING_OPCODES:
        return True
    if calc.opcode in _ASSIGNMENT_OPCODES:
        target = calc.extended.split('=')[0] if calc.opcode == 'EVAL' else (calc.result or "")
        return bool(INDICATOR_REFERENCE.search(target))
    return False


def is_screen_comparison(condition: str) -> bool:
    """Condition compares a display-file field against something"""
    fields_only = QUOTED_LITERAL.sub("''", condition)
    return bool(SCREEN_FIELD.search(fields_only)) and bool(COMPARISON.search(condition))


RULE_CASCADE = RuleCascade([
    MatchRule("error_bookkeeping", _is_error_bookkeeping, lambda _: ""),
    MatchRule("screen_filter",
              lambda c: c.opcode in CONDITIONAL_OPCODES and is_screen_comparison(c.condition),
              lambda _: "Screen filter condition: {condition}"),
    MatchRule("conditional", lambda c: c.opcode in CONDITIONAL_OPCODES,
              lambda _: "Conditional check: {condition}"),
    MatchRule("loop", lambda c: c.opcode in LOOP_OPCODES,
              lambda _: "Loop condition: {opcode} {condition}"),
    MatchRule("selection", lambda c: c.opcode == 'SELECT',
              lambda _: "Selection structure for conditional processing"),
])


class BusinessRuleDetector:
    """Emit one rule per conditional, loop and selection opener, in source order"""

    def detect(self, lines: List[SourceLine]) -> List[BusinessRule]:
        rules: List[BusinessRule] = []
        counters = {RULE_PREFIX: 0, SCREEN_RULE_PREFIX: 0}
        skipped = 0

        for line in lines:
            calc = parse_calc(line)
            if calc is None:
                continue

            hit = RULE_CASCADE.first(calc)
            if hit is None:
                continue
            if hit.tag == "error_bookkeeping":
                skipped += 1
                continue

            prefix = SCREEN_RULE_PREFIX if hit.tag == "screen_filter" else RULE_PREFIX
            counters[prefix] += 1
            description = hit.value.format(
                condition=calc.condition or "(no condition)",
                opcode=calc.opcode,
            ).strip()

            rules.append(BusinessRule(
                name=f"{prefix} {counters[prefix]}",
                description=description,
                rule_type=hit.tag,
                line_number=line.number,
            ))

        logger.info(f"Detected {len(rules)} business rule(s) "
                    f"({counters[SCREEN_RULE_PREFIX]} screen filter)")
        logger.debug(f"Skipped {skipped} error-indicator bookkeeping statement(s)")
        return rules
