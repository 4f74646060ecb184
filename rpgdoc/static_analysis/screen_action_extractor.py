"""Screen Action Extractor

Option-dispatch branches: a conditional or selection branch comparing a
user-entered option field against a short literal, e.g.

    C                   WHEN      OPTION = '2'
    C     SFLOPT        IFEQ      '4'
    C     OPT           CASEQ     '5'           PRTSR

Each literal is classified once (first classification wins) through a fixed
ladder: add, edit, delete, print/view, otherwise a generic "process option".
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional

from .rules import MatchRule, RuleCascade
from .source_lines import SourceLine
from .statements import CONDITIONAL_OPCODES, WHEN_OPCODES, CalcStatement, parse_calc

logger = logging.getLogger(__name__)

OPTION_FIELD = re.compile(r'OPT|SEL|ACTION|CHOICE', re.IGNORECASE)

_FREE_FORM_DISPATCH = re.compile(
    r'\b([A-Za-z@#$][\w@#$]*)\s*=\s*(?:\'([^\']{1,4})\'|"([^"]{1,4})"|(\d{1,2})\b)'
)
_LITERAL = re.compile(r'^(?:\'([^\']{1,4})\'|"([^"]{1,4})"|(\d{1,2}))$')
_DISPATCH_OPCODES = CONDITIONAL_OPCODES | WHEN_OPCODES | {'CASEQ', 'ELSEIF'}


class OptionDispatch(NamedTuple):
    field: str
    literal: str


@dataclass(frozen=True)
class ScreenAction:
    """A user option and what selecting it does"""
    option: str
    description: str
    action: str
    line_number: int = 0

    def to_dict(self) -> Dict:
        return {
            "option": self.option,
            "description": self.description,
            "action": self.action,
            "line_number": self.line_number,
        }


def _literal_value(match: re.Match) -> str:
    return next(g for g in match.groups()[-3:] if g is not None).strip().upper()


def option_dispatch(calc: Optional[CalcStatement]) -> Optional[OptionDispatch]:
    """The (option field, literal) a branch statement dispatches on, if any"""
    if calc is None or calc.opcode not in _DISPATCH_OPCODES:
        return None

    # Fixed form: OPTION IFEQ '2'
    if calc.opcode[-2:] == 'EQ' and calc.factor1 and calc.factor2:
        literal = _LITERAL.match(calc.factor2)
        if literal and OPTION_FIELD.search(calc.factor1):
            value = _literal_value(literal)
            return OptionDispatch(calc.factor1.upper(), value) if value else None
        return None

    for match in _FREE_FORM_DISPATCH.finditer(calc.extended):
        if OPTION_FIELD.search(match.group(1)):
            value = _literal_value(match)
            if value:
                return OptionDispatch(match.group(1).upper(), value)
    return None


def _category(tag: str, pattern: str, description, action: str) -> MatchRule:
    inner = re.compile(pattern)
    return MatchRule(
        tag=tag,
        matcher=lambda option: inner.match(option),
        transform=lambda m: (description(m.string) if callable(description) else description,
                             action),
    )


ACTION_LADDER = RuleCascade([
    _category("add", r'^(?:1|A|ADD|NEW|CRT)$', "Add new record",
              "Displays a blank entry screen, validates the input and writes a new record"),
    _category("edit", r'^(?:2|C|E|M|CHG|EDT|UPD|MOD)$', "Edit existing record",
              "Retrieves the selected record, displays it for change and updates it"),
    _category("delete", r'^(?:4|D|DEL|DLT)$', "Delete record",
              "Confirms the selection and deletes the record from the file"),
    _category("print_view", r'^(?:5|6|P|V|PRT|DSP|VW)$', "Print/View record",
              "Retrieves the selected record and displays or prints it without changes"),
    _category("other", r'.', lambda option: f"Process option: {option}",
              "Determined by subsequent processing logic"),
])


class ScreenActionExtractor:
    """Classify every distinct option literal the program dispatches on"""

    def extract(self, lines: List[SourceLine]) -> List[ScreenAction]:
        actions: Dict[str, ScreenAction] = {}

        for line in lines:
            dispatch = option_dispatch(parse_calc(line))
            if dispatch is None:
                continue
            if dispatch.literal in actions:
                logger.debug(f"Option '{dispatch.literal}' on line {line.number} already classified")
                continue

            hit = ACTION_LADDER.first(dispatch.literal)
            description, action = hit.value
            actions[dispatch.literal] = ScreenAction(
                option=dispatch.literal,
                description=description,
                action=action,
                line_number=line.number,
            )

        logger.info(f"Found {len(actions)} screen option(s)")
        return list(actions.values())
