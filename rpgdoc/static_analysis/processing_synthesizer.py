"""Subroutine / Main-Flow Synthesizer

Walks the source once with a two-state machine:

    SCANNING --BEGSR--> IN_SUBROUTINE --ENDSR--> SCANNING

A BEGSR while already inside a subroutine closes the open one first, and
the end of the source closes whatever is still open.

Each subroutine body is rewritten into pseudocode one statement at a time
through STATEMENT_TEMPLATES; statements with no template are dropped. The
body is capped at `pseudocode_max_lines` lines and always ends with
END FUNCTION, truncated or not.

Fallback ladder:
1. one step per subroutine
2. plus one main read loop step for the first record read outside every
   subroutine
3. a generic step when neither exists
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .message_extractor import find_message_id
from .source_lines import SourceLine
from .statements import (
    CONDITIONAL_OPCODES, RECORD_READ_OPCODES, WHEN_OPCODES, CalcStatement, parse_calc,
)
from ..config import ANALYZER_CONFIG

logger = logging.getLogger(__name__)

END_FUNCTION = "END FUNCTION"

MAIN_READ_LOOP = "Main Read Loop"
MAIN_PROCESSING = "Main Processing"

GENERIC_PSEUDOCODE = [
    "FUNCTION main_processing()",
    "  INITIALIZE program",
    "  PROCESS business logic",
    "  PERFORM cleanup",
    "  RETURN",
    END_FUNCTION,
]


class _State(Enum):
    SCANNING = "scanning"
    IN_SUBROUTINE = "in_subroutine"


@dataclass(frozen=True)
class ProcessingStep:
    """One documented unit of processing"""
    step_number: int
    process_name: str
    description: str
    parameters: List[str] = field(default_factory=list)
    pseudocode: List[str] = field(default_factory=list)
    truncated: bool = False
    line_number: int = 0

    def to_dict(self) -> Dict:
        return {
            "step_number": self.step_number,
            "process_name": self.process_name,
            "description": self.description,
            "parameters": list(self.parameters),
            "pseudocode": list(self.pseudocode),
            "truncated": self.truncated,
            "line_number": self.line_number,
        }


@dataclass
class _Subroutine:
    name: str
    line_number: int
    body: List[CalcStatement] = field(default_factory=list)


# Block roles: an opener pushes a closer, a continuation sits at the opener depth
_OPENS = "open"
_CONTINUES = "continue"
_CLOSES = "close"


def _key(calc: CalcStatement) -> str:
    return f" by key {calc.factor1}" if calc.factor1 else ""


def _file(calc: CalcStatement) -> str:
    return (calc.factor2 or "file").upper()


def _loop(calc: CalcStatement) -> str:
    if calc.opcode.startswith('DOU'):
        return f"REPEAT UNTIL {calc.condition}"
    if calc.opcode.startswith('DOW'):
        return f"WHILE {calc.condition} DO"
    if calc.opcode == 'FOR':
        return f"FOR {calc.extended} DO"
    return f"REPEAT {calc.factor2} TIMES" if calc.factor2 else "LOOP"


def _closer(calc: CalcStatement) -> str:
    if calc.opcode.startswith('DOU'):
        return "END REPEAT"
    if calc.opcode.startswith('DOW'):
        return "END WHILE"
    if calc.opcode == 'FOR':
        return "END FOR"
    return "END LOOP"


def _assignment(calc: CalcStatement) -> str:
    if calc.opcode in ('EVAL', 'EVALR'):
        return f"SET {calc.extended}"
    return f"SET {calc.result} = {calc.factor2}"


def _call(calc: CalcStatement) -> str:
    if calc.opcode == 'CALLP':
        return f"CALL {calc.extended}"
    return f"CALL program {(calc.factor2 or '').strip(chr(39))}"


# opcode -> (block role, renderer)
STATEMENT_TEMPLATES: Dict[str, Tuple[Optional[str], Callable[[CalcStatement], str]]] = {
    'ELSE': (_CONTINUES, lambda c: "ELSE"),
    'ELSEIF': (_CONTINUES, lambda c: f"ELSE IF {c.extended} THEN"),
    'OTHER': (_CONTINUES, lambda c: "OTHERWISE"),
    'SELECT': (_OPENS, lambda c: "SELECT"),
    'EVAL': (None, _assignment),
    'EVALR': (None, _assignment),
    'MOVE': (None, _assignment),
    'MOVEL': (None, _assignment),
    'Z-ADD': (None, _assignment),
    'CHAIN': (None, lambda c: f"READ {_file(c)} record{_key(c)}"),
    'SETLL': (None, lambda c: f"POSITION {_file(c)}{_key(c).replace('by', 'at')}"),
    'SETGT': (None, lambda c: f"POSITION {_file(c)}{_key(c).replace('by', 'after')}"),
    'UPDATE': (None, lambda c: f"UPDATE {_file(c)} record"),
    'WRITE': (None, lambda c: f"WRITE {_file(c)} record"),
    'DELETE': (None, lambda c: f"DELETE {_file(c)} record{_key(c)}"),
    'EXFMT': (None, lambda c: f"DISPLAY screen {_file(c)} and wait for input"),
    'EXSR': (None, lambda c: f"PERFORM {(c.factor2 or '').upper()}"),
    'CALL': (None, _call),
    'CALLB': (None, _call),
    'CALLP': (None, _call),
    'RETURN': (None, lambda c: "RETURN"),
    'LEAVE': (None, lambda c: "EXIT LOOP"),
    'ITER': (None, lambda c: "NEXT ITERATION"),
    'LEAVESR': (None, lambda c: "EXIT SUBROUTINE"),
}
for _opcode in CONDITIONAL_OPCODES:
    STATEMENT_TEMPLATES[_opcode] = (_OPENS, lambda c: f"IF {c.condition} THEN")
for _opcode in WHEN_OPCODES:
    STATEMENT_TEMPLATES[_opcode] = (_CONTINUES, lambda c: f"WHEN {c.condition}")
for _opcode in ('DO', 'DOU', 'DOW', 'FOR', 'DOUEQ', 'DOUNE', 'DOUGT', 'DOULT', 'DOUGE',
                'DOULE', 'DOWEQ', 'DOWNE', 'DOWGT', 'DOWLT', 'DOWGE', 'DOWLE'):
    STATEMENT_TEMPLATES[_opcode] = (_OPENS, _loop)
for _opcode in RECORD_READ_OPCODES:
    STATEMENT_TEMPLATES[_opcode] = (None, lambda c: f"READ next {_file(c)} record{_key(c)}")
for _opcode in ('ENDIF', 'ENDDO', 'ENDFOR', 'ENDSL', 'END'):
    STATEMENT_TEMPLATES[_opcode] = (_CLOSES, lambda c: "")

_DEFAULT_CLOSERS = {'ENDIF': "END IF", 'ENDDO': "END LOOP", 'ENDFOR': "END FOR",
                    'ENDSL': "END SELECT", 'END': "END"}


def _block_closer(calc: CalcStatement) -> str:
    if calc.opcode in CONDITIONAL_OPCODES:
        return "END IF"
    if calc.opcode == 'SELECT':
        return "END SELECT"
    return _closer(calc)


class PseudocodeWriter:
    """
    Rewrite a statement sequence into indented pseudocode.

    Nesting is tracked with a stack of pending closers; two spaces per level.
    The remaining-budget counter ends the body early, and END FUNCTION is
    appended unconditionally afterwards.
    """

    def __init__(self, max_lines: int):
        self.max_lines = max_lines

    def write(self, function_name: str,
              statements: List[CalcStatement]) -> Tuple[List[str], bool]:
        output = [f"FUNCTION {function_name}()"]
        closers: List[str] = []
        budget = self.max_lines
        truncated = False

        for calc in statements:
            rendered = self._render(calc, closers)
            if rendered is None:
                continue
            if budget <= 0:
                truncated = True
                break
            output.append(rendered)
            budget -= 1

        output.append(END_FUNCTION)
        return output, truncated

    @staticmethod
    def _indent(depth: int) -> str:
        return "  " * (depth + 1)

    def _render(self, calc: CalcStatement, closers: List[str]) -> Optional[str]:
        role, renderer = STATEMENT_TEMPLATES.get(calc.opcode, (None, None))

        if renderer is None or calc.opcode in ('EVAL', 'EVALR', 'MOVE', 'MOVEL'):
            message_id = find_message_id(calc.extended) or find_message_id(calc.factor1 or "")
            if message_id:
                return f"{self._indent(len(closers))}DISPLAY message {message_id}"
        if renderer is None:
            return None

        if role == _OPENS:
            line = f"{self._indent(len(closers))}{renderer(calc)}"
            closers.append(_block_closer(calc))
            return line
        if role == _CONTINUES:
            depth = max(len(closers) - 1, 0)
            return f"{self._indent(depth)}{renderer(calc)}"
        if role == _CLOSES:
            closer = closers.pop() if closers else _DEFAULT_CLOSERS[calc.opcode]
            return f"{self._indent(len(closers))}{closer}"
        return f"{self._indent(len(closers))}{renderer(calc)}"


class ProcessingSynthesizer:
    """Build the ordered list of processing steps"""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or ANALYZER_CONFIG
        self.writer = PseudocodeWriter(self.config["pseudocode_max_lines"])

    def synthesize(self, lines: List[SourceLine],
                   entry_parameters: Optional[List[str]] = None) -> List[ProcessingStep]:
        subroutines, main_read = self._scan(lines)

        drafts = []
        for subroutine in subroutines:
            name = subroutine.name.lstrip('*').lower() or "subroutine"
            pseudocode, truncated = self.writer.write(name, subroutine.body)
            if truncated:
                logger.debug(f"Pseudocode for {subroutine.name} truncated at "
                             f"{self.writer.max_lines} lines")
            drafts.append((subroutine.line_number, subroutine.name,
                           f"Subroutine: {subroutine.name}", [], pseudocode, truncated))

        if main_read is not None:
            record = _file(main_read)
            drafts.append((main_read.line_number, MAIN_READ_LOOP,
                           f"Process records from file {record}",
                           list(entry_parameters or []),
                           self._read_loop(record), False))

        if not drafts:
            drafts.append((0, MAIN_PROCESSING, "Primary program logic",
                           list(entry_parameters or []), list(GENERIC_PSEUDOCODE), False))

        drafts.sort(key=lambda draft: draft[0])
        steps = [
            ProcessingStep(
                step_number=number,
                process_name=name,
                description=description,
                parameters=parameters,
                pseudocode=pseudocode,
                truncated=truncated,
                line_number=line_number,
            )
            for number, (line_number, name, description, parameters, pseudocode, truncated)
            in enumerate(drafts, start=1)
        ]

        logger.info(f"Synthesized {len(steps)} processing step(s) "
                    f"({len(subroutines)} subroutine(s))")
        return steps

    @staticmethod
    def _read_loop(record: str) -> List[str]:
        return [
            "FUNCTION main_read_loop()",
            f"  READ {record} record",
            "  WHILE NOT end_of_file",
            "    PROCESS record",
            f"    READ next {record} record",
            "  END WHILE",
            END_FUNCTION,
        ]

    @staticmethod
    def _scan(lines: List[SourceLine]):
        """Split statements into subroutines; find the first top-level read"""
        state = _State.SCANNING
        subroutines: List[_Subroutine] = []
        current: Optional[_Subroutine] = None
        main_read: Optional[CalcStatement] = None

        for line in lines:
            calc = parse_calc(line)
            if calc is None:
                continue

            if calc.opcode == 'BEGSR':
                if state is _State.IN_SUBROUTINE:
                    logger.debug(f"Subroutine {current.name} closed by BEGSR on line {line.number}")
                current = _Subroutine((calc.factor1 or calc.factor2 or "SUBROUTINE").upper(),
                                      line.number)
                subroutines.append(current)
                state = _State.IN_SUBROUTINE
            elif calc.opcode == 'ENDSR':
                state = _State.SCANNING
                current = None
            elif state is _State.IN_SUBROUTINE:
                current.body.append(calc)
            elif calc.opcode in RECORD_READ_OPCODES and main_read is None:
                main_read = calc

        return subroutines, main_read
