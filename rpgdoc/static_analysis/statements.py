"""Statement shapes for RPG calculation and file specifications

Pragmatic recognizers for the two specification types the extractors
depend on:
- C lines: factor 1, opcode, factor 2 / result, extended factor 2
- F lines: file name, type, designation, addition, keyed flag, device

Both tolerate text whose columns no longer line up (pasted or OCR input)
by falling back to whitespace tokens.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from .source_lines import SourceLine

# Known calculation opcodes (operation extenders are stripped before lookup)
OPCODES = {
    'ACQ', 'ADD', 'ADDDUR', 'ALLOC', 'AND', 'ANDEQ', 'ANDNE', 'ANDGT', 'ANDLT',
    'ANDGE', 'ANDLE', 'BEGSR', 'BITOFF', 'BITON', 'CAB', 'CALL', 'CALLB',
    'CALLP', 'CASEQ', 'CASNE', 'CASGT', 'CASLT', 'CASGE', 'CASLE', 'CAS',
    'CAT', 'CHAIN', 'CHECK', 'CHECKR', 'CLEAR', 'CLOSE', 'COMMIT', 'COMP',
    'DEFINE', 'DELETE', 'DIV', 'DO', 'DOU', 'DOUEQ', 'DOUNE', 'DOUGT',
    'DOULT', 'DOUGE', 'DOULE', 'DOW', 'DOWEQ', 'DOWNE', 'DOWGT', 'DOWLT',
    'DOWGE', 'DOWLE', 'DSPLY', 'DUMP', 'ELSE', 'ELSEIF', 'END', 'ENDCS',
    'ENDDO', 'ENDFOR', 'ENDIF', 'ENDMON', 'ENDSL', 'ENDSR', 'EVAL', 'EVALR',
    'EXCEPT', 'EXFMT', 'EXSR', 'EXTRCT', 'FEOD', 'FOR', 'FORCE', 'GOTO', 'IF',
    'IFEQ', 'IFNE', 'IFGT', 'IFLT', 'IFGE', 'IFLE', 'IN', 'ITER', 'KFLD',
    'KLIST', 'LEAVE', 'LEAVESR', 'LOOKUP', 'MONITOR', 'MOVE', 'MOVEA',
    'MOVEL', 'MULT', 'MVR', 'NEXT', 'OCCUR', 'ON-ERROR', 'OPEN', 'OR', 'OREQ',
    'ORNE', 'ORGT', 'ORLT', 'ORGE', 'ORLE', 'OTHER', 'OUT', 'PARM', 'PLIST',
    'POST', 'READ', 'READC', 'READE', 'READP', 'READPE', 'REALLOC', 'REL',
    'RESET', 'RETURN', 'ROLBK', 'SCAN', 'SELECT', 'SETGT', 'SETLL', 'SETOFF',
    'SETON', 'SHTDN', 'SORTA', 'SQRT', 'SUB', 'SUBDUR', 'SUBST', 'TAG',
    'TEST', 'TESTB', 'TESTN', 'TESTZ', 'TIME', 'UNLOCK', 'UPDATE', 'WHEN',
    'WHENEQ', 'WHENNE', 'WHENGT', 'WHENLT', 'WHENGE', 'WHENLE', 'WRITE',
    'XFOOT', 'XLATE', 'Z-ADD', 'Z-SUB',
}

CONDITIONAL_OPCODES = {'IF', 'IFEQ', 'IFNE', 'IFGT', 'IFLT', 'IFGE', 'IFLE'}
LOOP_OPCODES = {
    'DO', 'DOU', 'DOW', 'FOR', 'DOUEQ', 'DOUNE', 'DOUGT', 'DOULT', 'DOUGE',
    'DOULE', 'DOWEQ', 'DOWNE', 'DOWGT', 'DOWLT', 'DOWGE', 'DOWLE',
}
WHEN_OPCODES = {'WHEN', 'WHENEQ', 'WHENNE', 'WHENGT', 'WHENLT', 'WHENGE', 'WHENLE'}
KEYED_READ_OPCODES = {'CHAIN', 'SETLL', 'SETGT', 'READE', 'READPE', 'DELETE'}
RECORD_READ_OPCODES = {'READ', 'READC', 'READE', 'READP', 'READPE'}
CALL_OPCODES = {'CALL', 'CALLB', 'CALLP'}

# Fixed-form comparison suffixes (IFEQ, DOWNE, WHENGT ...)
COMPARISON_SUFFIXES = {
    'EQ': '=', 'NE': '<>', 'GT': '>', 'LT': '<', 'GE': '>=', 'LE': '<=',
}

DEVICES = {'DISK', 'WORKSTN', 'PRINTER', 'SEQ', 'SPECIAL'}

# Message identifiers: 3 letters + 4 digits (CPF1234, USR0001)
MESSAGE_ID = re.compile(r'^[A-Z]{3}\d{4}$')

_IDENTIFIER = re.compile(r'^[A-Za-z@#$][\w@#$]*$')
_EXTENDER = re.compile(r'\(.*\)$')
_CONDITIONING = re.compile(r'^N?\d{2}$', re.IGNORECASE)
_INDICATOR = re.compile(r'^(?:\d{2}|LR|H[1-9]|L[1-9]|K[A-Y]|U[1-8]|OF|O[A-G]|OV)$', re.IGNORECASE)
# Field length and decimal positions, columns 64-70
_LENGTH = re.compile(r'^\d{1,5}$')


def is_identifier(token: Optional[str]) -> bool:
    """True for a field/file name, false for literals and figurative constants"""
    return bool(token) and bool(_IDENTIFIER.match(token))


def base_opcode(token: str) -> str:
    """Strip operation extenders: CHAIN(N) -> CHAIN"""
    return _EXTENDER.sub('', token.upper())


@dataclass(frozen=True)
class CalcStatement:
    """A recognized calculation specification"""
    opcode: str                          # Base opcode, upper case
    factor1: Optional[str]
    operands: List[str] = field(default_factory=list)  # Tokens after the opcode
    extended: str = ""                   # Text after the opcode (free-form factor 2)
    line_number: int = 0

    @property
    def factor2(self) -> Optional[str]:
        return self.operands[0] if self.operands else None

    @property
    def result(self) -> Optional[str]:
        """Result field: last operand ahead of the length, decimals and indicators"""
        fields = list(self.operands)
        while fields and (_INDICATOR.match(fields[-1]) or _LENGTH.match(fields[-1])):
            fields.pop()
        return fields[-1] if fields else None

    @property
    def condition(self) -> str:
        """Condition text for IF/DOW/WHEN, rendered from fixed form when needed"""
        suffix = self.opcode[-2:]
        if len(self.opcode) > 2 and suffix in COMPARISON_SUFFIXES and self.factor1:
            right = self.factor2 or ""
            return f"{self.factor1} {COMPARISON_SUFFIXES[suffix]} {right}".strip()
        return self.extended


def parse_calc(line: SourceLine) -> Optional[CalcStatement]:
    """Recognize a C-spec line; None for anything else"""
    if not line.is_spec('C'):
        return None

    body = line.body
    tokens = list(re.finditer(r'\S+', body))
    if not tokens:
        return None

    # Conditioning indicators sit in columns 9-11 (before factor 1 at column 12);
    # an N-prefixed indicator is never a literal, wherever it lands
    start = 0
    while start < len(tokens) - 1 and _CONDITIONING.match(tokens[start].group()) \
            and (tokens[start].start() < 5 or tokens[start].group()[0] in 'Nn'):
        start += 1

    if base_opcode(tokens[start].group()) in OPCODES:
        factor1, op_index = None, start
    elif start + 1 < len(tokens) and base_opcode(tokens[start + 1].group()) in OPCODES:
        factor1, op_index = tokens[start].group(), start + 1
    else:
        return None

    op_match = tokens[op_index]
    return CalcStatement(
        opcode=base_opcode(op_match.group()),
        factor1=factor1,
        operands=[t.group() for t in tokens[op_index + 1:]],
        extended=body[op_match.end():].strip(),
        line_number=line.number,
    )


@dataclass(frozen=True)
class FileSpec:
    """A recognized file specification"""
    name: str
    file_type: str          # I, O, U, C
    designation: str        # P, S, F, R, T or ''
    addition: bool          # 'A' = records may be added
    keyed: bool
    device: str
    keywords: str = ""
    line_number: int = 0


def _columnar_file_spec(body: str) -> Optional[FileSpec]:
    # body starts at column 7
    if len(body) < 30:
        return None
    name = body[0:10].strip()
    file_type = body[10:11].upper()
    device = body[29:36].strip().upper()
    if not is_identifier(name) or ' ' in name or file_type not in 'IOUC' \
            or not file_type or device not in DEVICES:
        return None
    return FileSpec(
        name=name.upper(),
        file_type=file_type,
        designation=body[11:12].strip().upper(),
        addition=body[13:14].upper() == 'A',
        keyed=body[27:28].upper() == 'K' or 'KEYED' in body.upper(),
        device=device,
        keywords=body[37:].strip(),
    )


def _token_file_spec(body: str) -> Optional[FileSpec]:
    tokens = body.split()
    if len(tokens) < 2 or not is_identifier(tokens[0]):
        return None
    flags = tokens[1].upper()
    if not flags or flags[0] not in 'IOUC' or len(flags) > 2:
        return None

    device_index = next((i for i, t in enumerate(tokens) if t.upper() in DEVICES), None)
    if device_index is None:
        return None
    between = [t.upper() for t in tokens[2:device_index]]

    return FileSpec(
        name=tokens[0].upper(),
        file_type=flags[0],
        designation=flags[1] if len(flags) > 1 else '',
        addition='A' in between,
        keyed='K' in between or 'KEYED' in body.upper(),
        device=tokens[device_index].upper(),
        keywords=' '.join(tokens[device_index + 1:]),
    )


def parse_file_spec(line: SourceLine) -> Optional[FileSpec]:
    """Recognize an F-spec line; None for anything else"""
    if not line.is_spec('F'):
        return None
    spec = _columnar_file_spec(line.body) or _token_file_spec(line.body)
    if spec is None:
        return None
    return FileSpec(
        name=spec.name,
        file_type=spec.file_type,
        designation=spec.designation,
        addition=spec.addition,
        keyed=spec.keyed,
        device=spec.device,
        keywords=spec.keywords,
        line_number=line.number,
    )


def parm_field(line: SourceLine) -> Optional[str]:
    """Result field of a PARM line; None for anything else"""
    calc = parse_calc(line)
    if calc and calc.opcode == 'PARM':
        return calc.result
    return None
