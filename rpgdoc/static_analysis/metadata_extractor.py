"""Program Metadata Extractor

Program name, program kind and declared inputs/outputs.

Name resolution (first matching line wins, rules tried in order per line):
1. Explicit label:        PGM: CUSTUPD / PROGRAM: CUSTUPD
2. Header default name:   H DFTNAME(CUSTUPD)
3. Comment name label:    * Program Name: CUSTUPD

Kind: a PRINTER device makes a Report, otherwise any screen interaction
(WORKSTN device, EXFMT) makes it Interactive/Screen, otherwise Batch.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .rules import MatchRule, RuleCascade
from .source_lines import SourceLine, scan_window
from .statements import parm_field, parse_calc, parse_file_spec
from ..config import ANALYZER_CONFIG

logger = logging.getLogger(__name__)


class ProgramKind(Enum):
    BATCH = "Batch"
    INTERACTIVE = "Interactive/Screen"
    REPORT = "Report"


@dataclass(frozen=True)
class ProgramMetadata:
    """Identity of the analyzed program"""
    name: str
    kind: ProgramKind
    inputs: str                 # Declared-input summary
    outputs: str                # Declared-output summary
    entry_parameters: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "inputs": self.inputs,
            "outputs": self.outputs,
            "entry_parameters": list(self.entry_parameters),
        }


def _label_rule(tag: str, pattern: str, accept) -> MatchRule:
    inner = MatchRule.regex(tag, pattern)
    return MatchRule(
        tag=tag,
        matcher=lambda line: accept(line) and inner.matcher(line.raw),
        transform=lambda m: m.group(1).upper(),
    )


NAME_RULES = RuleCascade([
    _label_rule("explicit_label", r'\b(?:PGM|PROGRAM)\s*:\s*(\w+)',
                lambda line: True),
    _label_rule("header_default_name", r'DFTNAME\s*\(\s*(\w+)\s*\)',
                lambda line: line.is_spec('H')),
    _label_rule("comment_name_label", r'\b(?:PROGRAM|PGM)\s+NAME\s*[:=\-]\s*(\w+)',
                lambda line: line.is_comment),
])


class MetadataExtractor:
    """Derive ProgramMetadata from the line sequence"""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or ANALYZER_CONFIG
        self.sentinel = self.config["sentinels"]["program_name"]

    def extract(self, lines: List[SourceLine]) -> ProgramMetadata:
        name = self._program_name(lines)
        kind = self._program_kind(lines)
        inputs, outputs = self._declared_files(lines)
        entry_parameters = self._entry_parameters(lines)

        logger.info(f"Program {name}: kind={kind.value}, "
                    f"{len(entry_parameters)} entry parameter(s)")

        return ProgramMetadata(
            name=name,
            kind=kind,
            inputs=inputs,
            outputs=outputs,
            entry_parameters=entry_parameters,
        )

    def _program_name(self, lines: List[SourceLine]) -> str:
        for line in lines:
            hit = NAME_RULES.first(line)
            if hit:
                logger.debug(f"Program name from {hit.tag} on line {line.number}")
                return hit.value
        return self.sentinel

    def _program_kind(self, lines: List[SourceLine]) -> ProgramKind:
        devices = set()
        screen_ops = False
        for line in lines:
            spec = parse_file_spec(line)
            if spec:
                devices.add(spec.device)
                continue
            calc = parse_calc(line)
            if calc and calc.opcode == 'EXFMT':
                screen_ops = True

        if 'PRINTER' in devices:
            return ProgramKind.REPORT
        if 'WORKSTN' in devices or screen_ops:
            return ProgramKind.INTERACTIVE
        return ProgramKind.BATCH

    def _declared_files(self, lines: List[SourceLine]):
        inputs: List[str] = []
        outputs: List[str] = []
        for line in lines:
            spec = parse_file_spec(line)
            if spec is None:
                continue
            reads = spec.file_type in 'IUC'
            writes = spec.file_type in 'OUC' or spec.addition
            if reads and spec.name not in inputs:
                inputs.append(spec.name)
            if writes and spec.name not in outputs:
                outputs.append(spec.name)

        none = "None declared"
        return ", ".join(inputs) or none, ", ".join(outputs) or none

    def _entry_parameters(self, lines: List[SourceLine]) -> List[str]:
        for index, line in enumerate(lines):
            calc = parse_calc(line)
            if calc and calc.opcode == 'PLIST' and (calc.factor1 or "").upper() == '*ENTRY':
                return [
                    value for _, value in scan_window(
                        lines, index + 1, len(lines),
                        stop=lambda l: True,
                        match=parm_field,
                    )
                ]
        return []
