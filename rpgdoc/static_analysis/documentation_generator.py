"""Documentation Generator

Orchestrates all static analysis components into one ProgramModel and
renders it with the ReportFormatter.

Order matters in two places only: the key list table is built before
file operations, and the message catalog before anything that resolves
message text. Everything else reads the same immutable line sequence.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .business_rule_detector import BusinessRule, BusinessRuleDetector
from .data_mapping_extractor import DataMapping, DataMappingExtractor
from .dependency_analyzer import CallStackEntry, Dependency, DependencyAnalyzer
from .file_operation_extractor import FileOperation, FileOperationExtractor, KeyListResolver
from .message_extractor import (
    Message, MessageCatalog, MessageReferenceExtractor, MessageTableBuilder,
)
from .metadata_extractor import MetadataExtractor, ProgramMetadata
from .processing_synthesizer import ProcessingStep, ProcessingSynthesizer
from .screen_action_extractor import ScreenAction, ScreenActionExtractor
from .source_lines import split_lines
from .validation_extractor import Validation, ValidationExtractor
from ..config import ANALYZER_CONFIG
from ..report_formatter import ReportFormatter

logger = logging.getLogger(__name__)


class SourceRejectedError(ValueError):
    """Source text is empty or blank"""


@dataclass
class ProgramModel:
    """Everything derived from one analysis run"""
    metadata: ProgramMetadata
    catalog: MessageCatalog
    file_operations: List[FileOperation] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)
    business_rules: List[BusinessRule] = field(default_factory=list)
    dependencies: List[Dependency] = field(default_factory=list)
    validations: List[Validation] = field(default_factory=list)
    data_mappings: List[DataMapping] = field(default_factory=list)
    call_stack: List[CallStackEntry] = field(default_factory=list)
    screen_actions: List[ScreenAction] = field(default_factory=list)
    processing_steps: List[ProcessingStep] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "metadata": self.metadata.to_dict(),
            "message_catalog": self.catalog.to_dict(),
            "file_operations": [op.to_dict() for op in self.file_operations],
            "messages": [m.to_dict() for m in self.messages],
            "business_rules": [r.to_dict() for r in self.business_rules],
            "dependencies": [d.to_dict() for d in self.dependencies],
            "validations": [v.to_dict() for v in self.validations],
            "data_mappings": [m.to_dict() for m in self.data_mappings],
            "call_stack": [c.to_dict() for c in self.call_stack],
            "screen_actions": [a.to_dict() for a in self.screen_actions],
            "processing_steps": [s.to_dict() for s in self.processing_steps],
        }


class DocumentationGenerator:
    """
    Generate RPG program documentation from source text.

    Every extractor degrades to its documented default on a pattern miss;
    the only rejected input is empty source text.
    """

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or ANALYZER_CONFIG
        self.metadata = MetadataExtractor(self.config)
        self.key_lists = KeyListResolver(self.config)
        self.file_operations = FileOperationExtractor(self.config)
        self.message_table = MessageTableBuilder(self.config)
        self.message_references = MessageReferenceExtractor(self.config)
        self.business_rules = BusinessRuleDetector()
        self.dependencies = DependencyAnalyzer()
        self.validations = ValidationExtractor(self.config)
        self.data_mappings = DataMappingExtractor(self.config)
        self.screen_actions = ScreenActionExtractor()
        self.synthesizer = ProcessingSynthesizer(self.config)
        self.formatter = ReportFormatter(self.config)

    def build_model(self, source_text: str,
                    annotation_text: Optional[str] = None) -> ProgramModel:
        """
        Analyze source text.

        Args:
            source_text: RPG source, fixed or loosely aligned
            annotation_text: Optional message table or free-form guidance

        Returns:
            The assembled ProgramModel

        Raises:
            SourceRejectedError: if source_text is empty after trimming
        """
        if not source_text or not source_text.strip():
            raise SourceRejectedError("Source text is empty")

        lines = split_lines(source_text)
        logger.info(f"Analyzing {len(lines)} source line(s)")

        metadata = self.metadata.extract(lines)
        key_lists = self.key_lists.resolve(lines)
        file_operations = self.file_operations.extract(lines, key_lists)
        catalog = self.message_table.build(annotation_text)

        model = ProgramModel(
            metadata=metadata,
            catalog=catalog,
            file_operations=file_operations,
            messages=self.message_references.extract(lines, catalog),
            business_rules=self.business_rules.detect(lines),
            dependencies=self.dependencies.dependencies(lines, file_operations),
            validations=self.validations.extract(lines, catalog),
            data_mappings=self.data_mappings.extract(lines),
            call_stack=self.dependencies.call_stack(lines),
            screen_actions=self.screen_actions.extract(lines),
            processing_steps=self.synthesizer.synthesize(lines, metadata.entry_parameters),
        )

        logger.info(f"Documentation model built for {metadata.name} ({metadata.kind.value})")
        return model

    def generate(self, source_text: str, annotation_text: Optional[str] = None) -> str:
        """Analyze source text and render the report"""
        return self.formatter.format(self.build_model(source_text, annotation_text))


def analyze(source_text: str, annotation_text: Optional[str] = None) -> str:
    """Documentation report for source_text with the default configuration"""
    return DocumentationGenerator().generate(source_text, annotation_text)
