"""Static Analysis Module for RPG Documentation

Heuristic extractors over fixed-form RPG source. Each one reads the same
immutable line sequence and produces one facet of the ProgramModel;
DocumentationGenerator runs them in order and renders the report.
"""

from .documentation_generator import (
    DocumentationGenerator, ProgramModel, SourceRejectedError, analyze,
)
from .source_lines import SourceLine, split_lines, scan_window
from .rules import MatchRule, RuleCascade
from .metadata_extractor import MetadataExtractor, ProgramKind
from .file_operation_extractor import FileOperationExtractor, KeyListResolver
from .message_extractor import MessageTableBuilder, MessageReferenceExtractor
from .business_rule_detector import BusinessRuleDetector
from .validation_extractor import ValidationExtractor
from .dependency_analyzer import DependencyAnalyzer
from .data_mapping_extractor import DataMappingExtractor
from .screen_action_extractor import ScreenActionExtractor
from .processing_synthesizer import ProcessingSynthesizer

__all__ = [
    "DocumentationGenerator",
    "ProgramModel",
    "SourceRejectedError",
    "analyze",
    "SourceLine",
    "split_lines",
    "scan_window",
    "MatchRule",
    "RuleCascade",
    "MetadataExtractor",
    "ProgramKind",
    "FileOperationExtractor",
    "KeyListResolver",
    "MessageTableBuilder",
    "MessageReferenceExtractor",
    "BusinessRuleDetector",
    "ValidationExtractor",
    "DependencyAnalyzer",
    "DataMappingExtractor",
    "ScreenActionExtractor",
    "ProcessingSynthesizer",
]
