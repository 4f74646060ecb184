"""
rpgdoc - documentation generator for fixed-form RPG programs

Static analysis of RPG source text into a structured program model and a
fixed ten-section plain-text report.
"""

__version__ = "1.0.0"

from .static_analysis.documentation_generator import (  # noqa: E402
    DocumentationGenerator, ProgramModel, SourceRejectedError, analyze,
)

__all__ = [
    "__version__",
    "DocumentationGenerator",
    "ProgramModel",
    "SourceRejectedError",
    "analyze",
]
