"""Style extraction for utility-class and style-object systems."""

from .base import (
    StyleExtraction,
    StyleExtractor,
    StyleToken,
    ValidationIssue,
    ValidationResult,
    create_style_extractor,
)
from .style_objects import StyleObjectExtractor
from .utility_classes import UtilityClassExtractor, categorize_utility, group_utilities

__all__ = [
    "StyleExtraction",
    "StyleExtractor",
    "StyleObjectExtractor",
    "StyleToken",
    "UtilityClassExtractor",
    "ValidationIssue",
    "ValidationResult",
    "categorize_utility",
    "create_style_extractor",
    "group_utilities",
]
