"""Protected-region templates — scanning, editing and regeneration."""

from azcfg.template.regenerate import generate, merge_user_code
from azcfg.template.scanner import ScanResult, scan
from azcfg.template.sections import SectionTable, Template

__all__ = [
    "ScanResult",
    "SectionTable",
    "Template",
    "generate",
    "merge_user_code",
    "scan",
]
