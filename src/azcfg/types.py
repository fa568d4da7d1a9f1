"""Data contracts for azcfg.

Template regions produced by the scanner and edited through the section
table, plus the request/result pair exchanged with generation backends:

  text → [FillerRegion | BlankSpan | MutableRegion, ...] → text
  GenerationRequest → backend → GenerationResult
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

__all__ = [
    "BlankSpan",
    "FillerRegion",
    "GenerationKind",
    "GenerationRequest",
    "GenerationResult",
    "LayoutEntry",
    "MalformedTemplateWarning",
    "MergeReport",
    "MutableRegion",
    "SectionFilter",
]


@dataclass
class MutableRegion:
    """A user-code section: the body between a matched BEGIN/END marker pair.

    ``line_start``/``line_end`` are the half-open body range in the parsed
    template. They are parse-time coordinates and are never renumbered.
    """

    read_only: ClassVar[bool] = False

    section_id: str
    content: str
    original_content: str
    line_start: int
    line_end: int
    begin_marker: str
    end_marker: str

    @property
    def modified(self) -> bool:
        return self.content != self.original_content

    def body_lines(self) -> list[str]:
        """Lines emitted between the markers for the current content.

        An empty string means "no body lines" once edited, and keeps the
        parsed shape (zero or one blank line) while unmodified.
        """
        if not self.content and (self.modified or self.line_end == self.line_start):
            return []
        return self.content.split("\n")


@dataclass(frozen=True)
class FillerRegion:
    """Template-owned text between user-code sections (``NonUserCode_<n>``)."""

    read_only: ClassVar[bool] = True

    section_id: str
    content: str
    line_start: int
    line_end: int


@dataclass(frozen=True)
class BlankSpan:
    """Whitespace-only template text; kept for round-tripping, never listed."""

    content: str
    line_start: int
    line_end: int


LayoutEntry = FillerRegion | BlankSpan | MutableRegion


@dataclass(frozen=True)
class MalformedTemplateWarning:
    """A BEGIN marker with no matching END; its text was kept as filler."""

    section_id: str
    line: int
    message: str


class SectionFilter(str, Enum):
    """Which section ids ``list_sections`` reports."""

    ALL = "all"
    USER_CODE_ONLY = "user_code_only"


@dataclass(frozen=True)
class MergeReport:
    """Outcome of carrying user code from a generated file into a template."""

    carried: tuple[str, ...] = ()
    unchanged: tuple[str, ...] = ()
    orphaned: tuple[str, ...] = ()


class GenerationKind(str, Enum):
    """Generation pipelines offered by the AutoGen backend."""

    MX_FILES = "mx_files"
    PACK = "pack"
    APPLICATION = "application"
    FULL_PACK = "full_pack"


@dataclass(frozen=True)
class GenerationRequest:
    """Everything a backend needs to run one generation pipeline."""

    kind: GenerationKind
    output_directory: str
    series: str = ""
    board: str = ""
    application_name: str = ""
    middleware: tuple[str, ...] = ()
    toolchain: str = ""
    xcube_firmware_directory: str = ""
    options: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GenerationResult:
    """Backend outcome. Failures are data, not exceptions."""

    success: bool
    message: str
    output_path: str = ""
    error: str = ""
