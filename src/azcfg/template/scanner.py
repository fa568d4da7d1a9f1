"""Region scanner for STM32-style protected-region templates.

Splits template text into template-owned filler and user-code sections
delimited by ``/* USER CODE BEGIN <id> */`` ... ``/* USER CODE END <id> */``.

The scan is a flat two-state machine over the line list. Markers for other
ids found inside a section body are body text, not nested sections. A BEGIN
without a matching END never fails the scan: it is reported as a
:class:`MalformedTemplateWarning` and its line stays in the filler.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from azcfg.types import (
    BlankSpan,
    FillerRegion,
    LayoutEntry,
    MalformedTemplateWarning,
    MutableRegion,
)

__all__ = [
    "BEGIN_RE",
    "END_RE",
    "FILLER_PREFIX",
    "ScanResult",
    "match_begin",
    "match_end",
    "scan",
]

logger = logging.getLogger(__name__)

BEGIN_RE = re.compile(r"/\*\s*USER CODE BEGIN\s+([^*]+)\*/")
END_RE = re.compile(r"/\*\s*USER CODE END\s+([^*]+)\*/")

FILLER_PREFIX = "NonUserCode_"


class _State(Enum):
    IN_FILLER = "in_filler"
    IN_MUTABLE_BODY = "in_mutable_body"


@dataclass
class ScanResult:
    """Everything the scanner recovered from one template."""

    lines: list[str]
    mutable: dict[str, MutableRegion] = field(default_factory=dict)
    fillers: list[FillerRegion] = field(default_factory=list)
    layout: list[LayoutEntry] = field(default_factory=list)
    warnings: list[MalformedTemplateWarning] = field(default_factory=list)


def match_begin(line: str) -> str | None:
    """Return the stripped section id if ``line`` carries a BEGIN marker."""
    m = BEGIN_RE.search(line)
    return m.group(1).strip() if m else None


def match_end(line: str) -> str | None:
    """Return the stripped section id if ``line`` carries an END marker."""
    m = END_RE.search(line)
    return m.group(1).strip() if m else None


def scan(text: str, log: logging.Logger | None = None) -> ScanResult:
    """Scan template text into ordered regions.

    Args:
        text: Full template content. Lines are split on ``"\\n"`` only, so
            ``"\\r"`` stays part of the line and CRLF input round-trips.
        log: Logger for malformed-marker and duplicate-id reports. Defaults
            to this module's logger.

    Returns:
        ScanResult whose ``layout`` reproduces ``text`` when joined back.
        ``mutable`` keeps the last occurrence of a duplicated id.
    """
    log = log or logger
    lines = text.split("\n")
    result = ScanResult(lines=lines)

    state = _State.IN_FILLER
    filler_start = 0
    filler_count = 0
    begin_index = 0
    section_id = ""
    i = 0

    def report_unmatched() -> None:
        warning = MalformedTemplateWarning(
            section_id=section_id,
            line=begin_index + 1,
            message=f"USER CODE BEGIN {section_id} has no matching END",
        )
        result.warnings.append(warning)
        log.warning("Line %d: %s, kept as template text", warning.line, warning.message)

    def close_filler(end: int) -> None:
        nonlocal filler_count
        if end <= filler_start:
            return
        content = "\n".join(lines[filler_start:end])
        if content.strip():
            filler_count += 1
            region = FillerRegion(
                section_id=f"{FILLER_PREFIX}{filler_count}",
                content=content,
                line_start=filler_start,
                line_end=end,
            )
            result.fillers.append(region)
            result.layout.append(region)
        else:
            result.layout.append(BlankSpan(content=content, line_start=filler_start, line_end=end))

    while i < len(lines):
        line = lines[i]

        if state is _State.IN_FILLER:
            begin_id = match_begin(line)
            if begin_id is not None:
                state = _State.IN_MUTABLE_BODY
                section_id = begin_id
                begin_index = i
            i += 1
            continue

        if match_end(line) == section_id:
            close_filler(begin_index)
            body = "\n".join(lines[begin_index + 1 : i])
            region = MutableRegion(
                section_id=section_id,
                content=body,
                original_content=body,
                line_start=begin_index + 1,
                line_end=i,
                begin_marker=lines[begin_index],
                end_marker=line,
            )
            if section_id in result.mutable:
                log.warning(
                    "Duplicate user code section %r at line %d replaces the one at line %d",
                    section_id,
                    begin_index + 1,
                    result.mutable[section_id].line_start,
                )
            result.mutable[section_id] = region
            result.layout.append(region)
            filler_start = i + 1
            state = _State.IN_FILLER
            i += 1
            continue

        i += 1
        if i == len(lines):
            # No END for this BEGIN: keep it as filler and rescan after it.
            report_unmatched()
            state = _State.IN_FILLER
            i = begin_index + 1

    if state is _State.IN_MUTABLE_BODY:
        # BEGIN on the very last line
        report_unmatched()

    close_filler(len(lines))
    return result
