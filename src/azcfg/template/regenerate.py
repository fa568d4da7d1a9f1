"""Regenerate template text from the current state of a section table.

Walks the layout recorded at parse time, so edited sections may grow or
shrink without disturbing the position of any other region. Marker lines
are re-emitted exactly as they were read.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from azcfg.template.scanner import scan
from azcfg.types import MergeReport, MutableRegion

if TYPE_CHECKING:
    from azcfg.template.sections import SectionTable

__all__ = ["generate", "merge_user_code"]

logger = logging.getLogger(__name__)


def generate(table: SectionTable) -> str:
    """Reassemble the full file text.

    With no section modified the output is byte-identical to the parsed
    input. Editing one section changes only the lines of its body.
    """
    out: list[str] = []
    for entry in table.layout:
        if isinstance(entry, MutableRegion):
            out.append(entry.begin_marker)
            out.extend(entry.body_lines())
            out.append(entry.end_marker)
        else:
            out.append(entry.content)
    return "\n".join(out)


def merge_user_code(
    table: SectionTable,
    existing_text: str,
    log: logging.Logger | None = None,
) -> MergeReport:
    """Carry user code from a previously generated file into ``table``.

    Every user-code section of ``existing_text`` whose id also exists in
    the template replaces the template's body. Ids present only in the old
    file are reported as orphaned and dropped.

    Args:
        table: Freshly parsed template to receive the user code.
        existing_text: Content of the file generated from an older template.
        log: Logger for orphan reports.

    Returns:
        MergeReport listing carried, unchanged and orphaned ids.
    """
    log = log or logger
    old = scan(existing_text, log)

    carried: list[str] = []
    unchanged: list[str] = []
    orphaned: list[str] = []

    for section_id, region in old.mutable.items():
        target = table.get(section_id) if section_id in table else None
        if not isinstance(target, MutableRegion):
            orphaned.append(section_id)
            continue
        if region.content == target.original_content:
            unchanged.append(section_id)
            continue
        table.update(section_id, region.content)
        carried.append(section_id)

    if orphaned:
        log.warning(
            "User code in %d section(s) has no place in the new template: %s",
            len(orphaned),
            ", ".join(orphaned),
        )
    log.info("Carried user code into %d section(s)", len(carried))
    return MergeReport(
        carried=tuple(carried), unchanged=tuple(unchanged), orphaned=tuple(orphaned)
    )
