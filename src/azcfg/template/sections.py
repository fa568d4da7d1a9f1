"""Section table and editor API over a parsed template.

A :class:`SectionTable` is built once per template text. User-code
sections can be read, replaced and reset; filler sections are readable
only. Every failing call raises before touching any state.

Duplicate section ids follow a last-write-wins policy: the later
``BEGIN X ... END X`` pair is the one reachable by id. The earlier
occurrence is still rendered, verbatim, at its original position.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from azcfg.exceptions import ReadOnlySectionError, SectionNotFoundError
from azcfg.template.scanner import scan
from azcfg.types import FillerRegion, MutableRegion, SectionFilter

if TYPE_CHECKING:
    from azcfg.types import LayoutEntry, MalformedTemplateWarning

__all__ = ["SectionTable", "Template"]

logger = logging.getLogger(__name__)

Region = MutableRegion | FillerRegion


class SectionTable:
    """Editable view of one template's regions.

    Usage::

        table = SectionTable.parse(text)
        table.update("Includes", '#include "b.h"')
        new_text = generate(table)
    """

    def __init__(
        self,
        mutable: dict[str, MutableRegion],
        fillers: list[FillerRegion],
        layout: list[LayoutEntry],
        warnings: list[MalformedTemplateWarning] | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._mutable = dict(mutable)
        self._fillers = {f.section_id: f for f in fillers}
        self._layout = tuple(layout)
        self._warnings = tuple(warnings or ())
        self._log = log or logger

    @classmethod
    def parse(cls, text: str, log: logging.Logger | None = None) -> SectionTable:
        """Scan ``text`` and build a table from the result. Never raises."""
        result = scan(text, log)
        table = cls(result.mutable, result.fillers, result.layout, result.warnings, log)
        (log or logger).debug(
            "Parsed template: %d user code section(s), %d filler section(s), %d warning(s)",
            len(result.mutable),
            len(result.fillers),
            len(result.warnings),
        )
        return table

    @property
    def layout(self) -> tuple[LayoutEntry, ...]:
        """All regions in file order, including shadowed duplicates."""
        return self._layout

    @property
    def warnings(self) -> tuple[MalformedTemplateWarning, ...]:
        return self._warnings

    def __contains__(self, section_id: object) -> bool:
        return section_id in self._mutable or section_id in self._fillers

    def get(self, section_id: str) -> Region:
        """Return the region for ``section_id``.

        Raises:
            SectionNotFoundError: If the id is unknown.
        """
        if section_id in self._mutable:
            return self._mutable[section_id]
        if section_id in self._fillers:
            return self._fillers[section_id]
        raise SectionNotFoundError(section_id)

    def read_content(self, section_id: str) -> str:
        return self.get(section_id).content

    def update(self, section_id: str, new_content: str) -> None:
        """Replace the body of a user-code section.

        Raises:
            SectionNotFoundError: If the id is unknown.
            ReadOnlySectionError: If the id names a filler section.
        """
        region = self._editable(section_id)
        region.content = new_content
        self._log.debug("Updated section %r (modified=%s)", section_id, region.modified)

    def reset(self, section_id: str) -> None:
        """Restore a user-code section to its parsed body."""
        region = self._editable(section_id)
        if region.modified:
            region.content = region.original_content
            self._log.debug("Reset section %r", section_id)

    def reset_all(self) -> None:
        for region in self._mutable.values():
            region.content = region.original_content

    def is_modified(self, section_id: str) -> bool:
        region = self.get(section_id)
        return isinstance(region, MutableRegion) and region.modified

    def modified_sections(self) -> list[str]:
        user_ids = self.list_sections(SectionFilter.USER_CODE_ONLY)
        return [sid for sid in user_ids if self._mutable[sid].modified]

    def list_sections(self, section_filter: SectionFilter = SectionFilter.ALL) -> list[str]:
        """Return section ids in file order.

        A duplicated id is listed once, at the position of the occurrence
        that owns it.
        """
        ids: list[str] = []
        for entry in self._layout:
            if isinstance(entry, MutableRegion):
                if self._mutable.get(entry.section_id) is entry:
                    ids.append(entry.section_id)
            elif isinstance(entry, FillerRegion) and section_filter is SectionFilter.ALL:
                ids.append(entry.section_id)
        return ids

    def _editable(self, section_id: str) -> MutableRegion:
        if section_id in self._mutable:
            return self._mutable[section_id]
        if section_id in self._fillers:
            raise ReadOnlySectionError(section_id)
        raise SectionNotFoundError(section_id)


Template = SectionTable
