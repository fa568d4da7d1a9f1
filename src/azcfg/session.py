"""Consumer-facing template session API.

Thin functional surface over :class:`~azcfg.template.SectionTable` for UIs
and the CLI. A handle owns exactly one parsed template; selecting another
template means loading a new handle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from azcfg.template import SectionTable, generate
from azcfg.types import FillerRegion, SectionFilter

__all__ = [
    "ReadOnlyText",
    "TemplateHandle",
    "get_section_content",
    "is_modified",
    "list_sections",
    "load_template",
    "render",
    "reset_section",
    "set_section_content",
]

logger = logging.getLogger(__name__)


class ReadOnlyText(str):
    """Content of a template-owned section. Behaves as a plain ``str``."""

    read_only = True


@dataclass
class TemplateHandle:
    """A loaded template and its section table."""

    table: SectionTable
    name: str = ""
    log: logging.Logger = field(default=logger, repr=False)


def load_template(text: str, name: str = "", log: logging.Logger | None = None) -> TemplateHandle:
    """Parse template text into a new handle. Malformed markers only warn."""
    log = log or logger
    table = SectionTable.parse(text, log)
    log.info("Loaded template %s", name or "<memory>")
    return TemplateHandle(table=table, name=name, log=log)


def list_sections(handle: TemplateHandle, only_user_code: bool = False) -> list[str]:
    section_filter = SectionFilter.USER_CODE_ONLY if only_user_code else SectionFilter.ALL
    return handle.table.list_sections(section_filter)


def get_section_content(handle: TemplateHandle, section_id: str) -> str:
    """Return a section's current text.

    Filler content comes back as :class:`ReadOnlyText`.

    Raises:
        SectionNotFoundError: If the id is unknown.
    """
    region = handle.table.get(section_id)
    if isinstance(region, FillerRegion):
        return ReadOnlyText(region.content)
    return region.content


def set_section_content(handle: TemplateHandle, section_id: str, text: str) -> None:
    """Replace a user-code section body.

    Raises:
        SectionNotFoundError: If the id is unknown.
        ReadOnlySectionError: If the id names a filler section.
    """
    handle.table.update(section_id, text)


def reset_section(handle: TemplateHandle, section_id: str) -> None:
    handle.table.reset(section_id)


def is_modified(handle: TemplateHandle, section_id: str) -> bool:
    return handle.table.is_modified(section_id)


def render(handle: TemplateHandle) -> str:
    return generate(handle.table)
