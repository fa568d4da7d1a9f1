"""Custom exception hierarchy for azcfg."""

__all__ = [
    "AzcfgError",
    "CatalogError",
    "ConfigError",
    "GenerationError",
    "ManifestError",
    "NotFoundError",
    "PluginError",
    "ProjectError",
    "ReadOnlyError",
    "ReadOnlySectionError",
    "SectionNotFoundError",
]


class AzcfgError(Exception):
    """Base exception for all azcfg errors."""


class ConfigError(AzcfgError):
    """Raised when configuration loading or validation fails."""


class ManifestError(AzcfgError):
    """Raised when manifest operations fail."""


class ProjectError(AzcfgError):
    """Raised when project initialization or discovery fails."""


class CatalogError(AzcfgError):
    """Raised when the AutoGen project tree cannot be read or is invalid."""


class SectionNotFoundError(AzcfgError):
    """Raised when a section id is neither a user-code nor a filler section."""

    def __init__(self, section_id: str) -> None:
        super().__init__(f"Unknown section: {section_id!r}")
        self.section_id = section_id


class ReadOnlySectionError(AzcfgError):
    """Raised when an edit targets a template-owned (filler) section."""

    def __init__(self, section_id: str) -> None:
        super().__init__(f"Section {section_id!r} is template-owned and cannot be edited")
        self.section_id = section_id


class GenerationError(AzcfgError):
    """Raised when a generation request is invalid before it reaches a backend."""


class PluginError(AzcfgError):
    """Raised when plugin loading or registration fails."""


NotFoundError = SectionNotFoundError
ReadOnlyError = ReadOnlySectionError
