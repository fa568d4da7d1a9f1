"""Manifest system for azcfg.

Records every source file written from a template, with a SHA-256 content
hash so later runs can tell whether the file was edited by hand since.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from azcfg.exceptions import ManifestError

if TYPE_CHECKING:
    from pathlib import Path

__all__ = [
    "GeneratedFileEntry",
    "Manifest",
    "compute_hash",
    "hash_text",
    "load_manifest",
    "make_entry",
    "make_file_id",
    "save_manifest",
]

logger = logging.getLogger(__name__)

HASH_CHUNK_SIZE = 65536


@dataclass(frozen=True)
class GeneratedFileEntry:
    """Immutable record of a file written from a template."""

    id: str
    path: str
    template: str
    hash: str
    generated: str
    user_sections: int = 0
    modified_sections: tuple[str, ...] = ()


@dataclass
class Manifest:
    """Tracks all generated files in a project.

    Uses a dict internally for O(1) lookups by file ID.
    Serializes to/from a list in JSON for readability.
    """

    schema_version: str = "1"
    _files: dict[str, GeneratedFileEntry] = field(default_factory=dict)

    @property
    def files(self) -> list[GeneratedFileEntry]:
        """Return entries as a list (for iteration and serialization)."""
        return list(self._files.values())

    def add_file(self, entry: GeneratedFileEntry) -> None:
        """Add or replace a file entry."""
        self._files[entry.id] = entry

    def remove_file(self, file_id: str) -> bool:
        """Remove a file by ID. Returns True if found and removed."""
        if file_id in self._files:
            del self._files[file_id]
            return True
        return False

    def get_file(self, file_id: str) -> GeneratedFileEntry | None:
        return self._files.get(file_id)

    def has_drifted(self, file_id: str, current_hash: str) -> bool:
        """Check if a generated file changed on disk since it was written.

        Unknown files are not considered drifted.
        """
        existing = self.get_file(file_id)
        if existing is None:
            return False
        return existing.hash != current_hash


def hash_text(text: str) -> str:
    """SHA-256 of text encoded as UTF-8, in manifest format."""
    return f"sha256:{hashlib.sha256(text.encode('utf-8')).hexdigest()}"


def compute_hash(path: Path) -> str:
    """Compute SHA-256 hash of a file's contents."""
    h = hashlib.sha256()
    try:
        with path.open("rb") as f:
            while True:
                chunk = f.read(HASH_CHUNK_SIZE)
                if not chunk:
                    break
                h.update(chunk)
    except OSError as e:
        raise ManifestError(f"Failed to hash file {path}: {e}") from e
    return f"sha256:{h.hexdigest()}"


def _entry_to_dict(entry: GeneratedFileEntry) -> dict[str, object]:
    """Serialize a GeneratedFileEntry to a dict."""
    d: dict[str, object] = {
        "id": entry.id,
        "path": entry.path,
        "template": entry.template,
        "hash": entry.hash,
        "generated": entry.generated,
        "user_sections": entry.user_sections,
    }
    if entry.modified_sections:
        d["modified_sections"] = list(entry.modified_sections)
    return d


def _entry_from_dict(data: dict[str, object]) -> GeneratedFileEntry:
    """Deserialize a GeneratedFileEntry from a dict."""
    required = ("id", "path", "hash", "generated")
    missing = [k for k in required if k not in data]
    if missing:
        raise ManifestError(f"File entry missing required fields: {missing}")
    modified = data.get("modified_sections", [])
    return GeneratedFileEntry(
        id=str(data["id"]),
        path=str(data["path"]),
        template=str(data.get("template", "")),
        hash=str(data["hash"]),
        generated=str(data["generated"]),
        user_sections=int(str(data.get("user_sections", 0))),
        modified_sections=tuple(str(s) for s in modified) if isinstance(modified, list) else (),
    )


def save_manifest(manifest: Manifest, path: Path) -> None:
    """Save manifest to a JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {
        "schema_version": manifest.schema_version,
        "files": [_entry_to_dict(f) for f in manifest.files],
    }
    try:
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        logger.info("Saved manifest to %s", path)
    except OSError as e:
        logger.error("Failed to save manifest to %s: %s", path, e)
        raise ManifestError(f"Failed to save manifest to {path}: {e}") from e


def load_manifest(path: Path) -> Manifest:
    """Load manifest from a JSON file."""
    if not path.exists():
        raise ManifestError(f"Manifest file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Failed to load manifest from %s: %s", path, e)
        raise ManifestError(f"Failed to load manifest from {path}: {e}") from e

    manifest = Manifest(schema_version=str(data.get("schema_version", "1")))
    for file_data in data.get("files", []):
        manifest.add_file(_entry_from_dict(file_data))

    logger.info("Loaded manifest from %s (%d files)", path, len(manifest.files))
    return manifest


def _slug(part: str) -> str:
    return part.lower().replace(" ", "_").replace("-", "_")


def make_file_id(path: Path, root: Path | None = None) -> str:
    """Generate a file ID from an output path.

    Keeps the extension so ``main.c`` and ``main.h`` get distinct ids. When
    ``root`` is given and contains ``path``, the directories between them are
    part of the id, so ``AppA/Core/Src/main.c`` and ``AppB/Core/Src/main.c``
    do not collide.
    """
    parents: tuple[str, ...] = ()
    if root is not None:
        try:
            parents = path.relative_to(root).parent.parts
        except ValueError:
            parents = tuple(p for p in path.parent.parts if p != path.anchor)
    suffix = path.suffix.lstrip(".").lower()
    name = f"{_slug(path.stem)}_{suffix}" if suffix else _slug(path.stem)
    return "_".join([*(_slug(p) for p in parents), name])


def make_entry(
    path: Path,
    text: str,
    template: str = "",
    user_sections: int = 0,
    modified_sections: tuple[str, ...] = (),
    root: Path | None = None,
) -> GeneratedFileEntry:
    """Create a GeneratedFileEntry for text just written to ``path``."""
    return GeneratedFileEntry(
        id=make_file_id(path, root),
        path=str(path),
        template=template,
        hash=hash_text(text),
        generated=datetime.now(UTC).isoformat(),
        user_sections=user_sections,
        modified_sections=modified_sections,
    )
