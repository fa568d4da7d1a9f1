"""Generation backends — abstract interface and built-in implementations."""

from azcfg.backend.base import GenerationBackend, expected_output_path
from azcfg.backend.dry_run import DryRunBackend
from azcfg.backend.script import ScriptBackend
from azcfg.registry import default_registry

__all__ = ["DryRunBackend", "GenerationBackend", "ScriptBackend", "expected_output_path"]

default_registry.register(
    "script", ScriptBackend, "Run the AutoGen azrtos_pg.py generator in the pack root"
)
default_registry.register(
    "dry-run", lambda cfg: DryRunBackend(), "Report the output path without writing anything"
)
