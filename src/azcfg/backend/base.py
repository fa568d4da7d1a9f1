"""Abstract base class for generation backends."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from azcfg.types import GenerationKind

if TYPE_CHECKING:
    from azcfg.types import GenerationRequest, GenerationResult

__all__ = ["GenerationBackend", "expected_output_path"]

logger = logging.getLogger(__name__)


class GenerationBackend(ABC):
    """Base class for everything that can run an AutoGen pipeline.

    Implementations own all side effects (writing files). They may raise;
    :class:`~azcfg.generation.GenerationService` turns exceptions into
    failed results.
    """

    name: str = ""

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Run one generation pipeline.

        Args:
            request: Validated generation request.

        Returns:
            GenerationResult describing the outcome.
        """

    async def close(self) -> None:
        """Release backend resources. Override if needed."""


def expected_output_path(request: GenerationRequest) -> str:
    """Where the AutoGen pipelines place their output for ``request``."""
    out = PurePosixPath(request.output_directory or ".")
    if request.kind is GenerationKind.MX_FILES:
        return str(out / "MX_Files" / request.series)
    if request.kind is GenerationKind.PACK:
        return str(out / f"Pack_{request.series}")
    if request.kind is GenerationKind.APPLICATION:
        return str(out / request.board / request.application_name)
    return str(out / f"FullPack_{request.series}")
