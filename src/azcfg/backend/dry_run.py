"""Side-effect-free backend: reports what a request would produce."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from azcfg.backend.base import GenerationBackend, expected_output_path
from azcfg.types import GenerationResult

if TYPE_CHECKING:
    from azcfg.types import GenerationRequest

__all__ = ["DryRunBackend"]

logger = logging.getLogger(__name__)


class DryRunBackend(GenerationBackend):
    """Backend that writes nothing and records every request it receives."""

    name = "dry-run"

    def __init__(self) -> None:
        self.requests: list[GenerationRequest] = []

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        self.requests.append(request)
        output_path = expected_output_path(request)
        logger.info("Dry run: %s would be written to %s", request.kind.value, output_path)
        return GenerationResult(
            success=True,
            message=f"Dry run: {request.kind.value} not generated",
            output_path=output_path,
        )
