"""Generation façade for azcfg.

Validates generation requests and hands them to an injected backend. The
caller always gets a :class:`GenerationResult` back: backend exceptions and
timeouts become ``success=False`` results, never raised errors.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from azcfg.exceptions import GenerationError
from azcfg.types import GenerationKind, GenerationRequest, GenerationResult

if TYPE_CHECKING:
    from azcfg.backend.base import GenerationBackend
    from azcfg.config import AzcfgConfig

__all__ = ["REQUIRED_FIELDS", "GenerationService", "request_from_config", "validate_request"]

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: dict[GenerationKind, tuple[str, ...]] = {
    GenerationKind.MX_FILES: ("series", "output_directory"),
    GenerationKind.PACK: ("series", "xcube_firmware_directory", "output_directory"),
    GenerationKind.APPLICATION: ("board", "application_name", "output_directory"),
    GenerationKind.FULL_PACK: ("series", "xcube_firmware_directory", "output_directory"),
}


def validate_request(request: GenerationRequest) -> None:
    """Check that every field the pipeline needs is filled in.

    Raises:
        GenerationError: Listing the missing fields.
    """
    missing = [name for name in REQUIRED_FIELDS[request.kind] if not getattr(request, name)]
    if missing:
        raise GenerationError(
            f"{request.kind.value} generation requires: {', '.join(missing)}"
        )


def request_from_config(
    kind: GenerationKind,
    config: AzcfgConfig,
    **overrides: object,
) -> GenerationRequest:
    """Build a request from ``[defaults]``, with non-empty overrides winning."""
    defaults = config.defaults
    values: dict[str, object] = {
        "series": defaults.series,
        "board": defaults.board,
        "toolchain": defaults.toolchain,
        "output_directory": defaults.output_directory,
        "xcube_firmware_directory": defaults.xcube_firmware_directory,
    }
    values.update({k: v for k, v in overrides.items() if v})
    return GenerationRequest(kind=kind, **values)  # type: ignore[arg-type]


class GenerationService:
    """Runs generation requests against an injected backend.

    Edits to in-memory templates are unaffected while a request is in
    flight; the service holds no template state.

    Usage::

        service = GenerationService(backend=ScriptBackend(config), timeout_s=600)
        result = await service.generate(request)
        if not result.success:
            print(result.error)
    """

    def __init__(self, backend: GenerationBackend, timeout_s: float | None = None) -> None:
        self.backend = backend
        self.timeout_s = timeout_s

    async def generate(
        self,
        request: GenerationRequest,
        timeout_s: float | None = None,
    ) -> GenerationResult:
        """Validate and run ``request``.

        Args:
            request: What to generate.
            timeout_s: Per-call override of the service timeout. ``None``
                falls back to the service default; no default means no limit.

        Returns:
            The backend result, or a failed result for invalid requests,
            backend errors and timeouts.
        """
        try:
            validate_request(request)
        except GenerationError as e:
            logger.error("Rejected %s request: %s", request.kind.value, e)
            return GenerationResult(
                success=False, message="Invalid generation request", error=str(e)
            )

        limit = timeout_s if timeout_s is not None else self.timeout_s
        backend_name = self.backend.name or type(self.backend).__name__
        logger.info("Generating %s via %s backend", request.kind.value, backend_name)

        try:
            result = await asyncio.wait_for(self.backend.generate(request), timeout=limit)
        except asyncio.TimeoutError:
            logger.error("%s generation timed out after %ss", request.kind.value, limit)
            return GenerationResult(
                success=False,
                message=f"{request.kind.value} generation timed out",
                error=f"no result after {limit} seconds",
            )
        except Exception as e:
            logger.error("%s generation failed: %s", request.kind.value, e)
            return GenerationResult(
                success=False,
                message=f"{request.kind.value} generation failed",
                error=str(e),
            )

        if result.success:
            logger.info("%s", result.message)
        else:
            logger.warning("%s: %s", result.message, result.error)
        return result

    def run(self, request: GenerationRequest, timeout_s: float | None = None) -> GenerationResult:
        """Blocking wrapper around :meth:`generate` for synchronous callers."""
        return asyncio.run(self.generate(request, timeout_s))
