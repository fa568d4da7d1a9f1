"""Generation backend that drives the AutoGen ``azrtos_pg.py`` script.

Runs the generator as a subprocess inside the pack root, one invocation
per request, and maps its exit status onto a GenerationResult.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from azcfg.backend.base import GenerationBackend, expected_output_path
from azcfg.types import GenerationKind, GenerationResult

if TYPE_CHECKING:
    from azcfg.config import AzcfgConfig
    from azcfg.types import GenerationRequest

__all__ = ["ScriptBackend", "build_command"]

logger = logging.getLogger(__name__)

_KIND_FLAGS: dict[GenerationKind, str] = {
    GenerationKind.MX_FILES: "--gen-mxfiles",
    GenerationKind.PACK: "--gen-pack",
    GenerationKind.APPLICATION: "--gen-app",
    GenerationKind.FULL_PACK: "--gen-fullpack",
}

_LABELS: dict[GenerationKind, str] = {
    GenerationKind.MX_FILES: "MX files",
    GenerationKind.PACK: "Pack",
    GenerationKind.APPLICATION: "Application",
    GenerationKind.FULL_PACK: "Full pack",
}

# Keep failure messages readable when the script dumps a traceback.
_MAX_ERROR_CHARS = 2000


def build_command(python: str, script: str, request: GenerationRequest) -> list[str]:
    """Build the ``azrtos_pg.py`` argument vector for a request."""
    cmd = [python, script, _KIND_FLAGS[request.kind]]
    if request.series:
        cmd.append(f"--serie={request.series}")
    if request.board:
        cmd.append(f"--board={request.board}")
    if request.application_name:
        cmd.append(f"--app={request.application_name}")
    if request.middleware:
        cmd.append(f"--middleware={','.join(request.middleware)}")
    if request.toolchain:
        cmd.append(f"--toolchain={request.toolchain}")
    if request.xcube_firmware_directory:
        cmd.append(f"--xcube-firmware-directory={request.xcube_firmware_directory}")
    cmd.append(f"--output-directory={request.output_directory}")
    for key, value in sorted(request.options.items()):
        cmd.append(f"--{key}={value}" if value else f"--{key}")
    return cmd


class ScriptBackend(GenerationBackend):
    """Backend running ``python azrtos_pg.py --gen-...`` in the pack root.

    Config fields used::

        [project]
        pack_root = "../PACK_AZRTOS_AutoGen"

        [generation]
        python = "python3"
        script = "azrtos_pg.py"
    """

    name = "script"

    def __init__(self, config: AzcfgConfig, pack_root: Path | None = None) -> None:
        self._python = config.generation.python
        self._script = config.generation.script
        self._cwd = pack_root or Path(config.project.pack_root or ".").resolve()

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        label = _LABELS[request.kind]
        cmd = build_command(self._python, self._script, request)
        logger.info("Starting %s generation: %s", label, " ".join(cmd))

        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(self._cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await proc.communicate()
        except asyncio.CancelledError:
            proc.kill()
            await proc.wait()
            logger.warning("%s generation was stopped, process killed", label)
            raise

        for line in stdout.decode("utf-8", errors="replace").splitlines():
            logger.info("[%s] %s", self._script, line)

        if proc.returncode != 0:
            error = stderr.decode("utf-8", errors="replace").strip()
            logger.error("%s generation failed with exit code %d", label, proc.returncode)
            return GenerationResult(
                success=False,
                message=f"{label} generation failed",
                error=error[-_MAX_ERROR_CHARS:] or f"exit code {proc.returncode}",
            )

        output_path = expected_output_path(request)
        logger.info("%s generated successfully in: %s", label, output_path)
        return GenerationResult(
            success=True,
            message=f"{label} generated successfully",
            output_path=output_path,
        )
