"""Runs the external model optimizer for a single uploaded file."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Optional, Sequence

from .exceptions import OptimizerError, OptimizerTimeoutError

logger = logging.getLogger(__name__)

STAGING_DIR_NAME = ".optimizer-staging"


@dataclass(slots=True)
class ModelOptimizer:
    """Wraps an external command that writes a compressed copy of a model.

    ``command`` is an argument list; ``{input}`` is replaced by the source path
    and ``{output}`` by a path under ``staging_dir`` that is moved into
    ``optimized_root`` once the command succeeds. Without ``{output}`` the command is expected to
    write ``optimized_root/<name>`` itself.
    """

    command: Sequence[str]
    optimized_root: Path
    timeout: float = 600.0
    extensions: FrozenSet[str] = field(default_factory=lambda: frozenset({".glb", ".gltf"}))
    staging_root: Optional[Path] = None

    def can_optimize(self, source: Path) -> bool:
        return bool(self.command) and source.suffix.lower() in self.extensions

    def target_for(self, source: Path) -> Path:
        return self.optimized_root / source.name

    @property
    def staging_dir(self) -> Path:
        if self.staging_root is None:
            return self.optimized_root.parent / STAGING_DIR_NAME
        return self.staging_root

    def is_current(self, source: Path) -> bool:
        target = self.target_for(source)
        try:
            return target.stat().st_mtime > source.stat().st_mtime
        except FileNotFoundError:
            return False

    def build_args(self, source: Path, staged: Path) -> List[str]:
        return [part.replace("{input}", str(source)).replace("{output}", str(staged)) for part in self.command]

    async def run(self, source: Path) -> Path:
        """Optimize ``source`` and return the published variant path."""
        if not self.command:
            raise OptimizerError("no optimizer command configured")
        if not source.is_file():
            raise OptimizerError(f"source model missing: {source}")

        target = self.target_for(source)
        self.staging_dir.mkdir(parents=True, exist_ok=True)
        self.optimized_root.mkdir(parents=True, exist_ok=True)
        staged = self.staging_dir / source.name
        staged.unlink(missing_ok=True)

        args = self.build_args(source, staged)
        started_at = time.time()
        logger.info("Optimizing %s", source.name)
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise OptimizerError(f"cannot start optimizer {args[0]!r}: {exc}") from exc

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            await _terminate(process)
            staged.unlink(missing_ok=True)
            raise OptimizerTimeoutError(f"optimizer timed out after {self.timeout}s for {source.name}") from exc
        except asyncio.CancelledError:
            await asyncio.shield(_terminate(process))
            staged.unlink(missing_ok=True)
            raise

        if process.returncode != 0:
            staged.unlink(missing_ok=True)
            detail = stderr.decode("utf-8", errors="replace").strip()[-500:]
            raise OptimizerError(f"optimizer exited with {process.returncode}: {detail}")

        if staged.is_file() and staged.stat().st_size > 0:
            os.replace(staged, target)
        elif not (target.is_file() and target.stat().st_mtime >= started_at):
            staged.unlink(missing_ok=True)
            raise OptimizerError(f"optimizer produced no output for {source.name}")

        logger.info(
            "Optimized %s: %s -> %s",
            source.name,
            format_size(source.stat().st_size),
            format_size(target.stat().st_size),
        )
        return target

    async def optimize(self, source: Path) -> Optional[Path]:
        """Like :meth:`run` but never raises; failures leave the original authoritative."""
        if self.is_current(source):
            logger.info("%s already optimized", source.name)
            return self.target_for(source)
        try:
            return await self.run(source)
        except OptimizerError as exc:
            logger.warning("Optimization of %s failed: %s", source.name, exc)
        except OSError as exc:
            logger.warning("Optimization of %s failed with I/O error: %s", source.name, exc)
        return None


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        process.kill()
    await process.wait()


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size}B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f}KB"
    return f"{size / (1024 * 1024):.1f}MB"
