"""Background queue for optimization jobs."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .service import ModelOptimizer

logger = logging.getLogger(__name__)

CompletionListener = Callable[[Path, Optional[Path]], None]


class OptimizationQueue:
    def __init__(self, optimizer: ModelOptimizer, max_concurrency: int = 1) -> None:
        self.optimizer = optimizer
        self.max_concurrency = max_concurrency
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._tasks: Dict[Path, asyncio.Task] = {}
        self._listeners: List[CompletionListener] = []

    def add_listener(self, listener: CompletionListener) -> None:
        self._listeners.append(listener)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, source: Path) -> Optional[asyncio.Task]:
        """Schedule ``source`` for optimization on the running event loop."""
        if not self.optimizer.can_optimize(source):
            logger.debug("Skipping optimization for %s", source.name)
            return None
        existing = self._tasks.get(source)
        if existing is not None and not existing.done():
            return existing

        task = asyncio.create_task(self._run(source), name=f"optimize:{source.name}")
        self._tasks[source] = task
        task.add_done_callback(partial(self._on_done, source))
        logger.debug("Queued optimization for %s", source.name)
        return task

    async def _run(self, source: Path) -> Optional[Path]:
        async with self._semaphore:
            return await self.optimizer.optimize(source)

    def _on_done(self, source: Path, task: asyncio.Task) -> None:
        if self._tasks.get(source) is task:
            del self._tasks[source]
        if task.cancelled():
            logger.info("Optimization of %s cancelled", source.name)
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Optimization task for %s crashed: %s", source.name, exc)
            return
        result = task.result()
        for listener in list(self._listeners):
            try:
                listener(source, result)
            except Exception as listener_exc:  # pylint: disable=broad-except
                logger.error("Optimization listener failed for %s: %s", source.name, listener_exc)

    async def join(self) -> None:
        """Wait for every queued job to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
