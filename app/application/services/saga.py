"""
Named multi-step operations with compensations.

    saga = Saga("deliver_item", lost_item_id=item.id)
    photos = await saga.step("upload_photos", upload, compensate=destroy)
    delivered = await saga.step("move_records", move)

When a step fails, the compensations of the steps that already completed run
in reverse order. A compensation returns what it could not undo (for example
image ids left on the host); anything it returns, or any error it raises, is
logged as a reconciliation record so the leftover can be cleaned up by hand.
"""

import inspect
from typing import Any, Callable, Optional

import structlog

from app.core.exceptions import AppError, DependencyException

logger = structlog.get_logger(__name__)


async def _call(fn: Callable, *args) -> Any:
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class Saga:
    def __init__(self, name: str, **context: Any):
        self.name = name
        self.context = context
        self._completed: list[tuple[str, Callable, Any]] = []

    async def step(self, name: str, action: Callable[[], Any], compensate: Optional[Callable[[Any], Any]] = None) -> Any:
        """Run ``action``; on failure compensate earlier steps and raise."""
        try:
            result = await _call(action)
        except Exception as exc:
            logger.warning("Saga step failed", saga=self.name, step=name, error=str(exc), **self.context)
            await self._compensate()
            if isinstance(exc, AppError):
                raise
            raise DependencyException(
                f"Operation '{self.name}' failed",
                details={"saga": self.name, "step": name},
            ) from exc

        if compensate is not None:
            self._completed.append((name, compensate, result))
        return result

    async def _compensate(self) -> None:
        while self._completed:
            name, compensate, result = self._completed.pop()
            try:
                leftover = await _call(compensate, result)
            except Exception as exc:
                logger.error(
                    "Saga reconciliation required",
                    saga=self.name,
                    step=name,
                    error=str(exc),
                    **self.context,
                )
                continue
            if leftover:
                logger.error(
                    "Saga reconciliation required",
                    saga=self.name,
                    step=name,
                    leftover=leftover,
                    **self.context,
                )
