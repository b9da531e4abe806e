"""Fire-and-forget lifecycle commands."""

import logging
import threading
from collections.abc import Callable, Sequence

from dtop.models import Action, Row
from dtop.projection import container_at

logger = logging.getLogger(__name__)

Executor = Callable[[Action, str], None]


def resolve_operands(rows: Sequence[Row], active: int) -> list[str]:
    """
    Pick the container ids an action applies to.

    Every selected container, or when nothing is selected the container
    under the cursor. A cursor on a process row yields nothing.
    """
    selected = [row.container.id for row in rows if row.is_active_selection]
    if selected:
        return selected
    container = container_at(rows, active)
    return [container.id] if container is not None else []


class ActionDispatcher:
    """
    Launches one background thread per container and action.

    Completion is never awaited and outcomes never reach the caller: the
    next refresh shows whatever the runtime did.
    """

    def __init__(self, executor: Executor) -> None:
        """
        Initialize the ActionDispatcher.

        Args:
            executor: Blocking callable running one command on one container.
        """
        self._executor = executor

    def dispatch(self, action: Action, container_ids: Sequence[str]) -> list[threading.Thread]:
        """Start ``action`` on each container id without waiting."""
        threads = []
        for container_id in container_ids:
            thread = threading.Thread(
                target=self._run,
                args=(action, container_id),
                daemon=True,
                name=f"dtop-{action.value}-{container_id[:12]}",
            )
            thread.start()
            threads.append(thread)
        return threads

    def _run(self, action: Action, container_id: str) -> None:
        try:
            self._executor(action, container_id)
        except Exception as e:
            logger.warning("%s %s failed: %s", action.value, container_id[:12], e)
        else:
            logger.debug("%s %s done", action.value, container_id[:12])
