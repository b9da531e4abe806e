"""Interaction engine: view state machine and event handling for dtop."""

import dataclasses
import logging
from dataclasses import dataclass

from dtop import cursor as cursor_model
from dtop.actions import ActionDispatcher, resolve_operands
from dtop.models import (
    Action,
    ContainerRecord,
    CursorState,
    Row,
    Snapshot,
    SortDirection,
    SortKey,
    ViewMode,
)
from dtop.monitor import SnapshotReconciler
from dtop.pages import HELP_PAGE, Page, info_page
from dtop.projection import container_at, project

logger = logging.getLogger(__name__)

HEADER_SIZE = 2
NB_COLUMNS = 8
MIN_WIDTH = 40
MIN_HEIGHT = 5

SORT_KEYS = {str(i): key for i, key in enumerate(SortKey, start=1)}

ACTION_KEYS = {
    "k": Action.KILL,
    "s": Action.START,
    "S": Action.STOP,
    "r": Action.REMOVE,
    "p": Action.PAUSE,
    "P": Action.UNPAUSE,
}


@dataclass(slots=True, frozen=True)
class KeyPressed:
    """A key from the keyboard reader: a character, or "up", "down", "space"."""

    key: str


@dataclass(slots=True, frozen=True)
class Tick:
    """The periodic refresh timer fired."""


@dataclass(slots=True, frozen=True)
class Resized:
    """The terminal changed size."""

    width: int
    height: int


Event = KeyPressed | Tick | Resized


@dataclass(slots=True, frozen=True)
class Frame:
    """Everything the renderer needs for one redraw."""

    mode: ViewMode
    rows: tuple[Row, ...]
    cursor: CursorState
    width: int
    height: int
    sort_key: SortKey
    direction: SortDirection
    page: Page | None = None

    @property
    def drawable(self) -> bool:
        return self.width >= MIN_WIDTH and self.height >= MIN_HEIGHT

    @property
    def viewport_height(self) -> int:
        return max(1, self.height - HEADER_SIZE)

    @property
    def column_width(self) -> int:
        return (self.width - 1) // NB_COLUMNS

    @property
    def visible_rows(self) -> tuple[Row, ...]:
        start = self.cursor.scroll
        return self.rows[start:start + self.viewport_height]


class Dashboard:
    """
    Single-threaded owner of all dashboard state.

    Consumes one event per ``handle`` call. Snapshot, cursor, view mode and
    sort settings are only ever touched from the thread calling ``handle``;
    background work (keyboard reading, lifecycle actions) never reaches in.
    """

    def __init__(
        self,
        reconciler: SnapshotReconciler,
        dispatcher: ActionDispatcher,
        width: int = 80,
        height: int = 24,
    ) -> None:
        """
        Initialize the Dashboard.

        Args:
            reconciler: Rebuilds the snapshot on every tick.
            dispatcher: Fires lifecycle actions at containers.
            width: Terminal width in cells.
            height: Terminal height in cells.
        """
        self._reconciler = reconciler
        self._dispatcher = dispatcher
        self.snapshot = Snapshot()
        self.cursor = CursorState()
        self.mode = ViewMode.LIST
        self.sort_key = SortKey.CPU
        self.direction = SortDirection.FORWARD
        self.show_all_processes = False
        self.info: ContainerRecord | None = None
        self.width = width
        self.height = height
        self.running = True

    @property
    def viewport_height(self) -> int:
        return max(1, self.height - HEADER_SIZE)

    def rows(self) -> list[Row]:
        """Current display rows for the snapshot and sort settings."""
        return project(
            self.snapshot, self.sort_key, self.direction, self.show_all_processes
        )

    def refresh(self) -> None:
        """Replace the snapshot with a freshly reconciled one."""
        self.snapshot = self._reconciler.reconcile(self.snapshot)

    def handle(self, event: Event) -> bool:
        """Apply one event. Returns False once the dashboard should exit."""
        if isinstance(event, KeyPressed):
            self.handle_key(event.key)
        elif isinstance(event, Tick):
            self.refresh()
        elif isinstance(event, Resized):
            self.width, self.height = event.width, event.height
        return self.running

    def handle_key(self, key: str) -> None:
        """Interpret a key against the current view mode."""
        if key == "q":
            self.running = False
            return

        if self.mode is ViewMode.LIST:
            self._handle_list_key(key)
        elif self.mode is ViewMode.HELP:
            if key == "h":
                self.mode = ViewMode.LIST
        elif self.mode is ViewMode.INFO:
            if key == "i":
                self.mode = ViewMode.LIST
                self.info = None

        # Sort settings are accepted in every mode
        if key in SORT_KEYS:
            self.sort_key = SORT_KEYS[key]
        elif key == "I":
            self.direction = self.direction.toggled()

    def _handle_list_key(self, key: str) -> None:
        rows = self.rows()

        if key == "up":
            self.cursor = cursor_model.move(self.cursor, -1, len(rows), self.viewport_height)
        elif key == "down":
            self.cursor = cursor_model.move(self.cursor, 1, len(rows), self.viewport_height)
        elif key == "space":
            self.cursor = cursor_model.select_and_advance(self.cursor, rows, self.viewport_height)
        elif key == "u":
            self.snapshot.clear_selection()
        elif key == "a":
            by_id = {c.id: c for c in self.snapshot.containers}
            for container_id in resolve_operands(rows, self.cursor.active):
                by_id[container_id].expanded = not by_id[container_id].expanded
            self._reclamp()
        elif key == "A":
            self.show_all_processes = not self.show_all_processes
            self._reclamp()
        elif key == "h":
            self.mode = ViewMode.HELP
        elif key == "i":
            container = container_at(rows, self.cursor.active)
            if container is not None:
                self.info = dataclasses.replace(container)
                self.mode = ViewMode.INFO
        elif key in ACTION_KEYS:
            operands = resolve_operands(rows, self.cursor.active)
            logger.info("Dispatching %s to %d container(s)", ACTION_KEYS[key].value, len(operands))
            self._dispatcher.dispatch(ACTION_KEYS[key], operands)

    def _reclamp(self) -> None:
        self.cursor = cursor_model.clamp(self.cursor, len(self.rows()), self.viewport_height)

    def frame(self) -> Frame:
        """Build the render request, re-clamping the cursor to the current rows."""
        rows = self.rows()
        self.cursor = cursor_model.clamp(self.cursor, len(rows), self.viewport_height)
        page = None
        if self.mode is ViewMode.HELP:
            page = HELP_PAGE
        elif self.mode is ViewMode.INFO and self.info is not None:
            page = info_page(self.info)
        return Frame(
            mode=self.mode,
            rows=tuple(rows),
            cursor=self.cursor,
            width=self.width,
            height=self.height,
            sort_key=self.sort_key,
            direction=self.direction,
            page=page,
        )
