"""Data models for dtop."""

from dataclasses import dataclass, field
from enum import Enum


class SortKey(Enum):
    """Sort keys for the container list, in column order."""

    NAME = "name"
    IMAGE = "image"
    ID = "id"
    COMMAND = "command"
    UPTIME = "uptime"
    STATUS = "status"
    CPU = "cpu"
    RAM = "ram"


class SortDirection(Enum):
    """Direction applied on top of the natural order of a sort key."""

    FORWARD = "forward"
    REVERSED = "reversed"

    def toggled(self) -> "SortDirection":
        """Return the opposite direction."""
        if self is SortDirection.FORWARD:
            return SortDirection.REVERSED
        return SortDirection.FORWARD


class ViewMode(Enum):
    """What the dashboard is currently showing."""

    LIST = "list"
    HELP = "help"
    INFO = "info"
    CONFIRM = "confirm"  # reserved, no transition leads here


class Action(Enum):
    """Lifecycle commands that can be dispatched against containers."""

    START = "start"
    STOP = "stop"
    KILL = "kill"
    PAUSE = "pause"
    UNPAUSE = "unpause"
    REMOVE = "remove"


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable snapshot of a process running inside a container."""

    pid: str
    command: str
    uptime: str
    status: str
    cpu_percent: str
    memory_percent: str


@dataclass(slots=True)
class ContainerRecord:
    """
    One container as seen during a refresh cycle.

    Only ``selected`` and ``expanded`` survive from one cycle to the next;
    every other field is replaced wholesale.
    """

    id: str
    name: str
    image: str
    command: str
    uptime: str
    status: str
    cpu_percent: str = "0.0"
    memory_percent: str = "0.0"
    processes: tuple[ProcessRecord, ...] = ()
    selected: bool = False
    expanded: bool = False

    @property
    def is_running(self) -> bool:
        """Whether the runtime reports the container as up."""
        return self.status.startswith("Up")


@dataclass(slots=True, frozen=True)
class UiFlags:
    """UI-only state carried across refresh cycles."""

    selected: bool = False
    expanded: bool = False


@dataclass(slots=True)
class Snapshot:
    """
    Complete reconciled state of one refresh cycle.

    ``retained`` holds flags of containers that could not be listed during a
    failed cycle so that they are restored once the runtime answers again.
    """

    containers: list[ContainerRecord] = field(default_factory=list)
    retained: dict[str, UiFlags] = field(default_factory=dict)

    def all_flags(self) -> dict[str, UiFlags]:
        """Return every known flag set, live containers taking precedence."""
        flags = dict(self.retained)
        for container in self.containers:
            flags[container.id] = UiFlags(container.selected, container.expanded)
        return flags

    def selected(self) -> list[ContainerRecord]:
        """Return the containers currently flagged as selected."""
        return [c for c in self.containers if c.selected]

    def clear_selection(self) -> None:
        """Unselect every container, including retained ones."""
        for container in self.containers:
            container.selected = False
        self.retained = {
            cid: UiFlags(False, flags.expanded) for cid, flags in self.retained.items()
        }


@dataclass(slots=True, frozen=True)
class Row:
    """A displayable line derived from a container or one of its processes."""

    container: ContainerRecord
    process: ProcessRecord | None = None

    @property
    def is_container(self) -> bool:
        return self.process is None

    @property
    def is_process(self) -> bool:
        return self.process is not None

    @property
    def is_active_selection(self) -> bool:
        """Whether the row belongs to a selected container line."""
        return self.is_container and self.container.selected

    @property
    def is_running(self) -> bool:
        return self.is_container and self.container.is_running


@dataclass(slots=True, frozen=True)
class CursorState:
    """Active row index and first visible row index."""

    active: int = 0
    scroll: int = 0
