"""Shared test helpers."""

import threading

from dtop.gateway import ContainerInfo, GatewayError, ProcessRow
from dtop.models import Action, ContainerRecord, ProcessRecord


def info(
    container_id: str,
    *,
    name: str = "",
    image: str = "busybox",
    command: str = "sh",
    status: str = "Up 2 hours",
    created: float = 0.0,
) -> ContainerInfo:
    """Build a ContainerInfo as the runtime would list it."""
    return ContainerInfo(
        id=container_id,
        name=name or f"/{container_id}",
        image=image,
        command=command,
        created=created,
        status=status,
    )


def record(
    container_id: str,
    *,
    name: str = "",
    image: str = "busybox",
    command: str = "sh",
    uptime: str = "2 hours",
    status: str = "Up 2 hours",
    cpu: str = "0.0",
    ram: str = "0.0",
    processes: int = 0,
    selected: bool = False,
    expanded: bool = False,
) -> ContainerRecord:
    """Build a ContainerRecord with ``processes`` dummy processes."""
    return ContainerRecord(
        id=container_id,
        name=name or f"/{container_id}",
        image=image,
        command=command,
        uptime=uptime,
        status=status,
        cpu_percent=cpu,
        memory_percent=ram,
        processes=tuple(
            ProcessRecord(
                pid=str(100 + i),
                command=f"worker {i}",
                uptime="01:00",
                status="",
                cpu_percent="0.0",
                memory_percent="0.0",
            )
            for i in range(processes)
        ),
        selected=selected,
        expanded=expanded,
    )


class FakeGateway:
    """In-memory runtime with scriptable containers, processes and failures."""

    def __init__(self) -> None:
        self.containers: list[ContainerInfo] = []
        self.processes: dict[str, list[ProcessRow]] = {}
        self.fail_listing = False
        self.failing_processes: set[str] = set()
        self.process_queries: list[str] = []
        self.actions: list[tuple[Action, str]] = []

    def list_containers(self, include_stopped: bool = True) -> list[ContainerInfo]:
        if self.fail_listing:
            raise GatewayError("daemon unavailable")
        return list(self.containers)

    def list_processes(self, container_id: str) -> list[ProcessRow]:
        self.process_queries.append(container_id)
        if container_id in self.failing_processes:
            raise GatewayError(f"no such container: {container_id}")
        return list(self.processes.get(container_id, []))

    def uptime(self, info: ContainerInfo) -> str:
        return "2 hours"

    def run_action(self, action: Action, container_id: str) -> None:
        self.actions.append((action, container_id))


class RecordingExecutor:
    """Executor collecting (action, id) calls from worker threads."""

    def __init__(self, fail: bool = False) -> None:
        self.calls: list[tuple[Action, str]] = []
        self.fail = fail
        self._lock = threading.Lock()

    def __call__(self, action: Action, container_id: str) -> None:
        with self._lock:
            self.calls.append((action, container_id))
        if self.fail:
            raise GatewayError(f"{action.value} failed")
