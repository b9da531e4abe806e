"""Container state reconciliation for dtop."""

import logging
import math
from typing import Protocol

from dtop.gateway import ContainerInfo, GatewayError, ProcessRow
from dtop.models import ContainerRecord, ProcessRecord, Snapshot, UiFlags

logger = logging.getLogger(__name__)


class RuntimeGateway(Protocol):
    """Query surface the reconciler needs from the runtime."""

    def list_containers(self, include_stopped: bool = True) -> list[ContainerInfo]: ...

    def list_processes(self, container_id: str) -> list[ProcessRow]: ...

    def uptime(self, info: ContainerInfo) -> str: ...


def parse_percent(value: str) -> float | None:
    """Parse a formatted percentage, returning None unless it is a finite number."""
    try:
        parsed = float(value.strip().rstrip("%"))
    except (AttributeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def aggregate(processes: tuple[ProcessRecord, ...]) -> tuple[str, str]:
    """
    Sum CPU and RAM usage of a container's processes.

    Values that fail to parse contribute nothing.
    """
    total_cpu = 0.0
    total_ram = 0.0
    for proc in processes:
        cpu = parse_percent(proc.cpu_percent)
        if cpu is not None:
            total_cpu += cpu
        ram = parse_percent(proc.memory_percent)
        if ram is not None:
            total_ram += ram
    return f"{total_cpu:.1f}", f"{total_ram:.1f}"


class SnapshotReconciler:
    """
    Builds a fresh Snapshot from the runtime each refresh cycle.

    Runs synchronously on the caller's thread. Query failures never escape:
    a failed container listing yields an empty cycle that still remembers the
    selection and expansion flags of the previous one.
    """

    def __init__(self, gateway: RuntimeGateway) -> None:
        """
        Initialize the SnapshotReconciler.

        Args:
            gateway: Runtime to query for containers and processes.
        """
        self._gateway = gateway

    def reconcile(self, previous: Snapshot) -> Snapshot:
        """Query the runtime and carry UI flags over from ``previous``."""
        try:
            listed = self._gateway.list_containers(include_stopped=True)
        except GatewayError as e:
            logger.warning("Container listing failed, keeping flags only: %s", e)
            return Snapshot(containers=[], retained=previous.all_flags())

        known = previous.all_flags()
        containers = []
        for info in listed:
            record = self._build_record(info)
            flags = known.get(record.id, UiFlags())
            record.selected = flags.selected
            record.expanded = flags.expanded
            containers.append(record)

        logger.debug("Reconciled %d containers", len(containers))
        return Snapshot(containers=containers)

    def _build_record(self, info: ContainerInfo) -> ContainerRecord:
        record = ContainerRecord(
            id=info.id,
            name=info.name,
            image=info.image,
            command=info.command,
            uptime=self._gateway.uptime(info),
            status=info.status,
        )
        if record.is_running:
            record.processes = self._collect_processes(record.id)
        record.cpu_percent, record.memory_percent = aggregate(record.processes)
        return record

    def _collect_processes(self, container_id: str) -> tuple[ProcessRecord, ...]:
        try:
            rows = self._gateway.list_processes(container_id)
        except GatewayError as e:
            # The container may have stopped between the two queries
            logger.warning("Process listing failed: %s", e)
            return ()

        return tuple(
            ProcessRecord(
                pid=pid,
                command=command,
                uptime=uptime,
                status="",
                cpu_percent=cpu,
                memory_percent=mem,
            )
            for pid, uptime, cpu, mem, command in rows
        )
