"""Flattening of the container/process tree into display rows."""

from collections.abc import Sequence

from dtop.models import ContainerRecord, Row, Snapshot, SortDirection, SortKey
from dtop.ordering import sort_containers


def project(
    snapshot: Snapshot,
    key: SortKey,
    direction: SortDirection,
    show_all_processes: bool,
) -> list[Row]:
    """
    Build the ordered row sequence for a snapshot.

    Each container row is followed by its process rows when processes are
    shown globally or the container is expanded.
    """
    rows: list[Row] = []
    for container in sort_containers(snapshot.containers, key, direction):
        rows.append(Row(container))
        if show_all_processes or container.expanded:
            rows.extend(Row(container, proc) for proc in container.processes)
    return rows


def container_at(rows: Sequence[Row], index: int) -> ContainerRecord | None:
    """Return the container on a container row, None for process rows."""
    if 0 <= index < len(rows) and rows[index].is_container:
        return rows[index].container
    return None
