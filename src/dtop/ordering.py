"""Deterministic ordering of containers for display."""

from collections.abc import Iterable
from functools import cmp_to_key

from dtop.models import ContainerRecord, SortDirection, SortKey
from dtop.monitor import parse_percent

_TEXT_FIELDS = {
    SortKey.NAME: lambda c: c.name,
    SortKey.IMAGE: lambda c: c.image,
    SortKey.COMMAND: lambda c: c.command,
    SortKey.UPTIME: lambda c: c.uptime,
    SortKey.STATUS: lambda c: c.status,
}

_USAGE_FIELDS = {
    SortKey.CPU: lambda c: c.cpu_percent,
    SortKey.RAM: lambda c: c.memory_percent,
}


def _usage_less(a: str, b: str) -> bool | None:
    """
    Compare two usage strings, highest first.

    Returns None when both values rank equal, unmeasured values
    ranking after every measured one.
    """
    value_a, value_b = parse_percent(a), parse_percent(b)
    if value_a == value_b:
        return None
    if value_a is None:
        return False
    if value_b is None:
        return True
    return value_a > value_b


def container_less(
    a: ContainerRecord,
    b: ContainerRecord,
    key: SortKey,
    direction: SortDirection = SortDirection.FORWARD,
) -> bool:
    """Whether ``a`` is displayed before ``b``."""
    less: bool | None = None
    if key in _TEXT_FIELDS:
        field_a, field_b = _TEXT_FIELDS[key](a), _TEXT_FIELDS[key](b)
        if field_a != field_b:
            less = field_a < field_b
    elif key in _USAGE_FIELDS:
        less = _usage_less(_USAGE_FIELDS[key](a), _USAGE_FIELDS[key](b))

    if less is None:
        # ids are unique
        less = a.id < b.id

    if direction is SortDirection.REVERSED:
        less = not less
    return less


def compare_containers(
    a: ContainerRecord,
    b: ContainerRecord,
    key: SortKey,
    direction: SortDirection = SortDirection.FORWARD,
) -> int:
    """Three-way comparison built on container_less."""
    if a.id == b.id:
        return 0
    return -1 if container_less(a, b, key, direction) else 1


def sort_containers(
    containers: Iterable[ContainerRecord],
    key: SortKey,
    direction: SortDirection = SortDirection.FORWARD,
) -> list[ContainerRecord]:
    """Return the containers in display order."""
    return sorted(
        containers,
        key=cmp_to_key(lambda a, b: compare_containers(a, b, key, direction)),
    )
