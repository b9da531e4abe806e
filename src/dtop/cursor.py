"""Cursor and scroll window over a row sequence of changing length."""

from collections.abc import Sequence

from dtop.models import CursorState, Row
from dtop.projection import container_at


def clamp(cursor: CursorState, row_count: int, viewport_height: int) -> CursorState:
    """
    Keep the active row inside the rows and the visible window.

    The window is ``[scroll, scroll + viewport_height)``.
    """
    height = max(1, viewport_height)
    active, scroll = cursor.active, cursor.scroll

    if row_count == 0:
        active = 0
    else:
        active = min(max(active, 0), row_count - 1)

    if active >= scroll + height:
        scroll = active - height + 1
    if active < scroll:
        scroll = active
    return CursorState(active, scroll)


def move(
    cursor: CursorState, delta: int, row_count: int, viewport_height: int
) -> CursorState:
    """Move the active row by ``delta`` and clamp."""
    return clamp(
        CursorState(cursor.active + delta, cursor.scroll), row_count, viewport_height
    )


def select_and_advance(
    cursor: CursorState, rows: Sequence[Row], viewport_height: int
) -> CursorState:
    """Toggle selection of the container under the cursor, then step down."""
    container = container_at(rows, cursor.active)
    if container is not None:
        container.selected = not container.selected
    return move(cursor, 1, len(rows), viewport_height)
