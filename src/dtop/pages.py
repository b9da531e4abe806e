"""Static help page, container info page and column formatting."""

from dataclasses import dataclass, field

from dtop.models import ContainerRecord, Row

COLUMNS = ("Name", "Image", "Id", "Command", "Uptime", "Status", "%CPU", "%RAM")


@dataclass(slots=True, frozen=True)
class Page:
    """A full-screen page of labelled items."""

    header: str
    info: str = ""
    body: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    footer: str = ""


HELP_PAGE = Page(
    header='Help of "dtop" command:',
    body=(
        ("<arrow up>", "scroll up"),
        ("<arrow down>", "scroll down"),
        ("<space>", "select/unselect container"),
        ("u", "unselect all containers"),
        ("q", "quit"),
        ("h", "prints this help"),
        ("a", "show/hide processes on selected containers"),
        ("A", "show/hide processes on all containers"),
        ("k", "kill selected containers"),
        ("s", "start selected containers"),
        ("S", "stop selected containers"),
        ("r", "remove selected containers"),
        ("i", "view information about current container"),
        ("p", "pause selected containers"),
        ("P", "unpause selected containers"),
        ("1", "sort by name"),
        ("2", "sort by image"),
        ("3", "sort by id"),
        ("4", "sort by command"),
        ("5", "sort by uptime"),
        ("6", "sort by status"),
        ("7", "sort by %CPU"),
        ("8", "sort by %RAM"),
        ("I", "revert current sort"),
    ),
    footer="Press 'h' to return.",
)


def info_page(record: ContainerRecord) -> Page:
    """Build the information page for a frozen container record."""
    return Page(
        header="Information about container:",
        body=(
            ("Name", record.name),
            ("Id", record.id),
            ("Command", record.command),
            ("Uptime", record.uptime),
            ("Status", record.status),
            ("%CPU", record.cpu_percent),
            ("%RAM", record.memory_percent),
        ),
        footer="Press 'i' to return.",
    )


def pretty_column(text: str, width: int, prefix: str = " ", suffix: str = " ") -> str:
    """Pad or truncate ``text`` so the cell is exactly ``width`` wide."""
    room = max(0, width - len(prefix) - len(suffix))
    return (prefix + text[:room].ljust(room) + suffix)[:width]


def format_row(row: Row, width: int) -> str:
    """Render a row as eight fixed-width cells."""
    if row.is_container:
        c = row.container
        cells = (c.name, c.image, c.id, c.command, c.uptime, c.status,
                 c.cpu_percent, c.memory_percent)
        return "".join(pretty_column(cell, width) for cell in cells)

    p = row.process
    return (
        pretty_column("", width)
        + pretty_column("", width)
        + pretty_column(p.pid, width, " |- ")
        + "".join(
            pretty_column(cell, width)
            for cell in (p.command, p.uptime, p.status, p.cpu_percent, p.memory_percent)
        )
    )
