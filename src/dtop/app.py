"""dtop - Main Textual application."""

import logging
import sys
import time
from datetime import datetime

import psutil
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.widgets import Static

from dtop.actions import ActionDispatcher
from dtop.config import configure_logging, load_config
from dtop.dashboard import Dashboard, Event, Frame, KeyPressed, Resized, Tick
from dtop.gateway import ConnectionFailed, connect
from dtop.models import Row, SortKey, ViewMode
from dtop.monitor import SnapshotReconciler
from dtop.pages import COLUMNS, Page, format_row, pretty_column

logger = logging.getLogger(__name__)

STYLE_ACTIVE = "reverse"
STYLE_SELECTION = "black on yellow"
STYLE_RUNNING = "green"
STYLE_CONTAINER = "cyan"
STYLE_HELP = "yellow"
STYLE_HIGHLIGHT = "reverse magenta"


def format_uptime(seconds: float) -> str:
    """Format host uptime like ``uptime(1)``."""
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    if days > 0:
        return f"{days} days, {hours:2d}:{minutes:02d}"
    return f"{hours:2d}:{minutes:02d}"


def host_summary() -> str:
    """One-line host summary: time, uptime, users and load average."""
    try:
        uptime = format_uptime(time.time() - psutil.boot_time())
        users = len(psutil.users())
        load = psutil.getloadavg()
    except (OSError, RuntimeError):
        return datetime.now().strftime(" %H:%M:%S")
    return (
        f" {datetime.now():%H:%M:%S} up {uptime}, {users} users, "
        f"load average: {load[0]:.2f}, {load[1]:.2f}, {load[2]:.2f}"
    )


def _row_style(row: Row, is_active: bool) -> str:
    if is_active:
        return STYLE_ACTIVE
    if row.is_active_selection:
        return STYLE_SELECTION
    if row.is_container:
        return STYLE_RUNNING if row.is_running else STYLE_CONTAINER
    return ""


def _render_page(page: Page) -> Text:
    text = Text()
    text.append(f"\n{page.header}\n", style=STYLE_SELECTION)
    if page.info:
        text.append(page.info)
    text.append("\n")
    for label, value in page.body:
        text.append(pretty_column(label + ":", 20), style=STYLE_HELP)
        text.append(pretty_column(value, 40))
        text.append("\n")
    text.append(f"\n{page.footer}\n", style=STYLE_CONTAINER)
    return text


def render_frame(frame: Frame, summary: str = "") -> Text:
    """Turn a render request into styled text."""
    if not frame.drawable:
        return Text()
    if frame.page is not None:
        return _render_page(frame.page)

    width = frame.column_width
    text = Text(summary + "\n")
    for key, title in zip(SortKey, COLUMNS):
        style = STYLE_HIGHLIGHT if key is frame.sort_key else STYLE_ACTIVE
        text.append(pretty_column(title, width), style=style)
    text.append("\n")

    for offset, row in enumerate(frame.visible_rows):
        is_active = frame.cursor.scroll + offset == frame.cursor.active
        text.append(format_row(row, width), style=_row_style(row, is_active))
        text.append("\n")
    return text


def key_name(event: events.Key) -> str | None:
    """Reduce a Textual key event to the dashboard's key vocabulary."""
    if event.key in ("up", "down"):
        return event.key
    if event.character == " ":
        return "space"
    if event.character and event.character.isprintable():
        return event.character
    return None


class DtopApp(App):
    """
    Main dtop application.

    Textual multiplexes the three event sources: its driver thread reads the
    keyboard, ``set_interval`` drives the refresh tick and the driver reports
    terminal resizes. Each source forwards exactly one event to the Dashboard,
    followed by a redraw.
    """

    TITLE = "dtop"
    SUB_TITLE = "Docker Container Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #screen {
        height: 1fr;
    }
    """

    def __init__(self, dashboard: Dashboard, interval: float = 1.0) -> None:
        """Initialize the DtopApp."""
        super().__init__()
        self._dashboard = dashboard
        self._interval = interval

    @property
    def dashboard(self) -> Dashboard:
        return self._dashboard

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Static(id="screen")

    def on_mount(self) -> None:
        """Size the dashboard and start the refresh timer."""
        self._dashboard.width, self._dashboard.height = self.size
        self._redraw()
        self.set_interval(self._interval, self._on_tick)

    def on_key(self, event: events.Key) -> None:
        key = key_name(event)
        if key is None:
            return
        event.stop()
        self._dispatch(KeyPressed(key))

    def on_resize(self, event: events.Resize) -> None:
        self._dispatch(Resized(event.size.width, event.size.height))

    def _on_tick(self) -> None:
        self._dispatch(Tick())

    def _dispatch(self, event: Event) -> None:
        if not self._dashboard.handle(event):
            self.exit(return_code=0)
            return
        self._redraw()

    def _redraw(self) -> None:
        try:
            frame = self._dashboard.frame()
            summary = host_summary() if frame.mode is ViewMode.LIST else ""
            self.query_one("#screen", Static).update(render_frame(frame, summary))
        except Exception:
            logger.exception("Redraw failed")
            self.exit(return_code=1)


def main(argv: list[str] | None = None) -> int:
    """Entry point for dtop application."""
    config = load_config(argv)
    configure_logging(config)

    try:
        gateway = connect(config.endpoint)
    except ConnectionFailed as e:
        logger.error("Cannot connect to %s: %s", config.endpoint.url, e)
        print(f"dtop: cannot connect to {config.endpoint.url}: {e}", file=sys.stderr)
        return 1

    dashboard = Dashboard(SnapshotReconciler(gateway), ActionDispatcher(gateway.run_action))
    dashboard.refresh()

    app = DtopApp(dashboard, interval=config.interval)
    app.run()
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
