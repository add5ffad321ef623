from typing import Optional
from rich.box import ROUNDED
from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from yoga.domain.models import SortField
from yoga.ui.filters import describe_filters
from yoga.ui.model import LibraryState
from yoga.ui.view_helpers import render_progress_bar, video_row

HELP_LINE = "↑/↓ navigate  •  enter play  •  s sort  •  / filter  •  c crop  •  t edit tags  •  i re-index  •  q quit"

_SORT_LABELS = {
    SortField.NAME: "Name",
    SortField.DURATION: "Duration",
    SortField.AGE: "Age",
}


class Dashboard:
    """Rich renderer for a LibraryState (table, progress line, status)."""

    def __init__(
        self,
        state: LibraryState,
        console: Optional[Console] = None,
        progress_bar_width: int = 24,
        max_rows: Optional[int] = None,
        show_help: bool = False,
    ):
        self.state = state
        self.console = console or Console()
        self.progress_bar_width = progress_bar_width
        self.max_rows = max_rows
        self.show_help = show_help
        self._live: Optional[Live] = None

    def _header(self, field: SortField) -> str:
        label = _SORT_LABELS[field]
        if self.state.sort_field != field:
            return label
        return f"{label} {'▲' if self.state.sort_ascending else '▼'}"

    def _generate_table(self) -> Table:
        table = Table(box=ROUNDED, border_style="cyan", header_style="bold magenta", expand=True)
        table.add_column(self._header(SortField.NAME), ratio=4, no_wrap=True, overflow="ellipsis")
        # Grows for "!<error>" markers
        table.add_column(self._header(SortField.DURATION), min_width=12, ratio=2, overflow="fold")
        table.add_column(self._header(SortField.AGE), width=12, no_wrap=True)
        table.add_column("Tags", ratio=2, no_wrap=True, overflow="ellipsis")

        rows = self.state.filtered
        if self.max_rows is not None:
            # Keep the cursor row visible
            start = max(0, min(self.state.cursor - self.max_rows // 2, len(rows) - self.max_rows))
            rows = rows[start:start + self.max_rows]
        else:
            start = 0
        for offset, video in enumerate(rows):
            style = "reverse" if start + offset == self.state.cursor else None
            cells = [Text(cell) for cell in video_row(video)]
            if video.error:
                cells[1].stylize("red")
            table.add_row(*cells, style=style)
        return table

    def _generate_progress_line(self) -> Optional[Text]:
        durations = self.state.durations
        if not durations.active:
            return None
        bar = render_progress_bar(durations.done, durations.total, self.progress_bar_width)
        return Text(f"Duration scan {bar} {durations.done}/{durations.total}", style="cyan")

    def create_display(self) -> RenderableType:
        if self.state.loading and not self.state.videos:
            return Text(self.state.status_text() or "Loading videos, please wait...", style="bold cyan")

        parts: list = [self._generate_table()]
        progress = self._generate_progress_line()
        if progress is not None:
            parts.append(progress)
        if not self.state.filters.is_empty:
            parts.append(Text(f"Filters: {describe_filters(self.state.filters)}", style="dim"))
        parts.append(Text(self.state.status_text(), style="bold"))
        if self.show_help:
            parts.append(Text(HELP_LINE, style="dim"))
        return Panel(Group(*parts), title=f"YOGA • {self.state.root}", border_style="cyan")

    def refresh(self, state: Optional[LibraryState] = None):
        if state is not None:
            self.state = state
        if self._live is not None:
            self._live.update(self.create_display(), refresh=True)

    def start(self):
        self._live = Live(self.create_display(), console=self.console, refresh_per_second=4, transient=True)
        self._live.start()
        return self

    def stop(self):
        if self._live is not None:
            self._live.stop()
            self._live = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
