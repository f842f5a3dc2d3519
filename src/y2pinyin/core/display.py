"""Terminal rendering of annotated lyrics."""

from typing import Callable, List, Optional, Sequence

import click

from ..config import DISPLAY_CONTEXT_LINES
from .lrc import format_timestamp
from .models import NO_LINE, LyricLine, LyricsStatus, TrackSelection

STATUS_MESSAGES = {
    LyricsStatus.IDLE: "No track selected.",
    LyricsStatus.LOADING: "Loading lyrics...",
    LyricsStatus.INSTRUMENTAL: "This track is instrumental.",
    LyricsStatus.NOT_FOUND: "No lyrics found for this track.",
    LyricsStatus.ERROR: "Could not load lyrics.",
}


def format_line(
    line: LyricLine,
    show_time: bool = True,
    show_pinyin: bool = True,
    number: Optional[int] = None,
) -> List[str]:
    """Render one line as pinyin above the original text."""
    prefix = f"{number:>3} " if number is not None else ""
    if show_time:
        prefix += f"[{format_timestamp(line.start_time)}] "
    pad = " " * len(prefix)
    out = []
    if show_pinyin and line.annotation:
        out.append(f"{pad}{line.annotation}")
    out.append(f"{prefix}{line.source_text}")
    return out


def render_lyrics(
    lines: Sequence[LyricLine], show_time: bool = True, show_pinyin: bool = True
) -> str:
    """Render the whole line sequence, one blank line between entries."""
    blocks = ["\n".join(format_line(line, show_time, show_pinyin)) for line in lines]
    return "\n\n".join(blocks)


class TerminalLyricsView:
    """Shows a window of lines around the active one, redrawn on change."""

    def __init__(
        self,
        lines: Callable[[], Sequence[LyricLine]],
        *,
        context: int = DISPLAY_CONTEXT_LINES,
        show_pinyin: bool = True,
        numbered: bool = False,
        footer: Optional[str] = None,
        echo: Callable[[str], None] = click.echo,
        clear: Optional[Callable[[], None]] = click.clear,
    ):
        self.lines = lines
        self.context = context
        self.show_pinyin = show_pinyin
        self.numbered = numbered
        self.footer = footer
        self.echo = echo
        self.clear = clear
        self.title: Optional[str] = None

    def set_track(self, selection: Optional[TrackSelection]) -> None:
        self.title = selection.display_title if selection else None

    def show_status(self, status: LyricsStatus, error: Optional[str] = None) -> None:
        message = STATUS_MESSAGES.get(status)
        if message is None:
            return
        if error:
            message = f"{message} ({error})"
        self.echo(click.style(message, fg="red" if status is LyricsStatus.ERROR else "yellow"))

    def window(self, index: int) -> List[int]:
        """Indices visible when ``index`` is active."""
        total = len(self.lines())
        if total == 0:
            return []
        center = 0 if index == NO_LINE else index
        start = max(0, center - self.context)
        end = min(total, center + self.context + 1)
        return list(range(start, end))

    def on_active_line(self, index: int) -> None:
        lines = self.lines()
        if not lines:
            return
        if self.clear:
            self.clear()
        if self.title:
            self.echo(click.style(self.title, bold=True))
            self.echo("")
        for i in self.window(index):
            number = i + 1 if self.numbered else None
            text = "\n".join(
                format_line(lines[i], show_time=False, show_pinyin=self.show_pinyin, number=number)
            )
            if i == index:
                text = click.style(text, fg="cyan", bold=True)
            else:
                text = click.style(text, dim=True)
            self.echo(text)
            self.echo("")
        if self.footer:
            self.echo(click.style(self.footer, dim=True))
