"""Terminal renderer: draws a full frame from a Snapshot with blessed."""

from typing import List, Optional, Tuple

from blessed import Terminal

from core.config import DisplayConfig
from core.metadata import TrackDescriptor
from core.playback_engine import PlaybackState
from core.snapshot import Snapshot
from ui.widgets import (
    borders,
    box,
    fit,
    format_time,
    gauge,
    place,
    scroll_offset,
    scrollbar,
)

# Config color names -> blessed formatting attributes
COLOR_ATTRS = {
    "black": "black",
    "red": "red",
    "green": "green",
    "yellow": "yellow",
    "blue": "blue",
    "magenta": "magenta",
    "cyan": "cyan",
    "gray": "white",
    "grey": "white",
    "darkgray": "bright_black",
    "darkgrey": "bright_black",
    "lightred": "bright_red",
    "lightgreen": "bright_green",
    "lightyellow": "bright_yellow",
    "lightblue": "bright_blue",
    "lightmagenta": "bright_magenta",
    "lightcyan": "bright_cyan",
    "white": "bright_white",
}

STATUS_ATTRS = {
    "warning": "yellow",
    "error": "red",
}

STATE_GLYPHS = {
    PlaybackState.PLAYING: "▶",
    PlaybackState.PAUSED: "⏸",
    PlaybackState.STOPPED: "■",
}

CURRENT_MARKER = "▶ "
REPEAT_MARKER = "[R]"

MIN_WIDTH = 20
MIN_HEIGHT = 6
PROGRESS_HEIGHT = 3


def track_label(track: TrackDescriptor) -> str:
    if track.artist:
        return f"{track.artist} - {track.display_title}"
    return track.display_title


def metadata_lines(track: Optional[TrackDescriptor], duration: float = 0.0) -> List[Tuple[str, str]]:
    """Label/value rows for the metadata panel."""
    if track is None:
        return []

    rows = [
        ("Title", track.display_title),
        ("Artist", track.artist or "Unknown"),
        ("Duration", format_time(track.duration or duration)),
    ]
    optional = [
        ("Album", track.album),
        ("Year", track.year),
        ("Genre", track.genre),
        ("Track", track.track_number),
        ("Bitrate", f"{track.bitrate} kbps" if track.bitrate else None),
        ("Sample Rate", f"{track.sample_rate} Hz" if track.sample_rate else None),
        ("Channels", track.channels),
    ]
    rows.extend((label, str(value)) for label, value in optional if value)
    return rows


class TerminalRenderer:
    """Full-frame redraw of the player from one snapshot."""

    def __init__(self, term: Terminal):
        self.term = term

    def draw(self, snapshot: Snapshot) -> None:
        lines = self.compose(snapshot, self.term.width, self.term.height)
        out = [self.term.home]
        for row, line in enumerate(lines):
            out.append(self.term.move_xy(0, row) + line + self.term.clear_eol)
        out.append(self.term.clear_eos)
        print("".join(out), end="", flush=True)

    def compose(self, snapshot: Snapshot, width: int, height: int) -> List[str]:
        """
        Lay out one frame.

        Returns:
            At most ``height`` styled rows, each ``width`` cells wide
        """
        if width < MIN_WIDTH or height < MIN_HEIGHT:
            return [fit("Terminal too small", width)]

        display = snapshot.display
        rows: List[str] = []

        if display.show_app_title:
            title = display.title("app")
            rule = place("─", width, f" {title} " if title else "", display.app_title_alignment, margin=0)
            rows.append(self._paint(display.color("app_title"), rule))

        body_height = max(2, height - len(rows) - PROGRESS_HEIGHT)
        if display.show_metadata_panel:
            meta_width = max(MIN_WIDTH // 2, width * 2 // 5)
            list_width = width - meta_width
        else:
            meta_width = 0
            list_width = width

        playlist = self._playlist_box(snapshot, list_width, body_height)
        if meta_width:
            metadata = self._metadata_box(snapshot, meta_width, body_height)
            rows.extend(left + right for left, right in zip(playlist, metadata))
        else:
            rows.extend(playlist)

        rows.extend(self._progress_box(snapshot, width))
        return rows[:height]

    def _playlist_box(self, snapshot: Snapshot, width: int, height: int) -> List[str]:
        display = snapshot.display
        inner = max(0, height - 2)
        total = len(snapshot.tracks)
        offset = scroll_offset(snapshot.current_index, total, inner)

        lines = []
        for index in range(offset, min(total, offset + inner)):
            marker = CURRENT_MARKER if index == snapshot.current_index else " " * len(CURRENT_MARKER)
            lines.append(marker + track_label(snapshot.tracks[index]))
        if not lines:
            lines.append("  (no tracks)")

        thumb = scrollbar(total, inner, offset) if display.show_playlist_scrollbar else None
        title = display.title("playlist") if display.show_playlist_title else ""
        rows = box(
            width, height, lines, borders(display.rounded_corners),
            title=title, alignment=display.playlist_title_alignment, scrollbar=thumb,
        )
        return self._paint_frame(rows, display.color("playlist"), snapshot.current_index, offset)

    def _metadata_box(self, snapshot: Snapshot, width: int, height: int) -> List[str]:
        display = snapshot.display
        rows_data = metadata_lines(snapshot.current_track, snapshot.progress.duration)
        label_width = max((len(label) for label, _ in rows_data), default=0)
        lines = [f"{label.ljust(label_width)}  {value}" for label, value in rows_data]

        title = display.title("metadata") if display.show_metadata_title else ""
        rows = box(
            width, height, lines, borders(display.rounded_corners),
            title=title, alignment=display.metadata_title_alignment,
        )
        return self._paint_frame(rows, display.color("metadata"))

    def _progress_box(self, snapshot: Snapshot, width: int) -> List[str]:
        display = snapshot.display
        position, duration, state = snapshot.progress
        label = f"{format_time(position)} / {format_time(duration)}"
        repeat = REPEAT_MARKER if snapshot.repeat else " " * len(REPEAT_MARKER)

        # " ▶ " + bar + " " + label + " " + repeat + " "
        bar_width = max(0, width - 2 - 3 - len(label) - len(repeat) - 3)
        ratio = position / duration if duration > 0 else 0.0
        content = f" {STATE_GLYPHS[state]} {gauge(bar_width, ratio)} {label} {repeat} "

        status = snapshot.status
        footer = f" {status.text} " if status is not None else ""
        title = display.title("progress") if display.show_progress_title else ""
        rows = box(
            width, PROGRESS_HEIGHT, [content], borders(display.rounded_corners),
            title=title, alignment=display.progress_title_alignment, footer=footer,
        )

        painted = self._paint_frame(rows, display.color("progress"))
        if status is not None and status.level != "info":
            painted[-1] = self._paint_status(rows[-1], footer, status.level, display)
        return painted

    def _paint_frame(
        self,
        rows: List[str],
        color: str,
        selected: Optional[int] = None,
        offset: int = 0,
    ) -> List[str]:
        """Color the border characters of a box; highlight the selected row."""
        painted = []
        for i, row in enumerate(rows):
            if i == 0 or i == len(rows) - 1 or len(row) < 2:
                painted.append(self._paint(color, row))
                continue
            content = row[1:-1]
            if selected is not None and i - 1 == selected - offset:
                content = self.term.bold(content)
            painted.append(self._paint(color, row[0]) + content + self._paint(color, row[-1]))
        return painted

    def _paint_status(self, row: str, footer: str, level: str, display: DisplayConfig) -> str:
        start = row.find(footer)
        if start < 0:
            return self._paint(display.color("progress"), row)
        color = display.color("progress")
        status_attr = getattr(self.term, STATUS_ATTRS.get(level, "yellow"))
        return (
            self._paint(color, row[:start])
            + status_attr(footer)
            + self._paint(color, row[start + len(footer):])
        )

    def _paint(self, color: str, text: str) -> str:
        attr = COLOR_ATTRS.get(color)
        if attr is None:
            return text
        return getattr(self.term, attr)(text)
