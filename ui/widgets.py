"""Plain-text drawing helpers: boxes, titles, gauges and scrollbars.

Everything here returns unstyled strings of an exact width; the renderer
adds color afterwards.
"""

from typing import List, NamedTuple, Optional

ELLIPSIS = "…"


class BorderSet(NamedTuple):
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str
    horizontal: str
    vertical: str


ROUNDED = BorderSet("╭", "╮", "╰", "╯", "─", "│")
PLAIN = BorderSet("┌", "┐", "└", "┘", "─", "│")

SCROLL_THUMB = "┃"

GAUGE_FILLED = "█"
GAUGE_EMPTY = "░"


def borders(rounded: bool) -> BorderSet:
    return ROUNDED if rounded else PLAIN


def fit(text: str, width: int) -> str:
    """Truncate or pad ``text`` to exactly ``width`` characters."""
    if width <= 0:
        return ""
    if len(text) > width:
        return text[:width - 1] + ELLIPSIS
    return text.ljust(width)


def place(fill: str, width: int, text: str, alignment: str = "left", margin: int = 1) -> str:
    """
    Lay ``text`` over a run of ``fill`` characters.

    Args:
        fill: Character repeated to ``width``
        width: Total width
        text: Overlay text (truncated to fit inside the margins)
        alignment: left, center or right
        margin: Fill characters kept at each end for left/right alignment
    """
    if width <= 0:
        return ""
    room = max(0, width - 2 * margin)
    if not text or room == 0:
        return fill * width
    if len(text) > room:
        text = fit(text, room)

    if alignment == "center":
        start = (width - len(text)) // 2
    elif alignment == "right":
        start = width - margin - len(text)
    else:
        start = margin
    return fill * start + text + fill * (width - start - len(text))


def top_border(width: int, border: BorderSet, title: str = "", alignment: str = "left") -> str:
    if width < 2:
        return border.horizontal * width
    return border.top_left + place(border.horizontal, width - 2, title, alignment) + border.top_right


def bottom_border(width: int, border: BorderSet, text: str = "", alignment: str = "left") -> str:
    if width < 2:
        return border.horizontal * width
    return border.bottom_left + place(border.horizontal, width - 2, text, alignment) + border.bottom_right


def box(
    width: int,
    height: int,
    lines: List[str],
    border: BorderSet,
    title: str = "",
    alignment: str = "left",
    footer: str = "",
    scrollbar: Optional[List[bool]] = None,
) -> List[str]:
    """
    Draw a bordered box of exactly ``width`` x ``height``.

    Args:
        lines: Content rows (truncated/padded, missing rows are blank)
        scrollbar: Per content row, True where the thumb is drawn on the right edge
    """
    if height <= 0 or width <= 0:
        return []
    if height == 1:
        return [top_border(width, border, title, alignment)]

    inner_width = max(0, width - 2)
    rows = [top_border(width, border, title, alignment)]
    for i in range(height - 2):
        content = lines[i] if i < len(lines) else ""
        right = border.vertical
        if scrollbar is not None and i < len(scrollbar) and scrollbar[i]:
            right = SCROLL_THUMB
        rows.append(border.vertical + fit(content, inner_width) + right)
    rows.append(bottom_border(width, border, footer))
    return rows


def format_time(seconds: float) -> str:
    """Format seconds as m:ss, or h:mm:ss from one hour on."""
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def gauge(width: int, ratio: float) -> str:
    """A filled bar of ``width`` cells for ``ratio`` in [0, 1]."""
    if width <= 0:
        return ""
    ratio = min(1.0, max(0.0, ratio))
    filled = int(round(width * ratio))
    return GAUGE_FILLED * filled + GAUGE_EMPTY * (width - filled)


def scroll_offset(selected: Optional[int], total: int, height: int) -> int:
    """First row to show so that ``selected`` stays in view, roughly centered."""
    if height <= 0 or total <= height or selected is None:
        return 0
    offset = selected - height // 2
    return max(0, min(offset, total - height))


def scrollbar(total: int, height: int, offset: int) -> Optional[List[bool]]:
    """Thumb rows for a list of ``total`` items shown ``height`` at a time."""
    if height <= 0 or total <= height:
        return None
    thumb = max(1, height * height // total)
    start = (height - thumb) * offset // max(1, total - height)
    return [start <= i < start + thumb for i in range(height)]
