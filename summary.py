from datetime import datetime, timezone
from typing import Optional, Sequence
from xml.sax.saxutils import escape

WIDTH = 800
HEIGHT = 600
TOP_N = 5

HEADER = "Top 5 Countries by GDP"
HEADER_Y = 150
ROW_SPACING = 50


def format_timestamp(ts: Optional[datetime]) -> Optional[str]:
    """Canonical ISO-8601 form, e.g. ``2025-10-22T09:30:00.000Z``.

    Naive datetimes (SQLite drops the offset) are taken as UTC.
    """
    if ts is None:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def rank_by_gdp(countries: Sequence, limit: int = TOP_N) -> list:
    """Top ``limit`` countries by estimated GDP, ties kept in input order."""
    # sorted() is stable, and stays stable with reverse=True
    ranked = sorted(countries, key=lambda c: c.estimated_gdp or 0, reverse=True)
    return ranked[:limit]


def _text(y: int, size: int, fill: str, content: str) -> str:
    return (
        f'<text x="50" y="{y}" font-size="{size}" fill="{fill}" font-family="Arial">'
        f"{escape(content)}</text>"
    )


def render_summary_svg(top: Sequence, total_count: int, timestamp: datetime) -> str:
    parts = [
        f'<svg width="{WIDTH}" height="{HEIGHT}" xmlns="http://www.w3.org/2000/svg">',
        '<rect width="100%" height="100%" fill="#ffffff"/>',
        _text(50, 28, "#000000", f"Total Countries: {total_count}"),
        _text(100, 24, "#000000", f"Last Refreshed: {format_timestamp(timestamp)}"),
        _text(HEADER_Y, 26, "#000000", HEADER),
    ]
    for idx, c in enumerate(top):
        gdp = round(c.estimated_gdp or 0)
        y = HEADER_Y + ROW_SPACING + ROW_SPACING * idx
        parts.append(_text(y, 22, "#333333", f"{idx + 1}. {c.name} - {gdp:,}"))
    parts.append("</svg>")
    return "\n".join(parts)
