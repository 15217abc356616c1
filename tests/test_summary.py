from datetime import datetime, timezone
from types import SimpleNamespace

from summary import format_timestamp, rank_by_gdp, render_summary_svg

TS = datetime(2025, 10, 22, 9, 30, 0, tzinfo=timezone.utc)


def _c(name, gdp):
    return SimpleNamespace(name=name, estimated_gdp=gdp)


def test_format_timestamp():
    assert format_timestamp(TS) == "2025-10-22T09:30:00.000Z"
    assert format_timestamp(datetime(2025, 10, 22, 9, 30)) == "2025-10-22T09:30:00.000Z"
    assert format_timestamp(None) is None


def test_render_layout():
    svg = render_summary_svg([_c("Bigland", 1234567.6), _c("Smallland", 10)], 250, TS)
    assert svg.startswith('<svg width="800" height="600"')
    assert svg.endswith("</svg>")
    assert 'fill="#ffffff"' in svg
    assert "Total Countries: 250" in svg
    assert "Last Refreshed: 2025-10-22T09:30:00.000Z" in svg
    assert ">Top 5 Countries by GDP<" in svg
    assert 'y="200"' in svg and "1. Bigland - 1,234,568" in svg
    assert 'y="250"' in svg and "2. Smallland - 10" in svg
    assert 'y="300"' not in svg


def test_render_is_deterministic():
    top = [_c("A", 3.0), _c("B", 2.0)]
    assert render_summary_svg(top, 2, TS) == render_summary_svg(top, 2, TS)


def test_render_escapes_names():
    svg = render_summary_svg([_c('<script>&"x"</script>', 1)], 1, TS)
    assert "<script>" not in svg
    assert "&lt;script&gt;&amp;" in svg


def test_render_handles_empty_top():
    svg = render_summary_svg([], 0, TS)
    assert "Total Countries: 0" in svg
    assert "1. " not in svg


def test_rank_is_stable_and_limited():
    rows = [_c("a", 1), _c("b", 5), _c("c", 5), _c("d", 0), _c("e", 5), _c("f", 3), _c("g", 2)]
    ranked = rank_by_gdp(rows)
    assert [c.name for c in ranked] == ["b", "c", "e", "f", "g"]
    assert [c.name for c in rank_by_gdp(ranked)] == ["b", "c", "e", "f", "g"]


def test_rank_fewer_than_limit():
    assert [c.name for c in rank_by_gdp([_c("x", None), _c("y", 1)])] == ["y", "x"]


def test_render_keeps_non_ascii_names():
    svg = render_summary_svg([_c("Åland Islands", 2.0), _c("Côte d'Ivoire", 1.0)], 2, TS)
    assert "1. Åland Islands - 2" in svg
    assert "2. Côte d'Ivoire - 1" in svg
