"""
Journal range -> PDF export. Entries are rendered to HTML with Jinja2 and
converted with WeasyPrint into ``Journify_Export_YYYYMMDD_HHMM.pdf``.
"""
from __future__ import annotations

import asyncio
import logging
import os
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any

from jinja2 import BaseLoader, Environment, select_autoescape
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ExportRenderError
from ..labels import LABEL_DELIMITER
from ..models import JournalEntry
from ..repositories import JournalEntryRepository

LOGGER = logging.getLogger(__name__)

EXPORT_DIR = Path(
    os.getenv("JOURNIFY_EXPORT_DIR", str(Path.home() / "Downloads"))
).expanduser()
EXPORT_PREFIX = "Journify_Export"
SEPARATOR = "_" * 51

_MARKUP_TAG = re.compile(r"<.*?>")

EXPORT_CSS = """
  @page { size: A4; margin: 18mm; }
  body { font-family: system-ui, -apple-system, Segoe UI, Roboto, sans-serif; color: #111; }
  h1 { font-size: 24pt; text-align: center; margin: 0; }
  .range { font-size: 12pt; color: #808080; text-align: center; margin-bottom: 20px; }
  .entry-header { font-size: 10pt; color: #404040; }
  .entry-title { font-size: 16pt; margin-bottom: 5px; }
  .entry-body { font-size: 11pt; margin-bottom: 10px; white-space: pre-wrap; }
  .entry-tags { font-size: 9pt; color: #808080; }
  .separator { color: #d3d3d3; margin-bottom: 20px; }
  .footer { font-size: 8pt; text-align: center; margin-top: 20px; }
"""

EXPORT_TEMPLATE = r"""
<!DOCTYPE html><html><head><meta charset="utf-8"><title>Journify Export</title>
<style>{{ css }}</style></head><body>
<h1>Journify Export</h1>
<div class="range">{{ period }}</div>
{% for entry in entries %}
<section class="entry">
  <div class="entry-header">{{ entry.header }}</div>
  {% if entry.title %}<div class="entry-title">{{ entry.title }}</div>{% endif %}
  <div class="entry-body">{{ entry.body }}</div>
  {% if entry.tags %}<div class="entry-tags">Tags: {{ entry.tags }}</div>{% endif %}
  <div class="separator">{{ separator }}</div>
</section>
{% endfor %}
<div class="footer">Generated by Journify</div>
</body></html>
"""


def strip_markup(text: str | None) -> str:
    return _MARKUP_TAG.sub("", text or "")


def long_date(day: date) -> str:
    return f"{day:%A}, {day:%B} {day.day}, {day.year}"


def export_filename(now: datetime) -> str:
    return f"{EXPORT_PREFIX}_{now:%Y%m%d_%H%M}.pdf"


def _entry_context(entry: JournalEntry) -> dict[str, Any]:
    return {
        "header": f"{long_date(entry.entry_date)}  |  Mood: {entry.primary_mood or ''}",
        "title": entry.title,
        "body": strip_markup(entry.content),
        "tags": LABEL_DELIMITER.join(entry.tags or []),
    }


def render_export_html(entries: list[JournalEntry], start: date, end: date) -> str:
    env = Environment(loader=BaseLoader(), autoescape=select_autoescape())
    tmpl = env.from_string(EXPORT_TEMPLATE)
    return tmpl.render(
        css=EXPORT_CSS,
        period=f"{start:%b %d, %Y} - {end:%b %d, %Y}",
        entries=[_entry_context(entry) for entry in entries],
        separator=SEPARATOR,
    )


def render_with_weasyprint(html: str, out_pdf_path: Path) -> None:
    try:
        from weasyprint import HTML

        HTML(string=html).write_pdf(target=str(out_pdf_path))
    except Exception as exc:
        raise ExportRenderError(f"PDF rendering failed: {exc}") from exc


def _write_export(html: str, out_pdf: Path) -> None:
    out_pdf.parent.mkdir(parents=True, exist_ok=True)
    render_with_weasyprint(html, out_pdf)


async def export_entries_pdf(
    session: AsyncSession,
    start: date,
    end: date,
    *,
    export_dir: Path | None = None,
    now: datetime | None = None,
    repository: JournalEntryRepository | None = None,
) -> str:
    """Write the entries dated ``start``..``end`` to a PDF and return its absolute path.

    Returns an empty string, without touching the filesystem, when the range
    holds no entries.
    """
    repo = repository or JournalEntryRepository()
    entries = await repo.get_by_range(session, start, end)
    if not entries:
        return ""

    target_dir = Path(export_dir or EXPORT_DIR)
    out_pdf = (target_dir / export_filename(now or datetime.now())).resolve()
    html = render_export_html(entries, start, end)
    await asyncio.to_thread(_write_export, html, out_pdf)
    LOGGER.info("Exported %s journal entries to %s", len(entries), out_pdf)
    return str(out_pdf)
