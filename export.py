"""
export.py
Write report tables to PDF (reportlab), Excel (pandas + openpyxl) or CSV (pandas).

Files are rendered into a temporary file next to the target and renamed into
place only when rendering finished, so a failed export never leaves a
half-written document behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pandas as pd
from reportlab.lib.pagesizes import A4, landscape
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)

EXPORT_FORMATS = {
    "PDF": ".pdf",
    "EXCEL": ".xlsx",
    "CSV": ".csv",
}


class ExportError(Exception):
    """Document could not be written; message is meant for the user."""


@dataclass
class Section:
    heading: str
    columns: list[str]
    rows: list[list]
    empty_text: str = "No records."


@dataclass
class Document:
    title: str
    columns: list[str]
    rows: list[list]
    subtitle: str | None = None
    summary: str | None = None
    sections: list[Section] = field(default_factory=list)


# ---------- PDF ----------

def _draw_table(c: canvas.Canvas, y: float, columns: list[str], rows: list[list], page_w: float, page_h: float) -> float:
    left, right = 40, page_w - 40
    col_w = (right - left) / max(len(columns), 1)

    def header(y: float) -> float:
        c.setFont("Helvetica-Bold", 10)
        for i, col in enumerate(columns):
            c.drawString(left + i * col_w, y, str(col))
        c.line(left, y - 4, right, y - 4)
        return y - 18

    y = header(y)
    c.setFont("Helvetica", 9)
    for row in rows:
        if y < 60:
            c.showPage()
            y = header(page_h - 50)
            c.setFont("Helvetica", 9)
        for i, value in enumerate(row):
            text = "" if value is None else str(value)
            # clip to the column
            max_chars = max(int(col_w / 5), 4)
            if len(text) > max_chars:
                text = text[: max_chars - 3] + "..."
            c.drawString(left + i * col_w, y, text)
        y -= 14
    return y


def _write_pdf(path: str, doc: Document) -> None:
    page = landscape(A4) if len(doc.columns) > 5 else A4
    w, h = page
    c = canvas.Canvas(path, pagesize=page)
    c.setTitle(doc.title)

    c.setFont("Helvetica-Bold", 16)
    c.drawCentredString(w / 2, h - 50, doc.title)
    y = h - 70
    c.setFont("Helvetica", 10)
    if doc.subtitle:
        c.drawCentredString(w / 2, y, doc.subtitle)
        y -= 16
    c.drawRightString(w - 40, y, "Generated: " + datetime.now().strftime("%Y-%m-%d %H:%M"))
    y -= 24

    y = _draw_table(c, y, doc.columns, doc.rows, w, h)

    if doc.summary:
        y -= 10
        if y < 60:
            c.showPage()
            y = h - 50
        c.setFont("Helvetica-Bold", 11)
        c.drawString(40, y, doc.summary)
        y -= 20

    for section in doc.sections:
        y -= 10
        if y < 100:
            c.showPage()
            y = h - 50
        c.setFont("Helvetica-Bold", 12)
        c.drawString(40, y, section.heading)
        y -= 20
        if section.rows:
            y = _draw_table(c, y, section.columns, section.rows, w, h)
        else:
            c.setFont("Helvetica", 10)
            c.drawString(40, y, section.empty_text)
            y -= 16

    c.save()


# ---------- Excel / CSV ----------

def _sheet_name(name: str, used: set[str]) -> str:
    clean = "".join(ch for ch in name if ch not in "[]:*?/\\")[:31] or "Sheet"
    base, n = clean, 2
    while clean in used:
        suffix = f" ({n})"
        clean = base[: 31 - len(suffix)] + suffix
        n += 1
    used.add(clean)
    return clean


def _write_excel(path: str, doc: Document) -> None:
    used: set[str] = set()
    df = pd.DataFrame(doc.rows, columns=doc.columns)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        main = _sheet_name(doc.title, used)
        df.to_excel(writer, sheet_name=main, index=False)
        if doc.summary:
            pd.DataFrame([[doc.summary]]).to_excel(
                writer, sheet_name=main, index=False, header=False, startrow=len(df) + 2
            )
        for section in doc.sections:
            pd.DataFrame(section.rows, columns=section.columns).to_excel(
                writer, sheet_name=_sheet_name(section.heading, used), index=False
            )


def _write_csv(path: str, doc: Document) -> None:
    df = pd.DataFrame(doc.rows, columns=doc.columns)
    df.to_csv(path, index=False, encoding="utf-8")
    if doc.summary:
        with open(path, "a", encoding="utf-8", newline="") as f:
            f.write("\n" + doc.summary + "\n")


_WRITERS = {
    "PDF": _write_pdf,
    "EXCEL": _write_excel,
    "CSV": _write_csv,
}


def write_document(path: str | Path, fmt: str, doc: Document) -> Path:
    """Render `doc` as `fmt` to `path`. Raises ExportError on any failure."""
    if fmt not in _WRITERS:
        raise ExportError(f"Unsupported export format: {fmt}")
    target = Path(path)
    tmp_path = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=target.parent, prefix=".tmp-", suffix=target.suffix)
        os.close(fd)
        _WRITERS[fmt](tmp_path, doc)
        os.replace(tmp_path, target)
    except Exception as e:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        logger.error("export of %s failed: %s", target, e, exc_info=True)
        raise ExportError(f"Could not write {target.name}: {e}") from e
    logger.info("wrote %s report to %s", fmt, target)
    return target
