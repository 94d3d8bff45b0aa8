# stockpos/utils/export.py
import uuid
from pathlib import Path
from typing import List, Sequence

import pandas as pd
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from stockpos.config import settings

EXPORT_FORMATS = ("csv", "pdf")

MEDIA_TYPES = {
    "csv": "text/csv",
    "pdf": "application/pdf",
}


def ensure_export_dir() -> Path:
    path = Path(settings.EXPORT_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def export_path(report_type: str, fmt: str) -> Path:
    return ensure_export_dir() / f"{report_type}-{uuid.uuid4().hex[:8]}.{fmt}"


def rows_to_csv(rows: List[dict], columns: Sequence[str], out_path: Path) -> Path:
    df = pd.DataFrame(rows, columns=list(columns))
    df.to_csv(out_path, index=False)
    return out_path


def rows_to_pdf(rows: List[dict], columns: Sequence[str], out_path: Path, title: str, subtitle: str = "") -> Path:
    """Plain tabular PDF: title, period line, one row per record."""
    c = canvas.Canvas(str(out_path), pagesize=landscape(A4))
    width, height = landscape(A4)

    left = 15 * mm
    usable = width - 2 * left
    col_width = usable / max(len(columns), 1)

    def header(y):
        c.setFillColorRGB(0.95, 0.95, 0.95)
        c.rect(left, y - 2 * mm, usable, 8 * mm, fill=1, stroke=0)
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 9)
        for i, col in enumerate(columns):
            c.drawString(left + i * col_width + 2, y, str(col)[:24])
        return y - 8 * mm

    y = height - 20 * mm
    c.setFont("Helvetica-Bold", 16)
    c.drawString(left, y, title)
    if subtitle:
        y -= 7 * mm
        c.setFont("Helvetica", 10)
        c.drawString(left, y, subtitle)
    y -= 12 * mm
    y = header(y)

    c.setFont("Helvetica", 9)
    for row in rows:
        for i, col in enumerate(columns):
            value = row.get(col)
            text = f"{value:.2f}" if isinstance(value, float) else ("" if value is None else str(value))
            c.drawString(left + i * col_width + 2, y, text[:30])
        c.setLineWidth(0.1)
        c.line(left, y - 2 * mm, left + usable, y - 2 * mm)
        y -= 6 * mm

        # New page
        if y < 20 * mm:
            c.showPage()
            y = header(height - 20 * mm)
            c.setFont("Helvetica", 9)

    if not rows:
        c.drawString(left, y, "No data for this period")

    c.showPage()
    c.save()
    return out_path


def export_rows(report_type: str, fmt: str, rows: List[dict], columns: Sequence[str], title: str, subtitle: str = "") -> Path:
    out_path = export_path(report_type, fmt)
    if fmt == "csv":
        return rows_to_csv(rows, columns, out_path)
    if fmt == "pdf":
        return rows_to_pdf(rows, columns, out_path, title, subtitle)
    raise ValueError(f"Unsupported export format '{fmt}'")
