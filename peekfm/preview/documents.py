"""Parsing of binary document formats into plain Python structures.

Word documents become markdown text, spreadsheets become lists of sheets
with string cells, PDF pages become Pillow images. Every library failure is
re-raised as :class:`RenderError`.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import List

import docx
import fitz  # PyMuPDF
import openpyxl
import xlrd
from docx.table import Table
from docx.text.paragraph import Paragraph
from PIL import Image

from peekfm.errors import RenderError


@dataclass
class Sheet:
    name: str
    rows: List[List[str]]

    @property
    def width(self) -> int:
        return max((len(row) for row in self.rows), default=0)


def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def read_csv_sheet(text: str, name: str = "Sheet1") -> Sheet:
    try:
        rows = [list(row) for row in csv.reader(io.StringIO(text))]
    except csv.Error as e:
        raise RenderError(f"Cannot parse CSV: {e}") from e
    return Sheet(name=name, rows=rows)


def read_workbook_sheets(data: bytes) -> List[Sheet]:
    """Read an OOXML workbook (.xlsx) with cached formula values."""
    try:
        workbook = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as e:
        raise RenderError(f"Cannot read workbook: {e}") from e
    try:
        return [
            Sheet(
                name=worksheet.title,
                rows=[
                    [_cell_text(value) for value in row]
                    for row in worksheet.iter_rows(values_only=True)
                ],
            )
            for worksheet in workbook.worksheets
        ]
    finally:
        workbook.close()


def read_legacy_workbook_sheets(data: bytes) -> List[Sheet]:
    """Read a BIFF workbook (.xls)."""
    try:
        workbook = xlrd.open_workbook(file_contents=data)
    except Exception as e:
        raise RenderError(f"Cannot read workbook: {e}") from e
    return [
        Sheet(
            name=worksheet.name,
            rows=[
                [_cell_text(value) for value in worksheet.row_values(index)]
                for index in range(worksheet.nrows)
            ],
        )
        for worksheet in workbook.sheets()
    ]


# --- Word ---
def _runs_markdown(paragraph: Paragraph) -> str:
    parts = []
    for run in paragraph.runs:
        text = run.text
        if not text.strip():
            parts.append(text)
            continue
        if run.bold:
            text = f"**{text}**"
        if run.italic:
            text = f"*{text}*"
        parts.append(text)
    return "".join(parts).strip()


def _paragraph_markdown(paragraph: Paragraph) -> str:
    text = _runs_markdown(paragraph)
    if not text:
        return ""
    style_name = paragraph.style.name if paragraph.style is not None else ""
    if style_name == "Title":
        return f"# {text}"
    if style_name.startswith("Heading"):
        level = style_name.rpartition(" ")[2]
        depth = int(level) if level.isdigit() else 1
        return f"{'#' * min(depth + 1, 6)} {text}"
    if style_name.startswith("List Number"):
        return f"1. {text}"
    if style_name.startswith("List"):
        return f"- {text}"
    return text


def _table_markdown(table: Table) -> str:
    rows = [
        [cell.text.replace("\n", " ").replace("|", "\\|").strip() for cell in row.cells]
        for row in table.rows
    ]
    if not rows:
        return ""
    width = max(len(row) for row in rows)
    rows = [row + [""] * (width - len(row)) for row in rows]
    lines = [
        "| " + " | ".join(rows[0]) + " |",
        "|" + "---|" * width,
    ]
    lines.extend("| " + " | ".join(row) + " |" for row in rows[1:])
    return "\n".join(lines)


def docx_to_markdown(data: bytes) -> str:
    try:
        document = docx.Document(io.BytesIO(data))
        blocks = []
        for block in document.iter_inner_content():
            if isinstance(block, Table):
                blocks.append(_table_markdown(block))
            else:
                blocks.append(_paragraph_markdown(block))
    except Exception as e:
        raise RenderError(f"Cannot read Word document: {e}") from e
    return "\n\n".join(block for block in blocks if block)


# --- PDF ---
def open_pdf(data: bytes) -> "fitz.Document":
    try:
        document = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise RenderError(f"Failed to load PDF: {e}") from e
    if document.page_count == 0:
        document.close()
        raise RenderError("PDF has no pages")
    return document


def render_pdf_page(document: "fitz.Document", index: int, scale: float) -> Image.Image:
    page = document.load_page(index)
    pixmap = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
    return Image.frombytes("RGB", (pixmap.width, pixmap.height), pixmap.samples)


def decode_image(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except Exception as e:
        raise RenderError(f"Cannot decode image: {e}") from e
    return image
