from __future__ import annotations

import io
import unittest

import docx
import fitz
import openpyxl
from PIL import Image

from peekfm.errors import RenderError
from peekfm.preview.documents import (
    decode_image,
    docx_to_markdown,
    open_pdf,
    read_csv_sheet,
    read_workbook_sheets,
    render_pdf_page,
)
from peekfm.preview.renderers import PDF_MAX_SCALE, PDF_MIN_SCALE, clamp_scale


def _xlsx_bytes() -> bytes:
    workbook = openpyxl.Workbook()
    first = workbook.active
    first.title = "Budget"
    first.append(["Item", "Cost"])
    first.append(["Rent", 1200.0])
    first.append(["Coffee", None])
    second = workbook.create_sheet("Notes")
    second.append(["ok"])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _docx_bytes() -> bytes:
    document = docx.Document()
    document.add_heading("Quarterly report", level=1)
    paragraph = document.add_paragraph("Revenue grew ")
    paragraph.add_run("fast").bold = True
    document.add_paragraph("first point", style="List Bullet")
    table = document.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Region"
    table.cell(0, 1).text = "Total"
    table.cell(1, 0).text = "North"
    table.cell(1, 1).text = "10"
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _pdf_bytes(pages: int = 2) -> bytes:
    document = fitz.open()
    for index in range(pages):
        page = document.new_page(width=200, height=100)
        page.insert_text((20, 50), f"page {index + 1}")
    data = document.tobytes()
    document.close()
    return data


class SpreadsheetTests(unittest.TestCase):
    def test_csv_rows(self) -> None:
        sheet = read_csv_sheet('name,qty\n"Widget, large",3\n')
        self.assertEqual(sheet.name, "Sheet1")
        self.assertEqual(sheet.rows, [["name", "qty"], ["Widget, large", "3"]])
        self.assertEqual(sheet.width, 2)

    def test_workbook_sheets_and_cell_text(self) -> None:
        sheets = read_workbook_sheets(_xlsx_bytes())
        self.assertEqual([sheet.name for sheet in sheets], ["Budget", "Notes"])
        self.assertEqual(sheets[0].rows[1], ["Rent", "1200"])
        self.assertEqual(sheets[0].rows[2], ["Coffee", ""])

    def test_corrupt_workbook_raises_render_error(self) -> None:
        with self.assertRaises(RenderError):
            read_workbook_sheets(b"not a workbook")


class WordTests(unittest.TestCase):
    def test_headings_runs_lists_and_tables(self) -> None:
        markdown = docx_to_markdown(_docx_bytes())
        self.assertIn("## Quarterly report", markdown)
        self.assertIn("Revenue grew **fast**", markdown)
        self.assertIn("- first point", markdown)
        self.assertIn("| Region | Total |", markdown)
        self.assertIn("| North | 10 |", markdown)

    def test_corrupt_document_raises_render_error(self) -> None:
        with self.assertRaises(RenderError):
            docx_to_markdown(b"garbage")


class PdfTests(unittest.TestCase):
    def test_pages_render_to_images(self) -> None:
        document = open_pdf(_pdf_bytes())
        try:
            self.assertEqual(document.page_count, 2)
            image = render_pdf_page(document, 1, 1.5)
            self.assertEqual(image.mode, "RGB")
            self.assertEqual(image.size, (300, 150))
        finally:
            document.close()

    def test_invalid_pdf_raises_render_error(self) -> None:
        with self.assertRaises(RenderError):
            open_pdf(b"%PDF-garbage")

    def test_scale_is_clamped(self) -> None:
        self.assertEqual(clamp_scale(10), PDF_MAX_SCALE)
        self.assertEqual(clamp_scale(0.1), PDF_MIN_SCALE)
        self.assertEqual(clamp_scale(1.75), 1.75)


class ImageTests(unittest.TestCase):
    def _png(self, size=(8, 6), mode="RGB") -> bytes:
        buffer = io.BytesIO()
        Image.new(mode, size, (255, 0, 0) if mode == "RGB" else (255, 0, 0, 128)).save(
            buffer, format="PNG"
        )
        return buffer.getvalue()

    def test_decode_image(self) -> None:
        image = decode_image(self._png())
        self.assertEqual(image.size, (8, 6))
        self.assertEqual(image.format, "PNG")

    def test_decode_garbage_raises_render_error(self) -> None:
        with self.assertRaises(RenderError):
            decode_image(b"\x89PNG broken")


if __name__ == "__main__":
    unittest.main()
