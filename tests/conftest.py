"""Pytest fixtures: sample report text, sample PDFs built with reportlab."""

import io
from typing import List, Optional, Sequence, Tuple

import pytest
from reportlab.pdfgen import canvas

from refund_split.text_service import TextExtractor
from refund_split.types import ProcessConfig


def report_row(acct: str, sale: str, day: str, amount: str, name: str, lo: str, pay: str = "") -> str:
    return f"{acct:<6}{sale:<10}{day:<10}{amount:<11}{name:<17}{lo:<5}{pay}".rstrip()


HEADER = report_row("Acct", "Sale", "Date", "Amount", "Customer", "LO", "Cash Check")


def first_page_text(rows: Sequence[str], title: str = "Refund Report October 3, 2024", footer: str = "") -> str:
    parts = [title, "", HEADER]
    parts.extend(rows)
    if footer:
        parts.append(footer)
    return "\n".join(parts)


SCENARIO_ROWS = [
    report_row("65", "S-1001", "10/1/24", "$120.00", "JOHN SMITH", "481"),
    report_row("65", "S-1002", "10/1/24", "$80.50", "MARY JONES", "481"),
    report_row("65", "S-1003", "10/2/24", "$42.10", "ANA LOPEZ", "552"),
]


class FakeExtractor(TextExtractor):
    """Texte fixe par page, à la place de l'extraction pypdf."""

    def __init__(self, pages: List[str]) -> None:
        self.pages = pages
        self.calls: List[Optional[int]] = []

    def extract_pages_text(self, data: bytes, page_limit: Optional[int] = None) -> List[str]:
        self.calls.append(page_limit)
        if page_limit is None:
            return list(self.pages)
        return list(self.pages[:page_limit])


def make_pdf(pages: Sequence[Sequence[str]], sizes: Optional[Sequence[Tuple[float, float]]] = None) -> bytes:
    """PDF dont chaque page contient les lignes données (Courier 9)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(612, 792))
    for idx, lines in enumerate(pages):
        if sizes:
            c.setPageSize(sizes[idx])
        _, height = sizes[idx] if sizes else (612, 792)
        c.setFont("Courier", 9)
        y = height - 54
        for line in lines:
            c.drawString(54, y, line)
            y -= 12
        c.showPage()
    c.save()
    return buf.getvalue()


REPORT_COLUMNS_X = (54, 90, 150, 205, 270, 380, 420)


def make_columns_pdf(title: str, rows: Sequence[Sequence[str]], font: str = "Helvetica") -> bytes:
    """Rapport de 2 pages dont chaque cellule est placée à une abscisse fixe (police proportionnelle)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(612, 792))
    c.setFont(font, 9)
    c.drawString(54, 738, title)
    y = 714
    for cells in rows:
        for x, cell in zip(REPORT_COLUMNS_X, cells):
            if cell:
                c.drawString(x, y, cell)
        y -= 12
    c.showPage()
    c.setFont(font, 9)
    c.drawString(54, 738, "TERMS AND CONDITIONS")
    c.showPage()
    c.save()
    return buf.getvalue()


def corrupt_streams(data: bytes) -> bytes:
    """Remplace le filtre des flux par un filtre inconnu ; même longueur, la table xref reste valide."""
    assert b"/ASCII85Decode" in data
    return data.replace(b"/ASCII85Decode", b"/ASCIIXXDecode")


@pytest.fixture
def cfg(tmp_path):
    return ProcessConfig(out_root=tmp_path, download_grace_seconds=0)


@pytest.fixture
def source_pdf():
    """Rapport de 3 pages : tableau, conditions (A4), signatures."""
    return make_pdf(
        [
            ["Refund Report October 3, 2024", HEADER] + SCENARIO_ROWS,
            ["TERMS AND CONDITIONS"],
            ["SIGNATURE PAGE"],
        ],
        sizes=[(612, 792), (595, 842), (612, 792)],
    )


@pytest.fixture
def scenario_extractor():
    return FakeExtractor([first_page_text(SCENARIO_ROWS), "TERMS AND CONDITIONS", "SIGNATURE PAGE"])
