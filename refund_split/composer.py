import io
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from pypdf import PageObject, PdfReader, PdfWriter
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .errors import CompositionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageGeometry:
    """Format des pages synthétisées (US Letter, en points)."""
    width: float = 612.0
    height: float = 792.0
    margin: float = 54.0
    title_font: str = "Helvetica-Bold"
    title_size: float = 16.0
    font: str = "Courier"
    font_size: float = 9.0
    line_pitch: float = 12.0

    @property
    def text_width(self) -> float:
        return self.width - 2 * self.margin


LETTER = PageGeometry()


class SourceDocument(Protocol):
    def page_count(self) -> int:
        ...

    def copy_pages(self, indices: Iterable[int]) -> List[PageObject]:
        ...


class PypdfSourceDocument:
    """Document source ouvert avec pypdf ; les pages sont copiées telles quelles (pas de rendu)."""

    def __init__(self, data: bytes) -> None:
        try:
            self._reader = PdfReader(io.BytesIO(data))
            self._count = len(self._reader.pages)
        except Exception as e:
            raise CompositionError(f"Document source illisible pour la copie de pages: {e}") from e

    def page_count(self) -> int:
        return self._count

    def copy_pages(self, indices: Iterable[int]) -> List[PageObject]:
        pages: List[PageObject] = []
        for idx in indices:
            if not 0 <= idx < self._count:
                raise CompositionError(f"Page {idx} hors du document source ({self._count} pages)")
            try:
                pages.append(self._reader.pages[idx])
            except Exception as e:
                raise CompositionError(f"Copie de la page {idx} impossible: {e}") from e
        return pages


def copy_range(page_count: int, trailing_pages: Optional[int] = None) -> Tuple[int, int]:
    """
    Pages du document source à recopier, en intervalle [début, fin).

    - `trailing_pages` None : toutes les pages après la première.
    - sinon : les `trailing_pages` dernières, sans jamais inclure la première.
    """
    if page_count <= 1:
        return (page_count, page_count)
    if trailing_pages is None:
        return (1, page_count)
    return (max(1, page_count - trailing_pages), page_count)


def _fit_font_size(line: str, geometry: PageGeometry) -> float:
    width = stringWidth(line, geometry.font, geometry.font_size)
    if width <= geometry.text_width:
        return geometry.font_size
    return geometry.font_size * geometry.text_width / width


def render_cover_pages(
    code: str,
    lines: Sequence[str],
    date_code: Optional[str] = None,
    geometry: PageGeometry = LETTER,
) -> bytes:
    """
    Page(s) de garde listant les lignes d'un LO, une ligne de texte par ligne source.

    Quand la page est pleine on en commence une nouvelle : aucune ligne n'est
    tronquée. Les lignes trop larges sont rendues en plus petit.
    """
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(geometry.width, geometry.height), invariant=1)
    c.setTitle(f"LO {code}")

    def start_page(first: bool) -> float:
        y = geometry.height - geometry.margin
        c.setFont(geometry.title_font, geometry.title_size)
        c.drawString(geometry.margin, y, f"LO {code}" if first else f"LO {code} (suite)")
        y -= geometry.title_size + geometry.line_pitch
        if first and date_code:
            c.setFont(geometry.font, geometry.font_size)
            c.drawString(geometry.margin, y, f"Date: {date_code}")
            y -= 2 * geometry.line_pitch
        return y

    y = start_page(first=True)
    for line in lines:
        if y < geometry.margin:
            c.showPage()
            y = start_page(first=False)
        c.setFont(geometry.font, _fit_font_size(line, geometry))
        c.drawString(geometry.margin, y, line)
        y -= geometry.line_pitch

    c.showPage()
    c.save()
    return buf.getvalue()


def compose_document(
    code: str,
    lines: Sequence[str],
    source: SourceDocument,
    copy_range: Tuple[int, int],
    *,
    date_code: Optional[str] = None,
    geometry: PageGeometry = LETTER,
) -> bytes:
    """
    Construit le PDF d'un LO : page(s) de garde synthétisée(s), puis les pages
    `copy_range` du document source recopiées à l'identique.
    """
    start, end = copy_range
    try:
        cover = PdfReader(io.BytesIO(render_cover_pages(code, lines, date_code=date_code, geometry=geometry)))
        writer = PdfWriter()
        for page in cover.pages:
            writer.add_page(page)
        for page in source.copy_pages(range(start, end)):
            writer.add_page(page)

        out = io.BytesIO()
        writer.write(out)
    except CompositionError:
        raise
    except Exception as e:
        raise CompositionError(f"Échec de la construction du PDF pour le LO {code}: {e}") from e

    logger.debug("PDF LO %s: %d ligne(s), pages copiées [%d, %d)", code, len(lines), start, end)
    return out.getvalue()
