import io
import logging
from typing import List, Optional

from pypdf import PdfReader

from .errors import ExtractionError

logger = logging.getLogger(__name__)


class TextExtractor:
    def extract_pages_text(self, data: bytes, page_limit: Optional[int] = None) -> List[str]:
        raise NotImplementedError

    def extract_text(self, data: bytes, page_limit: Optional[int] = None) -> str:
        return "\n".join(self.extract_pages_text(data, page_limit=page_limit))


class PypdfTextExtractor(TextExtractor):
    """
    Extraction du texte natif du PDF (pas d'OCR).

    Le mode "layout" de pypdf conserve l'alignement horizontal des colonnes,
    nécessaire pour retrouver la colonne LO par position.
    """

    def __init__(self, layout_mode: bool = True) -> None:
        self.layout_mode = layout_mode

    def _page_text(self, page) -> str:
        if self.layout_mode:
            return page.extract_text(extraction_mode="layout") or ""
        return page.extract_text() or ""

    def extract_pages_text(self, data: bytes, page_limit: Optional[int] = None) -> List[str]:
        try:
            reader = PdfReader(io.BytesIO(data))
            pages = reader.pages
            count = len(pages)
            if page_limit is not None:
                count = min(count, page_limit)
            page_texts = [self._page_text(pages[i]) for i in range(count)]
        except Exception as e:  # pypdf lève des types variés sur un flux corrompu
            raise ExtractionError(f"Impossible d'extraire le texte du PDF: {e}") from e
        logger.debug("Texte extrait de %d page(s)", len(page_texts))
        return page_texts


def split_lines(text: str) -> List[str]:
    """
    Découpe le texte en lignes exploitables.

    Règle fixe pour tout le pipeline : les lignes vides sont supprimées, les
    espaces de fin sont retirés, les espaces de début sont conservés car ils
    portent la position des colonnes.
    """
    lines: List[str] = []
    for raw in text.splitlines():
        line = raw.rstrip()
        if line.strip():
            lines.append(line)
    return lines
