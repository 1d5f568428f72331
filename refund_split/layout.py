import logging
import re
from typing import Iterator, Optional, Sequence, Tuple

from .types import Layout

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "LO"
DEFAULT_MAX_LOOKAHEAD = 50

_TOKEN_RE = re.compile(r"\S+")


def iter_tokens(line: str) -> Iterator[Tuple[int, int, str]]:
    """Renvoie (début, fin, texte) pour chaque mot de la ligne."""
    for m in _TOKEN_RE.finditer(line):
        yield m.start(), m.end(), m.group(0)


def _has_domain_marker(line: str, domain_markers: Sequence[str]) -> bool:
    if not domain_markers:
        return True
    lowered = line.lower()
    return any(dm.lower() in lowered for dm in domain_markers)


def _marker_span(line: str, marker: str) -> Optional[Tuple[int, int]]:
    for start, end, token in iter_tokens(line):
        if token == marker:
            return start, end
    return None


def locate_layout(
    lines: Sequence[str],
    marker: str = DEFAULT_MARKER,
    domain_markers: Sequence[str] = (),
    max_lookahead: int = DEFAULT_MAX_LOOKAHEAD,
) -> Optional[Layout]:
    """
    Cherche la ligne d'en-tête du tableau et la position de la colonne LO.

    - Seules les `max_lookahead` premières lignes sont examinées.
    - Le marqueur doit apparaître comme un mot entier ("LOAN" ne compte pas).
    - Si `domain_markers` est renseigné (ex.: "Cash", "Check"), la ligne doit
      aussi en contenir un, pour écarter les mentions isolées de "LO".

    La colonne est l'étendue du mot marqueur, bornée par les espaces qui
    l'entourent, sous forme d'intervalle semi-ouvert [début, fin).
    Renvoie None si aucun en-tête n'est trouvé (ce n'est pas une erreur).
    """
    for idx, line in enumerate(lines[:max_lookahead]):
        span = _marker_span(line, marker)
        if span is None or not _has_domain_marker(line, domain_markers):
            continue

        start, end = span
        layout = Layout(header_line_index=idx, code_column_start=start, code_column_end=end)
        logger.debug("En-tête trouvé ligne %d, colonne %s [%d, %d)", idx, marker, start, end)
        return layout

    logger.info("Aucun en-tête contenant %r dans les %d premières lignes", marker, max_lookahead)
    return None
