import logging
import re
from typing import Dict, Iterable, List, Optional, Pattern, Sequence

from .diagnostics import Diagnostics
from .layout import iter_tokens
from .types import Layout, Record

logger = logging.getLogger(__name__)

DEFAULT_CAP = 20
DEFAULT_MIN_LINE_LENGTH = 10
DEFAULT_COLUMN_SLACK = 2

CODE_RE = re.compile(r"\d{3}")

# Fin du tableau : totaux, bloc signature / validation, pied de page.
END_OF_TABLE_PATTERNS: List[Pattern[str]] = [
    re.compile(r"^\s*(grand\s+)?totals?\b", re.IGNORECASE),
    re.compile(r"\bsignature\b", re.IGNORECASE),
    re.compile(r"\b(authori[sz]ed|approved|prepared|certified)\s+by\b", re.IGNORECASE),
    re.compile(r"^\s*page\s+\d+(\s+of\s+\d+)?\s*$", re.IGNORECASE),
]


def is_valid_code(candidate: Optional[str], code_min: Optional[int] = 0, code_max: Optional[int] = 800) -> bool:
    """Exactement trois chiffres, et dans l'intervalle inclusif s'il est défini."""
    if not candidate or not CODE_RE.fullmatch(candidate):
        return False
    value = int(candidate)
    if code_min is not None and value < code_min:
        return False
    if code_max is not None and value > code_max:
        return False
    return True


def end_of_table_patterns(organization: Optional[str] = None) -> List[Pattern[str]]:
    patterns = list(END_OF_TABLE_PATTERNS)
    if organization:
        patterns.append(re.compile(re.escape(organization), re.IGNORECASE))
    return patterns


def code_at_column(line: str, layout: Layout, slack: int = DEFAULT_COLUMN_SLACK) -> Optional[str]:
    """
    Renvoie le mot de la ligne qui recouvre le plus la colonne LO.

    La fenêtre [début - slack, fin + slack) absorbe les petits décalages
    d'alignement ; on prend toujours un mot entier pour ne jamais couper un
    code. En cas d'égalité, le mot le plus à gauche l'emporte.
    """
    win_start = max(0, layout.code_column_start - slack)
    win_end = layout.code_column_end + slack

    best: Optional[str] = None
    best_overlap = 0
    for start, end, token in iter_tokens(line):
        if start >= win_end:
            break
        overlap = min(end, win_end) - max(start, win_start)
        if overlap > best_overlap:
            best, best_overlap = token, overlap
    return best


def trailing_code(line: str) -> Optional[str]:
    """Dernier mot de la ligne (heuristique de secours sans en-tête)."""
    tokens = line.split()
    return tokens[-1] if tokens else None


def extract_records(
    lines: Sequence[str],
    layout: Optional[Layout],
    cap: int = DEFAULT_CAP,
    *,
    min_line_length: int = DEFAULT_MIN_LINE_LENGTH,
    slack: int = DEFAULT_COLUMN_SLACK,
    code_min: Optional[int] = 0,
    code_max: Optional[int] = 800,
    organization: Optional[str] = None,
    fallback_pattern: bool = False,
    diagnostics: Optional[Diagnostics] = None,
) -> List[Record]:
    """
    Extrait les couples (code, ligne brute) sous l'en-tête.

    Pour chaque ligne, dans l'ordre :
    1. marqueur de fin de tableau → arrêt complet ;
    2. ligne trop courte → ignorée (non comptée) ;
    3. code lu dans la colonne LO (ou en fin de ligne si `fallback_pattern`
       et aucun en-tête) ;
    4. code invalide → ignoré et tracé ;
    5. sinon enregistrement, jusqu'à `cap` lignes valides.
    """
    diag = diagnostics or Diagnostics()

    if layout is None:
        if not fallback_pattern:
            diag.emit("extract", "aucun en-tête, aucune ligne extraite")
            return []
        body = list(lines)
        diag.emit("extract", "aucun en-tête, lecture du code en fin de ligne")
    else:
        body = list(lines[layout.header_line_index + 1:])

    stop_patterns = end_of_table_patterns(organization)
    records: List[Record] = []

    for line in body:
        if any(p.search(line) for p in stop_patterns):
            diag.emit("extract", "fin de tableau", line=line)
            break

        if len(line.strip()) < min_line_length:
            diag.emit("extract", "ligne trop courte ignorée", line=line)
            continue

        if layout is not None:
            candidate = code_at_column(line, layout, slack=slack)
        else:
            candidate = trailing_code(line)

        if not is_valid_code(candidate, code_min, code_max):
            diag.emit("extract", "code invalide ignoré", line=line, candidate=candidate)
            continue

        records.append(Record(code=candidate, raw_line=line))
        if len(records) >= cap:
            diag.emit("extract", "plafond atteint", cap=cap)
            break

    logger.info("%d ligne(s) LO extraite(s)", len(records))
    return records


def group_records(records: Iterable[Record]) -> Dict[str, List[str]]:
    """Regroupe les lignes par code, dans l'ordre d'apparition (ni tri ni dédoublonnage)."""
    groups: Dict[str, List[str]] = {}
    for record in records:
        groups.setdefault(record.code, []).append(record.raw_line)
    return groups
