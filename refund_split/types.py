from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class ProcessConfig:
    """Configuration de haut niveau pour exécuter le découpage par LO."""
    out_root: Path
    marker: str = "LO"
    domain_markers: Tuple[str, ...] = ()
    max_lookahead: int = 50
    extraction_cap: int = 20
    min_line_length: int = 10
    column_slack: int = 2
    code_min: Optional[int] = 0
    code_max: Optional[int] = 800
    fallback_pattern: bool = False    # heuristique "code en fin de ligne" si pas d'en-tête
    organization: Optional[str] = None
    trailing_pages: Optional[int] = None  # None = toutes les pages après la première
    scan_pages: int = 1
    max_upload_mb: int = 20
    download_grace_seconds: float = 1.0
    verbose: bool = False


@dataclass(frozen=True)
class Record:
    code: str
    raw_line: str


@dataclass(frozen=True)
class Layout:
    """Position de la colonne LO, déduite de la ligne d'en-tête."""
    header_line_index: int
    code_column_start: int
    code_column_end: int


@dataclass
class ComposedDocument:
    file_name: str
    code: str
    data: bytes
    line_count: int
    copied_page_count: int


@dataclass
class ArchiveResult:
    file_name: str
    data: bytes
    file_names: List[str]
    group_count: int
    file_count: int

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class ProcessPaths:
    """Regroupe les chemins utilisés pendant le process d'un PDF."""
    run_root: Path
    process_dir: Path
    base_name: str
    original_pdf_path: Path


@dataclass
class StepResult:
    name: str
    ok: bool
    duration_sec: float
    output_paths: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None


@dataclass
class DiagnosticEvent:
    step: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SplitReport:
    date_code: str
    groups: Dict[str, List[str]]
    archive: ArchiveResult
    steps: List[StepResult]
    documents: List[ComposedDocument] = field(default_factory=list)
    diagnostics: List[DiagnosticEvent] = field(default_factory=list)

    @property
    def file_names(self) -> List[str]:
        return self.archive.file_names

    def manifest(self) -> Dict[str, Any]:
        """Résumé sérialisable (noms de fichiers, compteurs, lignes par LO)."""
        return {
            "dateCode": self.date_code,
            "groupCount": self.archive.group_count,
            "fileCount": self.archive.file_count,
            "fileNames": list(self.archive.file_names),
            "lineCounts": {d.file_name: d.line_count for d in self.documents},
            "groups": {code: list(lines) for code, lines in self.groups.items()},
        }
