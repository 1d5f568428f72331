import logging
import time
from dataclasses import asdict
from datetime import date
from typing import Dict, List, Optional

from .archive import archive_name_for, package_archive
from .composer import PypdfSourceDocument, compose_document, copy_range
from .config import load_config
from .dates import derive_date_code
from .diagnostics import Diagnostics
from .errors import NoRecordsError, RefundSplitError
from .layout import locate_layout
from .records import extract_records, group_records
from .storage import record_failure, record_success, stage_source
from .text_service import PypdfTextExtractor, TextExtractor, split_lines
from .types import ComposedDocument, ProcessConfig, SplitReport, StepResult
from .writer import write_archive, write_manifest, write_txt_pages

logger = logging.getLogger(__name__)


def document_file_name(date_code: str, code: str) -> str:
    return f"{date_code}-{code}.pdf"


def run_split_pipeline(
    data: bytes,
    cfg: Optional[ProcessConfig] = None,
    extractor: Optional[TextExtractor] = None,
    today: Optional[date] = None,
) -> SplitReport:
    """
    Orchestrateur principal: PDF → texte → lignes LO → un PDF par LO → ZIP.

    Étapes:
    1. Extraction du texte (page 1 pour le tableau, tout le document pour la date).
    2. Repérage de l'en-tête, extraction et regroupement des lignes par LO.
    3. Construction d'un PDF par LO (ordre croissant des codes).
    4. Archivage ZIP.

    Toute erreur interrompt la requête : pas d'archive partielle.
    """
    cfg = cfg or load_config()
    extractor = extractor or PypdfTextExtractor()
    diag = Diagnostics(enabled=cfg.verbose)
    steps: List[StepResult] = []

    # 1) Texte : une seule lecture, la fenêtre du tableau en est une tranche
    t0 = time.time()
    page_texts = extractor.extract_pages_text(data)
    full_text = "\n".join(page_texts)
    table_text = "\n".join(page_texts[: cfg.scan_pages])
    steps.append(StepResult(name="extract_text", ok=True, duration_sec=time.time() - t0))

    date_code = derive_date_code(full_text, today=today)
    diag.emit("date", "code date", date_code=date_code)

    # 2) En-tête + lignes LO
    t0 = time.time()
    lines = split_lines(table_text)
    layout = locate_layout(
        lines,
        marker=cfg.marker,
        domain_markers=cfg.domain_markers,
        max_lookahead=cfg.max_lookahead,
    )
    diag.emit("layout", "en-tête" if layout else "en-tête introuvable", layout=asdict(layout) if layout else None)
    records = extract_records(
        lines,
        layout,
        cap=cfg.extraction_cap,
        min_line_length=cfg.min_line_length,
        slack=cfg.column_slack,
        code_min=cfg.code_min,
        code_max=cfg.code_max,
        organization=cfg.organization,
        fallback_pattern=cfg.fallback_pattern,
        diagnostics=diag,
    )
    groups = group_records(records)
    steps.append(StepResult(name="extract_records", ok=True, duration_sec=time.time() - t0))

    if not groups:
        raise NoRecordsError("Aucune ligne LO trouvée dans le PDF. Vérifiez le format du fichier.")

    # 3) Un PDF par LO
    t0 = time.time()
    source = PypdfSourceDocument(data)
    pages_to_copy = copy_range(source.page_count(), cfg.trailing_pages)
    documents: List[ComposedDocument] = []
    for code in sorted(groups):
        documents.append(
            ComposedDocument(
                file_name=document_file_name(date_code, code),
                code=code,
                data=compose_document(code, groups[code], source, pages_to_copy, date_code=date_code),
                line_count=len(groups[code]),
                copied_page_count=pages_to_copy[1] - pages_to_copy[0],
            )
        )
        diag.emit("compose", "PDF généré", code=code, lines=len(groups[code]), copied=pages_to_copy)
    steps.append(StepResult(name="compose_documents", ok=True, duration_sec=time.time() - t0))

    # 4) ZIP
    t0 = time.time()
    archive = package_archive(
        [(d.file_name, d.data) for d in documents],
        archive_name=archive_name_for(date_code),
        group_count=len(groups),
    )
    steps.append(StepResult(name="package_archive", ok=True, duration_sec=time.time() - t0))

    return SplitReport(
        date_code=date_code,
        groups=groups,
        archive=archive,
        steps=steps,
        documents=documents,
        diagnostics=diag.events,
    )


def run_pdf_file_pipeline(
    pdf_path: str,
    cfg: Optional[ProcessConfig] = None,
    extractor: Optional[TextExtractor] = None,
) -> Dict:
    """
    Traite un PDF sur disque : copie de l'original, découpage, puis écriture de
    l'archive, du manifeste et du texte extrait dans le dossier de process.

    Écrit toujours `status.json` ; en cas d'échec, écrit aussi `errors.json` et
    relève l'exception.
    """
    cfg = cfg or load_config()
    extractor = extractor or PypdfTextExtractor()
    paths = stage_source(pdf_path, cfg.out_root)
    data = paths.original_pdf_path.read_bytes()

    try:
        if cfg.verbose:
            write_txt_pages(paths.process_dir, paths.base_name, extractor.extract_pages_text(data))
        report = run_split_pipeline(data, cfg, extractor=extractor)
    except RefundSplitError as e:
        record_failure(paths, e)
        raise

    archive_path = write_archive(paths.process_dir, report.archive)
    manifest_path = write_manifest(paths.process_dir, paths.base_name, report.manifest())
    status = record_success(paths, report, archive_path, manifest_path, with_diagnostics=cfg.verbose)
    logger.info("PDF %s découpé en %d fichier(s) → %s", pdf_path, report.archive.file_count, archive_path)
    return status
