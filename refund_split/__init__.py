"""refund_split package: split a PDF report by LO code (PDF → text → LO rows → one PDF per LO → ZIP).

This package provides:
- Text extraction from the source PDF (pypdf, no OCR)
- Header / column location and LO record extraction
- Grouping of records by LO code
- Composition of one PDF per LO (synthesized cover page + copied trailing pages)
- ZIP packaging, an orchestrator, a batch CLI and an HTTP service
"""

from .archive import package_archive
from .composer import PypdfSourceDocument, compose_document, copy_range
from .dates import derive_date_code
from .errors import (
    ArchiveError,
    CompositionError,
    ExtractionError,
    InputError,
    NoRecordsError,
    RefundSplitError,
)
from .layout import locate_layout
from .orchestrator import run_split_pipeline
from .records import extract_records, group_records
from .text_service import PypdfTextExtractor, split_lines
from .types import Layout, Record

__all__ = [
    "ArchiveError",
    "CompositionError",
    "ExtractionError",
    "InputError",
    "Layout",
    "NoRecordsError",
    "PypdfSourceDocument",
    "PypdfTextExtractor",
    "Record",
    "RefundSplitError",
    "compose_document",
    "copy_range",
    "derive_date_code",
    "extract_records",
    "group_records",
    "locate_layout",
    "package_archive",
    "run_split_pipeline",
    "split_lines",
]
