from pathlib import Path
from typing import Any, List

import json

from .types import ArchiveResult


def write_txt_pages(out_dir: Path, prefix: str, page_texts: List[str]) -> None:
    """Écrit le texte extrait de chaque page dans des fichiers .txt individuels (debug)."""
    for idx, txt in enumerate(page_texts, start=1):
        (out_dir / f"{prefix}_text_page_{idx}.txt").write_text(txt, encoding="utf-8")


def write_archive(out_dir: Path, archive: ArchiveResult) -> Path:
    """Écrit l'archive ZIP sur disque sous son nom (`refund-split-<date>.zip`)."""
    path = out_dir / archive.file_name
    path.write_bytes(archive.data)
    return path


def write_manifest(out_dir: Path, prefix: str, manifest: Any) -> Path:
    """
    Écrit le manifeste (noms de fichiers, compteurs, lignes par LO) dans
    `<prefix>_manifest.json`.
    """
    path = out_dir / f"{prefix}_manifest.json"
    path.write_text(json.dumps(manifest, ensure_ascii=False, indent=2), encoding="utf-8")
    return path
