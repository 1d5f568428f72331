import json
import logging
import re
import shutil
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from .types import ProcessPaths, SplitReport

logger = logging.getLogger(__name__)

_SAFE_ARCHIVE_RE = re.compile(r"^[A-Za-z0-9_.-]+\.zip$")
_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_.-]")


def _safe_name(name: str) -> str:
    return _UNSAFE_CHARS_RE.sub("_", name)


def _unique_suffix() -> str:
    return uuid.uuid4().hex[:8]


def stage_source(pdf_path: str, out_root: Path) -> ProcessPaths:
    """
    Crée le dossier de travail d'un rapport et y copie le PDF d'origine.

    Le dossier porte le nom du fichier ; s'il existe déjà (rapport retraité),
    un suffixe aléatoire est ajouté pour ne pas écraser l'archive précédente.
    """
    pdf = Path(pdf_path).expanduser().resolve()
    process_dir = out_root / _safe_name(pdf.stem)
    if process_dir.exists():
        process_dir = out_root / f"{_safe_name(pdf.stem)}_{_unique_suffix()}"
    process_dir.mkdir(parents=True)
    original = process_dir / f"original_{pdf.name}"
    shutil.copy2(str(pdf), str(original))
    return ProcessPaths(run_root=out_root, process_dir=process_dir, base_name=pdf.stem, original_pdf_path=original)


def _dump(path: Path, data: Dict[str, Any]) -> Path:
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def record_success(
    paths: ProcessPaths,
    report: SplitReport,
    archive_path: Path,
    manifest_path: Path,
    with_diagnostics: bool = False,
) -> Dict[str, Any]:
    """Écrit `status.json` pour un découpage réussi et renvoie son contenu."""
    status: Dict[str, Any] = {
        "pdf": str(paths.original_pdf_path),
        "success": True,
        "dateCode": report.date_code,
        "fileNames": list(report.file_names),
        "archive": str(archive_path),
        "manifest": str(manifest_path),
        "steps": [s.__dict__ for s in report.steps],
    }
    if with_diagnostics:
        status["diagnostics"] = [e.__dict__ for e in report.diagnostics]
    _dump(paths.process_dir / "status.json", status)
    return status


def record_failure(paths: ProcessPaths, error: Exception) -> Dict[str, Any]:
    """Écrit `status.json` (échec) et `errors.json` (type d'erreur → message)."""
    status = {"pdf": str(paths.original_pdf_path), "success": False, "error": str(error)}
    _dump(paths.process_dir / "status.json", status)
    _dump(paths.process_dir / "errors.json", {type(error).__name__: str(error)})
    return status


def store_download(out_root: Path, archive_name: str, data: bytes) -> str:
    """
    Dépose une archive à télécharger et renvoie son nom de téléchargement.

    Un suffixe aléatoire évite qu'une requête écrase l'archive d'une autre
    pour la même date.
    """
    stem = Path(_safe_name(archive_name)).stem
    name = f"{stem}_{_unique_suffix()}.zip"
    (out_root / name).write_bytes(data)
    return name


def resolve_download(out_root: Path, name: str) -> Optional[Path]:
    """Chemin de l'archive `name` dans `out_root`, ou None si le nom est invalide ou absent."""
    if not _SAFE_ARCHIVE_RE.match(name) or name.startswith("."):
        return None
    path = out_root / name
    if not path.is_file():
        return None
    return path


def delete_file(path: Path) -> None:
    try:
        path.unlink()
        logger.debug("Archive supprimée: %s", path)
    except FileNotFoundError:
        pass
