"""Service HTTP : dépôt d'un PDF, téléchargement unique de l'archive, santé."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from fastapi import FastAPI, File, UploadFile
from fastapi.responses import FileResponse, JSONResponse
from starlette.background import BackgroundTask
from starlette.concurrency import run_in_threadpool

from .config import load_config
from .errors import InputError, NoRecordsError, RefundSplitError
from .orchestrator import run_split_pipeline
from .storage import delete_file, resolve_download, store_download
from .text_service import TextExtractor
from .types import ProcessConfig

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def _delete_later(path: Path, delay: float) -> None:
    if delay > 0:
        await asyncio.sleep(delay)
    delete_file(path)


def create_app(cfg: Optional[ProcessConfig] = None, extractor: Optional[TextExtractor] = None) -> FastAPI:
    """Crée l'application FastAPI ; `cfg.out_root` sert de dossier temporaire des archives."""
    cfg = cfg or load_config()
    app = FastAPI(title="refund-split")
    max_bytes = cfg.max_upload_mb * 1024 * 1024

    @app.post("/api/process-pdf")
    async def process_pdf(pdf: Optional[UploadFile] = File(None)):
        """Découpe le PDF reçu par LO et prépare l'archive à télécharger."""
        if pdf is None:
            return _error(400, "Aucun fichier reçu")
        if pdf.content_type != PDF_MIME:
            return _error(415, "Seuls les fichiers PDF sont acceptés")

        data = await pdf.read()
        if len(data) > max_bytes:
            return _error(413, f"Fichier trop volumineux (max {cfg.max_upload_mb} Mo)")

        try:
            report = await run_in_threadpool(run_split_pipeline, data, cfg, extractor)
        except (InputError, NoRecordsError) as e:
            return _error(400, str(e))
        except RefundSplitError as e:
            logger.error("Échec du découpage de %s: %s", pdf.filename, e)
            return _error(500, str(e))

        name = store_download(cfg.out_root, report.archive.file_name, report.archive.data)
        return {
            "success": True,
            "dateCode": report.date_code,
            "groupCount": report.archive.group_count,
            "fileCount": report.archive.file_count,
            "fileNames": report.file_names,
            "downloadReference": f"/download/{name}",
        }

    @app.get("/download/{filename}")
    async def download(filename: str):
        """Envoie l'archive une seule fois puis la supprime après un court délai."""
        path = resolve_download(cfg.out_root, filename)
        if path is None:
            return _error(404, "Fichier introuvable")
        return FileResponse(
            path,
            media_type="application/zip",
            filename=filename,
            background=BackgroundTask(_delete_later, path, cfg.download_grace_seconds),
        )

    @app.get("/health")
    async def health():
        return {"status": "OK"}

    return app


def run_server(host: str = "127.0.0.1", port: int = 3000, cfg: Optional[ProcessConfig] = None) -> None:
    """Lance le serveur HTTP (charge `.env` avant de lire la configuration)."""
    import uvicorn

    load_dotenv(find_dotenv(usecwd=True), override=False)
    uvicorn.run(
        create_app(cfg or load_config()),
        host=host,
        port=port,
        timeout_keep_alive=30,
        log_level="info",
    )
