import io
import logging
import zipfile
from typing import Sequence, Tuple

from .errors import ArchiveError
from .types import ArchiveResult

logger = logging.getLogger(__name__)

ARCHIVE_PREFIX = "refund-split"


def archive_name_for(date_code: str) -> str:
    return f"{ARCHIVE_PREFIX}-{date_code}.zip"


def package_archive(
    documents: Sequence[Tuple[str, bytes]],
    archive_name: str = f"{ARCHIVE_PREFIX}.zip",
    group_count: int = 0,
) -> ArchiveResult:
    """
    Écrit les PDF dans une archive ZIP en mémoire (DEFLATE, niveau 9), dans l'ordre reçu.

    Le résultat n'est renvoyé qu'une fois l'archive entièrement écrite ; toute
    erreur lève ArchiveError et rien n'est exposé.
    """
    names = [name for name, _ in documents]
    if len(set(names)) != len(names):
        raise ArchiveError(f"Noms de fichiers en double dans l'archive: {names}")

    buf = io.BytesIO()
    try:
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
            for name, data in documents:
                zf.writestr(name, data)
    except (OSError, ValueError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        raise ArchiveError(f"Échec de l'écriture de l'archive {archive_name}: {e}") from e

    result = ArchiveResult(
        file_name=archive_name,
        data=buf.getvalue(),
        file_names=names,
        group_count=group_count or len(names),
        file_count=len(names),
    )
    logger.info("Archive %s: %d fichier(s), %d octets", archive_name, result.file_count, result.size)
    return result
