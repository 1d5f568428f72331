import os
from pathlib import Path
from typing import Optional, Tuple

from .types import ProcessConfig


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    if raw.strip().lower() == "none":
        return None
    return int(raw)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "0").strip().lower() in ("1", "true", "yes")


def _env_markers(name: str) -> Tuple[str, ...]:
    raw = os.getenv(name, "")
    return tuple(m.strip() for m in raw.split(",") if m.strip())


def load_config(
    out_root: Optional[str] = None,
    trailing_pages: Optional[int] = None,
    extraction_cap: Optional[int] = None,
    domain_markers: Optional[Tuple[str, ...]] = None,
    fallback_pattern: bool = False,
    verbose: bool = False,
) -> ProcessConfig:
    """Arguments explicites, puis variables d'environnement, puis valeurs par défaut."""
    root = Path(out_root or os.getenv("REFUND_SPLIT_OUT_ROOT", "temp")).expanduser().resolve()
    root.mkdir(parents=True, exist_ok=True)

    cfg = ProcessConfig(
        out_root=root,
        marker=os.getenv("LO_MARKER", "LO"),
        domain_markers=tuple(domain_markers) if domain_markers is not None else _env_markers("LO_DOMAIN_MARKERS"),
        extraction_cap=extraction_cap if extraction_cap is not None else _env_int("LO_EXTRACTION_CAP", 20),
        code_min=_env_int("LO_CODE_MIN", 0),
        code_max=_env_int("LO_CODE_MAX", 800),
        fallback_pattern=fallback_pattern or _env_flag("LO_FALLBACK_PATTERN"),
        organization=os.getenv("LO_ORGANIZATION") or None,
        trailing_pages=trailing_pages if trailing_pages is not None else _env_int("TRAILING_PAGES", None),
        scan_pages=int(_env_int("SCAN_PAGES", 1) or 1),
        max_upload_mb=int(_env_int("MAX_UPLOAD_MB", 20) or 20),
        download_grace_seconds=float(os.getenv("DOWNLOAD_GRACE_SECONDS", "1.0")),
        verbose=verbose or _env_flag("REFUND_SPLIT_VERBOSE"),
    )
    if cfg.extraction_cap is None or cfg.extraction_cap < 1:
        raise ValueError(f"LO_EXTRACTION_CAP doit être >= 1 (reçu: {cfg.extraction_cap})")
    if cfg.trailing_pages is not None and cfg.trailing_pages < 0:
        raise ValueError(f"TRAILING_PAGES doit être >= 0 (reçu: {cfg.trailing_pages})")
    return cfg
