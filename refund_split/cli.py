import argparse
import logging
import sys
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .config import load_config
from .errors import RefundSplitError
from .orchestrator import run_pdf_file_pipeline

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def find_documents(input_path: str):
    """
    Retourne les PDF à traiter :
    - le fichier lui-même si `input_path` est un PDF
    - sinon tous les PDF du dossier (récursif)
    """
    root = Path(input_path).expanduser().resolve()
    if root.is_file():
        return [root] if root.suffix.lower() == ".pdf" else []
    return sorted(p for p in root.rglob("*") if p.is_file() and p.suffix.lower() == ".pdf")


def main() -> None:
    # Charger .env avant toute lecture d'os.getenv (config)
    load_dotenv(find_dotenv(usecwd=True), override=False)

    parser = argparse.ArgumentParser(description="Découpe un rapport PDF en un PDF par LO, regroupés dans un ZIP.")
    parser.add_argument("--input", required=False, help="PDF ou dossier de PDF à traiter. Ignoré avec --serve.")
    parser.add_argument("--serve", action="store_true", help="Lance le service HTTP au lieu du traitement par lot.")
    parser.add_argument("--host", default="127.0.0.1", help="Adresse d'écoute du service HTTP")
    parser.add_argument("--port", type=int, default=3000, help="Port du service HTTP")
    parser.add_argument("--out-root", required=False, help="Dossier racine de sortie (défaut: temp)")
    parser.add_argument(
        "--trailing-pages",
        type=int,
        default=None,
        help="Nombre de pages finales recopiées dans chaque PDF (défaut: toutes sauf la première)",
    )
    parser.add_argument("--cap", type=int, default=None, help="Nombre max de lignes LO lues (défaut via env: 20)")
    parser.add_argument(
        "--domain-marker",
        action="append",
        default=None,
        help="Mot devant figurer dans la ligne d'en-tête avec LO (ex.: Cash). Répétable.",
    )
    parser.add_argument("--fallback-pattern", action="store_true", help="Sans en-tête, lit le code en fin de ligne")
    parser.add_argument("--verbose", action="store_true", help="Logs détaillés + diagnostics dans status.json")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    cfg = load_config(
        out_root=args.out_root,
        trailing_pages=args.trailing_pages,
        extraction_cap=args.cap,
        domain_markers=tuple(args.domain_marker) if args.domain_marker else None,
        fallback_pattern=args.fallback_pattern,
        verbose=args.verbose,
    )

    # Mode 1 : service HTTP
    if args.serve:
        from .server import run_server

        print(f"▶️ Service HTTP sur http://{args.host}:{args.port} (POST /api/process-pdf, GET /download/<nom>)")
        run_server(host=args.host, port=args.port, cfg=cfg)
        return

    # Mode 2 : traitement par lot d'un fichier ou d'un dossier
    if not args.input:
        print("Erreur: --input est obligatoire sauf si vous utilisez --serve.")
        sys.exit(1)

    docs = find_documents(args.input)
    if not docs:
        print("Aucun fichier PDF trouvé.")
        sys.exit(0)

    print(f"{len(docs)} fichier(s) PDF détecté(s) → sortie: {cfg.out_root}")
    failures = 0
    for i, pdf in enumerate(docs, start=1):
        try:
            print(f"\n[{i}/{len(docs)}] {pdf}")
            status = run_pdf_file_pipeline(str(pdf), cfg)
            print(f"✅ Archive: {status['archive']}")
        except KeyboardInterrupt:
            print("Interrompu par l'utilisateur.")
            sys.exit(130)
        except RefundSplitError as e:
            failures += 1
            print(f"❌ Échec: {pdf} → {e}")

    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
