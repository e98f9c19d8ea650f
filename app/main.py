import argparse
import json
import sys
from pathlib import Path

from app.config.settings import Settings
from app.database.connection import close_pool
from app.gateway.gateway import build_gateway
from app.logging.logger import Log
from app.pipeline.models import Accepted


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="upload-gateway",
        description="Run files through the upload gateway and print one JSON verdict per file.",
    )
    parser.add_argument("files", nargs="+", type=Path, help="Files to submit")
    parser.add_argument(
        "--metadata",
        type=Path,
        required=True,
        help="JSON file with title, author, category, description and submitter_identity",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> build gateway -> submit files -> print verdicts."""
    args = parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    metadata = json.loads(args.metadata.read_text(encoding="utf-8"))
    if not isinstance(metadata, dict):
        Log.error(f"Metadata file {args.metadata} must contain a JSON object")
        return 2

    gateway = build_gateway(settings)
    rejected = 0
    try:
        for path in args.files:
            verdict = gateway.submit(path.read_bytes(), metadata)
            if not isinstance(verdict, Accepted):
                rejected += 1
            print(json.dumps({"file": str(path), **verdict.to_dict()}, ensure_ascii=False))
        Log.info(f"Gateway stats: {gateway.stats()}")
    finally:
        gateway.close()
        close_pool()
    return 1 if rejected else 0


if __name__ == "__main__":
    sys.exit(main())
