from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from persistence import StructuralLoadError
from settings import Settings, get_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsml",
        description="Serve a JSON file as a REST document store",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("-s", "--source", type=Path, default=None, help="Path of the source json file (JSML_SOURCE)")
    parser.add_argument("-p", "--port", type=int, default=None, help="Port to listen on (JSML_PORT, default 4242)")
    parser.add_argument("--host", type=str, default=None, help="Interface to bind (JSML_HOST)")
    parser.add_argument("--id", dest="id_key", type=str, default=None, help="Identifier field name (JSML_ID_KEY)")
    parser.add_argument(
        "--no-persist",
        dest="persist_to_disk",
        action="store_false",
        default=None,
        help="Keep changes in memory only",
    )
    return parser


def resolve_settings(argv: list[str] | None = None) -> Settings:
    args = build_parser().parse_args(argv)
    load_dotenv("local.env")
    return get_settings().with_overrides(
        source_path=args.source,
        port=args.port,
        host=args.host,
        id_key=args.id_key,
        persist_to_disk=args.persist_to_disk,
    )


def main(argv: list[str] | None = None) -> int:
    settings = resolve_settings(argv)
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    from app import build_store, create_app

    try:
        store = build_store(settings)
    except StructuralLoadError as e:
        print(str(e), file=sys.stderr)
        return 1

    app = create_app(settings, store=store)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
