"""Command line entry point: run one write cycle or print datasource snippets."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, List, Optional, Sequence

import yaml

from rrdsink.config.schema import WriterSettings
from rrdsink.config.store import load_env_file, load_writer_settings, writer_settings_from_env
from rrdsink.errors import RRDWriterError
from rrdsink.writer import Result, build_writers
from rrdsink.writer.base import iter_samples
from rrdsink.writer.naming import render_datasource_snippet

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_results(path: Path) -> List[Result]:
    """Read collector results from a JSON or YAML document."""

    with path.open("r", encoding="utf-8") as fh:
        if path.suffix.lower() == ".json":
            raw: Any = json.load(fh)
        else:
            raw = yaml.safe_load(fh)
    if isinstance(raw, dict):
        raw = raw.get("results", [])
    if not isinstance(raw, list):
        raise ValueError(f"Expected a list of results at {path}")
    return [Result.from_mapping(item) for item in raw]


def _resolve_settings(args: argparse.Namespace) -> WriterSettings:
    env = dict(os.environ)
    if args.env_file:
        env.update(load_env_file(args.env_file))
    if args.config:
        return load_writer_settings(args.config)
    return writer_settings_from_env(env)


def _cmd_write(args: argparse.Namespace) -> int:
    settings = _resolve_settings(args)
    results = load_results(args.results)
    failures = 0
    for writer in build_writers(settings):
        try:
            written = writer.write(results)
            logger.info("%d valores escritos en %s", len(written), writer.output_path)
        except RRDWriterError:
            failures += 1
            logger.exception("Falló la escritura en %s", writer.output_path)
        finally:
            writer.close()
    return 1 if failures else 0


def _cmd_generate(args: argparse.Namespace) -> int:
    results = load_results(args.results)
    type_names = [name.strip() for name in args.type_names.split(",") if name.strip()]
    try:
        snippet = render_datasource_snippet(iter_samples(results, type_names))
    except RRDWriterError as exc:
        logger.error("%s", exc)
        return 1
    sys.stdout.write(snippet)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rrdsink", description=__doc__)
    parser.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    write = sub.add_parser("write", help="Write one cycle of results to every configured output")
    write.add_argument("results", type=Path, help="JSON/YAML file with collector results")
    write.add_argument("--config", type=Path, default=None, help="Writer settings YAML")
    write.add_argument("--env-file", type=Path, default=None, help="dotenv file with RRDTOOL_* variables")
    write.set_defaults(handler=_cmd_write)

    generate = sub.add_parser("generate", help="Print <datasource> snippets for the given results")
    generate.add_argument("results", type=Path, help="JSON/YAML file with collector results")
    generate.add_argument("--type-names", default="", help="Comma separated type name keys")
    generate.set_defaults(handler=_cmd_generate)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        return args.handler(args)
    except (OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
