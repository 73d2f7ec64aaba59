"""
Command-line entry points.

    ncpdp-ingest claims.txt --stop-on-error
    ncpdp-parse transaction.txt
"""
import argparse
import json
import sys
from typing import List, Optional

from rxremit.config.settings import get_settings
from rxremit.models.enums import IngestionStatus
from rxremit.models.ingestion import IngestRequest
from rxremit.services.ncpdp.ingestion import NcpdpIngestionService
from rxremit.services.ncpdp.parser import NcpdpD0Parser
from rxremit.utils.logger import configure_from_settings, get_logger, resolve_level

logger = get_logger(__name__)


def _log_level(value: str) -> str:
    try:
        resolve_level(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
    return value.upper()


def _add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--log-level", type=_log_level, help="Logging level (default: LOG_LEVEL)")
    parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        help="Log output format (default: LOG_FORMAT)",
    )


def _configure(args: argparse.Namespace) -> None:
    configure_from_settings(get_settings(), log_level=args.log_level, log_format=args.log_format)


def ingest_main(argv: Optional[List[str]] = None) -> int:
    """Ingest an NCPDP claims file and print the IngestionResult as JSON."""
    parser = argparse.ArgumentParser(description="Ingest NCPDP D.0 claims from a file")
    parser.add_argument("file_path", nargs="?", help="Claims file (default: NCPDP_DEFAULT_FILE_PATH)")
    parser.add_argument(
        "--stop-on-error",
        action="store_true",
        default=None,
        help="Stop at the first transaction that fails to decode",
    )
    _add_logging_arguments(parser)
    args = parser.parse_args(argv)
    _configure(args)

    settings = get_settings()
    request = IngestRequest(
        file_path=args.file_path or settings.default_file_path,
        stop_on_error=settings.stop_on_error if args.stop_on_error is None else args.stop_on_error,
    )
    batch = NcpdpIngestionService().ingest(request)

    print(batch.result.model_dump_json(indent=2))
    return 0 if batch.result.status == IngestionStatus.SUCCESS else 1


def parse_main(argv: Optional[List[str]] = None) -> int:
    """Decode a single NCPDP transaction file and print it as JSON."""
    parser = argparse.ArgumentParser(description="Decode one NCPDP D.0 transaction")
    parser.add_argument("file_path", help="File holding one transaction")
    _add_logging_arguments(parser)
    args = parser.parse_args(argv)
    _configure(args)

    try:
        with open(args.file_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        logger.error("Failed to read transaction file", file_path=args.file_path, error=str(e))
        print(json.dumps({"error": "READ_ERROR", "message": str(e)}, indent=2))
        return 1

    outcome = NcpdpD0Parser().parse_safe(content)
    if not outcome.ok:
        print(outcome.error.model_dump_json(indent=2))
        return 1

    print(outcome.transaction.model_dump_json(indent=2, exclude={"raw_content"}))
    return 0


if __name__ == "__main__":
    sys.exit(ingest_main())
