"""
Run a financial CSV import from the CLI.

    python -m scripts.run_financial_import --file export.csv
    python -m scripts.run_financial_import --url https://example.com/export.csv --dry-run
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from app.config import get_csv_source_settings, get_financial_import_settings
from app.connectors.csv_source import CsvSourceClient
from app.errors import FetchFailedError
from app.logging_utils import configure_logging
from app.repositories.memory import InMemoryUnitOfWork
from app.repositories.unit_of_work import SqlAlchemyUnitOfWork
from app.services.financial_import_service import FinancialImportService, decode_csv_bytes
from app.services.import_report import ImportReportBuilder
from db.session import session_scope


def _read_source(args: argparse.Namespace) -> bytes:
    if args.file:
        return Path(args.file).read_bytes()
    return CsvSourceClient(settings=get_csv_source_settings()).fetch_bytes(args.url)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import a financial CSV into the daily ledger.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", dest="file", default=None, help="Path to a local CSV file.")
    source.add_argument("--url", dest="url", default=None, help="HTTP(S) URL of a CSV export.")
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Parse and aggregate into an in-memory store; nothing is written to the database.",
    )
    args = parser.parse_args(argv)

    configure_logging()
    service = FinancialImportService(settings=get_financial_import_settings())

    try:
        csv_text = decode_csv_bytes(_read_source(args))
    except FetchFailedError as exc:
        report = ImportReportBuilder.failure(exc)
    except OSError as exc:
        parser.error(f"cannot read {args.file}: {exc}")
    else:
        if args.dry_run:
            report = service.run_import(csv_text, InMemoryUnitOfWork())
        else:
            with session_scope() as db:
                report = service.run_import(csv_text, SqlAlchemyUnitOfWork(db))

    print(json.dumps(report.to_dict(), indent=2))
    return 0 if report.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
