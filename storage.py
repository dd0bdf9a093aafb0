import csv
import os
from typing import IO, Iterable, Iterator, Optional, Union

import structlog
from pydantic import ValidationError

from models import AccountSummary, ProcessingReport, TransactionRecord, format_amount

logger = structlog.get_logger()

OUTPUT_FIELDS = ["client", "available", "held", "total", "locked"]

Source = Union[str, "os.PathLike[str]", IO[str]]


def read_transactions(source: Source, report: Optional[ProcessingReport] = None) -> Iterator[TransactionRecord]:
    """Yield transaction records from delimited text with a header row.

    Column order comes from the header. Fields are trimmed and short rows
    are allowed, so dispute rows may omit the trailing amount. Rows that do
    not validate are logged and skipped.
    """
    if isinstance(source, (str, os.PathLike)):
        with open(source, newline="") as handle:
            yield from _read_rows(handle, report)
    else:
        yield from _read_rows(source, report)


def _read_rows(stream: IO[str], report: Optional[ProcessingReport]) -> Iterator[TransactionRecord]:
    reader = csv.reader(stream)
    header = None
    for row in reader:
        if not any(field.strip() for field in row):
            continue
        if header is None:
            header = [name.strip().lower() for name in row]
            continue

        values = dict(zip(header, (field.strip() for field in row)))
        try:
            record = TransactionRecord.model_validate(values)
        except ValidationError as e:
            logger.warning(
                "Failed to parse record, skipping",
                line=reader.line_num,
                row=row,
                error=_describe(e),
            )
            if report is not None:
                report.record_skipped()
            continue

        yield record


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'record'}: {err['msg']}"
        for err in error.errors()
    )


def write_accounts(summaries: Iterable[AccountSummary], stream: IO[str]) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_FIELDS)
    for summary in summaries:
        writer.writerow([
            summary.client,
            format_amount(summary.available),
            format_amount(summary.held),
            format_amount(summary.total),
            str(summary.locked).lower(),
        ])
