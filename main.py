import logging
import sys
from typing import Optional

import click
import structlog

from config import Settings, get_settings, get_settings_for_environment
from models import ProcessingReport
from services import get_ledger, process_transactions
from storage import read_transactions, write_accounts

logger = structlog.get_logger()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def configure_logging(settings: Settings, log_level: Optional[str] = None) -> None:
    """Send structured logs to stderr; stdout is reserved for the account table."""
    level = (log_level or settings.log_level).upper()
    logging.basicConfig(stream=sys.stderr, level=level, format="%(message)s", force=True)

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@click.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--output",
    "-o",
    type=click.File("w"),
    default="-",
    show_default=True,
    help="Where to write the account table.",
)
@click.option(
    "--env",
    "environment",
    type=click.Choice(["development", "production", "testing"], case_sensitive=False),
    default=None,
    help="Settings profile; defaults to LEDGER_* environment variables.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Override the configured log level.",
)
def main(input_file, output, environment, log_level):
    """Apply the transactions in INPUT_FILE and print the resulting accounts."""
    settings = get_settings_for_environment(environment) if environment else get_settings()
    configure_logging(settings, log_level)

    logger.info(
        "Processing transactions",
        input_file=input_file,
        app=settings.app_name,
        version=settings.app_version,
    )

    report = ProcessingReport()
    ledger = get_ledger(detailed_logging=settings.enable_detailed_logging)
    process_transactions(read_transactions(input_file, report), ledger, report)

    write_accounts(ledger.snapshot(), output)


if __name__ == "__main__":
    main()
