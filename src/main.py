import sys
import logging
from typing import List, Optional

from pydantic import ValidationError

from config import get_settings
from engine import PaymentsEngine
from errors import PaymentsError
from writer import write_accounts

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def describe_settings_error(error: ValidationError) -> str:
    problems = "; ".join(
        f"PAYMENTS_{'.'.join(map(str, detail['loc'])).upper()}: {detail['msg']}"
        for detail in error.errors()
    )
    return f"Invalid configuration: {problems}"


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    try:
        settings = get_settings()
    except ValidationError as e:
        # Logging is not configured yet
        print(describe_settings_error(e), file=sys.stderr)
        return 1
    configure_logging(settings.log_level)

    engine = PaymentsEngine(settings)
    try:
        ledger = engine.process_file(args[0])
    except PaymentsError as e:
        logger.error(str(e))
        return 1

    write_accounts(ledger.snapshot(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
