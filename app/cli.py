import argparse
import sys
from typing import List, Optional

from app.backend.process import process_statement
from bankstatement.config import get_settings
from bankstatement.logger import get_logger, set_level

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bank-statement-parser",
        description="Convert a bank statement spreadsheet into normalized transaction JSON.",
    )
    parser.add_argument(
        "bank_name",
        help="Institution label echoed into the output (free-form).",
    )
    parser.add_argument(
        "file_path",
        help="Path to the statement spreadsheet (.xlsx, .xlsm or .xls).",
    )
    parser.add_argument(
        "--sheet",
        default=None,
        help="Sheet name to parse (default: the workbook's active sheet).",
    )
    parser.add_argument(
        "--no-write",
        action="store_true",
        help="Only print the JSON; do not write <file>.json next to the input.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: BANKSTATEMENT_LOG_LEVEL or INFO).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    set_level(args.log_level or settings.LOG_LEVEL)

    try:
        _, json_text, json_path = process_statement(
            bank_name=args.bank_name,
            file_path=args.file_path,
            sheet_name=args.sheet,
            write_file=False if args.no_write else None,
        )
    except Exception:
        logger.error("Error parsing file: %s", args.file_path, exc_info=True)
        return settings.FAILURE_EXIT_CODE

    print(json_text)
    if json_path:
        print(f"\nSuccessfully written output to {json_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
