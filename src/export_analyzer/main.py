#!/usr/bin/env python3
"""Command-line entry point for Export Analyzer."""

import argparse
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict

import pytz

from .config import DEFAULT_TIMEZONE_NAME, INPUT_DIR, LOG_FORMAT
from .conversation_service import ConversationService
from .data_models import BUNDLE_FIELDS, AnalysisResult
from .phrase_counters import DEFAULT_PHRASE_COUNTERS
from .processing import ExportAnalyzerError, Processor
from .utils import read_documents, save_json

logger = logging.getLogger(__name__)


def build_report(result: AnalysisResult, include_records: bool = False) -> Dict[str, Any]:
    """JSON-ready view of an analysis result."""
    report = {
        "messaging": result.messaging,
        "engagement": result.extras,
        "security": result.security,
        "conversations": ConversationService().thread_options(result.bundle.threads),
        "stats": asdict(result.stats),
    }
    if include_records:
        report["records"] = {
            name: [record.to_dict() for record in getattr(result.bundle, name)]
            for name in BUNDLE_FIELDS.values()
        }
    return report


def main(argv=None) -> int:
    """Main processing function."""
    parser = argparse.ArgumentParser(description="Analyze a personal-data export")
    parser.add_argument("--input", type=Path, default=INPUT_DIR, help="Folder containing the export's .json files")
    parser.add_argument("--output", type=Path, default=None, help="Write the report to this JSON file")
    parser.add_argument("--timezone", default=DEFAULT_TIMEZONE_NAME, help="Timezone for hour-of-day statistics")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument("--no-phrases", action="store_true", help="Disable phrase counters")
    parser.add_argument("--include-records", action="store_true", help="Also dump every canonical record")
    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format=LOG_FORMAT)

    try:
        tz = pytz.timezone(args.timezone)
    except pytz.UnknownTimeZoneError:
        logger.error(f"Unknown timezone: {args.timezone}")
        return 1

    if not args.input.is_dir():
        logger.error(f"Input directory not found: {args.input}")
        return 1

    phrase_counters = () if args.no_phrases else DEFAULT_PHRASE_COUNTERS
    processor = Processor(tz=tz, phrase_counters=phrase_counters)

    try:
        result = processor.run(read_documents(args.input))
    except ExportAnalyzerError as e:
        logger.error("=" * 60)
        logger.error(f"ERROR: {e}")
        logger.error("=" * 60)
        return 1
    except Exception as e:
        logger.error("=" * 60)
        logger.error(f"UNEXPECTED ERROR: {e}")
        logger.error("=" * 60)
        logger.debug("Traceback:", exc_info=True)
        return 1

    overview = result.messaging["overview"]
    logger.info(f"{overview['totalMessages']:,} messages in {overview['totalConversations']:,} conversations "
                f"({overview['startDate']} to {overview['endDate']})")

    if args.output:
        save_json(build_report(result, include_records=args.include_records), args.output)
        logger.info(f"Report written to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
