"""Main entry point for the SMS transaction pipeline"""

import argparse
import json
import sys
import time
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables FIRST, before any other imports
# Find the .env file in the project root
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

from sms_pipeline.constants import UNKNOWN_SENDER, WorkStatus
from sms_pipeline.demo.csv_message_loader import MessageCsvLoader
from sms_pipeline.pipeline.factory import build_worker
from sms_pipeline.pipeline.retry_handler import retry_with_exponential_backoff
from sms_pipeline.utils.config_loader import load_config
from sms_pipeline.utils.errors import PipelineError
from sms_pipeline.utils.logging import get_logger

logger = get_logger(__name__)


def run_process(worker, body: str, sender: str) -> int:
    """Run one SMS through the coordinator and print the outcome (nothing is stored)"""
    outcome = worker.coordinator.process(body, sender, int(time.time() * 1000))
    if outcome is None:
        print(json.dumps({"isTransaction": False}))
        return 0

    print(outcome.model_dump_json(indent=2))
    return 0


def run_batch(worker, csv_path: str, limit: int = None, max_retries: int = 3) -> dict:
    """Feed every message of a CSV export through the worker, retrying retryable failures"""
    loader = MessageCsvLoader(csv_path)
    summary = {status.value: 0 for status in WorkStatus}
    summary["failed"] = 0

    for message in loader.iter_messages(limit=limit):
        try:
            result = retry_with_exponential_backoff(
                worker.handle,
                max_retries=max_retries,
                base_delay=1,
                max_delay=30,
                message=message
            )
            summary[result.status.value] += 1
        except PipelineError as e:
            summary["failed"] += 1
            logger.error(f"Giving up on message: {e}", sender=message.sender_address)

    return summary


def run_status(worker) -> dict:
    status = worker.coordinator.get_processing_status()
    return status.model_dump()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Turn bank SMS messages into transactions")
    parser.add_argument("--config", help="Pipeline config (defaults to PIPELINE_CONFIG or config/pipeline.yaml)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    process_parser = subparsers.add_parser("process", help="Extract a transaction from one SMS")
    process_parser.add_argument("body", help="SMS text")
    process_parser.add_argument("--sender", default=UNKNOWN_SENDER, help="Sender address")

    batch_parser = subparsers.add_parser("batch", help="Process an exported SMS CSV")
    batch_parser.add_argument("csv", help="CSV with body, address and date columns")
    batch_parser.add_argument("--limit", type=int, default=None, help="Only process the first N rows")
    batch_parser.add_argument("--max-retries", type=int, default=3, help="Attempts per message")

    subparsers.add_parser("status", help="Show which extractors are available")
    return parser


def main(argv=None):
    """Main entry point"""
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    worker = build_worker(config)

    try:
        if args.command == "process":
            return run_process(worker, args.body, args.sender)

        if args.command == "batch":
            summary = run_batch(worker, args.csv, limit=args.limit, max_retries=args.max_retries)
            logger.info("=" * 60)
            logger.info("BATCH SUMMARY")
            logger.info("=" * 60)
            for key, count in summary.items():
                logger.info(f"{key}: {count}")
            print(json.dumps(summary, indent=2))
            return 0 if summary["failed"] == 0 else 1

        print(json.dumps(run_status(worker), indent=2))
        return 0

    except Exception as e:
        logger.error(f"Main execution failed: {e}")
        raise

    finally:
        worker.coordinator.close()


if __name__ == "__main__":
    sys.exit(main())
