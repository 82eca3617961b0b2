#!/usr/bin/env python3
"""corelight-tsv: transcode Corelight JSON logs into tagged Zeek TSV lines."""

import sys
import argparse
import logging
from contextlib import ExitStack

from corelight_tsv.config import CorelightConfig, load_config, load_yaml_config
from corelight_tsv.errors import ConfigError, TagNegotiationError
from corelight_tsv.metrics import Metrics
from corelight_tsv.models import Record, Timestamp
from corelight_tsv.tags import InMemoryTagAllocator
from corelight_tsv.transcoder import Transcoder

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [CORELIGHT] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

DEFAULT_TAG_NAME = "default"


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="corelight-tsv",
        description="Transcode Corelight JSON logs into tagged Zeek TSV lines.",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to YAML config file (reads the 'corelight' section)",
    )
    parser.add_argument(
        "--prefix", default=None,
        help="Tag prefix; overrides config and CORELIGHT_PREFIX (default: zeek)",
    )
    parser.add_argument(
        "--input", default=None,
        help="Newline-delimited input file (default: stdin)",
    )
    parser.add_argument(
        "--output", default=None,
        help="Output file (default: stdout)",
    )
    parser.add_argument(
        "--batch-size", type=int, default=500,
        help="Records per batch (default: 500)",
    )
    return parser


def read_batches(stream, batch_size: int, default_tag: int):
    """Yield lists of Records built from raw input lines."""
    batch = []
    for raw in stream:
        batch.append(Record(tag=default_tag, ts=Timestamp.now(), data=raw.rstrip(b"\r\n")))
        if len(batch) >= batch_size:
            yield batch
            batch = []
    if batch:
        yield batch


def run(args) -> int:
    try:
        config = load_config(load_yaml_config(args.config))
        if args.prefix is not None:
            config = CorelightConfig(prefix=args.prefix)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1
    if args.batch_size < 1:
        logger.error("--batch-size must be positive")
        return 1

    allocator = InMemoryTagAllocator()
    metrics = Metrics()
    try:
        default_tag = allocator.negotiate(DEFAULT_TAG_NAME)
        transcoder = Transcoder(config, allocator, metrics)
    except TagNegotiationError as e:
        logger.error("Tag negotiation failed: %s", e)
        return 1

    try:
        with ExitStack() as stack:
            src = stack.enter_context(open(args.input, "rb")) if args.input else sys.stdin.buffer
            dst = stack.enter_context(open(args.output, "wb")) if args.output else sys.stdout.buffer
            for batch in read_batches(src, args.batch_size, default_tag):
                for record in transcoder.process_batch(batch):
                    name = allocator.lookup(record.tag) or DEFAULT_TAG_NAME
                    dst.write(name.encode("utf-8") + b"\t" + record.data + b"\n")
            dst.flush()
    except OSError as e:
        logger.error("I/O error: %s", e)
        return 1

    snap = metrics.snapshot()
    logger.info("Stats: %d records, %d transformed, %d passed through",
                snap["total_records"], snap["transformed"], snap["passed_through"])
    for outcome, count in sorted(snap["outcomes"].items()):
        logger.info("  %s: %d", outcome, count)
    return 0


def main():
    args = build_cli_parser().parse_args()
    sys.exit(run(args))


if __name__ == "__main__":
    main()
