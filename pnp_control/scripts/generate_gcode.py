#!/usr/bin/env python3
"""
Generate G-code Script.

Encode a board job as a pick-and-place or paste-dispense G-code program.

Usage:
    python -m pnp_control.scripts.generate_gcode --job board.yaml
    python -m pnp_control.scripts.generate_gcode --job board.yaml --dispense
    python -m pnp_control.scripts.generate_gcode --job board.yaml \\
        --config machine.yaml --output board.gcode
    python -m pnp_control.scripts.generate_gcode --job board.yaml \\
        --dispense --init-ms 25 --area-ms 15

G-code goes to stdout unless ``--output`` is given.  Diagnostics go to
stderr.
"""

from __future__ import annotations

import argparse
import dataclasses
import io
import logging
import sys

import yaml

from pnp_control.configs.loader import ConfigError, load_config
from pnp_control.gcode import GCodeError, GCodeMachine
from pnp_control.gcode.sink import GCodeWriter
from pnp_control.jobs.loader import JobError, load_job
from pnp_control.jobs.sequencer import encode_dispense, encode_pick_place
from pnp_control.utils.fs import atomic_write_text

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate pick-and-place or dispense G-code for a board",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--job",
        "-j",
        type=str,
        required=True,
        help="Job file with the board's parts (YAML)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Machine configuration file path",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Write G-code to this file instead of stdout",
    )

    # Pass selection
    parser.add_argument(
        "--dispense",
        "-d",
        action="store_true",
        help="Dispense solder paste on all pads instead of pick-and-place",
    )

    # Dispense timing overrides
    parser.add_argument(
        "--init-ms",
        type=float,
        help="Solenoid time per pad in ms (overrides config)",
    )
    parser.add_argument(
        "--area-ms",
        type=float,
        help="Additional solenoid time per mm^2 pad area (overrides config)",
    )

    parser.add_argument(
        "--comment",
        type=str,
        help="Comment written as the first G-code line (default: job name)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Debug logging",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(args.config)
        job = load_job(args.job)
    except (ConfigError, JobError, FileNotFoundError, yaml.YAMLError) as e:
        logger.error("%s", e)
        return 1

    if args.init_ms is not None or args.area_ms is not None:
        try:
            config = config.with_dispense_timing(args.init_ms, args.area_ms)
        except ConfigError as e:
            logger.error("Invalid dispense timing: %s", e)
            return 1
    if args.comment:
        job = dataclasses.replace(job, comment=args.comment)

    buf = io.StringIO()
    writer = GCodeWriter(buf)
    machine = GCodeMachine()
    encode = encode_dispense if args.dispense else encode_pick_place

    try:
        summary = encode(machine, writer, config, job)
    except (ConfigError, GCodeError) as e:
        logger.exception("Encoding failed: %s", e)
        return 1

    gcode = buf.getvalue()
    if args.output:
        try:
            atomic_write_text(args.output, gcode)
        except OSError as e:
            logger.error("%s", e)
            return 1
        logger.info("G-code written to: %s", args.output)
    else:
        sys.stdout.write(gcode)
        sys.stdout.flush()

    if summary.skipped:
        logger.warning(
            "%d part(s) skipped: %s",
            summary.skipped,
            ", ".join(summary.no_tape + summary.out_of_components),
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
