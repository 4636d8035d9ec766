"""Command-line interface for taronez."""

import argparse
import datetime
import logging
import os
import shlex
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import load_config
from .errors import MalformedRecordError
from .overdispersion import OverdispersionConfig
from .scanner import scan_vcf, write_results
from .utils import remove_vcf_extensions
from .validators import parse_sample_list, validate_vcf_file, validate_z_threshold
from .version import __version__

logger = logging.getLogger("taronez")

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}


def create_parser() -> argparse.ArgumentParser:
    """Create and return the argument parser for the taronez CLI."""
    parser = argparse.ArgumentParser(
        description="taronez: Test multi-sample VCF loci for overdispersion (Tarone's Z)."
    )

    # General Options
    general_group = parser.add_argument_group("General Options")
    general_group.add_argument(
        "--version",
        action="version",
        version=f"taronez {__version__}",
        help="Show the current version and exit",
    )
    general_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARN", "ERROR"],
        default="INFO",
        help="Set the logging level",
    )
    general_group.add_argument(
        "--log-file", help="Path to a file to write logs to (in addition to stderr)."
    )
    general_group.add_argument(
        "-c",
        "--config",
        help="Path to configuration file",
        default=None,
    )

    # Core Input/Output
    io_group = parser.add_argument_group("Core Input/Output")
    io_group.add_argument("-v", "--vcf-file", help="Input VCF file path", required=True)
    io_group.add_argument(
        "-o",
        "--output-file",
        nargs="?",
        const="stdout",
        help="Output TSV file name or 'stdout'/'-' for stdout. "
        "Defaults to <vcf base name>.tarone.tsv in the current directory.",
    )
    io_group.add_argument(
        "--samples",
        help="Comma-separated sample IDs to test (default: all samples in the VCF).",
    )

    # Test Options
    test_group = parser.add_argument_group("Test Options")
    test_group.add_argument(
        "--z-threshold",
        type=float,
        default=None,
        help="Loci with Tarone's Z above this value are flagged as overdispersed "
        "(default from config: 3.0).",
    )
    test_group.add_argument(
        "--depth-field",
        default=None,
        help="FORMAT field holding total read depth (default from config: DP).",
    )
    test_group.add_argument(
        "--alt-count-field",
        default=None,
        help="FORMAT field holding alternate-allele read counts (default from config: AO).",
    )
    test_group.add_argument(
        "--only-overdispersed",
        action="store_true",
        help="Write only loci flagged as overdispersed.",
    )

    return parser


def parse_args(args_list: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Parameters
    ----------
    args_list : list, optional
        List of arguments to parse. If None, uses sys.argv

    Returns
    -------
    argparse.Namespace
        Parsed arguments
    """
    parser = create_parser()
    return parser.parse_args(args_list)


def build_config(args: argparse.Namespace, cfg: Dict[str, Any]) -> OverdispersionConfig:
    """Merge CLI overrides into the loaded configuration."""
    merged = dict(cfg)
    if args.z_threshold is not None:
        merged["z_threshold"] = args.z_threshold
    if args.depth_field:
        merged["depth_field"] = args.depth_field
    if args.alt_count_field:
        merged["alt_count_field"] = args.alt_count_field
    return OverdispersionConfig.from_dict(merged)


def main(argv: Optional[List[str]] = None) -> int:
    """Run main entry point for the taronez CLI.

    Steps:
        1. Parse arguments.
        2. Configure logging and load config.
        3. Validate the VCF file, sample selection and threshold.
        4. Scan the VCF and write results.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    args = parse_args(argv)

    logger.setLevel(LOG_LEVEL_MAP[args.log_level])

    # If a log file is specified, add a file handler
    if args.log_file:
        log_file_path = Path(args.log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        fh = logging.FileHandler(args.log_file)
        fh.setLevel(LOG_LEVEL_MAP[args.log_level])
        fh.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        logger.addHandler(fh)
        logger.debug(f"Logging to file enabled: {args.log_file}")

    start_time = datetime.datetime.now()
    logger.info(f"Run started at {start_time.isoformat()}")
    if args.log_level == "DEBUG":
        invocation = argv if argv is not None else sys.argv[1:]
        logger.debug(f"Command line invocation: taronez {shlex.join(invocation)}")
        logger.debug(f"Python executable: {sys.executable}")
        logger.debug(f"Working directory: {os.getcwd()}")

    try:
        cfg = load_config(args.config)
        logger.debug(f"Configuration loaded: {cfg}")
        config = build_config(args, cfg)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    validate_z_threshold(config.z_threshold)
    validate_vcf_file(args.vcf_file, logger)
    samples = parse_sample_list(args.samples)

    try:
        results_df = scan_vcf(args.vcf_file, config, samples=samples)
    except MalformedRecordError as e:
        logger.error(f"Cannot read {args.vcf_file}: {e}")
        return 1

    if args.only_overdispersed:
        results_df = results_df[results_df["overdispersed"].astype(bool)]

    output_file = args.output_file or f"{remove_vcf_extensions(args.vcf_file)}.tarone.tsv"
    write_results(results_df, output_file)

    elapsed = datetime.datetime.now() - start_time
    logger.info(f"Run finished in {elapsed.total_seconds():.2f} s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
