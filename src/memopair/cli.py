import argparse
import json
import logging
import os
import sys

from memopair.api import create_config, run
from memopair.models import MotifError

VERBOSITY_LEVELS = {
    "verbose": logging.DEBUG,
    "normal": logging.INFO,
    "silent": logging.CRITICAL + 1,
}


def setup_logging(verbosity: str):
    """Setup logging configuration."""
    level = VERBOSITY_LEVELS[verbosity]
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def create_arg_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="memopair",
        description=(
            "MEMOPAIR: Compare methylation at the two modified positions of complementary motif pairs "
            "using a reference FASTA and a modification pileup"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
 Examples:
   # 6mA on both strands of GATC
   memopair reference.fasta pileup.bed GATC_a_1_a_1

   # 4mC against 5mC on the opposite strand of CCWGG, several pairs at once
   memopair reference.fasta pileup.bed CCWGG_4mC_0_5mC_3 GANTC_6mA_1_6mA_1 \\
     --out results --min-cov 10 --threads 8 --batch-size 50
""",
    )

    parser.add_argument("reference", help="Path to the FASTA file with reference sequences.")
    parser.add_argument("pileup", help="Path to the pileup file with methylation data.")
    parser.add_argument(
        "motifs",
        nargs="+",
        help=(
            "Complement motif pairs in the format 'MOTIF_TYPE1_POS1_TYPE2_POS2', "
            "e.g. 'ACGT_a_0_m_3' or 'CCWGG_4mC_0_5mC_3'. POS2 is read on the opposite strand."
        ),
    )

    io_group = parser.add_argument_group("Input/Output Options")
    io_group.add_argument(
        "-o",
        "--out",
        default="motif_methylation_state",
        help="Output directory, one TSV per contig. Must not exist. (default: %(default)s)",
    )
    io_group.add_argument(
        "--min-cov",
        type=int,
        default=5,
        help="Minimum valid coverage required to consider a position. (default: %(default)s)",
    )

    technical_group = parser.add_argument_group("Technical Options")
    technical_group.add_argument(
        "-t",
        "--threads",
        type=int,
        default=5,
        help="Number of threads evaluating contigs of a batch. (default: %(default)s)",
    )
    technical_group.add_argument(
        "--batch-size",
        type=int,
        default=100,
        help="Number of contigs to load and process at once. (default: %(default)s)",
    )
    technical_group.add_argument(
        "--verbosity",
        choices=list(VERBOSITY_LEVELS),
        default="normal",
        help="Logging verbosity. (default: %(default)s)",
    )

    return parser


def validate_inputs(args) -> None:
    """Validate input files and parameters."""
    logger = logging.getLogger(__name__)
    if not os.path.exists(args.reference):
        logger.error(f"Reference file not found: {args.reference}")
        sys.exit(1)
    if not os.path.exists(args.pileup):
        logger.error(f"Pileup file not found: {args.pileup}")
        sys.exit(1)
    if os.path.exists(args.out):
        logger.error(f"Output directory already exists: {args.out}")
        sys.exit(1)
    if args.min_cov < 0:
        logger.error(f"--min-cov must be non-negative, got {args.min_cov}")
        sys.exit(1)
    if args.batch_size < 1:
        logger.error(f"--batch-size must be at least 1, got {args.batch_size}")
        sys.exit(1)
    if args.threads < 1:
        logger.error(f"--threads must be at least 1, got {args.threads}")
        sys.exit(1)


def main_cli():
    """Main CLI entry point."""
    parser = create_arg_parser()

    if len(sys.argv) == 1:
        parser.print_help(sys.stderr)
        sys.exit(1)

    args = parser.parse_args()

    setup_logging(args.verbosity)
    logger = logging.getLogger(__name__)

    validate_inputs(args)

    try:
        config = create_config(
            reference=args.reference,
            pileup=args.pileup,
            motif_pairs=args.motifs,
            output_dir=args.out,
            min_cov=args.min_cov,
            batch_size=args.batch_size,
            threads=args.threads,
        )
    except MotifError as e:
        logger.error(f"Invalid motif specification: {e}")
        sys.exit(1)

    logger.info("Running motif methylation state")
    logger.debug(f"Motif pairs: {', '.join(str(pair) for pair in config.motif_pairs)}")

    try:
        summary = run(config)
        print(json.dumps(summary))

    except Exception as e:
        logger.error(f"Pipeline execution failed: {e}")
        if args.verbosity == "verbose":
            import traceback

            traceback.print_exc()
        sys.exit(1)

    logger.info("Finished running motif methylation state")


if __name__ == "__main__":
    main_cli()
