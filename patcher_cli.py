#!/usr/bin/env python3

"""
Command-line interface for the assembly patcher.

Patches a query assembly with reference sequence over query misassemblies
and reference regions of interest, writing the consensus FASTA and an
optional provenance BED.
"""

import argparse
import sys
import os
import logging

from assembly_patcher.core.config import OVERLAP_POLICIES, load_config
from assembly_patcher.core.exceptions import PatcherError


def setup_logging(log_level: str = "INFO") -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr
    )


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="assembly-patcher",
        description="Patch a query assembly with reference sequence over misassembled regions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic usage, FASTA to stdout
  assembly-patcher -p qry_to_ref.paf --ref-misasm-bed ref_misasm.bed --qry-misasm-bed qry_misasm.bed -r ref.fa.gz -q qry.fa.gz > patched.fa

  # Preserve reference regions of interest and write provenance
  assembly-patcher -p qry_to_ref.paf --ref-roi-bed roi.bed --ref-misasm-bed ref_misasm.bed --qry-misasm-bed qry_misasm.bed -r ref.fa -q qry.fa -o patched.fa -b patched.bed
        """
    )

    # Required arguments
    parser.add_argument(
        '-p', '--paf',
        required=True,
        help='Query-to-reference alignment (PAF)'
    )
    parser.add_argument(
        '--ref-misasm-bed',
        required=True,
        help='Reference misassemblies (BED)'
    )
    parser.add_argument(
        '--qry-misasm-bed',
        required=True,
        help='Query misassemblies (BED)'
    )
    parser.add_argument(
        '-r', '--ref-fa',
        required=True,
        help='Reference assembly FASTA, plain or bgzipped'
    )
    parser.add_argument(
        '-q', '--query-fa',
        required=True,
        help='Query assembly FASTA, plain or bgzipped'
    )

    # Optional inputs and outputs
    parser.add_argument(
        '--ref-roi-bed',
        help='Reference regions of interest always taken from the reference (BED)'
    )
    parser.add_argument(
        '-o', '--output-fa',
        default='-',
        help="Output consensus FASTA (default: '-' for stdout)"
    )
    parser.add_argument(
        '-b', '--output-bed',
        help='Output provenance BED of the source of every segment'
    )

    parser.add_argument(
        '--config',
        help='Configuration file (JSON or YAML)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Logging level (default: INFO)'
    )

    # Advanced options
    parser.add_argument(
        '--overlap-policy',
        choices=list(OVERLAP_POLICIES),
        help='Which block keeps query bases when accepted alignments overlap (default: earliest)'
    )
    parser.add_argument(
        '--memory-limit',
        type=int,
        help='Memory limit in MB (default: 4096)'
    )
    parser.add_argument('--version', action='version', version='%(prog)s 1.0.0')

    return parser


def validate_input_files(args) -> None:
    """Validate that input files exist."""
    input_files = {
        'paf': args.paf,
        'ref-misasm-bed': args.ref_misasm_bed,
        'qry-misasm-bed': args.qry_misasm_bed,
        'ref-fa': args.ref_fa,
        'query-fa': args.query_fa,
    }
    if args.ref_roi_bed:
        input_files['ref-roi-bed'] = args.ref_roi_bed

    for file_type, file_path in input_files.items():
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"{file_type} file not found: {file_path}")


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        validate_input_files(args)

        config = load_config(config_path=args.config, use_env=True)

        # Override config with command line arguments
        if args.overlap_policy is not None:
            config.overlap_policy = args.overlap_policy
        if args.memory_limit is not None:
            config.memory_limit_mb = args.memory_limit
        if args.log_level == 'DEBUG':
            config.debug_mode = True

        # Re-validate after CLI overrides.
        config.validate()

        logger.info(f"Alignment: {args.paf}")
        logger.info(f"Reference: {args.ref_fa}")
        logger.info(f"Query: {args.query_fa}")
        logger.info(f"Reference ROI: {args.ref_roi_bed or 'none'}")
        logger.info(f"Reference misassemblies: {args.ref_misasm_bed}")
        logger.info(f"Query misassemblies: {args.qry_misasm_bed}")

        from assembly_patcher import AssemblyPatchingPipeline

        pipeline = AssemblyPatchingPipeline(config)
        pipeline.run(
            paf_file=args.paf,
            ref_misasm_bed=args.ref_misasm_bed,
            qry_misasm_bed=args.qry_misasm_bed,
            ref_fasta=args.ref_fa,
            query_fasta=args.query_fa,
            output_fasta=args.output_fa,
            output_bed=args.output_bed,
            ref_roi_bed=args.ref_roi_bed,
        )
        return 0

    except FileNotFoundError as e:
        logger.error(f"File error: {e}")
        return 1
    except PatcherError as e:
        logger.error(f"Patching error: {e}")
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        logger.debug("Full traceback:", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
