#!/usr/bin/env python3

"""
Main pipeline class for assembly patching.

Runs the phases in order: load annotations, index alignments, build the
consensus segmentation, normalize contig boundaries and write sequences.
"""

import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, TextIO

from .alignments import AlignmentIndex
from .boundaries import BoundaryNormalizer
from .config import PatcherConfig
from .consensus import BuildStats, ConsensusBuilder
from .data_structures import ConsensusContig
from .exceptions import OutputError
from .intervals import IntervalIndex
from .sequences import AssemblySources, FastaReaderHandle, MaterializeStats, SequenceMaterializer
from ..utils.performance_monitor import PerformanceMonitor


@dataclass
class PatchSummary:
    """Outcome of a patching run."""
    build: BuildStats = field(default_factory=BuildStats)
    output: MaterializeStats = field(default_factory=MaterializeStats)
    rejected_contigs: List[str] = field(default_factory=list)

    def log(self) -> None:
        logging.info(f"Consensus contigs written: {self.output.contigs_written:,}")
        logging.info(f"Segments written: {self.output.segments_written:,} "
                     f"(skipped {self.output.segments_skipped:,} empty)")
        if self.output.total_bases:
            share = self.output.target_bases / self.output.total_bases * 100
            logging.info(f"Bases from reference: {self.output.target_bases:,} ({share:.1f}%)")
        logging.info(f"Bases from query: {self.output.query_bases:,}")
        if self.rejected_contigs:
            logging.info(f"Query contigs without accepted alignment: {len(self.rejected_contigs):,}")
        if self.build.unaligned_misassembled:
            logging.info(f"Misassembled query contigs left unpatched: "
                         f"{', '.join(self.build.unaligned_misassembled)}")
        if self.build.blocks_trimmed or self.build.blocks_dropped:
            logging.info(f"Overlapping alignment blocks: {self.build.blocks_trimmed} trimmed, "
                         f"{self.build.blocks_dropped} dropped")
        if self.build.misassemblies_unmapped:
            logging.warning(f"{self.build.misassemblies_unmapped} query misassemblies had no "
                            f"reference counterpart and were left unpatched")
        if self.build.untrusted_target_segments:
            logging.warning(f"{self.build.untrusted_target_segments} reference segments overlap "
                            f"reference misassemblies")


@contextmanager
def open_output(path: Optional[str]) -> Iterator[Optional[TextIO]]:
    """Open an output file for writing; '-' means standard output."""
    if path is None:
        yield None
        return
    if path == '-':
        try:
            yield sys.stdout
        finally:
            sys.stdout.flush()
        return
    try:
        handle = open(path, 'w')
    except OSError as e:
        raise OutputError(f"Cannot create file: {e}", path)
    with handle:
        yield handle


class AssemblyPatchingPipeline:
    """Coordinates all phases of a patching run."""

    def __init__(self, config: PatcherConfig):
        self.config = config
        self.monitor = PerformanceMonitor(
            memory_limit_mb=config.memory_limit_mb,
            enabled=config.enable_memory_monitoring
        )
        self.summary = PatchSummary()

        self.roi_index: Optional[IntervalIndex] = None
        self.ref_misasm_index: Optional[IntervalIndex] = None
        self.qry_misasm_index: Optional[IntervalIndex] = None
        self.alignment_index: Optional[AlignmentIndex] = None
        self.contigs: Dict[str, ConsensusContig] = {}

    def run(self, paf_file: str, ref_misasm_bed: str, qry_misasm_bed: str,
            ref_fasta: str, query_fasta: str, output_fasta: Optional[str] = None,
            output_bed: Optional[str] = None, ref_roi_bed: Optional[str] = None) -> PatchSummary:
        """
        Run the complete patching pipeline.

        Args:
            paf_file: Query-to-reference alignment (PAF)
            ref_misasm_bed: Reference misassemblies (BED)
            qry_misasm_bed: Query misassemblies (BED)
            ref_fasta: Reference assembly (FASTA, optionally bgzipped)
            query_fasta: Query assembly (FASTA, optionally bgzipped)
            output_fasta: Output FASTA path; None or '-' writes to stdout
            output_bed: Optional provenance BED path
            ref_roi_bed: Optional reference regions of interest (BED)

        Returns:
            PatchSummary of the run

        Raises:
            PatcherError: on any fatal error; partial output is not removed
        """
        if self.config.debug_mode:
            logging.getLogger().setLevel(logging.DEBUG)

        logging.info("Starting assembly patching")
        logging.info(f"Configuration: {self.config}")

        self._load_annotations(ref_roi_bed, ref_misasm_bed, qry_misasm_bed)
        self._index_alignments(paf_file)
        self._build_consensus()

        with FastaReaderHandle(ref_fasta) as reference, FastaReaderHandle(query_fasta) as query:
            self._normalize_boundaries(reference, query)
            self._write_outputs(AssemblySources(reference, query), output_fasta, output_bed)

        logging.info("Patching completed successfully")
        self.summary.log()
        self.monitor.log_performance_report()
        return self.summary

    def _load_annotations(self, ref_roi_bed: Optional[str], ref_misasm_bed: str,
                          qry_misasm_bed: str) -> None:
        with self.monitor.phase_context("annotation_loading") as metrics:
            self.roi_index = IntervalIndex.from_bed(
                ref_roi_bed, category="reference ROI", keep_label=False
            )
            self.ref_misasm_index = IntervalIndex.from_bed(
                ref_misasm_bed, category="reference misassembly"
            )
            self.qry_misasm_index = IntervalIndex.from_bed(
                qry_misasm_bed, category="query misassembly"
            )
            metrics.operations_count = (len(self.roi_index) + len(self.ref_misasm_index)
                                        + len(self.qry_misasm_index))

    def _index_alignments(self, paf_file: str) -> None:
        with self.monitor.phase_context("alignment_indexing") as metrics:
            self.alignment_index = AlignmentIndex.from_paf(paf_file)
            self.summary.rejected_contigs = list(self.alignment_index.rejected_contigs)
            metrics.operations_count = self.alignment_index.block_count

    def _build_consensus(self) -> None:
        with self.monitor.phase_context("consensus_building") as metrics:
            builder = ConsensusBuilder(
                self.roi_index,
                self.ref_misasm_index,
                self.qry_misasm_index,
                overlap_policy=self.config.overlap_policy
            )
            self.contigs = builder.build(self.alignment_index)
            self.summary.build = builder.stats
            metrics.operations_count = len(self.contigs)
            self.monitor.check_memory_limit()

    def _normalize_boundaries(self, reference: FastaReaderHandle, query: FastaReaderHandle) -> None:
        with self.monitor.phase_context("boundary_normalization") as metrics:
            normalizer = BoundaryNormalizer(reference.lengths, query.lengths)
            metrics.operations_count = normalizer.normalize(self.contigs.values())

    def _write_outputs(self, sources: AssemblySources, output_fasta: Optional[str],
                       output_bed: Optional[str]) -> None:
        with self.monitor.phase_context("sequence_output") as metrics:
            materializer = SequenceMaterializer(sources)
            contigs = [c for c in self.contigs.values() if not c.is_empty]

            with open_output(output_fasta or '-') as fasta_handle, \
                    open_output(output_bed) as bed_handle:
                for start in range(0, len(contigs), self.config.batch_size):
                    materializer.write(contigs[start:start + self.config.batch_size],
                                       fasta_handle, bed_handle)
                    self.monitor.check_memory_limit()

            self.summary.output = materializer.stats
            metrics.operations_count = materializer.stats.segments_written

            if output_fasta and output_fasta != '-':
                logging.info(f"Created: {output_fasta}")
            if output_bed:
                logging.info(f"Created: {output_bed}")
