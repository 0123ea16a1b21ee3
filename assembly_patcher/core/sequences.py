#!/usr/bin/env python3

"""
Indexed FASTA access and consensus sequence materialization.

Both assemblies are opened through pyfaidx, which reads plain and
BGZF-compressed FASTA alike and writes a missing .fai index on first use.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, TextIO

from pyfaidx import Fasta, FastaIndexingError, FetchError

from .data_structures import ConsensusContig, ContigSegment, ContigType
from .exceptions import OutputError, SequenceError

COMPRESSED_SUFFIXES = ('.gz', '.bgz')


class FastaReaderHandle:
    """
    Random-access reader over one assembly.

    Usage:
        with FastaReaderHandle("reference.fa.gz") as ref:
            seq = ref.fetch("chr1", 1000, 2000)
            length = ref.lengths["chr1"]
    """

    def __init__(self, fasta_file: str):
        self.fasta_file = Path(fasta_file)
        if not self.fasta_file.exists():
            raise SequenceError(f"Assembly file not found: {fasta_file}")

        self.is_compressed = self.fasta_file.suffix.lower() in COMPRESSED_SUFFIXES
        index_file = Path(f"{self.fasta_file}.fai")
        if index_file.exists():
            logging.debug(f"Existing fai index found for {self.fasta_file}")
        else:
            logging.debug(f"No existing faidx for {self.fasta_file}. Generating...")

        try:
            self._fasta = Fasta(str(self.fasta_file), as_raw=True, sequence_always_upper=False)
        except (FastaIndexingError, OSError, ValueError) as e:
            raise SequenceError(f"Failed to index {self.fasta_file}: {e}")

        self.lengths: Dict[str, int] = {name: len(self._fasta[name]) for name in self._fasta.keys()}
        logging.info(f"Indexed {len(self.lengths)} contigs from {self.fasta_file}"
                     f"{' (bgzip)' if self.is_compressed else ''}")

    def fetch(self, contig: str, start: int, stop: int) -> str:
        """Return the bases in [start, stop) of contig."""
        if contig not in self.lengths:
            raise SequenceError(f"Contig not found in {self.fasta_file}", contig)

        length = self.lengths[contig]
        if start < 0 or stop > length or start >= stop:
            raise SequenceError(
                f"Coordinates out of range (contig length {length})",
                contig, f"{start}-{stop}"
            )

        try:
            return str(self._fasta[contig][start:stop])
        except (FetchError, OSError, ValueError) as e:
            raise SequenceError(f"Failed to fetch sequence: {e}", contig, f"{start}-{stop}")

    def close(self) -> None:
        self._fasta.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class AssemblySources:
    """The reference and query readers, selected by segment category."""

    def __init__(self, reference: FastaReaderHandle, query: FastaReaderHandle):
        self.reference = reference
        self.query = query

    def source_for(self, category: ContigType) -> FastaReaderHandle:
        return self.reference if category == ContigType.Target else self.query

    def fetch(self, segment: ContigSegment) -> str:
        return self.source_for(segment.category).fetch(segment.name, segment.start, segment.stop)


@dataclass
class MaterializeStats:
    """Counts of what was written."""
    contigs_written: int = 0
    segments_written: int = 0
    segments_skipped: int = 0
    target_bases: int = 0
    query_bases: int = 0

    @property
    def total_bases(self) -> int:
        return self.target_bases + self.query_bases


class SequenceMaterializer:
    """Write consensus contigs as FASTA, with an optional provenance BED."""

    def __init__(self, sources: AssemblySources):
        self.sources = sources
        self.stats = MaterializeStats()

    def materialize(self, contig: ConsensusContig,
                    bed_handle: Optional[TextIO] = None) -> str:
        """Concatenate the bases of every valid segment of contig."""
        pieces = []
        for segment in contig:
            if not segment.is_valid:
                self.stats.segments_skipped += 1
                continue

            sequence = self.sources.fetch(segment)
            pieces.append(sequence)
            self.stats.segments_written += 1
            if segment.category == ContigType.Target:
                self.stats.target_bases += len(sequence)
            else:
                self.stats.query_bases += len(sequence)

            if bed_handle is not None:
                self._write(bed_handle, segment.to_bed_line(contig.name) + "\n")
        return "".join(pieces)

    def write(self, contigs: Iterable[ConsensusContig], fasta_handle: TextIO,
              bed_handle: Optional[TextIO] = None) -> MaterializeStats:
        """Write one FASTA record per non-empty contig."""
        for contig in contigs:
            if contig.is_empty:
                continue
            sequence = self.materialize(contig, bed_handle)
            self._write(fasta_handle, f">{contig.name}\n{sequence}\n\n")
            self.stats.contigs_written += 1
            logging.debug(f"Wrote {contig.name} ({len(sequence):,} bp, {len(contig)} segments)")
        return self.stats

    @staticmethod
    def _write(handle: TextIO, text: str) -> None:
        try:
            handle.write(text)
        except OSError as e:
            raise OutputError(f"Failed to write output: {e}", getattr(handle, 'name', ''))
