#!/usr/bin/env python3

"""
Boundary normalization of consensus contigs.

The first segment of every contig is extended to position 0 and the last
one to the full length of its own source contig.
"""

import logging
from typing import Dict, Iterable, Mapping

from .data_structures import ConsensusContig, ContigType
from .exceptions import UnknownContigError


class BoundaryNormalizer:
    """Rewrite the outer endpoints of consensus contigs against true contig lengths."""

    def __init__(self, reference_lengths: Mapping[str, int], query_lengths: Mapping[str, int]):
        self.lengths: Dict[ContigType, Mapping[str, int]] = {
            ContigType.Target: reference_lengths,
            ContigType.Query: query_lengths,
        }

    def normalize(self, contigs: Iterable[ConsensusContig]) -> int:
        """Normalize contigs in place; returns how many were rewritten."""
        normalized = 0
        for contig in contigs:
            if contig.is_empty:
                logging.debug(f"Leaving empty consensus contig {contig.name} untouched")
                continue
            self.normalize_contig(contig)
            normalized += 1
        return normalized

    def normalize_contig(self, contig: ConsensusContig) -> None:
        first, last = contig.segments[0], contig.segments[-1]
        first.start = 0

        lengths = self.lengths[last.category]
        if last.name not in lengths:
            raise UnknownContigError(
                f"missing from {last.category.label} index "
                f"(referenced by consensus contig {contig.name})",
                contig=last.name,
                category=last.category.label,
            )
        last.stop = lengths[last.name]
