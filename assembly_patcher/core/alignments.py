#!/usr/bin/env python3

"""
Alignment index: accepted PAF blocks grouped by query contig.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from .data_structures import AlignmentRecord
from .parsers import PafParser

MAX_MAPQ = 60
ACCEPTED_STRAND = '+'


class AlignmentIndex:
    """Accepted alignment blocks per query contig, sorted by query start."""

    def __init__(self, blocks: Dict[str, Tuple[AlignmentRecord, ...]],
                 rejected_contigs: List[str], rejected_records: int = 0):
        self._blocks = blocks
        self.rejected_contigs = rejected_contigs
        self.rejected_records = rejected_records

    @classmethod
    def from_records(cls, records: Iterable[AlignmentRecord]) -> 'AlignmentIndex':
        """
        Keep forward-strand records of maximum mapping quality only.

        MAPQ 255 (quality unavailable) is rejected like any other value.
        """
        grouped: Dict[str, List[AlignmentRecord]] = defaultdict(list)
        seen: Dict[str, None] = {}
        rejected_records = 0

        for record in records:
            seen.setdefault(record.query_name, None)
            if record.strand != ACCEPTED_STRAND or record.mapq != MAX_MAPQ:
                rejected_records += 1
                continue
            grouped[record.query_name].append(record)

        blocks = {
            name: tuple(sorted(grouped[name], key=lambda r: (r.query_start, -r.query_end)))
            for name in seen if name in grouped
        }
        rejected_contigs = [name for name in seen if name not in grouped]

        for name in rejected_contigs:
            logging.info(f"No accepted alignment for query contig {name}; excluded from consensus")
        logging.info(f"Accepted alignments for {len(blocks)} query contigs "
                     f"({rejected_records} records rejected by strand/MAPQ filter)")

        return cls(blocks, rejected_contigs, rejected_records)

    @classmethod
    def from_paf(cls, paf_path: str) -> 'AlignmentIndex':
        return cls.from_records(PafParser(paf_path).parse())

    def blocks_for(self, query_contig: str) -> Tuple[AlignmentRecord, ...]:
        return self._blocks.get(query_contig, ())

    @property
    def contigs(self) -> List[str]:
        """Indexed query contigs in first-seen input order."""
        return list(self._blocks.keys())

    def __contains__(self, query_contig: str) -> bool:
        return query_contig in self._blocks

    def __len__(self) -> int:
        return len(self._blocks)

    @property
    def block_count(self) -> int:
        return sum(len(blocks) for blocks in self._blocks.values())
