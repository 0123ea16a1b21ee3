#!/usr/bin/env python3

"""
Per-contig interval trees over BED annotations.

One IntervalIndex is built per annotation category (reference ROI,
reference misassembly, query misassembly) and is only ever queried after
construction.
"""

import logging
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List, Optional

from intervaltree import IntervalTree

from .data_structures import AnnotatedInterval
from .parsers import BedParser


class IntervalIndex:
    """Read-only overlap queries over annotated intervals, keyed by contig."""

    def __init__(self, trees: Dict[str, IntervalTree], category: str = ""):
        self._trees = trees
        self.category = category

    @classmethod
    def from_records(cls, records: Iterable[AnnotatedInterval],
                     category: str = "") -> 'IntervalIndex':
        """Build one tree per contig from annotated intervals."""
        by_contig: Dict[str, List[AnnotatedInterval]] = defaultdict(list)
        for record in records:
            by_contig[record.contig].append(record)

        trees = {
            contig: IntervalTree.from_tuples((r.start, r.end, r) for r in intervals)
            for contig, intervals in by_contig.items()
        }
        return cls(trees, category)

    @classmethod
    def from_bed(cls, bed_path: Optional[str], category: str = "",
                 keep_label: bool = True) -> 'IntervalIndex':
        """Build an index from a BED file; a missing path yields an empty index."""
        if not bed_path:
            logging.info(f"No {category or 'interval'} BED provided")
            return cls({}, category)

        logging.info(f"Loading {category or 'interval'} BED: {bed_path}")
        parser = BedParser(bed_path, keep_label=keep_label)
        index = cls.from_records(parser, category)

        if parser.skipped_lines:
            logging.warning(f"Skipped {parser.skipped_lines} malformed lines in {bed_path}")
        logging.info(f"Indexed {len(index)} intervals on {len(index.contigs)} contigs")
        logging.debug(f"{category or 'interval'} trees:\n{index}")
        return index

    def overlap(self, contig: str, start: int, end: int) -> FrozenSet[AnnotatedInterval]:
        """Return every interval on contig overlapping [start, end)."""
        tree = self._trees.get(contig)
        if tree is None or start >= end:
            return frozenset()
        return frozenset(iv.data for iv in tree.overlap(start, end))

    def intervals_for(self, contig: str) -> List[AnnotatedInterval]:
        """All intervals on a contig, sorted by start."""
        tree = self._trees.get(contig)
        if tree is None:
            return []
        return [iv.data for iv in sorted(tree, key=lambda iv: (iv.begin, iv.end))]

    def __contains__(self, contig: str) -> bool:
        return contig in self._trees

    def __len__(self) -> int:
        return sum(len(tree) for tree in self._trees.values())

    @property
    def contigs(self) -> List[str]:
        return list(self._trees.keys())

    def __str__(self) -> str:
        lines = []
        for contig in self._trees:
            rendered = ",".join(
                f"({iv.start}, {iv.end}, {iv.label!r})" for iv in self.intervals_for(contig)
            )
            lines.append(f"{contig}: [{rendered}]")
        return "\n".join(lines)
