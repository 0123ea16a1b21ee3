#!/usr/bin/env python3

"""
Consensus segmentation of query contigs against the reference.

Each accepted alignment block is cut at the edges of the reference ROI and
of the query misassemblies translated onto the reference. Every resulting
sub-range is then assigned a source:

1. overlaps a reference ROI         -> Target (reference kept)
2. overlaps a query misassembly     -> Target (reference substituted)
3. otherwise                        -> Query  (query kept)

Blocks are linear 1:1 maps, so translation is a constant offset per block.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from intervaltree import IntervalTree

from .alignments import AlignmentIndex
from .data_structures import AlignmentRecord, ConsensusContig, ContigSegment, ContigType
from .intervals import IntervalIndex

Span = Tuple[int, int]


@dataclass
class BuildStats:
    """Counters collected while building consensus contigs."""
    contigs_built: int = 0
    empty_contigs: List[str] = field(default_factory=list)
    unaligned_misassembled: List[str] = field(default_factory=list)
    blocks_used: int = 0
    blocks_trimmed: int = 0
    blocks_dropped: int = 0
    untrusted_target_segments: int = 0
    misassemblies_unmapped: int = 0


class ConsensusBuilder:
    """Build ConsensusContig segmentations from alignments and annotations."""

    def __init__(self, roi_index: IntervalIndex, ref_misasm_index: IntervalIndex,
                 qry_misasm_index: IntervalIndex, overlap_policy: str = 'earliest'):
        self.roi_index = roi_index
        self.ref_misasm_index = ref_misasm_index
        self.qry_misasm_index = qry_misasm_index
        self.overlap_policy = overlap_policy
        self.stats = BuildStats()

    def build(self, alignment_index: AlignmentIndex) -> Dict[str, ConsensusContig]:
        """Build every query contig with at least one accepted block, in index order."""
        for contig in self.qry_misasm_index.contigs:
            if contig not in alignment_index:
                logging.info(f"Misassembled query contig {contig} has no accepted alignment; skipping")
                self.stats.unaligned_misassembled.append(contig)

        consensus: Dict[str, ConsensusContig] = OrderedDict()
        for name in alignment_index.contigs:
            contig = self.build_contig(name, alignment_index.blocks_for(name))
            if contig.is_empty:
                logging.warning(f"Query contig {name} produced no segments; excluded from output")
                self.stats.empty_contigs.append(name)
                continue
            consensus[name] = contig
            self.stats.contigs_built += 1

        logging.info(f"Built {self.stats.contigs_built} consensus contigs from "
                     f"{self.stats.blocks_used} alignment blocks")
        return consensus

    def build_contig(self, name: str, blocks: Sequence[AlignmentRecord]) -> ConsensusContig:
        """Segment one query contig; blocks must be sorted by query start."""
        contig = ConsensusContig(name=name)
        for block in self.resolve_overlaps(blocks):
            contig.extend(self.segment_block(name, block))
            self.stats.blocks_used += 1

        logging.debug(f"{name}: " + ", ".join(
            f"({s.name}, {s.start}, {s.stop}, {s.category.label})" for s in contig
        ))
        return contig

    def resolve_overlaps(self, blocks: Sequence[AlignmentRecord]) -> List[AlignmentRecord]:
        """Make blocks disjoint in query space according to the overlap policy."""
        if self.overlap_policy == 'longest':
            resolved = self._resolve_longest_first(blocks)
        else:
            resolved = self._resolve_earliest_first(blocks)
        return sorted(resolved, key=lambda b: b.query_start)

    def _resolve_earliest_first(self, blocks: Sequence[AlignmentRecord]) -> List[AlignmentRecord]:
        resolved = []
        covered_end = None
        for block in sorted(blocks, key=lambda b: (b.query_start, -b.query_end)):
            if covered_end is not None and block.query_end <= covered_end:
                logging.debug(f"Dropping block {block.query_name}:{block.query_start}-{block.query_end} "
                              f"contained in earlier alignment")
                self.stats.blocks_dropped += 1
                continue
            if covered_end is not None and block.query_start < covered_end:
                block = block.clipped(covered_end, block.query_end)
                self.stats.blocks_trimmed += 1
            resolved.append(block)
            covered_end = block.query_end
        return resolved

    def _resolve_longest_first(self, blocks: Sequence[AlignmentRecord]) -> List[AlignmentRecord]:
        resolved = []
        claimed = IntervalTree()
        for block in sorted(blocks, key=lambda b: (-b.query_span, b.query_start)):
            if block.query_start >= block.query_end:
                continue
            remaining = IntervalTree.from_tuples([(block.query_start, block.query_end)])
            for iv in claimed.overlap(block.query_start, block.query_end):
                remaining.chop(iv.begin, iv.end)

            if not remaining:
                self.stats.blocks_dropped += 1
                continue
            if len(remaining) > 1 or remaining.span() != block.query_span:
                self.stats.blocks_trimmed += 1

            for piece in sorted(remaining, key=lambda iv: iv.begin):
                resolved.append(block.clipped(piece.begin, piece.end))
            claimed.addi(block.query_start, block.query_end)
        return resolved

    def segment_block(self, name: str, block: AlignmentRecord) -> List[ContigSegment]:
        """Cut one block at annotation breakpoints and assign each sub-range a source."""
        t_start, t_end = block.target_start, block.target_end
        if t_start >= t_end or block.query_start >= block.query_end:
            return []

        misassemblies = self._translated_misassemblies(name, block)
        rois = [
            (max(iv.start, t_start), min(iv.end, t_end))
            for iv in self.roi_index.overlap(block.target_name, t_start, t_end)
        ]

        breakpoints = {t_start, t_end}
        for start, end in misassemblies + rois:
            breakpoints.update((start, end))
        breakpoints = sorted(breakpoints)

        segments = []
        for start, stop in zip(breakpoints, breakpoints[1:]):
            if self._overlaps_any(rois, start, stop) or self._overlaps_any(misassemblies, start, stop):
                segments.append(self._target_segment(block, start, stop))
            else:
                segments.append(ContigSegment(
                    name=name,
                    start=self._to_query(block, start),
                    stop=self._to_query(block, stop),
                    category=ContigType.Query,
                ))
        return [seg for seg in segments if seg.is_valid]

    def _translated_misassemblies(self, name: str, block: AlignmentRecord) -> List[Span]:
        """Query misassemblies inside the block, in reference coordinates."""
        spans = []
        for iv in self.qry_misasm_index.overlap(name, block.query_start, block.query_end):
            q_start = max(iv.start, block.query_start)
            q_end = min(iv.end, block.query_end)
            t_start = block.query_to_target(q_start)
            if q_end == block.query_end:
                # Anchored on the block end, as in clipped().
                t_start = min(t_start, block.target_end - (block.query_end - q_start))
                t_end = block.target_end
            else:
                t_end = block.query_to_target(q_end)
            t_start = self._clamp(t_start, block.target_start, block.target_end)
            t_end = self._clamp(t_end, block.target_start, block.target_end)
            if t_start < t_end:
                spans.append((t_start, t_end))
            else:
                logging.warning(f"Query misassembly {name}:{iv.start}-{iv.end} has no reference "
                                f"counterpart in block {block.target_name}:"
                                f"{block.target_start}-{block.target_end}; left unpatched")
                self.stats.misassemblies_unmapped += 1
        return spans

    def _target_segment(self, block: AlignmentRecord, start: int, stop: int) -> ContigSegment:
        # No third assembly to fall back on.
        untrusted = self.ref_misasm_index.overlap(block.target_name, start, stop)
        if untrusted:
            labels = ", ".join(sorted(iv.label or "-" for iv in untrusted))
            logging.warning(f"Reference segment {block.target_name}:{start}-{stop} overlaps "
                            f"reference misassembly ({labels})")
            self.stats.untrusted_target_segments += 1
        return ContigSegment(name=block.target_name, start=start, stop=stop,
                             category=ContigType.Target)

    @staticmethod
    def _to_query(block: AlignmentRecord, position: int) -> int:
        if position >= block.target_end:
            return block.query_end
        return min(block.target_to_query(position), block.query_end)

    @staticmethod
    def _overlaps_any(spans: List[Span], start: int, stop: int) -> bool:
        return any(s < stop and start < e for s, e in spans)

    @staticmethod
    def _clamp(value: int, low: int, high: int) -> int:
        return max(low, min(value, high))
