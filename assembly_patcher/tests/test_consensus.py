#!/usr/bin/env python3

"""
Unit tests for consensus segmentation.

Covers breakpoint collection, the source-selection precedence (ROI over
misassembly over query), coalescing across blocks, contigs without
alignments and the overlapping-block policies.
"""

import os
import sys
import unittest

# Add the parent directory to the path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from assembly_patcher.core.alignments import AlignmentIndex
from assembly_patcher.core.consensus import ConsensusBuilder
from assembly_patcher.core.data_structures import AlignmentRecord, AnnotatedInterval, ContigType
from assembly_patcher.core.intervals import IntervalIndex

Q = ContigType.Query
T = ContigType.Target


def block(q_start, q_end, t_start, t_end, query="Q1", target="R1", strand="+", mapq=60):
    return AlignmentRecord(
        query_name=query, query_length=10000, query_start=q_start, query_end=q_end,
        strand=strand, target_name=target, target_length=10000,
        target_start=t_start, target_end=t_end, mapq=mapq
    )


def index(*intervals):
    return IntervalIndex.from_records([AnnotatedInterval(*iv) for iv in intervals])


def as_tuples(contig):
    return [(s.name, s.start, s.stop, s.category) for s in contig]


class TestSegmentation(unittest.TestCase):
    """Test the per-contig segmentation."""

    def builder(self, roi=(), ref_misasm=(), qry_misasm=(), policy='earliest'):
        return ConsensusBuilder(index(*roi), index(*ref_misasm), index(*qry_misasm),
                                overlap_policy=policy)

    def test_single_block_query_misassembly(self):
        """A query misassembly in one block is replaced by the reference."""
        builder = self.builder(qry_misasm=[("Q1", 400, 600, "misjoin")])
        contig = builder.build_contig("Q1", [block(0, 1000, 0, 1000)])

        self.assertEqual(as_tuples(contig), [
            ("Q1", 0, 400, Q),
            ("R1", 400, 600, T),
            ("Q1", 600, 1000, Q),
        ])

    def test_no_annotations_keeps_aligned_query_spans(self):
        builder = self.builder()
        contig = builder.build_contig("Q1", [block(0, 400, 1000, 1400),
                                             block(600, 900, 2000, 2300)])

        self.assertEqual(as_tuples(contig), [("Q1", 0, 400, Q), ("Q1", 600, 900, Q)])

    def test_abutting_blocks_coalesce(self):
        builder = self.builder()
        contig = builder.build_contig("Q1", [block(0, 400, 0, 400), block(400, 900, 5000, 5500)])
        self.assertEqual(as_tuples(contig), [("Q1", 0, 900, Q)])

    def test_translation_uses_block_offset(self):
        """Misassembly edges are shifted into reference coordinates."""
        builder = self.builder(qry_misasm=[("Q1", 300, 350)])
        contig = builder.build_contig("Q1", [block(100, 600, 5100, 5600)])

        self.assertEqual(as_tuples(contig), [
            ("Q1", 100, 300, Q),
            ("R1", 5300, 5350, T),
            ("Q1", 350, 600, Q),
        ])

    def test_roi_forces_reference(self):
        builder = self.builder(roi=[("R1", 5200, 5250)])
        contig = builder.build_contig("Q1", [block(100, 600, 5100, 5600)])

        self.assertEqual(as_tuples(contig), [
            ("Q1", 100, 200, Q),
            ("R1", 5200, 5250, T),
            ("Q1", 250, 600, Q),
        ])

    def test_roi_and_misassembly_overlap_yields_target(self):
        """ROI and misassembly together stay a single reference run."""
        builder = self.builder(roi=[("R1", 300, 500)], qry_misasm=[("Q1", 400, 700)])
        contig = builder.build_contig("Q1", [block(0, 1000, 0, 1000)])

        self.assertEqual(as_tuples(contig), [
            ("Q1", 0, 300, Q),
            ("R1", 300, 700, T),
            ("Q1", 700, 1000, Q),
        ])

    def test_annotations_clipped_to_block(self):
        builder = self.builder(roi=[("R1", 0, 150)], qry_misasm=[("Q1", 900, 5000)])
        contig = builder.build_contig("Q1", [block(0, 1000, 100, 1100)])

        self.assertEqual(as_tuples(contig), [
            ("R1", 100, 150, T),
            ("Q1", 50, 900, Q),
            ("R1", 1000, 1100, T),
        ])

    def test_roi_on_other_reference_contig_ignored(self):
        builder = self.builder(roi=[("R2", 0, 1000)])
        contig = builder.build_contig("Q1", [block(0, 1000, 0, 1000)])
        self.assertEqual(as_tuples(contig), [("Q1", 0, 1000, Q)])

    def test_adjacent_target_runs_coalesce(self):
        builder = self.builder(qry_misasm=[("Q1", 100, 200), ("Q1", 200, 300)])
        contig = builder.build_contig("Q1", [block(0, 1000, 0, 1000)])
        self.assertEqual(as_tuples(contig), [
            ("Q1", 0, 100, Q),
            ("R1", 100, 300, T),
            ("Q1", 300, 1000, Q),
        ])

    def test_untrusted_reference_segment_is_kept(self):
        builder = self.builder(ref_misasm=[("R1", 450, 500, "collapse")],
                               qry_misasm=[("Q1", 400, 600)])
        with self.assertLogs(level='WARNING'):
            contig = builder.build_contig("Q1", [block(0, 1000, 0, 1000)])

        self.assertIn(("R1", 400, 600, T), as_tuples(contig))
        self.assertEqual(builder.stats.untrusted_target_segments, 1)

    def test_no_consecutive_segments_share_category_within_block(self):
        builder = self.builder(roi=[("R1", 10, 20), ("R1", 30, 40)],
                               qry_misasm=[("Q1", 15, 35), ("Q1", 500, 510)])
        contig = builder.build_contig("Q1", [block(0, 1000, 0, 1000)])
        categories = [s.category for s in contig]
        for previous, current in zip(categories, categories[1:]):
            self.assertNotEqual(previous, current)
        for segment in contig:
            self.assertLess(segment.start, segment.stop)

    def test_misassembly_at_end_of_longer_query_block(self):
        """A misassembly reaching the block end maps onto the reference block end."""
        builder = self.builder(qry_misasm=[("Q1", 950, 1000)])
        contig = builder.build_contig("Q1", [block(0, 1000, 0, 900)])

        self.assertEqual(as_tuples(contig), [
            ("Q1", 0, 850, Q),
            ("R1", 850, 900, T),
        ])
        self.assertEqual(builder.stats.misassemblies_unmapped, 0)

    def test_misassembly_past_reference_span_is_counted(self):
        builder = self.builder(qry_misasm=[("Q1", 920, 940)])
        with self.assertLogs(level='WARNING') as logs:
            contig = builder.build_contig("Q1", [block(0, 1000, 0, 900)])

        self.assertTrue(all(s.category == Q for s in contig))
        self.assertEqual(builder.stats.misassemblies_unmapped, 1)
        self.assertIn("Q1:920-940", logs.output[0])


class TestOverlappingBlocks(unittest.TestCase):
    """Test the explicit tie-break for blocks overlapping in query space."""

    def builder(self, policy):
        return ConsensusBuilder(index(), index(), index(), overlap_policy=policy)

    def test_earliest_trims_later_block(self):
        builder = self.builder('earliest')
        resolved = builder.resolve_overlaps([block(0, 600, 0, 600), block(400, 1000, 3400, 4000)])

        self.assertEqual([(b.query_start, b.query_end) for b in resolved], [(0, 600), (600, 1000)])
        self.assertEqual((resolved[1].target_start, resolved[1].target_end), (3600, 4000))
        self.assertEqual(builder.stats.blocks_trimmed, 1)

    def test_earliest_drops_contained_block(self):
        builder = self.builder('earliest')
        resolved = builder.resolve_overlaps([block(0, 1000, 0, 1000), block(200, 300, 5000, 5100)])
        self.assertEqual(len(resolved), 1)
        self.assertEqual(builder.stats.blocks_dropped, 1)

    def test_earliest_prefers_longer_block_on_tie(self):
        builder = self.builder('earliest')
        resolved = builder.resolve_overlaps([block(0, 300, 0, 300, target="R2"),
                                             block(0, 800, 0, 800, target="R1")])
        self.assertEqual([b.target_name for b in resolved], ["R1"])

    def test_longest_splits_shorter_block(self):
        builder = self.builder('longest')
        resolved = builder.resolve_overlaps([block(0, 1000, 0, 1000, target="R2"),
                                             block(300, 600, 300, 600, target="R1")])
        self.assertEqual([(b.target_name, b.query_start, b.query_end) for b in resolved],
                         [("R2", 0, 1000)])

        builder = self.builder('longest')
        resolved = builder.resolve_overlaps([block(0, 400, 0, 400, target="R2"),
                                             block(200, 1000, 1200, 2000, target="R1")])
        self.assertEqual([(b.target_name, b.query_start, b.query_end) for b in resolved],
                         [("R2", 0, 200), ("R1", 200, 1000)])
        self.assertEqual(resolved[0].target_end, 200)
        self.assertEqual(builder.stats.blocks_trimmed, 1)

    def test_disjoint_blocks_untouched(self):
        for policy in ('earliest', 'longest'):
            builder = self.builder(policy)
            resolved = builder.resolve_overlaps([block(0, 100, 0, 100), block(200, 300, 200, 300)])
            self.assertEqual([(b.query_start, b.query_end) for b in resolved], [(0, 100), (200, 300)])
            self.assertEqual(builder.stats.blocks_trimmed, 0)


class TestBuild(unittest.TestCase):
    """Test building every contig of an alignment index."""

    def test_unaligned_misassembled_contig_skipped(self):
        alignments = AlignmentIndex.from_records([block(0, 1000, 0, 1000)])
        builder = ConsensusBuilder(index(), index(), index(("Q9", 10, 20), ("Q1", 100, 200)))
        contigs = builder.build(alignments)

        self.assertEqual(list(contigs.keys()), ["Q1"])
        self.assertEqual(builder.stats.unaligned_misassembled, ["Q9"])

    def test_rejected_alignments_contribute_nothing(self):
        alignments = AlignmentIndex.from_records([
            block(0, 1000, 0, 1000, mapq=10),
            block(0, 1000, 0, 1000, strand="-"),
            block(0, 500, 0, 500, query="Q2"),
        ])
        builder = ConsensusBuilder(index(), index(), index(("Q1", 100, 200)))
        contigs = builder.build(alignments)

        self.assertNotIn("Q1", contigs)
        self.assertEqual(as_tuples(contigs["Q2"]), [("Q2", 0, 500, Q)])

    def test_contig_order_follows_alignment_input(self):
        alignments = AlignmentIndex.from_records([
            block(0, 10, 0, 10, query="Qb"),
            block(0, 10, 0, 10, query="Qa"),
        ])
        builder = ConsensusBuilder(index(), index(), index())
        self.assertEqual(list(builder.build(alignments).keys()), ["Qb", "Qa"])
        self.assertEqual(builder.stats.contigs_built, 2)


if __name__ == '__main__':
    unittest.main()
