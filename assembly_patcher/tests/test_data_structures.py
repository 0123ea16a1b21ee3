#!/usr/bin/env python3

"""
Unit tests for core data structures.

Tests alignment coordinate translation, interval validation and segment
coalescing.
"""

import unittest
import sys
import os

# Add the parent directory to the path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from assembly_patcher.core.data_structures import (
    AlignmentRecord, AnnotatedInterval, ContigType, ContigSegment, ConsensusContig
)


def make_block(q_start=0, q_end=1000, t_start=0, t_end=1000, strand="+", mapq=60,
               query="Q1", target="R1"):
    return AlignmentRecord(
        query_name=query, query_length=max(q_end, 1000), query_start=q_start, query_end=q_end,
        strand=strand, target_name=target, target_length=max(t_end, 1000),
        target_start=t_start, target_end=t_end,
        matches=q_end - q_start, block_length=q_end - q_start, mapq=mapq
    )


class TestAlignmentRecord(unittest.TestCase):
    """Test the AlignmentRecord data structure."""

    def test_coordinate_translation(self):
        """Positions translate through the block's constant offset."""
        block = make_block(q_start=100, q_end=600, t_start=2100, t_end=2600)
        self.assertEqual(block.query_to_target(100), 2100)
        self.assertEqual(block.query_to_target(350), 2350)
        self.assertEqual(block.target_to_query(2600), 600)
        self.assertEqual(block.query_span, 500)
        self.assertEqual(block.target_span, 500)

    def test_invalid_coordinates(self):
        with self.assertRaises(ValueError):
            make_block(q_start=500, q_end=100)
        with self.assertRaises(ValueError):
            make_block(t_start=500, t_end=100)

    def test_invalid_strand(self):
        with self.assertRaises(ValueError):
            make_block(strand="x")

    def test_clipped_keeps_offsets(self):
        block = make_block(q_start=100, q_end=600, t_start=2100, t_end=2600)
        clipped = block.clipped(300, 500)
        self.assertEqual((clipped.query_start, clipped.query_end), (300, 500))
        self.assertEqual((clipped.target_start, clipped.target_end), (2300, 2500))
        self.assertEqual(clipped.mapq, block.mapq)

    def test_clipped_outside_block(self):
        block = make_block(q_start=100, q_end=600)
        with self.assertRaises(ValueError):
            block.clipped(50, 200)


class TestAnnotatedInterval(unittest.TestCase):
    """Test the AnnotatedInterval data structure."""

    def test_valid_interval(self):
        interval = AnnotatedInterval("chr1", 100, 200, "collapse")
        self.assertEqual(interval.length, 100)
        self.assertEqual(interval.label, "collapse")

    def test_empty_or_inverted_interval(self):
        with self.assertRaises(ValueError):
            AnnotatedInterval("chr1", 100, 100)
        with self.assertRaises(ValueError):
            AnnotatedInterval("chr1", 200, 100)

    def test_half_open_overlap(self):
        interval = AnnotatedInterval("chr1", 100, 200)
        self.assertTrue(interval.overlaps(150, 160))
        self.assertTrue(interval.overlaps(199, 300))
        self.assertFalse(interval.overlaps(200, 300))
        self.assertFalse(interval.overlaps(0, 100))


class TestConsensusContig(unittest.TestCase):
    """Test segment coalescing in ConsensusContig."""

    def test_contiguous_same_source_segments_merge(self):
        contig = ConsensusContig(name="Q1")
        contig.append(ContigSegment("Q1", 0, 400, ContigType.Query))
        contig.append(ContigSegment("Q1", 400, 600, ContigType.Query))
        self.assertEqual(len(contig), 1)
        self.assertEqual(contig.segments[0].stop, 600)

    def test_different_categories_do_not_merge(self):
        contig = ConsensusContig(name="Q1")
        contig.extend([
            ContigSegment("Q1", 0, 400, ContigType.Query),
            ContigSegment("R1", 400, 600, ContigType.Target),
            ContigSegment("Q1", 600, 1000, ContigType.Query),
        ])
        self.assertEqual(len(contig), 3)
        self.assertEqual([seg.category for seg in contig],
                         [ContigType.Query, ContigType.Target, ContigType.Query])

    def test_gapped_segments_do_not_merge(self):
        contig = ConsensusContig(name="Q1")
        contig.append(ContigSegment("Q1", 0, 400, ContigType.Query))
        contig.append(ContigSegment("Q1", 500, 600, ContigType.Query))
        self.assertEqual(len(contig), 2)

    def test_invalid_segments_dropped(self):
        contig = ConsensusContig(name="Q1")
        contig.append(ContigSegment("Q1", 400, 400, ContigType.Query))
        contig.append(ContigSegment("Q1", 500, 450, ContigType.Query))
        self.assertTrue(contig.is_empty)

    def test_bed_line(self):
        segment = ContigSegment("R1", 400, 600, ContigType.Target)
        self.assertEqual(segment.to_bed_line("Q1"), "R1\t400\t600\tTarget\tQ1")

    def test_empty_name_rejected(self):
        with self.assertRaises(ValueError):
            ConsensusContig(name="")


if __name__ == '__main__':
    unittest.main()
