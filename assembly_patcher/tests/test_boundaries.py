#!/usr/bin/env python3

"""
Unit tests for boundary normalization.
"""

import os
import sys
import unittest

# Add the parent directory to the path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from assembly_patcher.core.boundaries import BoundaryNormalizer
from assembly_patcher.core.data_structures import ConsensusContig, ContigSegment, ContigType
from assembly_patcher.core.exceptions import UnknownContigError


class TestBoundaryNormalizer(unittest.TestCase):
    """Test endpoint extension against true contig lengths."""

    def setUp(self):
        self.normalizer = BoundaryNormalizer(
            reference_lengths={"R1": 1500},
            query_lengths={"Q1": 1200}
        )

    def test_extends_first_and_last_query_segments(self):
        contig = ConsensusContig("Q1", [
            ContigSegment("Q1", 50, 400, ContigType.Query),
            ContigSegment("R1", 400, 600, ContigType.Target),
            ContigSegment("Q1", 600, 1000, ContigType.Query),
        ])
        self.assertEqual(self.normalizer.normalize([contig]), 1)

        self.assertEqual(contig.segments[0].start, 0)
        self.assertEqual(contig.segments[-1].stop, 1200)
        self.assertEqual((contig.segments[1].start, contig.segments[1].stop), (400, 600))

    def test_last_target_segment_uses_reference_length(self):
        contig = ConsensusContig("Q1", [
            ContigSegment("Q1", 0, 400, ContigType.Query),
            ContigSegment("R1", 400, 1000, ContigType.Target),
        ])
        self.normalizer.normalize([contig])
        self.assertEqual(contig.segments[-1].stop, 1500)

    def test_single_segment_contig(self):
        contig = ConsensusContig("Q1", [ContigSegment("R1", 300, 700, ContigType.Target)])
        self.normalizer.normalize([contig])
        self.assertEqual((contig.segments[0].start, contig.segments[0].stop), (0, 1500))

    def test_unchanged_when_already_full_length(self):
        normalizer = BoundaryNormalizer({"R1": 1000}, {"Q1": 1000})
        contig = ConsensusContig("Q1", [
            ContigSegment("Q1", 0, 400, ContigType.Query),
            ContigSegment("R1", 400, 600, ContigType.Target),
            ContigSegment("Q1", 600, 1000, ContigType.Query),
        ])
        normalizer.normalize([contig])
        self.assertEqual([(s.start, s.stop) for s in contig], [(0, 400), (400, 600), (600, 1000)])

    def test_unknown_contig_is_fatal(self):
        contig = ConsensusContig("Q2", [ContigSegment("Q2", 0, 100, ContigType.Query)])
        with self.assertRaises(UnknownContigError) as ctx:
            self.normalizer.normalize([contig])
        self.assertEqual(ctx.exception.contig, "Q2")
        self.assertEqual(ctx.exception.category, "Query")

    def test_empty_contig_left_untouched(self):
        contig = ConsensusContig("Q3")
        self.assertEqual(self.normalizer.normalize([contig]), 0)
        self.assertTrue(contig.is_empty)


if __name__ == '__main__':
    unittest.main()
