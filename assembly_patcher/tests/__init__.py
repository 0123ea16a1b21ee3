#!/usr/bin/env python3

"""
Test suite for the assembly patcher.

Unit tests covering:
- Core data structures and configuration
- PAF and BED parsing, including skipped malformed records
- Interval and alignment indices
- Consensus segmentation and its source-selection policy
- Boundary normalization and sequence output
- End-to-end pipeline runs on small FASTA fixtures
"""
