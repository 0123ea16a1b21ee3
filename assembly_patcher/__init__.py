#!/usr/bin/env python3

"""
Assembly Patcher

Patches a query genome assembly against a reference assembly using a
pairwise alignment between them. Query regions flagged as misassembled are
replaced by the aligned reference sequence, and reference regions of
interest are always taken from the reference.

Modules:
- core: data structures, parsers, interval/alignment indices, the
  consensus builder, boundary normalization and sequence output
- utils: performance monitoring
- tests: unit test suite
"""

__version__ = "1.0.0"
__author__ = "Assembly Patcher Team"

from .core.data_structures import (
    AlignmentRecord, AnnotatedInterval, ContigType, ContigSegment, ConsensusContig
)
from .core.exceptions import (
    PatcherError, ParseError, UnknownContigError, SequenceError,
    OutputError, ConfigurationError, MemoryError
)
from .core.config import PatcherConfig, load_config
from .core.pipeline import AssemblyPatchingPipeline, PatchSummary

__all__ = [
    # Main pipeline
    'AssemblyPatchingPipeline', 'PatchSummary',
    # Data structures
    'AlignmentRecord', 'AnnotatedInterval', 'ContigType', 'ContigSegment', 'ConsensusContig',
    # Exceptions
    'PatcherError', 'ParseError', 'UnknownContigError', 'SequenceError',
    'OutputError', 'ConfigurationError', 'MemoryError',
    # Configuration
    'PatcherConfig', 'load_config'
]
