#!/usr/bin/env python3

"""
Core module for the assembly patcher.

Contains data structures, exception types, configuration, input parsers,
the interval and alignment indices, and the consensus pipeline stages.
"""

from .data_structures import (
    AlignmentRecord, AnnotatedInterval, ContigType, ContigSegment, ConsensusContig
)
from .exceptions import (
    PatcherError, ParseError, UnknownContigError, SequenceError,
    OutputError, ConfigurationError, MemoryError
)
from .config import PatcherConfig, load_config
from .intervals import IntervalIndex
from .alignments import AlignmentIndex
from .consensus import ConsensusBuilder
from .boundaries import BoundaryNormalizer

__all__ = [
    'AlignmentRecord', 'AnnotatedInterval', 'ContigType', 'ContigSegment', 'ConsensusContig',
    'PatcherError', 'ParseError', 'UnknownContigError', 'SequenceError',
    'OutputError', 'ConfigurationError', 'MemoryError',
    'PatcherConfig', 'load_config',
    'IntervalIndex', 'AlignmentIndex', 'ConsensusBuilder', 'BoundaryNormalizer'
]
