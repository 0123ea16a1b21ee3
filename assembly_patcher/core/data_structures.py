#!/usr/bin/env python3

"""
Core data structures for the assembly patcher.

Defines alignment records, annotated intervals and the typed segments that
make up a consensus contig. All coordinates are 0-based half-open.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional


class ContigType(Enum):
    """Which assembly backs a segment."""
    Target = 'Target'  # reference
    Query = 'Query'

    @property
    def label(self) -> str:
        """Provenance label written to the BED output."""
        return self.value


@dataclass(frozen=True)
class AlignmentRecord:
    """One PAF alignment block between a query and a reference contig."""
    query_name: str
    query_length: int
    query_start: int
    query_end: int
    strand: str
    target_name: str
    target_length: int
    target_start: int
    target_end: int
    matches: int = 0
    block_length: int = 0
    mapq: int = 0

    def __post_init__(self):
        """Validate alignment coordinates after initialization."""
        if self.query_start > self.query_end:
            raise ValueError(f"Invalid query coordinates: {self.query_start}-{self.query_end}")
        if self.target_start > self.target_end:
            raise ValueError(f"Invalid target coordinates: {self.target_start}-{self.target_end}")
        if self.strand not in ('+', '-'):
            raise ValueError(f"Invalid strand: {self.strand}")

    @property
    def query_span(self) -> int:
        return self.query_end - self.query_start

    @property
    def target_span(self) -> int:
        return self.target_end - self.target_start

    def query_to_target(self, position: int) -> int:
        """Map a query position onto the reference through the block's linear offset."""
        return self.target_start + (position - self.query_start)

    def target_to_query(self, position: int) -> int:
        """Map a reference position back onto the query."""
        return self.query_start + (position - self.target_start)

    def clipped(self, query_start: int, query_end: int) -> 'AlignmentRecord':
        """
        Return a copy restricted to the query range [query_start, query_end).

        Each reference end moves by the same amount as its query end, so
        the untouched side of the block keeps its original anchor.
        """
        if not self.query_start <= query_start <= query_end <= self.query_end:
            raise ValueError(
                f"Clip range {query_start}-{query_end} outside block "
                f"{self.query_start}-{self.query_end}"
            )
        target_start = min(self.target_start + (query_start - self.query_start), self.target_end)
        target_end = max(self.target_end - (self.query_end - query_end), target_start)
        return AlignmentRecord(
            query_name=self.query_name,
            query_length=self.query_length,
            query_start=query_start,
            query_end=query_end,
            strand=self.strand,
            target_name=self.target_name,
            target_length=self.target_length,
            target_start=target_start,
            target_end=target_end,
            matches=self.matches,
            block_length=self.block_length,
            mapq=self.mapq,
        )


@dataclass(frozen=True)
class AnnotatedInterval:
    """A BED interval with an optional free-text label."""
    contig: str
    start: int
    end: int
    label: Optional[str] = None

    def __post_init__(self):
        """Validate interval coordinates after initialization."""
        if self.start >= self.end:
            raise ValueError(f"Invalid interval coordinates: {self.start}-{self.end}")
        if self.start < 0:
            raise ValueError(f"Negative interval start: {self.start}")

    @property
    def length(self) -> int:
        return self.end - self.start

    def overlaps(self, start: int, end: int) -> bool:
        """Check if this interval overlaps the half-open range [start, end)."""
        return self.start < end and start < self.end


@dataclass
class ContigSegment:
    """One contiguous single-source slice of an output contig."""
    name: str
    start: int
    stop: int
    category: ContigType

    @property
    def length(self) -> int:
        return max(self.stop - self.start, 0)

    @property
    def is_valid(self) -> bool:
        """A segment is only materialized when start < stop."""
        return self.start < self.stop

    def can_merge(self, other: 'ContigSegment') -> bool:
        """Check if other continues this segment in the same source."""
        return (self.category == other.category and
                self.name == other.name and
                self.stop == other.start)

    def to_bed_line(self, output_name: str) -> str:
        return f"{self.name}\t{self.start}\t{self.stop}\t{self.category.label}\t{output_name}"


@dataclass
class ConsensusContig:
    """An output contig and its ordered source segments."""
    name: str
    segments: List[ContigSegment] = field(default_factory=list)

    def __post_init__(self):
        if not self.name:
            raise ValueError("Consensus contig name cannot be empty")

    def __iter__(self) -> Iterator[ContigSegment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def is_empty(self) -> bool:
        return not self.segments

    def append(self, segment: ContigSegment) -> None:
        """Append a segment, coalescing it into the previous one when contiguous."""
        if not segment.is_valid:
            return
        if self.segments and self.segments[-1].can_merge(segment):
            self.segments[-1].stop = segment.stop
            return
        self.segments.append(segment)

    def extend(self, segments: List[ContigSegment]) -> None:
        for segment in segments:
            self.append(segment)
