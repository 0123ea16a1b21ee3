#!/usr/bin/env python3

"""
File parsers for alignments and interval annotations.

Handles PAF alignment files and BED interval files. Numeric parse failures
are fatal; BED lines with the wrong column shape are logged and skipped.
"""

import logging
from typing import Iterator, List, Optional

from .data_structures import AlignmentRecord, AnnotatedInterval
from .exceptions import ParseError

PAF_MANDATORY_COLUMNS = 12
BED_HEADER_PREFIXES = ('#', 'track', 'browser')


class PafParser:
    """Parse PAF pairwise alignment files with O(n) complexity."""

    def __init__(self, file_path: str):
        self.file_path = str(file_path)

    def __iter__(self) -> Iterator[AlignmentRecord]:
        return self.records()

    def records(self) -> Iterator[AlignmentRecord]:
        """Yield every alignment record in file order."""
        try:
            with open(self.file_path, 'r') as f:
                for line_num, line in enumerate(f, 1):
                    line = line.rstrip('\r\n')
                    if not line.strip() or line.startswith('#'):
                        continue
                    yield self._parse_line(line, line_num)
        except FileNotFoundError:
            raise ParseError(f"Alignment file not found: {self.file_path}")
        except OSError as e:
            raise ParseError(f"Failed to read alignment file: {e}", self.file_path)

    def parse(self) -> List[AlignmentRecord]:
        logging.info(f"Parsing PAF file: {self.file_path}")
        records = list(self.records())
        logging.info(f"Parsed {len(records)} alignment records")
        return records

    def _parse_line(self, line: str, line_num: int) -> AlignmentRecord:
        parts = line.split('\t')
        if len(parts) < PAF_MANDATORY_COLUMNS:
            raise ParseError(
                f"Expected at least {PAF_MANDATORY_COLUMNS} columns, found {len(parts)}",
                self.file_path, line_num
            )

        try:
            return AlignmentRecord(
                query_name=parts[0],
                query_length=int(parts[1]),
                query_start=int(parts[2]),
                query_end=int(parts[3]),
                strand=parts[4],
                target_name=parts[5],
                target_length=int(parts[6]),
                target_start=int(parts[7]),
                target_end=int(parts[8]),
                matches=int(parts[9]),
                block_length=int(parts[10]),
                mapq=int(parts[11]),
            )
        except ValueError as e:
            raise ParseError(f"Invalid alignment record: {e}", self.file_path, line_num)


class BedParser:
    """Parse BED interval files, keeping columns past the third as a label."""

    def __init__(self, file_path: str, keep_label: bool = True):
        self.file_path = str(file_path)
        self.keep_label = keep_label
        self.skipped_lines = 0

    def __iter__(self) -> Iterator[AnnotatedInterval]:
        return self.intervals()

    def intervals(self) -> Iterator[AnnotatedInterval]:
        """Yield every well-formed interval in file order."""
        try:
            with open(self.file_path, 'r') as f:
                for line_num, line in enumerate(f, 1):
                    line = line.rstrip('\r\n')
                    if not line.strip() or line.startswith(BED_HEADER_PREFIXES):
                        continue

                    interval = self._parse_line(line, line_num)
                    if interval is None:
                        self.skipped_lines += 1
                        continue
                    yield interval
        except FileNotFoundError:
            raise ParseError(f"BED file not found: {self.file_path}")
        except OSError as e:
            raise ParseError(f"Failed to read BED file: {e}", self.file_path)

    def _parse_line(self, line: str, line_num: int) -> Optional[AnnotatedInterval]:
        parts = line.split('\t', 3)
        if len(parts) < 3:
            logging.error(f"Invalid line {line_num} in {self.file_path}: {line}")
            return None

        name, start, stop = parts[0], parts[1], parts[2]
        label = parts[3] if len(parts) == 4 else ""

        try:
            first, last = int(start), int(stop)
        except ValueError as e:
            raise ParseError(f"Invalid BED coordinates: {e}", self.file_path, line_num)

        try:
            return AnnotatedInterval(
                contig=name,
                start=first,
                end=last,
                label=label if self.keep_label else None,
            )
        except ValueError as e:
            logging.warning(f"Skipping line {line_num} in {self.file_path}: {e}")
            return None
