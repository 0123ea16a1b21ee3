#!/usr/bin/env python3

"""
Custom exceptions for the assembly patcher.

Every fatal condition of a patching run maps to one of these types so the
CLI can report it and exit non-zero.
"""

class PatcherError(Exception):
    """Base exception for all patcher errors."""
    pass


class ParseError(PatcherError):
    """Malformed or unreadable tabular input."""

    def __init__(self, message: str, filename: str = "", line_number: int = 0):
        super().__init__(message)
        self.filename = filename
        self.line_number = line_number

    def __str__(self):
        if self.filename and self.line_number:
            return f"Parse error in {self.filename} at line {self.line_number}: {super().__str__()}"
        elif self.filename:
            return f"Parse error in {self.filename}: {super().__str__()}"
        return super().__str__()


class UnknownContigError(PatcherError):
    """A contig name is missing from the relevant length table."""

    def __init__(self, message: str, contig: str = "", category: str = ""):
        super().__init__(message)
        self.contig = contig
        self.category = category

    def __str__(self):
        if self.contig and self.category:
            return f"Unknown {self.category} contig {self.contig}: {super().__str__()}"
        elif self.contig:
            return f"Unknown contig {self.contig}: {super().__str__()}"
        return super().__str__()


class SequenceError(PatcherError):
    """Error indexing or fetching from an assembly FASTA."""

    def __init__(self, message: str, contig: str = "", coordinates: str = ""):
        super().__init__(message)
        self.contig = contig
        self.coordinates = coordinates

    def __str__(self):
        if self.contig and self.coordinates:
            return f"Sequence error at {self.contig}:{self.coordinates}: {super().__str__()}"
        elif self.contig:
            return f"Sequence error at {self.contig}: {super().__str__()}"
        return super().__str__()


class OutputError(PatcherError):
    """Cannot create or write an output file."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path

    def __str__(self):
        if self.path:
            return f"Output error for {self.path}: {super().__str__()}"
        return super().__str__()


class ConfigurationError(PatcherError):
    """Error in patcher configuration."""
    pass


class MemoryError(PatcherError):
    """Memory usage exceeded limits."""

    def __init__(self, message: str, current_usage: float, limit: float):
        super().__init__(message)
        self.current_usage = current_usage
        self.limit = limit

    def __str__(self):
        return f"Memory error: {super().__str__()} (current: {self.current_usage:.1f}MB, limit: {self.limit:.1f}MB)"
