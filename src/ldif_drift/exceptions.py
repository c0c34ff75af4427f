"""
Exception hierarchy for LDIF analysis.

I/O failures and parse failures are kept distinct so callers can report them
differently: a missing file aborts before any analysis starts, while a parse
error may be skipped or treated as fatal by the caller.
"""

from typing import Optional


class LdifDriftError(Exception):
    """
    Base exception for all ldif-drift errors.
    """

    pass


class LdifFileError(LdifDriftError):
    """
    Raised when an input file is missing or cannot be read.

    Always fatal: comparison never starts with only one readable side.
    """

    def __init__(self, path: str, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{reason}: {self.path}")


class LdifParseError(LdifDriftError):
    """
    Raised by the LDIF reader on malformed input.

    Carries the 1-based line number of the offending physical line.
    """

    def __init__(self, line_number: int, message: str, dn: Optional[str] = None):
        self.line_number = line_number
        self.message = message
        self.dn = dn
        super().__init__(f"line {line_number}: {message}")


class AggregatorStateError(LdifDriftError):
    """
    Raised when a finalized StatsAggregator is fed again.
    """

    pass
