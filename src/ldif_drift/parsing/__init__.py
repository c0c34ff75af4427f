"""LDIF parsing."""

from .ldif_reader import LdifReader, parse_ldif, split_line

__all__ = ["LdifReader", "parse_ldif", "split_line"]
