"""
LDIF comparison fixtures

Deterministic LDIF exports for the comparison and end-to-end tests.
"""

from tests.comparison.ldif_factory import LdifFactory

__all__ = ["LdifFactory"]
