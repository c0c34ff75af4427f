"""
ldif-drift: structural drift detection between LDIF exports.

Analyses LDIF change files into statistics, compares a candidate file against
a known-good baseline with percentage thresholds, and reports entry-level and
DN-grouped unified diffs.
"""

__version__ = "1.0.0"
