"""DN-grouped unified diff."""

from .unified_diff import (
    DnBlock,
    compute_line_diff,
    generate_unified_diff,
    parse_to_blocks,
    render_unified_diff,
    write_unified_diff,
)

__all__ = [
    "DnBlock",
    "compute_line_diff",
    "generate_unified_diff",
    "parse_to_blocks",
    "render_unified_diff",
    "write_unified_diff",
]
