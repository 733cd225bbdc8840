"""Scanner — entropy, confidence, ignore resolution, line and file scanning.

The orchestrator lives in :mod:`lss.scanner.engine`.
"""

from lss.scanner.confidence import combine_confidences
from lss.scanner.entropy import shannon_entropy
from lss.scanner.ignore import IgnorePattern, IgnoreResolver, IgnoreSource
from lss.scanner.line import scan_line, scan_text
from lss.scanner.walker import iter_files, scan_file, scan_tree

__all__ = [
    "IgnorePattern",
    "IgnoreResolver",
    "IgnoreSource",
    "combine_confidences",
    "iter_files",
    "scan_file",
    "scan_line",
    "scan_text",
    "scan_tree",
    "shannon_entropy",
]
