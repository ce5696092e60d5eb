# topmark:header:start
#
#   project      : DescParse
#   file         : __init__.py
#   file_relpath : src/descparse/pipeline/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""DescParse processing pipeline.

A blob flows through the Type Sniffer, the Document Splitter and, once per
byte range, the Document Parser. The runner in
[`descparse.pipeline.runner`][descparse.pipeline.runner] wires the steps
together and turns per-document failures into results.
"""

from __future__ import annotations
