"""
Extract subsystem for docextract.

Purpose: Turn raw source text into normalized documentation text.

Responsibilities:
- Tokenize text, merging /**, /* and */ into single tokens
- Track quote context and comment nesting while folding over tokens
- Emit one decoration-stripped row per line inside a /** ... */ block
- Remove the common indentation and join rows

Non-responsibilities:
- No host-language grammar parsing
- No file system access (callers pass bytes or text)
"""

from .extract import (
    extract,
    extract_file,
    extract_files,
    extract_rows,
    run_machine,
    step,
    tokenize,
    strip_decoration,
    detect_indent,
    normalize_rows,
    ExtractedFile,
    ExtractOptions,
    ExtractError,
    IndentPolicy,
    ParseState,
    QuotePolicy,
    DOC_OPEN,
    COMMENT_OPEN,
    COMMENT_CLOSE,
)

__all__ = [
    "extract",
    "extract_file",
    "extract_files",
    "extract_rows",
    "run_machine",
    "step",
    "tokenize",
    "strip_decoration",
    "detect_indent",
    "normalize_rows",
    "ExtractedFile",
    "ExtractOptions",
    "ExtractError",
    "IndentPolicy",
    "ParseState",
    "QuotePolicy",
    "DOC_OPEN",
    "COMMENT_OPEN",
    "COMMENT_CLOSE",
]
