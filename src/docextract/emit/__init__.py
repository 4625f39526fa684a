"""
Emit subsystem for docextract.

Purpose: Deliver extracted documentation text to its destination.

Responsibilities:
- Stream text to stdout, to one output file, or to one file per input under a directory
- Refuse to let two inputs share an output path
- Write manifest.json describing the run (directory output only)

Non-responsibilities:
- No reading of sources
- No comment extraction
"""

from .emit import (
    emit_files,
    generate_manifest,
    output_name,
    EmitConfig,
    EmitResult,
    EmitError,
)

__all__ = [
    "emit_files",
    "generate_manifest",
    "output_name",
    "EmitConfig",
    "EmitResult",
    "EmitError",
]
