"""
Ingest subsystem for docextract.

Purpose: Collect candidate source files into memory as {path, bytes}.

Responsibilities:
- Accept a local file or directory (optionally recursive), ZIP bytes or a GitHub repo
- Apply the basename pattern and ignore rules (.gitignore, size limits, binary detection)
- Output: List of FileEntry sorted by path

Non-responsibilities:
- No decoding of text
- No comment extraction
"""

from .ingest import (
    ingest_local_path,
    ingest_zip_bytes,
    ingest_github_repo,
    parse_github_url,
    FileEntry,
    IngestError,
)

__all__ = [
    "ingest_local_path",
    "ingest_zip_bytes",
    "ingest_github_repo",
    "parse_github_url",
    "FileEntry",
    "IngestError",
]
