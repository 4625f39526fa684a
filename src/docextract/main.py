#!/usr/bin/env python3
"""
main.py
docextract – command-line entry point

Runs the extraction pipeline: ingest → extract → emit

Usage:
    docextract [options] <file or dir> [<file or dir> ...]
    docextract --url https://github.com/owner/repo [options]

Examples:
    docextract -r lib > docs/api.md
    docextract src/parser.c --indent-offset 2
    docextract -r src --pattern "*.js" --output-dir docs/api --manifest
"""

import argparse
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from docextract import __version__
from docextract.emit import EmitConfig, EmitError, emit_files
from docextract.extract import (
    ExtractError,
    ExtractOptions,
    IndentPolicy,
    QuotePolicy,
    extract_files,
)
from docextract.ingest import (
    IngestError,
    ingest_github_repo,
    ingest_local_path,
    parse_github_url,
)
from docextract.ingest.ingest import DEFAULT_MAX_FILE_SIZE, DEFAULT_PATTERN

USAGE = "Usage: docextract [options] filepath or dirpath"


# ============================================================
# Configuration
# ============================================================

@dataclass
class PipelineConfig:
    """Configuration for the pipeline."""
    # Ingest settings
    recursive: bool = False
    pattern: str = DEFAULT_PATTERN
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    filter_binary: bool = True
    branch: Optional[str] = None

    # Extract settings
    encoding: str = "utf-8"
    indent_offset: Optional[int] = None
    quote_policy: QuotePolicy = QuotePolicy.LITERAL
    indent_policy: IndentPolicy = IndentPolicy.LEGACY
    flush_trailing_row: bool = True
    keep_going: bool = False

    # Emit settings
    output_file: Optional[str] = None
    output_dir: Optional[str] = None
    suffix: str = ".md"
    write_manifest: bool = False

    verbose: bool = False

    def extract_options(self) -> ExtractOptions:
        return ExtractOptions(
            indent_offset=self.indent_offset,
            quote_policy=self.quote_policy,
            indent_policy=self.indent_policy,
            flush_trailing_row=self.flush_trailing_row,
        )


# ============================================================
# Pipeline Statistics
# ============================================================

@dataclass
class PipelineStats:
    """Statistics collected during pipeline execution."""
    ingest_time: float = 0.0
    extract_time: float = 0.0
    total_time: float = 0.0

    files_ingested: int = 0
    files_extracted: int = 0
    files_written: int = 0
    total_bytes: int = 0
    bytes_written: int = 0
    destination: str = ""

    def print_summary(self):
        """Print a formatted summary of pipeline statistics."""
        log("\n" + "=" * 70)
        log("PIPELINE SUMMARY")
        log("=" * 70)
        log(f"  Ingest:   {self.ingest_time:>8.2f}s  ({self.files_ingested} files, {self.total_bytes/1024:.1f} KB)")
        log(f"  Extract:  {self.extract_time:>8.2f}s  ({self.files_extracted} files, {self.files_written} with docs)")
        log(f"  {'─' * 40}")
        log(f"  Total:    {self.total_time:>8.2f}s")
        log(f"\n  Output: {self.destination} ({self.bytes_written} bytes)")
        log("=" * 70)


def log(message: str = ""):
    """Progress output; stdout is reserved for extracted text."""
    print(message, file=sys.stderr)


# ============================================================
# Pipeline Stages
# ============================================================

def stage_ingest(paths: List[str], url: Optional[str], config: PipelineConfig) -> list:
    """
    Stage 1: Collect files from local paths and/or a GitHub repository.

    Args:
        paths: Local files or directories, in command-line order
        url: GitHub URL (optional)
        config: Pipeline configuration

    Returns:
        List of FileEntry objects
    """
    if config.verbose:
        log("\n" + "=" * 70)
        log("STAGE 1: INGEST")
        log("=" * 70)

    files = []

    for raw in paths:
        path = Path(raw).expanduser()
        entries = ingest_local_path(
            path,
            recursive=config.recursive,
            pattern=config.pattern,
            max_file_size=config.max_file_size,
            filter_binary=config.filter_binary,
        )
        if config.verbose:
            log(f"  {path}: {len(entries)} files")
        files.extend(entries)

    if url:
        owner, repo, branch = parse_github_url(url)
        if config.branch:
            branch = config.branch
        if config.verbose:
            log(f"  GitHub: {owner}/{repo}@{branch}")
        files.extend(ingest_github_repo(
            owner=owner,
            repo=repo,
            branch=branch,
            pattern=config.pattern,
            max_file_size=config.max_file_size,
            filter_binary=config.filter_binary,
        ))

    if config.verbose:
        log(f"\n✓ Ingested {len(files)} files")

    return files


def stage_extract_and_emit(file_entries: list, config: PipelineConfig, source: dict, stream=None):
    """
    Stage 2: Extract doc comments and write them out file by file.

    Extraction is lazy, so each file's text reaches the sink before the
    next file is decoded.

    Args:
        file_entries: List of FileEntry objects from ingest
        config: Pipeline configuration
        source: Source description recorded in the manifest
        stream: Stream for stdout output (optional)

    Returns:
        EmitResult
    """
    if config.verbose:
        log("\n" + "=" * 70)
        log("STAGE 2: EXTRACT")
        log("=" * 70)

    options = config.extract_options()
    emit_config = EmitConfig(
        output_file=config.output_file,
        output_dir=config.output_dir,
        suffix=config.suffix,
        write_manifest=config.write_manifest,
        source=source,
        options={
            "encoding": config.encoding,
            "indent_offset": options.indent_offset,
            "quote_policy": options.quote_policy.value,
            "indent_policy": options.indent_policy.value,
            "flush_trailing_row": options.flush_trailing_row,
        },
    )

    extracted = extract_files(
        file_entries,
        encoding=config.encoding,
        options=options,
        strict=not config.keep_going,
    )
    result = emit_files(extracted, emit_config, stream=stream)

    if config.verbose:
        log(f"\n✓ Extracted {result.files_seen} files, {result.files_written} with documentation")

    return result


# ============================================================
# Main Pipeline
# ============================================================

def run_pipeline(
    paths: Optional[List[str]] = None,
    url: Optional[str] = None,
    config: Optional[PipelineConfig] = None,
    stream=None,
) -> int:
    """
    Run the extraction pipeline.

    Args:
        paths: Local files or directories
        url: GitHub URL (optional)
        config: Pipeline configuration (optional, uses defaults if not provided)
        stream: Stream for stdout output (optional)

    Returns:
        Process exit code
    """
    if config is None:
        config = PipelineConfig()
    paths = paths or []

    stats = PipelineStats()
    pipeline_start = time.time()

    try:
        if config.output_file is not None and config.output_dir is not None:
            raise EmitError("Do not combine --output-file and --output-dir")

        file_entries = stage_ingest(paths, url, config)
        stats.ingest_time = time.time() - pipeline_start
        stats.files_ingested = len(file_entries)
        stats.total_bytes = sum(len(f.content) for f in file_entries)

        if not file_entries:
            print(USAGE)
            return 0

        source = {"paths": [str(p) for p in paths]}
        if url:
            source["url"] = url

        extract_start = time.time()
        result = stage_extract_and_emit(file_entries, config, source, stream=stream)
        stats.extract_time = time.time() - extract_start
        stats.files_extracted = result.files_seen
        stats.files_written = result.files_written
        stats.bytes_written = result.bytes_written
        stats.destination = result.destination

    except (IngestError, ExtractError, EmitError) as e:
        log(f"✗ {e}")
        return 1

    stats.total_time = time.time() - pipeline_start
    if config.verbose:
        stats.print_summary()

    return 0


# ============================================================
# CLI Interface
# ============================================================

def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docextract",
        description="Extract /** ... */ documentation comments from source files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -r lib > docs/api.md
  %(prog)s src/parser.c --indent-offset 2
  %(prog)s -r src --pattern "*.js" --output-dir docs/api --manifest
  %(prog)s --url https://github.com/owner/repo --pattern "*.c"
        """
    )

    parser.add_argument(
        "paths",
        nargs="*",
        help="Files or directories to scan"
    )
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=__version__,
    )
    parser.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Include files in subdirectories of each directory"
    )
    parser.add_argument(
        "--pattern",
        default=DEFAULT_PATTERN,
        help="Glob for file names picked up from directories (default: *)"
    )
    parser.add_argument(
        "--url",
        help="GitHub repository URL to scan instead of (or in addition to) local paths"
    )
    parser.add_argument(
        "--branch",
        help="Git branch to use with --url (default: from URL, else main)"
    )
    parser.add_argument(
        "--output-file",
        metavar="PATH",
        help="Write all extracted text to PATH instead of stdout"
    )
    parser.add_argument(
        "--output-dir",
        metavar="PATH",
        help="Write one file per input into PATH instead of stdout"
    )
    parser.add_argument(
        "--suffix",
        default=".md",
        help="Suffix appended to file names in --output-dir (default: .md)"
    )
    parser.add_argument(
        "--manifest",
        action="store_true",
        help="Write manifest.json into --output-dir"
    )
    parser.add_argument(
        "--indent-offset",
        type=non_negative_int,
        metavar="NO",
        help="Use a fixed indent offset instead of auto-detection"
    )
    parser.add_argument(
        "--encoding",
        default="utf-8",
        help="Source file encoding (default: utf-8)"
    )
    parser.add_argument(
        "--quote-policy",
        choices=[p.value for p in QuotePolicy],
        default=QuotePolicy.LITERAL.value,
        help="Track quotes everywhere, or ignore them inside comments (default: literal)"
    )
    parser.add_argument(
        "--indent-policy",
        choices=[p.value for p in IndentPolicy],
        default=IndentPolicy.LEGACY.value,
        help="How unindented rows count toward auto-detected indent (default: legacy)"
    )
    parser.add_argument(
        "--drop-trailing-row",
        action="store_false",
        dest="flush_trailing_row",
        help="Discard text left over after the last line break"
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Skip files that cannot be decoded instead of stopping"
    )
    parser.add_argument(
        "--usage",
        action="store_true",
        help="Show usage for command"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print progress and a summary to stderr"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with CLI argument parsing."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.usage or (not args.paths and not args.url):
        print(USAGE)
        return 0

    config = PipelineConfig(
        recursive=args.recursive,
        pattern=args.pattern,
        branch=args.branch,
        encoding=args.encoding,
        indent_offset=args.indent_offset,
        quote_policy=QuotePolicy(args.quote_policy),
        indent_policy=IndentPolicy(args.indent_policy),
        flush_trailing_row=args.flush_trailing_row,
        keep_going=args.keep_going,
        output_file=args.output_file,
        output_dir=args.output_dir,
        suffix=args.suffix,
        write_manifest=args.manifest,
        verbose=args.verbose,
    )

    return run_pipeline(paths=args.paths, url=args.url, config=config)


if __name__ == "__main__":
    sys.exit(main())
