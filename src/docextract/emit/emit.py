# emit.py
# docextract – Emit subsystem: write extracted documentation to stdout, a file or a directory

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterable, List, Optional, TextIO

from docextract import __version__
from docextract.extract import ExtractedFile


# ============================================================
# Exceptions
# ============================================================

class EmitError(Exception):
    """Error while writing extracted documentation."""
    pass


# ============================================================
# Configuration
# ============================================================

DEFAULT_SUFFIX = ".md"
MANIFEST_NAME = "manifest.json"


@dataclass
class EmitConfig:
    """Where and how extracted text is written."""
    output_file: Optional[str] = None
    output_dir: Optional[str] = None
    suffix: str = DEFAULT_SUFFIX
    write_manifest: bool = False

    # Recorded in the manifest
    source: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)

    def validate(self):
        if self.output_file is not None and self.output_dir is not None:
            raise EmitError("Do not combine --output-file and --output-dir")
        if self.write_manifest and self.output_dir is None:
            raise EmitError("A manifest can only be written together with --output-dir")


# ============================================================
# Output Format
# ============================================================

@dataclass
class EmitResult:
    """Result of writing all extracted files."""
    destination: str
    files_seen: int = 0
    files_written: int = 0
    bytes_written: int = 0
    written_paths: List[str] = field(default_factory=list)
    manifest_path: Optional[str] = None


# ============================================================
# Manifest Generation
# ============================================================

def generate_manifest(config: EmitConfig, extracted: List[ExtractedFile]) -> dict:
    """
    Generate manifest.json content.

    Args:
        config: Emit configuration
        extracted: Every file that passed through the emitter

    Returns:
        Dictionary containing manifest data
    """
    return {
        "generator": "docextract",
        "version": __version__,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "source": config.source,
        "options": config.options,
        "stats": {
            "files": len(extracted),
            "files_with_docs": sum(1 for ef in extracted if ef.text),
            "rows": sum(ef.row_count for ef in extracted),
            "blocks": sum(ef.block_count for ef in extracted),
        },
        "files": [
            {
                "path": ef.path,
                "output": output_name(ef.path, config.suffix) if ef.text else None,
                "encoding": ef.encoding,
                "size_bytes": ef.size_bytes,
                "line_count": ef.line_count,
                "row_count": ef.row_count,
                "block_count": ef.block_count,
                "metadata": ef.metadata,
            }
            for ef in extracted
        ],
    }


def write_json_file(path: Path, data: Any):
    """Write data to JSON file with pretty formatting."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


# ============================================================
# File Writing
# ============================================================

def output_name(path: str, suffix: str = DEFAULT_SUFFIX) -> str:
    """Relative output path for an input path."""
    parts = [p for p in PurePosixPath(path).parts if p not in ("/", "..")]
    if not parts:
        raise EmitError(f"Cannot derive an output name from {path!r}")
    return "/".join(parts) + suffix


def write_output_file(base_dir: Path, name: str, extracted: ExtractedFile) -> Path:
    target = base_dir / name
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, 'w', encoding='utf-8') as f:
        f.write(extracted.text)
    return target


def _write_stream(stream: TextIO, text: str, destination: str):
    try:
        stream.write(text)
        stream.flush()
    except OSError as e:
        raise EmitError(f"Failed to write to {destination}: {e}")


# ============================================================
# Emit
# ============================================================

def emit_files(
    extracted_files: Iterable[ExtractedFile],
    config: Optional[EmitConfig] = None,
    stream: Optional[TextIO] = None,
) -> EmitResult:
    """
    Write each extracted file to the configured destination as it arrives.

    Files with no documentation write nothing. Output already written
    stays in place if the input iterable raises part way through.

    Args:
        extracted_files: ExtractedFile objects, typically a lazy iterator
        config: Emit configuration (stdout when not provided)
        stream: Stream used for stdout output (defaults to sys.stdout)

    Returns:
        EmitResult with counts and written paths
    """
    if config is None:
        config = EmitConfig()
    config.validate()

    seen: List[ExtractedFile] = []

    if config.output_dir is not None:
        base_dir = Path(config.output_dir)
        try:
            base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise EmitError(f"Cannot create output directory {base_dir}: {e}")

        result = EmitResult(destination=str(base_dir))
        owners: Dict[str, str] = {}
        for ef in extracted_files:
            seen.append(ef)
            if not ef.text:
                continue
            name = output_name(ef.path, config.suffix)
            if name in owners:
                raise EmitError(f"{ef.path} and {owners[name]} would both be written to {name}")
            owners[name] = ef.path
            try:
                target = write_output_file(base_dir, name, ef)
            except OSError as e:
                raise EmitError(f"Failed to write output for {ef.path}: {e}")
            result.files_written += 1
            result.bytes_written += len(ef.text.encode("utf-8"))
            result.written_paths.append(str(target))

        if config.write_manifest:
            manifest_path = base_dir / MANIFEST_NAME
            try:
                write_json_file(manifest_path, generate_manifest(config, seen))
            except OSError as e:
                raise EmitError(f"Failed to write manifest {manifest_path}: {e}")
            result.manifest_path = str(manifest_path)

    elif config.output_file is not None:
        result = EmitResult(destination=config.output_file)
        try:
            f = open(config.output_file, 'w', encoding='utf-8')
        except OSError as e:
            raise EmitError(f"Cannot open output file {config.output_file}: {e}")
        with f:
            for ef in extracted_files:
                seen.append(ef)
                if not ef.text:
                    continue
                _write_stream(f, ef.text, config.output_file)
                result.files_written += 1
                result.bytes_written += len(ef.text.encode("utf-8"))
        result.written_paths.append(config.output_file)

    else:
        if stream is None:
            stream = sys.stdout
        result = EmitResult(destination="<stdout>")
        for ef in extracted_files:
            seen.append(ef)
            if not ef.text:
                continue
            _write_stream(stream, ef.text, "<stdout>")
            result.files_written += 1
            result.bytes_written += len(ef.text.encode("utf-8"))

    result.files_seen = len(seen)
    return result
