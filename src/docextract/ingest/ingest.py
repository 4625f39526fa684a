# ingest.py
# docextract – Ingest subsystem: collect source files from disk, ZIPs or GitHub

import fnmatch
import io
import re
import sys
import zipfile
from dataclasses import dataclass, field
from pathlib import Path, PurePath, PurePosixPath
from typing import List

import requests


# ============================================================
# Exceptions
# ============================================================

class IngestError(Exception):
    pass


# ============================================================
# Output Format
# ============================================================

@dataclass
class FileEntry:
    """Simple file entry with path and raw bytes."""
    path: str
    content: bytes


# ============================================================
# Configuration
# ============================================================

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_PATTERN = "*"

# Vendored and generated trees; their doc comments belong to someone else
IGNORED_DIRS = (".git", "node_modules", "bower_components", "vendor", ".venv", "venv", "dist", "build")
DEFAULT_IGNORE_PATTERNS = [f"{d}/**" for d in IGNORED_DIRS] + ["*.min.js", "*.map"]

# tab, newline, form feed, carriage return
TEXT_CONTROL_BYTES = frozenset(b"\t\n\f\r")
BINARY_CONTROL_RATIO = 0.3
BINARY_SAMPLE_SIZE = 8192

GITHUB_ARCHIVE_URL = "https://github.com/{owner}/{repo}/archive/refs/heads/{branch}.zip"
GITHUB_URL_RE = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/"
    r"(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?"
    r"(?:/tree/(?P<branch>.+?))?/?$"
)
DOWNLOAD_TIMEOUT = 30


# ============================================================
# Selection Rules
# ============================================================

def parse_gitignore(content: str) -> List[str]:
    """Parse .gitignore content into patterns."""
    return [
        line.strip()
        for line in content.splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]


def should_ignore(path: str, patterns: List[str]) -> bool:
    """Check if path matches any ignore pattern."""
    for pattern in patterns:
        if pattern.endswith("/"):
            pattern = pattern.rstrip("/") + "/*"

        if fnmatch.fnmatch(path, pattern) or fnmatch.fnmatch(path, f"**/{pattern}"):
            return True

        if "**" in pattern:
            prefix, _, suffix = pattern.partition("**")
            head = prefix.rstrip("/")
            in_prefix = not head or path == head or path.startswith(head + "/")
            if in_prefix and (not suffix or path.endswith(suffix.lstrip("/"))):
                return True
    return False


def matches_pattern(path: str, pattern: str) -> bool:
    """Match the basename of path against a glob pattern."""
    return fnmatch.fnmatch(PurePath(path).name, pattern)


def is_binary(data: bytes) -> bool:
    """True when the leading bytes look like a blob rather than source text."""
    sample = data[:BINARY_SAMPLE_SIZE]
    if not sample:
        return False
    if b"\x00" in sample:
        return True
    control = sum(1 for b in sample if b < 32 and b not in TEXT_CONTROL_BYTES)
    return control / len(sample) > BINARY_CONTROL_RATIO


@dataclass
class FileFilter:
    """Which files a source contributes. Shared by directories and archives."""
    pattern: str = DEFAULT_PATTERN
    ignore_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    filter_binary: bool = True

    @classmethod
    def build(cls, pattern, ignore_patterns, max_file_size, filter_binary) -> "FileFilter":
        rules = cls(pattern=pattern, max_file_size=max_file_size, filter_binary=filter_binary)
        if ignore_patterns is not None:
            rules.ignore_patterns = list(ignore_patterns)
        return rules

    def wants(self, path: str, size: int) -> bool:
        """Decide from path and size alone, before the content is read."""
        return (
            size <= self.max_file_size
            and matches_pattern(path, self.pattern)
            and not should_ignore(path, self.ignore_patterns)
        )

    def keeps(self, data: bytes) -> bool:
        return not (self.filter_binary and is_binary(data))


# ============================================================
# Local Path Ingestion
# ============================================================

def _walk(base_path: Path, recursive: bool):
    candidates = base_path.rglob("*") if recursive else base_path.iterdir()
    return sorted(p for p in candidates if p.is_file())


def ingest_local_path(
    path: str | Path,
    recursive: bool = False,
    pattern: str = DEFAULT_PATTERN,
    ignore_patterns: List[str] | None = None,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    filter_binary: bool = True,
) -> List[FileEntry]:
    """
    Ingest files from a local file or directory.

    A file path is always ingested. A directory contributes its direct
    children, or its whole tree when recursive is set, filtered by
    pattern, ignore rules, size and the binary heuristic.

    Args:
        path: Local filesystem path (file or directory)
        recursive: Descend into subdirectories
        pattern: Glob matched against each file's basename
        ignore_patterns: Gitignore-style patterns replacing the defaults
        max_file_size: Maximum file size in bytes
        filter_binary: Skip binary files based on heuristic detection

    Returns:
        List of FileEntry objects sorted by path
    """
    path = Path(path)

    if not path.exists():
        raise IngestError(f"Path does not exist: {path}")

    if path.is_file():
        try:
            return [FileEntry(path=path.name, content=path.read_bytes())]
        except OSError as e:
            raise IngestError(f"Failed to read file {path}: {e}")

    rules = FileFilter.build(pattern, ignore_patterns, max_file_size, filter_binary)

    gitignore_path = path / ".gitignore"
    if gitignore_path.is_file():
        try:
            rules.ignore_patterns.extend(parse_gitignore(gitignore_path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as e:
            print(f"Warning: Ignoring unreadable {gitignore_path}: {e}", file=sys.stderr)

    files = []
    for file_path in _walk(path, recursive):
        rel_path = file_path.relative_to(path).as_posix()
        try:
            if not rules.wants(rel_path, file_path.stat().st_size):
                continue
            data = file_path.read_bytes()
        except OSError as e:
            raise IngestError(f"Failed to read file {file_path}: {e}")

        if rules.keeps(data):
            files.append(FileEntry(path=rel_path, content=data))

    return files


# ============================================================
# ZIP Ingestion
# ============================================================

def member_path(name: str, strip_top_level: bool = False) -> str:
    """
    Relative forward-slash path for a ZIP member.

    Raises IngestError for blank names, absolute paths and ../ traversal
    so no member can land outside the archive root.
    """
    name = name.replace("\\", "/")
    if strip_top_level and "/" in name:
        name = name.split("/", 1)[1]

    p = PurePosixPath(name)
    if not name.strip() or not p.parts:
        raise IngestError(f"Invalid empty path {name!r}")
    if p.is_absolute():
        raise IngestError(f"Absolute path not allowed: {name}")
    if ".." in p.parts:
        raise IngestError(f"Traversal not allowed: {name}")
    return p.as_posix()


def ingest_zip_bytes(
    zip_bytes: bytes,
    pattern: str = DEFAULT_PATTERN,
    ignore_patterns: List[str] | None = None,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    strip_top_level: bool = True,
    filter_binary: bool = True,
) -> List[FileEntry]:
    """
    Ingest the members of a ZIP archive held in memory.

    Unsafe member names are skipped with a warning. strip_top_level drops
    the single wrapping directory GitHub puts around a repository.
    """
    rules = FileFilter.build(pattern, ignore_patterns, max_file_size, filter_binary)
    files = []

    try:
        with zipfile.ZipFile(io.BytesIO(zip_bytes)) as z:
            for info in z.infolist():
                if info.is_dir():
                    continue
                try:
                    path = member_path(info.filename, strip_top_level)
                except IngestError as e:
                    print(f"Warning: Skipping ZIP member: {e}", file=sys.stderr)
                    continue

                if not rules.wants(path, info.file_size):
                    continue
                data = z.read(info)
                if rules.keeps(data):
                    files.append(FileEntry(path=path, content=data))
    except zipfile.BadZipFile as e:
        raise IngestError(f"Invalid ZIP: {e}")

    return sorted(files, key=lambda f: f.path)


# ============================================================
# GitHub Repo Ingestion
# ============================================================

def download_archive(url: str) -> bytes:
    try:
        resp = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
    except requests.RequestException as e:
        raise IngestError(f"Failed to fetch ZIP: {e}")
    if not resp.ok:
        raise IngestError(f"HTTP {resp.status_code}: failed to download {url}")
    return resp.content


def ingest_github_repo(
    owner: str,
    repo: str,
    branch: str = "main",
    pattern: str = DEFAULT_PATTERN,
    ignore_patterns: List[str] | None = None,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    filter_binary: bool = True,
) -> List[FileEntry]:
    """Download a branch archive from GitHub and ingest it like a ZIP."""
    url = GITHUB_ARCHIVE_URL.format(owner=owner, repo=repo, branch=branch)
    return ingest_zip_bytes(
        download_archive(url),
        pattern=pattern,
        ignore_patterns=ignore_patterns,
        max_file_size=max_file_size,
        filter_binary=filter_binary,
    )


def parse_github_url(url: str) -> tuple[str, str, str]:
    """
    Split a GitHub URL into (owner, repo, branch).

    Accepts github.com/owner/repo with or without a scheme, an optional
    .git suffix and an optional /tree/<branch>. The branch defaults to main.
    """
    m = GITHUB_URL_RE.match(url.strip())
    if not m:
        raise IngestError(f"Invalid GitHub URL: {url}")
    return m.group("owner"), m.group("repo"), m.group("branch") or "main"
