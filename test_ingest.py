#!/usr/bin/env python3
"""
Tests for the ingest subsystem: local paths, ZIP archives and GitHub downloads.
"""

import io
import zipfile

import pytest
import requests

from docextract.ingest import (
    IngestError,
    ingest_github_repo,
    ingest_local_path,
    ingest_zip_bytes,
    parse_github_url,
)
from docextract.ingest.ingest import FileFilter, is_binary, member_path, should_ignore


@pytest.fixture
def source_tree(tmp_path):
    (tmp_path / "a.js").write_text("/** a */\n")
    (tmp_path / "b.c").write_text("/** b */\n")
    (tmp_path / "ignored.js").write_text("/** ignored */\n")
    (tmp_path / "blob.js").write_bytes(b"\x00\x01\x02/**")
    (tmp_path / ".gitignore").write_text("# local rules\nignored.js\n")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "c.js").write_text("/** c */\n")
    modules = tmp_path / "node_modules"
    modules.mkdir()
    (modules / "dep.js").write_text("/** dep */\n")
    return tmp_path


def make_zip(files: dict) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as z:
        for name, data in files.items():
            z.writestr(name, data)
    return buf.getvalue()


class FakeResponse:
    def __init__(self, status_code: int, content: bytes = b""):
        self.status_code = status_code
        self.content = content

    @property
    def ok(self):
        return self.status_code < 400


# ============================================================
# Local Path Ingestion
# ============================================================

def test_directory_is_not_recursive_by_default(source_tree):
    entries = ingest_local_path(source_tree, pattern="*.js")
    assert [e.path for e in entries] == ["a.js"]
    assert entries[0].content == b"/** a */\n"


def test_recursive_directory(source_tree):
    entries = ingest_local_path(source_tree, recursive=True, pattern="*.js")
    assert [e.path for e in entries] == ["a.js", "sub/c.js"]


def test_pattern_filters_basenames(source_tree):
    entries = ingest_local_path(source_tree, recursive=True, pattern="*.c")
    assert [e.path for e in entries] == ["b.c"]


def test_explicit_ignore_patterns_replace_defaults(source_tree):
    entries = ingest_local_path(source_tree, recursive=True, pattern="*.js", ignore_patterns=[])
    assert [e.path for e in entries] == ["a.js", "node_modules/dep.js", "sub/c.js"]


def test_single_file_always_included(source_tree):
    entries = ingest_local_path(source_tree / "b.c", pattern="*.js")
    assert [e.path for e in entries] == ["b.c"]


def test_size_limit(source_tree):
    entries = ingest_local_path(source_tree, pattern="*.js", max_file_size=3)
    assert entries == []


def test_missing_path(tmp_path):
    with pytest.raises(IngestError):
        ingest_local_path(tmp_path / "nope")


# ============================================================
# Ignore Rules
# ============================================================

def test_should_ignore_double_star_prefix():
    patterns = [".git/**", "venv/**"]
    assert should_ignore(".git/config", patterns)
    assert should_ignore("venv/lib/x.py", patterns)
    assert not should_ignore(".gitignore", patterns)
    assert not should_ignore("venvironment.js", patterns)


def test_member_path():
    assert member_path("src\\a.c") == "src/a.c"
    assert member_path("repo-main/src/a.c", strip_top_level=True) == "src/a.c"
    assert member_path("README", strip_top_level=True) == "README"
    with pytest.raises(IngestError):
        member_path("../etc/passwd")
    with pytest.raises(IngestError):
        member_path("repo-main/../evil.js", strip_top_level=True)
    with pytest.raises(IngestError):
        member_path("/etc/passwd")
    with pytest.raises(IngestError):
        member_path("  ")


def test_default_ignores_vendored_and_minified():
    rules = FileFilter()
    assert rules.wants("src/app.js", 10)
    assert not rules.wants("vendor/lib.js", 10)
    assert not rules.wants("web/dist/bundle.js", 10)
    assert not rules.wants("app.min.js", 10)
    assert not rules.wants("src/app.js", rules.max_file_size + 1)


def test_is_binary():
    assert not is_binary(b"")
    assert not is_binary(b"/**\n\t * doc\r\n */\f")
    assert is_binary(b"/** \x00 */")
    assert is_binary(b"\x01\x02\x03/**")


# ============================================================
# ZIP Ingestion
# ============================================================

def test_zip_ingest_strips_top_level():
    data = make_zip({
        "repo-main/src/b.c": "/** b */",
        "repo-main/a.js": "/** a */",
        "repo-main/node_modules/x.js": "/** x */",
        "repo-main/../evil.js": "/** evil */",
        "repo-main/image.js": b"\x00\x00",
    })
    entries = ingest_zip_bytes(data)
    assert [e.path for e in entries] == ["a.js", "src/b.c"]


def test_zip_ingest_pattern():
    data = make_zip({"repo-main/src/b.c": "/** b */", "repo-main/a.js": "/** a */"})
    assert [e.path for e in ingest_zip_bytes(data, pattern="*.c")] == ["src/b.c"]


def test_bad_zip():
    with pytest.raises(IngestError):
        ingest_zip_bytes(b"not a zip")


# ============================================================
# GitHub Repo Ingestion
# ============================================================

def test_github_download(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        return FakeResponse(200, make_zip({"repo-dev/lib/a.js": "/** a */"}))

    monkeypatch.setattr(requests, "get", fake_get)
    entries = ingest_github_repo("owner", "repo", "dev")

    assert calls == ["https://github.com/owner/repo/archive/refs/heads/dev.zip"]
    assert [e.path for e in entries] == ["lib/a.js"]


def test_github_http_error(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda url, timeout: FakeResponse(404))
    with pytest.raises(IngestError, match="HTTP 404"):
        ingest_github_repo("owner", "missing")


def test_github_network_error(monkeypatch):
    def fake_get(url, timeout):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", fake_get)
    with pytest.raises(IngestError, match="offline"):
        ingest_github_repo("owner", "repo")


@pytest.mark.parametrize("url, expected", [
    ("https://github.com/owner/repo", ("owner", "repo", "main")),
    ("github.com/owner/repo.git", ("owner", "repo", "main")),
    ("https://github.com/owner/repo/tree/dev", ("owner", "repo", "dev")),
    ("https://www.github.com/owner/repo/", ("owner", "repo", "main")),
    ("https://github.com/owner/repo/tree/feature/x", ("owner", "repo", "feature/x")),
])
def test_parse_github_url(url, expected):
    assert parse_github_url(url) == expected


@pytest.mark.parametrize("url", [
    "https://github.com/owner",
    "https://gitlab.com/owner/repo",
    "https://github.com/owner/repo/blob/main/a.js",
])
def test_parse_github_url_invalid(url):
    with pytest.raises(IngestError):
        parse_github_url(url)
