#!/usr/bin/env python3
"""
Tests for the emit subsystem: stdout, single file and per-file directory output.
"""

import io
import json

import pytest

from docextract.emit import EmitConfig, EmitError, emit_files, output_name
from docextract.extract import ExtractedFile, ExtractError


def make_extracted(path: str, text: str, rows: int = 1) -> ExtractedFile:
    return ExtractedFile(
        path=path,
        text=text,
        encoding="utf-8",
        size_bytes=len(text),
        line_count=text.count("\n") + 1,
        row_count=rows,
        block_count=1 if text else 0,
    )


FILES = [
    make_extracted("a.js", "Alpha\n"),
    make_extracted("empty.js", "", rows=0),
    make_extracted("lib/b.js", "Beta\n"),
]


def test_stdout_skips_empty_files():
    stream = io.StringIO()
    result = emit_files(iter(FILES), stream=stream)
    assert stream.getvalue() == "Alpha\nBeta\n"
    assert result.destination == "<stdout>"
    assert result.files_seen == 3
    assert result.files_written == 2
    assert result.bytes_written == len("Alpha\nBeta\n")


def test_output_file(tmp_path):
    target = tmp_path / "api.md"
    result = emit_files(FILES, EmitConfig(output_file=str(target)))
    assert target.read_text(encoding="utf-8") == "Alpha\nBeta\n"
    assert result.written_paths == [str(target)]


def test_output_dir(tmp_path):
    out = tmp_path / "docs"
    result = emit_files(FILES, EmitConfig(output_dir=str(out)))
    assert (out / "a.js.md").read_text(encoding="utf-8") == "Alpha\n"
    assert (out / "lib" / "b.js.md").read_text(encoding="utf-8") == "Beta\n"
    assert not (out / "empty.js.md").exists()
    assert result.files_written == 2
    assert result.manifest_path is None


def test_output_dir_manifest(tmp_path):
    out = tmp_path / "docs"
    config = EmitConfig(
        output_dir=str(out),
        suffix=".txt",
        write_manifest=True,
        source={"paths": ["src"]},
        options={"indent_offset": None},
    )
    result = emit_files(FILES, config)

    manifest = json.loads((out / "manifest.json").read_text(encoding="utf-8"))
    assert result.manifest_path == str(out / "manifest.json")
    assert manifest["generator"] == "docextract"
    assert manifest["source"] == {"paths": ["src"]}
    assert manifest["stats"]["files"] == 3
    assert manifest["stats"]["files_with_docs"] == 2
    assert [f["output"] for f in manifest["files"]] == ["a.js.txt", None, "lib/b.js.txt"]


def test_conflicting_destinations(tmp_path):
    config = EmitConfig(output_file=str(tmp_path / "a.md"), output_dir=str(tmp_path / "d"))
    with pytest.raises(EmitError):
        emit_files(FILES, config)
    assert not (tmp_path / "a.md").exists()


def test_manifest_requires_output_dir():
    with pytest.raises(EmitError):
        emit_files(FILES, EmitConfig(write_manifest=True), stream=io.StringIO())


def test_earlier_output_survives_later_failure(tmp_path):
    target = tmp_path / "api.md"

    def produce():
        yield make_extracted("a.js", "Alpha\n")
        raise ExtractError("cannot decode b.js")

    with pytest.raises(ExtractError):
        emit_files(produce(), EmitConfig(output_file=str(target)))
    assert target.read_text(encoding="utf-8") == "Alpha\n"


def test_output_name():
    assert output_name("a.c") == "a.c.md"
    assert output_name("src/a.c", ".txt") == "src/a.c.txt"
    assert output_name("../a.c") == "a.c.md"
    with pytest.raises(EmitError):
        output_name("..")


def test_output_dir_rejects_name_clash(tmp_path):
    out = tmp_path / "docs"
    files = [make_extracted("x.js", "First\n"), make_extracted("./x.js", "Second\n")]
    with pytest.raises(EmitError, match="would both be written to x.js.md"):
        emit_files(files, EmitConfig(output_dir=str(out)))
    assert (out / "x.js.md").read_text(encoding="utf-8") == "First\n"


def test_manifest_write_failure_is_emit_error(tmp_path):
    out = tmp_path / "docs"
    (out / "manifest.json").mkdir(parents=True)
    with pytest.raises(EmitError, match="Failed to write manifest"):
        emit_files(FILES, EmitConfig(output_dir=str(out), write_manifest=True))
    assert (out / "a.js.md").read_text(encoding="utf-8") == "Alpha\n"


class BrokenStream(io.StringIO):
    def write(self, text):
        raise BrokenPipeError("pipe closed")


def test_stream_write_failure_is_emit_error():
    with pytest.raises(EmitError, match="Failed to write to <stdout>"):
        emit_files(FILES, stream=BrokenStream())
