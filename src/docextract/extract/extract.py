# extract.py
# docextract – Extract subsystem: doc-comment tokenizer, state machine and normalizer

import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, NamedTuple, Optional, Tuple


# ============================================================
# Exceptions
# ============================================================

class ExtractError(Exception):
    pass


# ============================================================
# Tokens
# ============================================================

DOC_OPEN = "/**"
COMMENT_OPEN = "/*"
COMMENT_CLOSE = "*/"

LINE_BOUNDARY = "\n"
DOUBLE_QUOTE = '"'
SINGLE_QUOTE = "'"
DECORATION = "*"


# ============================================================
# Options
# ============================================================

class QuotePolicy(Enum):
    """How quote characters are tracked."""
    LITERAL = "literal"                        # toggle everywhere, even inside comments
    SUSPEND_IN_COMMENT = "suspend-in-comment"  # quotes are plain text while depth > 0


class IndentPolicy(Enum):
    """How a first-significant-character index of 0 is treated during auto-detection."""
    LEGACY = "legacy"  # 0 means "no minimum observed yet"
    STRICT = "strict"  # 0 is a real minimum


@dataclass
class ExtractOptions:
    """Options for a single extraction run."""
    indent_offset: Optional[int] = None
    quote_policy: QuotePolicy = QuotePolicy.LITERAL
    indent_policy: IndentPolicy = IndentPolicy.LEGACY
    flush_trailing_row: bool = True

    def __post_init__(self):
        if self.indent_offset is not None and self.indent_offset < 0:
            raise ValueError(f"indent_offset must be non-negative, got {self.indent_offset}")


# ============================================================
# Output Format
# ============================================================

@dataclass
class ExtractedFile:
    """Result of extracting doc comments from a single file."""
    path: str
    text: str
    encoding: str
    size_bytes: int
    line_count: int
    row_count: int
    block_count: int
    metadata: dict = field(default_factory=dict)


# ============================================================
# Tokenizer
# ============================================================

def tokenize(text: str) -> Iterator[str]:
    """
    Split text into tokens.

    Comment delimiters become single multi-character tokens; every other
    character is yielded on its own. The stream knows nothing about
    strings or nesting.

    Args:
        text: Raw source text

    Yields:
        DOC_OPEN, COMMENT_OPEN, COMMENT_CLOSE or a single character
    """
    pos = 0
    length = len(text)

    while pos < length:
        char = text[pos]
        if char == "/" and text.startswith(DOC_OPEN, pos):
            yield DOC_OPEN
            pos += 3
        elif char == "/" and text.startswith(COMMENT_OPEN, pos):
            yield COMMENT_OPEN
            pos += 2
        elif char == "*" and text.startswith(COMMENT_CLOSE, pos):
            yield COMMENT_CLOSE
            pos += 2
        else:
            yield char
            pos += 1


# ============================================================
# State Machine
# ============================================================

class ParseState(NamedTuple):
    """Immutable state threaded through the token fold."""
    dquote: bool = False
    squote: bool = False
    depth: int = 0
    active: bool = False
    buffer: str = ""
    blocks: int = 0

    @property
    def in_string(self) -> bool:
        return self.dquote or self.squote


def strip_decoration(row: str) -> str:
    """Drop everything up to and including the first '*', then terminate the line."""
    index = row.find(DECORATION)
    if index != -1:
        row = row[index + 1:]
    return row + LINE_BOUNDARY


def _tracks_quotes(state: ParseState, policy: QuotePolicy) -> bool:
    if policy == QuotePolicy.SUSPEND_IN_COMMENT:
        return state.depth <= 0
    return True


def _open_level(state: ParseState) -> ParseState:
    return state._replace(depth=state.depth + 1)


def _close_level(state: ParseState) -> ParseState:
    depth = state.depth - 1
    if depth == 0:
        return state._replace(depth=depth, active=False)
    return state._replace(depth=depth)


def step(
    state: ParseState,
    token: str,
    quote_policy: QuotePolicy = QuotePolicy.LITERAL,
) -> Tuple[ParseState, Optional[str]]:
    """
    Apply one token to the parse state.

    Args:
        state: Current state
        token: Next token from tokenize()
        quote_policy: Quote tracking rule

    Returns:
        Tuple of (new state, completed row or None)
    """
    if token == DOUBLE_QUOTE and _tracks_quotes(state, quote_policy):
        if not state.squote:
            state = state._replace(dquote=not state.dquote)
        return state, None

    if token == SINGLE_QUOTE and _tracks_quotes(state, quote_policy):
        if not state.dquote:
            state = state._replace(squote=not state.squote)
        return state, None

    if token == DOC_OPEN:
        if state.in_string:
            return state, None
        return _open_level(state)._replace(active=True, blocks=state.blocks + 1), None

    if token == COMMENT_OPEN:
        if state.in_string:
            return state, None
        return _open_level(state), None

    if token == COMMENT_CLOSE:
        if state.in_string:
            return state, None
        return _close_level(state), None

    if token == LINE_BOUNDARY:
        if state.active:
            return state._replace(buffer=""), strip_decoration(state.buffer)
        return state, None

    if state.active:
        return state._replace(buffer=state.buffer + token), None
    return state, None


def run_machine(
    tokens: Iterable[str],
    options: Optional[ExtractOptions] = None,
) -> Tuple[List[str], ParseState]:
    """
    Fold the token stream through step() and collect rows.

    Returns:
        Tuple of (rows, final state)
    """
    if options is None:
        options = ExtractOptions()

    state = ParseState()
    rows: List[str] = []

    for token in tokens:
        state, row = step(state, token, options.quote_policy)
        if row is not None:
            rows.append(row)

    if state.buffer and options.flush_trailing_row:
        rows.append(strip_decoration(state.buffer))

    return rows, state


def extract_rows(tokens: Iterable[str], options: Optional[ExtractOptions] = None) -> List[str]:
    """Collect the doc-comment rows of a token stream, each ending in a newline."""
    rows, _ = run_machine(tokens, options)
    return rows


# ============================================================
# Normalizer
# ============================================================

def first_significant_index(row: str) -> Optional[int]:
    """Index of the first character that is neither a space nor a newline."""
    for i, char in enumerate(row):
        if char != " " and char != LINE_BOUNDARY:
            return i
    return None


def detect_indent(rows: Iterable[str], policy: IndentPolicy = IndentPolicy.LEGACY) -> int:
    """
    Find the common indentation width of the rows.

    Under IndentPolicy.LEGACY a running minimum of 0 counts as unset, so
    the next informative row replaces it.

    Args:
        rows: Rows produced by extract_rows()
        policy: Zero-index handling

    Returns:
        Trim width (0 when no row has significant content)
    """
    minimum: Optional[int] = None

    for row in rows:
        index = first_significant_index(row)
        if index is None:
            continue
        if policy == IndentPolicy.LEGACY and minimum == 0:
            minimum = index
        elif minimum is None or index < minimum:
            minimum = index

    return minimum or 0


def trim_row(row: str, width: int) -> str:
    if len(row) <= width:
        return row
    return row[width:]


def normalize_rows(
    rows: List[str],
    indent_offset: Optional[int] = None,
    policy: IndentPolicy = IndentPolicy.LEGACY,
) -> str:
    """
    Remove the common indentation from every row and join them.

    Args:
        rows: Rows produced by extract_rows()
        indent_offset: Explicit trim width; auto-detected when None
        policy: Zero-index handling for auto-detection

    Returns:
        Normalized text
    """
    width = indent_offset if indent_offset is not None else detect_indent(rows, policy)
    return "".join(trim_row(row, width) for row in rows)


# ============================================================
# Main Extract Function
# ============================================================

def extract(text: str, options: Optional[ExtractOptions] = None) -> str:
    """
    Extract and normalize all doc comments in text.

    Args:
        text: Raw source text
        options: Extraction options (defaults when not provided)

    Returns:
        Normalized documentation text ("" when there is none)
    """
    if options is None:
        options = ExtractOptions()

    rows = extract_rows(tokenize(text), options)
    return normalize_rows(rows, options.indent_offset, options.indent_policy)


def extract_file(
    path: str,
    content: bytes,
    encoding: str = "utf-8",
    options: Optional[ExtractOptions] = None,
    normalize_newlines: bool = True,
) -> ExtractedFile:
    """
    Decode a file and extract its doc comments.

    Args:
        path: Virtual file path
        content: Raw file bytes
        encoding: Text encoding of content
        options: Extraction options
        normalize_newlines: Convert \\r\\n and \\r line endings to \\n

    Returns:
        ExtractedFile with normalized text and counts
    """
    if options is None:
        options = ExtractOptions()

    try:
        text = content.decode(encoding)
    except LookupError:
        raise ExtractError(f"Unknown encoding {encoding!r} for {path}")
    except UnicodeDecodeError as e:
        raise ExtractError(f"Cannot decode {path} as {encoding}: {e}")

    if normalize_newlines:
        text = text.replace("\r\n", "\n").replace("\r", "\n")

    rows, state = run_machine(tokenize(text), options)
    normalized = normalize_rows(rows, options.indent_offset, options.indent_policy)

    metadata = {}
    if state.depth > 0:
        metadata["unterminated"] = True

    return ExtractedFile(
        path=path,
        text=normalized,
        encoding=encoding,
        size_bytes=len(content),
        line_count=text.count("\n") + 1 if text else 0,
        row_count=len(rows),
        block_count=state.blocks,
        metadata=metadata,
    )


def extract_files(
    file_entries: list,
    encoding: str = "utf-8",
    options: Optional[ExtractOptions] = None,
    strict: bool = True,
) -> Iterator[ExtractedFile]:
    """
    Extract doc comments from ingested files, one at a time.

    Files are decoded lazily so that output for earlier files can be
    written before a later file fails.

    Args:
        file_entries: List of FileEntry objects from ingest subsystem
        encoding: Text encoding of every file
        options: Extraction options
        strict: Raise on the first undecodable file instead of skipping it

    Yields:
        ExtractedFile objects in input order
    """
    for entry in file_entries:
        try:
            yield extract_file(entry.path, entry.content, encoding, options)
        except ExtractError as e:
            if strict:
                raise
            print(f"Warning: Failed to extract {entry.path}: {e}", file=sys.stderr)
            continue


# ============================================================
# Standalone Test
# ============================================================

if __name__ == "__main__":
    sample = "/**\n * Hello\n * World\n */\nfunction hello() {}\n"

    print("Testing extract subsystem...")
    print(repr(extract(sample)))
