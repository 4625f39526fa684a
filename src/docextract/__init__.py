r"""
docextract – doc-comment extractor.

Pulls /** ... */ blocks out of C-style source files, strips the comment
decoration and removes the common indentation:

    >>> from docextract import extract
    >>> extract("/**\n * Hello\n * World\n */")
    '\nHello\nWorld\n\n'
"""

__version__ = "0.1.0"

from .extract import extract, ExtractOptions, IndentPolicy, QuotePolicy

__all__ = [
    "__version__",
    "extract",
    "ExtractOptions",
    "IndentPolicy",
    "QuotePolicy",
]
