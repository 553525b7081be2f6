#!/usr/bin/env python3
"""
Markdown body inspection

Parses document bodies with markdown-it-py and measures the readable text
they contain. Markup (heading markers, emphasis, link targets, HTML) does not
count toward content length, so a body made only of headings or link lists is
recognized as short.
"""

from typing import Dict, List, Optional

from markdown_it import MarkdownIt
from markdown_it.token import Token


TEXT_CHILD_TYPES = ("text", "code_inline")
BREAK_CHILD_TYPES = ("softbreak", "hardbreak")
CODE_BLOCK_TYPES = ("fence", "code_block")


class MarkdownParser:
    """
    Markdown document parser with AST caching.

    Documents are often inspected by several checks in one run; the cache
    key is the document identifier.
    """

    def __init__(self):
        """Initialize parser with markdown-it-py instance."""
        self._md = MarkdownIt()
        self._cache: Dict[str, List[Token]] = {}

    def parse_markdown(self, text: str, cache_key: Optional[str] = None) -> List[Token]:
        """
        Parse markdown text to AST tokens.

        Args:
            text: Markdown text to parse
            cache_key: Optional key for caching parsed AST

        Returns:
            List of markdown-it-py tokens representing the AST
        """
        if cache_key and cache_key in self._cache:
            return self._cache[cache_key]

        tokens = self._md.parse(text)

        if cache_key:
            self._cache[cache_key] = tokens

        return tokens

    def clear_cache(self):
        """Clear the AST cache."""
        self._cache.clear()


# Global parser instance for module-level functions
_parser = MarkdownParser()


def parse_markdown(text: str, cache_key: Optional[str] = None) -> List[Token]:
    """Parse markdown text to AST tokens (module-level function)."""
    return _parser.parse_markdown(text, cache_key)


def extract_text(tokens: List[Token]) -> str:
    """
    Extract readable text from markdown AST tokens.

    Inline text and inline code are kept, line breaks become spaces, code
    blocks are kept verbatim. Each block ends up on its own line.

    Example:
        >>> extract_text(parse_markdown("# Title\\n\\nSee [the docs](https://x.com)."))
        'Title\\nSee the docs.'
    """
    blocks = []

    for token in tokens:
        if token.type == "inline":
            parts = []
            for child in token.children or []:
                if child.type in TEXT_CHILD_TYPES:
                    parts.append(child.content)
                elif child.type in BREAK_CHILD_TYPES:
                    parts.append(" ")
            blocks.append("".join(parts))
        elif token.type in CODE_BLOCK_TYPES:
            blocks.append(token.content.rstrip("\n"))

    return "\n".join(block for block in blocks if block)


def content_length(body: str, cache_key: Optional[str] = None) -> int:
    """
    Number of readable characters in a markdown body.

    Args:
        body: Markdown text following the frontmatter block
        cache_key: Optional key for caching the parsed AST

    Returns:
        Length of the extracted text, surrounding whitespace excluded
    """
    return len(extract_text(parse_markdown(body, cache_key)).strip())
