"""
Tokenizer for <% %> template syntax

Splits template source into Literal and Directive segments that together
cover the whole input, left to right, with no gaps or overlaps.

Directive forms:
    <% code %>     statement
    <%= code %>    expression, escaped by the template's escaper
    <%== code %>   expression, inserted as-is
    <%# text %>    comment

One space directly inside each marker is not part of the code. A <% with
no closing %> is not a directive; the rest of the input stays literal.

Example:
    >>> segments = Tokenizer("Hi <%= name %>!\\n").tokenize()
    >>> [type(s).__name__ for s in segments]
    ['Literal', 'Directive', 'Literal']
    >>> segments[1].code
    'name'
"""

import re
from typing import Iterator, List

from ..models.segments import Directive, DirectiveKind, Literal, Segment
from .log import LOG


# Groups: leading indentation at line start, kind marker, code, trailing
# whitespace up to and including the line break
EMBED_PATTERN = re.compile(
    r'(^[ \t]*)?<%(==?|#)? ?(.*?) ?%>([ \t]*\r?\n)?',
    re.MULTILINE | re.DOTALL,
)


class Tokenizer:
    """
    Scanner producing the segment stream for one template source

    Args:
        source: Template text
        lineno: Line number of the first source line (for templates
                embedded in a larger file)
    """

    def __init__(self, source: str, lineno: int = 1) -> None:
        self.source = source
        self.lineno = lineno

    def segments_iter(self) -> Iterator[Segment]:
        """Yield segments in source order"""
        source = self.source
        pos = 0
        lineno = self.lineno

        for match in EMBED_PATTERN.finditer(source):
            start, end = match.span()
            text = source[pos:start]
            if text:
                yield Literal(text=text, lineno=lineno)
                lineno += text.count('\n')

            lspace, marker, code, rspace = match.groups()
            yield Directive(
                kind=DirectiveKind(marker or ''),
                code=code,
                lspace=lspace,
                rspace=rspace,
                lineno=lineno,
            )
            lineno += match.group(0).count('\n')
            pos = end

        rest = source[pos:]
        if rest:
            yield Literal(text=rest, lineno=lineno)

    def tokenize(self) -> List[Segment]:
        """
        Tokenize the whole source

        Returns:
            List of Literal and Directive segments in source order
        """
        segments = list(self.segments_iter())
        LOG(f"Tokenized {len(self.source)} characters into {len(segments)} segments", level=3)
        return segments


def source_tokenize(source: str, lineno: int = 1) -> List[Segment]:
    """Shortcut for Tokenizer(source, lineno).tokenize()"""
    return Tokenizer(source, lineno).tokenize()
