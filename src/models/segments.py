"""
Tokenizer data models

Segments are the tokenizer's output: runs of literal text and the
directives found between <% and %> markers, in source order.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional, Union


class DirectiveKind(Enum):
    """
    Kinds of template directive, keyed by the marker after <%

    STATEMENT     <% code %>
    ESCAPED_EXPR  <%= code %>
    RAW_EXPR      <%== code %>
    COMMENT       <%# text %>
    """
    STATEMENT = ""
    ESCAPED_EXPR = "="
    RAW_EXPR = "=="
    COMMENT = "#"


@dataclass(frozen=True)
class Literal:
    """
    Verbatim text run

    Attributes:
        text: Text copied to output unchanged
        lineno: Template line where the text starts
    """
    text: str
    lineno: int


@dataclass(frozen=True)
class Directive:
    """
    One <% ... %> region of template source

    Attributes:
        kind: Which marker opened the directive
        code: Code between the markers, minus one optional space on each side
        lspace: Horizontal whitespace before the directive when it starts
                a line ("" at column 0), None when other text precedes it
        rspace: Trailing horizontal whitespace plus line break, None when
                the line continues after the directive
        lineno: Template line of the opening marker

    Example:
        For "  <% for x in xs %>\\n":
        Directive(kind=STATEMENT, code="for x in xs", lspace="  ",
                  rspace="\\n", lineno=1)
    """
    kind: DirectiveKind
    code: str
    lspace: Optional[str]
    rspace: Optional[str]
    lineno: int

    @property
    def leading_space(self) -> bool:
        return self.lspace is not None

    @property
    def trailing_space(self) -> bool:
        return self.rspace is not None

    @property
    def ownLine_is(self) -> bool:
        """True when nothing but whitespace shares the line with the directive"""
        return self.lspace is not None and self.rspace is not None


Segment = Union[Literal, Directive]
