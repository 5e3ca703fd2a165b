"""
Pygments lexers for embtext template source

Used by the command-line tool to show templates with syntax highlighting.

Token types:
- Comment.Preproc: <% %> markers, including the =, == and # kind marks
- Comment: body of <%# %> comments
- Python tokens: directive code (delegated to PythonLexer)
- Other: literal template text (re-lexed as HTML by HtmlEmbtextLexer)
"""

import re

from pygments import highlight
from pygments.formatters import get_formatter_by_name
from pygments.lexer import DelegatingLexer, Lexer, RegexLexer, bygroups, using
from pygments.lexers.html import HtmlLexer
from pygments.lexers.python import PythonLexer
from pygments.token import Comment, Other


class EmbtextLexer(RegexLexer):
    """
    Lexer for <% %> templates with Python directive code

    Example:
        <p><%= item %></p>

    Tokens:
        <p>      → Other
        <%=      → Comment.Preproc
        item     → Name
        %>       → Comment.Preproc
        </p>     → Other
    """

    name = 'Embtext'
    aliases = ['embtext']
    filenames = ['*.embt']
    flags = re.DOTALL

    tokens = {
        'root': [
            # Comments: body is not code
            (r'(<%#)(.*?)(%>)', bygroups(Comment.Preproc, Comment, Comment.Preproc)),

            # Expressions, escaped (=) and raw (==)
            (r'(<%==?)(.*?)(%>)', bygroups(Comment.Preproc, using(PythonLexer), Comment.Preproc)),

            # Statements
            (r'(<%)(.*?)(%>)', bygroups(Comment.Preproc, using(PythonLexer), Comment.Preproc)),

            # Literal text
            (r'[^<]+', Other),
            (r'<', Other),
        ],
    }


class HtmlEmbtextLexer(DelegatingLexer):
    """Embtext lexer whose literal text is highlighted as HTML"""

    name = 'HTML+Embtext'
    aliases = ['html+embtext']
    filenames = ['*.html.embt']

    def __init__(self, **options):
        super().__init__(HtmlLexer, EmbtextLexer, **options)


def get_lexer(html: bool = False) -> Lexer:
    """Lexer instance for plain or HTML templates"""
    return HtmlEmbtextLexer() if html else EmbtextLexer()


def template_highlight(source: str, html: bool = False, formatter: str = 'terminal') -> str:
    """
    Highlight template source

    Args:
        source: Template text
        html: Highlight literal text as HTML
        formatter: Pygments formatter name ('terminal', 'html', 'text', ...)

    Returns:
        Formatted source
    """
    return highlight(source, get_lexer(html), get_formatter_by_name(formatter))
