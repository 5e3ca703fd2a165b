"""
embtext - compile <% %> templates with embedded Python into reusable programs

Plain-text and HTML templates, with automatic escaping of <%= %> output in
HTML mode.
"""

__version__ = "1.0.0"

from .errors import (
    EmbtextError,
    SourceLoadError,
    CompileError,
    TemplateSyntaxError,
    EvaluationError,
    TemplateRenderError,
)
from .escaper import html_escape, text_escape
from .context import ContextLike, TemplateContext, HtmlTemplateContext
from .tokenizer import Tokenizer, source_tokenize
from .compiler import Compiler
from .engine import program_run
from .template import Template, HtmlTemplate, Text, Html
from .lexer import EmbtextLexer, HtmlEmbtextLexer, template_highlight
from .log import LOG, state_connectToLogger

__all__ = [
    "EmbtextError",
    "SourceLoadError",
    "CompileError",
    "TemplateSyntaxError",
    "EvaluationError",
    "TemplateRenderError",
    "html_escape",
    "text_escape",
    "ContextLike",
    "TemplateContext",
    "HtmlTemplateContext",
    "Tokenizer",
    "source_tokenize",
    "Compiler",
    "program_run",
    "Template",
    "HtmlTemplate",
    "Text",
    "Html",
    "EmbtextLexer",
    "HtmlEmbtextLexer",
    "template_highlight",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
