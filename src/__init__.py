"""
embtext - templates with embedded Python

Compiles <% %> templates into Python programs once and renders them
against a namespace of variables, as plain text or as HTML with automatic
escaping.
"""

__version__ = "1.0.0"

from .lib import (
    Template,
    HtmlTemplate,
    Text,
    Html,
    TemplateContext,
    HtmlTemplateContext,
    html_escape,
    EmbtextError,
    SourceLoadError,
    CompileError,
    TemplateSyntaxError,
    EvaluationError,
    TemplateRenderError,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "Template",
    "HtmlTemplate",
    "Text",
    "Html",
    "TemplateContext",
    "HtmlTemplateContext",
    "html_escape",
    "EmbtextError",
    "SourceLoadError",
    "CompileError",
    "TemplateSyntaxError",
    "EvaluationError",
    "TemplateRenderError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
