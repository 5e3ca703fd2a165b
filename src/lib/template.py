"""
Template objects: compiled program plus escaping policy

Example:
    >>> template = HtmlTemplate('''<h1><%= title %></h1>
    ... <% for item in items %>
    ...   <p><%= item %></p>
    ... <% end %>
    ... ''')
    >>> print(template.render({'title': 'Example', 'items': ['<A>', 'B&B']}), end='')
    <h1>Example</h1>
      <p>&lt;A&gt;</p>
      <p>B&amp;B</p>

    >>> template = HtmlTemplate.from_file('example.html.erb', 'utf-8')
"""

from pathlib import Path
from typing import Any, Mapping, Optional, Type, Union

from ..models.program import Program
from .compiler import Compiler
from .context import ContextLike, HtmlTemplateContext, TemplateContext
from .engine import program_run
from .escaper import Escaper
from .loader import source_load
from .tokenizer import Tokenizer


Bindings = Union[Mapping[str, Any], ContextLike, None]


class Template:
    """
    Plain-text template

    Compiles once at construction and renders any number of times. A
    Template is immutable and may be shared between threads; every render
    gets its own context.

    Args:
        source: Template text
        filename: Name used in error messages (defaults to the configured
                  default_filename)
        lineno: Line number of the first line of source
        escaper: Escaping policy overriding the class default for
                 contexts this template creates
    """

    context_class: Type[TemplateContext] = TemplateContext

    def __init__(
        self,
        source: str,
        filename: Optional[str] = None,
        lineno: int = 1,
        escaper: Optional[Escaper] = None,
    ) -> None:
        self._escaper = escaper
        segments = Tokenizer(source, lineno).tokenize()
        self._program: Program = Compiler(segments, filename).compile()

    @classmethod
    def from_string(cls, source: str, filename: Optional[str] = None,
                    lineno: int = 1, **kwargs: Any) -> "Template":
        return cls(source, filename, lineno, **kwargs)

    @classmethod
    def from_file(cls, path: Union[str, Path], encoding: Optional[str] = None,
                  **kwargs: Any) -> "Template":
        """
        Load and compile a template file

        Raises:
            SourceLoadError: The file cannot be read or decoded
        """
        source = source_load(path, encoding)
        return cls(source, str(path), **kwargs)

    load = from_file

    @property
    def program(self) -> Program:
        return self._program

    @property
    def source(self) -> str:
        """Generated Python source"""
        return self._program.source

    @property
    def filename(self) -> str:
        return self._program.filename

    def context_new(self, bindings: Optional[Mapping[str, Any]] = None) -> TemplateContext:
        """Fresh context of this template's variant holding bindings"""
        context = self.context_class(bindings)
        if self._escaper is not None:
            context.escaper = self._escaper
        return context

    def render(self, context: Bindings = None) -> str:
        """
        Render with a mapping of bindings or a ready context

        Args:
            context: Mapping (wrapped in a new context) or an object
                     providing get/set/escape (used as-is)

        Returns:
            Complete output text

        Raises:
            TemplateRenderError: Directive code failed
        """
        if context is None:
            ctxobj: ContextLike = self.context_new()
        elif isinstance(context, ContextLike):
            ctxobj = context
        elif isinstance(context, Mapping):
            ctxobj = self.context_new(context)
        else:
            raise TypeError(f"render() expects a mapping or a context, not {type(context).__name__}")
        return program_run(self._program, ctxobj)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.filename!r}>"


class HtmlTemplate(Template):
    """Template whose <%= %> output is HTML-escaped"""

    context_class: Type[TemplateContext] = HtmlTemplateContext


# Shortcuts
Text = Template
Html = HtmlTemplate
