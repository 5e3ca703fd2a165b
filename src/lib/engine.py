"""
Execution engine for compiled programs

Runs a Program's code object against a namespace built from a render
context. The generated code appends to `_buf`; escaped expressions go
through `_escape` (the context's escape()) and raw expressions through
`_str`. Errors raised by directive code are re-raised as
TemplateRenderError pointing at the template line of the directive.

Names bound by template code live only in the run's namespace. Code that
needs to hand a value back calls `_context.set(name, value)`.
"""

import builtins
from types import CodeType, TracebackType
from typing import Any, Dict, Optional

from ..models.program import Program, templateLine_lookup
from .context import ContextLike
from .errors import TemplateRenderError, TemplateSyntaxError
from .escaper import value_toText
from .log import LOG


def code_compile(source: str, filename: str, linemap: Dict[int, int]) -> CodeType:
    """
    Compile generated source to a code object

    Raises:
        TemplateSyntaxError: Directive code is not valid Python; the line
                             number refers to the template
    """
    try:
        return compile(source, filename, 'exec')
    except SyntaxError as exc:
        lineno = templateLine_lookup(linemap, exc.lineno)
        raise TemplateSyntaxError(exc.msg or 'invalid syntax', filename, lineno) from exc


def bindings_collect(context: ContextLike) -> Dict[str, Any]:
    """
    Variables a context exposes to template code

    Names come from keys() when the context has one, otherwise from its
    public instance attributes.
    """
    keys = getattr(context, 'keys', None)
    if callable(keys):
        return {name: context.get(name) for name in list(keys())}
    attributes = getattr(context, '__dict__', {})
    return {name: value for name, value in attributes.items() if not name.startswith('_')}


def namespace_build(context: ContextLike) -> Dict[str, Any]:
    """Fresh globals for one run: context bindings plus engine names"""
    namespace = bindings_collect(context)
    namespace.update(
        __builtins__=builtins,
        _buf=[],
        _escape=context.escape,
        _str=value_toText,
        _context=context,
    )
    return namespace


def errorLine_find(program: Program, tb: Optional[TracebackType]) -> Optional[int]:
    """Template line of the innermost traceback frame inside the program"""
    generated_lineno = None
    while tb is not None:
        if tb.tb_frame.f_code.co_filename == program.filename:
            generated_lineno = tb.tb_lineno
        tb = tb.tb_next
    return program.templateLine_find(generated_lineno) if generated_lineno else None


def program_run(program: Program, context: ContextLike) -> str:
    """
    Run a compiled program

    Args:
        program: Output of Compiler.compile()
        context: Bindings and escape() for this render

    Returns:
        The complete output text

    Raises:
        TemplateRenderError: Directive code raised; chained to the original
    """
    if program.code is None:
        raise ValueError(f"program for {program.filename} has no compiled code")

    namespace = namespace_build(context)
    try:
        exec(program.code, namespace)
    except Exception as exc:
        lineno = errorLine_find(program, exc.__traceback__)
        LOG(f"Render of {program.filename} failed at line {lineno}: {exc!r}", level=2)
        raise TemplateRenderError(program.filename, lineno, exc) from exc

    output = ''.join(namespace['_buf'])
    LOG(f"Rendered {program.filename}: {len(output)} characters", level=3)
    return output
