"""
Render-time variable namespace

A context holds the named variables that directive code sees as plain
names, plus the escape() used by <%= %> expressions. Template.render()
builds a fresh context from a mapping, or uses a caller-supplied object
as-is when it already provides the ContextLike methods.

Example:
    >>> ctx = HtmlTemplateContext({'title': 'B&B'})
    >>> ctx.get('title')
    'B&B'
    >>> ctx.escape(ctx['title'])
    'B&amp;B'
"""

from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Protocol, Tuple, runtime_checkable

from .escaper import Escaper, html_escape, text_escape


@runtime_checkable
class ContextLike(Protocol):
    """
    Capability set required from a ready-made render context

    Variable names are read from keys() when the object has one, otherwise
    from its public instance attributes.
    """

    def get(self, name: str, default: Any = None) -> Any: ...

    def set(self, name: str, value: Any) -> None: ...

    def escape(self, value: Any) -> str: ...


class TemplateContext:
    """
    Variable store for one render call

    Bindings are readable by mapping access (ctx['x']), get(), and as
    attributes (ctx.x). Template code can store values with
    _context.set(); other names it binds stay local to the render.
    """

    escaper: Escaper = staticmethod(text_escape)

    def __init__(self, vars: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        self._vars: Dict[str, Any] = {}
        if vars:
            for name, value in vars.items():
                self.set(name, value)
        for name, value in kwargs.items():
            self.set(name, value)

    def get(self, name: str, default: Any = None) -> Any:
        return self._vars.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self._vars[str(name)] = value

    def escape(self, value: Any) -> str:
        return self.escaper(value)

    def keys(self) -> Iterable[str]:
        return self._vars.keys()

    def items(self) -> Iterable[Tuple[str, Any]]:
        return self._vars.items()

    def __getitem__(self, name: str) -> Any:
        return self._vars[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __contains__(self, name: object) -> bool:
        return name in self._vars

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails
        try:
            return self.__dict__['_vars'][name]
        except KeyError:
            raise AttributeError(name) from None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._vars!r})"


class HtmlTemplateContext(TemplateContext):
    """Context whose escape() applies HTML entity escaping"""

    escaper: Escaper = staticmethod(html_escape)
