"""
Executable program models

A Program is the compiled form of a template: the ordered instruction
list, the Python source generated from it, the code object compiled from
that source, and the map from generated lines back to template lines.
"""

from dataclasses import dataclass, field
from types import CodeType
from typing import Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class EmitLiteral:
    """Append text verbatim"""
    text: str
    lineno: int = 1


@dataclass(frozen=True)
class EmitExpr:
    """Evaluate code and append its text form, escaped when escape is True"""
    code: str
    escape: bool
    lineno: int = 1


@dataclass(frozen=True)
class RunStatement:
    """Execute code for its effect; may open or close a block"""
    code: str
    lineno: int = 1


Instruction = Union[EmitLiteral, EmitExpr, RunStatement]


@dataclass(frozen=True)
class Program:
    """
    Compiled, immutable template program

    Attributes:
        instructions: Render-order instruction sequence
        source: Generated Python source
        filename: Template name used for code object and error messages
        linemap: Generated source line (1-based) -> template line
        code: Code object compiled from source (None until built)
    """
    instructions: Tuple[Instruction, ...]
    source: str
    filename: str
    linemap: Dict[int, int] = field(default_factory=dict)
    code: Optional[CodeType] = field(default=None, compare=False, repr=False)

    def templateLine_find(self, generated_lineno: int) -> Optional[int]:
        """Map a line of the generated source back to the template"""
        return templateLine_lookup(self.linemap, generated_lineno)


def templateLine_lookup(linemap: Dict[int, int], generated_lineno: Optional[int]) -> Optional[int]:
    """
    Look up the template line for a generated source line

    Lines without an entry map to the nearest preceding mapped line.
    """
    if generated_lineno is None:
        return None
    if generated_lineno in linemap:
        return linemap[generated_lineno]
    earlier = [n for n in linemap if n < generated_lineno]
    if not earlier:
        return None
    return linemap[max(earlier)]
