"""
Models package for embtext

Data structures passed between tokenizer, compiler, engine and CLI.
"""

from .state import ProgramState, pipeline
from .segments import Directive, DirectiveKind, Literal, Segment
from .program import EmitExpr, EmitLiteral, Instruction, Program, RunStatement

__all__ = [
    "ProgramState",
    "pipeline",
    "Directive",
    "DirectiveKind",
    "Literal",
    "Segment",
    "EmitExpr",
    "EmitLiteral",
    "Instruction",
    "Program",
    "RunStatement",
]
