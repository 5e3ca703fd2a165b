"""
Compiler from template segments to an executable Program

Compilation runs in two passes:
1. Translation: each segment becomes zero or more instructions
   (EmitLiteral, EmitExpr, RunStatement), applying the whitespace policy
   for statement directives
2. Code generation: instructions become Python source, one generated
   line per instruction line, with the block structure implied by
   statements such as `for x in xs` ... `end`

The generated source is compiled once by the engine; rendering runs the
resulting code object against a fresh namespace.

Whitespace policy:
    A statement alone on its line (only indentation before it, only
    whitespace and a line break after it) produces no output for that
    line. In every other position the surrounding whitespace is literal
    text. Comments and expressions never trim whitespace.

Example:
    >>> program = Compiler(source_tokenize("<% for x in xs %>\\n<%= x %>\\n<% end %>\\n")).compile()
    >>> print(program.source)
    for x in xs:
        _buf.append(_escape(x))
        _buf.append('\\n')
"""

import io
import re
import textwrap
import tokenize
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..config import appsettings
from ..models.program import EmitExpr, EmitLiteral, Instruction, Program, RunStatement
from ..models.segments import Directive, DirectiveKind, Literal, Segment
from .engine import code_compile
from .errors import CompileError, TemplateSyntaxError
from .log import LOG


# Statements that open an indented block. The trailing colon is optional.
BLOCK_START = re.compile(r'^(for|if|while|with|try|def|class)\b')
# Statements that close the current block and open a sibling
BLOCK_CONTINUE = re.compile(r'^(elif|else|except|finally)\b')
# Statements that close the current block
BLOCK_END = re.compile(r'^end(for|if|while|with|try|def|class)?$')
# Tokens that never begin a logical line
NON_LOGICAL_TOKENS = (tokenize.NL, tokenize.COMMENT, tokenize.INDENT, tokenize.DEDENT, tokenize.ENDMARKER)


class CodeBuilder:
    """
    Accumulates generated Python lines with indentation and a line map

    Every added line records the template line it came from so runtime
    errors can be reported against the template.
    """

    INDENT_STEP = 4

    def __init__(self) -> None:
        self.lines: List[str] = []
        self.linemap: Dict[int, int] = {}
        self.indent_level = 0
        # (keyword, template line, generated line count when opened)
        self.blocks: List[Tuple[str, int, int]] = []

    def __str__(self) -> str:
        return ''.join(line + '\n' for line in self.lines)

    def line_add(self, line: str, lineno: int, indent: bool = True) -> None:
        """
        Add one line at the current indentation

        Continuation lines (inside a string, brackets, or after a
        backslash) pass indent=False and are kept exactly as written.
        """
        self.lines.append(' ' * self.indent_level + line if indent else line)
        self.linemap[len(self.lines)] = lineno

    def block_open(self, keyword: str, lineno: int) -> None:
        self.blocks.append((keyword, lineno, len(self.lines)))
        self.indent_level += self.INDENT_STEP

    def block_close(self, lineno: int) -> Tuple[str, int]:
        """Close the innermost block, adding `pass` if it has no body"""
        keyword, opened_at, size_at_open = self.blocks.pop()
        if len(self.lines) == size_at_open:
            self.line_add('pass', lineno)
        self.indent_level -= self.INDENT_STEP
        return keyword, opened_at


class Compiler:
    """
    Compiles a segment stream into a Program

    Args:
        segments: Tokenizer output
        filename: Template name for the code object and error messages
        strict_blocks: Raise on blocks left open at end of input; when
                       False they are closed silently. Defaults to the
                       configured setting.
    """

    def __init__(
        self,
        segments: Iterable[Segment],
        filename: Optional[str] = None,
        strict_blocks: Optional[bool] = None,
    ) -> None:
        self.segments = list(segments)
        self.filename = filename or appsettings.default_filename
        self.strict_blocks = appsettings.strict_blocks if strict_blocks is None else strict_blocks

    def compile(self) -> Program:
        """
        Translate, generate and compile

        Returns:
            Immutable Program holding instructions, source, line map and
            compiled code object

        Raises:
            CompileError: A segment of unknown kind reached translation
            TemplateSyntaxError: Unbalanced blocks or invalid Python
        """
        instructions = self.instructions_build()
        builder = self.source_generate(instructions)
        source = str(builder)
        LOG(f"Compiled {self.filename}: {len(instructions)} instructions, "
            f"{len(builder.lines)} lines of Python", level=2)
        if appsettings.log_source:
            LOG(f"Generated source for {self.filename}:\n{source}", level=3)

        code = code_compile(source, self.filename, builder.linemap)
        return Program(
            instructions=tuple(instructions),
            source=source,
            filename=self.filename,
            linemap=dict(builder.linemap),
            code=code,
        )

    def instructions_build(self) -> List[Instruction]:
        """First pass: segments to instructions, in order"""
        instructions: List[Instruction] = []
        for segment in self.segments:
            if isinstance(segment, Literal):
                instructions.append(EmitLiteral(segment.text, segment.lineno))
            elif isinstance(segment, Directive):
                instructions.extend(self.directive_translate(segment))
            else:
                raise CompileError(f"unknown segment {segment!r}", self.filename)
        return instructions

    def directive_translate(self, directive: Directive) -> List[Instruction]:
        """
        Translate one directive to instructions

        Leading/trailing whitespace becomes EmitLiteral unless the directive
        is a statement on its own line.
        """
        kind = directive.kind
        lineno = directive.lineno
        trim = kind is DirectiveKind.STATEMENT and directive.ownLine_is

        if kind is DirectiveKind.STATEMENT:
            body: List[Instruction] = [RunStatement(directive.code, lineno)]
        elif kind is DirectiveKind.ESCAPED_EXPR:
            body = [EmitExpr(directive.code, True, lineno)]
        elif kind is DirectiveKind.RAW_EXPR:
            body = [EmitExpr(directive.code, False, lineno)]
        elif kind is DirectiveKind.COMMENT:
            newlines = directive.code.count('\n')
            body = [EmitLiteral('\n' * newlines, lineno)] if newlines else []
        else:
            raise CompileError(f"unreachable directive kind {kind!r}", self.filename, lineno)

        if trim:
            return body
        result: List[Instruction] = []
        if directive.lspace:
            result.append(EmitLiteral(directive.lspace, lineno))
        result.extend(body)
        if directive.rspace:
            end_lineno = lineno + directive.code.count('\n')
            result.append(EmitLiteral(directive.rspace, end_lineno))
        return result

    def source_generate(self, instructions: Iterable[Instruction]) -> CodeBuilder:
        """Second pass: instructions to Python source"""
        builder = CodeBuilder()
        for instruction in instructions:
            if isinstance(instruction, EmitLiteral):
                if instruction.text:
                    builder.line_add(f"_buf.append({instruction.text!r})", instruction.lineno)
            elif isinstance(instruction, EmitExpr):
                self.expr_generate(builder, instruction)
            elif isinstance(instruction, RunStatement):
                self.statement_generate(builder, instruction)
            else:
                raise CompileError(f"unknown instruction {instruction!r}", self.filename)

        if builder.blocks:
            keyword, opened_at, _ = builder.blocks[-1]
            if self.strict_blocks:
                raise TemplateSyntaxError(
                    f"'{keyword}' block is never closed (missing <% end %>)",
                    self.filename, opened_at,
                )
            while builder.blocks:
                builder.block_close(opened_at)
        return builder

    def expr_generate(self, builder: CodeBuilder, instruction: EmitExpr) -> None:
        code = instruction.code.strip()
        if not code:
            return
        first_lineno = instruction.lineno + instruction.code[:instruction.code.index(code[0])].count('\n')
        wrapper = '_escape' if instruction.escape else '_str'
        # A trailing comment would swallow the closing parentheses
        if '#' in code:
            code += '\n'
        lines = f"_buf.append({wrapper}({code}))".split('\n')
        # Everything after the first line is inside the parentheses
        for offset, line in enumerate(lines):
            builder.line_add(line, first_lineno + offset, indent=offset == 0)

    def statement_generate(self, builder: CodeBuilder, instruction: RunStatement) -> None:
        """
        Emit statement code, tracking blocks

        `end` closes a block; `else`/`elif`/`except`/`finally` close and
        reopen one; a block-starting statement opens one. Only lines that
        begin a logical Python line are re-indented.
        """
        lineno = instruction.lineno
        code = textwrap.dedent(instruction.code)
        continued = self.continuationLines_find(code)
        # (template line, text, begins a logical line)
        numbered: List[Tuple[int, str, bool]] = []
        for index, line in enumerate(code.split('\n')):
            if index in continued:
                numbered.append((lineno + index, line, False))
            elif line.strip():
                text = line if index + 1 in continued else line.rstrip()
                numbered.append((lineno + index, text, True))
        if not numbered:
            return

        first_lineno, first, _ = numbered[0]
        if len(numbered) == 1 and BLOCK_END.match(first.strip()):
            if not builder.blocks:
                raise TemplateSyntaxError(f"'{first.strip()}' without an open block",
                                          self.filename, first_lineno)
            builder.block_close(first_lineno)
            return

        continues = BLOCK_CONTINUE.match(first.lstrip()) is not None
        if continues:
            if not builder.blocks:
                raise TemplateSyntaxError(f"'{first.strip()}' without an open block",
                                          self.filename, first_lineno)
            builder.block_close(first_lineno)

        # The last logical line decides whether a block opens
        last_start = max(index for index, entry in enumerate(numbered) if entry[2])
        last = '\n'.join(text for _, text, _ in numbered[last_start:])
        opens = self.blockStart_is(last)
        if opens and not last.rstrip().endswith(':'):
            end_lineno, end_text, end_indent = numbered[-1]
            numbered[-1] = (end_lineno, end_text + ':', end_indent)

        for line_lineno, text, indent in numbered:
            builder.line_add(text, line_lineno, indent)

        if opens:
            head_lineno, head, _ = numbered[last_start]
            keyword = BLOCK_CONTINUE.match(head.lstrip()) or BLOCK_START.match(head.lstrip())
            builder.block_open(keyword.group(1) if keyword else 'block', head_lineno)

    @staticmethod
    def continuationLines_find(code: str) -> Set[int]:
        """
        Zero-based indexes of lines that continue an earlier logical line

        Covers multi-line strings, open brackets and backslash
        continuations. Code that does not tokenize yields no
        continuations; compiling it reports the real error.
        """
        continued: Set[int] = set()
        start: Optional[int] = None
        try:
            for token in tokenize.generate_tokens(io.StringIO(code).readline):
                if start is None:
                    if token.type in NON_LOGICAL_TOKENS:
                        continue
                    start = token.start[0]
                if token.type == tokenize.NEWLINE:
                    # rows are 1-based: rows start+1 .. NEWLINE row
                    continued.update(range(start, token.start[0]))
                    start = None
        except (tokenize.TokenError, SyntaxError):
            return set()
        return continued

    @staticmethod
    def blockStart_is(line: str) -> bool:
        """
        Whether a statement line opens an indented block

        True for lines ending in ':' and for block keywords whose colon was
        left out (`for x in xs`). One-line compounds such as `if x: y()`
        are ordinary statements.
        """
        stripped = line.strip()
        if stripped.endswith(':'):
            return True
        if BLOCK_CONTINUE.match(stripped):
            return True
        if not BLOCK_START.match(stripped):
            return False
        if stripped == 'try':
            return True
        try:
            compile(f"{stripped}:\n    pass\n", '<block-test>', 'exec')
        except SyntaxError:
            return False
        return True
