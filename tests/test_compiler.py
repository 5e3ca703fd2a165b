"""
Compiler tests - instruction translation, whitespace policy, block structure
"""

import dataclasses

import pytest

from embtext.lib.compiler import Compiler
from embtext.lib.errors import CompileError, TemplateSyntaxError
from embtext.lib.tokenizer import source_tokenize
from embtext.models.program import EmitExpr, EmitLiteral, RunStatement
from embtext.models.segments import Directive


def instructions_for(source):
    return Compiler(source_tokenize(source)).instructions_build()


def program_for(source, **kwargs):
    return Compiler(source_tokenize(source), **kwargs).compile()


class TestTranslation:
    """Test one instruction kind per directive kind"""

    def test_literal(self):
        """Literal segment becomes EmitLiteral"""
        assert instructions_for("plain") == [EmitLiteral("plain", 1)]

    def test_statement(self):
        """Statement becomes RunStatement"""
        assert instructions_for("a<% x = 1 %>")[1] == RunStatement("x = 1", 1)

    def test_escaped_expression(self):
        """<%= %> escapes"""
        assert instructions_for("a<%= x %>")[1] == EmitExpr("x", True, 1)

    def test_raw_expression(self):
        """<%== %> does not escape"""
        assert instructions_for("a<%== x %>")[1] == EmitExpr("x", False, 1)

    def test_inline_comment_without_newlines(self):
        """A one-line comment produces nothing"""
        assert instructions_for("a<%# note %>b") == [EmitLiteral("a", 1), EmitLiteral("b", 1)]

    def test_comment_newlines(self):
        """Comment body newlines become literal newlines"""
        assert instructions_for("a<%# x\ny\nz %>b") == [
            EmitLiteral("a", 1),
            EmitLiteral("\n\n", 1),
            EmitLiteral("b", 3),
        ]

    def test_unknown_kind(self):
        """A directive of unknown kind is an internal error"""
        bogus = Directive(kind="?", code="x", lspace=None, rspace=None, lineno=4)
        with pytest.raises(CompileError) as excinfo:
            Compiler([bogus], filename="t").instructions_build()
        assert excinfo.value.lineno == 4


class TestWhitespacePolicy:
    """Test trimming of own-line statements"""

    def test_own_line_statement(self):
        """Indentation and newline of a statement-only line are dropped"""
        assert instructions_for("  <% x = 1 %>\n") == [RunStatement("x = 1", 1)]

    def test_own_line_comment(self):
        """A comment-only line keeps its indentation and line break"""
        assert instructions_for("  <%# note %>\n") == [EmitLiteral("  ", 1), EmitLiteral("\n", 1)]

    def test_own_line_multiline_comment(self):
        """Indentation, body newlines, then the line break"""
        assert instructions_for("  <%# a\nb %>\n") == [
            EmitLiteral("  ", 1),
            EmitLiteral("\n", 1),
            EmitLiteral("\n", 2),
        ]

    def test_statement_with_text_after(self):
        """Leading space is literal when the line continues"""
        assert instructions_for("  <% x = 1 %>y\n") == [
            EmitLiteral("  ", 1),
            RunStatement("x = 1", 1),
            EmitLiteral("y\n", 1),
        ]

    def test_statement_with_text_before(self):
        """Trailing newline is literal when text precedes the statement"""
        assert instructions_for("y<% x = 1 %>\n") == [
            EmitLiteral("y", 1),
            RunStatement("x = 1", 1),
            EmitLiteral("\n", 1),
        ]

    def test_expression_never_trims(self):
        """Expressions keep surrounding whitespace"""
        assert instructions_for("  <%= x %>\n") == [
            EmitLiteral("  ", 1),
            EmitExpr("x", True, 1),
            EmitLiteral("\n", 1),
        ]


class TestCodeGeneration:
    """Test generated Python source"""

    def test_literal_quoting(self):
        """Quotes and backslashes survive as literal text"""
        program = program_for("it's \"q\" \\n")
        assert program.source == "_buf.append('it\\'s \"q\" \\\\n')\n"

    def test_loop(self):
        """Block keyword opens an indented block; end closes it"""
        program = program_for("<% for x in xs %>\n<%= x %>\n<% end %>\n")
        assert program.source == (
            "for x in xs:\n"
            "    _buf.append(_escape(x))\n"
            "    _buf.append('\\n')\n"
        )

    def test_explicit_colon(self):
        """A trailing colon is accepted"""
        program = program_for("<% for x in xs: %><%== x %><% end %>")
        assert program.source == "for x in xs:\n    _buf.append(_str(x))\n"

    def test_empty_block_gets_pass(self):
        """A block without body is filled with pass"""
        program = program_for("<% for x in xs %><% end %>")
        assert program.source == "for x in xs:\n    pass\n"

    def test_if_elif_else(self):
        """Continuation keywords close and reopen blocks"""
        program = program_for("<% if n > 0 %>pos<% elif n < 0 %>neg<% else %>zero<% end %>")
        assert program.source == (
            "if n > 0:\n"
            "    _buf.append('pos')\n"
            "elif n < 0:\n"
            "    _buf.append('neg')\n"
            "else:\n"
            "    _buf.append('zero')\n"
        )

    def test_named_end(self):
        """endfor/endif close blocks like end"""
        program = program_for("<% if a %><% for x in a %>x<% endfor %><% endif %>")
        assert program.source == "if a:\n    for x in a:\n        _buf.append('x')\n"

    def test_one_line_compound_is_not_a_block(self):
        """`if x: y` is an ordinary statement"""
        program = program_for("<% if flag: n = 1 %>")
        assert program.source == "if flag: n = 1\n"

    def test_multiline_statement(self):
        """Multi-line code is dedented and kept line by line"""
        program = program_for("<%\n    total = 0\n    for n in nums:\n        total += n\n%>")
        assert program.source == "total = 0\nfor n in nums:\n    total += n\n"

    def test_multiline_string_expression_in_block(self):
        """Continuation lines of an expression are not re-indented"""
        program = program_for('<% if True %>\n<%= """x\ny""" %>\n<% end %>\n')
        assert program.source == (
            'if True:\n'
            '    _buf.append(_escape("""x\n'
            'y"""))\n'
            "    _buf.append('\\n')\n"
        )

    def test_multiline_string_statement_in_block(self):
        """A string spanning lines keeps its exact text inside a block"""
        program = program_for('<% for x in xs %>\n<% s = """a   \n  b""" %>\n<% end %>\n')
        assert program.source == 'for x in xs:\n    s = """a   \n  b"""\n'

    def test_bracket_continuation_opens_block(self):
        """A block header split over lines gets its colon on the last line"""
        program = program_for("<% for x in [1,\n        2] %><%= x %><% end %>")
        assert program.source == (
            "for x in [1,\n"
            "        2]:\n"
            "    _buf.append(_escape(x))\n"
        )

    def test_empty_statement_and_expression(self):
        """Empty directives generate no code"""
        program = program_for("a<% %><%= %>b")
        assert program.source == "_buf.append('a')\n_buf.append('b')\n"

    def test_expression_with_comment(self):
        """A # inside an expression does not break the generated call"""
        program = program_for("<%= x  # the value %>")
        assert program.code is not None

    def test_linemap(self):
        """Generated lines map back to template lines"""
        program = program_for("<h1><%= title %></h1>\n<% for i in items %>\n  <p><%= i %></p>\n<% end %>\n")
        # h1 literal, title, </h1>, for, <p> literal, i, </p>
        assert program.linemap == {1: 1, 2: 1, 3: 1, 4: 2, 5: 3, 6: 3, 7: 3}


class TestProgram:
    """Test the Program value"""

    def test_immutable(self):
        """Programs cannot be modified after compilation"""
        program = program_for("x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            program.source = "y"

    def test_instruction_order(self):
        """Instructions keep render order, duplicates included"""
        program = program_for("a<%= x %>a<%= x %>")
        assert program.instructions == (
            EmitLiteral("a", 1), EmitExpr("x", True, 1),
            EmitLiteral("a", 1), EmitExpr("x", True, 1),
        )

    def test_filename(self):
        """Filename defaults to the configured name"""
        assert program_for("x").filename == "(embtext)"
        assert program_for("x", filename="page.html").filename == "page.html"


class TestBlockErrors:
    """Test block balancing errors"""

    def test_end_without_block(self):
        """end with nothing open is a syntax error at its line"""
        with pytest.raises(TemplateSyntaxError) as excinfo:
            program_for("a\n<% end %>\n")
        assert excinfo.value.lineno == 2

    def test_else_without_block(self):
        """else with nothing open is a syntax error"""
        with pytest.raises(TemplateSyntaxError):
            program_for("<% else %>")

    def test_unclosed_block(self):
        """A block left open reports where it was opened"""
        with pytest.raises(TemplateSyntaxError) as excinfo:
            program_for("x\n\n<% for i in xs %>\n<%= i %>\n")
        assert excinfo.value.lineno == 3
        assert "for" in str(excinfo.value)

    def test_unclosed_block_lenient(self):
        """With strict_blocks off, open blocks close at end of input"""
        program = program_for("<% for i in xs %><%= i %>", strict_blocks=False)
        assert program.source == "for i in xs:\n    _buf.append(_escape(i))\n"

    def test_python_syntax_error(self):
        """Invalid Python reports the template line"""
        with pytest.raises(TemplateSyntaxError) as excinfo:
            program_for("line1\n<%= 1 + %>\n", filename="page.txt")
        assert excinfo.value.lineno == 2
        assert excinfo.value.filename == "page.txt"
        assert isinstance(excinfo.value.__cause__, SyntaxError)

    def test_syntax_error_is_compile_error(self):
        """TemplateSyntaxError is a CompileError"""
        assert issubclass(TemplateSyntaxError, CompileError)
