"""
simplec_cfg.parser
==================

Front end for the simple-C subset: a parsimonious PEG grammar and a
visitor that turns the parse tree into :mod:`simplec_cfg.ast_nodes`.

Usage::

    from simplec_cfg.parser import parse

    unit = parse(open("prog.c").read(), "prog.c")
    for fn in unit.functions:
        print(fn.name, fn.params)

Every terminal rule consumes the whitespace and comments that follow it,
so the parse tree never needs a separate lexer pass.  Below statement level
the visitor keeps only the flat token list of the matched text.

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import contextlib
import logging
import re
import sys
from typing import Any, Iterator, List, Optional

from parsimonious.exceptions import IncompleteParseError, ParseError, VisitationError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from .ast_nodes import (
    CompoundStmt,
    Declaration,
    ForStmt,
    FunctionDef,
    IfStmt,
    ReturnStmt,
    SimpleStmt,
    Tokens,
    TranslationUnit,
    WhileStmt,
)
from .errors import CfgError, CfgErrorCodes, SourceSpan, SourceSyntaxError

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1: GRAMMAR
# ═══════════════════════════════════════════════════════════════════

SIMPLEC_GRAMMAR = r'''
    # ─────────────────────────────────────────────────────────────
    # Translation unit
    # ─────────────────────────────────────────────────────────────

    program         = _ decl* function+

    function        = type identifier lparen param_list? rparen compound_stmt
    param_list      = param (comma param)*
    param           = type identifier (lbrack rbrack)?

    decl            = type declarator (comma declarator)* semi
    declarator      = identifier (lbrack number rbrack)?

    # ─────────────────────────────────────────────────────────────
    # Statements
    # ─────────────────────────────────────────────────────────────

    compound_stmt   = lbrace decl* stmt* rbrace

    stmt            = compound_stmt / if_stmt / while_stmt / for_stmt
                    / return_stmt / assign_stmt / call_stmt / empty_stmt

    if_stmt         = kw_if lparen expr rparen stmt else_clause?
    else_clause     = kw_else stmt
    while_stmt      = kw_while lparen expr rparen stmt
    for_stmt        = kw_for lparen assign semi expr semi assign rparen stmt
    return_stmt     = kw_return expr? semi
    assign_stmt     = assign semi
    call_stmt       = call semi
    empty_stmt      = ";" _

    assign          = lvalue assign_op expr
    lvalue          = identifier (lbrack expr rbrack)?

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    expr            = and_expr (or_op and_expr)*
    and_expr        = eq_expr (and_op eq_expr)*
    eq_expr         = rel_expr (eq_op rel_expr)*
    rel_expr        = add_expr (rel_op add_expr)*
    add_expr        = mul_expr (add_op mul_expr)*
    mul_expr        = unary (mul_op unary)*
    unary           = (unary_op unary) / primary
    primary         = number / char_lit / string_lit / call / indexed
                    / identifier / paren_expr
    paren_expr      = lparen expr rparen
    call            = identifier lparen arg_list? rparen
    arg_list        = expr (comma expr)*
    indexed         = identifier lbrack expr rbrack

    # ─────────────────────────────────────────────────────────────
    # Terminals (each one swallows trailing layout)
    # ─────────────────────────────────────────────────────────────

    type            = type_word+
    type_word       = ~r"(?:int|float|char|void|double|long|short|unsigned|bool)\b" _

    kw_if           = ~r"if\b" _
    kw_else         = ~r"else\b" _
    kw_while        = ~r"while\b" _
    kw_for          = ~r"for\b" _
    kw_return       = ~r"return\b" _

    identifier      = ~r"(?!(?:int|float|char|void|double|long|short|unsigned|bool|if|else|while|for|return)\b)[A-Za-z_][A-Za-z0-9_]*" _
    number          = ~r"(?:0[xX][0-9a-fA-F]+|(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?)(?![A-Za-z0-9_])" _
    char_lit        = ~r"\x27(?:[^\x27\\\n]|\\.)\x27" _
    string_lit      = ~r"\x22(?:[^\x22\\\n]|\\.)*\x22" _

    or_op           = "||" _
    and_op          = "&&" _
    eq_op           = ~r"==|!=" _
    rel_op          = ~r"<=|>=|<|>" _
    add_op          = ~r"[+-]" _
    mul_op          = ~r"[*/%]" _
    unary_op        = ~r"-|!(?!=)" _
    assign_op       = ~r"=(?!=)" _

    lparen          = "(" _
    rparen          = ")" _
    lbrace          = "{" _
    rbrace          = "}" _
    lbrack          = "[" _
    rbrack          = "]" _
    comma           = "," _
    semi            = ";" _

    _               = ~r"(?:\s+|//[^\n]*|/\*[\s\S]*?\*/)*"
'''

GRAMMAR = Grammar(SIMPLEC_GRAMMAR)


# ═══════════════════════════════════════════════════════════════════
#  PART 2: TOKENIZER
# ═══════════════════════════════════════════════════════════════════

_TOKEN_RE = re.compile(
    r"""
      (?P<skip>\s+|//[^\n]*|/\*[\s\S]*?\*/)
    | (?P<tok>
          0[xX][0-9a-fA-F]+
        | (?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?
        | [A-Za-z_][A-Za-z0-9_]*
        | '(?:[^'\\\n]|\\.)'
        | "(?:[^"\\\n]|\\.)*"
        | \|\| | && | == | != | <= | >=
        | [-+*/%<>=!(){}\[\];,]
      )
    """,
    re.VERBOSE,
)


def tokenize(text: str) -> Tokens:
    """Split already-validated source text into tokens, dropping layout."""
    return [m.group("tok") for m in _TOKEN_RE.finditer(text) if m.group("tok")]


# ═══════════════════════════════════════════════════════════════════
#  PART 3: AST VISITOR (Parse Tree → AST)
# ═══════════════════════════════════════════════════════════════════


def _many(result: Any) -> List[Any]:
    """Children of a ``*``/``+`` node (the bare node when nothing matched)."""
    return result if isinstance(result, list) else []


def _optional(result: Any) -> Any:
    """Value of a ``?`` node, or ``None`` when it matched nothing."""
    if isinstance(result, list) and result:
        return result[0]
    return None


def _line_of(node: Node) -> int:
    return node.full_text.count("\n", 0, node.start) + 1


class SimpleCASTBuilder(NodeVisitor):
    """Transforms a parsimonious parse tree into a :class:`TranslationUnit`."""

    def generic_visit(self, node, visited_children):
        return visited_children or node

    # ----- translation unit -------------------------------------------------

    def visit_program(self, node, visited_children):
        _, decls, functions = visited_children
        return TranslationUnit(declarations=_many(decls), functions=_many(functions))

    def visit_function(self, node, visited_children):
        ret_type, name, _, params, _, body = visited_children
        return FunctionDef(
            name=name,
            ret_type=ret_type,
            params=_optional(params) or [],
            body=body,
            line=_line_of(node),
        )

    def visit_param_list(self, node, visited_children):
        return tokenize(node.text)

    def visit_decl(self, node, visited_children):
        return Declaration(tokens=tokenize(node.text))

    def visit_type(self, node, visited_children):
        return tokenize(node.text)

    def visit_identifier(self, node, visited_children):
        return tokenize(node.text)[0]

    # ----- statements -------------------------------------------------------

    def visit_compound_stmt(self, node, visited_children):
        _, decls, stmts, _ = visited_children
        return CompoundStmt(decls=_many(decls), stmts=_many(stmts))

    def visit_stmt(self, node, visited_children):
        return visited_children[0]

    def visit_if_stmt(self, node, visited_children):
        _, _, cond, _, then, orelse = visited_children
        return IfStmt(cond=cond, then=then, orelse=_optional(orelse))

    def visit_else_clause(self, node, visited_children):
        _, stmt = visited_children
        return stmt

    def visit_while_stmt(self, node, visited_children):
        _, _, cond, _, body = visited_children
        return WhileStmt(cond=cond, body=body)

    def visit_for_stmt(self, node, visited_children):
        _, _, init, _, cond, _, update, _, body = visited_children
        return ForStmt(init=init, cond=cond, update=update, body=body)

    def visit_return_stmt(self, node, visited_children):
        return ReturnStmt(tokens=tokenize(node.text))

    def _simple(self, node):
        return SimpleStmt(tokens=tokenize(node.text))

    def visit_assign_stmt(self, node, visited_children):
        return self._simple(node)

    def visit_call_stmt(self, node, visited_children):
        return self._simple(node)

    def visit_empty_stmt(self, node, visited_children):
        return self._simple(node)

    # ----- token-level constructs -------------------------------------------

    def visit_assign(self, node, visited_children):
        return tokenize(node.text)

    def visit_expr(self, node, visited_children):
        return tokenize(node.text)


# ═══════════════════════════════════════════════════════════════════
#  PART 4: PUBLIC API
# ═══════════════════════════════════════════════════════════════════

#: Interpreter recursion limit while parsing and traversing one file.
#: parsimonious spends ten to twenty frames per level of statement nesting.
RECURSION_LIMIT = 5000


def _excerpt(exc: ParseError) -> str:
    return exc.text[exc.pos:exc.pos + 20].split("\n", 1)[0]


def _too_deep(filename: str) -> SourceSyntaxError:
    return SourceSyntaxError(
        "statements are nested too deeply",
        code=CfgErrorCodes.NESTING_TOO_DEEP,
        span=SourceSpan(file=filename),
    )


@contextlib.contextmanager
def nesting_guard(filename: str) -> Iterator[None]:
    """Raise the recursion limit for the body and report overflow as CFG-1003.

    Parsing, tree visiting and CFG construction all recurse once per level
    of statement nesting.
    """
    sys_limit = sys.getrecursionlimit()
    if RECURSION_LIMIT > sys_limit:
        sys.setrecursionlimit(RECURSION_LIMIT)
    try:
        yield
    except RecursionError as exc:
        raise _too_deep(filename) from exc
    finally:
        sys.setrecursionlimit(sys_limit)


def parse(source: str, filename: str = "<string>") -> TranslationUnit:
    """Parse simple-C *source* into a :class:`TranslationUnit`.

    Raises
    ------
    SourceSyntaxError
        ``CFG-1001`` when the text does not match the grammar, ``CFG-1002``
        when a valid prefix is followed by text that cannot be parsed,
        ``CFG-1003`` when statements nest deeper than the parser can follow.
    """
    with nesting_guard(filename):
        try:
            tree = GRAMMAR.parse(source)
        except IncompleteParseError as exc:
            raise SourceSyntaxError(
                "could not parse past this point",
                code=CfgErrorCodes.TRAILING_INPUT,
                span=SourceSpan.from_parse_error(exc, filename),
                got=_excerpt(exc),
            ) from exc
        except ParseError as exc:
            raise SourceSyntaxError(
                "input is not a valid simple-C program",
                code=CfgErrorCodes.SYNTAX_ERROR,
                span=SourceSpan.from_parse_error(exc, filename),
                got=_excerpt(exc),
            ) from exc

        try:
            unit = SimpleCASTBuilder().visit(tree)
        except VisitationError as exc:
            if issubclass(exc.original_class, RecursionError):
                raise _too_deep(filename) from exc
            raise CfgError(
                f"failed to build syntax tree: {exc}", span=SourceSpan(file=filename)
            ) from exc

    unit.filename = filename
    logger.debug(
        "%s: parsed %d global declaration(s), %d function(s)",
        filename, len(unit.declarations), len(unit.functions),
    )
    return unit


__all__ = [
    "SIMPLEC_GRAMMAR",
    "GRAMMAR",
    "RECURSION_LIMIT",
    "tokenize",
    "SimpleCASTBuilder",
    "nesting_guard",
    "parse",
]
