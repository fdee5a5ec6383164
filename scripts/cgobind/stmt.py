"""
Statement model module

Typed Go statement nodes and the renderer that writes them through
CodeGen. Expressions stay plain strings.
"""

from dataclasses import dataclass
from typing import Union

from .codegen import CodeGen


@dataclass(frozen=True)
class Define:
    """name := value"""
    name: str
    value: str


@dataclass(frozen=True)
class Assign:
    """target = value"""
    target: str
    value: str


@dataclass(frozen=True)
class VarDecl:
    """var name type"""
    name: str
    type: str


@dataclass(frozen=True)
class Defer:
    call: str


@dataclass(frozen=True)
class ExprStmt:
    expr: str


@dataclass(frozen=True)
class If:
    cond: str
    body: tuple['Stmt', ...]


@dataclass(frozen=True)
class RangeLoop:
    """for key := range over { body }"""
    key: str
    over: str
    body: tuple['Stmt', ...]


@dataclass(frozen=True)
class Return:
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class Blank:
    """Separator line"""


Stmt = Union[Define, Assign, VarDecl, Defer, ExprStmt, If, RangeLoop, Return, Blank]

BLANK = Blank()


def render_statements(stmts: list[Stmt], gen: CodeGen):
    """Render a statement sequence

    Blank separators are dropped at the start and end of a block and when
    they would follow another blank.
    """
    pending_blank = False
    emitted = False
    for stmt in stmts:
        if isinstance(stmt, Blank):
            pending_blank = emitted
            continue
        if pending_blank:
            gen.line()
            pending_blank = False
        _render(stmt, gen)
        emitted = True


def _render(stmt: Stmt, gen: CodeGen):
    if isinstance(stmt, Define):
        gen.line(f'{stmt.name} := {stmt.value}')
    elif isinstance(stmt, Assign):
        gen.line(f'{stmt.target} = {stmt.value}')
    elif isinstance(stmt, VarDecl):
        gen.line(f'var {stmt.name} {stmt.type}')
    elif isinstance(stmt, Defer):
        gen.line(f'defer {stmt.call}')
    elif isinstance(stmt, ExprStmt):
        gen.line(stmt.expr)
    elif isinstance(stmt, If):
        with gen.block(f'if {stmt.cond} {{'):
            render_statements(list(stmt.body), gen)
    elif isinstance(stmt, RangeLoop):
        with gen.block(f'for {stmt.key} := range {stmt.over} {{'):
            render_statements(list(stmt.body), gen)
    elif isinstance(stmt, Return):
        if stmt.values:
            gen.line('return ' + ', '.join(stmt.values))
        else:
            gen.line('return')
    else:
        raise TypeError(f'unknown statement: {stmt!r}')
