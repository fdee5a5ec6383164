"""
Function binding generation module

Generates Go wrapper functions that call through to C functions via cgo.
Every parameter and every result is first classified into a shape; each
shape has one declaration handler and one call argument handler.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, TYPE_CHECKING

from .codegen import CodeGen
from .stmt import (
    Stmt, Define, Assign, VarDecl, Defer, ExprStmt, If, RangeLoop, Return,
    BLANK, render_statements,
)
from .types import GoType, ShapeTags

if TYPE_CHECKING:
    from .extract import GoFunction, GoParam


class ParamShape(Enum):
    LENGTH_OF_SLICE = 'length_of_slice'
    SLICE = 'slice'
    OUTPUT = 'output'
    STRING_INPUT = 'string_input'
    PLAIN = 'plain'


class ReturnShape(Enum):
    NONE = 'none'
    OWNED_STRING = 'owned_string'
    BOOL = 'bool'
    CHAR_POINTER = 'char_pointer'
    TIMESTAMP = 'timestamp'
    OUT_ARGS_ONLY = 'out_args_only'
    CONVERTED = 'converted'


def classify_param(typ: GoType, tags: ShapeTags) -> ParamShape:
    """Pick the shape of a parameter"""
    if typ.length_of_slice is not None:
        return ParamShape.LENGTH_OF_SLICE
    if typ.is_slice:
        return ParamShape.SLICE
    if typ.is_return_argument:
        return ParamShape.OUTPUT
    if typ.primitive is not None and typ.pointer_level == 1 and typ.c_name in tags.char_kinds:
        return ParamShape.STRING_INPUT
    return ParamShape.PLAIN


def classify_return(typ: GoType, has_out_args: bool, tags: ShapeTags) -> ReturnShape:
    """Pick the shape of the result, checked in priority order"""
    if tags.is_void(typ) and not has_out_args:
        return ReturnShape.NONE
    if tags.is_owned_string(typ):
        return ReturnShape.OWNED_STRING
    if tags.is_bool(typ):
        return ReturnShape.BOOL
    if tags.is_char_pointer(typ) and typ.pointer_level == 1:
        return ReturnShape.CHAR_POINTER
    if tags.is_timestamp(typ):
        return ReturnShape.TIMESTAMP
    if tags.is_void(typ):
        return ReturnShape.OUT_ARGS_ONLY
    return ReturnShape.CONVERTED


@dataclass
class _Synthesis:
    """Pieces collected while walking one function"""
    declared: list[str] = field(default_factory=list)     # Go parameter list
    results: list[str] = field(default_factory=list)      # Go result types of output arguments
    decls: list[Stmt] = field(default_factory=list)       # declarations and slice marshalling
    conversions: list[Stmt] = field(default_factory=list)  # Go to C conversions before the call
    out_values: list[str] = field(default_factory=list)   # returned output argument values


class FuncGenerator:
    """Generates function wrapper bindings"""

    OWNED_RESULT = 'o'

    def __init__(self, tags: Optional[ShapeTags] = None):
        self.tags = tags or ShapeTags()
        self.declarers = {
            ParamShape.LENGTH_OF_SLICE: self._declare_nothing,
            ParamShape.SLICE: self._declare_slice,
            ParamShape.OUTPUT: self._declare_output,
            ParamShape.STRING_INPUT: self._declare_plain,
            ParamShape.PLAIN: self._declare_plain,
        }
        self.arguments = {
            ParamShape.LENGTH_OF_SLICE: self._arg_length,
            ParamShape.SLICE: self._arg_slice,
            ParamShape.OUTPUT: self._arg_output,
            ParamShape.STRING_INPUT: self._arg_string,
            ParamShape.PLAIN: self._arg_plain,
        }
        self.returns = {
            ReturnShape.NONE: self._return_none,
            ReturnShape.OWNED_STRING: self._return_owned_string,
            ReturnShape.BOOL: self._return_bool,
            ReturnShape.CHAR_POINTER: self._return_char_pointer,
            ReturnShape.TIMESTAMP: self._return_timestamp,
            ReturnShape.OUT_ARGS_ONLY: self._return_out_args,
            ReturnShape.CONVERTED: self._return_converted,
        }

    def render(self, func: 'GoFunction') -> str:
        """Generate wrapper source for a single function"""
        gen = CodeGen()
        self.generate(func, gen)
        return gen.output()

    def generate(self, func: 'GoFunction', gen: CodeGen):
        """Generate wrapper for a function"""
        params = list(func.params)
        # Zero-parameter functions stay free functions even with a designated receiver
        receiver = func.receiver if params else None
        if receiver is not None:
            params[0] = replace(params[0], name=receiver.name)

        syn = _Synthesis()
        shapes = [classify_param(p.type, self.tags) for p in params]

        for i, (param, shape) in enumerate(zip(params, shapes)):
            if i == 0 and receiver is not None:
                continue
            self.declarers[shape](param, syn)
        if syn.decls:
            syn.decls.append(BLANK)

        args = [self.arguments[shape](param, syn) for param, shape in zip(params, shapes)]
        if syn.conversions:
            syn.conversions.append(BLANK)
        call = f'C.{func.c_name}({", ".join(args)})'

        shape = classify_return(func.return_type, bool(syn.out_values), self.tags)
        result_types, tail = self.returns[shape](func.return_type, call, syn)

        if func.comment:
            gen.lines(*func.comment.splitlines())
        recv = f'({receiver.name} {self.tags.go_type(receiver.type)}) ' if receiver else ''
        header = f'func {recv}{func.name}({", ".join(syn.declared)}){self._results(result_types)} {{'
        with gen.block(header):
            render_statements(syn.decls + syn.conversions + tail, gen)
        gen.line()

    @staticmethod
    def _results(types: list[str]) -> str:
        if not types:
            return ''
        if len(types) == 1:
            return f' {types[0]}'
        return f' ({", ".join(types)})'

    # Declarations

    def _declare_nothing(self, param: 'GoParam', syn: _Synthesis):
        """Length parameters are filled from their slice"""

    def _declare_plain(self, param: 'GoParam', syn: _Synthesis):
        syn.declared.append(f'{param.name} {self.tags.go_type(param.type)}')

    def _slice_element(self, typ: GoType) -> str:
        base = 'C.char' if typ.c_name in self.tags.char_kinds else f'C.{typ.c_name}'
        return '*' * (typ.pointer_level - 1) + base

    def _declare_slice(self, param: 'GoParam', syn: _Synthesis):
        name = param.name
        typ = param.type
        elem = self._slice_element(typ)
        array, pointer = f'ca_{name}', f'cp_{name}'

        if self.tags.is_char_pointer(typ):
            body: tuple[Stmt, ...] = (
                Define('ci_str', f'C.CString({name}[i])'),
                Defer('C.free(unsafe.Pointer(ci_str))'),
                Assign(f'{array}[i]', 'ci_str'),
            )
        elif typ.primitive is not None:
            body = (Assign(f'{array}[i]', f'C.{typ.primitive}({name}[i])'),)
        else:
            body = (Assign(f'{array}[i]', f'{name}[i].c'),)

        syn.declared.append(f'{name} {self.tags.go_type(typ)}')
        syn.decls.extend([
            Define(array, f'make([]{elem}, len({name}))'),
            VarDecl(pointer, f'*{elem}'),
            If(f'len({name}) > 0', (Assign(pointer, f'&{array}[0]'),)),
            RangeLoop('i', name, body),
        ])

    def _declare_output(self, param: 'GoParam', syn: _Synthesis):
        name = param.name
        typ = param.type
        owned = self.tags.is_owned_string(typ)

        syn.results.append(self.tags.string if owned else typ.name)
        syn.decls.append(VarDecl(name, f'C.{typ.primitive}' if typ.primitive else typ.name))
        if owned:
            syn.decls.append(Defer(f'{name}.Dispose()'))

        if owned:
            syn.out_values.append(f'{name}.String()')
        elif self.tags.is_timestamp(typ):
            syn.out_values.append(f'time.Unix(int64({name}), 0)')
        elif typ.primitive:
            syn.out_values.append(f'{typ.name}({name})')
        else:
            syn.out_values.append(name)

    # Call arguments

    def _arg_length(self, param: 'GoParam', syn: _Synthesis) -> str:
        return f'C.{param.type.primitive}(len({param.type.length_of_slice}))'

    def _arg_slice(self, param: 'GoParam', syn: _Synthesis) -> str:
        return f'cp_{param.name}'

    def _arg_output(self, param: 'GoParam', syn: _Synthesis) -> str:
        if param.type.primitive:
            return f'&{param.name}'
        return f'&{param.name}.c'

    def _arg_string(self, param: 'GoParam', syn: _Synthesis) -> str:
        c_var = f'c_{param.name}'
        syn.conversions.append(Define(c_var, f'C.CString({param.name})'))
        syn.conversions.append(Defer(f'C.free(unsafe.Pointer({c_var}))'))
        return c_var

    def _arg_plain(self, param: 'GoParam', syn: _Synthesis) -> str:
        typ = param.type
        if typ.primitive is None:
            return f'{param.name}.c'
        if self.tags.is_timestamp(typ):
            return f'C.{typ.primitive}({param.name}.Unix())'
        return f'C.{typ.primitive}({param.name})'

    # Results: each returns (result types, trailing statements)

    def _with_out_args(self, result: str, primary: str, syn: _Synthesis,
                       lead: tuple[Stmt, ...] = ()) -> tuple[list[str], list[Stmt]]:
        """Return a primary value followed by the output arguments"""
        if not syn.out_values:
            return [result], [*lead, Return((primary,))]
        if lead:
            return [result, *syn.results], [*lead, Return((primary, *syn.out_values))]
        o = self.OWNED_RESULT
        return [result, *syn.results], [Define(o, primary), BLANK, Return((o, *syn.out_values))]

    def _return_none(self, typ: GoType, call: str, syn: _Synthesis):
        return [], [ExprStmt(call)]

    def _return_owned_string(self, typ: GoType, call: str, syn: _Synthesis):
        o = self.OWNED_RESULT
        lead = (Define(o, f'{self.tags.owned_string}{{{call}}}'), Defer(f'{o}.Dispose()'), BLANK)
        return self._with_out_args(self.tags.string, f'{o}.String()', syn, lead)

    def _return_bool(self, typ: GoType, call: str, syn: _Synthesis):
        o = self.OWNED_RESULT
        lead = (Define(o, call), BLANK)
        return self._with_out_args(self.tags.boolean, f'{o} != C.{typ.primitive}(0)', syn, lead)

    def _return_char_pointer(self, typ: GoType, call: str, syn: _Synthesis):
        return self._with_out_args(self.tags.string, f'C.GoString({call})', syn)

    def _return_timestamp(self, typ: GoType, call: str, syn: _Synthesis):
        return self._with_out_args(self.tags.timestamp, f'time.Unix(int64({call}), 0)', syn)

    def _return_out_args(self, typ: GoType, call: str, syn: _Synthesis):
        return list(syn.results), [ExprStmt(call), BLANK, Return(tuple(syn.out_values))]

    def _return_converted(self, typ: GoType, call: str, syn: _Synthesis):
        # Structs are composite literals, everything else is a cast
        if typ.primitive is None:
            primary = f'{typ.name}{{{call}}}'
        else:
            primary = f'{typ.name}({call})'
        return self._with_out_args(typ.name, primary, syn)
