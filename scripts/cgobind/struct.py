"""
Struct binding generation module

Generates field accessors for Go wrapper types: plain field getters and
array fields exposed as slices. Neither calls into C, they only read
the embedded C struct.
"""

from typing import Optional, TYPE_CHECKING

from .codegen import CodeGen
from .stmt import Stmt, Define, Assign, RangeLoop, Return, BLANK, render_statements
from .types import GoType, ShapeTags

if TYPE_CHECKING:
    from .extract import GoFunction, GoSliceAccessor


class StructGenerator:
    """Generates struct member accessors"""

    def __init__(self, tags: Optional[ShapeTags] = None):
        self.tags = tags or ShapeTags()

    def render_getter(self, func: 'GoFunction') -> str:
        gen = CodeGen()
        self.generate_getter(func, gen)
        return gen.output()

    def render_slice_accessor(self, func: 'GoSliceAccessor') -> str:
        gen = CodeGen()
        self.generate_slice_accessor(func, gen)
        return gen.output()

    def generate_getter(self, func: 'GoFunction', gen: CodeGen):
        """Generate field getter"""
        recv = func.receiver
        typ = func.return_type
        tags = self.tags
        value = f'{recv.name}.c.{func.member}'

        if tags.is_bool(typ):
            result = tags.boolean
            body: list[Stmt] = [Return((f'{value} != C.{typ.primitive}(0)',))]
        elif tags.is_char_pointer(typ):
            result = tags.string
            body = [Return((f'C.GoString({value})',))]
        elif tags.is_owned_string(typ):
            result = tags.string
            body = [Define('o', f'{typ.name}{{{value}}}'), Return(('o.String()',))]
        elif tags.is_timestamp(typ):
            result = tags.timestamp
            body = [Return((f'time.Unix(int64({value}), 0)',))]
        elif typ.pointer_level:
            result = f'*{typ.name}'
            deref = self._convert(typ, f'*{value}')
            body = [Define('value', deref), Return(('&value',))]
        else:
            result = typ.name
            body = [Return((self._convert(typ, value),))]

        self._header(func, result, gen, body)

    def generate_slice_accessor(self, func: 'GoSliceAccessor', gen: CodeGen):
        """Generate array field accessor"""
        recv = func.receiver.name
        by_ref = func.dimensions == 2
        elem = ('*' if by_ref else '') + func.element_type
        view_ptr = '*' if by_ref or func.element_type == 'unsafe.Pointer' else ''

        if func.array_size is not None:
            length = str(func.array_size)
        else:
            length = f'int({recv}.c.{func.size_member})'

        item = '*goslice[is]' if by_ref else 'goslice[is]'
        if func.is_primitive:
            item = f'{func.element_type}({item})'
        else:
            item = f'{func.element_type}{{{item}}}'
        if by_ref:
            item = f'&{item}'

        body: list[Stmt] = [
            Define('sc', f'[]{elem}{{}}'),
            BLANK,
            Define('length', length),
            Define('goslice', f'(*[1 << 30]{view_ptr}C.{func.c_element_type})'
                              f'(unsafe.Pointer(&{recv}.c.{func.member}))[:length:length]'),
            BLANK,
            RangeLoop('is', 'goslice', (Assign('sc', f'append(sc, {item})'),)),
            BLANK,
            Return(('sc',)),
        ]
        self._header(func, f'[]{elem}', gen, body)

    def _convert(self, typ: GoType, value: str) -> str:
        # Structs are composite literals, everything else is a cast
        if typ.is_primitive:
            return f'{typ.name}({value})'
        return f'{typ.name}{{{value}}}'

    def _header(self, func: 'GoFunction', result: str, gen: CodeGen, body: list[Stmt]):
        if func.comment:
            gen.lines(*func.comment.splitlines())
        recv = func.receiver
        with gen.block(f'func ({recv.name} {recv.type.name}) {func.name}() {result} {{'):
            render_statements(body, gen)
        gen.line()
