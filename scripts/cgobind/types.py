"""
Type resolution module

Turns C type spellings into normalized Go type descriptors and marks the
parameter shapes (slices, slice lengths, output arguments) that the
function generator works from.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Optional, TYPE_CHECKING

from .codegen import (
    normalize_c_type, strip_qualifiers, base_type, pointer_depth,
    is_const_pointee, is_func_ptr, is_array_type,
)
from .naming import Normalizer

if TYPE_CHECKING:
    from .ir import FuncInfo


class TypeResolutionError(Exception):
    """Raised when a C type cannot be normalized"""


@dataclass(frozen=True)
class GoType:
    """Normalized type descriptor"""
    name: str                                # Go display name
    c_name: str                              # C name, cgo spelling
    primitive: Optional[str] = None          # cgo kind used for casts (C.<primitive>)
    pointer_level: int = 0
    is_slice: bool = False
    length_of_slice: Optional[str] = None    # set on a count parameter, names its slice
    is_return_argument: bool = False
    is_primitive: bool = False


VOID = GoType(name='void', c_name='void')


@dataclass(frozen=True)
class ShapeTags:
    """Type names that select special parameter and return shapes"""
    owned_string: str = 'cxstring'
    char_kinds: tuple[str, ...] = ('char',)
    timestamp: str = 'time.Time'
    boolean: str = 'bool'
    string: str = 'string'

    def is_void(self, typ: GoType) -> bool:
        return typ.name == 'void' and typ.pointer_level == 0

    def is_owned_string(self, typ: GoType) -> bool:
        return typ.name == self.owned_string

    def is_char_pointer(self, typ: GoType) -> bool:
        return typ.pointer_level > 0 and typ.c_name in self.char_kinds

    def is_bool(self, typ: GoType) -> bool:
        return typ.name == self.boolean and typ.primitive is not None

    def is_timestamp(self, typ: GoType) -> bool:
        return typ.name == self.timestamp

    def go_type(self, typ: GoType) -> str:
        """Go type expression for a declared parameter or result"""
        name = self.string if self.is_char_pointer(typ) else typ.name
        if typ.is_slice:
            return f'[]{name}'
        return name


# C spelling -> (Go name, cgo kind)
PRIMITIVE_TYPES = {
    'char': ('int8', 'char'),
    'signed char': ('int8', 'schar'),
    'unsigned char': ('uint8', 'uchar'),
    'short': ('int16', 'short'),
    'unsigned short': ('uint16', 'ushort'),
    'int': ('int32', 'int'),
    'signed': ('int32', 'int'),
    'signed int': ('int32', 'int'),
    'unsigned': ('uint32', 'uint'),
    'unsigned int': ('uint32', 'uint'),
    'long': ('int64', 'long'),
    'long int': ('int64', 'long'),
    'unsigned long': ('uint64', 'ulong'),
    'unsigned long int': ('uint64', 'ulong'),
    'long long': ('int64', 'longlong'),
    'unsigned long long': ('uint64', 'ulonglong'),
    'size_t': ('uint64', 'size_t'),
    'float': ('float32', 'float'),
    'double': ('float64', 'double'),
    'time_t': ('time.Time', 'time_t'),
}

INTEGRAL_KINDS = {'char', 'schar', 'uchar', 'short', 'ushort', 'int', 'uint',
                  'long', 'ulong', 'longlong', 'ulonglong', 'size_t'}


class TypeResolver(ABC):
    """Base class for type resolvers"""

    @abstractmethod
    def resolve(self, c_type: str) -> GoType:
        """Normalize a single C type spelling"""
        pass

    @abstractmethod
    def resolve_function(self, func: 'FuncInfo') -> tuple[GoType, list[GoType]]:
        """Normalize a function's return type and parameter types"""
        pass


class CTypeResolver(TypeResolver):
    """Table driven resolver for the C spellings found in the IR"""

    def __init__(self, normalizer: Normalizer, struct_names: set[str], enum_names: set[str],
                 owned_string_c_name: str = 'CXString', tags: Optional[ShapeTags] = None,
                 slice_pairs: Optional[dict[str, dict[str, str]]] = None):
        self.normalizer = normalizer
        self.struct_names = set(struct_names)
        self.enum_names = set(enum_names)
        self.owned_string_c_name = owned_string_c_name
        self.tags = tags or ShapeTags()
        # function -> {slice param: count param}
        self.slice_pairs = slice_pairs or {}

    def go_name(self, c_name: str) -> str:
        """Go name of a C struct/enum/handle type"""
        return self.normalizer.trim_language_prefix(c_name)

    def is_owner_type(self, typ: GoType) -> bool:
        """Check if a type can own methods"""
        if typ.pointer_level or typ.is_slice:
            return False
        c_name = typ.c_name.replace('struct_', '').replace('enum_', '')
        return c_name in self.struct_names or c_name in self.enum_names

    def resolve(self, c_type: str) -> GoType:
        spelling = normalize_c_type(c_type)
        if is_func_ptr(spelling):
            raise TypeResolutionError(f'function pointer types are not supported: {c_type!r}')
        if is_array_type(spelling):
            raise TypeResolutionError(f'array types are not supported here: {c_type!r}')

        depth = pointer_depth(spelling)
        base = base_type(spelling)

        if depth == 0:
            return self._resolve_value(spelling, base)
        if base in self.tags.char_kinds and depth <= 2:
            return GoType(name='int8', c_name=base, primitive=base, pointer_level=depth, is_primitive=True)
        if base == 'void':
            raise TypeResolutionError(f'untyped pointers are not supported: {c_type!r}')
        if depth == 1:
            return replace(self._resolve_value(spelling.replace('*', ''), base), pointer_level=1)
        raise TypeResolutionError(f'pointer depth {depth} is not supported: {c_type!r}')

    def _resolve_value(self, spelling: str, base: str) -> GoType:
        if base == 'void':
            return VOID
        if base in PRIMITIVE_TYPES:
            go_name, kind = PRIMITIVE_TYPES[base]
            return GoType(name=go_name, c_name=kind, primitive=kind, is_primitive=True)
        if base == self.owned_string_c_name:
            return GoType(name=self.tags.owned_string, c_name=base)
        if base in self.enum_names:
            c_name = f'enum_{base}' if 'enum ' in spelling else base
            return GoType(name=self.go_name(base), c_name=c_name, primitive=c_name, is_primitive=True)
        if base in self.struct_names:
            c_name = f'struct_{base}' if 'struct ' in spelling else base
            return GoType(name=self.go_name(base), c_name=c_name)
        raise TypeResolutionError(f'unknown type: {strip_qualifiers(spelling)!r}')

    def resolve_function(self, func: 'FuncInfo') -> tuple[GoType, list[GoType]]:
        return_type = self.resolve(func.return_type)
        if return_type.pointer_level and not (self.tags.is_char_pointer(return_type)
                                              and return_type.pointer_level == 1):
            raise TypeResolutionError(f'pointer results are not supported: {func.return_type!r}')

        types = [self.resolve(p.type) for p in func.params]
        names = [p.name for p in func.params]
        pairs = self._slice_pairs(func.name, names, types)
        counts = {count: slc for slc, count in pairs.items()}

        result = []
        for i, (param, typ) in enumerate(zip(func.params, types)):
            if i in pairs:
                if typ.pointer_level != (2 if self.tags.is_char_pointer(typ) else 1):
                    raise TypeResolutionError(f'{param.name}: unsupported slice element type {param.type!r}')
                typ = replace(typ, is_slice=True)
            elif i in counts:
                typ = replace(typ, length_of_slice=names[counts[i]])
            elif self.tags.is_char_pointer(typ):
                if typ.pointer_level > 1:
                    raise TypeResolutionError(f'{param.name}: string arrays need a length parameter')
            elif typ.pointer_level == 1:
                if is_const_pointee(param.type):
                    raise TypeResolutionError(f'{param.name}: const pointer inputs are not supported: {param.type!r}')
                typ = replace(typ, is_return_argument=True)
            result.append(typ)
        return return_type, result

    def _slice_pairs(self, func_name: str, names: list[str], types: list[GoType]) -> dict[int, int]:
        """Find pointer/count parameter pairs, keyed by slice index"""
        pairs: dict[int, int] = {}
        explicit = self.slice_pairs.get(func_name, {})
        for slc_name, count_name in explicit.items():
            if slc_name not in names or count_name not in names:
                raise TypeResolutionError(f'{func_name}: unknown slice pair {slc_name}/{count_name}')
            pairs[names.index(slc_name)] = names.index(count_name)

        def key(name: str) -> str:
            return name.replace('_', '').lower()

        for i, typ in enumerate(types):
            if i in pairs or not names[i] or typ.pointer_level == 0:
                continue
            if self.tags.is_char_pointer(typ) and typ.pointer_level == 1:
                continue
            for j, count in enumerate(types):
                if j == i or j in pairs.values() or count.pointer_level or count.primitive not in INTEGRAL_KINDS:
                    continue
                if key(names[j]) == 'num' + key(names[i]):
                    pairs[i] = j
                    break
        return pairs
