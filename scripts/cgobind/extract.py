"""
Signature extraction module

Builds the normalized function records that the Go generators consume,
either from an IR function declaration or from an explicit struct member
description.
"""

from dataclasses import dataclass, replace
from typing import Optional
import re

from .ir import FuncInfo
from .naming import Normalizer, lower_first, upper_first
from .types import GoType, TypeResolver, TypeResolutionError, INTEGRAL_KINDS


class ExtractionError(Exception):
    """Raised when a symbol cannot be turned into a function record"""


@dataclass(frozen=True)
class Receiver:
    """Method receiver"""
    name: str
    type: GoType


@dataclass(frozen=True)
class GoParam:
    """Function parameter"""
    name: str
    c_name: str
    type: GoType


@dataclass(frozen=True)
class GoFunction:
    """Normalized function, consumed by exactly one generator call"""
    name: str
    c_name: str
    comment: str
    params: tuple[GoParam, ...]
    return_type: GoType
    receiver: Optional[Receiver] = None
    member: Optional[str] = None


@dataclass(frozen=True)
class GoSliceAccessor(GoFunction):
    """Struct array member exposed as a Go slice"""
    size_member: Optional[str] = None
    c_element_type: str = ''
    element_type: str = ''
    is_primitive: bool = False
    dimensions: int = 1
    array_size: Optional[int] = None  # None: length is read from size_member


BOOL_PREFIXES = ('is', 'has')


def clean_doc_comment(raw: str) -> str:
    """Convert a C doc comment into Go line comments"""
    text = raw.strip()
    if not text:
        return ''
    text = re.sub(r'^/\*[*!]?<?', '', text)
    text = re.sub(r'\*/$', '', text)

    lines = []
    for line in text.splitlines():
        line = line.strip()
        if line.startswith('///'):
            line = line[3:]
        elif line.startswith('*'):
            line = line[1:]
        line = line.replace('\\brief ', '').strip()
        lines.append(line)

    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return '\n'.join(f'// {line}' if line else '//' for line in lines)


def coerce_bool(name: str, typ: GoType) -> GoType:
    """Integral results of is*/has* predicates become booleans"""
    if lower_first(name).startswith(BOOL_PREFIXES) and typ.primitive in INTEGRAL_KINDS and not typ.pointer_level:
        return replace(typ, name='bool')
    return typ


class FuncExtractor:
    """Builds GoFunction records"""

    # Locals and packages referenced by generated wrapper bodies
    RESERVED_LOCALS = frozenset({'o', 'i', 'ci_str', 'C', 'time', 'unsafe'})
    # Function scope subset; the loop index is block scoped
    RESERVED_RECEIVERS = RESERVED_LOCALS - {'i', 'ci_str'}
    # Per-parameter temporaries are named <prefix><param>
    TEMP_PREFIXES = ('c_', 'ca_', 'cp_')

    def __init__(self, resolver: TypeResolver, normalizer: Normalizer, strip_prefix: str = 'clang_'):
        self.resolver = resolver
        self.normalizer = normalizer
        self.strip_prefix = strip_prefix

    def extract(self, func: FuncInfo) -> GoFunction:
        """Build the record for an IR function"""
        try:
            return_type, param_types = self.resolver.resolve_function(func)
        except TypeResolutionError as exc:
            raise ExtractionError(f'{func.name}: {exc}') from exc

        name = func.name
        if self.strip_prefix and name.startswith(self.strip_prefix):
            name = name[len(self.strip_prefix):]

        names = [self.normalizer.safe_name(param.name or self._derive_name(typ, i))
                 for i, (param, typ) in enumerate(zip(func.params, param_types))]
        for i, param_name in enumerate(names):
            suffix = i + 1
            while self.clashes(names[i], names[:i], names):
                names[i] = f'{param_name}{suffix}'
                suffix += 1
        renames = {param.name: param_name for param, param_name in zip(func.params, names) if param.name}

        params = []
        for param, typ, param_name in zip(func.params, param_types, names):
            if typ.length_of_slice is not None:
                typ = replace(typ, length_of_slice=renames.get(typ.length_of_slice, typ.length_of_slice))
            params.append(GoParam(name=param_name, c_name=param.name, type=typ))

        return GoFunction(
            name=name,
            c_name=func.name,
            comment=clean_doc_comment(func.comment),
            params=tuple(params),
            return_type=return_type,
        )

    @classmethod
    def clashes(cls, name: str, earlier: list[str], names: list[str]) -> bool:
        """Check a parameter name against earlier parameters and generated locals"""
        if name in earlier or name in cls.RESERVED_LOCALS:
            return True
        return any(name == prefix + other for prefix in cls.TEMP_PREFIXES for other in names)

    def _derive_name(self, typ: GoType, index: int) -> str:
        if any(c.isupper() for c in typ.name):
            return self.normalizer.receiver_name_for(typ.name)
        return f'arg{index}'

    def _member_receiver(self, c_name: str) -> Receiver:
        receiver_type = self.normalizer.trim_language_prefix(c_name)
        return Receiver(
            name=self.normalizer.receiver_name_for(receiver_type),
            type=GoType(name=receiver_type, c_name=c_name),
        )

    def member_function(self, name: str, c_name: str, comment: str, member: str, typ: GoType) -> GoFunction:
        """Build the record for a struct field getter

        c_name is the C name of the struct that owns the field.
        """
        return GoFunction(
            name=upper_first(name),
            c_name=c_name,
            comment=comment,
            params=(),
            return_type=coerce_bool(name, typ),
            receiver=self._member_receiver(c_name),
            member=member,
        )

    def slice_accessor(self, name: str, c_name: str, comment: str, member: str, element: GoType,
                       dimensions: int = 1, array_size: Optional[int] = None,
                       size_member: Optional[str] = None) -> GoSliceAccessor:
        """Build the record for a struct array member accessor"""
        if array_size is None and size_member is None:
            raise ValueError(f'{c_name}.{member}: needs either a fixed size or a size member')
        if dimensions not in (1, 2):
            raise ValueError(f'{c_name}.{member}: unsupported array dimensions {dimensions}')
        if dimensions == 2 and element.is_primitive:
            raise ValueError(f'{c_name}.{member}: two-dimensional arrays need a struct element type')
        return GoSliceAccessor(
            name=upper_first(name),
            c_name=c_name,
            comment=comment,
            params=(),
            return_type=element,
            receiver=self._member_receiver(c_name),
            member=member,
            size_member=size_member,
            c_element_type=element.c_name,
            element_type=element.name,
            is_primitive=element.is_primitive,
            dimensions=dimensions,
            array_size=array_size,
        )
