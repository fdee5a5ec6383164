"""
IR (Intermediate Representation) module

Loads the JSON dump of a C header produced by a clang AST walker. Records
here keep the raw C spellings; turning them into Go types is the job of
the type resolver.

Input layout:
    {"module": ..., "prefix": ..., "decls": [{"kind": "func" | "struct" | "enum", ...}]}

Declarations of any other kind (consts, typedefs, ...) are ignored.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional
import json

from .codegen import split_func_type, extract_array_sizes, is_func_ptr


@dataclass
class FieldInfo:
    """Struct member as spelled in the header"""
    name: str
    type: str
    is_array: bool = False
    array_sizes: list[int] = field(default_factory=list)  # outermost first
    comment: str = ""

    @classmethod
    def from_decl(cls, decl: dict) -> 'FieldInfo':
        c_type = decl['type']
        is_array = '[' in c_type and not is_func_ptr(c_type)
        return cls(
            name=decl['name'],
            type=c_type,
            is_array=is_array,
            array_sizes=extract_array_sizes(c_type) if is_array else [],
            comment=decl.get('comment', ''),
        )

    @property
    def is_func_ptr(self) -> bool:
        return is_func_ptr(self.type)


@dataclass
class StructInfo:
    """Struct (or handle typedef) with its members in declaration order"""
    name: str
    fields: list[FieldInfo]
    comment: str = ""

    @classmethod
    def from_decl(cls, decl: dict) -> 'StructInfo':
        # Anonymous members (unions, padding) have no accessor
        return cls(
            name=decl['name'],
            fields=[FieldInfo.from_decl(f) for f in decl.get('fields', []) if f.get('name')],
            comment=decl.get('comment', ''),
        )


@dataclass
class ParamInfo:
    """Function parameter"""
    name: str  # empty for unnamed prototype parameters
    type: str


@dataclass
class FuncInfo:
    """Function prototype

    type is the full prototype spelling, e.g. "int (CXFile, unsigned *)".
    """
    name: str
    type: str
    params: list[ParamInfo]
    comment: str = ""

    @classmethod
    def from_decl(cls, decl: dict) -> 'FuncInfo':
        return cls(
            name=decl['name'],
            type=decl['type'],
            params=[ParamInfo(name=p.get('name', ''), type=p['type']) for p in decl.get('params', [])],
            comment=decl.get('comment', ''),
        )

    @property
    def return_type(self) -> str:
        return split_func_type(self.type)[0]


@dataclass
class EnumItem:
    name: str
    value: Optional[int] = None


@dataclass
class EnumInfo:
    """Enum type; only its name matters for type resolution"""
    name: str
    items: list[EnumItem]
    comment: str = ""

    @classmethod
    def from_decl(cls, decl: dict) -> 'EnumInfo':
        items = [
            EnumItem(name=item['name'], value=int(item['value']) if 'value' in item else None)
            for item in decl.get('items', [])
        ]
        return cls(name=decl.get('name', ''), items=items, comment=decl.get('comment', ''))


@dataclass
class IR:
    """All declarations of one header, keyed by C name in header order"""
    module: str
    prefix: str
    structs: dict[str, StructInfo] = field(default_factory=dict)
    funcs: dict[str, FuncInfo] = field(default_factory=dict)
    enums: dict[str, EnumInfo] = field(default_factory=dict)
    comment: str = ""

    @classmethod
    def load(cls, json_path: str) -> 'IR':
        """Load IR from a JSON file"""
        with open(json_path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def from_dict(cls, data: dict) -> 'IR':
        ir = cls(
            module=data.get('module', ''),
            prefix=data.get('prefix', ''),
            comment=data.get('comment', ''),
        )
        for decl in data.get('decls', []):
            entry = _DECL_KINDS.get(decl.get('kind'))
            if entry is None:
                continue
            table, parse = entry
            info = parse(decl)
            getattr(ir, table)[info.name] = info
        return ir


# kind -> (IR table, parser)
_DECL_KINDS: dict[str, tuple[str, Callable[[dict], object]]] = {
    'struct': ('structs', StructInfo.from_decl),
    'func': ('funcs', FuncInfo.from_decl),
    'enum': ('enums', EnumInfo.from_decl),
}
