"""
cgobind - Go (cgo) binding generation framework for C libraries

This framework provides building blocks for generating Go wrappers around
C functions from clang AST JSON (IR). It is designed to be extended by
library-specific configuration modules that name handle types, slice
pairs, struct accessors, etc.
"""

from .ir import IR, StructInfo, FieldInfo, FuncInfo, ParamInfo, EnumInfo, EnumItem
from .naming import Normalizer, NamingConfig, NamingError
from .types import GoType, ShapeTags, TypeResolver, CTypeResolver, TypeResolutionError
from .codegen import CodeGen
from .extract import FuncExtractor, GoFunction, GoParam, GoSliceAccessor, Receiver, ExtractionError
from .func import FuncGenerator, ParamShape, ReturnShape
from .struct import StructGenerator
from .generator import Generator, BindingConfig, StructAccessors

__all__ = [
    'IR', 'StructInfo', 'FieldInfo', 'FuncInfo', 'ParamInfo', 'EnumInfo', 'EnumItem',
    'Normalizer', 'NamingConfig', 'NamingError',
    'GoType', 'ShapeTags', 'TypeResolver', 'CTypeResolver', 'TypeResolutionError',
    'CodeGen',
    'FuncExtractor', 'GoFunction', 'GoParam', 'GoSliceAccessor', 'Receiver', 'ExtractionError',
    'FuncGenerator', 'ParamShape', 'ReturnShape',
    'StructGenerator',
    'Generator', 'BindingConfig', 'StructAccessors',
]
