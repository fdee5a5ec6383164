"""
Main generator module

Orchestrates all components to generate a Go binding file from a header IR.
"""

import os
import re
from dataclasses import dataclass, field, replace

from .codegen import CodeGen, extract_array_type, pointer_depth, base_type
from .extract import FuncExtractor, GoFunction, Receiver, ExtractionError, clean_doc_comment, coerce_bool
from .func import FuncGenerator
from .ir import IR, StructInfo, FieldInfo
from .naming import Normalizer, NamingConfig, upper_first
from .struct import StructGenerator
from .types import CTypeResolver, GoType, ShapeTags, TypeResolutionError


@dataclass
class StructAccessors:
    """Configuration for struct member accessor generation"""
    skip_fields: list[str] = field(default_factory=list)
    # array field -> field holding its runtime length
    size_members: dict[str, str] = field(default_factory=dict)


@dataclass
class BindingConfig:
    """Configuration for one Go binding package"""
    package: str = 'clang'
    headers: list[str] = field(default_factory=list)
    strip_prefix: str = 'clang_'
    owned_string: str = 'CXString'
    # opaque typedefs wrapped like structs
    handle_types: set[str] = field(default_factory=set)
    # function -> {slice param: count param}
    slice_pairs: dict[str, dict[str, str]] = field(default_factory=dict)
    accessors: dict[str, StructAccessors] = field(default_factory=dict)
    naming: NamingConfig = field(default_factory=NamingConfig)
    tags: ShapeTags = field(default_factory=ShapeTags)


class Generator:
    """Main binding generator"""

    def __init__(self, ir_path: str, output_path: str, package: str = 'clang'):
        self.ir_path = ir_path
        self.output_path = output_path
        self.config = BindingConfig(package=package)
        self._ignores: set[str] = set()

    def ignore(self, *names: str):
        """Add functions to skip"""
        self._ignores.update(names)

    def struct_accessors(self, struct_name: str):
        """Decorator to register accessor configuration for a struct"""
        def decorator(handler: StructAccessors):
            self.config.accessors[struct_name] = handler
            return handler
        return decorator

    def generate(self):
        """Generate the Go file"""
        print('=== Generating Go bindings:')
        print(f'  {self.ir_path} => {self.output_path}')
        ir = IR.load(self.ir_path)
        code = self.generate_code(ir)

        out_dir = os.path.dirname(self.output_path)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        with open(self.output_path, 'w', newline='\n', encoding='utf-8') as f:
            f.write(code)

    def generate_code(self, ir: IR) -> str:
        """Generate Go source for the whole IR"""
        config = self.config
        normalizer = Normalizer(config.naming)
        resolver = CTypeResolver(
            normalizer,
            struct_names=set(ir.structs) | config.handle_types,
            enum_names=set(ir.enums),
            owned_string_c_name=config.owned_string,
            tags=config.tags,
            slice_pairs=config.slice_pairs,
        )
        extractor = FuncExtractor(resolver, normalizer, config.strip_prefix)
        func_gen = FuncGenerator(config.tags)
        struct_gen = StructGenerator(config.tags)

        body = CodeGen()
        for struct in ir.structs.values():
            handler = config.accessors.get(struct.name)
            if handler is not None:
                self._gen_accessors(struct, handler, resolver, extractor, struct_gen, body)

        for func in ir.funcs.values():
            if func.name in self._ignores:
                continue
            record = self._designate(extractor.extract(func), resolver, normalizer)
            record = replace(record, return_type=coerce_bool(record.name, record.return_type))
            func_gen.generate(record, body)

        return self._file_header(body.output()) + body.output()

    def _designate(self, func: GoFunction, resolver: CTypeResolver, normalizer: Normalizer) -> GoFunction:
        """Pick receiver and Go name for an extracted function"""
        params = func.params
        if params and resolver.is_owner_type(params[0].type):
            owner = params[0].type
            name = normalizer.safe_name(normalizer.receiver_name_for(owner.name))
            if name in FuncExtractor.RESERVED_RECEIVERS or any(p.name == name for p in params[1:]):
                name = params[0].name
            return replace(
                func,
                name=upper_first(normalizer.trim_against_owner(func.name, owner.name)),
                receiver=Receiver(name=name, type=owner),
            )

        ret = func.return_type
        if resolver.is_owner_type(ret) and not ret.is_primitive:
            # Constructor; only a parameterless one keeps the owner as receiver
            receiver = None
            if not params:
                receiver = Receiver(name=normalizer.receiver_name_for(ret.name), type=ret)
            return replace(
                func,
                name='New' + upper_first(normalizer.trim_against_owner(func.name, ret.name)),
                receiver=receiver,
            )

        return replace(func, name=upper_first(normalizer.trim_common_prefix(func.name)))

    def _gen_accessors(self, struct: StructInfo, handler: StructAccessors, resolver: CTypeResolver,
                       extractor: FuncExtractor, struct_gen: StructGenerator, gen: CodeGen):
        """Generate member accessors for a struct"""
        for fld in struct.fields:
            if fld.name in handler.skip_fields or fld.is_func_ptr:
                continue
            if fld.is_array and len(fld.array_sizes) != 1:
                print(f'  >> warning: skipping multi-dimensional array {struct.name}.{fld.name}')
                continue
            try:
                self._gen_accessor(struct, fld, handler, resolver, extractor, struct_gen, gen)
            except (TypeResolutionError, ValueError) as exc:
                raise ExtractionError(f'{struct.name}.{fld.name}: {exc}') from exc

    def _gen_accessor(self, struct: StructInfo, fld: FieldInfo, handler: StructAccessors,
                      resolver: CTypeResolver, extractor: FuncExtractor,
                      struct_gen: StructGenerator, gen: CodeGen):
        comment = clean_doc_comment(fld.comment)

        if fld.is_array:
            spelling = extract_array_type(fld.type)
            dimensions = 1 + pointer_depth(spelling)
            element = self._element_type(spelling, resolver)
            if element.name == 'unsafe.Pointer':
                dimensions = 1
            accessor = extractor.slice_accessor(fld.name, struct.name, comment, fld.name, element,
                                                dimensions=dimensions, array_size=fld.array_sizes[0])
            struct_gen.generate_slice_accessor(accessor, gen)
            return

        if fld.name in handler.size_members:
            dimensions = pointer_depth(fld.type)
            element = self._element_type(base_type(fld.type), resolver)
            accessor = extractor.slice_accessor(fld.name, struct.name, comment, fld.name, element,
                                                dimensions=dimensions,
                                                size_member=handler.size_members[fld.name])
            struct_gen.generate_slice_accessor(accessor, gen)
            return

        getter = extractor.member_function(fld.name, struct.name, comment, fld.name, resolver.resolve(fld.type))
        struct_gen.generate_getter(getter, gen)

    @staticmethod
    def _element_type(spelling: str, resolver: CTypeResolver) -> GoType:
        if base_type(spelling) == 'void':
            return GoType(name='unsafe.Pointer', c_name='void', is_primitive=True)
        return resolver.resolve(base_type(spelling))

    def _file_header(self, body: str) -> str:
        """Package clause, cgo preamble and imports"""
        gen = CodeGen()
        gen.line('// machine generated, do not edit')
        gen.line()
        gen.line(f'package {self.config.package}')
        gen.line()
        gen.line('// #include <stdlib.h>')
        for header in self.config.headers:
            gen.line(f'// #include "{header}"')
        gen.line('import "C"')
        gen.line()

        code = '\n'.join(line for line in body.splitlines() if not line.lstrip().startswith('//'))
        imports = [pkg for pkg in ('time', 'unsafe') if re.search(rf'\b{pkg}\.', code)]
        if imports:
            with gen.block('import (', ')'):
                for pkg in imports:
                    gen.line(f'"{pkg}"')
            gen.line()
        gen.line()
        return gen.output()
