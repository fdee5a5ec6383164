"""End to end tests: JSON IR in, Go file out."""

import json
from pathlib import Path

import pytest

from cgobind import ExtractionError, Generator, StructAccessors
from cgobind.ir import IR


def ir_data() -> dict:
    return {
        'module': 'clang',
        'prefix': 'clang_',
        'decls': [
            {'kind': 'struct', 'name': 'CXCursor', 'fields': [
                {'name': 'kind', 'type': 'enum CXCursorKind'},
                {'name': 'xdata', 'type': 'int'},
                {'name': 'data', 'type': 'const void *[3]'},
            ]},
            {'kind': 'struct', 'name': 'CXIdxAttrInfo', 'fields': [
                {'name': 'cursor', 'type': 'CXCursor'},
            ]},
            {'kind': 'struct', 'name': 'CXIdxDeclInfo', 'fields': [
                {'name': 'cursor', 'type': 'CXCursor', 'comment': '/**< The declaration. */'},
                {'name': 'isRedeclaration', 'type': 'int'},
                {'name': 'attributes', 'type': 'const CXIdxAttrInfo *const *'},
                {'name': 'numAttributes', 'type': 'unsigned int'},
            ]},
            {'kind': 'enum', 'name': 'CXCursorKind', 'items': [
                {'name': 'CXCursor_UnexposedDecl', 'value': '1'},
            ]},
            {'kind': 'func', 'name': 'clang_createIndex', 'type': 'CXIndex (int, int)', 'params': [
                {'name': 'excludeDeclarationsFromPCH', 'type': 'int'},
                {'name': 'displayDiagnostics', 'type': 'int'},
            ], 'comment': '/**\n * \\brief Provides a shared context.\n */'},
            {'kind': 'func', 'name': 'clang_disposeIndex', 'type': 'void (CXIndex)', 'params': [
                {'name': 'index', 'type': 'CXIndex'},
            ]},
            {'kind': 'func', 'name': 'clang_getNullCursor', 'type': 'CXCursor (void)', 'params': []},
            {'kind': 'func', 'name': 'clang_getCursorKind', 'type': 'enum CXCursorKind (CXCursor)', 'params': [
                {'name': '', 'type': 'CXCursor'},
            ]},
            {'kind': 'func', 'name': 'clang_Cursor_isNull', 'type': 'int (CXCursor)', 'params': [
                {'name': 'cursor', 'type': 'CXCursor'},
            ]},
            {'kind': 'func', 'name': 'clang_isDeclaration', 'type': 'unsigned int (enum CXCursorKind)',
             'params': [{'name': '', 'type': 'enum CXCursorKind'}]},
            {'kind': 'func', 'name': 'clang_getClangVersion', 'type': 'CXString (void)', 'params': []},
            {'kind': 'func', 'name': 'clang_visitChildren',
             'type': 'unsigned int (CXCursor, CXCursorVisitor, CXClientData)', 'params': [
                 {'name': 'parent', 'type': 'CXCursor'},
                 {'name': 'visitor', 'type': 'CXCursorVisitor'},
                 {'name': 'client_data', 'type': 'CXClientData'},
             ]},
        ],
    }


def make_generator(tmp_path: Path, data: dict) -> Generator:
    ir_path = tmp_path / 'clang.json'
    ir_path.write_text(json.dumps(data), encoding='utf-8')
    gen = Generator(str(ir_path), str(tmp_path / 'out' / 'clang_gen.go'))
    gen.config.headers = ['go-clang.h']
    gen.config.handle_types = {'CXIndex'}
    gen.ignore('clang_visitChildren')
    gen.struct_accessors('CXCursor')(StructAccessors(skip_fields=['kind', 'xdata']))
    gen.struct_accessors('CXIdxDeclInfo')(StructAccessors(size_members={'attributes': 'numAttributes'}))
    return gen


@pytest.fixture
def generated(tmp_path: Path) -> str:
    gen = make_generator(tmp_path, ir_data())
    gen.generate()
    return Path(gen.output_path).read_text(encoding='utf-8')


# ---------------------------------------------------------------------------
# IR loading
# ---------------------------------------------------------------------------


class TestIR:
    def test_from_dict(self) -> None:
        ir = IR.from_dict(ir_data())
        assert list(ir.structs) == ['CXCursor', 'CXIdxAttrInfo', 'CXIdxDeclInfo']
        assert list(ir.enums) == ['CXCursorKind']
        assert ir.enums['CXCursorKind'].items[0].value == 1
        assert ir.funcs['clang_createIndex'].return_type == 'CXIndex'
        assert ir.funcs['clang_getCursorKind'].params[0].name == ''

    def test_array_fields(self) -> None:
        data = ir_data()['decls'][0]
        struct = IR.from_dict({'decls': [data]}).structs['CXCursor']
        assert struct.fields[2].is_array
        assert struct.fields[2].array_sizes == [3]
        assert not struct.fields[0].is_array

    def test_function_pointer_field(self) -> None:
        struct = IR.from_dict({'decls': [{'kind': 'struct', 'name': 'S', 'fields': [
            {'name': 'cb', 'type': 'void (*)(int)'},
        ]}]}).structs['S']
        assert struct.fields[0].is_func_ptr


# ---------------------------------------------------------------------------
# File layout
# ---------------------------------------------------------------------------


class TestFile:
    def test_header(self, generated: str) -> None:
        assert generated.startswith(
            '// machine generated, do not edit\n'
            '\n'
            'package clang\n'
            '\n'
            '// #include <stdlib.h>\n'
            '// #include "go-clang.h"\n'
            'import "C"\n'
            '\n'
            'import (\n'
            '\t"unsafe"\n'
            ')\n'
            '\n'
            'func (c Cursor) Data() []unsafe.Pointer {\n'
        )

    def test_package_name(self, tmp_path: Path) -> None:
        ir_path = tmp_path / 'clang.json'
        ir_path.write_text(json.dumps({'decls': []}), encoding='utf-8')
        gen = Generator(str(ir_path), str(tmp_path / 'gen.go'), package='libclang')
        gen.generate()
        text = (tmp_path / 'gen.go').read_text(encoding='utf-8')
        assert 'package libclang\n' in text
        assert 'import (' not in text

    def test_time_import(self) -> None:
        gen = Generator('unused.json', 'unused.go')
        code = gen.generate_code(IR.from_dict({'decls': [
            {'kind': 'func', 'name': 'clang_getBuildTime', 'type': 'time_t (void)', 'params': []},
        ]}))
        assert 'import (\n\t"time"\n)\n' in code
        assert 'func BuildTime() time.Time {\n' in code

    def test_comment_does_not_import(self) -> None:
        gen = Generator('unused.json', 'unused.go')
        code = gen.generate_code(IR.from_dict({'decls': [
            {'kind': 'func', 'name': 'clang_getNumThings', 'type': 'unsigned int (void)', 'params': [],
             'comment': '/** Computed each time. Uses unsafe. storage */'},
        ]}))
        assert '// Computed each time. Uses unsafe. storage\n' in code
        assert 'import "C"\n' in code
        assert 'import (' not in code

    def test_ignored_function(self, generated: str) -> None:
        assert 'clang_visitChildren' not in generated

    def test_trailing_newline(self, generated: str) -> None:
        assert generated.endswith('}\n')
        assert not generated.endswith('}\n\n')

    def test_status_lines(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        gen = make_generator(tmp_path, ir_data())
        gen.generate()
        out = capsys.readouterr().out
        assert out.startswith('=== Generating Go bindings:\n')
        assert 'clang_gen.go' in out


# ---------------------------------------------------------------------------
# Functions
# ---------------------------------------------------------------------------


class TestFunctions:
    def test_constructor_with_params(self, generated: str) -> None:
        assert (
            '// Provides a shared context.\n'
            'func NewIndex(excludeDeclarationsFromPCH int32, displayDiagnostics int32) Index {\n'
            '\treturn Index{C.clang_createIndex(C.int(excludeDeclarationsFromPCH), C.int(displayDiagnostics))}\n'
            '}\n'
        ) in generated

    def test_method_on_handle(self, generated: str) -> None:
        assert (
            'func (i Index) DisposeIndex() {\n'
            '\tC.clang_disposeIndex(i.c)\n'
            '}\n'
        ) in generated

    def test_parameterless_constructor(self, generated: str) -> None:
        assert (
            'func NewNullCursor() Cursor {\n'
            '\treturn Cursor{C.clang_getNullCursor()}\n'
            '}\n'
        ) in generated

    def test_method_with_unnamed_receiver(self, generated: str) -> None:
        assert (
            'func (c Cursor) Kind() CursorKind {\n'
            '\treturn CursorKind(C.clang_getCursorKind(c.c))\n'
            '}\n'
        ) in generated

    def test_bool_method(self, generated: str) -> None:
        assert (
            'func (c Cursor) IsNull() bool {\n'
            '\to := C.clang_Cursor_isNull(c.c)\n'
            '\n'
            '\treturn o != C.int(0)\n'
            '}\n'
        ) in generated

    def test_enum_method(self, generated: str) -> None:
        assert (
            'func (ck CursorKind) IsDeclaration() bool {\n'
            '\to := C.clang_isDeclaration(C.enum_CXCursorKind(ck))\n'
            '\n'
            '\treturn o != C.uint(0)\n'
            '}\n'
        ) in generated

    def test_free_function(self, generated: str) -> None:
        assert (
            'func ClangVersion() string {\n'
            '\to := cxstring{C.clang_getClangVersion()}\n'
            '\tdefer o.Dispose()\n'
            '\n'
            '\treturn o.String()\n'
            '}\n'
        ) in generated

    def test_receiver_name_collision(self) -> None:
        gen = Generator('unused.json', 'unused.go')
        code = gen.generate_code(IR.from_dict({'decls': [
            {'kind': 'struct', 'name': 'CXCursor', 'fields': []},
            {'kind': 'func', 'name': 'clang_equalCursors', 'type': 'unsigned int (CXCursor, CXCursor)',
             'params': [{'name': 'a', 'type': 'CXCursor'}, {'name': 'c', 'type': 'CXCursor'}]},
        ]}))
        assert 'func (a Cursor) EqualCursors(c Cursor) uint32 {\n' in code

    def test_param_named_like_result_local(self) -> None:
        gen = Generator('unused.json', 'unused.go')
        code = gen.generate_code(IR.from_dict({'decls': [
            {'kind': 'func', 'name': 'clang_isThing', 'type': 'unsigned int (unsigned)',
             'params': [{'name': 'o', 'type': 'unsigned'}]},
        ]}))
        assert (
            'func IsThing(o1 uint32) bool {\n'
            '\to := C.clang_isThing(C.uint(o1))\n'
            '\n'
            '\treturn o != C.uint(0)\n'
        ) in code

    def test_receiver_named_like_result_local(self) -> None:
        gen = Generator('unused.json', 'unused.go')
        code = gen.generate_code(IR.from_dict({'decls': [
            {'kind': 'struct', 'name': 'CXObject', 'fields': []},
            {'kind': 'func', 'name': 'clang_Object_isValid', 'type': 'unsigned int (CXObject)',
             'params': [{'name': 'obj', 'type': 'CXObject'}]},
        ]}))
        assert (
            'func (obj Object) IsValid() bool {\n'
            '\to := C.clang_Object_isValid(obj.c)\n'
        ) in code

    def test_unsupported_function_aborts(self, tmp_path: Path) -> None:
        data = ir_data()
        data['decls'].append({'kind': 'func', 'name': 'clang_setUserData', 'type': 'void (void *)',
                              'params': [{'name': 'data', 'type': 'void *'}]})
        gen = make_generator(tmp_path, data)
        with pytest.raises(ExtractionError, match='clang_setUserData'):
            gen.generate()
        assert not Path(gen.output_path).exists()


# ---------------------------------------------------------------------------
# Struct accessors
# ---------------------------------------------------------------------------


class TestAccessors:
    def test_skipped_field(self, generated: str) -> None:
        assert 'Xdata' not in generated

    def test_fixed_array(self, generated: str) -> None:
        assert 'func (c Cursor) Data() []unsafe.Pointer {\n' in generated
        assert '\tlength := 3\n' in generated

    def test_getters(self, generated: str) -> None:
        assert (
            '// The declaration.\n'
            'func (idi IdxDeclInfo) Cursor() Cursor {\n'
            '\treturn Cursor{idi.c.cursor}\n'
            '}\n'
        ) in generated
        assert 'func (idi IdxDeclInfo) IsRedeclaration() bool {\n' in generated
        assert '\treturn uint32(idi.c.numAttributes)\n' in generated

    def test_size_member_slice(self, generated: str) -> None:
        assert 'func (idi IdxDeclInfo) Attributes() []*IdxAttrInfo {\n' in generated
        assert '\tlength := int(idi.c.numAttributes)\n' in generated

    def test_unconfigured_struct(self, generated: str) -> None:
        assert 'func (iai IdxAttrInfo)' not in generated

    def test_accessors_before_functions(self, generated: str) -> None:
        assert generated.index('func (idi IdxDeclInfo) Cursor()') < generated.index('func NewIndex(')

    def test_multi_dimensional_array_skipped(self, capsys: pytest.CaptureFixture[str]) -> None:
        gen = Generator('unused.json', 'unused.go')
        gen.struct_accessors('CXMatrix')(StructAccessors())
        code = gen.generate_code(IR.from_dict({'decls': [
            {'kind': 'struct', 'name': 'CXMatrix', 'fields': [{'name': 'm', 'type': 'int [2][2]'}]},
        ]}))
        assert 'func (m Matrix)' not in code
        assert '>> warning: skipping multi-dimensional array CXMatrix.m' in capsys.readouterr().out

    def test_unresolvable_field(self) -> None:
        gen = Generator('unused.json', 'unused.go')
        gen.struct_accessors('CXToken')(StructAccessors())
        with pytest.raises(ExtractionError, match='CXToken.ptr_data'):
            gen.generate_code(IR.from_dict({'decls': [
                {'kind': 'struct', 'name': 'CXToken', 'fields': [{'name': 'ptr_data', 'type': 'void *'}]},
            ]}))
