"""
libclang binding configuration

Configures the binding generator with libclang-specific customizations:
- opaque handle typedefs wrapped as Go structs
- indexer structs exposed through member accessors
- symbols with shapes the generator does not wrap
"""

from cgobind import Generator, StructAccessors


# ==============================================================================
# Opaque handles
# ==============================================================================

HANDLE_TYPES = {
    'CXIndex',
    'CXTranslationUnit',
    'CXFile',
    'CXDiagnostic',
    'CXDiagnosticSet',
    'CXRemapping',
    'CXCursorSet',
    'CXModule',
    'CXIdxClientFile',
    'CXIdxClientContainer',
    'CXIndexAction',
}


# ==============================================================================
# Struct accessors
# ==============================================================================

ENTITY_INFO = StructAccessors(
    size_members={'attributes': 'numAttributes'},
)

DECL_INFO = StructAccessors(
    skip_fields=['flags'],
    size_members={'attributes': 'numAttributes'},
)

PROTOCOL_REF_LIST_INFO = StructAccessors(
    size_members={'protocols': 'numProtocols'},
)

PLAIN_ACCESSOR_STRUCTS = [
    'CXIdxAttrInfo',
    'CXIdxContainerInfo',
    'CXIdxIBOutletCollectionAttrInfo',
    'CXIdxObjCContainerDeclInfo',
    'CXIdxBaseClassInfo',
    'CXIdxObjCProtocolRefInfo',
    'CXIdxObjCInterfaceDeclInfo',
    'CXIdxObjCCategoryDeclInfo',
    'CXIdxObjCPropertyDeclInfo',
    'CXIdxImportedASTFileInfo',
    'CXIdxIncludedFileInfo',
    'CXSourceLocation',
]


# ==============================================================================
# Configuration
# ==============================================================================

def configure(gen: Generator):
    """Configure generator with libclang-specific settings"""
    config = gen.config
    config.headers = ['go-clang.h']
    config.strip_prefix = 'clang_'
    config.owned_string = 'CXString'
    config.handle_types = set(HANDLE_TYPES)

    # Pointer/count pairs listed explicitly instead of matched by name
    config.slice_pairs = {
        'clang_createTranslationUnitFromSourceFile': {
            'clang_command_line_args': 'num_clang_command_line_args',
        },
    }

    # Callbacks, untyped pointers and arrays returned through pointers
    gen.ignore(
        'clang_visitChildren',
        'clang_getInclusions',
        'clang_getOverriddenCursors',
        'clang_disposeOverriddenCursors',
        'clang_tokenize',
        'clang_disposeTokens',
        'clang_annotateTokens',
        'clang_codeCompleteAt',
        'clang_indexSourceFile',
        'clang_indexTranslationUnit',
        'clang_findReferencesInFile',
        'clang_findIncludesInFile',
        'clang_getCString',
        'clang_disposeString',
        'clang_getRemappingFilenames',
        'clang_getCursorPlatformAvailability',
        'clang_getTUResourceUsageName',
        'clang_executeOnThread',
        'clang_index_getClientContainer',
        'clang_index_setClientContainer',
        'clang_index_getClientEntity',
        'clang_index_setClientEntity',
    )

    gen.struct_accessors('CXIdxEntityInfo')(ENTITY_INFO)
    gen.struct_accessors('CXIdxDeclInfo')(DECL_INFO)
    gen.struct_accessors('CXIdxObjCProtocolRefListInfo')(PROTOCOL_REF_LIST_INFO)
    for struct_name in PLAIN_ACCESSOR_STRUCTS:
        gen.struct_accessors(struct_name)(StructAccessors())
