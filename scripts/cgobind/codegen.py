"""
Code generation utilities

Provides the line builder used to emit Go source and helpers for
inspecting C type spellings.
"""

import re


class CodeGen:
    """Code generation helper with indentation support"""

    def __init__(self, indent_str: str = '\t'):
        self._lines: list[str] = []
        self._indent: int = 0
        self._indent_str: str = indent_str  # gofmt indents with tabs

    def line(self, text: str = ''):
        """Add a line with current indentation"""
        if text:
            self._lines.append(self._indent_str * self._indent + text)
        else:
            self._lines.append('')

    def lines(self, *texts: str):
        """Add multiple lines"""
        for text in texts:
            self.line(text)

    def indent(self):
        """Increase indentation"""
        self._indent += 1

    def dedent(self):
        """Decrease indentation"""
        if self._indent > 0:
            self._indent -= 1

    def block(self, header: str, footer: str = '}'):
        """Context manager for code blocks"""
        return _BlockContext(self, header, footer)

    def output(self) -> str:
        """Get generated code as string"""
        return '\n'.join(self._lines)


class _BlockContext:
    """Context manager for indented code blocks"""

    def __init__(self, gen: CodeGen, header: str, footer: str):
        self._gen = gen
        self._header = header
        self._footer = footer

    def __enter__(self):
        self._gen.line(self._header)
        self._gen.indent()
        return self

    def __exit__(self, *args):
        self._gen.dedent()
        self._gen.line(self._footer)


def normalize_c_type(type_str: str) -> str:
    """Normalize whitespace and pointer spacing

    Examples:
        'const char *'          -> 'const char*'
        'unsigned  int'         -> 'unsigned int'
        'const char *const *'   -> 'const char*const*'
    """
    text = ' '.join(type_str.replace('\t', ' ').split())
    return re.sub(r'\s*\*\s*', '*', text).strip()


def strip_qualifiers(type_str: str) -> str:
    """Drop const/volatile/restrict and struct/enum tags"""
    text = normalize_c_type(type_str)
    text = re.sub(r'\b(const|volatile|restrict)\b', ' ', text)
    text = re.sub(r'\b(struct|enum)\s+', ' ', text)
    return re.sub(r'\s+', ' ', text).replace(' *', '*').strip()


def is_const_pointee(type_str: str) -> bool:
    """Check if the innermost pointee is const qualified

    'const char *' and 'char const *' are const, 'char *const' is not.
    """
    text = normalize_c_type(type_str)
    if '*' not in text:
        return False
    return 'const' in text[:text.index('*')].split()


def pointer_depth(type_str: str) -> int:
    """Count pointer levels"""
    return normalize_c_type(type_str).count('*')


def base_type(type_str: str) -> str:
    """Extract the unqualified pointed-to type

    Examples:
        'const char *const *' -> 'char'
        'CXCursor *'          -> 'CXCursor'
    """
    return strip_qualifiers(type_str).replace('*', '').strip()


def is_func_ptr(type_str: str) -> bool:
    """Check if type is a function pointer"""
    return '(*)' in type_str


def is_array_type(type_str: str) -> bool:
    """Check if type is a fixed-size array"""
    return re.search(r'\[\d*\]$', type_str.strip()) is not None


def extract_array_type(type_str: str) -> str:
    """Extract element type from array type"""
    return type_str[:type_str.index('[')].strip()


def extract_array_sizes(type_str: str) -> list[int]:
    """Extract array dimensions"""
    return [int(m) for m in re.findall(r'\[(\d+)\]', type_str)]


def split_func_type(type_str: str) -> tuple[str, list[str]]:
    """Split a full function type spelling

    Returns (return_type, param_types)
    Example: "int (CXFile, unsigned *)" -> ("int", ["CXFile", "unsigned *"])
    """
    if '(' not in type_str:
        return type_str.strip(), []
    result_type = type_str[:type_str.index('(')].strip()
    args_str = type_str[type_str.index('(') + 1:type_str.rindex(')')]
    parts: list[str] = []
    depth = 0
    token: list[str] = []
    for ch in args_str:
        if ch == ',' and depth == 0:
            parts.append(''.join(token).strip())
            token = []
            continue
        token.append(ch)
        if ch in '([':
            depth += 1
        elif ch in ')]':
            depth = max(0, depth - 1)
    tail = ''.join(token).strip()
    if tail:
        parts.append(tail)
    return result_type, [p for p in parts if p and p != 'void']
