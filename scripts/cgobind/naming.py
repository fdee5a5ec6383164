"""
Identifier normalization module

Turns libclang style C identifiers into Go identifiers: trims verb and
language prefixes, trims owner type names off method names, derives
receiver names and replaces Go keywords.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional


class NamingError(ValueError):
    """Raised when a name does not satisfy a naming precondition"""


# Go keywords that can show up as C parameter names
GO_KEYWORD_REPLACEMENTS = MappingProxyType({
    'range': 'r',
    'type': 'typ',
    'func': 'fn',
    'map': 'm',
    'chan': 'ch',
    'go': 'g',
    'select': 'sel',
    'package': 'pkg',
    'interface': 'iface',
    'var': 'v',
    'defer': 'd',
    'fallthrough': 'ft',
    'import': 'imp',
})


@dataclass(frozen=True)
class NamingConfig:
    """Fixed naming tables, immutable for the lifetime of the process"""
    verb_prefixes: tuple[str, ...] = ('create', 'get')
    # Applied in order, each at most once
    language_prefixes: tuple[str, ...] = ('CX_CXX', 'CXX', 'CX', 'ObjC', '_')
    owner_suffixes: tuple[str, ...] = ('Kind',)
    keyword_replacements: Mapping[str, str] = field(default_factory=lambda: GO_KEYWORD_REPLACEMENTS)


def lower_first(name: str) -> str:
    """Lower-case the first character"""
    return name[:1].lower() + name[1:]


def upper_first(name: str) -> str:
    """Upper-case the first character"""
    return name[:1].upper() + name[1:]


class Normalizer:
    """Pure string transforms over C identifiers"""

    def __init__(self, config: Optional[NamingConfig] = None):
        self.config = config or NamingConfig()

    def trim_language_prefix(self, name: str) -> str:
        """Trim namespace-like tags

        Examples:
            CXXMethod     -> Method
            CXCursor      -> Cursor
            ObjCCategory  -> Category
        """
        for prefix in self.config.language_prefixes:
            if name.startswith(prefix):
                name = name[len(prefix):]
        return name

    def trim_common_prefix(self, name: str) -> str:
        """Trim leading constructor/accessor verbs, then language prefixes

        Examples:
            createIndex          -> Index
            getCursorKind        -> CursorKind
            GetTypeKindSpelling  -> TypeKindSpelling
        """
        for verb in self.config.verb_prefixes:
            if name.startswith(verb):
                name = name[len(verb):]
        if len(name) > 4 and name.startswith('Get') and name[3].isupper():
            name = name[3:]
        return self.trim_language_prefix(name)

    def trim_against_owner(self, name: str, owner: str) -> str:
        """Trim the owner type name off a method name

        An empty result means the function constructs the owner, so the
        owner name itself is returned.

        Examples:
            (getCursorKind, Cursor)              -> Kind
            (TranslationUnit_getNumDiagnostics,
             TranslationUnit)                    -> NumDiagnostics
            (getTypeKindSpelling, TypeKind)      -> Spelling
            (createIndex, Index)                 -> Index
        """
        stripped = None
        for candidate in (name, self.trim_common_prefix(name)):
            stripped = self._strip_owner(candidate, owner)
            if stripped is not None:
                break
        if stripped is None:
            stripped = name
        stripped = self.trim_common_prefix(stripped)
        return stripped or owner

    def _strip_owner(self, name: str, owner: str) -> Optional[str]:
        owners = [owner]
        for suffix in self.config.owner_suffixes:
            if owner.endswith(suffix) and len(owner) > len(suffix):
                owners.append(owner[:-len(suffix)])
        for candidate in owners:
            for prefix in (candidate + '_', candidate):
                if name.startswith(prefix):
                    return name[len(prefix):]
        return None

    def receiver_name_for(self, type_name: str) -> str:
        """Derive a receiver name from the capitals of a type name

        Examples:
            TranslationUnit   -> tu
            Cursor            -> c
            IdxDeclInfo       -> idi

        The type name must contain at least one capital letter; anything
        else is a caller error and raises NamingError.
        """
        initials = ''.join(c.lower() for c in type_name if c.isupper())
        if not initials:
            raise NamingError(f'cannot derive a receiver name from {type_name!r}: no capital letters')
        return initials

    def substitute_reserved_word(self, name: str) -> Optional[str]:
        """Return the replacement for a reserved word, or None"""
        return self.config.keyword_replacements.get(name)

    def safe_name(self, name: str) -> str:
        """Name with reserved words replaced"""
        replacement = self.substitute_reserved_word(name)
        return name if replacement is None else replacement
