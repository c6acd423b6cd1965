"""Populate the declaration model from C++ sources, using libclang.

Requires the `libclang` Python bindings (`clang.cindex`).
"""

from __future__ import annotations

import logging
import os.path
from collections.abc import Sequence

from clang import cindex
from clang.cindex import AccessSpecifier, Cursor, CursorKind, Diagnostic, TokenKind, TranslationUnit, TypeKind

from autoyaml_generator.declarations import (
    ANNOTATE_MARKER_KIND,
    Access,
    DeclarationInfo,
    DeclarationKind,
    EnumeratorInfo,
    Marker,
    MemberInfo,
    ScopeInfo,
    ScopeKind,
    TypeRef,
)
from autoyaml_generator.errors import ParseError
from autoyaml_generator.type_names import SCOPE_SEPARATOR

logger = logging.getLogger(__name__)

DEFAULT_CLANG_ARGS = ("-x", "c++-header", "-std=c++17")

RECORD_CURSOR_KINDS = (CursorKind.STRUCT_DECL, CursorKind.CLASS_DECL)
SCOPE_CURSOR_KINDS = (CursorKind.NAMESPACE, CursorKind.STRUCT_DECL, CursorKind.CLASS_DECL, CursorKind.ENUM_DECL)

ACCESS_BY_SPECIFIER = {
    AccessSpecifier.PUBLIC: Access.PUBLIC,
    AccessSpecifier.PROTECTED: Access.PROTECTED,
    AccessSpecifier.PRIVATE: Access.PRIVATE,
}

# Keywords that may precede the scope qualifier of a written type.
_TYPE_PREFIX_KEYWORDS = {"const", "volatile", "typename", "struct", "class", "enum", "union", "mutable"}


def parse_translation_unit(path: str, clang_args: Sequence[str] = ()) -> TranslationUnit:
    """Parse a C++ header with libclang.

    Args:
        path (str): The header to parse.
        clang_args (Sequence[str], optional): Additional compiler arguments (include paths, defines).

    Raises:
        ParseError: If libclang is not available, cannot load the file or reports errors.

    Returns:
        TranslationUnit: The parsed translation unit.
    """
    args = [*DEFAULT_CLANG_ARGS, *clang_args]

    try:
        index = cindex.Index.create()
    except cindex.LibclangError as e:
        raise ParseError(f"Cannot load libclang to parse '{path}': {e}") from e

    try:
        translation_unit = index.parse(
            path,
            args=args,
            options=TranslationUnit.PARSE_SKIP_FUNCTION_BODIES,
        )
    except cindex.TranslationUnitLoadError as e:
        raise ParseError(f"Failed to parse '{path}': {e}") from e

    errors = [d for d in translation_unit.diagnostics if d.severity >= Diagnostic.Error]

    for diagnostic in errors:
        logger.error("%s: %s", diagnostic.location, diagnostic.spelling)

    if errors:
        raise ParseError(f"Parsing '{path}' produced {len(errors)} error(s).")

    return translation_unit


def qualified_name(cursor: Cursor) -> str:
    """Get the fully scoped name of a declaration, e.g. `ns::Outer::Inner`.

    Anonymous namespaces and unnamed records are left out; their members are reachable without
    them from the translation unit that includes the generated code.
    """
    parts: list[str] = [cursor.spelling]
    parent = cursor.semantic_parent

    while parent is not None and parent.kind != CursorKind.TRANSLATION_UNIT:
        if parent.kind in SCOPE_CURSOR_KINDS and parent.spelling and not _is_anonymous(parent):
            parts.append(parent.spelling)
        parent = parent.semantic_parent

    return SCOPE_SEPARATOR.join(reversed(parts))


def _is_anonymous(cursor: Cursor) -> bool:
    if not cursor.spelling:
        return True

    try:
        return cursor.is_anonymous()
    except AttributeError:
        return False


def _written_qualifier(cursor: Cursor) -> str:
    """Reconstruct the scope qualifier of the type as written in source.

    For `std::chrono::seconds sec;` this is `std::chrono::`. Reading stops at the first name that
    is not followed by `::`, and at template argument lists.
    """
    qualifier: list[str] = []
    tokens = [t for t in cursor.get_tokens() if t.kind != TokenKind.COMMENT]

    i = 0
    while i < len(tokens) and tokens[i].kind == TokenKind.KEYWORD and tokens[i].spelling in _TYPE_PREFIX_KEYWORDS:
        i += 1

    if i < len(tokens) and tokens[i].spelling == SCOPE_SEPARATOR:
        qualifier.append(SCOPE_SEPARATOR)
        i += 1

    while i + 1 < len(tokens) and tokens[i].kind == TokenKind.IDENTIFIER and tokens[i + 1].spelling == SCOPE_SEPARATOR:
        qualifier.append(tokens[i].spelling + SCOPE_SEPARATOR)
        i += 2

    return "".join(qualifier)


def type_ref_for_member(cursor: Cursor) -> TypeRef:
    """Describe the type of a field, keeping the qualifier written in source.

    Args:
        cursor (Cursor): A `FIELD_DECL` cursor.

    Returns:
        TypeRef: The type reference.
    """
    field_type = cursor.type

    if field_type.kind != TypeKind.ELABORATED:
        return TypeRef(field_type.spelling)

    named_spelling = field_type.get_named_type().spelling
    qualifier = _written_qualifier(cursor)

    if not qualifier:
        # Unqualified references to tag types: the named type prints with its full scope.
        return TypeRef(named_spelling)

    return TypeRef(field_type.spelling, named_spelling=named_spelling, qualifier=qualifier)


def has_in_class_initializer(cursor: Cursor) -> bool:
    """Check whether a field is declared with an in-class default value (`= v` or `{v}`).

    Array bounds (`int a[2] = {1, 2};`) and bit-field widths (`int b : 3 = 1;`) between the name
    and the initializer are skipped.
    """
    name_offset = cursor.location.offset
    depth = 0

    for token in cursor.get_tokens():
        if token.location.offset <= name_offset:
            continue

        spelling = token.spelling

        if spelling in ("[", "("):
            depth += 1
        elif spelling in ("]", ")"):
            depth -= 1
        elif depth == 0:
            if spelling in ("=", "{"):
                return True
            if spelling == ";":
                break

    return False


def _markers(cursor: Cursor) -> list[Marker]:
    markers: list[Marker] = []

    for child in cursor.get_children():
        if child.kind == CursorKind.ANNOTATE_ATTR:
            markers.append(Marker(ANNOTATE_MARKER_KIND, child.spelling))
        elif child.kind.is_attribute():
            markers.append(Marker(child.kind.name.lower()))

    return markers


def _scopes(cursor: Cursor) -> list[ScopeInfo]:
    scopes: list[ScopeInfo] = []
    parent = cursor.semantic_parent

    while parent is not None and parent.kind != CursorKind.TRANSLATION_UNIT:
        if parent.kind == CursorKind.NAMESPACE:
            scopes.append(ScopeInfo(ScopeKind.NAMESPACE, parent.spelling, _is_anonymous(parent)))
        elif parent.kind in RECORD_CURSOR_KINDS:
            scopes.append(ScopeInfo(ScopeKind.RECORD, parent.spelling, _is_anonymous(parent)))
        else:
            scopes.append(ScopeInfo(ScopeKind.OTHER, parent.spelling))
        parent = parent.semantic_parent

    return scopes


class ClangDeclarationBuilder:
    """Translates a libclang translation unit into a `DeclarationInfo` tree.

    Only declarations from the main file are kept, so annotated types of included headers are
    left to the generator run for those headers.
    """

    def __init__(self, translation_unit: TranslationUnit):
        self._translation_unit = translation_unit
        self._main_file = os.path.abspath(translation_unit.spelling)

    def build(self) -> DeclarationInfo:
        """Build the declaration tree, rooted at the translation unit."""
        root = self._translation_unit.cursor

        return DeclarationInfo(
            id=root.hash,
            kind=DeclarationKind.OTHER,
            name=root.spelling,
            type_ref=TypeRef(""),
            children=self._children(root),
        )

    def _in_main_file(self, cursor: Cursor) -> bool:
        location = cursor.location
        if location.file is None:
            return False
        return os.path.abspath(location.file.name) == self._main_file

    def _children(self, cursor: Cursor) -> list[DeclarationInfo]:
        children: list[DeclarationInfo] = []

        for child in cursor.get_children():
            if not child.kind.is_declaration() or not self._in_main_file(child):
                continue

            if child.kind in (CursorKind.FIELD_DECL, CursorKind.ENUM_CONSTANT_DECL):
                continue

            children.append(self._declaration(child))

        return children

    def _declaration(self, cursor: Cursor) -> DeclarationInfo:
        is_definition = cursor.is_definition()

        if cursor.kind in RECORD_CURSOR_KINDS and is_definition:
            kind = DeclarationKind.RECORD
        elif cursor.kind == CursorKind.ENUM_DECL and is_definition:
            kind = DeclarationKind.ENUM
        else:
            kind = DeclarationKind.OTHER

        markers = _markers(cursor)

        decl = DeclarationInfo(
            id=cursor.hash,
            kind=kind,
            name=cursor.spelling,
            type_ref=TypeRef(qualified_name(cursor)),
            markers=markers,
            scopes=_scopes(cursor),
            is_candidate=kind != DeclarationKind.OTHER and any(m.is_annotation for m in markers),
        )

        if kind == DeclarationKind.RECORD:
            decl.members = [
                MemberInfo(
                    name=child.spelling,
                    type_ref=type_ref_for_member(child),
                    access=ACCESS_BY_SPECIFIER.get(child.access_specifier, Access.PUBLIC),
                    has_default_initializer=has_in_class_initializer(child),
                )
                for child in cursor.get_children()
                if child.kind == CursorKind.FIELD_DECL
            ]

        elif kind == DeclarationKind.ENUM:
            decl.enumerators = [
                EnumeratorInfo(child.spelling, qualified_name(child), child.enum_value)
                for child in cursor.get_children()
                if child.kind == CursorKind.ENUM_CONSTANT_DECL
            ]

        if cursor.kind in (CursorKind.NAMESPACE, *RECORD_CURSOR_KINDS):
            decl.children = self._children(cursor)

        return decl


def load_declarations(path: str, clang_args: Sequence[str] = ()) -> DeclarationInfo:
    """Parse a header and build its declaration tree.

    Args:
        path (str): The header to parse.
        clang_args (Sequence[str], optional): Additional compiler arguments.

    Returns:
        DeclarationInfo: The root of the declaration tree.
    """
    translation_unit = parse_translation_unit(path, clang_args)
    return ClangDeclarationBuilder(translation_unit).build()
