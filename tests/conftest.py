"""Pytest configuration and declaration fixtures for autoyaml generator tests."""

from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from autoyaml_generator.declarations import (
    ANNOTATE_MARKER_KIND,
    AUTO_YAML_ANNOTATION,
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

# Test directory structure
TESTS_DIR = Path(__file__).parent
HEADERS_DIR = TESTS_DIR / "headers"
REFERENCE_DIR = TESTS_DIR / "reference"
DRIVERS_DIR = TESTS_DIR / "drivers"

AUTO_YAML_MARKER = Marker(ANNOTATE_MARKER_KIND, AUTO_YAML_ANNOTATION)

_ids = itertools.count(1)


def member(name: str, type_ref: TypeRef | str, access: str = Access.PUBLIC, default: bool = False) -> MemberInfo:
    """Create a data member; plain strings are taken as unqualified type spellings."""
    if isinstance(type_ref, str):
        type_ref = TypeRef(type_ref)
    return MemberInfo(name, type_ref, access, default)


def namespace(name: str, *children: DeclarationInfo) -> DeclarationInfo:
    """Create a namespace declaration and register it as scope of its children."""
    scope = ScopeInfo(ScopeKind.NAMESPACE, name, is_anonymous=not name)
    decl = DeclarationInfo(id=next(_ids), kind=DeclarationKind.OTHER, name=name, type_ref=TypeRef(name))
    decl.children = list(children)
    for child in children:
        _push_scope(child, scope)
    return decl


def record(
    name: str,
    members: list[MemberInfo] | None = None,
    children: list[DeclarationInfo] | None = None,
    markers: list[Marker] | None = None,
    is_candidate: bool = True,
) -> DeclarationInfo:
    """Create a record declaration, marked with `AutoYAML` unless other markers are given."""
    decl = DeclarationInfo(
        id=next(_ids),
        kind=DeclarationKind.RECORD,
        name=name,
        type_ref=TypeRef(name),
        markers=[AUTO_YAML_MARKER] if markers is None else markers,
        members=members or [],
        children=children or [],
        is_candidate=is_candidate,
    )
    for child in decl.children:
        _push_scope(child, ScopeInfo(ScopeKind.RECORD, name))
    return decl


def enum(
    name: str,
    enumerators: list[str | tuple[str, int]],
    markers: list[Marker] | None = None,
    is_candidate: bool = True,
) -> DeclarationInfo:
    """Create a scoped enum declaration; enumerators are names or (name, value) pairs."""
    infos: list[EnumeratorInfo] = []
    for i, enumerator in enumerate(enumerators):
        enumerator_name, value = enumerator if isinstance(enumerator, tuple) else (enumerator, i)
        infos.append(EnumeratorInfo(enumerator_name, f"{name}::{enumerator_name}", value))

    return DeclarationInfo(
        id=next(_ids),
        kind=DeclarationKind.ENUM,
        name=name,
        type_ref=TypeRef(name),
        markers=[AUTO_YAML_MARKER] if markers is None else markers,
        enumerators=infos,
        is_candidate=is_candidate,
    )


def translation_unit(*children: DeclarationInfo, name: str = "test.h") -> DeclarationInfo:
    """Create the root of a declaration tree."""
    return DeclarationInfo(
        id=next(_ids),
        kind=DeclarationKind.OTHER,
        name=name,
        type_ref=TypeRef(""),
        children=list(children),
    )


def _push_scope(decl: DeclarationInfo, scope: ScopeInfo):
    """Add an (outer) scope to a declaration and everything nested in it, keeping names qualified."""
    decl.scopes.append(scope)

    if scope.name and not scope.is_anonymous:
        decl.type_ref = TypeRef(f"{scope.name}::{decl.type_ref.spelling}")
        decl.enumerators = [
            EnumeratorInfo(e.name, f"{scope.name}::{e.qualified_name}", e.value) for e in decl.enumerators
        ]

    for child in decl.children:
        _push_scope(child, scope)


def example_tree() -> DeclarationInfo:
    """Declaration tree of the `AutoYAML_example` header used throughout the tests."""
    example = record(
        "AutoYAML_example",
        members=[
            member("s", TypeRef("std::string", named_spelling="string", qualifier="std::")),
            member("b", "bool"),
            member("i", "int"),
            member("d", "double"),
            member("e", "AutoYAML_example::E"),
            member("v", TypeRef("std::vector<int>", named_spelling="std::vector<int>", qualifier="std::")),
            member("l", TypeRef("std::list<int>", named_spelling="list<int>", qualifier="std::")),
            member("m", TypeRef("std::map<int, int>", named_spelling="std::map<int, int>", qualifier="std::")),
            member("n", "AutoYAML_example::Nested"),
            member("sec", TypeRef("std::chrono::seconds", named_spelling="seconds", qualifier="std::chrono::")),
            member("def", "int", default=True),
        ],
        children=[
            enum("E", ["E1", "E2", "E3"]),
            record("Nested", members=[member("i", "int")]),
        ],
    )
    return translation_unit(example, name="AutoYAML_example.h")


@pytest.fixture
def example_root() -> DeclarationInfo:
    """Provide the declaration tree of the example header."""
    return example_tree()


@pytest.fixture
def scenario_root() -> DeclarationInfo:
    """A record with three required fields and one defaulted field."""
    config = record(
        "Config",
        members=[
            member("s", TypeRef("std::string", named_spelling="string", qualifier="std::")),
            member("b", "bool"),
            member("i", "int"),
            member("def", "int", default=True),
        ],
    )
    return translation_unit(config, name="config.h")


def read_reference(name: str) -> str:
    """Read a reference output file.

    Args:
        name: File name below the reference directory.

    Returns:
        The file content.
    """
    return (REFERENCE_DIR / name).read_text(encoding="utf8")
