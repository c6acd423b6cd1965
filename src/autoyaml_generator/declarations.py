"""Declaration model that parser backends populate and the generator consumes.

The generator never talks to a parser directly. A backend (see `clang_backend`) translates its own
tree into `DeclarationInfo` objects, and everything downstream works on those.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

AUTO_YAML_ANNOTATION = "AutoYAML"
ANNOTATE_MARKER_KIND = "annotate"


class DeclarationKind:
    """Kinds of declarations in the tree."""

    RECORD = "record"
    ENUM = "enum"
    OTHER = "other"


class Access:
    """Access specifiers of record members."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class ScopeKind:
    """Kinds of enclosing scopes."""

    NAMESPACE = "namespace"
    RECORD = "record"
    OTHER = "other"


@dataclass(frozen=True)
class TypeRef:
    """A resolved type reference, as reported by the parser.

    Attributes:
        spelling: The type as printed by the parser (e.g. "std::string").
        named_spelling: For qualified references, the printed underlying named type.
        qualifier: For qualified references, the scope text written in source (e.g. "std::chrono::").
    """

    spelling: str
    named_spelling: str | None = None
    qualifier: str | None = None

    @property
    def is_qualified(self) -> bool:
        """Whether the reference was written with an explicit scope in source."""
        return self.named_spelling is not None and bool(self.qualifier)


@dataclass(frozen=True)
class Marker:
    """An attribute attached to a declaration, e.g. `annotate("AutoYAML")`."""

    kind: str
    payload: str = ""

    @property
    def is_annotation(self) -> bool:
        return self.kind == ANNOTATE_MARKER_KIND


@dataclass(frozen=True)
class MemberInfo:
    """A data member of a record, in declaration order."""

    name: str
    type_ref: TypeRef
    access: str = Access.PUBLIC
    has_default_initializer: bool = False


@dataclass(frozen=True)
class EnumeratorInfo:
    """An enumerator of an enum, in declaration order."""

    name: str
    qualified_name: str
    value: int | None = None


@dataclass(frozen=True)
class ScopeInfo:
    """One link of the enclosing-scope chain of a declaration."""

    kind: str
    name: str = ""
    is_anonymous: bool = False


@dataclass(eq=False)
class DeclarationInfo:
    """A declaration as seen through the parser backend.

    Attributes:
        id: Identity of the declaration, unique within one translation unit.
        kind: One of the `DeclarationKind` values.
        name: The unqualified name of the declaration.
        type_ref: The type the declaration introduces.
        markers: Attached attributes, in source order.
        members: Data members (records only).
        enumerators: Enumerators (enums only).
        children: Direct child declarations.
        scopes: Enclosing scopes, innermost first.
        is_candidate: Whether the backend's whole-tree query matches this node.
    """

    id: int
    kind: str
    name: str
    type_ref: TypeRef
    markers: list[Marker] = field(default_factory=list)
    members: list[MemberInfo] = field(default_factory=list)
    enumerators: list[EnumeratorInfo] = field(default_factory=list)
    children: list[DeclarationInfo] = field(default_factory=list)
    scopes: list[ScopeInfo] = field(default_factory=list)
    is_candidate: bool = False

    @property
    def is_record(self) -> bool:
        return self.kind == DeclarationKind.RECORD

    @property
    def is_enum(self) -> bool:
        return self.kind == DeclarationKind.ENUM

    def walk_preorder(self) -> Iterator[DeclarationInfo]:
        """Yield this declaration and all of its descendants, parents before children."""
        yield self
        for child in self.children:
            yield from child.walk_preorder()


@dataclass(frozen=True)
class Field:
    """A public record member that takes part in serialization."""

    name: str
    type_name: str
    has_default_initializer: bool = False

    @property
    def is_required(self) -> bool:
        """Required fields have no in-place default; their key must be present when decoding."""
        return not self.has_default_initializer


@dataclass(frozen=True)
class EnumConstant:
    """An enumerator that takes part in serialization."""

    name: str
    qualified_name: str
    value: int | None = None


@dataclass(frozen=True)
class Record:
    """An annotated record, ready for emission."""

    name: str
    type_name: str
    fields: tuple[Field, ...] = ()
    namespace: str | None = None

    @property
    def required_fields(self) -> list[Field]:
        return [f for f in self.fields if f.is_required]


@dataclass(frozen=True)
class Enumeration:
    """An annotated enumeration, ready for emission."""

    name: str
    type_name: str
    constants: tuple[EnumConstant, ...] = ()
    namespace: str | None = None

    @property
    def encoded_constants(self) -> list[EnumConstant]:
        """Constants that get a `case` label when encoding.

        Aliases share the value of an earlier enumerator and would produce duplicate labels, so
        only the first declared constant of each value is kept.
        """
        seen: set[int] = set()
        constants: list[EnumConstant] = []

        for constant in self.constants:
            if constant.value is not None:
                if constant.value in seen:
                    continue
                seen.add(constant.value)

            constants.append(constant)

        return constants

    @property
    def decoded_constants(self) -> list[EnumConstant]:
        """Constants that are matched by name when decoding; the first declared name wins."""
        seen: set[str] = set()
        constants: list[EnumConstant] = []

        for constant in self.constants:
            if constant.name not in seen:
                seen.add(constant.name)
                constants.append(constant)

        return constants


AnnotatedDeclaration = Record | Enumeration
