"""Extract the serializable members of annotated declarations."""

from __future__ import annotations

from autoyaml_generator.declarations import (
    Access,
    AnnotatedDeclaration,
    DeclarationInfo,
    EnumConstant,
    Enumeration,
    Field,
    Record,
    ScopeKind,
)
from autoyaml_generator.type_names import DEFAULT_POLICY, SCOPE_SEPARATOR, PrintingPolicy, resolve_type_name


def get_public_fields(decl: DeclarationInfo, policy: PrintingPolicy = DEFAULT_POLICY) -> list[Field]:
    """Collect the public data members of a record, in declaration order.

    Non-public members are skipped.

    Args:
        decl (DeclarationInfo): The record declaration.
        policy (PrintingPolicy, optional): Printing policy for member types.

    Returns:
        list[Field]: The fields.
    """
    fields: list[Field] = []

    for member in decl.members:
        if member.access != Access.PUBLIC:
            continue

        fields.append(
            Field(
                name=member.name,
                type_name=resolve_type_name(member.type_ref, policy),
                has_default_initializer=member.has_default_initializer,
            )
        )

    return fields


def get_enum_constants(decl: DeclarationInfo) -> list[EnumConstant]:
    """Collect the enumerators of an enum, in declaration order."""
    return [EnumConstant(e.name, e.qualified_name, e.value) for e in decl.enumerators]


def get_namespace(decl: DeclarationInfo) -> str | None:
    """Get the namespace that encloses a declaration.

    Enclosing records are skipped, so a record nested in `ns::Outer` belongs to namespace `ns`.

    Args:
        decl (DeclarationInfo): The declaration.

    Returns:
        str | None: The `::`-joined namespace chain, outermost first, or None if the declaration
            lives at global scope or inside an anonymous namespace.
    """
    names: list[str] = []

    for scope in decl.scopes:
        if scope.kind != ScopeKind.NAMESPACE:
            continue

        if scope.is_anonymous:
            return None

        names.append(scope.name)

    if not names:
        return None

    return SCOPE_SEPARATOR.join(reversed(names))


def classify(decl: DeclarationInfo, policy: PrintingPolicy = DEFAULT_POLICY) -> AnnotatedDeclaration:
    """Build the emitter's view of an annotated declaration.

    Args:
        decl (DeclarationInfo): A record or enum declaration.
        policy (PrintingPolicy, optional): Printing policy for type names.

    Raises:
        ValueError: If the declaration is neither a record nor an enum.

    Returns:
        AnnotatedDeclaration: A `Record` or an `Enumeration`.
    """
    type_name = resolve_type_name(decl.type_ref, policy)
    namespace = get_namespace(decl)

    if decl.is_record:
        return Record(
            name=decl.name,
            type_name=type_name,
            fields=tuple(get_public_fields(decl, policy)),
            namespace=namespace,
        )

    if decl.is_enum:
        return Enumeration(
            name=decl.name,
            type_name=type_name,
            constants=tuple(get_enum_constants(decl)),
            namespace=namespace,
        )

    raise ValueError(f"Declaration '{decl.name}' is neither a record nor an enum.")
