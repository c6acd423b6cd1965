"""Turn resolved type references into self-contained C++ type names."""

from __future__ import annotations

import re
from dataclasses import dataclass

from autoyaml_generator.declarations import TypeRef

SCOPE_SEPARATOR = "::"

_TAG_KEYWORD_PATTERN = re.compile(r"\b(?:struct|class|enum|union)\s+")
_BOOL_PATTERN = re.compile(r"\b_Bool\b")


@dataclass(frozen=True)
class PrintingPolicy:
    """How type names are printed into generated code.

    Attributes:
        suppress_tag_keyword: Drop elaborated `struct `, `class `, `enum ` and `union ` keywords.
        bool_spelling: Replacement for the C spelling `_Bool`.
    """

    suppress_tag_keyword: bool = True
    bool_spelling: str = "bool"

    def print(self, spelling: str) -> str:
        """Apply the policy to a type spelling.

        Args:
            spelling (str): The spelling reported by the parser.

        Returns:
            str: The printed type name.
        """
        printed = spelling.strip()

        if self.suppress_tag_keyword:
            printed = _TAG_KEYWORD_PATTERN.sub("", printed)

        if self.bool_spelling != "_Bool":
            printed = _BOOL_PATTERN.sub(self.bool_spelling, printed)

        return printed


DEFAULT_POLICY = PrintingPolicy()


def resolve_type_name(type_ref: TypeRef, policy: PrintingPolicy = DEFAULT_POLICY) -> str:
    """Get a type name that stays valid when pasted outside of the declaring scope.

    Parsers tend to drop scope qualifiers from printed types when the name is unambiguous at the
    point of declaration. For references written with an explicit scope, the qualifier from the
    source is prepended again if the printed named type does not already start with it.

    Args:
        type_ref (TypeRef): The resolved type reference.
        policy (PrintingPolicy, optional): The printing policy. Defaults to `DEFAULT_POLICY`.

    Returns:
        str: The canonical type name.

    Examples:
        >>> resolve_type_name(TypeRef("std::chrono::seconds", named_spelling="seconds", qualifier="std::chrono::"))
        'std::chrono::seconds'
        >>> resolve_type_name(TypeRef("std::string", named_spelling="std::string", qualifier="std::"))
        'std::string'
    """
    named_spelling = type_ref.named_spelling
    qualifier = type_ref.qualifier

    if named_spelling is not None and qualifier:
        printed = policy.print(named_spelling)
        qualifier = qualifier.strip()

        if not _carries_qualifier(printed, qualifier):
            printed = qualifier + printed

        return printed

    return policy.print(type_ref.spelling)


def _carries_qualifier(printed: str, qualifier: str) -> bool:
    """Check whether the scope part of a printed name already contains the written qualifier.

    Only the text before template arguments is considered. The printed name may be more qualified
    than the source, e.g. `app::detail::Limits` for `detail::Limits` written inside `app`.
    """
    scope = printed.split("<", 1)[0]
    bare = qualifier.removeprefix(SCOPE_SEPARATOR)

    if not bare:
        return scope.startswith(SCOPE_SEPARATOR)

    return scope.startswith(qualifier) or scope.startswith(bare) or f"{SCOPE_SEPARATOR}{bare}" in scope


def strip_scope_prefix(type_name: str, scope: str | None) -> str:
    """Remove a leading `scope::` from a type name, if present.

    Args:
        type_name (str): The (qualified) type name, e.g. "ns::Type".
        scope (str | None): The scope to strip, e.g. "ns".

    Returns:
        str: The type name relative to the scope, e.g. "Type".
    """
    if not scope:
        return type_name

    prefix = f"{scope}{SCOPE_SEPARATOR}"
    if type_name.startswith(prefix):
        return type_name[len(prefix) :]

    return type_name
