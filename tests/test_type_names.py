"""Tests for type name resolution and printing policies."""

from __future__ import annotations

import pytest

from autoyaml_generator.declarations import TypeRef
from autoyaml_generator.type_names import PrintingPolicy, resolve_type_name, strip_scope_prefix


class TestResolveTypeName:
    """Qualified references keep the scope that was written in source."""

    def test_restores_dropped_qualifier(self):
        ref = TypeRef("std::chrono::seconds", named_spelling="seconds", qualifier="std::chrono::")
        assert resolve_type_name(ref) == "std::chrono::seconds"

    def test_keeps_complete_qualifier(self):
        ref = TypeRef("std::string", named_spelling="std::string", qualifier="std::")
        assert resolve_type_name(ref) == "std::string"

    def test_restores_qualifier_of_template(self):
        ref = TypeRef("std::list<int>", named_spelling="list<int>", qualifier="std::")
        assert resolve_type_name(ref) == "std::list<int>"

    def test_unqualified_reference_uses_spelling(self):
        assert resolve_type_name(TypeRef("int")) == "int"
        assert resolve_type_name(TypeRef("Outer::Inner")) == "Outer::Inner"

    def test_empty_qualifier_is_not_qualified(self):
        ref = TypeRef("Nested", named_spelling="Nested", qualifier="")
        assert not ref.is_qualified
        assert resolve_type_name(ref) == "Nested"

    def test_more_qualified_print_is_kept(self):
        ref = TypeRef("detail::Limits", named_spelling="app::detail::Limits", qualifier="detail::")
        assert resolve_type_name(ref) == "app::detail::Limits"

    def test_leading_global_scope_is_tolerated(self):
        ref = TypeRef("::app::Plain", named_spelling="app::Plain", qualifier="::app::")
        assert resolve_type_name(ref) == "app::Plain"

    def test_template_arguments_are_not_scope(self):
        ref = TypeRef("std::list<std::string>", named_spelling="list<std::string>", qualifier="std::")
        assert resolve_type_name(ref) == "std::list<std::string>"

    def test_global_qualifier(self):
        ref = TypeRef("::Config", named_spelling="Config", qualifier="::")
        assert resolve_type_name(ref) == "::Config"

    def test_qualifier_without_named_spelling_uses_spelling(self):
        ref = TypeRef("std::size_t", qualifier="std::")
        assert resolve_type_name(ref) == "std::size_t"


class TestPrintingPolicy:
    """Printing policy applied to parser spellings."""

    @pytest.mark.parametrize(
        "spelling, expected",
        [
            ("struct Config", "Config"),
            ("enum ns::Mode", "ns::Mode"),
            ("std::vector<struct Point>", "std::vector<Point>"),
            ("_Bool", "bool"),
            ("  int  ", "int"),
            ("classic::Type", "classic::Type"),
        ],
    )
    def test_default_policy(self, spelling: str, expected: str):
        assert PrintingPolicy().print(spelling) == expected

    def test_keep_tag_keywords(self):
        policy = PrintingPolicy(suppress_tag_keyword=False)
        assert policy.print("struct Config") == "struct Config"

    def test_keep_c_bool(self):
        policy = PrintingPolicy(bool_spelling="_Bool")
        assert policy.print("_Bool") == "_Bool"

    def test_policy_applies_to_qualified_reference(self):
        ref = TypeRef("ns::Point", named_spelling="struct Point", qualifier="ns::")
        assert resolve_type_name(ref, PrintingPolicy()) == "ns::Point"


class TestStripScopePrefix:
    """Removal of namespace prefixes."""

    def test_strips_matching_scope(self):
        assert strip_scope_prefix("ns::Type", "ns") == "Type"
        assert strip_scope_prefix("a::b::Type", "a::b") == "Type"

    def test_keeps_other_scopes(self):
        assert strip_scope_prefix("other::Type", "ns") == "other::Type"
        assert strip_scope_prefix("nsx::Type", "ns") == "nsx::Type"

    def test_without_scope(self):
        assert strip_scope_prefix("Type", None) == "Type"
        assert strip_scope_prefix("ns::Type", "") == "ns::Type"
