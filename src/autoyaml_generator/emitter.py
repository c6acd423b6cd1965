"""Emit `YAML::convert` specializations and equality operators for annotated declarations."""

from __future__ import annotations

import logging

from autoyaml_generator.config import DecodePolicy, GeneratorConfig
from autoyaml_generator.declarations import AnnotatedDeclaration, Enumeration, Record
from autoyaml_generator.sink import Sink
from autoyaml_generator.type_names import strip_scope_prefix

logger = logging.getLogger(__name__)

PREAMBLE_COMMENT = "// Automatically generated by AutoYAML, do not modify!"
YAML_NAMESPACE = "YAML"


def _quote(name: str) -> str:
    return f'"{name}"'


class ConvertEmitter:
    """Writes conversion code for annotated declarations into a sink."""

    def __init__(self, sink: Sink, config: GeneratorConfig | None = None):
        """Initialize the emitter.

        Args:
            sink (Sink): The sink to write generated code to.
            config (GeneratorConfig | None, optional): Generation options. Defaults to None, which
                means the default `GeneratorConfig`.
        """
        self.sink = sink
        self.config = config if config is not None else GeneratorConfig()

    def emit_preamble(self):
        """Emit the header of the generated file."""
        self.sink.block(PREAMBLE_COMMENT)
        self.sink.block("#pragma once")

    def emit(self, declaration: AnnotatedDeclaration):
        """Emit all code for one annotated declaration.

        Records get a `YAML::convert` specialization and, if enabled, an `operator==`.
        Enumerations get a `YAML::convert` specialization.

        Args:
            declaration (AnnotatedDeclaration): The declaration to emit code for.
        """
        match declaration:
            case Record():
                self.emit_convert(declaration)

                if self.config.gen_comp_ops:
                    self.emit_compare(declaration)

            case Enumeration():
                self.emit_convert(declaration)

            case _:
                raise TypeError(f"Cannot emit code for {declaration!r}.")

        logger.debug("Emitted conversion for '%s'.", declaration.type_name)

    def emit_convert(self, declaration: AnnotatedDeclaration):
        """Emit a `YAML::convert<T>` specialization with `encode` and `decode`."""
        out = self.sink

        out.block(f"namespace {YAML_NAMESPACE} {{")
        out.block(f"template<> struct convert<{declaration.type_name}> {{")

        with out.indented():
            self.emit_encode(declaration)
            self.emit_decode(declaration)

        out.block("};")
        out.block(f"}} // end namespace {YAML_NAMESPACE}")

    # ===== Encoding =====

    def emit_encode(self, declaration: AnnotatedDeclaration):
        out = self.sink

        out.line(f"static Node encode({declaration.type_name} const &obj) {{")

        with out.indented():
            out.line("Node node;")

            if isinstance(declaration, Record):
                self._emit_record_encode(declaration)
            else:
                self._emit_enum_encode(declaration)

            out.line("return node;")

        out.block("}")

    def _emit_record_encode(self, record: Record):
        for field in record.fields:
            self.sink.line(f"node[{_quote(field.name)}] = obj.{field.name};")

    def _emit_enum_encode(self, enumeration: Enumeration):
        out = self.sink

        # No default case: the compiler can flag enumerators that are not handled.
        out.line("switch (obj) {")

        for constant in enumeration.encoded_constants:
            out.line(f"case {constant.qualified_name}:")

            with out.indented():
                out.line(f"node = {_quote(constant.name)};")
                out.line("break;")

        out.line("}")

    # ===== Decoding =====

    def emit_decode(self, declaration: AnnotatedDeclaration):
        out = self.sink

        out.line(f"static bool decode(Node const &node, {declaration.type_name} &obj) {{")

        with out.indented():
            if isinstance(declaration, Record):
                if self.config.decode_policy == DecodePolicy.LEGACY:
                    self._emit_record_decode_legacy(declaration)
                else:
                    self._emit_record_decode(declaration)
                out.line("return true;")

            elif declaration.decoded_constants:
                self._emit_enum_decode(declaration)
                out.line("return true;")

            else:
                out.line("return false;")

        out.block("}")

    def _emit_name_list(self, names: list[str]):
        with self.sink.indented():
            for name in names:
                self.sink.line(f"{_quote(name)},")

    def _emit_record_decode(self, record: Record):
        out = self.sink

        # The node must be a map whose keys are all known fields, and all required fields must be present.
        out.line("check_node(node);")

        out.line("check_node_properties(node, {")
        self._emit_name_list([field.name for field in record.fields])
        out.line("}, {")
        self._emit_name_list([field.name for field in record.required_fields])
        out.line("});")

        for field in record.fields:
            setter = "set_field" if field.is_required else "set_optional_field"
            out.line(f"{setter}<{field.type_name}>(obj.{field.name}, node, {_quote(field.name)});")

    def _emit_record_decode_legacy(self, record: Record):
        for field in record.fields:
            setter = "set_value" if field.is_required else "set_optional_value"
            self.sink.line(f"{setter}<{field.type_name}>(obj.{field.name}, node, {_quote(field.name)});")

    def _emit_enum_decode(self, enumeration: Enumeration):
        out = self.sink

        out.line("auto str { node.as<std::string>() };")

        for i, constant in enumerate(enumeration.decoded_constants):
            if i > 0:
                out.write("else ")

            out.line(f"if (str == {_quote(constant.name)}) obj = {constant.qualified_name};")

        out.line("else return false;")

    # ===== Comparison =====

    def emit_compare(self, record: Record):
        """Emit an `operator==` that compares all fields of a record in declaration order.

        Useful where C++20's defaulted `operator==` is not available. Records declared in a named
        namespace get the operator in that namespace, so that argument-dependent lookup finds it.
        A record without fields compares equal to every other instance.

        Args:
            record (Record): The record to emit the operator for.
        """
        out = self.sink

        namespace = record.namespace
        type_name = strip_scope_prefix(record.type_name, namespace)

        if namespace:
            out.block(f"namespace {namespace} {{")

        out.line(f"inline bool operator==({type_name} const &obj, {type_name} const &other) {{")

        with out.indented():
            fields = record.fields

            if not fields:
                out.line("return true;")

            for i, field in enumerate(fields):
                out.write("return" if i == 0 else "      ")
                out.write(f" obj.{field.name} == other.{field.name}")
                out.line(";" if i == len(fields) - 1 else " &&")

        out.block("}")

        if namespace:
            out.block(f"}} // end namespace {namespace}")

