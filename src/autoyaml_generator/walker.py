"""Discover declarations marked with `AutoYAML` and hand each one to the emitter exactly once."""

from __future__ import annotations

import logging

from autoyaml_generator.classifier import classify
from autoyaml_generator.declarations import AUTO_YAML_ANNOTATION, AnnotatedDeclaration, DeclarationInfo
from autoyaml_generator.emitter import ConvertEmitter
from autoyaml_generator.errors import IntegrationError

logger = logging.getLogger(__name__)


def has_auto_yaml_marker(decl: DeclarationInfo) -> bool:
    """Check whether the first marker of a declaration is `annotate("AutoYAML")`.

    Only the first marker is inspected. A declaration whose `AutoYAML` annotation follows another
    attribute (or another annotation) is skipped.

    Args:
        decl (DeclarationInfo): A declaration matched by the whole-tree query.

    Raises:
        IntegrationError: If the declaration has no markers at all. The query only matches
            declarations with attributes, so this means that discovery and the parser backend disagree.

    Returns:
        bool: True, if the declaration is marked for conversion code generation.
    """
    if not decl.markers:
        raise IntegrationError(f"Declaration '{decl.name}' was matched but carries no attributes.")

    marker = decl.markers[0]

    return marker.is_annotation and marker.payload == AUTO_YAML_ANNOTATION


class DeclarationWalker:
    """Walks a declaration tree and emits conversion code for all `AutoYAML` declarations.

    One walker processes one translation unit. Its set of visited declaration ids guarantees that
    every declaration is emitted at most once, even though nested declarations are reached both
    by the whole-tree walk and by the explicit recursion from their enclosing record.
    """

    def __init__(self, emitter: ConvertEmitter):
        """Initialize the walker.

        Args:
            emitter (ConvertEmitter): The emitter that receives discovered declarations.
        """
        self.emitter = emitter
        self.emitted: list[AnnotatedDeclaration] = []
        self._visited: set[int] = set()

    def walk(self, root: DeclarationInfo):
        """Process every candidate declaration below and including `root`, in pre-order.

        Args:
            root (DeclarationInfo): The root of the declaration tree (usually the translation unit).
        """
        for decl in root.walk_preorder():
            if decl.is_candidate:
                self.match(decl)

    def match(self, decl: DeclarationInfo):
        """Process a single candidate declaration.

        Records first process their direct child declarations, so nested types are emitted before
        the record that uses them.

        Args:
            decl (DeclarationInfo): The candidate declaration.
        """
        if decl.id in self._visited:
            return

        self._visited.add(decl.id)

        if decl.is_record:
            for child in decl.children:
                if child.is_candidate:
                    self.match(child)

            self._run(decl)

        elif decl.is_enum:
            self._run(decl)

    def _run(self, decl: DeclarationInfo):
        if not has_auto_yaml_marker(decl):
            logger.debug("Skipping '%s': not marked with '%s'.", decl.name, AUTO_YAML_ANNOTATION)
            return

        declaration = classify(decl, self.emitter.config.printing_policy)
        self.emitter.emit(declaration)
        self.emitted.append(declaration)
