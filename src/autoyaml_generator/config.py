"""Run-wide configuration, shared read-only by every processed unit."""

from __future__ import annotations

from dataclasses import dataclass, field

from autoyaml_generator.type_names import PrintingPolicy

OUTPUT_SUFFIX = ".AutoYAML.h"


class DecodePolicy:
    """How generated `decode` routines validate their input."""

    VALIDATED = "validated"
    # Earliest generator: no shape or key checks, decode always reports success.
    LEGACY = "legacy"


@dataclass(frozen=True)
class GeneratorConfig:
    """Options that control code generation.

    Attributes:
        gen_comp_ops: Emit an `operator==` for every annotated record.
        output_dir: Directory for generated headers; empty to write next to each input.
        decode_policy: One of the `DecodePolicy` values.
        clang_args: Extra arguments passed to the C++ parser.
        format_output: Run the generated header through clang-format.
        default_include_paths: Append the system include directories of the host C++ compiler to
            `clang_args`, so that standard library headers resolve without `-I` flags.
        printing_policy: How type names are printed.
    """

    gen_comp_ops: bool = False
    output_dir: str = ""
    decode_policy: str = DecodePolicy.VALIDATED
    clang_args: tuple[str, ...] = ()
    format_output: bool = False
    default_include_paths: bool = True
    printing_policy: PrintingPolicy = field(default_factory=PrintingPolicy)

    def __post_init__(self):
        """Sanity check for the decode policy."""
        if self.decode_policy not in (DecodePolicy.VALIDATED, DecodePolicy.LEGACY):
            raise ValueError(f"Unknown decode policy '{self.decode_policy}'.")
