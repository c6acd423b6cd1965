"""Command-line interface for generating yaml-cpp conversion code for annotated C++ headers.

Notes:
    - Generated headers depend on the runtime header `AutoYAML.h`, see `--install-runtime-header`.
"""

from __future__ import annotations

import argparse
import logging
import os.path
from collections.abc import Sequence

from autoyaml_generator.run import run

logger = logging.getLogger(__name__)


def _add_recursive_argument(parser: argparse.ArgumentParser):
    """Add a recursive argument to a parser.

    Args:
        parser (argparse.ArgumentParser): The parser to add the argument to.
    """
    parser.add_argument(
        "-r",
        "--recursive",
        dest="recursive",
        default=False,
        action="store_true",
        help="recursively search directories and `**` glob expressions for header files.",
    )


def setup_parser() -> argparse.ArgumentParser:
    """Setup for the parser.

    Returns:
        argparse.ArgumentParser: The parser after setup.
    """
    parser = argparse.ArgumentParser(description="Generate yaml-cpp conversion code for AutoYAML-annotated headers.")

    parser.add_argument(
        "-p",
        "--paths",
        type=str,
        nargs="+",
        default=[],
        help="paths, directories or glob expressions that match headers for code generation.",
    )

    parser.add_argument(
        "-e",
        "--excludes",
        type=str,
        nargs="+",
        default=[],
        help="path or glob expressions to exclude from path matches.",
    )

    parser.add_argument(
        "-o",
        "--out-dir",
        dest="output_dir",
        type=str,
        default="",
        help="directory to write generated headers to; defaults to alongside each input if omitted.",
    )

    parser.add_argument(
        "-I",
        "--include-path",
        dest="include_paths",
        type=str,
        nargs="+",
        default=[],
        help="additional include paths for parsing the headers (e.g. the yaml-cpp include directory).",
    )

    parser.add_argument(
        "-D",
        "--define",
        dest="defines",
        type=str,
        nargs="+",
        default=[],
        help="preprocessor macros to define while parsing the headers.",
    )

    parser.add_argument(
        "--extra-arg",
        dest="extra_args",
        type=str,
        action="append",
        default=[],
        help="additional argument to pass to the C++ parser; may be repeated.",
    )

    parser.add_argument(
        "--no-default-include-paths",
        dest="default_include_paths",
        default=True,
        action="store_false",
        help="do not add the system include directories of the host C++ compiler (`c++ -v`) when parsing.",
    )

    parser.add_argument(
        "--gen-comp-ops",
        dest="gen_comp_ops",
        default=False,
        action="store_true",
        help="generate comparison operators (operator==) for annotated records.",
    )

    parser.add_argument(
        "--legacy-decode",
        dest="legacy_decode",
        default=False,
        action="store_true",
        help="generate decode routines without shape and key validation (compatibility with old outputs).",
    )

    parser.add_argument(
        "--clang-format",
        dest="clang_format",
        default=False,
        action="store_true",
        help="format generated headers with clang-format.",
    )

    parser.add_argument(
        "--install-runtime-header",
        dest="install_runtime_header",
        type=str,
        default=None,
        help="copy the AutoYAML.h runtime header into the given directory.",
    )

    _add_recursive_argument(parser)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the conversion code generator.

    Args:
        argv (Sequence[str] | None, optional): Run arguments. Defaults to None.

    Returns:
        int: Error code.
    """
    logging.basicConfig(level=logging.INFO)

    root_directory = os.getcwd()
    logging.info("Working from root directory: %s", root_directory)

    parser = setup_parser()
    args = parser.parse_args(argv)

    if not args.paths and not args.install_runtime_header:
        parser.error("no input paths given (use -p/--paths).")

    return run(args, root_directory)
