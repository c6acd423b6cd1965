"""Top-level module for conversion code generation."""

from __future__ import annotations

import argparse
import dataclasses
import glob
import logging
import os.path
import shutil
import subprocess
import tempfile
from collections.abc import Iterable
from pathlib import Path

from autoyaml_generator.config import OUTPUT_SUFFIX, DecodePolicy, GeneratorConfig
from autoyaml_generator.declarations import DeclarationInfo
from autoyaml_generator.emitter import ConvertEmitter
from autoyaml_generator.errors import AutoYAMLError, OutputTargetError
from autoyaml_generator.sink import Sink
from autoyaml_generator.walker import DeclarationWalker

logger = logging.getLogger(__name__)

HEADER_EXTENSIONS = (".h", ".hh", ".hpp", ".hxx")
RUNTIME_HEADER_NAME = "AutoYAML.h"
DEFAULT_COMPILER = "c++"

_SEARCH_LIST_START = "#include <...> search starts here:"
_SEARCH_LIST_END = "End of search list."
_FRAMEWORK_SUFFIX = " (framework directory)"


def config_from_args(args: argparse.Namespace) -> GeneratorConfig:
    """Build the generator configuration from parsed command line arguments.

    Args:
        args (argparse.Namespace): The arguments that were passed when calling the generator.

    Returns:
        GeneratorConfig: The configuration.
    """
    clang_args: list[str] = []
    clang_args.extend(f"-I{path}" for path in getattr(args, "include_paths", []))
    clang_args.extend(f"-D{define}" for define in getattr(args, "defines", []))
    clang_args.extend(getattr(args, "extra_args", []))

    return GeneratorConfig(
        gen_comp_ops=getattr(args, "gen_comp_ops", False),
        output_dir=getattr(args, "output_dir", ""),
        decode_policy=DecodePolicy.LEGACY if getattr(args, "legacy_decode", False) else DecodePolicy.VALIDATED,
        clang_args=tuple(clang_args),
        format_output=getattr(args, "clang_format", False),
        default_include_paths=getattr(args, "default_include_paths", True),
    )


def output_path_for(input_path: str, output_dir: str = "") -> str:
    """Derive the path of the generated header for an input header.

    E.g. `include/config.h` becomes `<output_dir>/config.AutoYAML.h`, or `include/config.AutoYAML.h`
    when no output directory is given.

    Args:
        input_path (str): The input header.
        output_dir (str, optional): The output directory. Defaults to the directory of the input.

    Returns:
        str: The output path.
    """
    stem = os.path.splitext(os.path.basename(input_path))[0]
    directory = output_dir if output_dir else os.path.dirname(input_path)
    return os.path.join(directory, stem + OUTPUT_SUFFIX)


def generate_conversions(root: DeclarationInfo, config: GeneratorConfig) -> str:
    """Generate the conversion header for one translation unit.

    Each call uses its own sink, emitter and walker, so no state is shared between units.

    Args:
        root (DeclarationInfo): The root of the unit's declaration tree.
        config (GeneratorConfig): Generation options.

    Returns:
        str: The generated header.
    """
    sink = Sink()
    emitter = ConvertEmitter(sink, config)
    walker = DeclarationWalker(emitter)

    emitter.emit_preamble()
    walker.walk(root)

    logger.info("Generated conversions for %d declaration(s) in '%s'.", len(walker.emitted), root.name)

    return sink.getvalue()


def format_output(raw_input: str) -> str:
    """Formats generated code using clang-format.

    Args:
        raw_input (str): The unformatted input.

    Returns:
        str: The formatted output, or the input itself if formatting failed.
    """
    try:
        with tempfile.NamedTemporaryFile(mode="w", suffix=".h", delete=False, encoding="utf-8") as f:
            temp_path = Path(f.name)
            f.write(raw_input)

        try:
            subprocess.run(
                ["clang-format", "-i", str(temp_path)],
                capture_output=True,
                check=True,
            )

            return temp_path.read_text(encoding="utf-8")

        finally:
            temp_path.unlink(missing_ok=True)

    except FileNotFoundError:
        logger.error("clang-format not found, writing unformatted output.")
        return raw_input
    except subprocess.CalledProcessError as e:
        logger.error(f"clang-format failed: {e}")
        logger.error(f"Stderr: {e.stderr.decode('utf-8', errors='replace')}")
        return raw_input


def find_default_include_paths(compiler: str = DEFAULT_COMPILER) -> list[str]:
    """Ask the host C++ compiler for its system include directories.

    libclang does not know where the standard library and compiler builtin headers live, so their
    directories are taken from the `#include <...> search starts here:` block of `<compiler> -v`.

    Args:
        compiler (str, optional): The compiler to ask. Defaults to `DEFAULT_COMPILER`.

    Returns:
        list[str]: The include directories in search order, or an empty list if the compiler
            could not be run.
    """
    try:
        result = subprocess.run(
            [compiler, "-E", "-x", "c++", "-", "-v"],
            input="",
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError:
        logger.warning("%s not found, parsing without default include paths.", compiler)
        return []
    except subprocess.CalledProcessError as e:
        logger.warning(f"{compiler} failed, parsing without default include paths: {e}")
        return []

    return parse_include_search_list(result.stderr)


def parse_include_search_list(output: str) -> list[str]:
    """Extract the `#include <...>` search directories from verbose compiler output.

    Args:
        output (str): The standard error output of `<compiler> -E -v`.

    Returns:
        list[str]: The directories in search order.
    """
    paths: list[str] = []
    in_search_list = False

    for line in output.splitlines():
        if line.startswith(_SEARCH_LIST_START):
            in_search_list = True
        elif line.startswith(_SEARCH_LIST_END):
            break
        elif in_search_list:
            path = line.strip().removesuffix(_FRAMEWORK_SUFFIX)
            if path:
                paths.append(path)

    return paths


def with_default_include_paths(config: GeneratorConfig, compiler: str = DEFAULT_COMPILER) -> GeneratorConfig:
    """Append the compiler's system include directories to the parser arguments.

    User supplied `-I` flags come first, so they take precedence.

    Args:
        config (GeneratorConfig): The configuration from the command line.
        compiler (str, optional): The compiler to ask. Defaults to `DEFAULT_COMPILER`.

    Returns:
        GeneratorConfig: The configuration to use for the run.
    """
    if not config.default_include_paths:
        return config

    include_args: list[str] = []
    for path in find_default_include_paths(compiler):
        include_args.extend(("-isystem", path))

    logger.debug("Default include arguments: %s", include_args)

    return dataclasses.replace(config, clang_args=(*config.clang_args, *include_args))


def write_output(output_path: str, content: str):
    """Write a generated header.

    Args:
        output_path (str): The destination.
        content (str): The generated header.

    Raises:
        OutputTargetError: If the destination cannot be created or written.
    """
    try:
        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(output_path, "w", encoding="utf8") as output_file:
            output_file.write(content)

    except OSError as e:
        raise OutputTargetError(f'Failed to create output file "{output_path}": {e}') from e


def process_unit(path: str, config: GeneratorConfig) -> bool:
    """Generate the conversion header for a single input header.

    Failures are logged and only abort this unit.

    Args:
        path (str): The input header.
        config (GeneratorConfig): Generation options.

    Returns:
        bool: True, if the output was written.
    """
    # Imported here so that the rest of the package works without libclang installed.
    from autoyaml_generator.clang_backend import load_declarations

    output_path = output_path_for(path, config.output_dir)

    try:
        root = load_declarations(path, config.clang_args)
        content = generate_conversions(root, config)

        if config.format_output:
            content = format_output(content)

        write_output(output_path, content)

    except AutoYAMLError as e:
        logger.error("Skipping '%s': %s", path, e)
        return False

    logger.info("Wrote conversions to '%s'.", output_path)
    return True


def collect_paths(
    paths: Iterable[str],
    excludes: Iterable[str],
    recursive: bool,
    root_directory: str,
) -> list[str]:
    """Resolve paths, directories and glob expressions to a sorted list of header files.

    Args:
        paths (Iterable[str]): Paths, directories or glob expressions to search.
        excludes (Iterable[str]): Paths or glob expressions to exclude.
        recursive (bool): Whether directories and `**` globs are searched recursively.
        root_directory (str): The directory that relative paths are resolved against.

    Returns:
        list[str]: The matching header files.
    """
    excluded_paths: set[str] = set()
    for exclude in excludes:
        exclude_path = os.path.join(root_directory, exclude)
        if os.path.isfile(exclude_path):
            excluded_paths.add(os.path.normpath(exclude_path))
        else:
            excluded_paths.update(os.path.normpath(p) for p in glob.glob(exclude_path, recursive=recursive))

    search_paths: set[str] = set()
    for path in paths:
        search_path = os.path.join(root_directory, path)

        if recursive and os.path.isdir(search_path):
            for root, _, files in os.walk(search_path):
                for file in files:
                    if file.endswith(HEADER_EXTENSIONS):
                        search_paths.add(os.path.join(root, file))

        elif os.path.isdir(search_path):
            for file in os.listdir(search_path):
                file_path = os.path.join(search_path, file)
                if os.path.isfile(file_path) and file.endswith(HEADER_EXTENSIONS):
                    search_paths.add(file_path)

        else:
            search_paths.update(glob.glob(search_path, recursive=recursive))

    # Never feed generated headers back into the generator.
    valid_paths = {
        os.path.normpath(p)
        for p in search_paths
        if os.path.isfile(p) and not p.endswith(OUTPUT_SUFFIX)
    }

    return sorted(valid_paths - excluded_paths)


def find_runtime_header() -> str:
    """Find the bundled runtime header that generated code depends on.

    Returns:
        str: Path to `AutoYAML.h`.
    """
    current_dir = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(current_dir, "resources", RUNTIME_HEADER_NAME)


def install_runtime_header(directory: str) -> str:
    """Copy the bundled runtime header into a directory.

    Args:
        directory (str): The target directory, created if missing.

    Raises:
        OutputTargetError: If the header cannot be copied.

    Returns:
        str: The path of the installed header.
    """
    target = os.path.join(directory, RUNTIME_HEADER_NAME)

    try:
        os.makedirs(directory, exist_ok=True)
        shutil.copyfile(find_runtime_header(), target)
    except OSError as e:
        raise OutputTargetError(f'Failed to install runtime header to "{target}": {e}') from e

    logger.info("Installed runtime header to '%s'.", target)
    return target


def run(args: argparse.Namespace, root_directory: str) -> int:
    """Run the generator on a set of paths that point to C++ headers.

    Uses `process_unit` on each input file.

    Args:
        args (argparse.Namespace): The arguments that were passed when calling the generator.
        root_directory (str): The directory, from which the generator is executed.

    Returns:
        int: 0 if all units were generated successfully, 1 otherwise.
    """
    config = config_from_args(args)
    failures = 0

    runtime_header_dir: str | None = getattr(args, "install_runtime_header", None)
    if runtime_header_dir:
        try:
            install_runtime_header(os.path.join(root_directory, runtime_header_dir))
        except OutputTargetError as e:
            logger.error("%s", e)
            failures += 1

    valid_paths = collect_paths(args.paths, args.excludes, args.recursive, root_directory)

    if not valid_paths and not runtime_header_dir:
        logger.warning("No input headers found for %s.", args.paths)

    if valid_paths:
        config = with_default_include_paths(config)

    for path in valid_paths:
        if not process_unit(path, config):
            failures += 1

    if failures:
        logger.error("Generation failed for %d unit(s).", failures)
        return 1

    return 0
