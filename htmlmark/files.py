"""Finding input files and deciding where converted output goes."""

from __future__ import annotations

import dataclasses
import glob
import hashlib
import json
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .printing import CLIError, CodeBlock, Paragraph

__all__ = [
    "OutputType",
    "InputFile",
    "file_name_without_extension",
    "has_folder_suffix",
    "list_input_files",
    "read_input",
    "determine_output_type",
    "calculate_output_paths",
    "hash_filepath",
    "ensure_output_directories",
    "write_file",
]

# The basename used when the input comes from stdin.
DEFAULT_BASENAME = "output"

_GLOB_EXAMPLE = 'html2markdown --input "src/*.html" --output "dist/"'
_GLOB_HINT = "Here is how you can use a glob to match multiple files:"
_GLOB_META = "*?[{\\"


class OutputType(str, Enum):
    """Where the converted markdown is written."""

    STDOUT = "stdout"
    DIRECTORY = "directory"
    FILE = "file"


@dataclass
class InputFile:
    """One input to convert and the file name its output gets."""

    input_full_filepath: str
    output_full_filepath: str = ""
    data: Optional[bytes] = None


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _extension(path: str) -> str:
    for index in range(len(path) - 1, -1, -1):
        char = path[index]
        if char == "/" or char == os.sep:
            return ""
        if char == ".":
            return path[index:]
    return ""


def file_name_without_extension(file_name: str) -> str:
    """Drop the extension, e.g. ``website.html`` -> ``website``."""
    ext = _extension(file_name)
    return file_name[: len(file_name) - len(ext)] if ext else file_name


def has_folder_suffix(output_path: str) -> bool:
    """Whether the path ends with a separator and so names a directory."""
    return output_path.endswith(os.sep) or output_path.endswith("/")


def list_input_files(pattern: str) -> list[InputFile]:
    """Find the files matching a path or glob pattern (``**`` included)."""
    matches = sorted(
        path
        for path in glob.glob(pattern, recursive=True)
        if os.path.isfile(path)
    )
    if not matches:
        if os.path.isdir(pattern):
            raise CLIError(
                f"input path {_quote(pattern)} is a directory, not a file",
                Paragraph(_GLOB_HINT),
                CodeBlock(_GLOB_EXAMPLE),
            )
        raise CLIError(
            f"no files found matching pattern {_quote(pattern)}",
            Paragraph(_GLOB_HINT),
            CodeBlock(_GLOB_EXAMPLE),
        )
    return [InputFile(path) for path in matches]


def read_input(input_file: InputFile) -> bytes:
    """The input's content, read from disk unless it is already held."""
    if input_file.data is not None:
        return input_file.data
    with open(input_file.input_full_filepath, "rb") as handle:
        return handle.read()


def _base(path: str) -> str:
    return os.path.basename(os.path.normpath(path))


def determine_output_type(input_path: str, count_inputs: int, output_path: str) -> OutputType:
    """Decide whether output goes to stdout, a directory or a single file."""
    if not output_path:
        if count_inputs > 1:
            raise CLIError(
                "when processing multiple input files --output needs to be a directory",
                Paragraph(_GLOB_HINT),
                CodeBlock(_GLOB_EXAMPLE),
            )
        return OutputType.STDOUT

    if has_folder_suffix(output_path):
        return OutputType.DIRECTORY

    if count_inputs > 1:
        name = _base(output_path)
        raise CLIError(
            f'when processing multiple input files, --output "{name}" must end with '
            f'"{name}/" to indicate a directory'
        )

    if os.path.isdir(output_path):
        name = _base(output_path)
        raise CLIError(
            f'path "{name}" exists and is a directory, did you mean "{name}/"?',
            Paragraph('The --output must end with "/" to indicate a directory'),
        )
    return OutputType.FILE


def _to_slash(path: str) -> str:
    return path.replace(os.sep, "/") if os.sep != "/" else path


def _glob_base(pattern: str) -> str:
    parts = pattern.split("/")
    stop = len(parts) - 1
    for index, part in enumerate(parts):
        if any(char in part for char in _GLOB_META):
            stop = index
            break
    base = "/".join(parts[:stop])
    if not base:
        return "/" if pattern.startswith("/") and stop > 0 else "."
    return base


def calculate_output_paths(input_filepath: str, inputs: Sequence[InputFile]) -> list[InputFile]:
    """Give every input an output file name, disambiguating repeated names.

    The first input with a given name gets ``name.md``; later ones get a
    short hash of their path relative to the pattern's base directory.
    """
    glob_base = _glob_base(_to_slash(os.path.normpath(input_filepath)))
    seen: dict[str, int] = {}
    result = []
    for item in inputs:
        basename = file_name_without_extension(os.path.basename(item.input_full_filepath))
        if not seen.get(basename):
            output = basename + ".md"
        else:
            relative = os.path.relpath(item.input_full_filepath, glob_base)
            output = f"{basename}.{hash_filepath(relative)[:10]}.md"
        seen[basename] = seen.get(basename, 0) + 1
        result.append(dataclasses.replace(item, output_full_filepath=output))
    return result


def hash_filepath(path: str) -> str:
    """SHA-256 hex digest of the path written with forward slashes."""
    return hashlib.sha256(_to_slash(path).encode("utf-8")).hexdigest()


def ensure_output_directories(output_type: OutputType, output_filepath: str) -> None:
    """Create the directory that output will be written into."""
    if output_type is OutputType.DIRECTORY:
        os.makedirs(output_filepath, exist_ok=True)
    elif output_type is OutputType.FILE:
        directory = os.path.dirname(output_filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)


def write_file(filename: str, data: bytes, override: bool) -> None:
    """Write ``data``; without ``override`` an existing file raises FileExistsError."""
    with open(filename, "wb" if override else "xb") as handle:
        handle.write(data)