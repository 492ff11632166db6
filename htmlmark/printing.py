"""Printing of error details and warnings for the command line."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TextIO, Union

__all__ = [
    "Printer",
    "ColoredBox",
    "Paragraph",
    "CodeBlock",
    "CLIError",
    "print_error",
    "print_warning",
]

_RESET = "\x1b[0m"
_BG_RED = "41"
_BG_YELLOW = "43"
_FG_RED = "31"
_FG_YELLOW = "33"
_FG_BRIGHT_WHITE = "97"


def _supports_color(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty()) if isatty is not None else False
    except (OSError, ValueError):
        return False


def _styled(stream: TextIO, text: str, *codes: str) -> str:
    if not _supports_color(stream) or not codes:
        return text
    return f"\x1b[{';'.join(codes)}m{text}{_RESET}"


class Printer(ABC):
    """Something that can write itself to a text stream."""

    @abstractmethod
    def print(self, stream: TextIO) -> None:
        """Write to ``stream``."""


class ColoredBox(Printer):
    """A highlighted ``prefix:`` label followed by a coloured message."""

    def __init__(self, prefix: str, text: str) -> None:
        self.prefix = prefix
        self.text = text

    def print(self, stream: TextIO) -> None:
        label = _styled(stream, self.prefix + ":", _BG_RED, _FG_BRIGHT_WHITE)
        message = _styled(stream, self.text, _FG_RED)
        stream.write(f"{label} {message}\n")


class Paragraph(Printer):
    """A line of plain text."""

    def __init__(self, text: str) -> None:
        self.text = text

    def print(self, stream: TextIO) -> None:
        stream.write(self.text + "\n")


class CodeBlock(Printer):
    """A line of code, indented by four spaces."""

    def __init__(self, code: str) -> None:
        self.code = code

    def print(self, stream: TextIO) -> None:
        stream.write(f"    {self.code}\n")


class CLIError(Exception):
    """An error with extra hints that are shown to the user."""

    def __init__(self, cause: Union[BaseException, str], *printers: Printer) -> None:
        super().__init__(str(cause))
        self.cause = cause
        self.printers = list(printers)
        if isinstance(cause, BaseException):
            self.__cause__ = cause

    def __str__(self) -> str:
        return str(self.cause)

    def print_details(self, stream: TextIO) -> None:
        """Write the error and its hints, separated by blank lines."""
        for printer in [ColoredBox("error", str(self.cause)), *self.printers]:
            stream.write("\n")
            printer.print(stream)
        stream.write("\n")


def print_error(stream: TextIO, err: BaseException | None) -> None:
    """Write ``err`` with its details; a plain exception gets no hints."""
    if err is None:
        return
    details = err if isinstance(err, CLIError) else CLIError(err)
    details.print_details(stream)


def print_warning(stream: TextIO, err: BaseException | None) -> None:
    """Write ``err`` as a warning."""
    if err is None:
        return
    label = _styled(stream, "warning:", _BG_YELLOW, _FG_BRIGHT_WHITE)
    message = _styled(stream, str(err), _FG_YELLOW)
    stream.write(f"\n{label} {message}\n\n")