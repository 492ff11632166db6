import io
import re

import pytest

from htmlmark.printing import (
    CLIError,
    CodeBlock,
    ColoredBox,
    Paragraph,
    Printer,
    print_error,
    print_warning,
)

_ANSI = re.compile(r"\x1b\[[0-9;]*m")


class _Terminal(io.StringIO):
    def isatty(self):
        return True


def test_paragraph():
    out = io.StringIO()
    Paragraph("Here is how you can use the CLI:").print(out)
    assert out.getvalue() == "Here is how you can use the CLI:\n"


def test_code_block_is_indented():
    out = io.StringIO()
    CodeBlock('echo "<strong>important</strong>" | html2markdown').print(out)
    assert out.getvalue() == '    echo "<strong>important</strong>" | html2markdown\n'


def test_colored_box_without_terminal_is_plain():
    out = io.StringIO()
    ColoredBox("error", "broken").print(out)
    assert out.getvalue() == "error: broken\n"


def test_colored_box_on_terminal_has_colors():
    out = _Terminal()
    ColoredBox("error", "broken").print(out)
    value = out.getvalue()
    assert "\x1b[" in value
    assert _ANSI.sub("", value) == "error: broken\n"


def test_print_details_plain_error():
    message = 'output path "out.md" already exists. Use --output-overwrite to replace existing files'
    out = io.StringIO()
    CLIError(message).print_details(out)
    assert out.getvalue() == "\nerror: " + message + "\n\n"


def test_print_details_with_hints():
    err = CLIError(
        ValueError("the html input should be piped into the cli"),
        Paragraph("Here is how you can use the CLI:"),
        CodeBlock("html2markdown"),
    )
    out = io.StringIO()
    err.print_details(out)
    expected = (
        "\nerror: the html input should be piped into the cli\n"
        "\nHere is how you can use the CLI:\n"
        "\n    html2markdown\n"
        "\n"
    )
    assert out.getvalue() == expected
    assert str(err) == "the html input should be piped into the cli"


def test_print_details_does_not_change_hints():
    err = CLIError("boom", Paragraph("hint"))
    first, second = io.StringIO(), io.StringIO()
    err.print_details(first)
    err.print_details(second)
    assert first.getvalue() == second.getvalue()
    assert len(err.printers) == 1


def test_cli_error_keeps_cause():
    cause = FileNotFoundError("missing")
    err = CLIError(cause)
    assert err.cause is cause
    assert err.__cause__ is cause
    with pytest.raises(CLIError, match="missing"):
        raise err


def test_print_error_wraps_plain_exception():
    out = io.StringIO()
    print_error(out, RuntimeError("unknown arguments: version"))
    assert out.getvalue() == "\nerror: unknown arguments: version\n\n"


def test_print_error_none_writes_nothing():
    out = io.StringIO()
    print_error(out, None)
    assert out.getvalue() == ""


def test_print_error_uses_cli_error_hints():
    out = io.StringIO()
    print_error(out, CLIError("unknown flag: --x", Paragraph("Did you mean --v instead?")))
    assert out.getvalue().endswith("\nDid you mean --v instead?\n\n")


def test_print_warning_plain():
    out = io.StringIO()
    print_warning(out, Exception("careful"))
    assert out.getvalue() == "\nwarning: careful\n\n"


def test_print_warning_terminal_strips_to_plain():
    out = _Terminal()
    print_warning(out, Exception("careful"))
    assert "\x1b[" in out.getvalue()
    assert _ANSI.sub("", out.getvalue()) == "\nwarning: careful\n\n"


def test_print_warning_none_writes_nothing():
    out = io.StringIO()
    print_warning(out, None)
    assert out.getvalue() == ""


def test_printer_is_abstract():
    with pytest.raises(TypeError):
        Printer()