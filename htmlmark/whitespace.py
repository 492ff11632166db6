"""Whitespace normalisation for text nodes."""

import re

__all__ = ["replace_any_whitespace_with_space"]

_ANY_WHITESPACE = re.compile(r"[ \r\n\t]+")


def replace_any_whitespace_with_space(source: str) -> str:
    """Replace every run of spaces, tabs, CRs and LFs with a single space."""
    return _ANY_WHITESPACE.sub(" ", source)