"""Exceptions raised while generating conversion code."""

from __future__ import annotations


class AutoYAMLError(Exception):
    """Base class for all generator errors."""

    pass


class IntegrationError(AutoYAMLError):
    """Raised when a matched declaration does not carry the expected marker structure.

    This indicates a bug in declaration discovery or a malformed marker, never bad user data.
    Generation of the affected unit is aborted.
    """

    pass


class OutputTargetError(AutoYAMLError):
    """Raised when the generated header cannot be written to its destination."""

    pass


class ParseError(AutoYAMLError):
    """Raised when the C++ parser cannot produce a translation unit."""

    pass
