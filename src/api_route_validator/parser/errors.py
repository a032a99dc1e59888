"""Errors raised while loading and interpreting specification documents."""


class SpecParseError(Exception):
    """The specification document could not be read or understood."""


class UnresolvableReferenceError(SpecParseError):
    """A ``$ref`` points nowhere, or references form a cycle."""


class BasePathError(SpecParseError):
    """The server base path is ambiguous or not declared by the document."""
