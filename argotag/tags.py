r"""
Argotag tag grammar.

A tag is the string attached to one record field; it is a semicolon-separated
list of directives:

    short=n; long=name; default='alice'; required; help='the user\tname'

Grammar
- directives are separated by ';' unless the ';' sits inside single quotes,
  so values like help='first; second' keep their semicolon.
- each directive is trimmed and split on its first '=' into key and value;
  surrounding single quotes are stripped from the value.
- keys: short, long, default, required, help. Anything else is rejected.
- short values are normalized to a single-dash name ("n" -> "-n"), long values
  to a double-dash name ("name" -> "--name"); existing prefixes are kept.

Public API
- split(tag): raw directive segments.
- partition(text): (key, value) without validation.
- resolve(text): validated and normalized Directive.
- directives(tag): every validated Directive of a tag, in order.
"""
from typing import NamedTuple

from .faults import FaultCode, TagSyntaxError, UnknownKeyError, getdoc

KEYS = (
    "short",
    "long",
    "default",
    "required",
    "help",
)


class Directive(NamedTuple):
    """one key[=value] unit of a tag; value is None when no '=' was given."""
    key: str
    value: str | None = None


def split(tag, /):
    """
    split a tag into its directive segments.

    a single pass toggles an in-quotes state on every single quote; semicolons
    outside quotes delimit segments. each segment is whitespace-trimmed. a tag
    without delimiters is its own sole segment, and a trailing delimiter does
    not produce an empty last segment.
    """
    if not isinstance(tag, str):
        raise TypeError("split() argument must be a string")

    indices = []
    inside = False
    for index, char in enumerate(tag):
        match char:
            case "'":
                inside = not inside
            case ";" if not inside:
                indices.append(index)

    if not indices:
        return [tag.strip()]

    segments = []
    current = 0
    for index in indices:
        segments.append(tag[current:index].strip())
        current = index + 1
    if current != len(tag):
        segments.append(tag[current:].strip())
    return segments


def partition(text, /):
    """
    split one directive on its first '=' and strip single quotes off the value.

    >>> partition("help='a=b'")
    ('help', 'a=b')
    >>> partition("required")
    ('required', None)
    """
    key, equal, value = text.partition("=")
    if not equal:
        return key, None
    return key, value.strip("'")


def resolve(text, /):
    """
    turn one directive segment into a validated, normalized Directive.

    raises
    - TagSyntaxError: the key is empty (two delimiters in a row, or '=value'
      without a key).
    - UnknownKeyError: the key is not one of KEYS.
    """
    key, value = partition(text)

    if not key:
        raise TagSyntaxError(
            "syntax error: continuous semicolon",
            title="tag syntax error",
            code=FaultCode.TAG_SYNTAX,
            directive=text,
            hint="remove the empty directive or give it a key (for example: long=name)",
            docs=getdoc(FaultCode.TAG_SYNTAX),
        )

    if key not in KEYS:
        raise UnknownKeyError(
            "no such key: \"%s\"" % key,
            title="unknown tag key",
            code=FaultCode.UNKNOWN_KEY,
            key=key,
            hint="use one of %s" % ", ".join(KEYS),
            docs=getdoc(FaultCode.UNKNOWN_KEY),
        )

    match key:
        case "short":
            value = value or ""
            if not value.startswith("-"):
                value = "-" + value
        case "long":
            value = value or ""
            if not value.startswith("--"):
                value = "--" + value

    return Directive(key, value)


def directives(tag, /):
    """every validated directive of a tag, in declaration order."""
    return [resolve(segment) for segment in split(tag)]


__all__ = (
    "KEYS",
    "Directive",
    "split",
    "partition",
    "resolve",
    "directives",
)
