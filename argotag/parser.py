r"""
Argotag parsing engine: populate a tagged dataclass from command-line tokens.

What this module provides
- parse(record, tokens): build the name table, scan the tokens once, verify
  required flags, and return (instance, positionals). Faults are raised.
- parseargs(record, tokens): the same, routed through trigger() so that shell
  mode renders faults with rich on stderr and exits with status 1.
- printhelp(record, file): print the literal help text of every tagged field.

Scanning rules
- each token is split on its first '=' into a flag name and an inline value.
- unknown names: the whole original token is kept as a positional.
- bool fields: set to the opposite of their default; nothing else is consumed.
- other fields: the inline value, or else the next token taken whole (even if
  it looks like a flag). A missing next token is a fault.
- required fields are marked seen before their value is converted.
- after the scan, every required field still unseen is reported at once, in
  declaration order.

Quick start
    from dataclasses import dataclass
    from argotag import parse, tag

    @dataclass
    class Arguments:
        name: str = tag("short=n;long=name;required")
        count: int = tag("short=c;default=1")
        verbose: bool = tag("short=v;long=verbose;help='-v, --verbose\tbe chatty'")

    arguments, positionals = parse(Arguments, ["-n", "alice", "-c=5", "file.txt"])
    # Arguments(name='alice', count=5, verbose=False), ['file.txt']
"""
import dataclasses
import shlex
import sys
from collections.abc import Iterable

from .faults import (
    ArgumentException,
    FaultCode,
    InvalidValueError,
    MissingValueError,
    MissingRequiredError,
    EmptyValueWarning,
    trigger,
    getdoc,
)
from .models import METADATA, Kind, Table
from .tags import partition, split
from .utils import Unset, coalesce, ordinal


def _tokenize(tokens):
    """
    normalize the token input into a list[str].

    - Unset: sys.argv[1:].
    - str: shell-like string, split with shlex.split.
    - Iterable[str]: taken as-is; tokens are neither trimmed nor dropped.
    """
    if tokens is Unset:
        return sys.argv[1:]
    if isinstance(tokens, str):
        return shlex.split(tokens)
    if isinstance(tokens, Iterable):
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("tokens must be a string or an iterable of strings")
        return tokens
    raise TypeError("tokens must be a string or an iterable of strings")


def _convert(info, name, text, index):
    try:
        return info.kind.convert(text)
    except ValueError:
        raise InvalidValueError(
            "invalid value \"%s\" for flag: %s" % (text, name),
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            name=name,
            value=text,
            field=info.name,
            index=index,
            hint="pass a valid %s to %s at %s position" % (info.kind.value, name, ordinal(index)),
            docs=getdoc(FaultCode.INVALID_VALUE),
        ) from None


def _scan(table, tokens, **options):
    """walk the tokens once; return (values, positionals)."""
    values = {}
    positionals = []

    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1

        name, value = partition(token)
        if (info := table.lookup(name)) is None:
            positionals.append(token)
            continue

        if info.required:
            table.required[info.index] = True

        if info.kind is Kind.BOOL:
            values[info.name] = not info.polarity
        elif value is not None:
            if not value and info.kind is Kind.STRING:
                trigger(EmptyValueWarning(
                    "empty inline value for flag %s at %s position" % (name, ordinal(index)),
                    title="empty inline value",
                    code=FaultCode.EMPTY_VALUE,
                    name=name,
                    index=index,
                    hint="add a value after '=' (for example: %s=<value>)" % name,
                    docs=getdoc(FaultCode.EMPTY_VALUE),
                    stacklevel=6,
                ), **options)
            values[info.name] = _convert(info, name, value, index)
        elif index < len(tokens):
            values[info.name] = _convert(info, name, tokens[index], index + 1)
            index += 1
        else:
            raise MissingValueError(
                "flag needs an argument: %s" % name,
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                name=name,
                field=info.name,
                index=index,
                hint="pass a value after %s (for example: %s <value> or %s=<value>)" % (name, name, name),
                docs=getdoc(FaultCode.MISSING_VALUE),
            )

    missing = [table.fields[position] for position, seen in sorted(table.required.items()) if not seen]
    if missing:
        names = [name for info in missing for name in info.names]
        raise MissingRequiredError(
            "required arguments were not passed: %s" % " ".join(names),
            title="missing required arguments",
            code=FaultCode.MISSING_REQUIRED,
            names=tuple(names),
            fields=tuple(info.name for info in missing),
            hint="pass %s" % " and ".join(" or ".join(info.names) for info in missing),
            docs=getdoc(FaultCode.MISSING_REQUIRED),
        )

    return values, positionals


def _parse(record, tokens, **options):
    tokens = _tokenize(tokens)
    table = Table.build(record)
    values, positionals = _scan(table, tokens, **options)
    return table.instantiate(values), positionals


def parse(record, tokens=Unset, /):
    """
    populate a new `record` instance from `tokens`.

    Parameters
    - record: a dataclass type whose fields may carry argotag tags.
    - tokens: Unset (sys.argv[1:]), a shell-like string, or an iterable of str.

    Returns
    - (instance, positionals): the populated record and the leftover tokens.

    Raises
    - TagException subclasses for malformed tags, collisions and bad defaults.
    - ScanException subclasses for bad values, missing values and missing
      required flags.
    No instance is constructed unless parsing succeeds.
    """
    return _parse(record, tokens)


def parseargs(record, tokens=Unset, /, *, shell=True, fancy=False, colorful=True):
    """
    parse() for programs: faults are surfaced through trigger().

    - shell=True: faults are rendered with rich on stderr and the process
      exits with status 1; warnings are rendered without exiting.
    - shell=False: faults are raised as in parse().
    - fancy: render faults inside a rich panel.
    - colorful: use the fault color styles (overridable via __styles__).
    """
    options = {"shell": bool(shell), "fancy": bool(fancy), "colorful": bool(colorful)}
    try:
        return _parse(record, tokens, **options)
    except ArgumentException as exception:
        trigger(exception, **options)
        raise


def _unescape(text):
    return text.replace("\\t", "\t").replace("\\n", "\n")


def printhelp(record, file=Unset, /):
    r"""
    print the help text of every tagged field, one per line.

    Only the help directives are read; the two-character sequences \t and \n
    become a tab and a newline. Tags are not validated here, so malformed
    directives are skipped instead of raising.
    """
    if not isinstance(record, type) or not dataclasses.is_dataclass(record):
        raise TypeError("record must be a dataclass type")

    file = coalesce(file, sys.stdout)
    for field in dataclasses.fields(record):
        text = field.metadata.get(METADATA, "")
        if not isinstance(text, str) or not text.strip():
            continue
        for segment in split(text):
            key, value = partition(segment)
            if key == "help" and value is not None:
                print(_unescape(value), file=file)


__all__ = (
    "parse",
    "parseargs",
    "printhelp",
)
