"""
Argotag field model: value kinds, field descriptors and the name table.

A record is a dataclass whose fields carry a tag under the "argotag" metadata
key (see tag()). Table.build() walks the record once and produces everything
the scanning engine needs:

- names:    flag literal ("-n", "--name") -> field index
- fields:   field index -> FieldInfo (immutable descriptor)
- required: field index -> seen flag, False for every required field
- values:   attribute name -> initial value (zero values plus tag defaults)

Supported kinds are str, bool, int and uint (an unsigned marker type over int).
Untagged fields never enter the name table; they keep their dataclass default,
or the zero value of their kind when they have none.
"""
import copy
import dataclasses
import re
import typing
from enum import Enum
from typing import NamedTuple, NewType

from .faults import (
    FaultCode,
    TagException,
    NameCollisionError,
    MissingNameError,
    DefaultValueError,
    getdoc,
)
from .tags import directives
from .utils import rename

METADATA = "argotag"

uint = NewType("uint", int)


def _integer(name, pattern, lower, upper):
    """build a strict base-10 converter bounded to [lower, upper]."""

    @rename(name)
    def converter(text, /):
        if not re.fullmatch(pattern, text):
            raise ValueError("invalid literal for %s: %r" % (name, text))
        value = int(text)
        if not lower <= value <= upper:
            raise ValueError("value out of range for %s: %r" % (name, text))
        return value

    return converter


class Kind(Enum):
    """primitive kind of a record field."""
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    UINT = "uint"

    @classmethod
    def of(cls, hint, /):
        """map a resolved type hint to its kind, or None when unsupported."""
        try:
            return {str: cls.STRING, bool: cls.BOOL, int: cls.INT, uint: cls.UINT}.get(hint)
        except TypeError:  # unhashable hints
            return None

    @property
    def zero(self):
        return "" if self is Kind.STRING else False if self is Kind.BOOL else 0

    def convert(self, text, /):
        """
        convert a textual value into this kind.

        - string: returned unchanged.
        - bool: True only for the literal "true".
        - int: optional sign and ASCII digits, signed 64-bit range.
        - uint: ASCII digits only, unsigned 64-bit range.

        raises ValueError when the text is not a valid literal of the kind.
        """
        match self:
            case Kind.STRING:
                return text
            case Kind.BOOL:
                return text == "true"
            case Kind.INT:
                return _int(text)
            case Kind.UINT:
                return _uint(text)


_int = _integer("int", r"[+-]?[0-9]+", -2 ** 63, 2 ** 63 - 1)
_uint = _integer("uint", r"[0-9]+", 0, 2 ** 64 - 1)


class FieldInfo(NamedTuple):
    """
    immutable descriptor of one tagged field.

    - index: declaration position within the record.
    - name: attribute name on the record.
    - kind: the field's Kind.
    - required: whether the field must be passed.
    - polarity: configured default of a bool field; passing the flag sets
      the opposite value.
    - names: configured flag names, in tag order.
    """
    index: int
    name: str
    kind: Kind
    required: bool = False
    polarity: bool = False
    names: tuple[str, ...] = ()


def tag(text, /, **options):
    """
    declare a tagged dataclass field.

    Thin wrapper over dataclasses.field() storing the tag under the "argotag"
    metadata key. Extra keyword options are forwarded to dataclasses.field();
    a dataclass default on a tagged field only applies to direct construction,
    the parser always starts from the zero value and the tag's default.

    Without a default= option the field has no dataclass default, so it is a
    required constructor argument and follows the usual dataclass ordering:
    it cannot come after a field that has a default. Pass default= (any value,
    the parser ignores it) when declaring it below such a field.

        @dataclass
        class Arguments:
            name: str = tag("short=n;long=name;required")
            count: int = tag("short=c;default=1", default=1)
    """
    if not isinstance(text, str):
        raise TypeError("tag() argument must be a string")
    metadata = dict(options.pop("metadata", None) or {})
    metadata[METADATA] = text
    return dataclasses.field(metadata=metadata, **options)


def _untagged(field, hint):
    """initial value of a field the parser never touches."""
    if field.default is not dataclasses.MISSING:
        return field.default
    if field.default_factory is not dataclasses.MISSING:
        return field.default_factory()
    kind = Kind.of(hint)
    return kind.zero if kind else None


class Table:
    """
    per-call lookup structures built from one record type.

    A Table is created by build() and discarded once the call that built it
    returns; it is never shared between calls.
    """

    def __init__(self, record, /):
        self.record = record
        self.names = {}
        self.fields = {}
        self.required = {}
        self.values = {}

    def __repr__(self):
        return "%s(%s, names=%r)" % (type(self).__name__, self.record.__name__, self.names)

    def add(self, name, index, /):
        """bind a flag name to a field index; a second binding is a collision."""
        if name in self.names:
            raise NameCollisionError(
                "flag name collision: \"%s\"" % name,
                title="flag name collision",
                code=FaultCode.NAME_COLLISION,
                name=name,
                hint="give each field its own short and long names",
                docs=getdoc(FaultCode.NAME_COLLISION),
            )
        self.names[name] = index

    def lookup(self, name, /):
        """descriptor registered for a flag name, or None."""
        try:
            return self.fields[self.names[name]]
        except KeyError:
            return None

    def instantiate(self, values=None, /):
        """construct the record from the initial values updated with `values`."""
        return self.record(**(self.values | (values or {})))

    @classmethod
    def build(cls, record, /):
        """
        walk the record's fields once and build the table.

        raises
        - TypeError: record is not a dataclass type, or a tagged field has an
          unsupported type or is excluded from __init__.
        - TagSyntaxError / UnknownKeyError: malformed tag.
        - NameCollisionError: a flag name is configured twice.
        - MissingNameError: a tag configures neither short nor long.
        - DefaultValueError: a default does not convert to the field's kind.
        """
        if not isinstance(record, type) or not dataclasses.is_dataclass(record):
            raise TypeError("record must be a dataclass type")

        self = cls(record)
        hints = typing.get_type_hints(record)

        for index, field in enumerate(dataclasses.fields(record)):
            text = field.metadata.get(METADATA, "")
            if not isinstance(text, str):
                raise TypeError(f"tag of field {field.name!r} must be a string")

            if not text.strip():
                if field.init:
                    self.values[field.name] = _untagged(field, hints.get(field.name))
                continue

            if not field.init:
                raise TypeError(f"tagged field {field.name!r} must be an init field")
            if (kind := Kind.of(hints.get(field.name))) is None:
                raise TypeError(f"tagged field {field.name!r} must be a str, bool, int or uint")

            try:
                parsed = directives(text)
            except TagException as exception:
                raise copy.replace(exception, field=field.name) from None

            value = kind.zero
            names = []
            required = False
            polarity = False

            for key, argument in parsed:
                match key:
                    case "short" | "long":
                        self.add(argument, index)
                        names.append(argument)
                    case "default":
                        argument = argument or ""
                        try:
                            value = kind.convert(argument)
                        except ValueError:
                            raise DefaultValueError(
                                "invalid value \"%s\" for %s" % (argument, field.name),
                                title="invalid default value",
                                code=FaultCode.INVALID_DEFAULT,
                                field=field.name,
                                value=argument,
                                hint="use a default that is a valid %s" % kind.value,
                                docs=getdoc(FaultCode.INVALID_DEFAULT),
                            ) from None
                        if kind is Kind.BOOL:
                            polarity = value
                    case "required":
                        required = True
                        self.required[index] = False

            if not names:
                raise MissingNameError(
                    "either a short or long name must be set for %s" % field.name,
                    title="missing flag name",
                    code=FaultCode.MISSING_NAME,
                    field=field.name,
                    hint="add short=<name> or long=<name> to the tag",
                    docs=getdoc(FaultCode.MISSING_NAME),
                )

            self.values[field.name] = value
            self.fields[index] = FieldInfo(index, field.name, kind, required, polarity, tuple(names))

        return self


__all__ = (
    "METADATA",
    "uint",
    "Kind",
    "FieldInfo",
    "Table",
    "tag",
)
