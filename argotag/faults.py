"""
Argotag faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain so logs and searches stay predictable.
- ArgumentException / ArgumentWarning: base types that carry a message plus
  read-only options and know how to render themselves with rich.
- trigger(): central entry point to surface any fault (raise, warn, or render
  and exit, depending on the shell option).
- getdoc(): optional description lookup for a code from the host application.

Domains
- tag grammar (211xx): malformed tag strings attached to record fields.
- field table (221xx): conflicts and bad defaults found while building the name table.
- token scan (231xx): problems found while consuming the input tokens.
- warnings (241xx): non-fatal conditions.

Integration
- The tag parser and the table builder raise construction-time faults directly.
- The scanning engine raises run-time faults; parseargs() routes every fault
  through trigger() so that shell mode prints it with rich and exits with 1.
- The host program may define __prog__, __styles__, __codes__ and __docs__ in
  __main__ to customize the rendering.
"""
import copy
import os.path
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - tag grammar (211xx)
      • TAG_SYNTAX, UNKNOWN_KEY
    - field table (221xx)
      • NAME_COLLISION, MISSING_NAME, INVALID_DEFAULT
    - token scan (231xx)
      • INVALID_VALUE, MISSING_VALUE, MISSING_REQUIRED
    - warnings (241xx)
      • EMPTY_VALUE
    """
    # --- tag grammar errors (21xxx) ---
    TAG_SYNTAX       = 21101
    UNKNOWN_KEY      = 21102

    # --- field table errors (22xxx) ---
    NAME_COLLISION   = 22101
    MISSING_NAME     = 22102
    INVALID_DEFAULT  = 22103

    # --- token scan errors (23xxx) ---
    INVALID_VALUE    = 23101
    MISSING_VALUE    = 23102
    MISSING_REQUIRED = 23103

    # --- warnings (24xxx) ---
    EMPTY_VALUE      = 24101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _program():
    main = __import__("__main__")
    return getattr(main, "__prog__", None) or os.path.basename(sys.argv[0]) or "argotag"


class _Fault:
    """
    shared construction, rendering and copying for errors and warnings.

    subclasses provide __palette__ (default styles) and __trigger__.
    """
    __palette__ = {}

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        styles = defaultdict(str, self.__palette__ | getattr(__import__("__main__"), "__styles__", {}))
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style] if colorful else "")

        code = self.options.get("code")
        title = self.options.get("title", "")

        header = Text.assemble(
            "[ ",
            text(_program(), "prog-name"),
            ": ",
            text(code.normalize() if isinstance(code, FaultCode) else code, "code"),
            " | ",
            text(title.title(), "title"),
            " ]"
        )
        message = text(self.message, "message")
        parts = [message]
        if hint := self.options.get("hint"):
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if fancy:
            return Panel(Group(*parts), title=header, title_align="left", width=self.options.get("width"))

        return Group(header, *parts)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ArgumentException(_Fault, Exception):
    """
    base of every parsing error.

    str(exception) is the plain message; the options carry the title, the
    fault code, an actionable hint and the offending context (name, value,
    field, names) for programmatic inspection.
    """
    __palette__ = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #00E5FF",
        "title": "bold #FF4DA6",
        "message": "#C8C8D0",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    }

    def __trigger__(self):
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        sys.exit(1)


class TagException(ArgumentException):
    """construction-time faults (bad tags, conflicts, bad defaults)."""


class ScanException(ArgumentException):
    """run-time faults found while consuming tokens."""


class TagSyntaxError(TagException): ...
class UnknownKeyError(TagException): ...
class NameCollisionError(TagException): ...
class MissingNameError(TagException): ...
class DefaultValueError(TagException): ...

class InvalidValueError(ScanException): ...
class MissingValueError(ScanException): ...
class MissingRequiredError(ScanException): ...


class ArgumentWarning(_Fault, Warning):
    __palette__ = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #FFB400",
        "title": "bold #FFC2E0",
        "message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
    }

    def __trigger__(self):
        if not self.options.get("shell"):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 4))
        console.print(self)


class EmptyValueWarning(ArgumentWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - in shell mode, rendering happens via the rich console; otherwise errors
      are raised and warnings are emitted through the warnings module.

    typical options
    - shell, fancy, colorful, and any context the renderer may want to show.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ArgumentException",
    "TagException",
    "ScanException",
    "TagSyntaxError",
    "UnknownKeyError",
    "NameCollisionError",
    "MissingNameError",
    "DefaultValueError",
    "InvalidValueError",
    "MissingValueError",
    "MissingRequiredError",
    "ArgumentWarning",
    "EmptyValueWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
