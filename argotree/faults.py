"""
Argotree faults (parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing parse
  failure. Codes are grouped by domain so logs and searches stay predictable.
- ParseError: base type carrying a message plus options; knows how to render
  itself through rich in a friendly, lowercased, actionable way.
- trigger(): central entry point to surface a fault (raise in library mode,
  print and exit in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Fault kinds
- UnrecognizedArgumentError: a token matched nothing at its position. Carries
  the token index.
- ArgumentAlreadySetError: an argument's key or value appeared twice.
- ArgumentRequiresValueError: a key-value key matched without a value.
- AmbiguousValueError: the loose value following a key starts with the glue
  prefix and could be another flag.
- ExcessiveCommandError: two mutually-exclusive optional sub-commands matched.
- MissingArgumentError: a required argument or sub-command selection is absent.

Every fault is fatal to the parse; there is no partial-success mode.
"""
import inspect
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by high-level domain)
    - tokens (2110x): UNRECOGNIZED_ARGUMENT
    - arguments (2111x): ARGUMENT_ALREADY_SET, ARGUMENT_REQUIRES_VALUE, AMBIGUOUS_VALUE
    - commands (2112x): EXCESSIVE_COMMAND
    - validation (2113x): MISSING_ARGUMENT

    spacing leaves room for future additions without reshuffling existing codes.
    """
    # --- token errors ---
    UNRECOGNIZED_ARGUMENT   = 21101

    # --- argument errors ---
    ARGUMENT_ALREADY_SET    = 21111
    ARGUMENT_REQUIRES_VALUE = 21112
    AMBIGUOUS_VALUE         = 21113

    # --- command errors ---
    EXCESSIVE_COMMAND       = 21121

    # --- validation errors ---
    MISSING_ARGUMENT        = 21131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ParseError(Exception):
    """
    base class of every fault raised while matching or validating tokens.

    options
    - code/title: default per subclass (see _defaults), overridable.
    - hint: one short actionable sentence.
    - context such as index, token or argument, depending on the fault.
    - runtime flags merged by trigger(): shell, colorful, fancy, prog.

    abstract: only the concrete subclasses carry a code and a title.
    """
    _defaults = MappingProxyType({})

    def __init__(self, message, /, **options):
        if type(self) is ParseError:
            raise TypeError("ParseError is abstract, raise one of its subclasses")
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({"hint": "", **type(self)._defaults, **options})

    @property
    def code(self):
        return self.options["code"]

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        prog = text(getattr(main, "__prog__", self.options.get("prog", "argotree")), "prog-name")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.options["title"].title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        parts = [message]
        if self.options["hint"]:
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(self.options["hint"], "hint")))

        if fancy:
            return Panel(Group(*parts), title=header, title_align="left")
        return Group(header, *parts)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnrecognizedArgumentError(ParseError):
    _defaults = MappingProxyType({"code": FaultCode.UNRECOGNIZED_ARGUMENT, "title": "unrecognized argument"})

    @property
    def index(self):
        """position of the offending token in the parsed stream."""
        return self.options["index"]


class ArgumentAlreadySetError(ParseError):
    _defaults = MappingProxyType({"code": FaultCode.ARGUMENT_ALREADY_SET, "title": "argument already set"})


class ArgumentRequiresValueError(ParseError):
    _defaults = MappingProxyType({"code": FaultCode.ARGUMENT_REQUIRES_VALUE, "title": "missing value"})


class AmbiguousValueError(ParseError):
    _defaults = MappingProxyType({"code": FaultCode.AMBIGUOUS_VALUE, "title": "ambiguous value"})


class ExcessiveCommandError(ParseError):
    _defaults = MappingProxyType({"code": FaultCode.EXCESSIVE_COMMAND, "title": "excessive command"})


class MissingArgumentError(ParseError):
    _defaults = MappingProxyType({"code": FaultCode.MISSING_ARGUMENT, "title": "missing argument"})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ParseError).
    - options are merged into a copy of the fault before triggering.
    - in shell mode the fault is printed to stderr and the process exits with
      status 1; otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings. when
    not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return inspect.cleandoc(getattr(__import__("__main__"), "__docs__", {})[code])
    except KeyError:
        return None


__all__ = (
    "ParseError",
    "UnrecognizedArgumentError",
    "ArgumentAlreadySetError",
    "ArgumentRequiresValueError",
    "AmbiguousValueError",
    "ExcessiveCommandError",
    "MissingArgumentError",
    "FaultCode",
    "trigger",
    "getdoc",
)
