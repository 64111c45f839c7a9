r"""
Argotree argument declarations and token matching.

Overview
- Variants
  • Flag: named, presence-only switch with one or more aliases (e.g., -v/--verbose).
    A flag whose alias is the glue prefix followed by exactly one character is
    gluable: several of them can be combined behind one prefix ("-vx").
  • Value: positional, value-bearing argument identified by its position.
  • KeyValue: named, value-bearing option (--name=<m> or --name <m>).
  Any variant can also serve as the discriminator of a Command.

- Matching
  • match(tokens) inspects the remaining token slice and returns how many
    tokens it consumed; 0 means "did not match here".
  • Matching is write-once: a second successful match raises
    ArgumentAlreadySetError.

- Text fragments
  • synopsis(): the compact form used in "Usage:" lines.
  • options(): the left column of a description row.
  • description(): the right column of a description row.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields listed in __introspectable__ as read-only properties.

Metadata (sanitized on construction and on assignment)
- help: str (may be empty).
- required: bool.
- names/aliases: non-empty strings, unique per argument; KeyValue aliases cannot
  contain "=".
- metavar: non-empty string.
- default: str.

Quick example:
    >>> from argotree.arguments import Flag, Value, KeyValue
    >>> verbose = Flag("--verbose", "Print more.", aliases=["-v"])
    >>> amount = KeyValue("--amount", "number", "How many.", default="1")
    >>> target = Value("file", "Input file.", required=True)
"""
import functools
import operator
import re

from .faults import ArgumentAlreadySetError, ArgumentRequiresValueError, AmbiguousValueError
from .utils import *


class ArgumentType(type):
    """
    Metaclass giving argument classes a uniform introspection surface.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used in messages and help output.
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring "_<name>", unless the class hierarchy already defines it.
    - Provide stable, readable __repr__/__rich_repr__ implementations.

    Conventions
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name.lstrip("_")).lower(),
            },
            **options
        )
        for field in self.__introspectable__:
            if not hasattr(self, field):
                setattr(self, field, mirror(field))

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - flag(aliases=['--verbose', '-v'], help='Print more.', ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_string(cls, field, object, /, *, empty=False):
    if not isinstance(object, str):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    if not empty and not object.strip():
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    return object


def _sanitize_alias(cls, alias, aliases, /):
    """
    Internal: validate one alias against the aliases already declared.

    Raises
    - TypeError: when the alias is not a string.
    - ValueError: when it is blank, repeats an existing alias, or (for
      key-value arguments) contains "=".
    """
    alias = _sanitize_string(cls, "alias", alias)
    if issubclass(cls, KeyValue) and "=" in alias:
        raise ValueError(f"{cls.__typename__} aliases cannot contain '='")
    if alias in aliases:
        raise ValueError(f"{cls.__typename__} aliases cannot contain duplicates")
    return alias


class Argument(metaclass=ArgumentType):
    """
    Base of every argument variant.

    State
    - help/required: declaration metadata, assignable after construction.
    - is_set: becomes True on the first successful match and never reverts.

    Subclasses implement match(), synopsis() and options(); description()
    defaults to the help text.
    """
    __introspectable__ = ("help", "required", "is_set")

    def __init__(self, help="", *, required=False):
        self.help = help
        self.required = required
        self._is_set = False

    @property
    def help(self):
        return self._help

    @help.setter
    def help(self, help):
        self._help = _sanitize_string(type(self), "help", help, empty=True)

    @property
    def required(self):
        return self._required

    @required.setter
    def required(self, required):
        self._required = bool(required)

    def _mark_set(self):
        if self._is_set:
            raise ArgumentAlreadySetError(
                f"argument \"{self.synopsis()}\" has been already set",
                argument=self.synopsis(),
                hint="pass each argument at most once"
            )
        self._is_set = True

    def match(self, tokens, /):
        raise NotImplementedError

    def synopsis(self):
        raise NotImplementedError

    def options(self):
        raise NotImplementedError

    def description(self):
        return self._help


class _Keyed(Argument):
    """
    Shared alias handling of Flag and KeyValue; the first alias is the name.
    """
    __introspectable__ = ("aliases",)

    def __init__(self, name, help="", *, aliases=(), required=False):
        super().__init__(help, required=required)
        self._aliases = []
        self.add_alias(name)
        for alias in aliases:
            self.add_alias(alias)

    @property
    def name(self):
        return self._aliases[0]

    def add_alias(self, alias, /):
        """Append an alias and return self for chaining."""
        self._aliases.append(_sanitize_alias(type(self), alias, self._aliases))
        return self

    def _keys(self):
        return " ".join(self._aliases)


class _Payload:
    """
    Mixin for value-bearing variants: metavar, default and the matched value.

    The effective value is the matched one once set, the default otherwise; an
    explicitly empty match ("--opt=") therefore stays empty.
    """

    @property
    def metavar(self):
        return self._metavar

    @metavar.setter
    def metavar(self, metavar):
        self._metavar = _sanitize_string(type(self), "metavar", metavar)

    @property
    def default(self):
        return self._default

    @default.setter
    def default(self, default):
        self._default = _sanitize_string(type(self), "default", default, empty=True)

    @property
    def value(self):
        return self._value if self._is_set else self._default

    def _assign(self, value):
        self._mark_set()
        self._value = value

    def description(self):
        return f"{self._help} Default value: \"{self._default}\"."


class Flag(_Keyed):
    """
    Named, presence-only argument.

    A Flag matches when the current token equals one of its aliases. When one
    of its aliases is the glue prefix plus exactly one character, that
    character is its glue_char (the last such alias added wins) and the flag
    can be combined with its siblings in a single token ("-vx").
    """
    __introspectable__ = ("aliases", "help", "required", "is_set", "glue_char")
    __displayable__ = ("aliases", "help", "required", "is_set")

    @property
    def glue_char(self):
        prefix = glue()
        char = None
        for alias in self._aliases:
            if len(alias) == len(prefix) + 1 and alias.startswith(prefix):
                char = alias[-1]
        return char

    def match(self, tokens, /):
        if not tokens or tokens[0] not in self._aliases:
            return 0
        self._mark_set()
        return 1

    def synopsis(self):
        return self.name

    def options(self):
        if self._required:
            return " " + self._keys()
        return "[ " + self._keys() + " ]"


class Value(_Payload, Argument):
    """
    Positional argument: takes the current token as its value when not yet set.

    The caller decides when a token may be offered to positionals; Value
    itself accepts anything, including tokens that look like flags.
    """
    __introspectable__ = ("metavar", "default", "value", "help", "required", "is_set")

    def __init__(self, metavar, help="", *, default="", required=False):
        super().__init__(help, required=required)
        self.metavar = metavar
        self.default = default
        self._value = None

    def match(self, tokens, /):
        if self._is_set or not tokens:
            return 0
        self._assign(tokens[0])
        return 1

    def synopsis(self):
        return f"<{self._metavar}>"

    def options(self):
        if self._required:
            return f" <{self._metavar}> "
        return f"[ <{self._metavar}> ]"


class KeyValue(_Payload, _Keyed):
    """
    Named, value-bearing argument.

    Accepted forms
    - "<alias>=<value>": one token; everything after the first "=" is the
      value (possibly empty).
    - "<alias> <value>": two tokens; the value token cannot start with the
      glue prefix, since it might be a flag (use the "=" form for such values).
    """
    __introspectable__ = ("aliases", "metavar", "default", "value", "help", "required", "is_set")

    def __init__(self, name, metavar, help="", *, aliases=(), default="", required=False):
        super().__init__(name, help, aliases=aliases, required=required)
        self.metavar = metavar
        self.default = default
        self._value = None

    def match(self, tokens, /):
        if not tokens:
            return 0
        key, separator, value = tokens[0].partition("=")
        if key not in self._aliases:
            return 0
        if separator:
            self._assign(value)
            return 1
        if len(tokens) < 2:
            raise ArgumentRequiresValueError(
                f"argument \"{key}\" requires a value",
                argument=self.synopsis(),
                hint=f"use {key}=<{self._metavar}> or {key} <{self._metavar}>"
            )
        if tokens[1].startswith(prefix := glue()):
            raise AmbiguousValueError(
                f"loose value of \"{key}\" cannot start with \"{prefix}\"",
                argument=self.synopsis(),
                token=tokens[1],
                hint=f"use {key}=<{self._metavar}> syntax"
            )
        self._assign(tokens[1])
        return 2

    def synopsis(self):
        return f"{self.name}=<{self._metavar}>"

    def options(self):
        if self._required:
            return f" {self._keys()} <{self._metavar}>"
        return f"[ {self._keys()} <{self._metavar}> ]"


__all__ = (
    "Argument",
    "Flag",
    "Value",
    "KeyValue",
)

del ArgumentType
