"""
Argotree utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the arguments/commands/faults layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the declaration tree and the matching engine.

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided” without conflating with None.
- coalesce(value, default=None)
  • Replace Unset with a concrete default, preserving legitimate falsey values.
- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables.
- mirror("attr")
  • Read-only property exposing a private backing field (self._attr); containers
    are handed out as fresh copies.
- ordinal(number)
  • English ordinal wording for 0-based token positions used in fault messages.
- glue()
  • The process-wide glue prefix used to recognize short and glued flags.

Host hooks
- A host program may define ``__glue__`` in its ``__main__`` module to replace
  the default glue prefix ("-"). The value must be a single character.
"""
import builtins
import functools
from collections.abc import Sequence
from typing import final

GLUE = "-"


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and "".
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and singleton per process.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values such as None, 0 or "" are returned as-is; only Unset is
    replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce("", "fallback")     -> ""
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Recursively copy container values so callers cannot mutate internal state.

    Strings are returned unchanged; other sequences become lists.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_immortalize, object))
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the backing attribute "_{name}".

    Example
    - Given self._aliases, declare aliases = mirror("aliases") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def ordinal(index, /):
    """
    Return a human-friendly ordinal label for a 0-based token position.

    Positions 0..9 read as words ("first"…"tenth"); later ones use numeric
    suffixes with the usual teens exception (11th, 12th, 13th).
    """
    number = index + 1
    try:
        return (
            "first", "second", "third", "fourth", "fifth",
            "sixth", "seventh", "eighth", "ninth", "tenth",
        )[index]
    except IndexError:
        pass

    if 10 < number % 100 < 20:
        return f"{number}th"
    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def glue():
    """
    Return the glue prefix shared by every command in the process.

    The host may override it with a single-character ``__glue__`` attribute on
    its ``__main__`` module; anything else is rejected rather than silently
    ignored.
    """
    prefix = getattr(__import__("__main__"), "__glue__", GLUE)
    if not isinstance(prefix, str) or len(prefix) != 1:
        raise ValueError("glue prefix must be a single character")
    return prefix


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None (or "") is a meaningful user value and
materialize it with coalesce().
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
    "glue",

    # Types
    "UnsetType",

    # Constants
    "Unset",
    "GLUE",
)
