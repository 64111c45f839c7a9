"""
Argotree command layer: declare, parse, and document command trees.

What this module provides
- ArgumentGroup: a named or anonymous bag of sibling arguments and child
  commands sharing one mutual-exclusivity scope.
  • Optional child commands of a group exclude each other; option_required
    demands exactly one of them.
  • Tokens are dispatched with a fixed priority: child commands, key-values,
    flags, glued flags, then positionals.
- Command: one discriminator argument plus an ordered list of groups (the first
  is the default group created with the command). Commands nest through groups.
  • parse(tokens): consume the whole token stream, validate, and return the
    number of consumed tokens.
  • synopsis()/description()/help(): synthesized usage text.
  • print_synopsis()/print_description()/print_help(): the same text written
    through a rich Console.
- Factories and helpers:
  • command(argument, ...): create a Command.
  • invoke(command, prompt): run a command against sys.argv, a shell-like
    string, or an iterable of tokens.

Core ideas
- Recursive descent: a child command consumes as much as it understands and
  hands the rest back to its parent (see Match); only the root turns leftovers
  into an unrecognized-argument fault.
- Validation happens once, after every token is consumed, over the root and
  every activated child.
- Named groups render as "(name)" inline; their expansion is emitted once after
  the main text, in first-reference order, however many commands share them.

Quick start
    from argotree import Command, Flag, KeyValue, invoke

    root = Command(Flag("prog"), shell=True)
    root.add(Flag("--verbose", "Print more.", aliases=["-v"]))
    build = root.subcommand(Flag("build", "Build it."))
    build.add(KeyValue("--jobs", "number", "Parallel jobs.", default="1"))

    if __name__ == "__main__":
        invoke(root, "prog build --jobs=4 -v")
"""
import os.path
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable
from typing import NamedTuple

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .arguments import Argument, Flag, Value, KeyValue
from .faults import *
from .utils import *


class Match(NamedTuple):
    """
    Outcome of offering a token slice to a command.

    - consumed: how many tokens the command took (0 means it did not match).
    - complete: True when the whole slice was consumed; False when the command
      stopped at a token it does not know, leaving it to its parent.
    """
    consumed: int
    complete: bool


class ArgumentGroup:
    """
    Sibling arguments and child commands sharing one exclusivity scope.

    Collections
    - values, flags, keyvalues: arguments in declaration order.
    - commands: child commands in declaration order.

    State
    - selected: the optional child command matched during the parse (None
      until then). Two optional children in one group exclude each other.
    """

    values = mirror("values")
    flags = mirror("flags")
    keyvalues = mirror("keyvalues")
    commands = mirror("commands")
    selected = mirror("selected")

    def __init__(self, name="", *, option_required=False):
        self.name = name
        self.option_required = option_required
        self._values = []
        self._flags = []
        self._keyvalues = []
        self._commands = []
        self._selected = None

    @property
    def name(self):
        return self._name

    @name.setter
    def name(self, name):
        if not isinstance(name, str):
            raise TypeError("argument-group 'name' must be a string")
        self._name = name.strip()

    @property
    def option_required(self):
        return self._option_required

    @option_required.setter
    def option_required(self, option_required):
        self._option_required = bool(option_required)

    def add(self, argument, /):
        """
        Append an argument (or an already built Command) and return self.

        Raises
        - TypeError: for objects that are neither an argument variant nor a
          Command.
        - ValueError: when the very same object is already held.
        """
        match argument:
            case KeyValue():
                container = self._keyvalues
            case Flag():
                container = self._flags
            case Value():
                container = self._values
            case Command():
                container = self._commands
            case _:
                raise TypeError(f"argument-group cannot hold {type(argument).__name__!r} objects")
        if any(existing is argument for existing in container):
            raise ValueError("argument-group already holds this argument")
        container.append(argument)
        return self

    def command(self, argument, /, **options):
        """Create a child Command discriminated by argument and return it."""
        child = Command(argument, **options)
        self._commands.append(child)
        return child

    def _unglue(self, tokens):
        """
        Match a token made of several glued short flags ("-vx").

        Every character after the prefix must be the glue_char of some flag in
        this group; otherwise the token is not glued and nothing is consumed.
        """
        prefix = glue()
        token = tokens[0]
        if len(token) <= len(prefix) or not token.startswith(prefix):
            return 0
        chars = {flag.glue_char for flag in self._flags} - {None}
        if not all(char in chars for char in token[len(prefix):]):
            return 0
        for char in token[len(prefix):]:
            for flag in self._flags:
                if flag.glue_char == char:
                    flag.match([prefix + char])
        return 1

    def _dispatch(self, tokens):
        """
        Offer the head of tokens to this group; return how many were consumed.
        """
        for command in self._commands:
            if not (consumed := command._descend(tokens).consumed):
                continue
            if not command.argument.required:
                if self._selected is not None:
                    raise ExcessiveCommandError(
                        f"can not use both \"{self._selected.argument.synopsis()}\" "
                        f"and \"{command.argument.synopsis()}\" at the same time",
                        hint="pick only one of them"
                    )
                self._selected = command
            return consumed

        for argument in self._keyvalues:
            if consumed := argument.match(tokens):
                return consumed

        for argument in self._flags:
            if consumed := argument.match(tokens):
                return consumed

        if consumed := self._unglue(tokens):
            return consumed

        if not tokens[0].startswith(glue()):
            for argument in self._values:
                if consumed := argument.match(tokens):
                    return consumed
        return 0

    def _alternatives(self):
        return "|".join(
            command.argument.synopsis() for command in self._commands if not command.argument.required
        )

    def _validate(self, visited):
        if self._option_required and self._selected is None:
            raise MissingArgumentError(
                f"one of the following arguments must be present: \"{self._alternatives()}\"",
                hint="pick one of them"
            )

        arguments = [command.argument for command in self._commands]
        arguments += self._flags + self._keyvalues + self._values
        for argument in arguments:
            if argument.required and not argument.is_set:
                raise MissingArgumentError(
                    f"missing required argument \"{argument.synopsis()}\"",
                    argument=argument.synopsis()
                )

        for command in self._commands:
            if command.argument.is_set:
                command._validate(visited)

    def _synopsis(self, lines):
        prefix = glue()

        required = "".join(
            " " + command._synopsis(lines) for command in self._commands if command.argument.required
        )
        optional = "|".join(
            command._synopsis(lines) for command in self._commands if not command.argument.required
        )
        if optional:
            optional = " " + optional if self._option_required else " [" + optional + "]"
            if required:
                optional = "|" + optional[1:]

        glued = [flag for flag in self._flags if flag.glue_char]
        parts = [required, optional]
        if chars := "".join(flag.glue_char for flag in glued if flag.required):
            parts.append(f" {prefix}{chars}")
        if chars := "".join(flag.glue_char for flag in glued if not flag.required):
            parts.append(f" [{prefix}{chars}]")

        flags = [flag for flag in self._flags if not flag.glue_char]
        parts += (" " + flag.synopsis() for flag in flags if flag.required)
        parts += (" " + flag.synopsis() for flag in flags if not flag.required)

        for arguments in (self._keyvalues, self._values):
            parts += (" " + argument.synopsis() for argument in arguments if argument.required)
            parts += (" [" + argument.synopsis() + "]" for argument in arguments if not argument.required)
        return "".join(parts)

    def _description(self, paragraphs):
        rows = [command.argument for command in self._commands]
        rows += self._flags + self._keyvalues + self._values
        width = max((len(argument.options()) for argument in rows), default=0)

        sections = defaultdict(str)
        for argument in rows:
            sections[argument.required] += f"{argument.options().ljust(width)} - {argument.description()}\n"

        result = sections[True] + sections[False]
        for command in self._commands:
            result += command._description(paragraphs)
        return result


class Command:
    """
    A discriminator argument plus ordered groups of arguments and children.

    Declaration
    - argument: the Argument that activates this command (any variant).
    - header/footer: text printed around help().
    - option_required: delegated to the default group.

    Runtime flags
    - shell: on a parse fault, print it with the synopsis and exit with
      status 1 instead of raising.
    - colorful/fancy: styling of printed help and faults.
    Children created through subcommand() inherit the flags left unspecified.
    """

    groups = mirror("groups")

    def __init__(
            self,
            argument,
            /,
            *,
            header="",
            footer="",
            option_required=False,
            shell=False,
            colorful=False,
            fancy=False
    ):
        self.argument = argument
        self.header = header
        self.footer = footer
        self._groups = [ArgumentGroup(option_required=option_required)]
        self.shell = shell
        self.colorful = colorful
        self.fancy = fancy

    @property
    def argument(self):
        return self._argument

    @argument.setter
    def argument(self, argument):
        if not isinstance(argument, Argument):
            raise TypeError("command 'argument' must be an argument")
        self._argument = argument

    @property
    def header(self):
        return self._header

    @header.setter
    def header(self, header):
        if not isinstance(header, str):
            raise TypeError("command 'header' must be a string")
        self._header = header

    @property
    def footer(self):
        return self._footer

    @footer.setter
    def footer(self, footer):
        if not isinstance(footer, str):
            raise TypeError("command 'footer' must be a string")
        self._footer = footer

    @property
    def option_required(self):
        return self._groups[0].option_required

    @option_required.setter
    def option_required(self, option_required):
        self._groups[0].option_required = option_required

    @property
    def shell(self):
        return self._shell

    @shell.setter
    def shell(self, shell):
        self._shell = bool(shell)

    @property
    def colorful(self):
        return self._colorful

    @colorful.setter
    def colorful(self, colorful):
        self._colorful = bool(colorful)

    @property
    def fancy(self):
        return self._fancy

    @fancy.setter
    def fancy(self, fancy):
        self._fancy = bool(fancy)

    def add(self, argument, /):
        """Add an argument to the default group and return self."""
        self._groups[0].add(argument)
        return self

    def add_group(self, group, /):
        """Append an extra (usually named) group and return self."""
        if not isinstance(group, ArgumentGroup):
            raise TypeError("command groups must be argument-groups")
        if any(existing is group for existing in self._groups):
            raise ValueError("command already holds this argument-group")
        self._groups.append(group)
        return self

    def group(self, index, /):
        """Return the group at index (0 is the default group)."""
        if not isinstance(index, int):
            raise TypeError("command group index must be an integer")
        if not 0 <= index < len(self._groups):
            raise IndexError("command group index out of range")
        return self._groups[index]

    def subcommand(self, argument, /, **options):
        """Create a child command in the default group and return it."""
        inherited = {"shell": self._shell, "colorful": self._colorful, "fancy": self._fancy}
        return self._groups[0].command(argument, **(inherited | options))

    def _descend(self, tokens):
        """
        Match the discriminator, then consume tokens until one is not understood.
        """
        if not (consumed := self._argument.match(tokens)):
            return Match(0, False)
        while consumed < len(tokens):
            remaining = tokens[consumed:]
            for group in self._groups:
                if count := group._dispatch(remaining):
                    consumed += count
                    break
            else:
                return Match(consumed, False)
        return Match(consumed, True)

    def _validate(self, visited):
        if self in visited:
            return
        visited.add(self)
        for group in self._groups:
            group._validate(visited)

    def parse(self, tokens, /):
        """
        Consume tokens (the first one must match the discriminator), validate
        the resulting state, and return the number of consumed tokens.

        Raises
        - UnrecognizedArgumentError: a token matched nothing; its index is the
          token's position in tokens.
        - ArgumentAlreadySetError, ArgumentRequiresValueError,
          AmbiguousValueError, ExcessiveCommandError: while matching.
        - MissingArgumentError: while validating.
        """
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")

        outcome = self._descend(tokens)
        if not outcome.complete:
            index = outcome.consumed
            if index < len(tokens):
                message = f"unrecognized argument \"{tokens[index]}\" at {ordinal(index)} position"
            else:
                message = f"expected \"{self._argument.synopsis()}\" at {ordinal(index)} position"
            raise UnrecognizedArgumentError(
                message,
                index=index,
                token=tokens[index] if index < len(tokens) else None,
                hint="check the usage below for accepted arguments"
            )

        self._validate(set())
        return outcome.consumed

    def _synopsis(self, lines):
        result = self._argument.synopsis()
        for group in self._groups:
            if not group.name:
                result += group._synopsis(lines)
                continue
            result += f" ({group.name})"
            if group not in lines:
                lines[group] = ""  # reserve the slot before expanding nested groups
                lines[group] = f"({group.name}) :=" + group._synopsis(lines)
        return result

    def _description(self, paragraphs):
        result = ""
        for group in self._groups:
            if not group.name:
                result += group._description(paragraphs)
            elif group not in paragraphs:
                paragraphs[group] = ""
                paragraphs[group] = f"({group.name}):\n" + group._description(paragraphs)
        if result:
            return self._argument.synopsis() + " options:\n" + result
        return result

    def synopsis(self):
        """Return the "Usage:" line followed by one line per named group."""
        lines = {}
        result = "Usage: " + self._synopsis(lines) + "\n"
        for line in lines.values():
            result += "       " + line + "\n"
        return result

    def description(self):
        """Return the discriminator help, the option rows and the named-group paragraphs."""
        paragraphs = {}
        result = self._argument.description() + "\n" + self._description(paragraphs)
        for paragraph in paragraphs.values():
            result += paragraph
        return result

    def help(self):
        return self._header + self.synopsis() + self.description() + self._footer

    def _render(self, *sections):
        """
        Turn (text, style) sections into one renderable, styled when colorful.

        Palette keys
        - header, usage, description, footer, panel-title
        Define a mapping named __styles__ in __main__ to override any entry.
        """
        styles = defaultdict(str, {
            "header": "bold #FF4D94",  # magenta-pink banner
            "usage": "bold #00E6FF",  # cyan usage block
            "description": "#D1D5DB",  # light gray body
            "footer": "#737373",  # dim footer gray
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def text(fragment, style=""):
            if not self._colorful:
                return Text(fragment)
            return Text(fragment, styles[style])

        render = Text.assemble(*(text(fragment, style) for fragment, style in sections if fragment))
        if self._fancy:
            return Panel(render, title=text(self._argument.synopsis(), "panel-title"), title_align="left")
        return render

    def _print(self, console, *sections):
        if console is None:
            console = Console()
        if not isinstance(console, Console):
            raise TypeError("console must be a rich console")
        console.print(self._render(*sections), soft_wrap=True, highlight=False, end="")

    def print_synopsis(self, console=None, /):
        self._print(console, (self.synopsis(), "usage"))

    def print_description(self, console=None, /):
        self._print(console, (self.description(), "description"))

    def print_help(self, console=None, /):
        self._print(
            console,
            (self._header, "header"),
            (self.synopsis(), "usage"),
            (self.description(), "description"),
            (self._footer, "footer"),
        )

    def trigger(self, fault, /, **options):
        """
        Surface a parse fault with this command's runtime flags.

        In shell mode the fault is printed to stderr followed by the synopsis,
        and the process exits with status 1. Otherwise the fault is raised.
        """
        fault = fault.__replace__(**{
            "prog": os.path.basename(self._argument.synopsis()),
            "shell": self._shell,
            "colorful": self._colorful,
            "fancy": self._fancy,
        } | options)
        if self._shell:
            console = Console(stderr=True)
            console.print(fault)
            self.print_synopsis(console)
            sys.exit(1)
        trigger(fault)

    def __rich_repr__(self):
        yield "argument", self._argument
        yield "groups", len(self._groups)
        yield "shell", self._shell, False

    def __invoke__(self, prompt=Unset):
        """
        Parse a token stream with this command as the root.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv (the program name included, since
            it is matched by the discriminator).
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.

        Returns
        - int: the number of consumed tokens.
        """
        if prompt is Unset:
            tokens = list(sys.argv)
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        try:
            return self.parse(tokens)
        except ParseError as fault:
            self.trigger(fault)


def command(argument, /, **options):
    """
    Create a root Command discriminated by argument.

    Equivalent to Command(argument, **options); provided for symmetry with
    ArgumentGroup.command() and Command.subcommand().
    """
    return Command(argument, **options)


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for commands.

    Parameters
    - object: an instance providing __invoke__(prompt).
    - prompt: Unset (sys.argv), a shell-like string, or an iterable of tokens.

    Returns
    - whatever __invoke__ returns (the consumed token count for a Command).
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Match",
    "ArgumentGroup",
    "Command",
    "command",
    "invoke",
)
