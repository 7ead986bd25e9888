"""
Argosy command layer: commands, the parser and the classifier loop.

What this module provides
- Command: named container of nested commands, options, switches and
  arguments, with an optional override of the unmatched-argument policy.
- Parser: root container; owns the global unmatched policy, the implicit
  help switch and the presentation flags (colorful, fancy).
- Parser.parse(): walks the token list and produces a Result.
- Parser.print_help() / print_error() / print_error_and_help(): rich-based
  renderers over the declared model and a Result.

Classification (first rule that applies wins, for every token)
1. "--": every later token is unmatched; the loop stops.
2. An option seen on the previous token takes this token as its value,
   whatever it looks like.
3. A command visible in the current scope: the scope descends into it.
4. An option: exact alias (value on the next token), or fused alias
   followed by ":", "=" or " " (value in the same token).
5. A switch (the implicit help switch only raises the help flag).
6. The first argument not bound yet.
7. Otherwise the token is unmatched.

Finalization (first applicable)
a. An option still waits for its value: "value of option expected".
b. Unmatched tokens and the effective policy says error.
c. A required argument was never bound.
d. Success.

The effective unmatched policy comes from the deepest matched command with
an explicit setting, walking back through its ancestors to the parser.

Quick start
    from argosy import Parser, Command, Option, Switch, Argument

    parser = Parser("tool", "does things")
    build = Command("build", descr="build the project")
    build.add(Option("--jobs", "-j", metavar="int"), Argument("target"))
    parser.add(build, Switch("--verbose", "-v"))

    result = parser.parse(["tool", "build", "-j=4", "all"])
    if parser.print_error_and_help(result):
        raise SystemExit(1)
"""
import shlex
import sys
from collections import defaultdict, deque
from collections.abc import Iterable
from enum import Enum

from loguru import logger
from rich.console import Console, Group
from rich.padding import Padding
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .arguments import Argument, Named, NodeType, Option, Switch, _sanitize_metadata
from .faults import (
    MalformedInputError,
    OptionValueExpectedError,
    RequiredArgumentMissingError,
    UnmatchedArgumentsError,
    report,
)
from .results import Result, Status, Value
from .utils import Unset, coalesce, mirror

# Literal token after which nothing is matched anymore.
STOP_TOKEN = "--"

# Narrowest width help is laid out for.
MINIMUM_WIDTH = 30


class Unmatched(Enum):
    """
    per-command unmatched-argument policy.
    """
    INHERIT = "inherit"
    ERROR = "error"
    IGNORE = "ignore"


def _sanitize_policy(cls, policy, /):
    if isinstance(policy, bool):
        return Unmatched.ERROR if policy else Unmatched.IGNORE
    if not isinstance(policy, Unmatched):
        raise TypeError(f"{cls.__typename__} unmatched policy must be an Unmatched member or a boolean")
    return policy


class _Container:
    """
    Mixin holding the four kinds of children and dispatching add().
    """

    def _init_children(self):
        self._commands = []
        self._options = []
        self._switches = []
        self._arguments = []

    def add(self, *children):
        """
        Add nested commands, options, switches and arguments (in order).

        Children are sealed on adoption. Returns self for chaining.

        Raises
        - TypeError: for anything that is not a declared node.
        """
        self._ensure_mutable()
        for child in children:
            match child:
                case Command():
                    self._commands.append(child._seal())
                case Option():
                    self._options.append(child._seal())
                case Switch():
                    self._switches.append(child._seal())
                case Argument():
                    self._arguments.append(child._seal())
                case _:
                    raise TypeError(f"{type(self).__typename__} children must be commands, options, switches or arguments")
        return self


class Command(_Container, Named):
    """
    Named container of nested commands, options, switches and arguments.

    Matching a command narrows the scope: its siblings disappear, its own
    subcommands become the candidate commands and its options, switches and
    arguments join those already visible.
    """

    __introspectable__ = (
        "id",
        "descr",
        "hidden",
        "unmatched",
        "commands",
        "options",
        "switches",
        "arguments",
    )
    __displayable__ = (
        "id",
        "names",
        "descr",
        "unmatched",
        "commands",
        "options",
        "switches",
        "arguments",
    )

    def __new__(cls, *aliases, descr=Unset, hidden=False, unmatched=Unmatched.INHERIT):
        """
        Parameters
        - aliases: one or more str | Alias
        - descr: Unset | str
        - hidden: bool
          Suppress from help output (still parsed).
        - unmatched: Unmatched | bool
          INHERIT (default) defers to the enclosing command or the parser,
          ERROR / True forces an error, IGNORE / False forbids one.
        """
        metadata = {
            "descr": descr,
            "hidden": hidden,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls, aliases)
        self._init_children()
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._unmatched = _sanitize_policy(cls, unmatched)
        return self

    def set_error_on_unmatched(self, policy=Unmatched.ERROR, /):
        """
        Override the unmatched-argument policy; returns self for chaining.
        """
        self._ensure_mutable()
        self._unmatched = _sanitize_policy(type(self), policy)
        return self

    def get_error_on_unmatched(self):
        return self._unmatched


class Scope:
    """
    Candidate pools visible at one point of a parse.

    Seeded from the parser's direct children (implicit help switch first).
    descend() narrows commands and widens the rest; arguments are consumed
    from the left as they bind.
    """

    def __init__(self, parser):
        self.commands = list(parser._commands)
        self.options = list(parser._options)
        self.switches = ([parser.help] if parser.implicit_help else []) + parser._switches
        self.arguments = deque(parser._arguments)

    def descend(self, command):
        self.commands = list(command._commands)
        self.options.extend(command._options)
        self.switches.extend(command._switches)
        self.arguments.extend(command._arguments)

    def command(self, token):
        return next((command for command in self.commands if command.matches(token)), None)

    def option(self, token):
        """
        Return (option, fused value) for token; the value is None for an
        exact alias match and (None, None) when nothing matches.
        """
        for option in self.options:
            if option.matches(token):
                return option, None
            if (value := option.match_with_value(token)) is not None:
                return option, value
        return None, None

    def switch(self, token):
        return next((switch for switch in self.switches if switch.matches(token)), None)

    def argument(self):
        return self.arguments.popleft() if self.arguments else None


def _tokenize(tokens, /):
    """
    Normalize parse() input into a list of str (never trimmed).
    """
    if tokens is Unset:
        return list(sys.argv)
    if isinstance(tokens, str):
        return shlex.split(tokens)
    if not isinstance(tokens, Iterable):
        raise TypeError("parse() argument must be a string or an iterable of strings")
    tokens = list(tokens)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("parse() argument must be a string or an iterable of strings")
    return tokens


class Parser(_Container, metaclass=NodeType):
    """
    Root of a command line declaration.

    Parameters
    - name: str
      Program name shown in usage lines and fault headers.
    - descr: Unset | str
    - error_on_unmatched: bool
      Global policy for unmatched tokens (default True).
    - implicit_help: bool
      Recognize --help, -h, /h, -?, /? everywhere (default True).
    - colorful: bool
      Style help and faults (default True).
    - fancy: bool
      Wrap help and faults in panels (default False).
    """

    __introspectable__ = (
        "name",
        "descr",
        "error_on_unmatched",
        "implicit_help",
        "colorful",
        "fancy",
        "commands",
        "options",
        "switches",
        "arguments",
    )

    def __new__(
            cls,
            name,
            /,
            descr=Unset,
            *,
            error_on_unmatched=True,
            implicit_help=True,
            colorful=True,
            fancy=False,
    ):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not name:
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

        metadata = {
            "name": name,
            "descr": descr,
            "hidden": False,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        self._init_children()
        self._name = metadata["name"]
        self._descr = metadata["descr"]
        self._error_on_unmatched = bool(error_on_unmatched)
        self._implicit_help = bool(implicit_help)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._help = Switch("--help", "-h", "/h", "-?", "/?", descr="show help and usage information")._seal()
        return self

    def _ensure_mutable(self):
        pass  # the root is never adopted

    help = mirror("help")

    def enable_implicit_help(self, flag=True, /):
        self._implicit_help = bool(flag)
        return self

    def set_error_on_unmatched(self, flag=True, /):
        self._error_on_unmatched = bool(flag)
        return self

    def get_error_on_unmatched(self):
        return self._error_on_unmatched

    def _error_on_unmatched_for(self, commands):
        for command in reversed(commands):
            match command.get_error_on_unmatched():
                case Unmatched.ERROR:
                    return True
                case Unmatched.IGNORE:
                    return False
        return self._error_on_unmatched

    def parse(self, tokens=Unset, /, skip_first=True):
        """
        Classify tokens against the declaration and return a Result.

        Parameters
        - tokens:
          • Unset: read sys.argv.
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: tokens used verbatim.
        - skip_first: bool
          Ignore the first token (program name). Defaults to True.

        Never raises for bad user input: problems land in the result status,
        including a shell string that cannot be split (unbalanced quotes).
        """
        try:
            tokens = _tokenize(tokens)
        except ValueError as error:
            result = Result()
            result.status.record(MalformedInputError(
                f"command line cannot be split: {str(error).lower()}",
                tokens=tokens,
            ))
            logger.debug("parse.malformed error={!r}", str(error))
            return result

        origin = 1 if skip_first and tokens else 0
        status = Status(origin)
        result = Result(status)
        scope = Scope(self)
        pending = None

        logger.debug("parse.start prog={} tokens={} skip_first={}", self._name, len(tokens), skip_first)

        for position in range(origin, len(tokens)):
            token = tokens[position]

            if token == STOP_TOKEN:
                result._unmatched.extend(
                    Value(tokens[index], position=index, status=status)
                    for index in range(position + 1, len(tokens))
                )
                logger.debug("parse.stop position={} remaining={}", position, len(tokens) - position - 1)
                break

            if pending is not None:
                result._options.append(Value(token, source=pending, position=position, status=status))
                logger.debug("parse.value token={!r} option={}", token, pending.primary)
                pending = None
                continue

            if (command := scope.command(token)) is not None:
                result._commands.append(command)
                scope.descend(command)
                logger.debug("parse.command token={!r} command={}", token, command.primary)
                continue

            option, value = scope.option(token)
            if option is not None:
                if value is None:
                    pending = option
                else:
                    start = len(token) - len(value)
                    result._options.append(Value(token, start, source=option, position=position, status=status))
                logger.debug("parse.option token={!r} option={} fused={}", token, option.primary, value is not None)
                continue

            if (switch := scope.switch(token)) is not None:
                if switch is self._help:
                    status.request_help()
                else:
                    result._switches.append(switch)
                logger.debug("parse.switch token={!r} switch={}", token, switch.primary)
                continue

            if (argument := scope.argument()) is not None:
                result._arguments.append(Value(token, source=argument, position=position, status=status))
                logger.debug("parse.argument token={!r} argument={}", token, argument.name)
                continue

            result._unmatched.append(Value(token, position=position, status=status))
            logger.debug("parse.unmatched token={!r} position={}", token, position)

        if pending is not None:
            status.record(OptionValueExpectedError(
                f"value of option expected, but no more arguments: {pending.primary}",
                option=pending,
            ))
        elif result._unmatched and self._error_on_unmatched_for(result._commands):
            status.record(UnmatchedArgumentsError(
                "unmatched arguments present in command line",
                unmatched=tuple(value.text for value in result._unmatched),
            ))
        elif (missing := next((argument for argument in scope.arguments if argument.required), None)) is not None:
            status.record(RequiredArgumentMissingError(
                f"required argument missing: {missing.name}",
                argument=missing,
            ))

        logger.debug("parse.finish success={} show_help={} error={!r}", status.success, status.show_help, status.error)
        return result

    def chain(self, command, /):
        """
        Return the path of commands from the root down to command (inclusive),
        or an empty tuple when command is not declared under this parser.
        """
        def search(container, path):
            for child in container._commands:
                if child == command:
                    return path + (child,)
                if found := search(child, path + (child,)):
                    return found
            return ()

        return search(self, ())

    def render_help(self, target=Unset, /):
        """
        Build the help renderable for the root, a command or a result.

        Target
        - Unset: the root.
        - Command: the chain leading to it (ValueError if not declared here).
        - Result: the commands it matched.

        Palette keys
        - section-label, program-name, command-name, usage
        - option-name, switch-name, metavar, argument-name
        - required-tag, optional-tag, description, panel-title

        Customization
        - Define a mapping named __styles__ in __main__ to override any entry.
        - When colorful is False, styling is suppressed.
        """
        if target is Unset:
            chain = ()
        elif isinstance(target, Command):
            if not (chain := self.chain(target)):
                raise ValueError("render_help() command must be declared under this parser")
        elif isinstance(target, Result):
            chain = target.commands
        else:
            raise TypeError("render_help() argument must be a command or a result")

        styles = defaultdict(str, {
            "section-label": "bold #FFFFFF",
            "program-name": "bold #FF4D94",
            "command-name": "bold #36C5F0",
            "usage": "#36C5F0",
            "option-name": "bold #00E6FF",
            "switch-name": "bold #22C55E",
            "metavar": "bold #FFD600",
            "argument-name": "bold #FFD600",
            "required-tag": "#EF4444",
            "optional-tag": "#9CA3AF dim",
            "description": "#9CA3AF",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self._colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not self._colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        def table(rows):
            grid = Table.grid(padding=(0, 3))
            grid.add_column(no_wrap=True)
            grid.add_column()
            for row in rows:
                grid.add_row(*row)
            return Padding(grid, (0, 0, 0, 2))

        container = chain[-1] if chain else self
        options = [option for option in self._options if not option.hidden]
        switches = [switch for switch in self._switches if not switch.hidden]
        arguments = [argument for argument in self._arguments if not argument.hidden]
        for command in chain:
            options += [option for option in command._options if not option.hidden]
            switches += [switch for switch in command._switches if not switch.hidden]
            arguments += [argument for argument in command._arguments if not argument.hidden]
        if self._implicit_help:
            switches.append(self._help)
        commands = [command for command in container._commands if not command.hidden]

        renders = []

        if container._descr:
            renders += [
                text("Description:", styler("section-label")),
                Padding(text(container._descr, styler("description")), (0, 0, 0, 2)),
                Text(""),
            ]

        usage = [text(self._name, styler("program-name"))]
        usage += [text(command.primary, styler("command-name")) for command in chain]
        if commands:
            usage.append(text("[command]", styler("usage")))
        usage += [text(f"<{argument.name}>", styler("argument-name")) for argument in arguments if argument.required]
        usage += [text(f"[<{argument.name}>]", styler("argument-name")) for argument in arguments if not argument.required]
        if options or switches:
            usage.append(text("[options]", styler("usage")))
        renders += [
            text("Usage:", styler("section-label")),
            Padding(Text(" ").join(usage), (0, 0, 0, 2)),
        ]

        if arguments:
            renders += [Text(""), text("Arguments:", styler("section-label")), table(
                (
                    text(f"<{argument.name}>", styler("argument-name")),
                    Text.assemble(
                        text("[required]", styler("required-tag")) if argument.required else text("[optional]", styler("optional-tag")),
                        " ",
                        text(argument.descr, styler("description")),
                    ),
                )
                for argument in arguments
            )]

        if options or switches:
            rows = []
            for option in options:
                rows.append((
                    Text.assemble(
                        Text(", ").join(text(name, styler("option-name")) for name in option.names),
                        " ",
                        text(f"<{option.metavar or 'value'}>", styler("metavar")),
                    ),
                    text(option.descr, styler("description")),
                ))
            for switch in switches:
                rows.append((
                    Text(", ").join(text(name, styler("switch-name")) for name in switch.names),
                    text(switch.descr, styler("description")),
                ))
            renders += [Text(""), text("Options:", styler("section-label")), table(rows)]

        if commands:
            renders += [Text(""), text("Commands:", styler("section-label")), table(
                (
                    Text(", ").join(text(name, styler("command-name")) for name in command.names),
                    text(command.descr, styler("description")),
                )
                for command in commands
            )]

        if self._fancy:
            return Panel(Group(*renders), title=text(self._name, styler("panel-title")), title_align="left")
        return Group(*renders)

    def print_help(self, target=Unset, /, *, console=Unset):
        """
        Print help for the root, a command or a result (see render_help()).
        """
        console = coalesce(console, Console())
        console.print(self.render_help(target), width=max(console.width, MINIMUM_WIDTH))

    def print_error(self, result, /, *, console=Unset):
        """
        Print the recorded fault of result; returns False when there is none.
        """
        if not isinstance(result, Result):
            raise TypeError("print_error() argument must be a result")
        if result.fault is None:
            return False
        report(result.fault, console=console, prog=self._name, colorful=self._colorful, fancy=self._fancy)
        return True

    def print_error_and_help(self, result, /, *, console=Unset):
        """
        Print the fault of a failed result and help when it was requested.

        Returns True when anything was printed, i.e. the host should stop.
        """
        printed = False
        if not result.success:
            printed = self.print_error(result, console=console)
        if result.show_help:
            self.print_help(result, console=console)
            printed = True
        return printed


__all__ = (
    "Unmatched",
    "Command",
    "Parser",
    "STOP_TOKEN",
)
