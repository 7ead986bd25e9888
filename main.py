"""
Demo application: two commands, a hidden option, typed values and a
counted switch.

    python main.py cmda -i whateff.txt -v -v
    python main.py B /V 42 -v -v -v and
    python main.py --help

Set ARGOSY_LOG_LEVEL=DEBUG to trace the classifier loop.
"""
import os
import sys

from loguru import logger
from rich import get_console
from rich.logging import RichHandler
from rich.pretty import pprint

from argosy import *
from argosy.utils import Unset, coalesce


def configure_logging():
    if not (level := os.getenv("ARGOSY_LOG_LEVEL")):
        return
    logger.remove()
    logger.add(
        RichHandler(console=get_console(), show_time=False, show_path=False, markup=False),
        level=level.upper(),
        format="{message}",
        backtrace=False,
        diagnose=False,
    )
    logger.enable("argosy")


class Config:
    """
    Application settings mapped out of a parse result.
    """

    def __init__(self):
        self.command = None
        self.input = None
        self.value = 0
        self.double = 0.0
        self.boolean = False
        self.verbose = 0
        self.words = ""

    def parse(self, tokens=Unset, /, *, console=Unset):
        """
        Parse tokens into this config; returns the success flag.
        """
        parser = Parser(
            "argosy-demo",
            "Example application showing usage of argosy and used for testing.",
            error_on_unmatched=False,
        )

        input_option = Option(Alias.insensitive("--input"), metavar="file", descr="An input file", hidden=True)
        input_option.add_alias("-i").add_alias("/i")

        command_a = Command(Alias.insensitive("CommandA"), descr="Command A")
        command_a.add_alias(Alias.insensitive("CmdA")).add_alias("A").add(input_option)

        value_option = Option(
            Alias.insensitive("--value"), "-V", "/V",
            metavar="int",
            descr="The value option is an int. If specified multiple times, the values are summed up.",
        )
        double_option = Option("--double", metavar="dval", descr="A double-precision float value. Must not be specified more than once.")
        bool_option = Option("--bool", metavar="bval", descr="A boolean value. Must not be specified more than once.")
        and_argument = Argument("and", "An additional string argument")
        # arguments bind in order, so "or" only binds once "and" did
        or_argument = Argument("or", "An optional string argument", required=False)

        command_b = Command(Alias.insensitive("CommandB"), Alias.insensitive("CmdB"), "B", descr="Command B")
        command_b.add(value_option, double_option, bool_option, and_argument, or_argument)

        verbose_switch = Switch(Alias.insensitive("--verbose"), "-v", "/v", descr="Verbosity switch")

        parser.add(command_a, command_b, verbose_switch)

        result = parser.parse(tokens)

        if result.has_command(command_a):
            self.command = "A"
        elif result.has_command(command_b):
            self.command = "B"

        if view := result.option_value(input_option, error_if_multiple=True):
            self.input = view.text

        for view in result.option_values(value_option):
            if (number := view.as_integer()) is not None:
                self.value += number

        if (number := result.option_value(double_option, error_if_multiple=True).as_double()) is not None:
            self.double = number

        self.boolean = bool(result.option_value(bool_option, error_if_multiple=True).as_bool())

        self.verbose = result.switch_count(verbose_switch)

        if view := result.argument(and_argument):
            self.words = view.text
        if view := result.argument(or_argument):
            self.words = " ".join(filter(None, (self.words, "| " + view.text)))

        if result.has_unmatched:
            out = coalesce(console, get_console())
            out.print(f"unmatched arguments: {len(result.unmatched)}")
            for view in result.unmatched:
                out.print(f" unmatched> {view.text}", markup=False)

        parser.print_error_and_help(result, console=console)
        return result.success

    def __rich_repr__(self):
        yield "command", self.command, None
        yield "input", self.input, None
        yield "value", self.value, 0
        yield "double", self.double, 0.0
        yield "boolean", self.boolean, False
        yield "verbose", self.verbose, 0
        yield "words", self.words, ""


if __name__ == '__main__':
    configure_logging()
    config = Config()
    success = config.parse()
    if success:
        pprint(config)
    sys.exit(0 if success else 1)
