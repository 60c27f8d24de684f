import logging

from rich.console import Console
from rich.pretty import pprint

from parlance import *

__prog__ = "wyr"

console = Console()


@command(
    name="Would You Rather",
    summary="Let the bot pick between two or more options.",
    emoji=":scales:",
    versions=[
        CommandVersion(["wyr", "wouldyourather"], [
            Argument("option", TextType(max_length=200), summary="A choice."),
            Syntax("or"),
            Argument("option", TextType(max_length=200), summary="Another choice."),
            ArgumentGroup(
                Syntax("or"),
                Argument("option", TextType(max_length=200), summary="Yet another choice."),
                priority=1,
                repeat=True,
                repeat_max=7,
            ),
        ], summary="Choose between several options."),
        CommandVersion("wyr", [
            Argument("option", TextType(max_length=200)),
            Syntax("or"),
            Argument("option", TextType(max_length=200)),
        ], summary="Choose between two options."),
    ],
)
def wyr(args, context):
    pprint(args.unwrap("option"))


if __name__ == '__main__':
    init_logger(logging.DEBUG)
    console.print(wyr)
    for text in ("c.wyr tea or coffee", "c.wyr a b or c or d e or f g", "c.wyr nothing"):
        console.rule(text)
        wyr.check(text)
