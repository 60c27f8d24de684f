"""
Parlance command layer: triggers, versions and dispatch.

What this module provides
- CommandVersion: binds prefix + one of several trigger literals to a root
  ArgumentGroup. It strips the trigger, tokenizes the rest, and delegates to
  parlance.matching.match.
- Command: an ordered list of versions and one handler. The first version
  whose trigger matches *and* whose arguments fit runs the handler, once.
- command(...): create a Command or a decorator that produces one.
- tokenize(text) / getprefix(): message splitting and the host prefix.

Dispatch rules
- Versions are tried in declaration order; at most one handler runs per message.
- A version that fails validation does not run; its failure is kept and the
  next version is tried.
- Only when no version runs are the kept failures handed to the diagnostics
  sink (see parlance.faults.Diagnostics); nothing is reported otherwise.

Quick start
    from parlance import Argument, CommandVersion, Syntax, TextType, command

    @command(name="Would You Rather", versions=[
        CommandVersion(["wyr"], [
            Argument("option", TextType()),
            Syntax("or"),
            Argument("option", TextType()),
        ]),
    ])
    def wyr(args, context):
        print(args.unwrap("option"))

    wyr.check("c.wyr tea or coffee")   # prints ['tea', 'coffee']

Configuration
- The trigger prefix defaults to "c."; a host overrides it for every version by
  defining __prefix__ in __main__, or per version with prefix=...
"""
import copy
from collections.abc import Iterable

from rich.box import ROUNDED
from rich.console import Group
from rich.emoji import Emoji
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .arguments import ArgumentGroup
from .faults import Diagnostics, MatchFailure
from .logger import get_logger
from .matching import match
from .results import NoMatch, NoMatchType, Success
from .utils import *

logger = get_logger("commands")

DEFAULT_PREFIX = "c."


def getprefix():
    """
    Return the host trigger prefix: __main__.__prefix__ if defined, else DEFAULT_PREFIX.
    """
    prefix = getattr(__import__("__main__"), "__prefix__", DEFAULT_PREFIX)
    if not isinstance(prefix, str):
        raise TypeError("__prefix__ must be a string")
    return prefix


def tokenize(text, /):
    """
    Split command text on whitespace, dropping empty tokens and keeping order.
    """
    if not isinstance(text, str):
        raise TypeError("tokenize() argument must be a string")
    return text.split()


class CommandVersion(metaclass=SpecType):
    """
    One accepted form of a command.

    Parameters
    - triggers: str | Iterable[str]. Literals tried in order after the prefix.
    - args: ArgumentGroup, or a sequence of arguments/groups wrapped into one.
    - summary: short help line.
    - prefix: pins the prefix for this version (default: getprefix() at check time).
    """

    __introspectable__ = (
        "triggers",
        "args",
        "summary",
        "prefix",
    )

    def __init__(self, triggers, args, /, summary=Unset, prefix=Unset):
        cls = type(self)
        if isinstance(triggers, str):
            triggers = (triggers,)
        if not isinstance(triggers, Iterable):
            raise TypeError(f"{cls.__typename__} 'triggers' must be a string or an iterable of strings")
        triggers = tuple(triggers)
        if not triggers:
            raise TypeError(f"{cls.__typename__} must declare at least one trigger")
        for trigger in triggers:
            if not isinstance(trigger, str) or not trigger.strip():
                raise TypeError(f"{cls.__typename__} triggers must be non-empty strings")

        if not isinstance(args, ArgumentGroup):
            if not isinstance(args, Iterable):
                raise TypeError(f"{cls.__typename__} 'args' must be an argument group or a sequence of arguments")
            args = ArgumentGroup(*args)

        if not isinstance(summary, str | Unset):
            raise TypeError(f"{cls.__typename__} 'summary' must be a string")
        if not isinstance(prefix, str | Unset):
            raise TypeError(f"{cls.__typename__} 'prefix' must be a string")

        self._triggers = triggers
        self._args = args
        self._summary = coalesce(summary)
        self._prefix = coalesce(prefix)

    def trigger(self, text, /):
        """
        Return the text after the first matching prefix + trigger, or Unset.
        """
        prefix = getprefix() if self.prefix is None else self.prefix
        for trigger in self.triggers:
            if text.startswith(head := prefix + trigger):
                return text[len(head):]
        return Unset

    def check(self, text, context=None, /):
        """
        Match a whole message against this version.

        Returns
        - NoMatch when the trigger or the arguments do not fit.
        - The ValidationError met while matching, stamped with this version.
        - Success(ParsedArgs, consumed) otherwise.
        """
        if (rest := self.trigger(text)) is Unset:
            return NoMatch

        result = match(self.args, tokenize(rest), context)
        if isinstance(result, MatchFailure):
            return copy.replace(result, version=self)
        return result

    def usage(self):
        prefix = getprefix() if self.prefix is None else self.prefix
        return f"{prefix}{self.triggers[0]} {self.args.usage(root=True)}".rstrip()


class Command(metaclass=SpecType):
    """
    A named command: ordered versions plus the handler they share.

    Parameters
    - handler: Callable[[ParsedArgs, context], Any], positional-only.
    - name: display name (defaults to the handler's __name__).
    - versions: non-empty sequence of CommandVersion, tried in order.
    - summary / emoji: help metadata.
    - admin / beta / hidden: visibility flags for hosts.
    - diagnostics: sink with report(errors) (defaults to Diagnostics()).

    check(text, context=None) offers a message to the command and returns
    True when a handler ran.
    """

    __introspectable__ = (
        "name",
        "versions",
        "summary",
        "emoji",
        "admin",
        "beta",
        "hidden",
        "diagnostics",
    )

    __displayable__ = (
        "name",
        "versions",
        "summary",
    )

    def __init__(
            self,
            handler,
            /,
            name=Unset,
            versions=(),
            summary=Unset,
            emoji=Unset,
            admin=False,
            beta=False,
            hidden=False,
            diagnostics=Unset,
    ):
        cls = type(self)
        if not callable(handler):
            raise TypeError(f"{cls.__typename__} 'handler' must be callable")

        name = coalesce(name, getattr(handler, "__name__", Unset))
        if not isinstance(name, str) or not (name := name.strip()):
            raise TypeError(f"{cls.__typename__} 'name' must be a non-empty string")

        versions = tuple(versions)
        if not versions:
            raise TypeError(f"{cls.__typename__} {name!r} must declare at least one version")
        for version in versions:
            if not isinstance(version, CommandVersion):
                raise TypeError(f"{cls.__typename__} versions must be command-version instances")

        for label, object in (("summary", summary), ("emoji", emoji)):
            if not isinstance(object, str | Unset):
                raise TypeError(f"{cls.__typename__} {label!r} must be a string")

        diagnostics = coalesce(diagnostics, Diagnostics())
        if not callable(getattr(diagnostics, "report", None)):
            raise TypeError(f"{cls.__typename__} 'diagnostics' must provide a report() method")

        self._handler = handler
        self._name = name
        self._versions = versions
        self._summary = coalesce(summary)
        self._emoji = coalesce(emoji)
        self._admin = bool(admin)
        self._beta = bool(beta)
        self._hidden = bool(hidden)
        self._diagnostics = diagnostics

    def __call__(self, args, context=None, /):
        return self._handler(args, context)

    def check(self, text, context=None, /):
        """
        Offer a message to this command.

        Runs the handler of the first version that fits and returns True;
        returns False when none did, reporting collected failures if any.
        Exceptions raised by the handler propagate to the caller.
        """
        errors = []

        for version in self.versions:
            match version.check(text, context):
                case Success(value=args):
                    logger.debug("%s: matched %r", self.name, version.usage())
                    self(args, context)
                    return True
                case MatchFailure() as failure:
                    logger.debug("%s: %s", self.name, failure.describe())
                    errors.append(copy.replace(failure, prog=self.name))
                case NoMatchType():
                    continue
                case result:
                    raise TypeError(f"command-version check() returned {result!r}")

        if errors:
            self.diagnostics.report(errors)
        return False

    def __rich__(self):
        table = Table(box=ROUNDED, show_header=False, expand=False)
        table.add_column("usage", style="bold #00E5FF", no_wrap=True)
        table.add_column("summary", style="#C8C8D0")
        for version in self.versions:
            table.add_row(version.usage(), version.summary or "")

        title = Text.assemble(
            (Emoji.replace(self.emoji) + " ") if self.emoji else "",
            (self.name, "bold #E6E6F0"),
        )
        renders = [Text(self.summary, "italic")] if self.summary else []
        return Panel(Group(*renders, table), title=title, title_align="left", expand=False)


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct:     cmd = command(handler, name="x", versions=[...])
    - Decorator:  @command(name="x", versions=[...])
                  def handler(args, context): ...
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "DEFAULT_PREFIX",
    "CommandVersion",
    "Command",
    "command",
    "getprefix",
    "tokenize",
)
