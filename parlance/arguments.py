r"""
Parlance argument definitions.

Overview
- Leaves
  • Argument: a named slot that tries an ordered list of ArgumentType instances;
    the first type answering Success wins.
  • Syntax: a literal marker (e.g. "or"); matches by exact equality and records
    ParsedValue(True, None) under its own name.

- Composite
  • ArgumentGroup: an ordered sequence of leaves and nested groups with
    group-level modifiers:
      optional    the group may be absent from its parent.
      partial     any child that fails is skipped instead of failing the group.
      flexible    as the root of a command version, trailing tokens are ignored.
      repeat      the group may occur several times, repeat_min..repeat_max.
      priority    lookahead precedence over an accumulating neighbour.

Definitions are built once and shared by every match attempt: fields are
exposed through read-only properties, containers are frozen to tuples, and
instances refuse attribute assignment after construction. The matching
algorithm itself lives in parlance.matching.

Example (the classic "would you rather")
    >>> ArgumentGroup(
    ...     Argument("option", TextType()),
    ...     Syntax("or"),
    ...     Argument("option", TextType()),
    ...     ArgumentGroup(Syntax("or"), Argument("option", TextType()), priority=1, repeat=True, repeat_max=7),
    ... ).usage(root=True)
    '<option> or <option> (or <option>)...'
"""
import copy

from .faults import MatchFailure
from .kinds import ArgumentType
from .results import NoMatch, NoMatchType, ParsedValue, Success
from .utils import *


def _sanitize_node_metadata(cls, metadata, /):
    """
    Internal: validate the modifiers shared by leaves and groups.

    - optional: coerced to bool.
    - priority: must be an int (bools rejected); any sign is allowed.
    - summary/emoji: Unset or a string; normalized to a stripped string or None.
    """
    metadata["optional"] = bool(metadata["optional"])

    if not isinstance(priority := metadata["priority"], int) or isinstance(priority, bool):
        raise TypeError(f"{cls.__typename__} 'priority' must be an integer")

    for name in ("summary", "emoji"):
        if name not in metadata:
            continue
        if not isinstance(object := metadata[name], str | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        metadata[name] = coalesce(object.strip() if isinstance(object, str) else object) or None


class Argument(metaclass=SpecType):
    """
    Named leaf slot.

    Every value this leaf produces is collected under `name`; several leaves
    may share a name, in which case their values accumulate in match order.

    Parameters
    - name: str, positional-only. Key in ParsedArgs.
    - *types: one or more ArgumentType instances, tried in order.
    - summary / emoji: help metadata.
    - optional: absence does not fail the enclosing group.
    - priority: lookahead precedence (see parlance.matching).
    - default: value recorded (as ParsedValue(default, None)) when the
      enclosing group matches without this leaf producing anything.
    """

    __introspectable__ = (
        "name",
        "types",
        "summary",
        "emoji",
        "optional",
        "priority",
        "default",
    )

    __displayable__ = (
        "name",
        "types",
        "optional",
        "priority",
    )

    literal = False

    def __init__(self, name, /, *types, summary=Unset, emoji=Unset, optional=False, priority=0, default=Unset):
        metadata = {
            "name": name,
            "types": types,
            "summary": summary,
            "emoji": emoji,
            "optional": optional,
            "priority": priority,
        }
        if not isinstance(name, str) or not name.strip():
            raise TypeError(f"{type(self).__typename__} 'name' must be a non-empty string")
        metadata["name"] = name.strip()
        if not self.literal:
            if not types:
                raise TypeError(f"{type(self).__typename__} {metadata['name']!r} must specify at least one type")
            for kind in types:
                if not isinstance(kind, ArgumentType):
                    raise TypeError(f"{type(self).__typename__} types must be argument-type instances")
        _sanitize_node_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, freeze(object))
        self._default = default

    @property
    def has_default(self):
        return self._default is not Unset

    def parse(self, token, context=None, /):
        """
        Try every declared type against `token` (a single token or a widened span).

        Returns
        - Success(ParsedValue(value, type)) for the first type that accepts it.
        - A ValidationError stamped with this argument and the failing type, as
          soon as one type rejects the value on semantic grounds.
        - NoMatch when no type recognizes the token.
        """
        for kind in self.types:
            match kind.parse(token, context):
                case Success(value=value):
                    return Success(ParsedValue(value, kind))
                case MatchFailure() as failure:
                    return copy.replace(failure, argument=self, type=kind, token=token)
                case NoMatchType():
                    continue
                case result:
                    raise TypeError(f"{kind.__typename__} parse() returned {result!r}, expected Success, NoMatch or a validation error")
        return NoMatch

    def usage(self):
        rendered = f"<{self.name}>"
        return f"[{rendered}]" if self.optional else rendered


class Syntax(Argument):
    """
    Literal marker argument (e.g. the "or" in "a or b").

    Matches only when the token equals its name exactly and records
    ParsedValue(True, None): it marks presence and carries no payload.
    """

    literal = True

    def __init__(self, name, /, optional=False, priority=0):
        super().__init__(name, optional=optional, priority=priority)

    def parse(self, token, context=None, /):
        if token == self.name:
            return Success(ParsedValue(True, None))
        return NoMatch

    def usage(self):
        return f"[{self.name}]" if self.optional else self.name


class ArgumentGroup(metaclass=SpecType):
    """
    Ordered composite of arguments and nested groups.

    Parameters
    - *args: Argument and ArgumentGroup children, in order (at least one).
    - optional: the whole group may be absent from its parent.
    - partial: a child that fails to match is skipped without consuming input.
    - flexible: when used as the root of a command version, tokens left over
      after the last slot are ignored instead of failing the match.
    - priority: lookahead precedence against an accumulating neighbour.
    - repeat: the group may occur several consecutive times.
    - repeat_min: minimum occurrences (>= 1; use optional=True for "zero or more").
    - repeat_max: maximum occurrences (Unset means unbounded).
    """

    __introspectable__ = (
        "args",
        "summary",
        "optional",
        "partial",
        "flexible",
        "priority",
        "repeat",
        "repeat_min",
        "repeat_max",
    )

    __displayable__ = (
        "args",
        "optional",
        "partial",
        "priority",
        "repeat",
        "repeat_min",
        "repeat_max",
    )

    def __init__(
            self,
            *args,
            summary=Unset,
            optional=False,
            partial=False,
            flexible=False,
            priority=0,
            repeat=False,
            repeat_min=Unset,
            repeat_max=Unset,
    ):
        cls = type(self)
        if not args:
            raise TypeError(f"{cls.__typename__} must contain at least one argument")
        for arg in args:
            if not isinstance(arg, Argument | ArgumentGroup):
                raise TypeError(f"{cls.__typename__} children must be arguments or argument groups, got {arg!r}")

        metadata = {
            "args": args,
            "summary": summary,
            "optional": optional,
            "partial": bool(partial),
            "flexible": bool(flexible),
            "priority": priority,
            "repeat": bool(repeat),
        }
        _sanitize_node_metadata(cls, metadata)

        if not metadata["repeat"] and (repeat_min is not Unset or repeat_max is not Unset):
            raise TypeError(f"{cls.__typename__} repetition bounds require repeat=True")
        for label, bound in (("repeat_min", repeat_min), ("repeat_max", repeat_max)):
            if not isinstance(bound, int | Unset) or isinstance(bound, bool):
                raise TypeError(f"{cls.__typename__} {label!r} must be an integer")
        metadata["repeat_min"] = coalesce(repeat_min, 1)
        metadata["repeat_max"] = coalesce(repeat_max)
        if metadata["repeat_min"] < 1:
            raise ValueError(f"{cls.__typename__} 'repeat_min' must be at least 1")
        if metadata["repeat_max"] is not None and metadata["repeat_max"] < metadata["repeat_min"]:
            raise ValueError(f"{cls.__typename__} 'repeat_min' cannot be greater than 'repeat_max'")

        for name, object in metadata.items():
            setattr(self, "_" + name, freeze(object))

    def names(self):
        """
        Yield every leaf name reachable from this group (nested groups included),
        once each, in declaration order.
        """
        seen = set()
        for arg in self.args:
            for name in (arg.names() if isinstance(arg, ArgumentGroup) else (arg.name,)):
                if name not in seen:
                    seen.add(name)
                    yield name

    def usage(self, *, root=False):
        """
        Render a compact signature, e.g. "<option> or <option> (or <option>)...".
        """
        rendered = " ".join(arg.usage() for arg in self.args)
        if self.repeat:
            rendered = f"({rendered})..."
        elif not root and not self.optional:
            rendered = f"({rendered})"
        if self.optional:
            rendered = f"[{rendered}]"
        return rendered


__all__ = (
    "Argument",
    "Syntax",
    "ArgumentGroup",
)
