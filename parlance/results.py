"""
Parlance match results.

Every matching step (a leaf type, an argument, a group, a command version)
answers with exactly one of three variants:

- NoMatch
  • Structural non-match. A falsy, process-wide singleton; always recoverable
    (the caller tries the next slot, repetition, or version).
- ValidationError (see parlance.faults)
  • The token fit the shape but broke a semantic constraint. An exception
    instance returned as a value; it travels upward unchanged, picking up the
    offending argument, type and version on the way.
- Success(value, consumed=1)
  • A leaf type answers Success(value); an argument answers
    Success(ParsedValue(value, type)); a group answers
    Success(ParsedArgs, consumed) where consumed is the number of tokens used.

ParsedArgs maps each argument name to the ordered list of ParsedValue it
collected; repeated leaves contribute several values in match order.
"""
import functools
from collections import namedtuple
from typing import final

from rich.text import Text


@final
class NoMatchType:
    """
    Singleton marker for a structural non-match.

    behavior
    - truthiness: bool(NoMatch) is False.
    - identity: NoMatchType() always returns the same object.
    - display: repr(NoMatch) -> "NoMatch"; rich renders it dimmed.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "NoMatch"

    def __reduce__(self):
        return "NoMatch"

    def __rich__(self):
        return Text(repr(self), style="dim")

    def __init_subclass__(cls, **options):
        raise TypeError("type 'NoMatchType' is not an acceptable base type")


NoMatch = NoMatchType()

Success = namedtuple("Success", ("value", "consumed"), defaults=(1,))
Success.__doc__ = "Successful match: the produced value and the number of tokens consumed."

ParsedValue = namedtuple("ParsedValue", ("value", "type"))
ParsedValue.__doc__ = "A single parsed value and the argument type that produced it (None for literals)."


class ParsedArgs(dict):
    """
    Mapping of argument name → list of ParsedValue, in match order.

    Instances are created fresh for every match attempt and are never shared
    between attempts; a group match owns the one it returns.
    """

    def merge(self, other, /):
        """
        Append every value list of `other` onto this mapping, creating missing names.
        """
        for name, values in other.items():
            self.setdefault(name, []).extend(values)
        return self

    def unwrap(self, name, /):
        """
        Return the plain values collected under `name` (no producing types).
        """
        return [parsed.value for parsed in self.get(name, ())]

    def first(self, name, default=None, /):
        """
        Return the first plain value collected under `name`, or `default`.
        """
        try:
            return self[name][0].value
        except (KeyError, IndexError):
            return default

    def __repr__(self):
        return f"parsed-args({dict.__repr__(self)})"


__all__ = (
    "NoMatchType",
    "NoMatch",
    "Success",
    "ParsedValue",
    "ParsedArgs",
)
