r"""
Parlance group matching: token stream → ParsedArgs.

Entry point
- match(group, tokens, context=None) → NoMatch | ValidationError | Success(ParsedArgs, consumed)

Model
- A group is expanded into an ordered list of slots. A repeatable child group
  contributes repeat_min consecutive slots; further occurrences are discovered
  while scanning by holding the cursor on its last slot.
- A repeatable group scans a doubled slot list. The second copy only marks
  where the next occurrence would begin: as soon as the scan crosses into it,
  the current occurrence is complete and is returned with the tokens it used,
  and the parent matches the group again on what is left.

Scan (one token per step, two cursors: slot and token)
- Accumulating (a leaf matched and its value began at `anchor`):
  1. If the next slot's priority is >= the leaf's, try the next slot on the
     current token (a group gets the remaining tokens). A success that
     consumes at least one token closes the leaf at its current span and moves
     on; ties favour the lookahead. A group that matches without consuming
     anything does not take over.
  2. Otherwise, or if the lookahead did not match, re-parse the widened span
     tokens[anchor:token + 1] as one value. Success replaces the leaf's last
     value; NoMatch closes the leaf and re-presents the token to the next slot.
- Not accumulating: try the current slot. A leaf that matches opens an
  accumulation window; a group that matches is merged and the cursor holds on
  it while repeat_min <= occurrences < repeat_max.
- Escape rule: a slot that fails is skipped without consuming the token when
  the enclosing group is partial. A repeatable group is skipped once it
  reached repeat_min, or when it is optional and never occurred; any other
  slot is skipped when it is optional. Otherwise the group answers NoMatch.

Acceptance
- Every slot the scan did not consume (the accumulating leaf excepted) must be
  skippable by the same rule, or be a nested group that matches no tokens at
  all. Nested groups may leave trailing tokens for their parent; the root call
  rejects leftovers unless the root is flexible.

Failures
- NoMatch is silent and purely structural.
- A ValidationError from any leaf (first attempt, lookahead or widened span)
  is returned upward immediately, unchanged.

All cursor state lives in a _Scan created per call; definitions are only read.
"""
import functools
from collections import defaultdict, namedtuple

from .arguments import ArgumentGroup
from .faults import MatchFailure
from .logger import get_logger
from .results import NoMatch, NoMatchType, ParsedArgs, ParsedValue, Success

logger = get_logger("matching")

_Slot = namedtuple("_Slot", ("node", "index"))


@functools.lru_cache(maxsize=1024)
def _expand(group):
    slots = []
    for index, arg in enumerate(group.args):
        copies = arg.repeat_min if isinstance(arg, ArgumentGroup) and arg.repeat else 1
        slots.extend([_Slot(arg, index)] * copies)
    return tuple(slots)


@functools.lru_cache(maxsize=1024)
def _defaults(group):
    defaults = []
    for arg in group.args:
        if isinstance(arg, ArgumentGroup):
            defaults.extend(_defaults(arg))
        elif arg.has_default:
            defaults.append((arg.name, arg.default))
    return tuple(defaults)


def _unexpected(result):
    raise TypeError(f"matcher returned {result!r}, expected Success, NoMatch or a validation error")


class _Scan:
    """
    Cursor state for one occurrence of one group over one token slice.
    """

    __slots__ = (
        "group",
        "tokens",
        "context",
        "slots",
        "boundary",
        "parsed",
        "occurrences",
        "slot",
        "token",
        "anchor",
    )

    def __init__(self, group, tokens, context):
        self.group = group
        self.tokens = tokens
        self.context = context
        self.slots = _expand(group)
        self.boundary = None
        if group.repeat:
            self.boundary = len(self.slots)
            self.slots += self.slots
        self.parsed = ParsedArgs((name, []) for name in group.names())
        self.occurrences = defaultdict(int)
        self.slot = 0
        self.token = 0
        self.anchor = None

    def run(self):
        while self.slot < len(self.slots) and self.token < len(self.tokens):
            if self.boundary is not None and self.slot >= self.boundary:
                break
            if self.anchor is not None:
                outcome = self._accumulate()
            else:
                outcome = self._advance()
            if outcome is not None:
                return outcome
        return self._finish()

    def _attempt(self, node):
        if isinstance(node, ArgumentGroup):
            return _scan(node, self.tokens[self.token:], self.context)
        return node.parse(self.tokens[self.token], self.context)

    def _accept(self, current, value, consumed):
        node = current.node
        if not isinstance(node, ArgumentGroup):
            self.parsed[node.name].append(value)
            self.anchor = self.token
            self.token += 1
            return

        self.parsed.merge(value)
        self.token += consumed
        self.occurrences[current.index] += 1
        count = self.occurrences[current.index]
        if (
            node.repeat and
            consumed and
            count >= node.repeat_min and
            (node.repeat_max is None or count < node.repeat_max)
        ):
            return
        self.slot += 1

    def _skippable(self, current):
        node = current.node
        if self.group.partial:
            return True
        if isinstance(node, ArgumentGroup) and node.repeat:
            count = self.occurrences[current.index]
            # an optional repeat may be absent, never short
            return count >= node.repeat_min or (count == 0 and node.optional)
        return node.optional

    def _advance(self):
        current = self.slots[self.slot]
        match self._attempt(current.node):
            case Success(value=value, consumed=consumed):
                self._accept(current, value, consumed)
            case NoMatchType():
                if not self._skippable(current):
                    return NoMatch
                self.slot += 1
            case MatchFailure() as failure:
                return failure
            case result:
                _unexpected(result)
        return None

    def _accumulate(self):
        leaf = self.slots[self.slot].node
        lookahead = self.slot + 1

        if lookahead < len(self.slots) and self.slots[lookahead].node.priority >= leaf.priority:
            following = self.slots[lookahead]
            match self._attempt(following.node):
                case Success(value=value, consumed=consumed) if consumed:
                    if self.boundary is not None and lookahead >= self.boundary:
                        # the next occurrence starts at this token
                        return self._complete()
                    self.anchor = None
                    self.slot = lookahead
                    self._accept(following, value, consumed)
                    return None
                case Success() | NoMatchType():
                    pass
                case MatchFailure() as failure:
                    return failure
                case result:
                    _unexpected(result)

        span = " ".join(self.tokens[self.anchor:self.token + 1])
        match leaf.parse(span, self.context):
            case Success(value=value):
                self.parsed[leaf.name][-1] = value
                self.token += 1
            case NoMatchType():
                self.anchor = None
                self.slot += 1
            case MatchFailure() as failure:
                return failure
            case result:
                _unexpected(result)
        return None

    def _finish(self):
        end = self.boundary if self.boundary is not None else len(self.slots)
        start = self.slot + 1 if self.anchor is not None else self.slot
        for position in range(start, end):
            current = self.slots[position]
            if self._skippable(current):
                continue
            if not isinstance(current.node, ArgumentGroup) or current.node.repeat:
                return NoMatch
            match _scan(current.node, (), self.context):
                case Success(value=value):
                    self.parsed.merge(value)
                case _:
                    return NoMatch
        return self._complete()

    def _complete(self):
        for name, default in _defaults(self.group):
            if not self.parsed[name]:
                self.parsed[name].append(ParsedValue(default, None))
        return Success(self.parsed, self.token)


def _scan(group, tokens, context):
    return _Scan(group, tokens, context).run()


def _repeat(group, tokens, context):
    parsed = ParsedArgs((name, []) for name in group.names())
    count = 0
    consumed = 0
    while True:
        match _scan(group, tokens[consumed:], context):
            case Success(value=occurrence, consumed=used):
                parsed.merge(occurrence)
                count += 1
                consumed += used
                if not used or consumed >= len(tokens):
                    break
                if group.repeat_max is not None and count >= group.repeat_max:
                    break
            case NoMatchType():
                break
            case MatchFailure() as failure:
                return failure
            case result:
                _unexpected(result)
    if count < group.repeat_min:
        return NoMatch
    return Success(parsed, consumed)


def match(group, tokens, context=None, /):
    """
    Match a whole token sequence against a root group.

    Parameters
    - group: ArgumentGroup, the root definition (only read, never modified).
    - tokens: sequence of non-empty strings.
    - context: opaque message context handed to every leaf type.

    Returns
    - Success(ParsedArgs, consumed) when the tokens fit; consumed equals
      len(tokens) unless the root group is flexible.
    - NoMatch when they do not (including leftover tokens).
    - The first ValidationError met, unchanged.
    """
    if not isinstance(group, ArgumentGroup):
        raise TypeError("match() first argument must be an argument group")
    tokens = tuple(tokens)

    result = _repeat(group, tokens, context) if group.repeat else _scan(group, tokens, context)

    match result:
        case Success(consumed=consumed) if consumed < len(tokens) and not group.flexible:
            logger.debug("rejecting match: %d of %d tokens left over", len(tokens) - consumed, len(tokens))
            return NoMatch
        case Success() | NoMatchType() | MatchFailure():
            return result
        case _:
            _unexpected(result)


__all__ = (
    "match",
)
