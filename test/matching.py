"""
Group matching behavioral tests (greedy accumulation, priority, repetition).

Scope
- Validate leaf-only groups: one token per leaf, in order.
- Validate greedy accumulation of multi-token values and the priority rule that
  hands tokens over to the following slot.
- Validate optional, partial, flexible and repeatable groups, including
  repetition bounds.
- Validate the failure channels: NoMatch is silent, validation errors travel
  upward unchanged.

Conventions
- Test method names follow CamelCase per project convention.
- Tokens are passed pre-split; tokenization is covered by the command tests.
"""

import unittest
from unittest import TestCase

from parlance import (
    Argument,
    ArgumentGroup,
    IntegerType,
    NoMatch,
    Success,
    Syntax,
    TextType,
    match,
)
from parlance.faults import FaultCode, OutOfRangeError, TooLongError


def wyr():
    """The "would you rather" pattern: two options, then up to seven more."""
    return ArgumentGroup(
        Argument("option", TextType()),
        Syntax("or"),
        Argument("option", TextType()),
        ArgumentGroup(Syntax("or"), Argument("option", TextType()), priority=1, repeat=True, repeat_max=7),
    )


class TestLeafGroups(TestCase):
    """Groups made of single-token leaves only."""

    def setUp(self):
        self.group = ArgumentGroup(Argument("a", IntegerType()), Argument("b", IntegerType()))

    def testExactTokenCountSucceeds(self):
        result = match(self.group, ["1", "2"])
        self.assertIsInstance(result, Success)
        self.assertEqual(result.consumed, 2)
        self.assertEqual(result.value.unwrap("a"), [1])
        self.assertEqual(result.value.unwrap("b"), [2])

    def testTooFewTokensIsNoMatch(self):
        self.assertIs(match(self.group, ["1"]), NoMatch)

    def testTooManyTokensIsNoMatch(self):
        self.assertIs(match(self.group, ["1", "2", "3"]), NoMatch)

    def testWrongShapeIsNoMatch(self):
        self.assertIs(match(self.group, ["x", "2"]), NoMatch)
        self.assertIs(match(self.group, ["1", "y"]), NoMatch)

    def testEmptyInputIsNoMatch(self):
        self.assertIs(match(self.group, []), NoMatch)

    def testProducingTypeIsRecorded(self):
        kind = IntegerType()
        result = match(ArgumentGroup(Argument("n", kind)), ["4"])
        self.assertIs(result.value["n"][0].type, kind)

    def testRepeatedMatchingIsDeterministic(self):
        group = wyr()
        tokens = "a b or c or d e or f g".split()
        first, second = match(group, tokens), match(group, tokens)
        self.assertEqual(first, second)
        self.assertIsNot(first.value, second.value)

    def testNonGroupRejected(self):
        with self.assertRaises(TypeError):
            match(Argument("a", IntegerType()), ["1"])


class TestSyntaxMarkers(TestCase):
    """Literal markers inside groups."""

    def testMarkerIsMandatory(self):
        group = ArgumentGroup(Argument("a", IntegerType()), Syntax("to"), Argument("b", IntegerType()))
        self.assertIsInstance(match(group, ["1", "to", "2"]), Success)
        self.assertIs(match(group, ["1", "2"]), NoMatch)

    def testOptionalMarker(self):
        group = ArgumentGroup(Argument("a", IntegerType()), Syntax("to", optional=True), Argument("b", IntegerType()))
        result = match(group, ["1", "2"])
        self.assertEqual(result.value.unwrap("b"), [2])
        self.assertEqual(result.value.unwrap("to"), [])

    def testMarkerRecordsPresenceOnly(self):
        result = match(ArgumentGroup(Syntax("now")), ["now"])
        self.assertEqual(result.value.unwrap("now"), [True])
        self.assertIsNone(result.value["now"][0].type)


class TestGreedyAccumulation(TestCase):
    """Multi-token values and the priority rule."""

    def testTextSwallowsTokensUntilMarker(self):
        group = ArgumentGroup(Argument("option", TextType()), Syntax("or"), Argument("option", TextType()))
        result = match(group, ["a", "b", "or", "c"])
        self.assertEqual(result.value.unwrap("option"), ["a b", "c"])

    def testTrailingTextIsWidened(self):
        group = ArgumentGroup(Argument("option", TextType()), Syntax("or"), Argument("option", TextType()))
        result = match(group, ["a", "or", "c", "d", "e"])
        self.assertEqual(result.value.unwrap("option"), ["a", "c d e"])

    def testEqualPriorityNeighbourTakesOver(self):
        group = ArgumentGroup(Argument("a", TextType()), Argument("b", TextType()))
        result = match(group, ["x", "y", "z"])
        self.assertEqual(result.value.unwrap("a"), ["x"])
        self.assertEqual(result.value.unwrap("b"), ["y z"])

    def testLowerPriorityNeighbourWaits(self):
        group = ArgumentGroup(Argument("a", TextType()), Argument("b", TextType(), optional=True, priority=-1))
        result = match(group, ["x", "y", "z"])
        self.assertEqual(result.value.unwrap("a"), ["x y z"])
        self.assertEqual(result.value.unwrap("b"), [])

    def testNonWidenableLeafHandsOverToken(self):
        group = ArgumentGroup(Argument("count", IntegerType()), Argument("label", TextType()))
        result = match(group, ["3", "red", "apples"])
        self.assertEqual(result.value.unwrap("count"), [3])
        self.assertEqual(result.value.unwrap("label"), ["red apples"])

    def testValidationErrorOnWidenedSpan(self):
        group = ArgumentGroup(Argument("title", TextType(max_length=3)))
        failure = match(group, ["ab", "cd"])
        self.assertIsInstance(failure, TooLongError)
        self.assertEqual(failure.token, "ab cd")


class TestRepetition(TestCase):
    """Repeatable groups and their bounds."""

    def testWouldYouRather(self):
        result = match(wyr(), "a b or c or d e or f g".split())
        self.assertIsInstance(result, Success)
        self.assertEqual(result.value.unwrap("option"), ["a b", "c", "d e", "f g"])

    def testMandatoryRepeatNeedsOneOccurrence(self):
        self.assertIs(match(wyr(), "tea or coffee".split()), NoMatch)

    def testRepeatMaxIsReached(self):
        tokens = "a or b or 1 or 2 or 3 or 4 or 5 or 6 or 7".split()
        result = match(wyr(), tokens)
        self.assertEqual(result.value.unwrap("option"), ["a", "b", "1", "2", "3", "4", "5", "6", "7"])

    def testRepeatBeyondMaxIsExcessInput(self):
        tokens = "a or b or 1 or 2 or 3 or 4 or 5 or 6 or 7 or 8".split()
        self.assertIs(match(wyr(), tokens), NoMatch)

    def testRepeatMinIsEnforced(self):
        group = ArgumentGroup(Syntax("roll"), ArgumentGroup(Argument("die", IntegerType()), repeat=True, repeat_min=2))
        self.assertIs(match(group, ["roll", "6"]), NoMatch)
        self.assertEqual(match(group, ["roll", "6", "8"]).value.unwrap("die"), [6, 8])
        self.assertEqual(match(group, ["roll", "6", "8", "20"]).value.unwrap("die"), [6, 8, 20])

    def testOptionalRepeatStillNeedsRepeatMin(self):
        group = ArgumentGroup(
            Argument("n", IntegerType()),
            ArgumentGroup(Syntax("x"), Argument("m", IntegerType()), optional=True, repeat=True, repeat_min=2),
        )
        self.assertIs(match(group, ["1", "x", "2"]), NoMatch)
        self.assertEqual(match(group, ["1"]).value.unwrap("m"), [])
        self.assertEqual(match(group, "1 x 2 x 3".split()).value.unwrap("m"), [2, 3])

    def testOptionalRepeatMayBeAbsent(self):
        group = ArgumentGroup(
            Argument("first", IntegerType()),
            ArgumentGroup(Syntax("and"), Argument("more", IntegerType()), optional=True, repeat=True),
        )
        self.assertEqual(match(group, ["1"]).value.unwrap("more"), [])
        self.assertEqual(match(group, "1 and 2 and 3".split()).value.unwrap("more"), [2, 3])

    def testRepeatableRoot(self):
        group = ArgumentGroup(Argument("n", IntegerType()), repeat=True, repeat_max=3)
        self.assertEqual(match(group, ["1", "2", "3"]).value.unwrap("n"), [1, 2, 3])
        self.assertIs(match(group, ["1", "2", "3", "4"]), NoMatch)


class TestGroupModifiers(TestCase):
    """Optional, partial and flexible groups; defaults."""

    def testOptionalNestedGroup(self):
        group = ArgumentGroup(
            Argument("n", IntegerType()),
            ArgumentGroup(Syntax("times"), Argument("k", IntegerType()), optional=True),
        )
        self.assertEqual(match(group, ["3"]).value.unwrap("k"), [])
        self.assertEqual(match(group, ["3", "times", "4"]).value.unwrap("k"), [4])

    def testPartialGroupSkipsFailingChildren(self):
        group = ArgumentGroup(Syntax("x"), Argument("n", IntegerType()), partial=True)
        result = match(group, ["5"])
        self.assertEqual(result.value.unwrap("n"), [5])
        self.assertEqual(result.value.unwrap("x"), [])

    def testStrictGroupDoesNotSkip(self):
        group = ArgumentGroup(Syntax("x"), Argument("n", IntegerType()))
        self.assertIs(match(group, ["5"]), NoMatch)

    def testEmptyGroupMatchDoesNotCutAccumulation(self):
        group = ArgumentGroup(Argument("a", TextType()), ArgumentGroup(Syntax("x"), partial=True))
        result = match(group, ["p", "q"])
        self.assertIsInstance(result, Success)
        self.assertEqual(result.value.unwrap("a"), ["p q"])
        self.assertEqual(match(group, ["p", "q", "x"]).value.unwrap("a"), ["p q"])

    def testFlexibleRootIgnoresTrailingTokens(self):
        group = ArgumentGroup(Argument("n", IntegerType()), flexible=True)
        result = match(group, ["1", "x"])
        self.assertEqual(result.value.unwrap("n"), [1])
        self.assertEqual(result.consumed, 1)

    def testStrictRootRejectsTrailingTokens(self):
        group = ArgumentGroup(Argument("n", IntegerType()))
        self.assertIs(match(group, ["1", "x"]), NoMatch)

    def testDefaultAppliedWhenAbsent(self):
        group = ArgumentGroup(Argument("a", IntegerType()), Argument("b", IntegerType(), optional=True, default=5))
        result = match(group, ["1"])
        self.assertEqual(result.value.unwrap("b"), [5])
        self.assertIsNone(result.value["b"][0].type)

    def testDefaultNotAppliedWhenPresent(self):
        group = ArgumentGroup(Argument("a", IntegerType()), Argument("b", IntegerType(), optional=True, default=5))
        self.assertEqual(match(group, ["1", "2"]).value.unwrap("b"), [2])


class TestValidationChannel(TestCase):
    """Semantic failures travel upward unchanged."""

    def testRangeErrorNamesTheLeaf(self):
        leaf = Argument("n", IntegerType(min=1, max=10))
        failure = match(ArgumentGroup(leaf), ["12"])
        self.assertIsInstance(failure, OutOfRangeError)
        self.assertIs(failure.argument, leaf)
        self.assertEqual(failure.options["code"], FaultCode.INTEGER_TOO_LARGE)

    def testInRangeSucceeds(self):
        result = match(ArgumentGroup(Argument("n", IntegerType(min=1, max=100))), ["12"])
        self.assertEqual(result.value.unwrap("n"), [12])

    def testErrorFromNestedGroupPropagates(self):
        leaf = Argument("k", IntegerType(max=3))
        group = ArgumentGroup(
            Argument("n", IntegerType()),
            ArgumentGroup(Syntax("times"), leaf, optional=True),
        )
        failure = match(group, ["3", "times", "9"])
        self.assertIsInstance(failure, OutOfRangeError)
        self.assertIs(failure.argument, leaf)

    def testErrorFromLookaheadPropagates(self):
        leaf = Argument("n", IntegerType(max=3))
        group = ArgumentGroup(Argument("label", TextType()), leaf)
        failure = match(group, ["x", "9"])
        self.assertIsInstance(failure, OutOfRangeError)


if __name__ == "__main__":
    unittest.main()
