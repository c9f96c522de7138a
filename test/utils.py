"""
Tests for the Unset sentinel and the small container helpers.

This module verifies:
- Singleton identity and falsy semantics of Unset.
- Copy/pickle round-trips preserving identity.
- Finality (the sentinel type cannot be subclassed).
- coalesce() and freeze() behavior.
"""
import copy
import pickle
import unittest
from types import MappingProxyType
from unittest import TestCase

from clix.utils import Unset, UnsetType, coalesce, freeze


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the module-level instance on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        """
        Unset is falsy but distinct from other falsy values.
        """
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, 0)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testCopyAndPickle(self) -> None:
        """
        Copies and pickle round-trips keep the same identity.
        """
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            class Derived(UnsetType):  # NOQA: F-841
                pass


class HelpersTest(TestCase):
    def testCoalesce(self) -> None:
        """
        Only Unset is replaced; other falsy values are preserved.
        """
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertEqual(coalesce("", "x"), "")

    def testFreeze(self) -> None:
        self.assertEqual(freeze([1, 2]), (1, 2))
        self.assertIsInstance(freeze({"a": 1}), MappingProxyType)
        self.assertEqual(freeze({1, 2}), frozenset({1, 2}))
        self.assertEqual(freeze("text"), "text")

    def testFreezeIsLiveView(self) -> None:
        table = {"a": 1}
        view = freeze(table)
        table["b"] = 2
        self.assertIn("b", view)
        with self.assertRaises(TypeError):
            view["c"] = 3  # type: ignore[index]


if __name__ == "__main__":
    unittest.main()
