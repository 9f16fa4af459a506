"""
Key and sanitizer behavioral tests.

Scope
- Sanitizers: id/long/short normalization, emptiness, print names.
- Key: explicit-over-automatic locking in any call order, prefix concatenation.
- bind_keys: registry-level prefix and automatic ids applied explicitly.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from vexil import IntFlag, Key, StringFlag, bind_keys
from vexil.sanitizers import *


class TestSanitizers(TestCase):

    def testIsEmpty(self):
        self.assertTrue(is_empty(""))
        self.assertTrue(is_empty(" \t\n"))
        self.assertFalse(is_empty(" x "))

    def testSanitizeIdWhiteSpace(self):
        self.assertEqual(sanitize_id("  key with white space "), "KEY_WITH_WHITE_SPACE")

    def testSanitizeIdHyphenRuns(self):
        self.assertEqual(sanitize_id("------key-------with-----hyphen----"), "_KEY_WITH_HYPHEN_")

    def testSanitizeIdMixedSeparators(self):
        self.assertEqual(sanitize_id("mixed - \t separators"), "MIXED_SEPARATORS")

    def testSanitizeIdSeparatorsOnly(self):
        self.assertEqual(sanitize_id("-"), "")
        self.assertEqual(sanitize_id(" -- _ "), "")
        self.assertEqual(sanitize_id("   "), "")

    def testSanitizeLongName(self):
        self.assertEqual(sanitize_long_name("--Port  Number"), "port-number")
        self.assertEqual(sanitize_long_name("flag"), "flag")

    def testSanitizeShortNameKeepsCase(self):
        self.assertEqual(sanitize_short_name("  -P "), "P")
        self.assertEqual(sanitize_short_name("--x"), "x")

    def testPrintName(self):
        self.assertEqual(print_name("port", "p"), "-p, --port")
        self.assertEqual(print_name("port"), "--port")
        self.assertEqual(print_name("port", "  "), "--port")


class TestKey(TestCase):

    def testExplicitThenAutomatic(self):
        key = Key()
        key.set_id("x")
        key.set_id("auto", automatic=True)
        self.assertEqual(key.id, "X")
        self.assertTrue(key.explicit)

    def testAutomaticThenExplicit(self):
        key = Key()
        key.set_id("auto", automatic=True)
        self.assertEqual(key.id, "AUTO")
        self.assertFalse(key.explicit)
        key.set_id("x")
        self.assertEqual(key.id, "X")
        self.assertTrue(key.explicit)

    def testAutomaticReplacesAutomatic(self):
        key = Key()
        key.set_id("first", automatic=True)
        key.set_id("second", automatic=True)
        self.assertEqual(key.id, "SECOND")

    def testValueWithPrefix(self):
        self.assertEqual(Key("port", prefix="app").value, "APP_PORT")
        self.assertEqual(str(Key("port number", prefix="my app")), "MY_APP_PORT_NUMBER")

    def testValueWithoutPrefix(self):
        self.assertEqual(Key("port").value, "PORT")

    def testValueEmptyWithoutId(self):
        key = Key(prefix="app")
        self.assertEqual(key.value, "")
        self.assertFalse(key.is_set)

    def testHyphenDisablesKey(self):
        key = Key("-")
        self.assertEqual(key.value, "")
        self.assertFalse(key.is_set)

    def testSetPrefixDoesNotTouchExplicit(self):
        key = Key()
        key.set_prefix("app")
        self.assertFalse(key.explicit)
        self.assertEqual(key.prefix, "APP")

    def testRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            Key().set_prefix(1)
        with self.assertRaises(TypeError):
            Key().set_id(1)


class TestBindKeys(TestCase):

    def testPrefixAndAutomaticIds(self):
        port = IntFlag("port number")
        host = StringFlag("host", key="server")
        flags = bind_keys([port, host], prefix="app", auto=True)
        self.assertEqual(flags, [port, host])
        self.assertEqual(port.key.value, "APP_PORT_NUMBER")
        self.assertEqual(host.key.value, "APP_SERVER")

    def testWithoutAutoKeepsKeysEmpty(self):
        port = IntFlag("port")
        bind_keys([port], prefix="app")
        self.assertEqual(port.key.value, "")
        self.assertEqual(port.key.prefix, "APP")

    def testEmptyPrefixClears(self):
        port = IntFlag("port", key="port")
        bind_keys([port], prefix="app")
        bind_keys([port], prefix="")
        self.assertEqual(port.key.value, "PORT")

    def testExplicitKeyAfterBinding(self):
        port = IntFlag("port")
        bind_keys([port], auto=True)
        port.with_key("http port")
        bind_keys([port], auto=True)
        self.assertEqual(port.key.value, "HTTP_PORT")

    def testPrefixMustBeString(self):
        with self.assertRaises(TypeError):
            bind_keys([], prefix=1)


if __name__ == "__main__":
    unittest.main()
