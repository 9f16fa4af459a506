"""
Collection flag behavioral tests.

Scope
- Slices: tokenizing, stray delimiters, verbatim string tokens, all-or-nothing commits,
  per-item validation, defaults.
- String maps: "key:value" pairs, trimming switches, malformed tokens, callbacks.
- String slice maps: JSON objects of delimited lists.

Conventions
- Test method names follow CamelCase per project convention.
"""
import ipaddress
import unittest
from datetime import timedelta
from unittest import TestCase

from vexil import *


class Rejected(Exception):
    pass


def reject(*arguments):
    raise Rejected(arguments)


class TestSlices(TestCase):

    def testEmptyInputCommitsEmptyList(self):
        flag = IntSliceFlag("numbers")
        flag.set("   ")
        self.assertEqual(flag.get(), [])
        self.assertTrue(flag.is_set)

    def testStrayDelimitersAreSkipped(self):
        flag = IntSliceFlag("numbers")
        flag.set("1, 2,,3 ")
        self.assertEqual(flag.get(), [1, 2, 3])

    def testOneBadTokenFailsEverything(self):
        flag = IntSliceFlag("numbers")
        flag.set("7")
        with self.assertRaises(InvalidValueError) as context:
            flag.set("1,bad,2")
        self.assertEqual(str(context.exception), "'bad' is not a valid []int value for --numbers")
        self.assertEqual(flag.get(), [7])

    def testGetReturnsCopies(self):
        flag = IntSliceFlag("numbers")
        flag.set("1,2")
        flag.get().append(3)
        flag.var().value.clear()
        self.assertEqual(flag.get(), [1, 2])

    def testCustomDelimiter(self):
        flag = IntSliceFlag("numbers", delimiter=";")
        flag.set("1;2")
        self.assertEqual(flag.get(), [1, 2])
        with self.assertRaises(InvalidValueError):
            flag.set("1,2")

    def testEmptyDelimiterRestoresComma(self):
        flag = IntSliceFlag("numbers").with_delimiter("")
        self.assertEqual(flag.delimiter, ",")
        flag.set("1,2")
        self.assertEqual(flag.get(), [1, 2])

    def testItemsAreValidatedAfterParsing(self):
        flag = IntSliceFlag("numbers", validator=reject)
        with self.assertRaises(InvalidValueError):
            flag.set("1,bad")
        with self.assertRaises(Rejected) as context:
            flag.set("1,2")
        self.assertEqual(context.exception.args, ((1,),))
        self.assertFalse(flag.is_set)

    def testCallbackSeesEveryItem(self):
        received = []
        flag = IntSliceFlag("numbers").with_validation_callback(received.append)
        flag.set("3,1,2")
        self.assertEqual(received, [3, 1, 2])

    def testAcceptableValuesPerItem(self):
        flag = IntSliceFlag("numbers", valid=(1, 2))
        flag.set("1,2,1")
        with self.assertRaises(OutOfRangeError) as context:
            flag.set("1,3")
        self.assertEqual(
            str(context.exception),
            "3 is not an acceptable value for --numbers. The expected values are 1,2."
        )
        self.assertEqual(flag.get(), [1, 2, 1])

    def testDefaults(self):
        flag = IntSliceFlag("numbers", default=(1, 2))
        self.assertEqual(flag.default, [1, 2])
        self.assertEqual(flag.get(), [])
        flag.set("5")
        flag.reset_to_default()
        self.assertEqual(flag.get(), [1, 2])
        self.assertFalse(flag.is_set)

    def testDefaultMustBeIterableOfValues(self):
        for default in ("1,2", 5):
            with self.subTest(default=default), self.assertRaises(TypeError):
                IntSliceFlag("numbers", default=default)

    def testTypeNames(self):
        cases = {
            BoolSliceFlag: "[]bool",
            IntSliceFlag: "[]int",
            UintSliceFlag: "[]uint",
            Float64SliceFlag: "[]float64",
            StringSliceFlag: "[]string",
            DurationSliceFlag: "[]duration",
            IPAddressSliceFlag: "[]ip",
            CIDRSliceFlag: "[]cidr",
            StringMapFlag: "[string]string",
            StringSliceMapFlag: "[string][]string",
        }
        for cls, typename in cases.items():
            with self.subTest(cls=cls.__name__):
                self.assertEqual(cls("flag").typename, typename)


class TestStringSlices(TestCase):

    def testTokensAreVerbatim(self):
        flag = StringSliceFlag("names")
        flag.set("a, b,,c")
        self.assertEqual(flag.get(), ["a", " b", "", "c"])
        self.assertFalse(flag.trimming)

    def testTrimming(self):
        flag = StringSliceFlag("names").with_trimming()
        flag.set(" a , b ,")
        self.assertEqual(flag.get(), ["a", "b", ""])

    def testTrimmingKeyword(self):
        flag = StringSliceFlag("names", trimming=True)
        self.assertTrue(flag.trimming)

    def testBlankInputIsEmpty(self):
        flag = StringSliceFlag("names")
        flag.set(" ")
        self.assertEqual(flag.get(), [])

    def testIgnoreCaseRange(self):
        flag = StringSliceFlag("letters").with_valid_range("a", "B", ignore_case=True)
        flag.set("A,b")
        self.assertEqual(flag.get(), ["A", "b"])
        with self.assertRaises(OutOfRangeError) as context:
            flag.set("a,,b")
        self.assertEqual(
            str(context.exception),
            "'' is not an acceptable value for --letters. The expected values are a,B."
        )


class TestTypedSlices(TestCase):

    def testBools(self):
        flag = BoolSliceFlag("switches")
        flag.set("true, f,1")
        self.assertEqual(flag.get(), [True, False, True])
        with self.assertRaises(TypeError):
            flag.with_valid_range(True)

    def testUnsigned(self):
        with self.assertRaises(InvalidValueError) as context:
            UintSliceFlag("ids").set("1,-1")
        self.assertEqual(str(context.exception), "'-1' is not a valid []uint value for --ids")

    def testFloats(self):
        flag = Float64SliceFlag("ratios")
        flag.set("1.5, 2")
        self.assertEqual(flag.get(), [1.5, 2.0])

    def testDurations(self):
        flag = DurationSliceFlag("timeouts", valid=("1s", "2m"))
        flag.set("1s,2m")
        self.assertEqual(flag.get(), [timedelta(seconds=1), timedelta(minutes=2)])
        with self.assertRaises(OutOfRangeError) as context:
            flag.set("3s")
        self.assertEqual(
            str(context.exception),
            "3s is not an acceptable value for --timeouts. The expected values are 1s,2m0s."
        )

    def testAddresses(self):
        flag = IPAddressSliceFlag("hosts")
        flag.set("127.0.0.1, ::1")
        self.assertEqual(flag.get(), [ipaddress.ip_address("127.0.0.1"), ipaddress.ip_address("::1")])
        with self.assertRaises(InvalidValueError):
            flag.set("127.0.0.1,localhost")

    def testNetworks(self):
        flag = CIDRSliceFlag("networks")
        flag.set("10.0.0.1/8, 192.0.2.1/24")
        self.assertEqual([str(value) for value in flag.get()], ["10.0.0.1/8", "192.0.2.1/24"])


class TestStringMaps(TestCase):

    def testPairsAreTrimmed(self):
        flag = StringMapFlag("labels")
        flag.set("env:prod, team : core")
        self.assertEqual(flag.get(), {"env": "prod", "team": "core"})

    def testEmptyInput(self):
        flag = StringMapFlag("labels")
        flag.set("")
        self.assertEqual(flag.get(), {})
        self.assertTrue(flag.is_set)

    def testEmptyValue(self):
        flag = StringMapFlag("labels")
        flag.set("env:")
        self.assertEqual(flag.get(), {"env": ""})

    def testDisableTrimming(self):
        flag = StringMapFlag("labels").disable_key_trimming()
        flag.set(" a : b ")
        self.assertEqual(flag.get(), {" a ": "b"})
        flag = StringMapFlag("labels", trim_values=False)
        flag.set(" a : b ")
        self.assertEqual(flag.get(), {"a": " b "})
        flag.disable_key_trimming()
        self.assertFalse(flag.trim_keys or flag.trim_values)

    def testLastDuplicateWins(self):
        flag = StringMapFlag("labels")
        flag.set("a:1,a:2")
        self.assertEqual(flag.get(), {"a": "2"})

    def testMalformedTokens(self):
        flag = StringMapFlag("labels")
        flag.set("a:b")
        for text in ("a:b,", "a:b:c", "a", "a:b,,c:d"):
            with self.subTest(text=text), self.assertRaises(InvalidValueError) as context:
                flag.set(text)
            self.assertEqual(str(context.exception), f"'{text}' is not a valid [string]string value for --labels")
        self.assertEqual(flag.get(), {"a": "b"})

    def testCustomDelimiter(self):
        flag = StringMapFlag("labels", delimiter=";")
        flag.set("a:1;b:2")
        self.assertEqual(flag.get(), {"a": "1", "b": "2"})

    def testCallbackReceivesPairs(self):
        received = []
        flag = StringMapFlag("labels", validator=lambda key, value: received.append((key, value)))
        flag.set("a:1,b:2")
        self.assertEqual(received, [("a", "1"), ("b", "2")])

    def testCallbackErrorsPropagate(self):
        flag = StringMapFlag("labels", validator=reject)
        with self.assertRaises(Rejected) as context:
            flag.set("a:1")
        self.assertEqual(context.exception.args, (("a", "1"),))
        self.assertEqual(flag.get(), {})
        self.assertFalse(flag.is_set)

    def testNoAcceptableValues(self):
        with self.assertRaises(TypeError):
            StringMapFlag("labels").with_valid_range("a:b")

    def testDefaults(self):
        flag = StringMapFlag("labels", default={"env": "dev"})
        self.assertEqual(flag.default, {"env": "dev"})
        flag.set("env:prod")
        flag.reset_to_default()
        self.assertEqual(flag.get(), {"env": "dev"})
        with self.assertRaises(TypeError):
            StringMapFlag("labels", default="env:dev")


class TestStringSliceMaps(TestCase):

    def testJsonObject(self):
        flag = StringSliceMapFlag("routes")
        flag.set('{"eu": "fra, ams", "us": "iad"}')
        self.assertEqual(flag.get(), {"eu": ["fra", " ams"], "us": ["iad"]})

    def testTrimming(self):
        flag = StringSliceMapFlag("routes").with_trimming()
        flag.set('{"eu": " fra , ams "}')
        self.assertEqual(flag.get(), {"eu": ["fra", "ams"]})

    def testCustomDelimiter(self):
        flag = StringSliceMapFlag("routes", delimiter="|")
        flag.set('{"eu": "fra|ams"}')
        self.assertEqual(flag.get(), {"eu": ["fra", "ams"]})

    def testEmptyAndNull(self):
        flag = StringSliceMapFlag("routes")
        for text in ("", "  ", "null", "{}"):
            with self.subTest(text=text):
                flag.set(text)
                self.assertEqual(flag.get(), {})

    def testRejectsOtherShapes(self):
        flag = StringSliceMapFlag("routes")
        for text in ('{"eu": 1}', '["eu"]', "{", '{"eu": ["fra"]}'):
            with self.subTest(text=text), self.assertRaises(InvalidValueError) as context:
                flag.set(text)
            self.assertEqual(str(context.exception), f"'{text}' is not a valid [string][]string value for --routes")
        self.assertFalse(flag.is_set)

    def testCallbackReceivesKeyAndItems(self):
        received = []
        flag = StringSliceMapFlag("routes", trimming=True)
        flag.with_validation_callback(lambda key, items: received.append((key, items)))
        flag.set('{"eu": "fra, ams"}')
        self.assertEqual(received, [("eu", ["fra", "ams"])])

    def testGetReturnsCopies(self):
        flag = StringSliceMapFlag("routes")
        flag.set('{"eu": "fra"}')
        flag.get()["eu"].append("ams")
        self.assertEqual(flag.get(), {"eu": ["fra"]})

    def testDefaults(self):
        flag = StringSliceMapFlag("routes", default={"eu": ("fra",)})
        self.assertEqual(flag.default, {"eu": ["fra"]})
        with self.assertRaises(TypeError):
            StringSliceMapFlag("routes", default={"eu": "fra"})


if __name__ == "__main__":
    unittest.main()
