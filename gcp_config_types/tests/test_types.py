# -*- coding: utf-8 -*-
"""
Tests for the scalar configuration types

"""
import copy
import grp
import json
import os
import pickle
import pwd
import re
import unittest
from datetime import timedelta

from gcp_config_types import *
from gcp_config_types.duration import HOUR, MILLISECOND, MINUTE, SECOND

UUID_PATTERN = re.compile(r'^[0-9A-F]{8}-[0-9A-F]{4}-([0-9A-F])[0-9A-F]{3}-([0-9A-F])[0-9A-F]{3}-[0-9A-F]{12}$')


class TestDuration(unittest.TestCase):
    def test_extended_suffixes(self):
        cases = {
            "": 0,
            "3m": 3 * MINUTE,
            "4mo": 4 * 30 * 24 * HOUR,
            "5w": 5 * 7 * 24 * HOUR,
            "6d": 6 * 24 * HOUR,
            "7y": 7 * 365 * 24 * HOUR,
            "134y": 134 * 365 * 24 * HOUR,
            "-2d": -2 * 24 * HOUR,
        }
        for text, expected in cases.items():
            self.assertEqual(parse_duration(text), expected, f"{text} parsed incorrectly")

    def test_standard_units(self):
        cases = {
            "0": 0,
            "300ms": 300 * MILLISECOND,
            "1.5h": 90 * MINUTE,
            "1h30m": 90 * MINUTE,
            "-1m30s": -90 * SECOND,
            "+5s": 5 * SECOND,
            "2us": 2000,
            "2µs": 2000,
            "10ns": 10,
            ".5s": 500 * MILLISECOND,
        }
        for text, expected in cases.items():
            self.assertEqual(parse_duration(text), expected, f"{text} parsed incorrectly")

    def test_invalid(self):
        for text in ["abc", "1", "1x", "1.5d", "d", "1h30d", "s", "-", "1..5s"]:
            with self.assertRaises(ValueError, msg=text):
                parse_duration(text)

    def test_overflow(self):
        with self.assertRaises(ValueError):
            parse_duration("300y")
        with self.assertRaises(ValueError):
            parse_duration("9999999999999h")
        self.assertEqual(parse_duration("292y"), 292 * 365 * 24 * HOUR)

    def test_str(self):
        cases = {
            0: "0s",
            1: "1ns",
            1500: "1.5µs",
            300 * MILLISECOND: "300ms",
            1500 * MILLISECOND: "1.5s",
            90 * SECOND: "1m30s",
            60 * SECOND: "1m0s",
            3 * 24 * HOUR: "72h0m0s",
            -90 * MINUTE: "-1h30m0s",
        }
        for value, text in cases.items():
            self.assertEqual(str(Duration(value)), text)

    def test_round_trip_text(self):
        for text in ["4mo", "1h30m", "300ms", "1.5s"]:
            dur = parse_duration(text)
            self.assertEqual(parse_duration(str(dur)), dur)

    def test_config(self):
        self.assertEqual(Duration.from_config(5), Duration(5))
        self.assertEqual(Duration.from_config("2d"), 48 * HOUR)
        self.assertEqual(Duration.from_config(timedelta(minutes=2)), 2 * MINUTE)
        self.assertEqual(Duration(90 * SECOND).to_timedelta(), timedelta(seconds=90))
        self.assertEqual(Duration(90 * SECOND).total_seconds(), 90.0)
        self.assertEqual(json.loads(Duration(2 * HOUR).to_json()), "2h0m0s")
        with self.assertRaises(ValueError):
            Duration.from_config(True)
        with self.assertRaises(ValueError):
            Duration.from_config([1])


class TestSize(unittest.TestCase):
    def test_parse(self):
        cases = {
            "": 0,
            "512": 512,
            "10b": 10,
            "10 bytes": 10,
            "1k": 1000,
            "1.5KB": 1500,
            "2kib": 2048,
            "1M": 1000 ** 2,
            "1 MiB": 1024 ** 2,
            "3g": 3 * 1000 ** 3,
            "1gib": 1024 ** 3,
            "2tb": 2 * 1000 ** 4,
            "1TiB": 1024 ** 4,
            "1p": 1000 ** 5,
            "1pib": 1024 ** 5,
            ".5kb": 500,
            "5.kb": 5000,
        }
        for text, expected in cases.items():
            self.assertEqual(parse_size(text), expected, f"{text} parsed incorrectly")

    def test_invalid(self):
        for text in ["abc", "1.5", "12 zb", "kb", "1e3"]:
            with self.assertRaises(ValueError, msg=text):
                parse_size(text)

    def test_overflow(self):
        with self.assertRaises(ValueError):
            parse_size("1" + "0" * 308 + "pb")

    def test_str(self):
        cases = {
            0: "0 bytes",
            999: "999 bytes",
            1000: "1KB",
            1500: "1.5KB",
            2 * 1000 ** 2: "2MB",
            3 * 1000 ** 3: "3GB",
            4 * 1000 ** 4: "4TB",
            5 * 1000 ** 5: "5PB",
            1024 ** 2: "1.048576MB",
        }
        for value, text in cases.items():
            self.assertEqual(str(Size(value)), text)

    def test_config(self):
        self.assertEqual(Size.from_config(2048), 2048)
        self.assertEqual(Size.from_config(1.5), 1.5)
        self.assertEqual(Size.from_config("4kib").bytes, 4096)
        self.assertEqual(json.loads(Size(1500).to_json()), "1.5KB")
        with self.assertRaises(ValueError):
            Size.from_config(None)


class TestFileMode(unittest.TestCase):
    def test_str(self):
        self.assertEqual(str(FileMode(0o755)), "0755")
        self.assertEqual(str(FileMode(0o640)), "0640")
        self.assertEqual(str(FileMode(0)), "0")
        self.assertEqual(json.loads(FileMode(0o600).to_json()), "0600")

    def test_parse(self):
        self.assertEqual(parse_file_mode("0755"), 0o755)
        self.assertEqual(parse_file_mode("0o644"), 0o644)
        self.assertEqual(parse_file_mode("493"), 0o755)
        self.assertEqual(parse_file_mode(str(FileMode(0o2775))), 0o2775)
        for text in ["", "rwx", "0789", "-1", "999999"]:
            with self.assertRaises(ValueError, msg=text):
                parse_file_mode(text)

    def test_config(self):
        self.assertEqual(FileMode.from_config(420), 0o644)
        self.assertEqual(FileMode.from_config("0700"), 0o700)
        with self.assertRaises(ValueError):
            FileMode.from_config(-5)


class TestAccountIDs(unittest.TestCase):
    def test_current(self):
        self.assertEqual(UserID.parse(""), os.getuid())
        self.assertEqual(UserID.parse("-1"), os.getuid())
        self.assertEqual(UserID.from_config(-1), os.getuid())
        self.assertEqual(GroupID.parse(""), os.getgid())
        self.assertEqual(GroupID.from_config(-1), os.getgid())

    def test_numbers(self):
        self.assertEqual(UserID.parse("0"), 0)
        self.assertEqual(GroupID.parse("65535"), 65535)
        for text in ["-2", "65536"]:
            with self.assertRaises(ValueError):
                UserID.parse(text)
            with self.assertRaises(ValueError):
                GroupID.parse(text)
        with self.assertRaises(ValueError):
            UserID.from_config(70000)

    def test_names(self):
        root_user = pwd.getpwuid(0).pw_name
        root_group = grp.getgrgid(0).gr_name
        self.assertEqual(UserID.parse(root_user), 0)
        self.assertEqual(GroupID.parse(root_group), 0)
        self.assertEqual(str(UserID(0)), root_user)
        self.assertEqual(str(GroupID(0)), root_group)
        self.assertEqual(json.loads(UserID(0).to_json()), root_user)

        with self.assertRaises(ValueError):
            UserID.parse("no-such-user-gcp-config-types")
        with self.assertRaises(ValueError):
            GroupID.parse("no-such-group-gcp-config-types")

    def test_unknown_id_renders_number(self):
        unused = next(i for i in range(60000, 65535) if not _uid_exists(i))
        self.assertEqual(str(UserID(unused)), str(unused))


def _uid_exists(uid):
    try:
        pwd.getpwuid(uid)
    except KeyError:
        return False
    return True


class TestSet(unittest.TestCase):
    def test_operations(self):
        required_langs = Set("go", "javascript", "C#")
        known_langs = Set("java", "C++", "go")
        known_langs.add("javascript", "python", "shell")
        known_langs.add("go")

        self.assertEqual(len(known_langs), 6)
        self.assertTrue(known_langs.contains("python"))
        self.assertFalse(required_langs.contains("python"))

        matching = required_langs.intersection(known_langs)
        self.assertIsInstance(matching, Set)
        self.assertEqual(sorted(matching.members()), ["go", "javascript"])

        union = required_langs.union(Set("rust"))
        self.assertIsInstance(union, Set)
        self.assertEqual(sorted(union.members()), ["C#", "go", "javascript", "rust"])
        self.assertEqual(sorted(required_langs.members()), ["C#", "go", "javascript"])

    def test_str(self):
        self.assertEqual(str(Set()), "[]")
        self.assertEqual(str(Set(1)), "[1]")
        self.assertEqual(Set.from_iterable([1, 2, 2]), {1, 2})

    def test_copy_and_pickle(self):
        langs = Set("go", "python")
        for clone in [copy.copy(langs), copy.deepcopy(langs), pickle.loads(pickle.dumps(langs))]:
            self.assertIsInstance(clone, Set)
            self.assertEqual(clone, langs)
        self.assertEqual(copy.deepcopy({"langs": Set(1, 2)})["langs"], Set(1, 2))
        self.assertEqual(copy.copy(Set()), Set())


class TestUUID(unittest.TestCase):
    def test_v7(self):
        ids = [new_uuid() for _ in range(100)]
        self.assertEqual(len(set(ids)), 100)
        for value in ids:
            match = UUID_PATTERN.match(value)
            self.assertIsNotNone(match, value)
            self.assertEqual(match.group(1), "7")
            self.assertIn(match.group(2), "89AB")

    def test_v8(self):
        for _ in range(100):
            match = UUID_PATTERN.match(new_uuid_v8())
            self.assertIsNotNone(match)
            self.assertEqual(match.group(1), "8")
            self.assertIn(match.group(2), "89AB")
