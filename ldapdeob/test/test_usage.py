"""
Test cases for ldapdeob.usage
"""

import re

from twisted.python.usage import UsageError
from twisted.trial.unittest import TestCase

from ldapdeob.usage import (
    Options,
    Options_iterations,
    Options_random,
    Options_transform,
)


class TransformOptionsImplementation(Options, Options_transform):
    """
    Minimal implementation for a command line using `Options_transform`.
    """


class TestOptions_transform(TestCase):
    def test_parseOptions_default(self):
        """
        Without --transform every transform is applied.
        """
        sut = TransformOptionsImplementation()
        sut.parseOptions(options=[])
        self.assertIdentical(None, sut.opts["transform"])

    def test_parseOptions_repeated(self):
        """
        --transform can be given several times.
        """
        sut = TransformOptionsImplementation()
        sut.parseOptions(options=[
            "--transform", "Remove-RandomParenthesis",
            "--transform", "Remove-RandomWildcard",
        ])
        self.assertEqual(
            ["Remove-RandomParenthesis", "Remove-RandomWildcard"],
            sut.opts["transform"])

    def test_parseOptions_unknown(self):
        self.assertRaisesRegex(
            UsageError,
            re.escape("unknown transform Add-RandomNoise"),
            TransformOptionsImplementation().parseOptions,
            options=["--transform", "Add-RandomNoise"],
        )


class RandomOptionsImplementation(Options, Options_random):
    """
    Minimal implementation for a command line using `Options_random`.
    """


class TestOptions_random(TestCase):
    def test_parseOptions_default(self):
        sut = RandomOptionsImplementation()
        sut.parseOptions(options=[])
        self.assertIdentical(None, sut.opts["random-node-percent"])
        self.assertIdentical(None, sut.opts["random-char-percent"])
        self.assertIdentical(None, sut.opts["seed"])

    def test_parseOptions_percent(self):
        sut = RandomOptionsImplementation()
        sut.parseOptions(options=["--random-node-percent", "25", "--seed", "7"])
        self.assertEqual(25, sut.opts["random-node-percent"])
        self.assertEqual("7", sut.opts["seed"])

    def test_parseOptions_not_numeric(self):
        self.assertRaisesRegex(
            UsageError,
            re.escape("random-char-percent value must be numeric"),
            RandomOptionsImplementation().parseOptions,
            options=["--random-char-percent", "half"],
        )

    def test_parseOptions_out_of_range(self):
        self.assertRaisesRegex(
            UsageError,
            re.escape("random-node-percent must be between 0 and 100"),
            RandomOptionsImplementation().parseOptions,
            options=["--random-node-percent", "150"],
        )


class IterationsOptionsImplementation(Options, Options_iterations):
    """
    Minimal implementation for a command line using `Options_iterations`.
    """


class TestOptions_iterations(TestCase):
    def test_parseOptions_default(self):
        sut = IterationsOptionsImplementation()
        sut.parseOptions(options=[])
        self.assertEqual(1, sut.opts["iterations"])

    def test_parseOptions_zero(self):
        self.assertRaisesRegex(
            UsageError,
            re.escape("iterations must be at least 1"),
            IterationsOptionsImplementation().parseOptions,
            options=["--iterations", "0"],
        )
