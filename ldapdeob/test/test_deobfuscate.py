"""
Test cases for ldapdeob.deobfuscate and the ldapdeob-deobfuscate script.
"""

import io
import random
import sys

from twisted.trial import unittest

from ldapdeob import config, transforms
from ldapdeob._scripts import deobfuscate as script
from ldapdeob.deobfuscate import _resolve, deobfuscate
from ldapdeob.match import matchEntry
from ldapdeob.test.test_transforms import ENTRIES, FILTERS


class Pipeline(unittest.TestCase):
    def test_everything(self):
        self.assertEqual(
            deobfuscate('(!(&(!name=sabi)(!  name=dbo)))', iterations=2),
            '(|(name=sabi)(name=dbo))')

    def test_selected(self):
        self.assertEqual(
            deobfuscate(' ((name=sabi)) ', transforms=['Remove-RandomParenthesis']),
            ' (name=sabi) ')

    def test_stopsWhenUnchanged(self):
        self.assertEqual(deobfuscate('(name=sabi)', iterations=10), '(name=sabi)')

    def test_target(self):
        base = deobfuscate('((name=sabi))', target='Branch')
        self.assertTrue(base.isBase)
        self.assertEqual(base.content, '(name=sabi)')

    def test_unknownTransform(self):
        self.assertRaises(ValueError, deobfuscate, '(a=1)', transforms=['Remove-Everything'])

    def test_iterations(self):
        self.assertRaises(ValueError, deobfuscate, '(a=1)', iterations=0)

    def test_order(self):
        self.assertEqual(
            _resolve(['Remove-RandomParenthesis', transforms.WildcardRemoval]),
            [transforms.WildcardRemoval, transforms.ParenthesisRemoval])

    def test_semanticEquivalence(self):
        for seed in range(3):
            for text in FILTERS:
                result = deobfuscate(text, iterations=3, randomNodePercent=50,
                                     randomCharPercent=50,
                                     randomSource=random.Random(seed))
                for entry in ENTRIES:
                    self.assertEqual(matchEntry(result, entry), matchEntry(text, entry),
                                     "%r -> %r for %r" % (text, result, entry))


class Script(unittest.TestCase):
    def setUp(self):
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        self.patch(sys, 'stdout', self.stdout)
        self.patch(sys, 'stderr', self.stderr)
        self.cfg = config.DeobfuscationConfig(randomNodePercent=100, randomCharPercent=100)

    def test_main(self):
        self.assertEqual(script.main(self.cfg, '  ((name=sabi))', None, 1), 0)
        self.assertEqual(self.stdout.getvalue(), '(name=sabi)\n')

    def test_mainParseError(self):
        self.assertEqual(script.main(self.cfg, '(name=sabi', None, 1), 1)
        self.assertEqual(self.stdout.getvalue(), '')
        self.assertIn("Invalid LDAP SearchFilter", self.stderr.getvalue())

    def test_options(self):
        opts = script.MyOptions()
        opts.parseOptions(['--transform', 'Remove-RandomWhitespace', '( a=1)'])
        self.assertEqual(opts['filter'], '( a=1)')
        self.assertEqual(opts['transform'], ['Remove-RandomWhitespace'])
        self.assertEqual(opts['iterations'], 1)
