"""
Test cases for the ldapdeob.transforms package.
"""

import random

from twisted.trial import unittest
from zope.interface.verify import verifyObject

from ldapdeob import interfaces, transforms
from ldapdeob.match import matchEntry
from ldapdeob.token import TokenType as T
from ldapdeob.transforms import (
    removeRandomBooleanOperator,
    removeRandomBooleanOperatorInversion,
    removeRandomExtensibleMatchFilter,
    removeRandomParenthesis,
    removeRandomWhitespace,
    removeRandomWildcard,
)
from ldapdeob.transforms import wildcard


FILTERS = (
    '(&(|(name=sabi)(name=dbo))(!(objectClass=computer)))',
    '(!(|(!name=sabi)(&(objectClass=user)(!(name=dbo)))))',
    '((((|((name=sabi))((name=dbo))))))',
    '(&(!(!(name=s*b*i))) (  objectClass = user ))',
    '(|(&name=sabi)(!!objectClass=user))',
    '(userAccountControl:1.2.840.113556.1.4.803:=2)',
    '(&(name:timeSaved:=sabi)(!name:1.3.3.7:=x))',
    '(member=CN = sabi , DC=contoso,DC=local)',
    '(name=**s***)',
    '(!(!(&(name=sabi)((objectClass=user)(!(name=dbo))))))',
)

ENTRIES = (
    {
        'name': ['sabi'],
        'objectClass': ['top', 'user'],
        'member': ['CN=Sabi,DC=contoso,DC=local'],
        'userAccountControl': ['514'],
    },
    {'name': ['dbo'], 'objectClass': ['computer']},
    {'Name': ['Sxbxi'], 'objectClass': ['user']},
    {},
)


class Scenarios(unittest.TestCase):
    def test_parenthesis(self):
        self.assertEqual(
            removeRandomParenthesis('((name=sabi))', randomNodePercent=100),
            '(name=sabi)')

    def test_parenthesisNested(self):
        text = '((((|((((((((((((name=sabi))))))))))))(((name=dbo)))))))'
        for i in range(4):
            text = removeRandomParenthesis(text, randomNodePercent=100)
        self.assertEqual(text, '(|(name=sabi)(name=dbo))')

    def test_booleanOperator(self):
        self.assertEqual(
            removeRandomBooleanOperator('(|(|name=sabi)(&name=dbo))',
                                        randomNodePercent=100),
            '(|(name=sabi)(name=dbo))')

    def test_inversion(self):
        self.assertEqual(
            removeRandomBooleanOperatorInversion('(!(&(!name=sabi)(!name=dbo)))',
                                                 randomNodePercent=100),
            '((|(name=sabi)(name=dbo)))')

    def test_whitespace(self):
        self.assertEqual(
            removeRandomWhitespace('  (  name=   sabi)  ', randomNodePercent=100),
            '(name=sabi)')

    def test_wildcard(self):
        self.assertEqual(
            removeRandomWildcard('(name=***sa**bi)', randomNodePercent=100,
                                 randomCharPercent=100),
            '(name=*sa*bi)')

    def test_wildcardRandom(self):
        for seed in range(10):
            result = removeRandomWildcard('(name=***sa**bi)',
                                          randomSource=random.Random(seed),
                                          randomNodePercent=50)
            self.assertIn(result, (
                '(name=***sa**bi)', '(name=**sa**bi)', '(name=*sa**bi)',
                '(name=***sa*bi)', '(name=**sa*bi)', '(name=*sa*bi)'))

    def test_extensibleMatchFilter(self):
        self.assertEqual(
            removeRandomExtensibleMatchFilter('(name:timeSaved:=sabi)',
                                              randomNodePercent=100),
            '(name=sabi)')

    def test_extensibleMatchFilterRedacted(self):
        self.assertEqual(
            removeRandomExtensibleMatchFilter('(!name:1.3.3.7:=sabi)',
                                              randomNodePercent=100),
            '(!name:.:=sabi)')


class NoChange(unittest.TestCase):
    functions = (
        removeRandomBooleanOperator,
        removeRandomBooleanOperatorInversion,
        removeRandomExtensibleMatchFilter,
        removeRandomParenthesis,
        removeRandomWhitespace,
        removeRandomWildcard,
    )

    def test_zeroPercent(self):
        for f in self.functions:
            for text in FILTERS:
                self.assertEqual(f(text, randomNodePercent=0), text,
                                 "%s(%r)" % (f.__name__, text))

    def test_supportedRule(self):
        text = '(userAccountControl:1.2.840.113556.1.4.803:=2)'
        self.assertEqual(
            removeRandomExtensibleMatchFilter(text, randomNodePercent=100), text)

    def test_extensibleWithoutAttribute(self):
        text = '(:timeSaved:=sabi)'
        self.assertEqual(
            removeRandomExtensibleMatchFilter(text, randomNodePercent=100), text)

    def test_singleWildcards(self):
        text = '(name=*s*b*)'
        self.assertEqual(
            removeRandomWildcard(text, randomNodePercent=100, randomCharPercent=100),
            text)

    def test_groupUnderNegation(self):
        text = '(!((a=1)(b=2)))'
        self.assertEqual(
            removeRandomParenthesis(text, randomNodePercent=100, scope='FilterList'),
            text)

    def test_operatorInsideValue(self):
        text = '(name=a&b)'
        self.assertEqual(
            removeRandomBooleanOperator(text, randomNodePercent=100), text)


class Restrictions(unittest.TestCase):
    def test_wildcardTypes(self):
        self.assertEqual(
            removeRandomWildcard('(name=***sa**bi)', randomNodePercent=100,
                                 randomCharPercent=100, types=[wildcard.INTERNAL]),
            '(name=***sa*bi)')

    def test_whitespaceScope(self):
        text = '  (  name=   sabi)  '
        self.assertEqual(
            removeRandomWhitespace(text, randomNodePercent=100,
                                   scope='DistinguishedName'),
            text)

    def test_distinguishedName(self):
        self.assertEqual(
            removeRandomWhitespace('(member=CN = sabi , DC=contoso,DC=local)',
                                   randomNodePercent=100,
                                   scope='DistinguishedName'),
            '(member=CN=sabi,DC=contoso,DC=local)')

    def test_whitespaceTypes(self):
        self.assertEqual(
            removeRandomWhitespace('  (  name=   sabi)  ', randomNodePercent=100,
                                   types=[T.GroupStart]),
            '(name=   sabi)  ')

    def test_parenthesisScope(self):
        self.assertEqual(
            removeRandomParenthesis('(&((a=1))((b=2)(c=3)))', randomNodePercent=100,
                                    scope='Filter'),
            '(&(a=1)((b=2)(c=3)))')

    def test_booleanOperatorTypes(self):
        text = '(!(!name=x))'
        self.assertEqual(
            removeRandomBooleanOperator(text, randomNodePercent=100, types=['!']),
            text)
        self.assertEqual(
            removeRandomBooleanOperator(text, randomNodePercent=100, types=['!!']),
            '((name=x))')

    def test_inversionTypes(self):
        text = '(!(&(!name=sabi)(!name=dbo)))'
        self.assertEqual(
            removeRandomBooleanOperatorInversion(text, randomNodePercent=100,
                                                 types=['|']),
            text)

    def test_extensibleTypes(self):
        text = '(&(name:timeSaved:=sabi)(!name:1.3.3.7:=x))'
        self.assertEqual(
            removeRandomExtensibleMatchFilter(text, randomNodePercent=100,
                                              types=['Malformed']),
            '(&(name:timeSaved:=sabi)(!name:.:=x))')


class Parameters(unittest.TestCase):
    def test_percentRange(self):
        self.assertRaises(ValueError, removeRandomParenthesis, '(a=1)',
                          randomNodePercent=101)
        self.assertRaises(ValueError, removeRandomWildcard, '(a=1)',
                          randomNodePercent=100, randomCharPercent=-1)

    def test_unknownScope(self):
        self.assertRaises(ValueError, removeRandomParenthesis, '(a=1)',
                          randomNodePercent=100, scope='Everything')

    def test_unknownType(self):
        self.assertRaises(ValueError, removeRandomBooleanOperator, '(a=1)',
                          randomNodePercent=100, types=['&&&'])

    def test_unknownTarget(self):
        self.assertRaises(ValueError, removeRandomWhitespace, '(a=1)',
                          randomNodePercent=100, target='Xml')

    def test_target(self):
        base = removeRandomParenthesis('((a=1))', randomNodePercent=100, target='Branch')
        self.assertTrue(base.isBase)
        self.assertEqual(base.content, '(a=1)')

    def test_trackModification(self):
        tokens = removeRandomWildcard('(name=***sa**bi)', randomNodePercent=100,
                                      randomCharPercent=100, target='Token',
                                      trackModification=True)
        self.assertEqual(
            [t.content for t in tokens if t.isModified], ['*sa*bi'])

    def test_interface(self):
        for transformClass in transforms.ALL:
            t = transformClass(randomNodePercent=100)
            self.assertTrue(verifyObject(interfaces.ISearchFilterTransform, t))
            self.assertIdentical(transforms.byName[t.name], transformClass)


class SemanticEquivalence(unittest.TestCase):
    """
    Every transform leaves what a filter matches unchanged.
    """

    def assertEquivalent(self, before, after):
        for entry in ENTRIES:
            self.assertEqual(matchEntry(after, entry), matchEntry(before, entry),
                             "%r -> %r for %r" % (before, after, entry))

    def test_everyNode(self):
        for transformClass in transforms.ALL:
            t = transformClass(randomNodePercent=100)
            for text in FILTERS:
                self.assertEquivalent(text, t(text))

    def test_randomNodes(self):
        for seed in range(5):
            for transformClass in transforms.ALL:
                t = transformClass(randomNodePercent=50,
                                   randomSource=random.Random(seed))
                for text in FILTERS:
                    self.assertEquivalent(text, t(text))
