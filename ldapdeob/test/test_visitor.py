"""
Test cases for the ldapdeob.visitor module.
"""

from twisted.trial import unittest

from ldapdeob import branch, visitor
from ldapdeob.branch import BranchType


def attributeOf(b):
    if b.type == BranchType.Filter:
        return b.filter.attribute.content
    return None


class IterBranches(unittest.TestCase):
    text = '(&(a=1)(|(b=2)(c=3)))'

    def test_preOrder(self):
        base = branch.parseFilter(self.text)
        self.assertEqual(
            [b.content for b in visitor.iterBranches(base)],
            [self.text, self.text, '(a=1)', '(|(b=2)(c=3))', '(b=2)', '(c=3)'])

    def test_bottomUp(self):
        base = branch.parseFilter(self.text)
        self.assertEqual(
            [b.content for b in visitor.iterBranches(base, bottomUp=True)],
            ['(a=1)', '(b=2)', '(c=3)', '(|(b=2)(c=3))', self.text, self.text])

    def test_deepNesting(self):
        depth = 5000
        text = '(' * depth + 'a=1' + ')' * depth
        base = branch.parseFilter(text)
        self.assertEqual(len(list(visitor.iterBranches(base, bottomUp=True))), depth + 1)
        self.assertEqual(base.content, text)
        self.flushWarnings()


class VisitBranch(unittest.TestCase):
    def setUp(self):
        self.base = branch.parseFilter('(&(a=1)(|(b=2)(c=3)))')

    def test_returnAll(self):
        self.assertEqual(
            visitor.visitBranch(self.base, attributeOf, visitor.RETURN_ALL),
            ['a', 'b', 'c'])

    def test_returnFirst(self):
        self.assertEqual(
            visitor.visitBranch(self.base, attributeOf, visitor.RETURN_FIRST),
            'a')

    def test_returnFirstNothing(self):
        self.assertEqual(
            visitor.visitBranch(self.base, lambda b: [], visitor.RETURN_FIRST),
            None)

    def test_modify(self):
        replacement = branch.parseFilter('(z=9)').branches[0]

        def replace(b):
            if attributeOf(b) == 'b':
                return replacement
            return None

        top = visitor.visitBranch(self.base, replace, visitor.MODIFY)
        self.assertIs(top, self.base)
        self.assertEqual(self.base.content, '(&(a=1)(|(z=9)(c=3)))')
        self.assertIs(replacement.parent, self.base.branches[0].branches[1])

    def test_unknownMode(self):
        self.assertRaises(ValueError, visitor.visitBranch, self.base, attributeOf, 'Sometimes')

    def test_findOwner(self):
        c = self.base.branches[0].branches[1].branches[1]
        self.assertIs(visitor.findOwner(self.base, c.filter.value), c)
        top = self.base.branches[0]
        self.assertIs(visitor.findOwner(self.base, top.booleanOperatorToken), top)
