"""
Test cases for the ldapdeob.branch module.
"""

from twisted.trial import unittest

from ldapdeob import branch, lexer
from ldapdeob.branch import BranchType
from ldapdeob.config import DeobfuscationConfig
from ldapdeob.errors import ParseError, ProtocolLimitWarning
from ldapdeob.token import TokenType as T


def chain(b):
    return [t.content for t in b.context.booleanOperator.filterListBooleanOperatorTokenList]


class BuildBranch(unittest.TestCase):
    def test_filter(self):
        base = branch.parseFilter('(name=sabi)')
        self.assertTrue(base.isBase)
        self.assertEqual(len(base.branches), 1)
        leaf = base.branches[0]
        self.assertEqual(leaf.type, BranchType.Filter)
        self.assertIs(leaf.parent, base)
        self.assertEqual(leaf.filter.content, 'name=sabi')
        self.assertEqual(leaf.filter.attribute.content, 'name')
        self.assertEqual(leaf.filter.comparisonOperator.content, '=')
        self.assertEqual(leaf.filter.value.content, 'sabi')
        self.assertEqual(leaf.filter.depth, 1)
        self.assertEqual(base.content, '(name=sabi)')

    def test_tokenDict(self):
        leaf = branch.parseFilter('( !name =x )').branches[0]
        d = leaf.filter.tokenDict
        self.assertEqual([t.content for t in d[T.BooleanOperator]], ['!'])
        self.assertEqual(len(d[T.Whitespace]), 3)
        self.assertEqual(leaf.booleanOperator, '!')

    def test_baseWhitespace(self):
        base = branch.parseFilter(' (a=1)  ')
        self.assertEqual([type(i).__name__ for i in base.items],
                         ['Token', 'Branch', 'Token'])
        self.assertEqual(base.content, ' (a=1)  ')

    def test_filterList(self):
        base = branch.parseFilter('(&(a=1)(|(b=2)(c=3)))')
        top = base.branches[0]
        self.assertEqual(top.type, BranchType.FilterList)
        self.assertEqual(top.booleanOperator, '&')
        self.assertEqual(len(top.branches), 2)
        a, inner = top.branches
        self.assertEqual(a.type, BranchType.Filter)
        self.assertEqual(inner.booleanOperator, '|')
        self.assertEqual(chain(a), ['&'])
        self.assertEqual(chain(inner), ['&', '|'])
        self.assertEqual(chain(inner.branches[1]), ['&', '|'])
        self.assertEqual(inner.depth, 1)
        self.assertEqual(inner.branches[0].depth, 2)

    def test_inheritedOperatorNotCopied(self):
        base = branch.parseFilter('(|((a=1)(b=2)))')
        group = base.branches[0].branches[0]
        self.assertEqual(group.booleanOperator, '')
        self.assertEqual(chain(group), ['|'])
        self.assertEqual(branch.combineOperator(group), '|')

    def test_filterScopeContext(self):
        base = branch.parseFilter('(!(!&name=x))')
        leaf = base.branches[0].branches[0]
        ctx = leaf.context.booleanOperator
        self.assertEqual([t.content for t in ctx.filterListBooleanOperatorTokenList], ['!'])
        self.assertEqual([t.content for t in ctx.filterBooleanOperatorTokenList], ['!', '&'])
        self.assertEqual(ctx.chain, '!!&')

    def test_units(self):
        base = branch.parseFilter('(&(a=1)(b=2))')
        top = base.branches[0]
        self.assertEqual([u.content for u in top.units], ['(a=1)', '(b=2)'])
        self.assertIs(top.branches[0].groupParent, top)
        self.assertIs(top.groupParent, base)


class Counters(unittest.TestCase):
    def test_depth(self):
        base = branch.parseFilter('((((name=sabi))))')
        self.assertEqual(base.depthMax, 4)

    def test_booleanOperators(self):
        base = branch.parseFilter('(&(!(|(a=1)(!b=2))))')
        self.assertEqual(base.booleanOperatorCountMax, 4)
        self.assertEqual(base.booleanOperatorLogicalCountMax, 4)

    def test_wildcards(self):
        base = branch.parseFilter('(|(a=*x*)(b=1))')
        self.assertEqual(base.booleanOperatorCountMax, 1)
        self.assertEqual(base.booleanOperatorLogicalCountMax, 3)

    def test_protocolLimit(self):
        cfg = DeobfuscationConfig(limits={'depth-max': 2})
        base = branch.buildBranch(lexer.tokenize('(((a=1)))'))
        self.assertEqual(branch.checkProtocolLimits(base, cfg), ['depth-max'])
        warnings = self.flushWarnings()
        self.assertEqual(len(warnings), 1)
        self.assertIdentical(warnings[0]['category'], ProtocolLimitWarning)

    def test_withinLimits(self):
        base = branch.parseFilter('(a=1)')
        self.assertEqual(branch.checkProtocolLimits(base), [])
        self.assertEqual(self.flushWarnings(), [])


class BuildErrors(unittest.TestCase):
    def test_twoFilterListOperators(self):
        e = self.assertRaises(ParseError, branch.parseFilter, '(&|(a=1)(b=2))')
        self.assertEqual(e.offset, 2)

    def test_unmatchedGroupEnd(self):
        tokens = lexer.tokenize('(a=1)')
        self.assertRaises(ParseError, branch.buildBranch, tokens + tokens[-1:])

    def test_unmatchedGroupStart(self):
        tokens = lexer.tokenize('(a=1)')
        self.assertRaises(ParseError, branch.buildBranch, tokens[:-1])

    def test_missingValue(self):
        tokens = lexer.tokenize('(a=1)')
        del tokens[3]
        self.assertRaises(ParseError, branch.buildBranch, tokens)

    def test_missingAttribute(self):
        tokens = lexer.tokenize('(a=1)')
        del tokens[1]
        self.assertRaises(ParseError, branch.buildBranch, tokens)

    def test_empty(self):
        self.assertRaises(ParseError, branch.buildBranch, [])
