"""
Remove-RandomBooleanOperatorInversion: push a group negation down into
its content using De Morgan's laws.

    (!(&(!a=1)(!b=2)))  ->  ((|(a=1)(b=2)))
"""

from ldapdeob.booleanlogic import NOT, invertOperator
from ldapdeob.branch import BranchType, combineOperator
from ldapdeob.mutation import addToken, editToken, newToken, removeToken
from ldapdeob.token import TokenType
from ldapdeob.transforms.base import Transform
from ldapdeob.visitor import iterBranches


def _leadingOperator(branch):
    ops = branch.booleanOperatorTokenList
    return ops[0].content if ops else u''


def invertBranch(branch, inherited, randomSource=None):
    """
    Negate what branch matches by editing the operators below it.

    inherited is the operator groups without their own operator use to
    combine their content at this point. Negations met on the way are
    removed and end the inversion of that part of the tree.
    """
    work = [(branch, False)]
    while work:
        b, flipped = work.pop()

        if b.type == BranchType.Filter:
            ops = b.booleanOperatorTokenList
            if ops and ops[0].content == NOT:
                removeToken(b, ops[0])
            else:
                addToken(b, newToken(TokenType.BooleanOperator, NOT),
                         ['before_booleanoperator'], randomSource)
            continue

        op = b.booleanOperatorToken
        if op is not None and op.content == NOT:
            removeToken(b, op)
            continue

        units = b.units
        if op is not None:
            editToken(b, op, invertOperator(op.content))
            work.extend((u, True) for u in reversed(units))
            continue

        if len(units) > 1:
            if not flipped:
                addToken(b, newToken(TokenType.BooleanOperator, invertOperator(inherited)),
                         ['after_groupstart'], randomSource)
            work.extend((u, True) for u in reversed(units))
        else:
            work.extend((u, flipped) for u in units)


class BooleanOperatorInversionRemoval(Transform):
    name = 'Remove-RandomBooleanOperatorInversion'
    scopes = ('Filter', 'FilterList')
    typeValues = (u'&', u'|', u'!', u'')

    def transform(self, base):
        for branch in list(iterBranches(base, bottomUp=True)):
            if branch.type != BranchType.FilterList or branch.booleanOperator != NOT:
                continue
            units = branch.units
            if len(units) != 1:
                continue
            unit = units[0]
            if unit.type not in self.scope or _leadingOperator(unit) not in self.types:
                continue
            if not self.gate():
                continue
            inherited = combineOperator(branch)
            removeToken(branch, branch.booleanOperatorToken)
            invertBranch(unit, inherited, self.randomSource)
            self.logChange("pushed negation down", branch)


def removeRandomBooleanOperatorInversion(searchFilter, randomNodePercent=None,
                                         scope=None, types=None, target='String',
                                         trackModification=False,
                                         randomSource=None, config=None):
    """
    >>> removeRandomBooleanOperatorInversion('(!(&(!name=sabi)(!name=dbo)))',
    ...                                      randomNodePercent=100)
    '((|(name=sabi)(name=dbo)))'
    """
    return BooleanOperatorInversionRemoval(
        randomNodePercent=randomNodePercent,
        scope=scope,
        types=types,
        target=target,
        trackModification=trackModification,
        randomSource=randomSource,
        config=config,
    )(searchFilter)
