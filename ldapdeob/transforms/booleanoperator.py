"""
Remove-RandomBooleanOperator: drop operators that do not change what a
filter matches, e.g. the "&" in "(|(&name=dbo)(cn=x))" or a double
negation spread over two levels.
"""

import itertools

from ldapdeob.booleanlogic import OPERATORS, removableOperators
from ldapdeob.mutation import removeToken
from ldapdeob.transforms.base import Transform
from ldapdeob.visitor import iterBranches

OPERATOR_TYPES = OPERATORS + tuple(
    a + b for a, b in itertools.product(OPERATORS, repeat=2))


class BooleanOperatorRemoval(Transform):
    name = 'Remove-RandomBooleanOperator'
    scopes = ('Filter', 'FilterList')
    typeValues = OPERATOR_TYPES

    def transform(self, base):
        for branch in list(iterBranches(base, bottomUp=True)):
            if branch.type not in self.scope:
                continue
            for token in branch.booleanOperatorTokenList:
                if not any(t is token for t in branch.booleanOperatorTokenList):
                    continue
                if not self.gate():
                    continue
                candidates = [
                    picked for picked in removableOperators(branch, token, self.types)
                    if all(owner.type in self.scope for owner, _ in picked)
                ]
                if not candidates:
                    continue
                picked = self.randomSource.choice(candidates)
                for owner, t in picked:
                    removeToken(owner, t)
                self.logChange("removed %r" % (u''.join(t.content for _, t in picked),),
                               branch)


def removeRandomBooleanOperator(searchFilter, randomNodePercent=None, scope=None,
                                types=None, target='String',
                                trackModification=False, randomSource=None,
                                config=None):
    """
    >>> removeRandomBooleanOperator('(|(|name=sabi)(&name=dbo))', randomNodePercent=100)
    '(|(name=sabi)(name=dbo))'
    """
    return BooleanOperatorRemoval(
        randomNodePercent=randomNodePercent,
        scope=scope,
        types=types,
        target=target,
        trackModification=trackModification,
        randomSource=randomSource,
        config=config,
    )(searchFilter)
