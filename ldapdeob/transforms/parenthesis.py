"""
Remove-RandomParenthesis: strip grouping parentheses that carry no
operator of their own.
"""

from ldapdeob.branch import BranchType
from ldapdeob.booleanlogic import NOT
from ldapdeob.mutation import removeToken
from ldapdeob.transforms.base import Transform
from ldapdeob.visitor import iterBranches

FILTER = 'Filter'
FILTER_LIST = 'FilterList'


class ParenthesisRemoval(Transform):
    name = 'Remove-RandomParenthesis'
    scopes = (FILTER, FILTER_LIST)

    def scopeOf(self, branch):
        """
        Filter when the group wraps a single Filter, FilterList
        otherwise; None when the group cannot be removed.
        """
        if (branch.isBase
                or branch.type != BranchType.FilterList
                or not branch.hasGroup
                or branch.booleanOperatorToken is not None):
            return None
        units = branch.units
        if not units:
            return None
        if len(units) > 1:
            # Siblings only merge into a group that combines them the
            # same way and is not a negation of them all.
            container = branch.groupParent
            if container.isBase or container.booleanOperator == NOT:
                return None
            return FILTER_LIST
        if units[0].type == BranchType.Filter:
            return FILTER
        return FILTER_LIST

    def transform(self, base):
        for branch in list(iterBranches(base, bottomUp=True)):
            scope = self.scopeOf(branch)
            if scope is None or scope not in self.scope:
                continue
            if not self.gate():
                continue
            removeToken(branch, branch.groupStart)
            removeToken(branch, branch.groupEnd)
            self.logChange("removed parentheses", branch)


def removeRandomParenthesis(searchFilter, randomNodePercent=None, scope=None,
                            target='String', trackModification=False,
                            randomSource=None, config=None):
    """
    >>> removeRandomParenthesis('((name=sabi))', randomNodePercent=100)
    '(name=sabi)'
    """
    return ParenthesisRemoval(
        randomNodePercent=randomNodePercent,
        scope=scope,
        target=target,
        trackModification=trackModification,
        randomSource=randomSource,
        config=config,
    )(searchFilter)
