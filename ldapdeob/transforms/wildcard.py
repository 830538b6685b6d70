"""
Remove-RandomWildcard: collapse runs of consecutive "*" in values.
"""

from ldapdeob.branch import BranchType
from ldapdeob.config import checkPercent
from ldapdeob.mutation import editToken
from ldapdeob.transforms.base import Transform
from ldapdeob.valueparser import parseValue, wildcardRuns
from ldapdeob.visitor import iterBranches

LEADING = 'Leading'
INTERNAL = 'Internal'
TRAILING = 'Trailing'


def runTypes(start, end, length):
    """Positions a wildcard run [start, end) covers in a value of length characters."""
    r = set()
    if start == 0:
        r.add(LEADING)
    if end == length:
        r.add(TRAILING)
    if not r:
        r.add(INTERNAL)
    return r


class WildcardRemoval(Transform):
    name = 'Remove-RandomWildcard'
    typeValues = (LEADING, INTERNAL, TRAILING)

    def __init__(self, randomCharPercent=50, **kw):
        Transform.__init__(self, **kw)
        self.randomCharPercent = checkPercent('randomCharPercent', randomCharPercent)

    def collapse(self, content):
        """content with some surplus wildcards of eligible runs removed."""
        chars = parseValue(content)
        drop = set()
        for start, end in wildcardRuns(content):
            if end - start < 2 or not runTypes(start, end, len(chars)) & set(self.types):
                continue
            # the first wildcard of a run always stays
            for i in range(start + 1, end):
                if self.gate(self.randomCharPercent):
                    drop.add(i)
        return u''.join(c.content for i, c in enumerate(chars) if i not in drop)

    def transform(self, base):
        for b in list(iterBranches(base, bottomUp=True)):
            if b.type != BranchType.Filter:
                continue
            value = b.filter.value
            if not any(end - start > 1 for start, end in wildcardRuns(value.content)):
                continue
            if not self.gate():
                continue
            content = self.collapse(value.content)
            if content != value.content:
                editToken(b, value, content)
                self.logChange("collapsed wildcards", b)


def removeRandomWildcard(searchFilter, randomNodePercent=None,
                         randomCharPercent=50, types=None, target='String',
                         trackModification=False, randomSource=None,
                         config=None):
    """
    >>> removeRandomWildcard('(name=***sa**bi)', randomNodePercent=100,
    ...                      randomCharPercent=100)
    '(name=*sa*bi)'
    """
    return WildcardRemoval(
        randomNodePercent=randomNodePercent,
        randomCharPercent=randomCharPercent,
        types=types,
        target=target,
        trackModification=trackModification,
        randomSource=randomSource,
        config=config,
    )(searchFilter)
