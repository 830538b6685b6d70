"""
Remove-RandomExtensibleMatchFilter: drop matching rules the server
ignores and redact malformed ones.

A rule with no period, e.g. ":timeSaved:", does not affect the result
and is removed. A rule with a period that is not a supported OID makes
the comparison never match; it is replaced by ":.:", which keeps that
behaviour without the noise.
"""

from ldapdeob.branch import BranchType
from ldapdeob.mutation import editToken, removeToken
from ldapdeob.transforms.base import Transform
from ldapdeob.valueparser import isSupportedMatchingRule, parseExtensibleMatchFilter
from ldapdeob.visitor import iterBranches

UNSUPPORTED = 'Unsupported'
MALFORMED = 'Malformed'

REDACTED = u':.:'
DN_ONLY = u':dn:'


class ExtensibleMatchFilterRemoval(Transform):
    name = 'Remove-RandomExtensibleMatchFilter'
    typeValues = (UNSUPPORTED, MALFORMED)

    def classify(self, token):
        """UNSUPPORTED, MALFORMED or None for a rule that must stay."""
        hasDN, rule = parseExtensibleMatchFilter(token.content)
        if isSupportedMatchingRule(rule):
            return None
        if u'.' in rule:
            return MALFORMED
        return UNSUPPORTED

    def transform(self, base):
        for b in list(iterBranches(base, bottomUp=True)):
            if b.type != BranchType.Filter:
                continue
            f = b.filter
            token = f.extensibleMatchFilter
            if token is None:
                continue
            kind = self.classify(token)
            if kind is None or kind not in self.types:
                continue

            if kind == MALFORMED:
                if token.content == REDACTED or not self.gate():
                    continue
                editToken(b, token, REDACTED)
                self.logChange("redacted matching rule", b)
                continue

            if f.attribute is None or not self.gate():
                continue
            hasDN, rule = parseExtensibleMatchFilter(token.content)
            if hasDN:
                editToken(b, token, DN_ONLY)
            else:
                removeToken(b, token)
            self.logChange("removed matching rule %r" % (rule,), b)


def removeRandomExtensibleMatchFilter(searchFilter, randomNodePercent=None,
                                      types=None, target='String',
                                      trackModification=False,
                                      randomSource=None, config=None):
    """
    >>> removeRandomExtensibleMatchFilter('(!name:1.3.3.7:=sabi)',
    ...                                   randomNodePercent=100)
    '(!name:.:=sabi)'
    """
    return ExtensibleMatchFilterRemoval(
        randomNodePercent=randomNodePercent,
        types=types,
        target=target,
        trackModification=trackModification,
        randomSource=randomSource,
        config=config,
    )(searchFilter)
