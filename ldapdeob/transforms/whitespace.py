"""
Remove-RandomWhitespace: drop or shorten insignificant whitespace,
between tokens of the SearchFilter and around the components of
Distinguished-Name values.
"""

from ldapdeob.config import checkPercent
from ldapdeob.mutation import editToken, removeToken
from ldapdeob.token import TokenType, enrichTokens, joinContent
from ldapdeob.transforms.base import Transform
from ldapdeob.visitor import iterBranches
from ldapdeob import branch as _branch

SEARCH_FILTER = 'SearchFilter'
DISTINGUISHED_NAME = 'DistinguishedName'


class WhitespaceRemoval(Transform):
    name = 'Remove-RandomWhitespace'
    scopes = (SEARCH_FILTER, DISTINGUISHED_NAME)
    typeValues = TokenType.ALL

    def __init__(self, randomCharPercent=None, **kw):
        Transform.__init__(self, **kw)
        if randomCharPercent is None:
            randomCharPercent = self.randomNodePercent
        self.randomCharPercent = checkPercent('randomCharPercent', randomCharPercent)

    def isEligible(self, token):
        return token.typeBefore in self.types or token.typeAfter in self.types

    def shrink(self, content):
        """
        New content for a whitespace run: empty, or shortened by one to
        three characters from its start or end.
        """
        if len(content) == 1 or self.gate(self.randomCharPercent):
            return u''
        n = self.randomSource.randint(1, min(3, len(content) - 1))
        if self.randomSource.random() < 0.5:
            return content[n:]
        return content[:-n]

    def _owned(self, b):
        f = b.filter
        items = list(b.tokens)
        if f is not None:
            items.extend(f.tokenList)
        return items

    def transform(self, base):
        enrichTokens(_branch.flattenTokens(base))
        for b in list(iterBranches(base, bottomUp=True)):
            for token in self._owned(b):
                if token.type == TokenType.Value and token.tokenList:
                    if DISTINGUISHED_NAME in self.scope:
                        self._transformDistinguishedName(b, token)
                    continue
                if (SEARCH_FILTER not in self.scope
                        or not any(t is token for t in self._owned(b))
                        or token.type != TokenType.Whitespace
                        or not self.isEligible(token)
                        or not self.gate()):
                    continue
                content = self.shrink(token.content)
                if content:
                    editToken(b, token, content)
                else:
                    removeToken(b, token)
                self.logChange("trimmed whitespace", b)

    def _transformDistinguishedName(self, b, value):
        parts = value.tokenList
        changed = False
        for token in parts:
            if (token.type != TokenType.Whitespace
                    or not self.isEligible(token)
                    or not self.gate()):
                continue
            token.content = self.shrink(token.content)
            changed = True
        if changed:
            editToken(b, value, joinContent(parts))
            self.logChange("trimmed distinguished name whitespace", b)


def removeRandomWhitespace(searchFilter, randomNodePercent=None,
                           randomCharPercent=None, scope=None, types=None,
                           target='String', trackModification=False,
                           randomSource=None, config=None):
    """
    >>> removeRandomWhitespace('  (  name=   sabi)  ', randomNodePercent=100)
    '(name=sabi)'
    """
    return WhitespaceRemoval(
        randomNodePercent=randomNodePercent,
        randomCharPercent=randomCharPercent,
        scope=scope,
        types=types,
        target=target,
        trackModification=trackModification,
        randomSource=randomSource,
        config=config,
    )(searchFilter)
