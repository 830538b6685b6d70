"""
Primitives for editing a branch tree in place.

addToken, removeToken and editToken each work on exactly one branch.
They keep that branch's Filter, type and counters consistent and
refresh the cached BooleanOperator context of the branch and its
immediate nested branches. Deeper branches are left stale: reparse the
serialized filter when tree-wide accuracy is needed.
"""

import random

from twisted.python import log

from ldapdeob import valueparser
from ldapdeob.branch import Branch, BranchType, refreshContext
from ldapdeob.errors import ValidationError
from ldapdeob.token import Token, TokenType, newToken, tokenTypeByName

__all__ = ['newToken', 'addToken', 'removeToken', 'editToken']

# Where to look when the anchor token type of a location is missing.
NEXT_OF_KIN = {
    'before_booleanoperator': 'before_attribute',
    'after_booleanoperator': 'after_groupstart',
    'before_attribute': 'before_extensiblematchfilter',
    'after_attribute': 'before_extensiblematchfilter',
    'before_extensiblematchfilter': 'before_comparisonoperator',
    'after_extensiblematchfilter': 'before_comparisonoperator',
    'before_value': 'after_comparisonoperator',
    'after_value': 'before_groupend',
    'after_groupstart': 'before_branch',
    'before_groupend': 'after_branch',
}


def _innerDepth(branch):
    if branch.isBase:
        return branch.depth
    return branch.depth + 1


def _parseLocation(location):
    try:
        side, anchor = location.lower().split('_', 1)
    except ValueError:
        raise ValidationError("Invalid token location %r" % (location,))
    if side not in ('before', 'after'):
        raise ValidationError("Invalid token location %r" % (location,))
    if anchor != 'branch':
        try:
            anchor = tokenTypeByName(anchor)
        except ValueError:
            raise ValidationError("Invalid token location %r" % (location,))
    return side, anchor


def _indexOfType(items, tokenType, side):
    indexes = [i for i, item in enumerate(items)
               if isinstance(item, Token) and item.type == tokenType]
    if not indexes:
        return None
    if side == 'before':
        return indexes[0]
    return indexes[-1] + 1


def _resolve(branch, location):
    """(container, index) for one location, or None when it is absent."""
    side, anchor = _parseLocation(location)
    f = branch.filter

    if anchor == 'branch':
        indexes = [i for i, item in enumerate(branch.items)
                   if isinstance(item, Branch)]
        if not indexes:
            return None
        return branch.items, indexes[0] if side == 'before' else indexes[-1] + 1

    if f is not None:
        if anchor == TokenType.GroupStart and side == 'after' and branch.hasGroup:
            return f.tokenList, 0
        if anchor == TokenType.GroupEnd and side == 'before' and branch.groupEnd is not None:
            return f.tokenList, len(f.tokenList)
        if anchor not in (TokenType.GroupStart, TokenType.GroupEnd):
            index = _indexOfType(f.tokenList, anchor, side)
            if index is None:
                return None
            return f.tokenList, index

    index = _indexOfType(branch.items, anchor, side)
    if index is None:
        return None
    return branch.items, index


def _resolveWithFallback(branch, location):
    seen = set()
    while location is not None and location not in seen:
        seen.add(location)
        resolved = _resolve(branch, location)
        if resolved is not None:
            return resolved
        location = NEXT_OF_KIN.get(location.lower())
    return None


def _locate(branch, token):
    containers = [branch.items]
    if branch.filter is not None:
        containers.append(branch.filter.tokenList)
    for matcher in (lambda t: t is token, lambda t: t.matches(token)):
        for container in containers:
            for i, item in enumerate(container):
                if isinstance(item, Token) and matcher(item):
                    return container, i
    raise ValidationError("Token not found in branch", token)


def _refresh(branch):
    if branch.filter is not None:
        branch.filter.refresh()
    refreshContext(branch)
    for b in branch.branches:
        refreshContext(b)


def _adjustCounters(branch, operators=0, wildcards=0):
    branch.booleanOperatorCountMax = max(0, branch.booleanOperatorCountMax + operators)
    branch.booleanOperatorLogicalCountMax = max(
        0, branch.booleanOperatorLogicalCountMax + operators + wildcards)


def _dropWhitespaceBeforeComparison(branch):
    f = branch.filter
    if f is None or f.extensibleMatchFilter is None:
        return
    cmp = f.comparisonOperator
    i = f.tokenList.index(cmp)
    if i > 0 and f.tokenList[i - 1].type == TokenType.Whitespace:
        del f.tokenList[i - 1]


def _dropWhitespaceAfter(container, index):
    if (index + 1 < len(container)
            and isinstance(container[index + 1], Token)
            and container[index + 1].type == TokenType.Whitespace):
        del container[index + 1]


def _mergeWhitespace(container, index):
    """Merge the Whitespace tokens meeting at index, if any."""
    if index <= 0 or index >= len(container):
        return
    a, b = container[index - 1], container[index]
    if not (isinstance(a, Token) and isinstance(b, Token)
            and a.type == TokenType.Whitespace and b.type == TokenType.Whitespace):
        return
    merged = Token(
        a.content + b.content,
        TokenType.Whitespace,
        start=a.start,
        depth=a.depth,
        tokenList=(a.tokenList or [a]) + (b.tokenList or [b]),
    )
    container[index - 1:index + 1] = [merged]


def _collapse(branch):
    """
    A FilterList that lost its parentheses and operator and holds just
    one Filter branch becomes that Filter branch.
    """
    if (branch.type != BranchType.FilterList or branch.isBase
            or branch.hasGroup or branch.groupEnd is not None
            or branch.booleanOperatorToken is not None):
        return
    nested = branch.branches
    if len(nested) != 1 or nested[0].type != BranchType.Filter:
        return
    child = nested[0]
    i = branch.items.index(child)
    branch.items[i:i + 1] = child.items
    branch.type = BranchType.Filter
    branch.depth = child.depth
    child.parent = None
    log.msg("Collapsed grouping into filter %r" % (branch.content,), debug=True)


def addToken(branch, token, candidateLocations, randomSource=None):
    """
    Insert token into branch at one location picked at random among
    candidateLocations (names like 'before_attribute').

    Raises ValidationError when no location resolves.
    """
    if isinstance(candidateLocations, str):
        candidateLocations = [candidateLocations]
    if (token.type == TokenType.BooleanOperator
            and branch.type == BranchType.FilterList
            and branch.booleanOperatorToken is not None):
        raise ValidationError("Filter list already has a boolean operator",
                              branch.booleanOperatorToken)

    resolved = []
    for location in candidateLocations:
        r = _resolveWithFallback(branch, location)
        if r is not None and not any(c is r[0] and i == r[1] for c, i in resolved):
            resolved.append(r)
    if not resolved:
        raise ValidationError(
            "No location among %r found in branch %r" % (
                list(candidateLocations), branch.content),
            token)

    container, index = (randomSource or random).choice(resolved)
    if token.type not in (TokenType.GroupStart, TokenType.GroupEnd):
        token.depth = _innerDepth(branch)
    token.isModified = True
    container.insert(index, token)

    if token.type == TokenType.BooleanOperator:
        _adjustCounters(branch, operators=1)
    elif token.type == TokenType.ExtensibleMatchFilter:
        _dropWhitespaceBeforeComparison(branch)
    _refresh(branch)
    return token


def removeToken(branch, token):
    """
    Remove token from branch. Whitespace left adjacent is merged; a
    FilterList left wrapping one Filter branch becomes a Filter branch.
    """
    container, index = _locate(branch, token)
    removed = container.pop(index)
    _mergeWhitespace(container, index)

    if removed.type == TokenType.BooleanOperator:
        _adjustCounters(branch, operators=-1)
    elif removed.type == TokenType.Value:
        _adjustCounters(branch, wildcards=-valueparser.wildcardCount(removed.content))
    elif (removed.type in (TokenType.GroupStart, TokenType.GroupEnd)
          and branch.type == BranchType.FilterList):
        if not branch.hasGroup and branch.groupEnd is None:
            for t in branch.tokens:
                t.depth = max(0, t.depth - 1)
        _collapse(branch)

    _refresh(branch)
    return removed


def editToken(branch, token, newContent):
    """
    Replace the content of token. An operator or extensible match edited
    to empty content is removed instead.
    """
    container, index = _locate(branch, token)
    if not newContent and token.type in (TokenType.BooleanOperator,
                                         TokenType.ExtensibleMatchFilter):
        removeToken(branch, token)
        return token

    old = token.content
    token.content = newContent
    token.isModified = True

    if token.type == TokenType.Value:
        token.subType = valueparser.valueSubType(newContent)
        token.tokenList = valueparser.tokenizeDistinguishedName(
            newContent, token.start, token.depth) or []
        _adjustCounters(branch, wildcards=(valueparser.wildcardCount(newContent)
                                           - valueparser.wildcardCount(old)))
        if newContent == valueparser.WILDCARD:
            _dropWhitespaceAfter(container, index)
    elif token.type == TokenType.ExtensibleMatchFilter:
        _dropWhitespaceBeforeComparison(branch)
    elif token.type == TokenType.Whitespace:
        token.tokenList = []

    _refresh(branch)
    return token
