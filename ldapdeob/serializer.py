"""
Conversion between SearchFilter representations.

    String         the filter text
    Token          flat list of Tokens
    TokenEnriched  flat list of Tokens annotated with neighbour types
    Filter         list of Filters (comparison clauses only)
    FilterToken    flat list mixing Filters and the Tokens outside them
    Branch         the base Branch of the tree

Everything converts through the text, so any representation can be
turned into any other.
"""

from ldapdeob import branch as _branch
from ldapdeob._encoder import to_unicode
from ldapdeob.branch import Branch, BranchType, Filter
from ldapdeob.token import Token, enrichTokens
from ldapdeob.visitor import iterBranches

STRING = 'String'
TOKEN = 'Token'
TOKEN_ENRICHED = 'TokenEnriched'
FILTER = 'Filter'
FILTER_TOKEN = 'FilterToken'
BRANCH = 'Branch'

TARGETS = (STRING, TOKEN, TOKEN_ENRICHED, FILTER, FILTER_TOKEN, BRANCH)


def toString(searchFilter):
    if isinstance(searchFilter, (str, bytes)):
        return to_unicode(searchFilter)
    if isinstance(searchFilter, (Branch, Filter, Token)):
        return searchFilter.content
    return u''.join(item.content for item in searchFilter)


def toBranch(searchFilter, config=None):
    """A freshly parsed tree for any representation."""
    return _branch.parseFilter(toString(searchFilter), config)


def filterTokens(base):
    """Filters in place of their tokens, other tokens as they are."""
    r = []
    work = [iter(base.items)]
    while work:
        try:
            item = next(work[-1])
        except StopIteration:
            work.pop()
            continue
        if isinstance(item, Branch):
            work.append(iter(item.items))
        else:
            r.append(item)
    return r


def convertTo(searchFilter, target=STRING, config=None):
    if target not in TARGETS:
        raise ValueError("Unknown target representation %r" % (target,))
    if target == STRING:
        return toString(searchFilter)

    if isinstance(searchFilter, Branch) and searchFilter.isBase:
        base = searchFilter
    else:
        base = toBranch(searchFilter, config)

    if target == BRANCH:
        return base
    if target == TOKEN:
        return _branch.flattenTokens(base)
    if target == TOKEN_ENRICHED:
        return enrichTokens(_branch.flattenTokens(base))
    if target == FILTER:
        return [b.filter for b in iterBranches(base) if b.type == BranchType.Filter]
    return filterTokens(base)


def modifiedSpans(base):
    """(start, end) offsets in the serialized text of modified tokens."""
    spans = []
    offset = 0
    for token in _branch.flattenTokens(base):
        end = offset + len(token.content)
        if token.isModified:
            spans.append((offset, end))
        offset = end
    return spans


def _overlaps(token, spans):
    start = token.start
    end = start + len(token.content)
    for s, e in spans:
        if start < e and s < end:
            return True
        if s == e and start <= s <= end:
            return True
    return False


def finish(base, target=STRING, trackModification=False, config=None):
    """
    Serialize an edited tree and reparse it so every cached value is
    authoritative, then convert to target. With trackModification the
    reparsed tokens overlapping edited text are flagged isModified.
    """
    text = base.content
    spans = modifiedSpans(base) if trackModification else []
    result = _branch.parseFilter(text, config)
    if spans:
        for token in _branch.flattenTokens(result):
            if _overlaps(token, spans):
                token.isModified = True
    return convertTo(result, target, config)
