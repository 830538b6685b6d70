"""
Evaluate a SearchFilter against one entry.

Three-valued: a filter matches (True), does not match (False) or is
Undefined (None), as for a comparison using a matching rule the server
does not know. NOT leaves Undefined as it is.

The entry is a mapping of attribute name to a list of values (plain
text, not escaped). Attribute names are case-insensitive.
"""

import re

from ldapdeob import serializer
from ldapdeob.booleanlogic import AND, NOT
from ldapdeob.branch import BranchType, combineOperator
from ldapdeob.valueparser import (
    ESCAPE,
    decodeValue,
    parseExtensibleMatchFilter,
    parseValue,
    tokenizeDistinguishedName,
)
from ldapdeob.token import TokenType
from ldapdeob.visitor import iterBranches

BIT_AND = u'1.2.840.113556.1.4.803'
BIT_OR = u'1.2.840.113556.1.4.804'
IN_CHAIN = u'1.2.840.113556.1.4.1941'
DN_WITH_DATA = u'1.2.840.113556.1.4.2253'


def _not(v):
    if v is None:
        return None
    return not v


def _and(values):
    r = True
    for v in values:
        if v is False:
            return False
        if v is None:
            r = None
    return r


def _or(values):
    r = False
    for v in values:
        if v is True:
            return True
        if v is None:
            r = None
    return r


def normalizeDistinguishedName(content):
    """
    Canonical text of an encoded Distinguished Name, or None when
    content is not one.

    >>> normalizeDistinguishedName('CN = Sabi , DC=example')
    'cn=sabi,dc=example'
    """
    tokens = tokenizeDistinguishedName(content)
    if tokens is None:
        return None
    parts = []
    attribute = None
    for t in tokens:
        if t.type == TokenType.Attribute:
            attribute = t.content.lower()
        elif t.type == TokenType.Value:
            parts.append(u'%s=%s' % (attribute, decodeValue(t.content).strip().lower()))
    return u','.join(parts)


def _escape(text):
    return text.replace(ESCAPE, u'\\5c')


def _values(entry, attribute):
    if attribute is None:
        r = []
        for values in entry.values():
            r.extend(_asList(values))
        return r
    for key, values in entry.items():
        if key.lower() == attribute.lower():
            return _asList(values)
    return []


def _asList(values):
    if isinstance(values, str):
        return [values]
    return list(values)


def _equal(assertion, candidate):
    a = normalizeDistinguishedName(assertion)
    if a is not None:
        c = normalizeDistinguishedName(_escape(candidate))
        if c is not None:
            return a == c
    return decodeValue(assertion).strip().lower() == candidate.strip().lower()


def _substringPattern(assertion):
    pattern = []
    for c in parseValue(assertion):
        if c.isWildcard:
            pattern.append(u'.*')
        else:
            pattern.append(re.escape(c.decoded.lower()))
    return re.compile(u''.join(pattern), re.DOTALL)


def _compare(a, b):
    """-1, 0 or 1; integers compare numerically, anything else as text."""
    try:
        a, b = int(a), int(b)
    except ValueError:
        a, b = a.strip().lower(), b.strip().lower()
    return (a > b) - (a < b)


def _bitwise(rule, assertion, values):
    try:
        mask = int(decodeValue(assertion).strip())
    except ValueError:
        return None
    r = False
    for v in values:
        try:
            n = int(v.strip())
        except ValueError:
            continue
        if rule == BIT_AND and n & mask == mask:
            r = True
        elif rule == BIT_OR and n & mask:
            r = True
    return r


def matchFilter(f, entry):
    """Evaluate one comparison clause (a Filter) against entry."""
    attribute = f.attribute.content if f.attribute is not None else None
    operator = f.comparisonOperator.content
    assertion = f.value.content
    values = _values(entry, attribute)

    if f.extensibleMatchFilter is not None:
        hasDN, rule = parseExtensibleMatchFilter(f.extensibleMatchFilter.content)
        if u'.' in rule:
            if rule in (BIT_AND, BIT_OR):
                return _bitwise(rule, assertion, values)
            if rule not in (IN_CHAIN, DN_WITH_DATA):
                return None
        return any(_equal(assertion, v) for v in values)

    if operator in (u'=', u'~='):
        chars = parseValue(assertion)
        if any(c.isWildcard for c in chars):
            if all(c.isWildcard for c in chars):
                return bool(values)
            pattern = _substringPattern(assertion)
            return any(pattern.fullmatch(v.strip().lower()) is not None for v in values)
        return any(_equal(assertion, v) for v in values)

    decoded = decodeValue(assertion)
    if operator == u'>=':
        return any(_compare(v, decoded) >= 0 for v in values)
    if operator == u'<=':
        return any(_compare(v, decoded) <= 0 for v in values)
    raise ValueError("Unknown comparison operator %r" % (operator,))


def matchEntry(searchFilter, entry):
    """
    Evaluate searchFilter, in any representation, against entry.

    >>> matchEntry('(|(name=sabi)(name=dbo))', {'Name': ['DBO']})
    True
    """
    base = serializer.toBranch(searchFilter)
    results = {}
    for b in iterBranches(base, bottomUp=True):
        if b.type == BranchType.Filter:
            v = matchFilter(b.filter, entry)
            for op in reversed(b.filter.booleanOperators):
                if op.content == NOT:
                    v = _not(v)
        else:
            nested = [results[child] for child in b.branches]
            if combineOperator(b) == AND:
                v = _and(nested)
            else:
                v = _or(nested)
            if b.booleanOperator == NOT:
                v = _not(v)
        results[b] = v
    return results[base]
