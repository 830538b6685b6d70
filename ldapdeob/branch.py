"""
Branch tree built from a SearchFilter token list.

A FilterList branch holds, in order: an optional GroupStart, an optional
BooleanOperator, one or more nested branches and a GroupEnd, with
Whitespace tokens in between. A Filter branch holds its GroupStart, one
Filter (the comparison clause with any Filter-scope BooleanOperators)
and its GroupEnd.

The tree returned by buildBranch is rooted at a *base* branch that has
no parentheses of its own; it holds the whitespace around the top-level
group and the top-level group itself.

Context and counters are a cache. buildBranch computes them for the
whole tree; the mutation primitives only patch the branch they edit and
its immediate nested branches. Reparse (parseFilter) when tree-wide
accuracy is needed.
"""

import uuid
import warnings

from twisted.python import log

from ldapdeob import booleanlogic, lexer, valueparser
from ldapdeob.errors import ParseError, ProtocolLimitWarning
from ldapdeob.token import Token, TokenType


class BranchType:
    Filter = "Filter"
    FilterList = "FilterList"


class Filter:
    """
    One comparison clause, e.g. "name=sabi", together with the
    whitespace and Filter-scope BooleanOperators inside its parentheses.
    """

    def __init__(self, tokenList, depth=0):
        self.tokenList = list(tokenList)
        self.depth = depth
        self.guid = uuid.uuid4()
        self.tokenDict = {}
        self.refresh()

    def refresh(self):
        """Rebuild tokenDict after tokenList changed."""
        d = {}
        for token in self.tokenList:
            d.setdefault(token.type, []).append(token)
        self.tokenDict = d

    @property
    def content(self):
        return u''.join(t.content for t in self.tokenList)

    def _one(self, tokenType):
        tokens = self.tokenDict.get(tokenType)
        if tokens:
            return tokens[0]
        return None

    @property
    def attribute(self):
        return self._one(TokenType.Attribute)

    @property
    def extensibleMatchFilter(self):
        return self._one(TokenType.ExtensibleMatchFilter)

    @property
    def comparisonOperator(self):
        return self._one(TokenType.ComparisonOperator)

    @property
    def value(self):
        return self._one(TokenType.Value)

    @property
    def booleanOperators(self):
        return list(self.tokenDict.get(TokenType.BooleanOperator, []))

    def validate(self):
        """
        Raise ParseError unless the clause has exactly one
        ComparisonOperator and Value and an Attribute or an
        ExtensibleMatchFilter.
        """
        offset = self.tokenList[0].start if self.tokenList else -1
        for required in (TokenType.ComparisonOperator, TokenType.Value):
            if len(self.tokenDict.get(required, [])) != 1:
                raise ParseError("filter needs exactly one %s" % required,
                                 offset, self.content)
        named = (len(self.tokenDict.get(TokenType.Attribute, []))
                 + len(self.tokenDict.get(TokenType.ExtensibleMatchFilter, [])))
        if not named or len(self.tokenDict.get(TokenType.Attribute, [])) > 1:
            raise ParseError("filter needs an attribute", offset, self.content)

    def __repr__(self):
        return '%s(content=%r, depth=%d)' % (
            self.__class__.__name__, self.content, self.depth)


class BooleanOperatorContext:
    """
    Ancestry of BooleanOperator tokens applying to one branch.

    filterListBooleanOperatorTokenList holds the FilterList operators
    from the top of the tree down to and including this branch's own
    FilterList operator. filterBooleanOperatorTokenList holds the
    Filter-scope operators of a Filter branch.
    """

    def __init__(self, filterListBooleanOperatorTokenList=(),
                 filterBooleanOperatorTokenList=()):
        self.filterListBooleanOperatorTokenList = list(filterListBooleanOperatorTokenList)
        self.filterBooleanOperatorTokenList = list(filterBooleanOperatorTokenList)

    @property
    def tokens(self):
        return self.filterListBooleanOperatorTokenList + self.filterBooleanOperatorTokenList

    @property
    def chain(self):
        return u''.join(t.content for t in self.tokens)


class BranchContext:
    def __init__(self):
        self.booleanOperator = BooleanOperatorContext()


class Branch:
    def __init__(self, branchType, items=None, parent=None, depth=0, isBase=False):
        self.type = branchType
        self.items = list(items or [])
        self.parent = parent
        self.depth = depth
        self.isBase = isBase
        self.guid = uuid.uuid4()
        self.context = BranchContext()
        self.booleanOperatorCountMax = 0
        self.booleanOperatorLogicalCountMax = 0
        self.depthMax = depth

    @property
    def tokens(self):
        return [i for i in self.items if isinstance(i, Token)]

    @property
    def branches(self):
        return [i for i in self.items if isinstance(i, Branch)]

    @property
    def filter(self):
        for i in self.items:
            if isinstance(i, Filter):
                return i
        return None

    def _tokenOfType(self, tokenType):
        for t in self.tokens:
            if t.type == tokenType:
                return t
        return None

    @property
    def groupStart(self):
        return self._tokenOfType(TokenType.GroupStart)

    @property
    def groupEnd(self):
        for t in reversed(self.tokens):
            if t.type == TokenType.GroupEnd:
                return t
        return None

    @property
    def hasGroup(self):
        return self.groupStart is not None

    @property
    def booleanOperatorToken(self):
        """The directly defined FilterList operator, if any."""
        if self.type != BranchType.FilterList:
            return None
        return self._tokenOfType(TokenType.BooleanOperator)

    @property
    def booleanOperatorTokenList(self):
        """Operators defined directly by this branch."""
        if self.type == BranchType.Filter:
            return self.filter.booleanOperators
        op = self.booleanOperatorToken
        return [op] if op is not None else []

    @property
    def booleanOperator(self):
        return u''.join(t.content for t in self.booleanOperatorTokenList)

    @property
    def units(self):
        """
        Nested branches as they appear textually: branches whose
        parentheses were removed are replaced by their own units.
        """
        r = []
        work = list(reversed(self.branches))
        while work:
            b = work.pop()
            if b.hasGroup:
                r.append(b)
            else:
                work.extend(reversed(b.branches))
        return r

    @property
    def groupParent(self):
        """Nearest ancestor with its own parentheses, or the base."""
        p = self.parent
        while p is not None and not p.isBase and not p.hasGroup:
            p = p.parent
        return p

    @property
    def content(self):
        return u''.join(t.content for t in flattenTokens(self))

    def __repr__(self):
        return '%s(type=%r, content=%r, depth=%d)' % (
            self.__class__.__name__, self.type, self.content, self.depth)


def flattenTokens(branch):
    """All tokens of a branch in source order (RDN tokens stay nested)."""
    r = []
    work = [iter(branch.items)]
    while work:
        try:
            item = next(work[-1])
        except StopIteration:
            work.pop()
            continue
        if isinstance(item, Branch):
            work.append(iter(item.items))
        elif isinstance(item, Filter):
            work.append(iter(item.tokenList))
        else:
            r.append(item)
    return r


def _finishGroup(branch):
    start = branch.items[0]
    inner = branch.items[1:-1]
    nested = [i for i in inner if isinstance(i, Branch)]
    clause = [i for i in inner
              if not isinstance(i, Branch) and i.type in TokenType.FILTER]

    if clause:
        if nested:
            raise ParseError("filter mixes a comparison and nested filters",
                             start.start, branch.content)
        f = Filter(inner, depth=start.depth + 1)
        f.validate()
        branch.type = BranchType.Filter
        branch.items = [branch.items[0], f, branch.items[-1]]
        return

    if not nested:
        raise ParseError("empty filter list", start.start, branch.content)
    operators = [i for i in inner
                 if not isinstance(i, Branch) and i.type == TokenType.BooleanOperator]
    if len(operators) > 1:
        raise ParseError("filter list has more than one boolean operator",
                         operators[1].start, branch.content)


def buildBranch(tokens):
    """
    Build the branch tree for a lexed token list and compute every
    branch's context and counters.
    """
    base = Branch(BranchType.FilterList, isBase=True, depth=0)
    stack = [base]
    for token in tokens:
        if token.type == TokenType.GroupStart:
            b = Branch(BranchType.FilterList, [token], parent=stack[-1],
                       depth=token.depth)
            stack[-1].items.append(b)
            stack.append(b)
        elif token.type == TokenType.GroupEnd:
            if len(stack) == 1:
                raise ParseError("unmatched ')'", token.start, u'')
            b = stack.pop()
            b.items.append(token)
            _finishGroup(b)
        else:
            stack[-1].items.append(token)

    if len(stack) != 1:
        raise ParseError("unmatched '('", stack[-1].items[0].start, u'')
    if len(base.branches) != 1:
        raise ParseError("expected exactly one top-level filter", 0, base.content)

    computeContext(base)
    return base


def _preorder(branch):
    r = []
    work = [branch]
    while work:
        b = work.pop()
        r.append(b)
        work.extend(reversed(b.branches))
    return r


def refreshContext(branch):
    """
    Recompute the BooleanOperator context of one branch from its
    parent's cached context. Nothing else is touched.
    """
    if branch.parent is not None:
        inherited = branch.parent.context.booleanOperator.filterListBooleanOperatorTokenList
    else:
        inherited = []
    ctx = branch.context.booleanOperator
    if branch.type == BranchType.Filter:
        ctx.filterListBooleanOperatorTokenList = list(inherited)
        ctx.filterBooleanOperatorTokenList = branch.filter.booleanOperators
    else:
        ctx.filterListBooleanOperatorTokenList = list(inherited) + branch.booleanOperatorTokenList
        ctx.filterBooleanOperatorTokenList = []


def _leafCounts(branch):
    chain = len(branch.context.booleanOperator.tokens)
    value = branch.filter.value
    wildcards = valueparser.wildcardCount(value.content) if value is not None else 0
    tokenDepth = max([t.depth for t in flattenTokens(branch)] or [branch.depth])
    return chain, chain + wildcards, tokenDepth


def refreshCounters(branch):
    """Recompute the counters of one branch from its nested branches."""
    if branch.type == BranchType.Filter:
        (branch.booleanOperatorCountMax,
         branch.booleanOperatorLogicalCountMax,
         branch.depthMax) = _leafCounts(branch)
        return
    depths = [t.depth for t in branch.tokens] or [branch.depth]
    nested = branch.branches
    branch.booleanOperatorCountMax = max(
        [b.booleanOperatorCountMax for b in nested]
        or [len(branch.context.booleanOperator.tokens)])
    branch.booleanOperatorLogicalCountMax = max(
        [b.booleanOperatorLogicalCountMax for b in nested]
        or [branch.booleanOperatorCountMax])
    branch.depthMax = max(depths + [b.depthMax for b in nested])


def computeContext(base):
    """Full recomputation of context and counters, top down then bottom up."""
    order = _preorder(base)
    for b in order:
        refreshContext(b)
    for b in reversed(order):
        refreshCounters(b)


def checkProtocolLimits(branch, config=None):
    """
    Warn (ProtocolLimitWarning) for every configured limit the branch's
    counters exceed. Returns the list of exceeded limit names.
    """
    from ldapdeob.config import DeobfuscationConfig
    if config is None:
        config = DeobfuscationConfig()
    limits = config.getLimits()
    exceeded = []
    for name, value in (
            ('boolean-operator-count-max', branch.booleanOperatorCountMax),
            ('boolean-operator-logical-count-max', branch.booleanOperatorLogicalCountMax),
            ('depth-max', branch.depthMax)):
        limit = limits[name]
        if value > limit:
            exceeded.append(name)
            message = "SearchFilter exceeds %s: %d > %d" % (name, value, limit)
            log.msg(message)
            warnings.warn(message, ProtocolLimitWarning, stacklevel=2)
    return exceeded


def parseFilter(text, config=None):
    """
    Lex and build a SearchFilter. This is the full reparse that makes
    every cached value authoritative again.
    """
    base = buildBranch(lexer.tokenize(text))
    checkProtocolLimits(base, config)
    return base


def combineOperator(branch):
    """
    The operator a FilterList branch uses to combine its nested
    branches: the nearest AND/OR in its context, AND by default.
    """
    chain = branch.context.booleanOperator.filterListBooleanOperatorTokenList
    return booleanlogic.combineOperator(chain)
