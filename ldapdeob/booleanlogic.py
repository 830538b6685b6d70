"""
Boolean operator chains.

A chain is the ordered run of BooleanOperator characters applied at
successively deeper single-child levels, e.g. "(&(!(|(a)(b))))" gives
"&!|" for the content "(a)(b)".

reduceBooleanOperator collapses a chain into its net operator.
getCompatibleBooleanOperators decides which operator edits on a branch
leave the chain's meaning unchanged.
"""

AND = u'&'
OR = u'|'
NOT = u'!'
OPERATORS = (AND, OR, NOT)

REMOVE = 'remove'
INSERT = 'insert'
REPLACE = 'replace'


def _chars(chain):
    """Operator characters of a string, or of a list of strings or tokens."""
    if isinstance(chain, str):
        return [c for c in chain if c in OPERATORS]
    r = []
    for item in chain:
        content = getattr(item, 'content', item)
        r.extend(c for c in content if c in OPERATORS)
    return r


def reduceBooleanOperator(chain, ignoreTrailingNegation=False):
    """
    Reduce a chain to one net operator.

    Adjacent negations cancel in pairs. A chain ending in an uncancelled
    negation reduces to "!"; otherwise to the last AND/OR, prefixed by
    "!" when any negation survives.

    >>> reduceBooleanOperator('||!!|!&!!')
    '!&'
    >>> reduceBooleanOperator('!|!!!', ignoreTrailingNegation=True)
    '!|'
    """
    chars = _chars(chain)
    if ignoreTrailingNegation:
        while chars and chars[-1] == NOT:
            chars.pop()

    stack = []
    for c in chars:
        if c == NOT and stack and stack[-1] == NOT:
            stack.pop()
        else:
            stack.append(c)

    if not stack:
        return u''
    if stack[-1] == NOT:
        return NOT
    if NOT in stack:
        return NOT + stack[-1]
    return stack[-1]


def negationParity(chain):
    return _chars(chain).count(NOT) % 2


def combineOperator(chain):
    """
    The AND/OR a group without its own operator uses to combine its
    children: the last AND/OR of the chain, AND when there is none.
    """
    reduced = reduceBooleanOperator(chain, ignoreTrailingNegation=True)
    return reduced[-1:] or AND


def invertOperator(operator):
    return {AND: OR, OR: AND}[operator]


def operatorStretch(branch):
    """
    Walk from branch down through single-child levels.

    Returns (operators, end, isMulti): operators is the list of
    (owningBranch, token) pairs met on the way, in order; end is the
    first branch with several nested groups, or the Filter branch the
    walk reached.
    """
    from ldapdeob.branch import BranchType
    operators = []
    b = branch
    while True:
        operators.extend((b, t) for t in b.booleanOperatorTokenList)
        if b.type == BranchType.Filter:
            return operators, b, False
        units = b.units
        if len(units) != 1:
            return operators, b, True
        b = units[0]


def ancestorChain(branch):
    """Cached FilterList operators above branch, excluding its own."""
    from ldapdeob.branch import BranchType
    chain = branch.context.booleanOperator.filterListBooleanOperatorTokenList
    if branch.type == BranchType.FilterList:
        own = branch.booleanOperatorTokenList
        if own and chain[-len(own):] == own:
            return list(chain[:-len(own)])
    return list(chain)


def _key(chain, isMulti):
    reduced = reduceBooleanOperator(chain)
    if not isMulti:
        # AND and OR of a single term are the term itself
        reduced = reduced.replace(OR, AND)
    if isMulti:
        return reduced, negationParity(chain), combineOperator(chain)
    return reduced, negationParity(chain)


def isCompatible(before, after, isMulti):
    return _key(before, isMulti) == _key(after, isMulti)


def _simulate(stretch, position, candidate, action):
    """The stretch after applying action, or None when it cannot apply."""
    n = len(candidate)
    if action == REMOVE:
        if u''.join(stretch[position:position + n]) != candidate:
            return None
        return stretch[:position] + stretch[position + n:]
    if action == INSERT:
        return stretch[:position] + list(candidate) + stretch[position:]
    if action == REPLACE:
        if position + n > len(stretch):
            return None
        return stretch[:position] + list(candidate) + stretch[position + n:]
    raise ValueError("Unknown action %r" % (action,))


def getCompatibleBooleanOperators(branch, candidates, action=REMOVE, position=0):
    """
    Return the candidates whose removal, insertion or replacement at
    branch leaves the meaning of its content unchanged.

    position indexes the branch's own operators; a two-character
    candidate extends to the next operator down (which may belong to
    the nearest operator-bearing descendant).
    """
    operators, end, isMulti = operatorStretch(branch)
    stretch = [t.content for _, t in operators]
    prefix = [t.content for t in ancestorChain(branch)]
    r = []
    for candidate in candidates:
        after = _simulate(stretch, position, candidate, action)
        if after is None:
            continue
        if isCompatible(prefix + stretch, prefix + after, isMulti):
            r.append(candidate)
    return r


def removableOperators(branch, token, types):
    """
    Candidate removals starting at token, one of branch's own operators.

    Returns lists of (owningBranch, token) pairs: the token alone and
    the token with the next operator down, each kept only when its
    characters are in types and removing it preserves meaning.
    """
    operators, end, isMulti = operatorStretch(branch)
    position = None
    for i, (owner, t) in enumerate(operators):
        if owner is branch and t is token:
            position = i
            break
    if position is None:
        return []

    wanted = []
    for n in (1, 2):
        picked = operators[position:position + n]
        if len(picked) != n:
            continue
        candidate = u''.join(t.content for _, t in picked)
        if candidate in types:
            wanted.append((candidate, picked))

    compatible = getCompatibleBooleanOperators(
        branch, [c for c, _ in wanted], REMOVE, position)
    return [picked for c, picked in wanted if c in compatible]
