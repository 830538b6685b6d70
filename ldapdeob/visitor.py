"""
Traversal of branch trees.

Filters can be nested arbitrarily deep, so all traversal here uses an
explicit work list rather than recursion.
"""

RETURN_ALL = 'ReturnAll'
RETURN_FIRST = 'ReturnFirst'
MODIFY = 'Modify'

MODES = (RETURN_ALL, RETURN_FIRST, MODIFY)


def iterBranches(branch, bottomUp=False):
    """
    Yield branch and every nested branch.

    Pre-order by default; with bottomUp every branch comes after all of
    its nested branches (siblings stay left to right).
    """
    if not bottomUp:
        work = [branch]
        while work:
            b = work.pop()
            yield b
            work.extend(reversed(b.branches))
        return

    work = [(branch, False)]
    while work:
        b, expanded = work.pop()
        if expanded:
            yield b
            continue
        work.append((b, True))
        work.extend((child, False) for child in reversed(b.branches))


def _isEmpty(result):
    if result is None:
        return True
    try:
        return len(result) == 0
    except TypeError:
        return False


def visitBranch(branch, callback, mode=RETURN_ALL):
    """
    Call callback(b) for branch and each nested branch, pre-order.

    RETURN_ALL: return the list of non-empty results.

    RETURN_FIRST: return the first non-empty result, or None.

    MODIFY: a callback returning a Branch replaces the visited branch in
    its parent; traversal continues into the replacement. Returns the
    (possibly replaced) top branch.
    """
    if mode not in MODES:
        raise ValueError("Unknown visitor mode %r" % (mode,))

    if mode == RETURN_ALL:
        results = []
        for b in iterBranches(branch):
            result = callback(b)
            if not _isEmpty(result):
                results.append(result)
        return results

    if mode == RETURN_FIRST:
        for b in iterBranches(branch):
            result = callback(b)
            if not _isEmpty(result):
                return result
        return None

    from ldapdeob.branch import Branch
    top = branch
    work = [branch]
    while work:
        b = work.pop()
        result = callback(b)
        if isinstance(result, Branch) and result is not b:
            parent = b.parent
            if parent is not None:
                parent.items[parent.items.index(b)] = result
            result.parent = parent
            if b is top:
                top = result
            b = result
        work.extend(reversed(b.branches))
    return top


def findOwner(branch, token):
    """The branch directly holding token (or holding it in its Filter)."""
    def owns(b):
        if any(t is token for t in b.tokens):
            return b
        f = b.filter
        if f is not None and any(t is token for t in f.tokenList):
            return b
        return None
    return visitBranch(branch, owns, RETURN_FIRST)
