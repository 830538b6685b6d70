"""
Tokens making up a SearchFilter.

A token is a run of source text with a type. Tokens synthesized by the
mutation primitives have no source offset (start == -1).
"""

import uuid


class TokenType:
    GroupStart = "GroupStart"
    GroupEnd = "GroupEnd"
    BooleanOperator = "BooleanOperator"
    Attribute = "Attribute"
    ExtensibleMatchFilter = "ExtensibleMatchFilter"
    ComparisonOperator = "ComparisonOperator"
    Value = "Value"
    Whitespace = "Whitespace"
    CommaDelimiter = "CommaDelimiter"

    ALL = (
        GroupStart,
        GroupEnd,
        BooleanOperator,
        Attribute,
        ExtensibleMatchFilter,
        ComparisonOperator,
        Value,
        Whitespace,
        CommaDelimiter,
    )

    # Tokens owned by a Filter (the comparison clause) rather than by the
    # enclosing branch.
    FILTER = (
        Attribute,
        ExtensibleMatchFilter,
        ComparisonOperator,
        Value,
    )


class TokenSubType:
    RDN = "RDN"
    DistinguishedName = "DistinguishedName"
    Presence = "Presence"


_lowerTypes = {t.lower(): t for t in TokenType.ALL}


def tokenTypeByName(name):
    """
    Resolve a case-insensitive token type name.

    >>> tokenTypeByName('groupstart')
    'GroupStart'
    """
    try:
        return _lowerTypes[name.lower()]
    except KeyError:
        raise ValueError("Unknown token type %r" % (name,))


class Token:
    """
    One lexical element of a SearchFilter.

    content is the encoded source text (hex escapes are kept as written);
    tokenList holds nested tokens: the RDN components of a
    Distinguished-Name Value, or the original runs merged into one
    Whitespace token.
    """

    def __init__(self, content, tokenType, start=-1, depth=0,
                 subType=None, tokenList=None, guid=None):
        if tokenType not in TokenType.ALL:
            raise ValueError("Unknown token type %r" % (tokenType,))
        self.content = content
        self.type = tokenType
        self.subType = subType
        self.start = start
        self.depth = depth
        self.tokenList = list(tokenList or [])
        self.typeBefore = None
        self.typeAfter = None
        self.isModified = False
        self.guid = guid or uuid.uuid4()

    @property
    def length(self):
        return len(self.content)

    @property
    def isSynthesized(self):
        return self.start == -1

    def copy(self):
        r = self.__class__(
            self.content,
            self.type,
            start=self.start,
            depth=self.depth,
            subType=self.subType,
            tokenList=[t.copy() for t in self.tokenList],
            guid=self.guid,
        )
        r.typeBefore = self.typeBefore
        r.typeAfter = self.typeAfter
        r.isModified = self.isModified
        return r

    def matches(self, other):
        """Identity, content and position all agree."""
        return (self.guid == other.guid
                and self.content == other.content
                and self.start == other.start)

    def __repr__(self):
        return (self.__class__.__name__
                + '(content='
                + repr(self.content)
                + ', type='
                + repr(self.type)
                + ', start='
                + repr(self.start)
                + ', depth='
                + repr(self.depth)
                + ')')

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return (self.content == other.content
                and self.type == other.type
                and self.subType == other.subType
                and self.start == other.start
                and self.depth == other.depth
                and self.tokenList == other.tokenList)

    def __ne__(self, other):
        return not (self == other)

    __hash__ = object.__hash__


def newToken(tokenType, content, start=-1, depth=0, subType=None):
    """
    Create a token. Tokens created here are not placed in any branch;
    use mutation.addToken for that.
    """
    return Token(content, tokenType, start=start, depth=depth, subType=subType)


def enrichTokens(tokens):
    """
    Annotate every token with the types of its neighbours, in place.
    Nested token lists are annotated against their own siblings.
    """
    work = [list(tokens)]
    while work:
        run = work.pop()
        previous = None
        for token in run:
            token.typeBefore = previous.type if previous is not None else None
            if previous is not None:
                previous.typeAfter = token.type
            if token.tokenList:
                work.append(token.tokenList)
            previous = token
        if previous is not None:
            previous.typeAfter = None
    return tokens


def joinContent(tokens):
    return ''.join(t.content for t in tokens)
