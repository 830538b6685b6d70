"""
Lexer turning SearchFilter text into a flat list of tokens.

RFC4515, extended with the forms Active Directory accepts:

        filter     = ws "(" ws filtercomp ")" ws
        filtercomp = filterlist / item
        filterlist = [booleanop ws] 1*(filter ws)
        item       = *(booleanop ws) clause
        clause     = attr [ws] cmpop ws value ws
                     / [attr] extensible cmpop ws value ws
        booleanop  = "&" / "|" / "!"
        extensible = 1*(":" rulepart) ":"
        cmpop      = "=" / "~=" / ">=" / "<="
        value      = *(valuechar / "\\" 2HEXDIG)
        ws         = *" "

The grammar terminals are pyparsing elements; the nesting is tracked by
an explicit loop so that deeply nested filters do not exhaust the
interpreter stack.
"""

from pyparsing import Char, Literal, ParseException, Regex

from ldapdeob._encoder import to_unicode
from ldapdeob.errors import ParseError
from ldapdeob.token import Token, TokenType
from ldapdeob import valueparser


groupStart = Literal("(").leave_whitespace()
groupStart.set_name("groupStart")
groupEnd = Literal(")").leave_whitespace()
groupEnd.set_name("groupEnd")
booleanOperator = Char("&|!").leave_whitespace()
booleanOperator.set_name("booleanOperator")
whitespace = Regex(" +").leave_whitespace()
whitespace.set_name("whitespace")
attribute = Regex(r"[A-Za-z][A-Za-z0-9;-]*|[0-9]+(?:\.[0-9]+)*").leave_whitespace()
attribute.set_name("attr")
extensibleMatchFilter = Regex(r"(?::[^:=() ]+)+:").leave_whitespace()
extensibleMatchFilter.set_name("extensible")
comparisonOperator = Regex(r"[~<>]?=").leave_whitespace()
comparisonOperator.set_name("cmpop")
# Spaces are part of a value only when more value text follows them.
value = Regex(r"(?:[^()\\ ]|\\[0-9A-Fa-f]{2}| +(?=[^ )]))*").leave_whitespace()
value.set_name("value")


class _Scanner:
    def __init__(self, text):
        self.text = text
        self.loc = 0
        self.depth = 0
        self.tokens = []

    def at(self, element):
        """Text matched by element at the current location, or None."""
        try:
            end = element.try_parse(self.text, self.loc)
        except ParseException:
            return None
        return self.text[self.loc:end]

    def emit(self, content, tokenType, depth=None):
        token = Token(
            content,
            tokenType,
            start=self.loc,
            depth=self.depth if depth is None else depth,
        )
        self.tokens.append(token)
        self.loc += len(content)
        return token

    def skipWhitespace(self):
        ws = self.at(whitespace)
        if ws:
            self.emit(ws, TokenType.Whitespace)

    def fail(self, reason):
        raise ParseError(reason, self.loc, self.text)

    def expect(self, element, tokenType, reason):
        content = self.at(element)
        if content is None:
            self.fail(reason)
        return self.emit(content, tokenType)


def _scanClause(s):
    attr = s.at(attribute)
    if attr is not None:
        s.emit(attr, TokenType.Attribute)
    extensible = s.at(extensibleMatchFilter)
    if extensible is not None:
        s.emit(extensible, TokenType.ExtensibleMatchFilter)
    elif attr is None:
        s.fail("expected attribute")
    else:
        s.skipWhitespace()

    s.expect(comparisonOperator, TokenType.ComparisonOperator,
             "expected comparison operator")
    s.skipWhitespace()

    content = s.at(value)
    start = s.loc
    token = s.emit(content, TokenType.Value)
    token.subType = valueparser.valueSubType(content)
    rdns = valueparser.tokenizeDistinguishedName(content, start, token.depth)
    if rdns:
        token.tokenList = rdns
    s.skipWhitespace()

    if s.at(groupEnd) is None:
        s.fail("expected ')' after value")


def tokenize(text):
    """
    Convert SearchFilter text into a flat list of Tokens.

    Raises ParseError on malformed input; no recovery is attempted.
    """
    text = to_unicode(text)
    s = _Scanner(text)

    s.skipWhitespace()
    if s.at(groupStart) is None:
        s.fail("expected '('")

    while s.loc < len(text):
        if s.at(groupStart) is not None:
            if s.depth == 0 and any(t.type == TokenType.GroupEnd for t in s.tokens):
                s.fail("more than one top-level filter")
            s.emit(u"(", TokenType.GroupStart)
            s.depth += 1
            s.skipWhitespace()

            while s.at(booleanOperator) is not None:
                s.emit(s.at(booleanOperator), TokenType.BooleanOperator)
                s.skipWhitespace()

            if s.at(groupStart) is None:
                if s.at(groupEnd) is not None:
                    s.fail("empty filter")
                _scanClause(s)

        elif s.at(groupEnd) is not None:
            if s.depth == 0:
                s.fail("unmatched ')'")
            s.depth -= 1
            s.emit(u")", TokenType.GroupEnd)
            s.skipWhitespace()
            if s.depth > 0 and s.at(groupStart) is None and s.at(groupEnd) is None:
                s.fail("expected '(' or ')'")

        elif s.depth == 0:
            s.fail("unexpected text after filter")

        else:
            s.fail("expected '(' or ')'")

    if s.depth != 0:
        s.fail("unmatched '('")
    return s.tokens
