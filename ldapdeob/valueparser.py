"""
Character level parsing of Attribute-Values.

Values keep their encoded form (\\XX hex escapes as written) in the
token content. The parsed characters produced here expose both forms so
that transforms can measure decoded text while editing encoded text.
"""

import re
import string

from ldapdeob.token import Token, TokenType, TokenSubType

WILDCARD = u'*'
WHITESPACE = u' '
ESCAPE = u'\\'
COMMA = u','
EQUALS = u'='

# RFC 4514, section 3
RDN_KEYWORDS = frozenset([
    'cn', 'l', 'st', 'o', 'ou', 'c', 'street', 'dc', 'uid',
])

_rdnComponent = re.compile(
    r'^(?P<ws1> *)'
    r'(?P<attr>[A-Za-z][A-Za-z0-9-]*|[0-9]+(?:\.[0-9]+)*)'
    r'(?P<ws2> *)='
    r'(?P<ws3> *)'
    r'(?P<value>.*?)'
    r'(?P<ws4> *)$',
    re.DOTALL,
)


class ParsedCharacter:
    """
    One decoded character of a value together with the encoded text it
    came from.
    """

    def __init__(self, content, decoded, start):
        self.content = content
        self.decoded = decoded
        self.start = start

    @property
    def isHexEncoded(self):
        return self.content.startswith(ESCAPE)

    @property
    def isWildcard(self):
        # \2a is a literal asterisk, not a wildcard
        return self.content == WILDCARD

    @property
    def isWhitespace(self):
        return self.content == WHITESPACE

    @property
    def charClass(self):
        c = self.decoded
        if c.isalpha():
            return 'alpha'
        if c.isdigit():
            return 'digit'
        if c.isspace():
            return 'whitespace'
        return 'special'

    @property
    def case(self):
        if self.decoded.isupper():
            return 'upper'
        if self.decoded.islower():
            return 'lower'
        return None

    @property
    def isPrintable(self):
        return self.decoded.isprintable()

    def __repr__(self):
        return '%s(content=%r, decoded=%r, start=%d)' % (
            self.__class__.__name__, self.content, self.decoded, self.start)


def _utf8Length(byte):
    if byte < 0x80:
        return 1
    if byte >> 5 == 0x06:
        return 2
    if byte >> 4 == 0x0E:
        return 3
    if byte >> 3 == 0x1E:
        return 4
    return 1


def _isEscapeAt(content, i):
    return (content[i:i + 1] == ESCAPE
            and len(content) >= i + 3
            and content[i + 1] in string.hexdigits
            and content[i + 2] in string.hexdigits)


def parseValue(content):
    """
    Split encoded value text into ParsedCharacters.

    Consecutive hex escapes that form one UTF-8 sequence decode to a
    single character; escapes that do not form valid UTF-8 decode byte
    by byte as latin-1.

    Raises ValueError for a backslash not followed by two hex digits.
    """
    r = []
    i = 0
    while i < len(content):
        if content[i] != ESCAPE:
            r.append(ParsedCharacter(content[i], content[i], i))
            i += 1
            continue

        if not _isEscapeAt(content, i):
            raise ValueError("Invalid hex escape at offset %d in %r" % (i, content))

        first = int(content[i + 1:i + 3], 16)
        width = _utf8Length(first)
        encoded = content[i:i + 3 * width]
        if width > 1 and all(_isEscapeAt(content, i + 3 * k) for k in range(width)):
            raw = bytes(int(encoded[3 * k + 1:3 * k + 3], 16) for k in range(width))
            try:
                r.append(ParsedCharacter(encoded, raw.decode('utf-8'), i))
                i += 3 * width
                continue
            except UnicodeDecodeError:
                pass
        r.append(ParsedCharacter(content[i:i + 3], chr(first), i))
        i += 3
    return r


def decodeValue(content):
    return u''.join(c.decoded for c in parseValue(content))


def decodedLength(content):
    return len(parseValue(content))


def _splitOnNotEscaped(s, separator):
    """
    Split encoded text on an unescaped separator, returning
    (offset, component) pairs.
    """
    r = [(0, u'')]
    i = 0
    while i < len(s):
        if _isEscapeAt(s, i):
            offset, part = r[-1]
            r[-1] = (offset, part + s[i:i + 3])
            i += 3
        elif s[i] == separator:
            r.append((i + 1, u''))
            i += 1
        else:
            offset, part = r[-1]
            r[-1] = (offset, part + s[i])
            i += 1
    return r


def _parseRDNs(content):
    if EQUALS not in content:
        return None
    r = []
    for offset, part in _splitOnNotEscaped(content, COMMA):
        m = _rdnComponent.match(part)
        if m is None or not m.group('value'):
            return None
        r.append((offset, m))
    if len(r) < 2 and r[0][1].group('attr').lower() not in RDN_KEYWORDS:
        return None
    return r


def isDistinguishedName(content):
    return _parseRDNs(content) is not None


def tokenizeDistinguishedName(content, start=-1, depth=0):
    """
    Decompose a Distinguished-Name value into RDN sub-tokens, or return
    None when content is not a Distinguished Name.
    """
    rdns = _parseRDNs(content)
    if rdns is None:
        return None

    tokens = []

    def emit(text, tokenType, offset):
        if not text:
            return
        tokens.append(Token(
            text,
            tokenType,
            start=start + offset if start != -1 else -1,
            depth=depth,
            subType=TokenSubType.RDN,
        ))

    for i, (offset, m) in enumerate(rdns):
        if i > 0:
            emit(COMMA, TokenType.CommaDelimiter, offset - 1)
        emit(m.group('ws1'), TokenType.Whitespace, offset + m.start('ws1'))
        emit(m.group('attr'), TokenType.Attribute, offset + m.start('attr'))
        emit(m.group('ws2'), TokenType.Whitespace, offset + m.start('ws2'))
        emit(EQUALS, TokenType.ComparisonOperator, offset + m.end('ws2'))
        emit(m.group('ws3'), TokenType.Whitespace, offset + m.start('ws3'))
        emit(m.group('value'), TokenType.Value, offset + m.start('value'))
        emit(m.group('ws4'), TokenType.Whitespace, offset + m.start('ws4'))
    return tokens


def valueSubType(content):
    if content == WILDCARD:
        return TokenSubType.Presence
    if isDistinguishedName(content):
        return TokenSubType.DistinguishedName
    return None


def wildcardRuns(content):
    """
    Return (startIndex, endIndex) pairs of parsed-character indexes for
    each run of literal wildcards in encoded value text.
    """
    chars = parseValue(content)
    runs = []
    i = 0
    while i < len(chars):
        if chars[i].isWildcard:
            j = i
            while j < len(chars) and chars[j].isWildcard:
                j += 1
            runs.append((i, j))
            i = j
        else:
            i += 1
    return runs


def wildcardCount(content):
    return sum(1 for c in parseValue(content) if c.isWildcard)


# Matching rules Active Directory evaluates.
SUPPORTED_MATCHING_RULES = frozenset([
    '1.2.840.113556.1.4.803',   # LDAP_MATCHING_RULE_BIT_AND
    '1.2.840.113556.1.4.804',   # LDAP_MATCHING_RULE_BIT_OR
    '1.2.840.113556.1.4.1941',  # LDAP_MATCHING_RULE_IN_CHAIN
    '1.2.840.113556.1.4.2253',  # LDAP_MATCHING_RULE_DN_WITH_DATA
])

_numericOID = re.compile(r'^[0-9]+(?:\.[0-9]+)*$')


def parseExtensibleMatchFilter(content):
    """
    Split ":dn:rule:" into (hasDN, rule). The rule is hex-decoded,
    lowercased and, for numeric OIDs, stripped of leading zeros.

    >>> parseExtensibleMatchFilter(':DN:1.2.840.113556.1.4.0803:')
    (True, '1.2.840.113556.1.4.803')
    """
    hasDN = False
    rule = u''
    for part in content.strip(u':').split(u':'):
        try:
            part = decodeValue(part)
        except ValueError:
            pass
        part = part.strip().lower()
        if part == u'dn':
            hasDN = True
        elif part:
            rule = part
    if _numericOID.match(rule):
        rule = u'.'.join(str(int(arc)) for arc in rule.split(u'.'))
    return hasDN, rule


def isSupportedMatchingRule(rule):
    return rule == u'' or rule in SUPPORTED_MATCHING_RULES
