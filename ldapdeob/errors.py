"""
Exceptions and warnings raised while parsing and rewriting SearchFilters.
"""


class ParseError(Exception):
    """Malformed SearchFilter text."""

    def __init__(self, reason, offset, text):
        Exception.__init__(self)
        self.reason = reason
        self.offset = offset
        self.text = text

    def __str__(self):
        return "Invalid LDAP SearchFilter: %s at point %d in %r" % (
            self.reason,
            self.offset,
            self.text,
        )


class ValidationError(Exception):
    """
    A mutation primitive could not locate the token or the insert
    location it was asked for. The branch it was working on must be
    considered stale.
    """

    def __init__(self, message, token=None):
        Exception.__init__(self, message)
        self.message = message
        self.token = token

    def __str__(self):
        if self.token is None:
            return self.message
        return "%s: %r" % (self.message, self.token)


class ProtocolLimitWarning(UserWarning):
    """A SearchFilter exceeds an operator count or depth limit."""
