"""
Shared machinery of the deobfuscation transforms.
"""

from twisted.python import log
from zope.interface import implementer

from ldapdeob import interfaces, serializer
from ldapdeob.config import DeobfuscationConfig, checkPercent


@implementer(interfaces.ISearchFilterTransform)
class Transform:
    """
    Parse the input, let transform() edit the tree with the mutation
    primitives, then serialize and reparse.

    Every eligible node passes a Bernoulli gate of randomNodePercent
    before it is touched, so 0 never changes anything.
    """

    name = None
    scopes = ()
    typeValues = ()

    def __init__(self,
                 randomNodePercent=None,
                 scope=None,
                 types=None,
                 target=serializer.STRING,
                 trackModification=False,
                 randomSource=None,
                 config=None):
        if config is None:
            config = DeobfuscationConfig()
        self.config = config
        if randomNodePercent is None:
            randomNodePercent = config.getRandomNodePercent()
        self.randomNodePercent = checkPercent('randomNodePercent', randomNodePercent)
        self.scope = self._allowList('scope', scope, self.scopes)
        self.types = self._allowList('types', types, self.typeValues)
        if target not in serializer.TARGETS:
            raise ValueError("Unknown target representation %r" % (target,))
        self.target = target
        self.trackModification = trackModification
        if randomSource is None:
            randomSource = config.getRandomSource()
        self.randomSource = randomSource

    @staticmethod
    def _allowList(name, values, known):
        if values is None:
            return tuple(known)
        if isinstance(values, str):
            values = [values]
        values = tuple(values)
        unknown = [v for v in values if v not in known]
        if unknown:
            raise ValueError("Unknown %s %r; expected some of %r" % (
                name, unknown, tuple(known)))
        return values

    def gate(self, percent=None):
        """Bernoulli trial succeeding percent (default: node percent) of the time."""
        if percent is None:
            percent = self.randomNodePercent
        return self.randomSource.random() * 100 < percent

    def logChange(self, message, branch):
        log.msg("%s: %s in %r" % (self.name, message, branch.content), debug=True)

    def transform(self, base):
        raise NotImplementedError

    def __call__(self, searchFilter):
        base = serializer.toBranch(searchFilter, self.config)
        before = base.content
        if self.randomNodePercent > 0:
            self.transform(base)
        result = serializer.finish(base, self.target,
                                   self.trackModification, self.config)
        after = base.content
        if after != before:
            log.msg("%s: %r -> %r" % (self.name, before, after))
        return result

    def __repr__(self):
        return '%s(randomNodePercent=%r, scope=%r, types=%r)' % (
            self.__class__.__name__, self.randomNodePercent, self.scope, self.types)
