"""
Run several deobfuscation transforms over a SearchFilter.
"""

from twisted.python import log

from ldapdeob import serializer
from ldapdeob import transforms as _transforms
from ldapdeob.config import DeobfuscationConfig


def _resolve(transformList):
    if transformList is None:
        return list(_transforms.ALL)
    r = []
    for t in transformList:
        if isinstance(t, str):
            try:
                t = _transforms.byName[t]
            except KeyError:
                raise ValueError("Unknown transform %r; expected one of %r" % (
                    t, sorted(_transforms.byName)))
        r.append(t)
    # keep the pipeline order whatever order they were given in
    order = list(_transforms.ALL)
    return sorted(r, key=lambda t: order.index(t) if t in order else len(order))


def deobfuscate(searchFilter,
                transforms=None,
                iterations=1,
                randomNodePercent=100,
                randomCharPercent=100,
                target=serializer.STRING,
                config=None,
                randomSource=None):
    """
    Apply the transforms (classes or names, default all) in pipeline
    order, up to iterations times, stopping once an iteration changes
    nothing.

    >>> deobfuscate('(!(&(!name=sabi)(!  name=dbo)))', iterations=2)
    '(|(name=sabi)(name=dbo))'
    """
    if iterations < 1:
        raise ValueError("iterations must be at least 1, not %r" % (iterations,))
    if config is None:
        config = DeobfuscationConfig()
    if randomSource is None:
        randomSource = config.getRandomSource()
    pipeline = _resolve(transforms)

    text = serializer.toString(searchFilter)
    for i in range(iterations):
        before = text
        for transformClass in pipeline:
            kw = dict(randomNodePercent=randomNodePercent,
                      randomSource=randomSource,
                      config=config)
            if transformClass in (_transforms.WhitespaceRemoval, _transforms.WildcardRemoval):
                kw['randomCharPercent'] = randomCharPercent
            text = transformClass(**kw)(text)
        log.msg("Deobfuscation iteration %d: %r" % (i + 1, text), debug=True)
        if text == before:
            break
    return serializer.convertTo(text, target, config)
