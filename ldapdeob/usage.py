"""
Command line argument/options available to ldapdeob tools.
"""
from twisted.python import usage, reflect
from twisted.python.usage import UsageError

from ldapdeob import transforms

__all__ = [
    "Options",
    "Options_config",
    "Options_iterations",
    "Options_random",
    "Options_transform",
    "UsageError",
]


class Options(usage.Options):
    optParameters = ()

    def postOptions(self):
        postOpt = {}
        reflect.addMethodNamesToDict(self.__class__, postOpt, "postOptions_")
        for name in postOpt.keys():
            method = getattr(self, 'postOptions_' + name)
            method()


def _percent(name, value):
    if value is None:
        return None
    try:
        value = int(value)
    except ValueError:
        raise usage.UsageError("%s value must be numeric" % (name,))
    if not 0 <= value <= 100:
        raise usage.UsageError("%s must be between 0 and 100" % (name,))
    return value


class Options_transform:
    """
    Mixin for providing the repeatable --transform option.
    """

    def opt_transform(self, value):
        """Transform to apply, e.g. Remove-RandomParenthesis (repeatable, default all)"""
        if value not in transforms.byName:
            raise usage.UsageError("unknown transform %s, expected one of: %s" % (
                value, ', '.join(t.name for t in transforms.ALL)))
        self.opts.setdefault('transform', []).append(value)

    def postOptions_transform(self):
        if not self.opts.get('transform'):
            self.opts['transform'] = None


class Options_random:
    optParameters = (
        ('random-node-percent', None, None,
         "percent chance (0-100) of transforming each eligible node"),
        ('random-char-percent', None, None,
         "percent chance (0-100) of transforming each eligible character"),
        ('seed', None, None,
         "seed for the random source"),
    )

    def postOptions_random(self):
        for name in ('random-node-percent', 'random-char-percent'):
            self.opts[name] = _percent(name, self.opts[name])


class Options_iterations:
    optParameters = (
        ('iterations', None, '1',
         "number of passes over the filter"),
    )

    def postOptions_iterations(self):
        try:
            val = int(self.opts['iterations'])
        except ValueError:
            raise usage.UsageError("iterations value must be numeric")
        if val < 1:
            raise usage.UsageError("iterations must be at least 1")
        self.opts['iterations'] = val


class Options_config:
    optParameters = (
        ('config', None, None,
         "read configuration from this file"),
    )
