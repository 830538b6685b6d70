import configparser
import os.path
import random

from zope.interface import implementer

from ldapdeob import interfaces


class InvalidConfigError(Exception):
    """Configuration value out of range"""

    def __init__(self, section, option, value):
        Exception.__init__(self)
        self.section = section
        self.option = option
        self.value = value

    def __str__(self):
        return "%s: invalid value %r for %s in section %s" % (
            self.__doc__, self.value, self.option, self.section)


@implementer(interfaces.IDeobfuscationConfig)
class DeobfuscationConfig:
    randomNodePercent = None
    randomCharPercent = None
    seed = None

    def __init__(self,
                 randomNodePercent=None,
                 randomCharPercent=None,
                 seed=None,
                 limits=None):
        if randomNodePercent is not None:
            self.randomNodePercent = checkPercent('randomNodePercent', randomNodePercent)
        if randomCharPercent is not None:
            self.randomCharPercent = checkPercent('randomCharPercent', randomCharPercent)
        if seed is not None:
            self.seed = seed
        self.limits = {}
        if limits is not None:
            for k, v in limits.items():
                self.limits[k] = int(v)

    def _getPercent(self, option):
        cfg = loadConfig()
        value = cfg.get('deobfuscate', option)
        try:
            return checkPercent(option, int(value))
        except ValueError:
            raise InvalidConfigError('deobfuscate', option, value)

    def getRandomNodePercent(self):
        if self.randomNodePercent is not None:
            return self.randomNodePercent
        return self._getPercent('random-node-percent')

    def getRandomCharPercent(self):
        if self.randomCharPercent is not None:
            return self.randomCharPercent
        return self._getPercent('random-char-percent')

    def getSeed(self):
        if self.seed is not None:
            return self.seed
        cfg = loadConfig()
        seed = cfg.get('deobfuscate', 'seed')
        if not seed:
            return None
        try:
            return int(seed)
        except ValueError:
            return seed

    def getRandomSource(self):
        """A random.Random seeded from configuration, if a seed is set."""
        return random.Random(self.getSeed())

    def getLimits(self):
        r = {}
        cfg = loadConfig()
        for option in DEFAULTS['limits']:
            value = cfg.get('limits', option)
            try:
                r[option] = int(value)
            except ValueError:
                raise InvalidConfigError('limits', option, value)
        r.update(self.limits)
        return r

    def copy(self, **kw):
        for name in ('randomNodePercent', 'randomCharPercent', 'seed', 'limits'):
            if name not in kw:
                kw[name] = getattr(self, name)
        return self.__class__(**kw)


def checkPercent(name, value):
    if not 0 <= value <= 100:
        raise ValueError("%s must be between 0 and 100, not %r" % (name, value))
    return value


DEFAULTS = {
    'deobfuscate': {
        'random-node-percent': '50',
        'random-char-percent': '50',
        'seed': '',
    },
    'limits': {
        'boolean-operator-count-max': '100',
        'boolean-operator-logical-count-max': '200',
        'depth-max': '100',
    },
}

CONFIG_FILES = [
    '/etc/ldapdeob/global.cfg',
    os.path.expanduser('~/.ldapdeob/global.cfg'),
]

__config = None


def loadConfig(configFiles=None,
               reload=False):
    """
    Load configuration file.
    """
    global __config
    if __config is None or reload:
        x = configparser.ConfigParser(interpolation=None)

        for section, options in DEFAULTS.items():
            x.add_section(section)
            for option, value in options.items():
                x.set(section, option, value)

        if configFiles is None:
            configFiles = CONFIG_FILES
        x.read(configFiles)
        __config = x
    return __config
