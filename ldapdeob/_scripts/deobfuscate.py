"""
ldapdeob-deobfuscate: print a simplified form of an LDAP SearchFilter.
"""

import sys

from twisted.python import log

from ldapdeob import config, usage
from ldapdeob.deobfuscate import deobfuscate
from ldapdeob.errors import ParseError


def main(cfg, filterText, transforms, iterations):
    try:
        result = deobfuscate(
            filterText,
            transforms=transforms,
            iterations=iterations,
            randomNodePercent=cfg.getRandomNodePercent(),
            randomCharPercent=cfg.getRandomCharPercent(),
            config=cfg,
        )
    except ParseError as e:
        print("{}: {}".format(sys.argv[0], e), file=sys.stderr)
        return 1
    print(result)
    return 0


class MyOptions(
    usage.Options,
    usage.Options_transform,
    usage.Options_random,
    usage.Options_iterations,
    usage.Options_config,
):
    """Remove obfuscation from an LDAP SearchFilter"""

    def parseArgs(self, filter=None):
        self.opts["filter"] = filter


def console_script():
    try:
        opts = MyOptions()
        opts.parseOptions()
    except usage.UsageError as ue:
        sys.stderr.write("{}: {}\n".format(sys.argv[0], ue))
        sys.exit(1)

    if opts["config"] is not None:
        config.loadConfig(configFiles=[opts["config"]], reload=True)

    cfg = config.DeobfuscationConfig(
        randomNodePercent=100 if opts["random-node-percent"] is None
        else opts["random-node-percent"],
        randomCharPercent=100 if opts["random-char-percent"] is None
        else opts["random-char-percent"],
        seed=opts["seed"],
    )

    filterText = opts["filter"]
    if filterText is None:
        filterText = sys.stdin.read().rstrip("\r\n")

    log.msg("Deobfuscating %r" % (filterText,), debug=True)
    return main(cfg, filterText, opts["transform"], opts["iterations"])


if __name__ == "__main__":
    sys.exit(console_script())
