"""Semantics-preserving SearchFilter rewrites"""

from ldapdeob.transforms.booleanoperator import (
    BooleanOperatorRemoval,
    removeRandomBooleanOperator,
)
from ldapdeob.transforms.extensiblematch import (
    ExtensibleMatchFilterRemoval,
    removeRandomExtensibleMatchFilter,
)
from ldapdeob.transforms.inversion import (
    BooleanOperatorInversionRemoval,
    removeRandomBooleanOperatorInversion,
)
from ldapdeob.transforms.parenthesis import (
    ParenthesisRemoval,
    removeRandomParenthesis,
)
from ldapdeob.transforms.whitespace import (
    WhitespaceRemoval,
    removeRandomWhitespace,
)
from ldapdeob.transforms.wildcard import (
    WildcardRemoval,
    removeRandomWildcard,
)

# Order the pipeline applies them in: value level first, structure last.
ALL = (
    ExtensibleMatchFilterRemoval,
    WildcardRemoval,
    WhitespaceRemoval,
    BooleanOperatorInversionRemoval,
    BooleanOperatorRemoval,
    ParenthesisRemoval,
)

byName = {t.name: t for t in ALL}

__all__ = [
    "ALL",
    "byName",
    "BooleanOperatorInversionRemoval",
    "BooleanOperatorRemoval",
    "ExtensibleMatchFilterRemoval",
    "ParenthesisRemoval",
    "WhitespaceRemoval",
    "WildcardRemoval",
    "removeRandomBooleanOperator",
    "removeRandomBooleanOperatorInversion",
    "removeRandomExtensibleMatchFilter",
    "removeRandomParenthesis",
    "removeRandomWhitespace",
    "removeRandomWildcard",
]
