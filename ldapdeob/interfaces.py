from zope.interface import Attribute, Interface


class IDeobfuscationConfig(Interface):
    """Settings shared by the deobfuscation transforms."""

    def getRandomNodePercent():
        """
        Percent chance (0-100) that an eligible node is transformed.
        """

    def getRandomCharPercent():
        """
        Percent chance (0-100) that an eligible character is transformed.
        """

    def getSeed():
        """Seed for the random source, or None."""

    def getRandomSource():
        """A random.Random instance to draw decisions from."""

    def getLimits():
        """
        Mapping of protocol limit names to their maximum values:
        boolean-operator-count-max, boolean-operator-logical-count-max
        and depth-max.
        """

    def copy(**kw):
        """
        Make a copy of this configuration, overriding certain aspects
        of it.
        """


class ISearchFilterTransform(Interface):
    """
    A semantics-preserving rewrite of a SearchFilter.

    >>> t = ParenthesisRemoval(randomNodePercent=100)
    >>> t('((name=sabi))')
    '(name=sabi)'
    """

    name = Attribute("Name of the transform, e.g. Remove-RandomParenthesis.")
    scopes = Attribute("All scope values the transform understands.")
    typeValues = Attribute("All type values the transform understands.")

    def __call__(searchFilter):
        """
        Transform searchFilter, given in any representation, and return
        the result in the configured target representation.
        """

    def transform(base):
        """
        Transform the freshly parsed base Branch in place.
        """
