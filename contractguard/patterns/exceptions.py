class PatternCatalogError(ValueError):
    """Raised when a pattern catalog definition is invalid."""


class UnknownPatternError(KeyError):
    """Raised when a pattern name is not present in the catalog."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
