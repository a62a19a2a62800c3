class NycSalesError(ValueError):
    """Base class for errors raised by the nycsales pipeline."""


class SchemaMismatchError(NycSalesError):
    """An input file does not have the expected set of columns."""

    def __init__(
        self,
        source: str,
        missing: list[str] | None = None,
        unexpected: list[str] | None = None,
    ) -> None:
        self.source = source
        self.missing = sorted(missing or [])
        self.unexpected = sorted(unexpected or [])

        details = []
        if self.missing:
            details.append(f"missing columns {self.missing}")
        if self.unexpected:
            details.append(f"unexpected columns {self.unexpected}")
        super().__init__(f"Schema mismatch in {source}: " + "; ".join(details))


class DegenerateFitError(NycSalesError):
    """A group cannot be fitted with a straight line."""

    def __init__(self, group: str, reason: str) -> None:
        self.group = group
        self.reason = reason
        super().__init__(f"Cannot fit regression for {group}: {reason}")
