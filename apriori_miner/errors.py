"""
Error types raised by the mining engine.

Every error is fatal to the current run. The pipeline tags an escaping error
with the stage it came from so the diagnostic names both the stage and the
offending itemset.
"""


class AprioriError(Exception):
    """Base class for all mining errors."""

    def __init__(self, message: str, stage: str = None, itemset=None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.itemset = itemset

    def __str__(self):
        parts = []
        if self.stage:
            parts.append(f"[{self.stage}]")
        parts.append(self.message)
        if self.itemset is not None:
            parts.append(f"(itemset: {self.itemset})")
        return ' '.join(parts)


class CapacityExceeded(AprioriError):
    """A fixed-capacity buffer would overflow."""

    def __init__(self, what: str, capacity: int, stage: str = None, itemset=None):
        super().__init__(f"{what} capacity of {capacity} exceeded", stage=stage, itemset=itemset)
        self.what = what
        self.capacity = capacity


class ParseError(AprioriError):
    """Malformed corpus, collection or rule input."""

    def __init__(self, source, detail: str, stage: str = None, itemset=None):
        super().__init__(f"cannot parse {source}: {detail}", stage=stage, itemset=itemset)
        self.source = source
        self.detail = detail


class UndefinedConfidence(AprioriError):
    """Confidence requested for a rule whose antecedent has a zero count."""

    def __init__(self, antecedent, full, stage: str = None):
        super().__init__(
            f"confidence undefined: antecedent {antecedent} has zero count in rule over {full}",
            stage=stage,
            itemset=full
        )
        self.antecedent = antecedent
        self.full = full
