"""Domain errors shared by repositories, services and routes.

Not-found is never an error here: repositories return None for it.
"""


class RepositoryError(RuntimeError):
    """Storage backend failure (connectivity, decoding, transaction)."""


class TransactionConflictError(RepositoryError):
    """A read-modify-write unit kept losing to concurrent writers."""

    def __init__(self, key: str, attempts: int):
        super().__init__(f"Transaction on {key} conflicted {attempts} times, giving up")
        self.key = key
        self.attempts = attempts


class ScoreOutOfRangeError(ValueError):
    """Submitted score lies outside the item's [min, max] scale."""

    def __init__(self, score: float, min: float, max: float):
        super().__init__(f"Score {score} is outside [{min}, {max}]")
        self.score = score
        self.min = min
        self.max = max
