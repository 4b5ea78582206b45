"""Persistence-specific exceptions."""


class PersistenceError(Exception):
    """Base exception for all persistence errors."""


class ScheduleTooLargeError(PersistenceError):
    """Raised before committing a sync that cannot fit in one atomic batch."""

    def __init__(self, write_count: int, limit: int):
        self.write_count = write_count
        self.limit = limit
        super().__init__(
            f"Schedule sync needs {write_count} writes; one batch holds at most {limit}"
        )
