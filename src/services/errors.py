"""Domain errors raised by the services and translated by the API layer."""


class InsightNotFoundError(LookupError):
    """No insight with the given id in the collection."""

    def __init__(self, insight_id: str) -> None:
        super().__init__(f"Insight {insight_id} not found")
        self.insight_id = insight_id


class NothingToReviewError(Exception):
    """No insight is due for review."""


class InsightMasteredError(Exception):
    """The insight is mastered and no longer takes part in reviews."""


class ImportFormatError(ValueError):
    """An import payload does not have the expected shape."""


class ExerciseGenerationError(Exception):
    """A generator could not build an exercise from the insight."""


class StoreError(Exception):
    """The persistence backend failed to read or write a value."""
