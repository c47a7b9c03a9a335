"""Domain errors raised by the reputation services.

The API layer translates these into HTTP responses; nothing here is retried.
"""


class ReputationError(Exception):
    """Base class for recoverable, per-request reputation failures."""


class NotFoundError(ReputationError):
    """A referenced user or post does not exist."""

    def __init__(self, entity: str, entity_id: int) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class RateLimitError(ReputationError):
    """A reaction was refused because the caller looks like a bot."""

    def __init__(self, weight: float) -> None:
        self.weight = weight
        super().__init__("Suspicious activity detected. Please slow down.")


class SelfReactionError(ReputationError):
    """An author reacted to their own post while self-reactions are disabled."""

    def __init__(self) -> None:
        super().__init__("Reacting to your own post is not allowed")
