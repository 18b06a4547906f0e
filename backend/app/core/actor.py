from dataclasses import dataclass


@dataclass(frozen=True)
class Actor:
    """The authenticated user a request runs for."""

    id: str
