"""Audit id generation."""

import uuid
from collections.abc import Callable, Iterator

from loguru import logger

from src.authgate.core.errors import AuditStoreError, AuditStoreReason


class AuditGuidIssuer:
    """Issues random 128-bit audit ids, retrying on collision.

    ``candidates()`` yields at most ``max_attempts`` ids. Passing the same
    iterator to several ``issue`` calls makes them share one attempt budget,
    which is how insert-time collisions are retried.
    """

    def __init__(
        self,
        max_attempts: int = 5,
        generator: Callable[[], uuid.UUID | str] = uuid.uuid4,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self._generator = generator

    def candidates(self) -> Iterator[str]:
        for _ in range(self.max_attempts):
            yield str(self._generator()).lower()

    def issue(
        self,
        exists: Callable[[str], bool],
        candidates: Iterator[str] | None = None,
    ) -> str:
        """Return the first candidate for which ``exists`` is false.

        Raises:
            AuditStoreError: ID_EXHAUSTION once the attempt budget is spent.
        """
        for candidate in candidates if candidates is not None else self.candidates():
            if not exists(candidate):
                return candidate
            logger.warning("Audit id collision on {}, drawing a new candidate", candidate)
        raise AuditStoreError(
            AuditStoreReason.ID_EXHAUSTION,
            f"No unique audit id after {self.max_attempts} attempts",
        )
