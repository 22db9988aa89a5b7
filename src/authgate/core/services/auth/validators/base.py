from abc import ABC, abstractmethod
from typing import ClassVar

from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.models.credentials import Credential
from src.authgate.core.services.identity.record_store import IdentityRecordStore
from src.authgate.entities import IdentityRecord


class ModeValidator(ABC):
    """Validates one inbound credential and returns the caller's identity record.

    Exactly one validator is active per process, matching the resolved mode.
    """

    mode: ClassVar[AuthenticationMode]

    def __init__(self, store: IdentityRecordStore) -> None:
        if store.mode is not self.mode:
            raise ValueError(
                f"{type(self).__name__} needs a {self.mode.value} store, got {store.mode.value}"
            )
        self._store = store

    @abstractmethod
    async def validate(self, credential: Credential) -> IdentityRecord:
        """Validate ``credential``, creating or refreshing its identity record.

        Raises:
            AuthenticationError: If the credential is rejected.
            AuditStoreError: If the store cannot confirm or record the identity.
        """
        raise NotImplementedError
