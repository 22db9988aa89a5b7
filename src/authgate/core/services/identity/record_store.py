"""Persistence of identity records for the active authentication mode."""

import uuid
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.authgate.core.errors import AuditStoreError, AuditStoreReason
from src.authgate.core.models.auth_mode import AuthenticationMode
from src.authgate.core.models.identity_profiles import (
    AuthenticatedProfile,
    IdentityProfile,
    OAuthProfile,
    RegistrationProfile,
)
from src.authgate.core.services.database.db_session import DbSessionService
from src.authgate.core.services.identity.audit_guid import AuditGuidIssuer
from src.authgate.entities import (
    AuthenticatedIdentityRepository,
    DisabledModeIdentity,
    DisabledModeIdentityRepository,
    IdentityRecord,
    OAuthIdentityRepository,
)
from src.authgate.entities.core._base import utc_now
from src.authgate.entities.core._repository import IdentityRepository


def _disabled_values(identifier: str, profile: RegistrationProfile) -> dict[str, Any]:
    return {
        "identifier": identifier,
        "name": profile.name,
        "email": profile.email,
        "organization": profile.organization,
        "session_id": profile.session_id,
    }


def _authenticated_values(user_id: str, profile: AuthenticatedProfile) -> dict[str, Any]:
    return {"user_id": user_id, **_authenticated_refresh(profile)}


def _authenticated_refresh(profile: AuthenticatedProfile) -> dict[str, Any]:
    return {
        "email": profile.email,
        "display_name": profile.display_name,
        "roles": list(profile.roles),
    }


def _oauth_values(object_id: str, profile: OAuthProfile) -> dict[str, Any]:
    return {"object_id": object_id, **_oauth_refresh(profile)}


def _oauth_refresh(profile: OAuthProfile) -> dict[str, Any]:
    return {
        "tenant_id": profile.tenant_id,
        "email": profile.email,
        "display_name": profile.display_name,
        "granted_scopes": list(profile.granted_scopes),
        "roles": list(profile.roles),
    }


@dataclass(frozen=True)
class _Variant:
    repository: type[IdentityRepository]
    profile_type: type[BaseModel]
    audited: bool
    new_values: Callable[[str, Any], dict[str, Any]]
    # Disabled-mode profiles are fixed at first contact
    refresh_values: Callable[[Any], dict[str, Any]] = lambda profile: {}


_VARIANTS: dict[AuthenticationMode, _Variant] = {
    AuthenticationMode.DISABLED: _Variant(
        repository=DisabledModeIdentityRepository,
        profile_type=RegistrationProfile,
        audited=False,
        new_values=_disabled_values,
    ),
    AuthenticationMode.AUTHENTICATED: _Variant(
        repository=AuthenticatedIdentityRepository,
        profile_type=AuthenticatedProfile,
        audited=True,
        new_values=_authenticated_values,
        refresh_values=_authenticated_refresh,
    ),
    AuthenticationMode.OAUTH: _Variant(
        repository=OAuthIdentityRepository,
        profile_type=OAuthProfile,
        audited=True,
        new_values=_oauth_values,
        refresh_values=_oauth_refresh,
    ),
}


class IdentityRecordStore:
    """Find-or-create access to the identity variant of one mode.

    Every write runs in a single transaction that inserts first (ignoring a
    conflict on the natural key), then refreshes, then reads. Concurrent first
    contact for the same key therefore yields one row and one audit id.
    """

    def __init__(
        self,
        db: DbSessionService,
        mode: AuthenticationMode,
        issuer: AuditGuidIssuer | None = None,
    ) -> None:
        self._db = db
        self._mode = mode
        self._variant = _VARIANTS[mode]
        self._issuer = issuer or AuditGuidIssuer()

    @property
    def mode(self) -> AuthenticationMode:
        return self._mode

    def find_or_create(
        self, natural_key: str, profile: IdentityProfile
    ) -> tuple[IdentityRecord, bool]:
        """Return the record for ``natural_key``, creating it on first contact.

        Existing records get their mutable fields refreshed from ``profile``;
        the natural key and audit id never change.

        Raises:
            TypeError: If ``profile`` does not belong to the store's mode.
            AuditStoreError: ID_EXHAUSTION, IDENTITY_CONFLICT or PERSISTENCE_FAILURE.
        """
        variant = self._variant
        if not isinstance(profile, variant.profile_type):
            raise TypeError(
                f"{type(profile).__name__} cannot be stored in {self._mode.value} mode"
            )

        budget = self._issuer.candidates() if variant.audited else None
        while True:
            try:
                return self._upsert(natural_key, profile, budget)
            except IntegrityError as exc:
                if not variant.audited:
                    raise AuditStoreError(
                        AuditStoreReason.IDENTITY_CONFLICT,
                        "Email is already bound to another identifier",
                    ) from exc
                logger.warning(
                    "Audit id taken concurrently for {}, retrying", natural_key
                )
            except SQLAlchemyError as exc:
                logger.exception("Identity upsert failed for {}", natural_key)
                raise AuditStoreError(
                    AuditStoreReason.PERSISTENCE_FAILURE, "Identity store unavailable"
                ) from exc

    def _upsert(
        self,
        natural_key: str,
        profile: IdentityProfile,
        budget: Iterator[str] | None,
    ) -> tuple[IdentityRecord, bool]:
        variant = self._variant
        with self._db.session_scope() as session:
            repo = variant.repository(session)
            created = False
            if repo.get(natural_key) is None:
                now = utc_now()
                values = {
                    **variant.new_values(natural_key, profile),
                    "created_at": now,
                    "last_seen_at": now,
                }
                if budget is not None:
                    values["audit_id"] = self._issuer.issue(repo.audit_id_exists, budget)
                created = repo.insert_if_absent(values)
            if not created:
                repo.refresh(natural_key, variant.refresh_values(profile))
            record = repo.get(natural_key)

        if created:
            logger.info(
                "Created {} identity {} (audit id {})",
                self._mode.value,
                natural_key,
                record.audit_id,
            )
        return record, created

    def touch(self, natural_key: str) -> IdentityRecord | None:
        """Bump last_seen_at on an existing record and return it."""
        try:
            with self._db.session_scope() as session:
                repo = self._variant.repository(session)
                if repo.get(natural_key) is None:
                    return None
                repo.refresh(natural_key, {})
                return repo.get(natural_key)
        except SQLAlchemyError as exc:
            raise AuditStoreError(
                AuditStoreReason.PERSISTENCE_FAILURE, "Identity store unavailable"
            ) from exc

    def get(self, natural_key: str) -> IdentityRecord | None:
        return self._read(lambda repo: repo.get(natural_key))

    def get_by_audit_id(self, audit_id: str) -> IdentityRecord | None:
        """Look up a record of the active variant by its audit id."""
        if self._mode is AuthenticationMode.DISABLED:
            return self.get(audit_id.lower())
        return self._read(lambda repo: repo.get_by_audit_id(audit_id))

    def _read(self, query: Callable[[IdentityRepository], Any]) -> Any:
        try:
            with self._db.session_scope() as session:
                return query(self._variant.repository(session))
        except SQLAlchemyError as exc:
            raise AuditStoreError(
                AuditStoreReason.PERSISTENCE_FAILURE, "Identity store unavailable"
            ) from exc

    def register_disabled_identity(
        self, profile: RegistrationProfile
    ) -> tuple[DisabledModeIdentity, bool]:
        """Register by email, returning the existing identifier for a known email."""
        if self._mode is not AuthenticationMode.DISABLED:
            raise TypeError("Registration is only available in disabled mode")

        try:
            # A second pass picks up a row committed by a concurrent registration
            for _ in range(2):
                try:
                    with self._db.session_scope() as session:
                        repo = DisabledModeIdentityRepository(session)
                        existing = repo.get_by_email(profile.email)
                        if existing is not None:
                            return existing, False
                        identifier = str(uuid.uuid4())
                        now = utc_now()
                        repo.insert_if_absent(
                            {
                                **_disabled_values(identifier, profile),
                                "created_at": now,
                                "last_seen_at": now,
                            }
                        )
                        record = repo.get(identifier)
                    logger.info("Registered disabled-mode identity {}", identifier)
                    return record, True
                except IntegrityError:
                    logger.info("Concurrent registration for {}, re-reading", profile.email)
        except SQLAlchemyError as exc:
            raise AuditStoreError(
                AuditStoreReason.PERSISTENCE_FAILURE, "Identity store unavailable"
            ) from exc
        raise AuditStoreError(
            AuditStoreReason.IDENTITY_CONFLICT, "Email is already bound to another identifier"
        )
