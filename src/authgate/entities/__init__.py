"""Identity record variants.

The three variants share no behaviour beyond timestamps; ``IdentityRecord``
is the tagged union over them, discriminated by ``kind``.
"""

from typing import Annotated

from pydantic import Field

from .core.authenticated_identity import (
    AuthenticatedIdentity,
    AuthenticatedIdentityRepository,
    AuthenticatedIdentityTable,
)
from .core.disabled_identity import (
    DisabledModeIdentity,
    DisabledModeIdentityRepository,
    DisabledModeIdentityTable,
)
from .core.oauth_identity import (
    OAuthIdentity,
    OAuthIdentityRepository,
    OAuthIdentityTable,
)

IdentityRecord = Annotated[
    DisabledModeIdentity | AuthenticatedIdentity | OAuthIdentity,
    Field(discriminator="kind"),
]

__all__ = [
    "AuthenticatedIdentity",
    "AuthenticatedIdentityRepository",
    "AuthenticatedIdentityTable",
    "DisabledModeIdentity",
    "DisabledModeIdentityRepository",
    "DisabledModeIdentityTable",
    "IdentityRecord",
    "OAuthIdentity",
    "OAuthIdentityRepository",
    "OAuthIdentityTable",
]
