"""Resolution of signing key references."""

import os
from pathlib import Path

ENV_PREFIX = "env:"
FILE_PREFIX = "file:"


def resolve_signing_key(ref: str) -> str:
    """Resolve ``env:NAME``, ``file:/path`` or a literal key.

    Raises:
        ValueError: If the reference points at nothing usable.
    """
    if ref.startswith(ENV_PREFIX):
        name = ref[len(ENV_PREFIX):]
        value = os.getenv(name)
        if not value:
            raise ValueError(f"Signing key environment variable {name} is not set")
        return value

    if ref.startswith(FILE_PREFIX):
        path = Path(ref[len(FILE_PREFIX):])
        try:
            value = path.read_text().strip()
        except OSError as e:
            raise ValueError(f"Cannot read signing key file {path}: {e}") from e
        if not value:
            raise ValueError(f"Signing key file {path} is empty")
        return value

    if not ref.strip():
        raise ValueError("Signing key reference is empty")
    return ref
