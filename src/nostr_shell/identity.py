"""Signing identity for the shell session.

Loads the user's keypair from the environment or generates an ephemeral one.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from nostr_sdk import Keys, NostrSdkError

from .errors import StartupError

SECRET_KEY_ENV = "SECRET_KEY"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Keypair shared read-only by every command in the session."""

    public_key: str
    npub: str
    secret_key: str = field(repr=False)

    @classmethod
    def from_keys(cls, keys: Keys) -> "Identity":
        return cls(
            public_key=keys.public_key().to_hex(),
            npub=keys.public_key().to_bech32(),
            secret_key=keys.secret_key().to_hex(),
        )


def load_identity(environ: Mapping[str, str] | None = None) -> tuple[Identity, bool]:
    """Load identity from SECRET_KEY or generate a fresh one.

    CONTRACT:
      Inputs:
        - environ: mapping of environment variables (defaults to os.environ)

      Outputs:
        - (identity, generated): generated is True when no secret was supplied

      Invariants:
        - SECRET_KEY may be nsec bech32 or 64-character hex
        - Blank SECRET_KEY is treated as absent
        - Generated identities are never persisted

      Raises:
        - StartupError: SECRET_KEY present but not a valid secret key
    """
    env = os.environ if environ is None else environ
    secret = env.get(SECRET_KEY_ENV, "").strip()

    if not secret:
        logger.debug("No %s in environment, generating ephemeral keys", SECRET_KEY_ENV)
        return Identity.from_keys(Keys.generate()), True

    try:
        keys = Keys.parse(secret)
    except NostrSdkError as e:
        raise StartupError(f"{SECRET_KEY_ENV} is not a valid secret key: {e}") from None

    return Identity.from_keys(keys), False
