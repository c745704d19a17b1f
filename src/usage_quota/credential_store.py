# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

# src/usage_quota/credential_store.py
"""
OAuth credential lookup.

Credentials are owned by the coding assistant itself; this module only reads
them. Lookup is an ordered fallback over resolver strategies:

1. macOS Keychain (only where the `security` tool is available)
2. <config-dir>/.credentials.json

Each resolver returns the raw payload bytes or None. A resolver failing for any
reason is a soft miss; a payload that was found but does not parse is an
error, since the source exists but is corrupt.
"""

import json
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .core.constants import KEYCHAIN_BINARY, KEYCHAIN_TIMEOUT
from .core.errors import CredentialCorrupt, CredentialUnavailable
from .core.types import Credentials, Profile

lib_logger = logging.getLogger("usage_quota")


def keychain_available() -> bool:
    """Whether the macOS Keychain can be queried on this machine."""
    return sys.platform == "darwin" and os.path.exists(KEYCHAIN_BINARY)


# =============================================================================
# RESOLVERS
# =============================================================================


class KeychainResolver:
    """Reads the credential JSON stored as a generic password in the Keychain."""

    name = "keychain"

    def __init__(
        self,
        binary: str = KEYCHAIN_BINARY,
        timeout: float = KEYCHAIN_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        self.binary = binary
        self.timeout = timeout
        self.logger = logger or lib_logger

    def lookup(self, profile: Profile) -> Optional[bytes]:
        service = profile.keychain_service
        try:
            result = subprocess.run(
                [self.binary, "find-generic-password", "-s", service, "-w"],
                capture_output=True,
                timeout=self.timeout,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            self.logger.debug(f"Keychain lookup for {service!r} failed: {e}")
            return None

        if result.returncode != 0:
            self.logger.debug(
                f"Keychain lookup for {service!r} exited with {result.returncode}"
            )
            return None

        payload = result.stdout.strip()
        return payload or None


class CredentialsFileResolver:
    """Reads <config-dir>/.credentials.json."""

    name = "file"

    def __init__(
        self,
        home: Optional[Path] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.home = home
        self.logger = logger or lib_logger

    def lookup(self, profile: Profile) -> Optional[bytes]:
        try:
            path = profile.credentials_path(self.home)
        except RuntimeError as e:
            # Path.home() cannot be determined
            self.logger.debug(f"Cannot locate home directory: {e}")
            return None

        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            self.logger.debug(f"Read credentials file {path} failed: {e}")
            return None


# =============================================================================
# STORE
# =============================================================================


class CredentialStore:
    """
    Tries each resolver in order and parses the first payload found.

    Usage:
        store = CredentialStore.default()
        creds = store.resolve(Profile.from_env())
    """

    def __init__(self, resolvers: Sequence, logger: Optional[logging.Logger] = None):
        self.resolvers = list(resolvers)
        self.logger = logger or lib_logger

    @classmethod
    def default(
        cls,
        logger: Optional[logging.Logger] = None,
        home: Optional[Path] = None,
        use_keychain: Optional[bool] = None,
    ) -> "CredentialStore":
        """
        Build the platform's resolver chain.

        Args:
            logger: Sink for diagnostic messages
            home: Home directory override for the file resolver
            use_keychain: Force the Keychain resolver on/off; None detects it
        """
        if use_keychain is None:
            use_keychain = keychain_available()

        resolvers: List = []
        if use_keychain:
            resolvers.append(KeychainResolver(logger=logger))
        resolvers.append(CredentialsFileResolver(home=home, logger=logger))
        return cls(resolvers, logger=logger)

    def resolve(self, profile: Profile) -> Credentials:
        """
        Resolve credentials for a profile.

        Raises:
            CredentialUnavailable: No resolver found a payload
            CredentialCorrupt: A payload was found but is not valid UTF-8 JSON
        """
        for resolver in self.resolvers:
            payload = resolver.lookup(profile)
            if payload is None:
                continue

            try:
                creds = Credentials.from_payload(json.loads(payload))
            except ValueError as e:
                # includes JSON syntax errors and undecodable bytes
                raise CredentialCorrupt(resolver.name, str(e)) from e

            self.logger.debug(f"Credentials resolved from {resolver.name}")
            return creds

        tried = ", ".join(r.name for r in self.resolvers) or "none"
        raise CredentialUnavailable(f"no credentials found (tried: {tried})")
