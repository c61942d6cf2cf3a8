"""Secret stores that resolve credential values from various sources."""

from __future__ import annotations

import abc
import os
import re
import subprocess

SOURCE_ENV = "env"
SOURCE_COMMAND = "command"
SOURCE_PATH = "path"
SOURCE_VALUE = "value"

_ENV_REF = re.compile(r"\$\{([^}]*)\}|\$([A-Za-z0-9_]+)")


def _expand_env(text: str) -> str:
    """Expand $VAR and ${VAR}; undefined variables become empty."""
    return _ENV_REF.sub(
        lambda m: os.environ.get(m.group(1) if m.group(1) is not None else m.group(2), ""),
        text,
    )


class SecretStore(abc.ABC):
    """A source of secret values."""

    @abc.abstractmethod
    def resolve(self, key_name: str, key_value: str) -> str:
        """Resolve a credential's value.

        ``key_name`` names the kind of source (for example ``env``) and
        ``key_value`` locates the value within it.
        """


class HostSecretStore(SecretStore):
    """Resolves secrets from the local host: commands, files, environment or literals."""

    def resolve(self, key_name: str, key_value: str) -> str:
        kind = key_name.lower()
        if kind == SOURCE_COMMAND:
            parts = key_value.split(" ")
            result = subprocess.run(
                parts,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=True,
            )
            return result.stdout.decode("utf-8", errors="replace")
        if kind == SOURCE_PATH:
            with open(_expand_env(key_value), "rb") as handle:
                return handle.read().decode("utf-8", errors="replace")
        if kind == SOURCE_ENV:
            try:
                return os.environ[key_value]
            except KeyError:
                raise LookupError(
                    f"environment variable {key_value} is not defined"
                ) from None
        if kind == SOURCE_VALUE:
            return key_value
        raise ValueError(f"invalid value source: {key_name}")