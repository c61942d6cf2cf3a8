"""Schema versions and their semantic-version validation."""

from __future__ import annotations

import json
import re

_SEMVER_RE = re.compile(
    r"v?([0-9]+)(\.[0-9]+)?(\.[0-9]+)?"
    r"(-([0-9A-Za-z\-]+(\.[0-9A-Za-z\-]+)*))?"
    r"(\+([0-9A-Za-z\-]+(\.[0-9A-Za-z\-]+)*))?"
)
_SCHEMA_VERSION_RE = re.compile(r"^cnab-[a-z]+-(.*)")
_INT64_MAX = 2**63 - 1


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


class InvalidSchemaVersion(ValueError):
    """Raised when a schema version is missing or not semantic."""


def _check_semver(text: str) -> None:
    match = _SEMVER_RE.fullmatch(text)
    if match is None:
        raise ValueError("Invalid Semantic Version")
    for segment in (match.group(1), match.group(2), match.group(3)):
        if segment is None:
            continue
        digits = segment.lstrip(".")
        if int(digits) > _INT64_MAX:
            raise ValueError(
                "Error parsing version segment: "
                f"strconv.ParseInt: parsing {_quote(digits)}: value out of range"
            )


class Version(str):
    """The schema version of an object."""

    def validate(self) -> None:
        """Raise InvalidSchemaVersion unless this is a semantic version."""
        text = str(self)
        try:
            _check_semver(text)
        except ValueError as err:
            raise InvalidSchemaVersion(
                f"invalid schema version {_quote(text)}: {err}"
            ) from None


def get_semver(schema_version: str) -> Version:
    """Strip the ``cnab-<kind>-`` prefix from a schema version and validate the rest."""
    match = _SCHEMA_VERSION_RE.match(schema_version)
    if match is None:
        raise InvalidSchemaVersion(
            f"no semver submatch for schemaVersion {_quote(schema_version)} "
            f"using regex {_quote(_SCHEMA_VERSION_RE.pattern)}"
        )
    version = Version(match.group(1))
    version.validate()
    return version