"""Version string validation.

cargo-jump never computes a version; it only checks that the one it was
given is something the workspace's package manager will accept.
"""

from __future__ import annotations

import semver
from packaging.version import InvalidVersion as PEP440Error
from packaging.version import Version

from .errors import InvalidVersion
from .models import Ecosystem


def parse_semver(version_str: str) -> semver.Version:
    """Parse a full SemVer 2.0 version, as Cargo requires.

    Unlike Python versions, Cargo does not accept partial versions, so
    "1.2" is rejected rather than padded.
    """
    try:
        return semver.Version.parse(version_str)
    except ValueError as exc:
        raise InvalidVersion(
            f"{version_str!r} is not a valid SemVer version (e.g. 1.2.3)"
        ) from exc


def parse_pep440(version_str: str) -> Version:
    """Parse a PEP 440 version, as pyproject.toml requires."""
    try:
        return Version(version_str)
    except PEP440Error as exc:
        raise InvalidVersion(
            f"{version_str!r} is not a valid PEP 440 version (e.g. 1.2.3)"
        ) from exc


def validate_version(version_str: str, ecosystem: Ecosystem) -> str:
    """Check `version_str` for `ecosystem` and return it unchanged.

    Examples:
        validate_version("1.2.3-rc.1", Ecosystem.CARGO) → "1.2.3-rc.1"
        validate_version("1.2.3rc1", Ecosystem.UV) → "1.2.3rc1"
        validate_version("1.2", Ecosystem.CARGO) → InvalidVersion
    """
    if ecosystem is Ecosystem.CARGO:
        parse_semver(version_str)
    else:
        parse_pep440(version_str)
    return version_str
