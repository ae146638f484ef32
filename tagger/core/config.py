"""Typed configuration loading and access.

This module provides dataclasses for the optional `.tagger.toml` file found at
the repository root. Every key has a default matching the stock
`lean-toolchain` release workflow, so most repositories need no file at all.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict

__all__ = [
    "TaggerConfig",
    "VersionFileConfig",
    "GitConfig",
    "IdentityConfig",
    "ReleaseConfig",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    "CONFIG_FILE_NAME",
    "DEFAULT_VERSION_FILE",
    "DEFAULT_BRANCH",
    "DEFAULT_REMOTE",
    "BOT_NAME",
    "BOT_EMAIL",
]

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

CONFIG_FILE_NAME = ".tagger.toml"

DEFAULT_VERSION_FILE = "lean-toolchain"

DEFAULT_BRANCH = "master"
DEFAULT_REMOTE = "origin"
DEFAULT_BASE_REF = "HEAD~1"
DEFAULT_HEAD_REF = "HEAD"

# Automation identity used as the tag author
BOT_NAME = "github-actions[bot]"
BOT_EMAIL = "github-actions[bot]@users.noreply.github.com"

DEFAULT_TAG_MESSAGE = "Release {version}"
DEFAULT_RELEASE_BODY = "Automated release for Lean version {version}"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class VersionFileConfig:
    """Location of the toolchain pin file (repository-relative, posix separators)."""

    path: str = DEFAULT_VERSION_FILE


@dataclass(frozen=True, slots=True)
class GitConfig:
    """Branch, remote and the commit range inspected for changes."""

    branch: str = DEFAULT_BRANCH
    remote: str = DEFAULT_REMOTE
    base: str = DEFAULT_BASE_REF
    head: str = DEFAULT_HEAD_REF


@dataclass(frozen=True, slots=True)
class IdentityConfig:
    name: str = BOT_NAME
    email: str = BOT_EMAIL


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Release host settings.

    Templates substitute the literal `{version}` placeholder; other braces are
    kept verbatim.
    """

    repo: str | None = None  # owner/name
    tag_message: str = DEFAULT_TAG_MESSAGE
    body: str = DEFAULT_RELEASE_BODY


@dataclass(frozen=True, slots=True)
class TaggerConfig:
    """Main configuration container."""

    version_file: VersionFileConfig = field(default_factory=VersionFileConfig)
    git: GitConfig = field(default_factory=GitConfig)
    identity: IdentityConfig = field(default_factory=IdentityConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> TaggerConfig:
        """Create TaggerConfig from a mapping (parsed TOML).

        Raises:
            ValueError: A table or key has the wrong type.
        """
        version_file = _section(data, "version_file")
        git = _section(data, "git")
        identity = _section(data, "identity")
        release = _section(data, "release")

        return cls(
            version_file=VersionFileConfig(
                path=_text(version_file, "version_file", "path") or DEFAULT_VERSION_FILE,
            ),
            git=GitConfig(
                branch=_text(git, "git", "branch") or DEFAULT_BRANCH,
                remote=_text(git, "git", "remote") or DEFAULT_REMOTE,
                base=_text(git, "git", "base") or DEFAULT_BASE_REF,
                head=_text(git, "git", "head") or DEFAULT_HEAD_REF,
            ),
            identity=IdentityConfig(
                name=_text(identity, "identity", "name") or BOT_NAME,
                email=_text(identity, "identity", "email") or BOT_EMAIL,
            ),
            release=ReleaseConfig(
                repo=_text(release, "release", "repo"),
                tag_message=_text(release, "release", "tag_message") or DEFAULT_TAG_MESSAGE,
                body=_text(release, "release", "body") or DEFAULT_RELEASE_BODY,
            ),
        )


def _section(data: Mapping[str, object], name: str) -> StrDict:
    value = data.get(name)
    if value is None:
        return {}
    table = as_str_dict(value)
    if table is None:
        raise ValueError(f"[{name}] must be a table")
    return table


def _text(table: StrDict, section: str, key: str) -> str | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{section}.{key} must be a string")
    return value.strip() or None


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[TaggerConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to `.tagger.toml`

    Returns:
        Ok(TaggerConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(TaggerConfig.from_dict(result.value))
    except ValueError as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[TaggerConfig, ConfigError]:
    """Load config from file, or return the default config if it doesn't exist.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(TaggerConfig())
    return load_config(path)
