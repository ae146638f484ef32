from __future__ import annotations

import re
from pathlib import Path

from tagger.core.result import Err, Ok, Result
from tagger.release.errors import ReleaseError, config_error
from tagger.release.model import CommitDiff


# Characters and sequences git refuses in a ref name component (git check-ref-format).
_BAD_REF_RE = re.compile(r"[\x00-\x20\x7f~^:?*\[\\]|\.\.|@\{|//")


def detect_change(diff: CommitDiff, version_file: str) -> bool:
    """True iff the version file is one of the paths the commit changed."""
    return diff.contains(version_file)


def extract_version(content: str) -> Result[str, ReleaseError]:
    """Extract the version from `<identifier>:<version>` content.

    Everything after the first colon is kept and all whitespace, including
    embedded newlines, is removed. `leanprover/lean4: v4.10.0\\n` gives
    `v4.10.0`.
    """
    if ":" not in content:
        return Err(
            config_error(
                "version file has no ':' separator",
                hint="expected '<identifier>:<version>', e.g. leanprover/lean4:v4.10.0",
            )
        )

    _, rest = content.split(":", 1)
    version = "".join(rest.split())

    if not version:
        return Err(config_error("version file has an empty version after ':'"))
    if ":" in version:
        return Err(
            config_error(
                f"version contains a second ':': {version}",
                hint="expected exactly one ':' between identifier and version",
            )
        )

    valid = validate_tag_name(version)
    if isinstance(valid, Err):
        return valid
    return Ok(version)


def validate_tag_name(name: str) -> Result[None, ReleaseError]:
    if (
        _BAD_REF_RE.search(name)
        or name.startswith(("-", "/", "."))
        or name.endswith(("/", ".", ".lock"))
        or name == "@"
        or "/." in name
    ):
        return Err(config_error(f"version is not a valid git tag name: {name}"))
    return Ok(None)


def read_version_file(repo_root: Path, rel_path: str) -> Result[str, ReleaseError]:
    path = repo_root / rel_path
    try:
        return Ok(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(config_error(f"version file not found: {rel_path}", hint=str(path)))
    except (OSError, UnicodeDecodeError) as e:
        return Err(config_error(f"failed to read version file: {e}", hint=str(path)))


def read_version(repo_root: Path, rel_path: str) -> Result[str, ReleaseError]:
    """Read the version file and extract its version."""
    content = read_version_file(repo_root, rel_path)
    if isinstance(content, Err):
        return content
    return extract_version(content.value)
