"""Toolchain release automation."""

from .errors import ReleaseError
from .model import CommitDiff, TaggerSession
from .version_file import detect_change, extract_version
from .workflow import TaggerSettings, create_tag, publish_release, run_release

__all__ = [
    "CommitDiff",
    "ReleaseError",
    "TaggerSession",
    "TaggerSettings",
    "create_tag",
    "detect_change",
    "extract_version",
    "publish_release",
    "run_release",
]
