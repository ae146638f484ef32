"""Tag and publish a release when a repository's toolchain pin changes."""

__version__ = "0.1.0"
