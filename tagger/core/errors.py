"""Error codes for CLI exit status.

Every failed release run maps to one of these codes, so a CI job report shows
which kind of failure stopped the run.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for tagger commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success (release published, or run skipped)
    - 1: User error (bad command line input)
    - 2: Environment error (bad config, malformed version file, gh missing)
    - 3: Git error (diff, tag or push failed)
    - 4: Network error (API unreachable or failed)
    - 5: Auth error (missing token, insufficient permission)
    - 6: Tag exists (tag or release already published)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    GIT_ERROR = 3
    NETWORK_ERROR = 4
    AUTH_ERROR = 5
    TAG_EXISTS = 6
