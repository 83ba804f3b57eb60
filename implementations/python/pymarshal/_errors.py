"""Error codes and the exception class raised by every decode path.

Every failure is terminal to the top-level call: the first error found
anywhere in the descent is raised to the caller untouched.  Callers
branch on `.code`, never on the message text.
"""

from __future__ import annotations

from typing import Optional

# ── Error codes ──────────────────────────────────────────────
# Value equals name, so codes read the same in logs and in tests.

ERR_SOURCE_EXHAUSTED: str = "ERR_SOURCE_EXHAUSTED"  # no byte left for a tag
ERR_TRUNCATED: str = "ERR_TRUNCATED"                # short fixed field / payload
ERR_INVALID_LENGTH: str = "ERR_INVALID_LENGTH"      # negative or over-limit size
ERR_UNKNOWN_TAG: str = "ERR_UNKNOWN_TAG"            # byte outside the tag set
ERR_RECURSION_LIMIT: str = "ERR_RECURSION_LIMIT"    # nesting exceeds max_depth
ERR_TRAILING_DATA: str = "ERR_TRAILING_DATA"        # bytes left after the root
ERR_KEY_TYPE: str = "ERR_KEY_TYPE"                  # key unusable as a dict key
ERR_DUP_KEY: str = "ERR_DUP_KEY"                    # repeated key, strict policy

ALL_CODES = (
    ERR_SOURCE_EXHAUSTED,
    ERR_TRUNCATED,
    ERR_INVALID_LENGTH,
    ERR_UNKNOWN_TAG,
    ERR_RECURSION_LIMIT,
    ERR_TRAILING_DATA,
    ERR_KEY_TYPE,
    ERR_DUP_KEY,
)


class MarshalError(Exception):
    """Exception for marshal decoding errors.

    The `.code` attribute is one of the ERR_* strings above.  For
    ERR_UNKNOWN_TAG, `.tag` holds the offending byte as an int.
    """

    def __init__(self, code: str, msg: str = "", *,
                 tag: Optional[int] = None) -> None:
        super().__init__(msg or code)
        self.code = code
        self.tag = tag
