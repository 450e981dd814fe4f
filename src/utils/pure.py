import re
from typing import List, Optional

_URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
# "./", bare slashes and blanks in front of the path
_LEADING_JUNK = re.compile(r"^(?:\./+|/+|\s+)+")
_SEPARATORS = re.compile(r"[/\\]+")
_DRIVE_LETTER = re.compile(r"^[a-zA-Z]:")

IMAGES_DIR = "images"


def _segments(path: str) -> List[str]:
    # names keep their inner blanks, blank-only segments are dropped
    return [seg for seg in _SEPARATORS.split(path) if seg.strip()]


def clean_image_path(path: Optional[str]) -> str:
    """
    Canonicalize a user supplied image path into a stable relative form.

    Rules, first match wins:
        - empty or blank input gives "".
        - http(s) URLs and data URIs are returned as-is.
        - leading "./" sequences and slashes are dropped, the rest is split
          on / or \\ and blank segments are discarded.
        - anything below an "images" folder (any case) is re-rooted at
          "images/"; a bare "images" folder gives "".
        - Windows paths (drive letter or backslashes) keep only the file name,
          placed under "images/".
        - a lone file name is placed under "images/".
        - other relative paths are kept.

    Applying it twice gives the same result as applying it once.
    """
    if not path:
        return ""
    trimmed = path.strip()
    if not trimmed:
        return ""
    if _URL_PATTERN.match(trimmed) or trimmed.startswith("data:"):
        return trimmed

    trimmed = _LEADING_JUNK.sub("", trimmed)
    segments = _segments(trimmed)

    lowered = [seg.lower() for seg in segments]
    if IMAGES_DIR in lowered:
        rest = "/".join(segments[lowered.index(IMAGES_DIR) + 1 :])
        return f"{IMAGES_DIR}/{rest}".rstrip() if rest else ""

    if _DRIVE_LETTER.match(trimmed) or "\\" in trimmed:
        return f"{IMAGES_DIR}/{segments[-1]}".rstrip() if segments else ""

    if len(segments) == 1:
        return f"{IMAGES_DIR}/{segments[0]}".rstrip()
    return trimmed
