from __future__ import annotations

import re
from typing import List, Optional

DEFAULT_FEATURE_LIMIT = 20

_BULLET = re.compile(r"^\s*(?:[-*]|\d+[.)])\s+(?P<text>.+?)\s*$")
_HEADING = re.compile(r"^\s*#{1,6}(?:\s|$)")


def extract_features(markdown: Optional[str], limit: int = DEFAULT_FEATURE_LIMIT) -> List[str]:
    """Return the first contiguous bullet list in ``markdown``.

    Items keep their order and case. The list ends at the first blank line,
    heading or non-indented prose line; continuation lines indented under an
    item are skipped. At most ``limit`` items are returned.
    """
    if not markdown or limit <= 0:
        return []

    features: List[str] = []
    in_list = False
    for line in markdown.splitlines():
        bullet = _BULLET.match(line)
        if bullet:
            in_list = True
            features.append(bullet.group("text"))
            if len(features) >= limit:
                break
            continue

        if not in_list:
            continue
        if not line.strip() or _HEADING.match(line):
            break
        if line[:1] in (" ", "\t"):
            continue
        break

    return features
