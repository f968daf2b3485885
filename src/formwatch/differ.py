"""Top-level snapshot differ.

Reports which top-level fields changed between two snapshots. A change
anywhere inside a repeated group is reported as the group itself; the
array extractor re-examines every item.
"""

import logging
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger("formwatch.differ")


def diff(prev: Mapping[str, Any], curr: Mapping[str, Any]) -> frozenset[str]:
    """Return the names of top-level fields whose values differ.

    Fields present in only one snapshot mean the schema drifted
    mid-session. They are logged and left out of the result.
    """
    changed: set[str] = set()
    for name, old in prev.items():
        if name not in curr:
            logger.warning("Field %r disappeared between snapshots; skipping", name)
            continue
        if old != curr[name]:
            changed.add(name)

    for name in curr:
        if name not in prev:
            logger.warning("Field %r appeared between snapshots; skipping", name)

    return frozenset(changed)
