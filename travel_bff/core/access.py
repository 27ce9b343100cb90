"""Per-key access control for the smart cache.

All read/write authorisation for cache keys goes through
:meth:`AccessValidator.validate`, so tightening the rule only touches this
module.
"""
from __future__ import annotations

import logging
from typing import Collection, FrozenSet

__all__ = ["AUTHENTICATED", "AccessValidator"]

log = logging.getLogger(__name__)

AUTHENTICATED = "authenticated"


class AccessValidator:
    """Decides whether a cache key may be used under a permission set.

    Current rule: the permission set must contain ``authenticated`` and the
    key must be a non-empty string.
    """

    def __init__(self, required: Collection[str] = (AUTHENTICATED,)) -> None:
        self.required: FrozenSet[str] = frozenset(required)

    def validate(self, key: object, permissions: Collection[str]) -> bool:
        if not isinstance(key, str) or not key:
            log.debug("Cache access denied: empty or non-string key %r", key)
            return False
        try:
            granted = self.required.issubset(permissions)
        except TypeError:
            log.debug("Cache access denied: unusable permission set %r", permissions)
            return False
        if not granted:
            log.debug("Cache access denied for %s: missing %s", key, sorted(self.required - set(permissions)))
        return granted
