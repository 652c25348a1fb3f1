"""Type aliases used across csvbridge."""

from __future__ import annotations

from typing import Any

JsonDict = dict[str, Any]
SessionId = str
OwnerId = str
