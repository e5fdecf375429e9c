from __future__ import annotations

import secrets
from typing import Protocol

from ..core.constants import SESSION_TOKEN_BYTES


class TokenGenerator(Protocol):
    def __call__(self) -> str:
        raise NotImplementedError


class HexTokenGenerator:
    """Fixed-length hex tokens from the OS CSPRNG; stateless and thread-safe."""

    def __init__(self, nbytes: int = SESSION_TOKEN_BYTES):
        self._nbytes = int(nbytes)

    @property
    def length(self) -> int:
        return self._nbytes * 2

    def __call__(self) -> str:
        return secrets.token_hex(self._nbytes)
