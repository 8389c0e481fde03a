"""
Binds a claimed sha256 hash to the query text a client supplied.
"""

import hashlib
import hmac

from shared.errors import HashMismatch


def sha256_hex(query: str) -> str:
    """Hex-encoded sha256 digest of the UTF-8 query text."""
    return hashlib.sha256(query.encode("utf-8")).hexdigest()


class IntegrityVerifier:
    """Constant-time check that ``sha256(query) == claimed hash``."""

    def matches(self, query: str, claimed_hash: str) -> bool:
        digest = sha256_hex(query).encode("ascii")
        # compare_digest takes the same time wherever the first differing byte is
        return hmac.compare_digest(digest, claimed_hash.lower().encode("utf-8"))

    def verify(self, query: str, claimed_hash: str) -> None:
        """Raise HashMismatch unless the query hashes to ``claimed_hash``."""
        if not self.matches(query, claimed_hash):
            raise HashMismatch(claimed_hash)
