from .verifier import IntegrityVerifier, sha256_hex

__all__ = ["IntegrityVerifier", "sha256_hex"]
