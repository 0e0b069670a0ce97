from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from passlib.context import CryptContext

from verified_auth.settings import get_settings


@dataclass(frozen=True)
class HashConfig:
    """scrypt cost: N = 2**log_n, r = block_size, p = parallelism."""

    log_n: int = 15
    block_size: int = 8
    parallelism: int = 1


def default_hash_config() -> HashConfig:
    settings = get_settings()
    return HashConfig(
        log_n=settings.hash_log_n,
        block_size=settings.hash_block_size,
        parallelism=settings.hash_parallelism,
    )


@lru_cache(maxsize=8)
def _context(config: HashConfig) -> CryptContext:
    # scrypt is the only scheme we use; its hashes carry their own parameters.
    return CryptContext(
        schemes=["scrypt"],
        scrypt__default_rounds=config.log_n,
        scrypt__block_size=config.block_size,
        scrypt__parallelism=config.parallelism,
    )


def hash_secret(plain: str, *, config: HashConfig | None = None) -> str:
    """
    Hash a password or verification code with scrypt and a fresh salt.
    If config is None, the cost comes from settings.
    """
    if config is None:
        config = default_hash_config()
    return _context(config).hash(plain)


def verify_secret(plain: str, hashed: str) -> bool:
    """
    Verify a secret against an scrypt hash (constant-time comparison).
    Malformed or foreign hashes never verify.
    """
    try:
        return _context(HashConfig()).verify(plain, hashed)
    except (ValueError, TypeError):
        return False
