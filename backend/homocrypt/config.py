"""
Runtime configuration for homocrypt, read once from the environment.
"""

import os


# ── Key generation ─────────────────────────────────
DEFAULT_KEY_BITS = int(os.getenv("HOMOCRYPT_KEY_BITS", "2048"))
MIN_KEY_BITS = int(os.getenv("HOMOCRYPT_MIN_KEY_BITS", "32"))
MILLER_RABIN_ROUNDS = int(os.getenv("HOMOCRYPT_MR_ROUNDS", "16"))
# 0 means "retry until suitable primes are found"
KEYGEN_MAX_ATTEMPTS = int(os.getenv("HOMOCRYPT_KEYGEN_MAX_ATTEMPTS", "0")) or None

# ── Aggregation ────────────────────────────────────
MEAN_PRECISION = int(os.getenv("HOMOCRYPT_MEAN_PRECISION", "1000000"))

# ── Service ────────────────────────────────────────
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "HOMOCRYPT_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
    ).split(",")
    if origin.strip()
]
LOG_LEVEL = os.getenv("HOMOCRYPT_LOG_LEVEL", "INFO")
