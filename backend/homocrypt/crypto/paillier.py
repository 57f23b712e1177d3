import logging
import math
from typing import Callable, Iterable, Optional, Tuple

from homocrypt.config import DEFAULT_KEY_BITS, KEYGEN_MAX_ATTEMPTS, MEAN_PRECISION, MIN_KEY_BITS
from homocrypt.crypto.codec import coerce_int, decode_signed, encode_signed
from homocrypt.crypto.errors import InvalidKeyMaterial, OutOfRange, PrimalityExhausted
from homocrypt.crypto.keys import PrivateKey, PublicKey
from homocrypt.crypto.primes import generate_prime, random_unit

logger = logging.getLogger(__name__)


def _L(u: int, n: int) -> int:
    return (u - 1) // n


def generate_keypair(
    bits: int = DEFAULT_KEY_BITS,
    *,
    prime_source: Optional[Callable[[int], int]] = None,
    max_attempts: Optional[int] = None,
) -> Tuple[PrivateKey, PublicKey]:
    """Generate a Paillier keypair whose modulus n has ``bits`` bits.

    ``prime_source(bits)`` replaces the default prime generator (tests use it
    to script the draws).  Prime pairs are redrawn until p != q and
    gcd(pq, (p-1)(q-1)) == 1.  With ``max_attempts`` (or
    HOMOCRYPT_KEYGEN_MAX_ATTEMPTS) set, more failed pairs than that raise
    ``PrimalityExhausted``; so does a prime source that runs dry.
    """
    if bits < MIN_KEY_BITS or bits % 2:
        raise OutOfRange(f"key size must be an even number of bits >= {MIN_KEY_BITS}, got {bits}")
    draw = prime_source or generate_prime
    limit = max_attempts if max_attempts is not None else KEYGEN_MAX_ATTEMPTS

    logger.info(f"Generating {bits}-bit Paillier keypair")
    attempt = 0
    while True:
        if limit is not None and attempt >= limit:
            raise PrimalityExhausted(f"no suitable prime pair after {attempt} attempts")
        attempt += 1
        try:
            p = draw(bits // 2)
            q = draw(bits // 2)
        except StopIteration as exc:
            raise PrimalityExhausted(f"prime source exhausted after {attempt - 1} attempts") from exc
        if p != q and math.gcd(p * q, (p - 1) * (q - 1)) == 1:
            break
        logger.debug(f"Rejected prime pair on attempt {attempt}, redrawing")

    n = p * q
    lam = math.lcm(p - 1, q - 1)
    pub = PublicKey(n=n, g=n + 1)
    try:
        mu = pow(_L(pow(pub.g, lam, pub.n_sq), n), -1, n)
    except ValueError as exc:
        raise InvalidKeyMaterial("L(g^lambda mod n^2) is not invertible modulo n") from exc
    logger.info(f"Keypair generated after {attempt} attempt(s)")
    return PrivateKey(l=lam, m=mu), pub


def encrypt(pub: PublicKey, m, r: int | None = None) -> int:
    m = coerce_int(m)
    if not 0 <= m < pub.n:
        raise OutOfRange("message out of range")
    if r is None:
        r = random_unit(pub.n)
    elif not 1 <= r < pub.n or math.gcd(r, pub.n) != 1:
        raise OutOfRange("r must be a unit in [1, n)")
    c1 = pow(pub.g, m, pub.n_sq)
    c2 = pow(r, pub.n, pub.n_sq)
    return (c1 * c2) % pub.n_sq


def decrypt(priv: PrivateKey, pub: PublicKey, c) -> int:
    c = _check_ciphertext(pub, c)
    x = pow(c, priv.l, pub.n_sq)
    if x % pub.n != 1:
        raise InvalidKeyMaterial("private key does not belong to this public key")
    return (_L(x, pub.n) * priv.m) % pub.n


def encrypt_signed(pub: PublicKey, x, r: int | None = None) -> int:
    return encrypt(pub, encode_signed(pub, x), r)


def decrypt_signed(priv: PrivateKey, pub: PublicKey, c) -> int:
    return decode_signed(pub, decrypt(priv, pub, c))


def _check_ciphertext(pub: PublicKey, c) -> int:
    c = coerce_int(c)
    if not 0 <= c < pub.n_sq:
        raise OutOfRange("ciphertext out of range")
    if math.gcd(c, pub.n) != 1:
        raise OutOfRange("ciphertext is not a unit modulo n^2")
    return c


def _check_constant(pub: PublicKey, k) -> int:
    k = coerce_int(k)
    if not -pub.n < k < pub.n:
        raise OutOfRange("constant must satisfy |k| < n")
    return k % pub.n


def add(pub: PublicKey, c1, c2) -> int:
    return (_check_ciphertext(pub, c1) * _check_ciphertext(pub, c2)) % pub.n_sq


def add_const(pub: PublicKey, c, k) -> int:
    """Ciphertext of plaintext(c) + k; negative k subtracts modulo n."""
    c = _check_ciphertext(pub, c)
    return (c * pow(pub.g, _check_constant(pub, k), pub.n_sq)) % pub.n_sq


def mul_const(pub: PublicKey, c, k) -> int:
    """Ciphertext of plaintext(c) * k modulo n."""
    c = _check_ciphertext(pub, c)
    return pow(c, _check_constant(pub, k), pub.n_sq)


def aggregate(pub: PublicKey, ciphertexts: Iterable) -> int:
    """Homomorphic sum, folded from a fresh encryption of zero."""
    agg = encrypt(pub, 0)
    for c in ciphertexts:
        agg = add(pub, agg, c)
    return agg


def mean(pub: PublicKey, ciphertexts: Iterable, precision: int | None = None) -> Tuple[int, int]:
    """Encrypted mean for a party that only knows the ciphertexts and their count.

    The homomorphic sum is multiplied by round(precision / count), so the
    key holder recovers approximately ``decrypt(c) / precision == mean``.
    The error is at most ``sum * 0.5 / precision``.
    """
    ciphertexts = list(ciphertexts)
    count = len(ciphertexts)
    if count == 0:
        raise OutOfRange("cannot average an empty dataset")
    precision = MEAN_PRECISION if precision is None else coerce_int(precision)
    scale = (2 * precision + count) // (2 * count)
    if scale < 1:
        raise OutOfRange(f"precision {precision} is too small for {count} values")
    total = aggregate(pub, ciphertexts)
    logger.debug(f"Averaging {count} ciphertexts with precision {precision}")
    return mul_const(pub, total, scale), precision
