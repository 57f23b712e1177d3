import math
import secrets

from homocrypt.config import MILLER_RABIN_ROUNDS
from homocrypt.crypto.errors import OutOfRange

SMALL_PRIMES = [2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59, 61, 67, 71]


def is_probable_prime(n: int, rounds: int = MILLER_RABIN_ROUNDS) -> bool:
    """Miller-Rabin test; a composite passes with probability at most 4**-rounds."""
    if n < 2:
        return False
    if n in SMALL_PRIMES:
        return True
    if any((n % p) == 0 for p in SMALL_PRIMES):
        return False

    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1

    for _ in range(rounds):
        a = secrets.randbelow(n - 3) + 2
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


def generate_prime(bits: int) -> int:
    """Draw a random probable prime of exactly ``bits`` bits.

    The two top bits are forced so that the product of two such primes
    always has exactly ``2 * bits`` bits.
    """
    if bits < 3:
        raise OutOfRange(f"cannot draw a {bits}-bit prime")
    while True:
        candidate = secrets.randbits(bits) | 1 | (0b11 << (bits - 2))
        if is_probable_prime(candidate):
            return candidate


def random_unit(n: int) -> int:
    """Uniform r in [1, n) with gcd(r, n) == 1."""
    while True:
        r = secrets.randbelow(n)
        if r >= 1 and math.gcd(r, n) == 1:
            return r
