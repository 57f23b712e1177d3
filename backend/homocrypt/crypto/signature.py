"""
Paillier signatures.

The signer treats a hash h of the message as if it were a ciphertext and
splits it with the trapdoor into h = g^s1 * s2^n (mod n^2):

    s1 = L(h^lambda mod n^2) * mu mod n          (the "decryption" of h)
    s2 = (h * g^-s1 mod n) ^ (n^-1 mod lambda) mod n

Anyone holding the public key checks g^s1 * s2^n == h (mod n^2).  h is a
full-domain hash over Z_{n^2} bound to the public key, so a signature for
one message says nothing about another.
"""

import hashlib
import math
from dataclasses import dataclass

from homocrypt.crypto.codec import coerce_int, format_decimal
from homocrypt.crypto.errors import InvalidKeyMaterial
from homocrypt.crypto.keys import PrivateKey, PublicKey
from homocrypt.crypto.serialization import Serializable

_DOMAIN_TAG = b"homocrypt/paillier-signature/v1"


@dataclass(frozen=True)
class Signature(Serializable, kind="signature"):
    s1: int
    s2: int


def message_digest(pub: PublicKey, message) -> int:
    """Hash ``message`` onto a unit of Z_{n^2}, keyed by n."""
    message = coerce_int(message)
    width = (pub.n_sq.bit_length() + 7) // 8 + 16
    seed = b"|".join([_DOMAIN_TAG, format_decimal(pub.n).encode(), format_decimal(message).encode()])
    counter = 0
    while True:
        stream = b""
        block = 0
        while len(stream) < width:
            stream += hashlib.sha256(seed + counter.to_bytes(4, "big") + block.to_bytes(4, "big")).digest()
            block += 1
        h = int.from_bytes(stream[:width], "big") % pub.n_sq
        if h > 1 and math.gcd(h, pub.n) == 1:
            return h
        counter += 1


def sign(priv: PrivateKey, pub: PublicKey, message) -> Signature:
    h = message_digest(pub, message)
    x = pow(h, priv.l, pub.n_sq)
    if x % pub.n != 1:
        raise InvalidKeyMaterial("private key does not belong to this public key")
    s1 = ((x - 1) // pub.n * priv.m) % pub.n
    try:
        n_inv = pow(pub.n, -1, priv.l)
    except ValueError as exc:
        raise InvalidKeyMaterial("n is not invertible modulo lambda") from exc
    residue = (h * pow(pub.g, -s1, pub.n)) % pub.n
    s2 = pow(residue, n_inv, pub.n)
    return Signature(s1=s1, s2=s2)


def valid_signature(pub: PublicKey, message, signature: Signature) -> bool:
    if not 0 <= signature.s1 < pub.n or not 0 < signature.s2 < pub.n:
        return False
    h = message_digest(pub, message)
    lhs = (pow(pub.g, signature.s1, pub.n_sq) * pow(signature.s2, pub.n, pub.n_sq)) % pub.n_sq
    return lhs == h
