import math
from dataclasses import dataclass, field

from homocrypt.crypto.errors import InvalidKeyMaterial
from homocrypt.crypto.serialization import Serializable


@dataclass(frozen=True)
class PublicKey(Serializable, kind="public_key"):
    n: int
    g: int

    def __post_init__(self):
        if self.n < 3:
            raise InvalidKeyMaterial("modulus n must be at least 3")
        if not 0 < self.g < self.n_sq or math.gcd(self.g, self.n) != 1:
            raise InvalidKeyMaterial("generator g must be a unit modulo n^2")

    @property
    def n_sq(self) -> int:
        return self.n * self.n

    @property
    def half(self) -> int:
        """Offset used by the signed-integer encoding."""
        return self.n // 2


@dataclass(frozen=True)
class PrivateKey(Serializable, kind="private_key"):
    """Decryption trapdoor: lambda (``l``) and mu (``m``).

    The key is only usable together with its ``PublicKey``, which carries n.
    """

    l: int = field(repr=False)
    m: int = field(repr=False)

    def __post_init__(self):
        if self.l <= 0 or self.m <= 0:
            raise InvalidKeyMaterial("lambda and mu must be positive")
