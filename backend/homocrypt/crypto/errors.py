"""Error taxonomy for the Paillier engine.

Every error derives from ``ValueError`` so callers that only care about
"bad input" can keep catching that.
"""


class PaillierError(ValueError):
    """Base class for all homocrypt failures."""


class InvalidKeyMaterial(PaillierError):
    """Key fields are malformed or do not belong together."""


class OutOfRange(PaillierError):
    """A plaintext, ciphertext or constant lies outside the required domain."""


class SerializationError(PaillierError):
    """A canonical string (or decimal input) could not be parsed."""


class PrimalityExhausted(PaillierError):
    """Key generation gave up before finding a suitable prime pair."""
