"""
Canonical string form for keys and signatures.

Every serializable value is written as a compact JSON envelope::

    {"kind":"public_key","version":1,"data":{"n":"<hex>","g":"<hex>"}}

Integers travel as lowercase hex strings without a prefix.  Power-of-two
bases are exempt from the interpreter's int/str digit limit, so any size
survives the round trip, and no field value can collide with the JSON
delimiters.  The envelope shape is checked with pydantic; the entity class
then checks its own invariants.
"""

import dataclasses
import logging
import re
from typing import ClassVar, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from homocrypt.crypto.errors import SerializationError

logger = logging.getLogger(__name__)

WIRE_VERSION = 1
_HEX = re.compile(r"0|[1-9a-f][0-9a-f]*")

_REGISTRY: Dict[str, Type["Serializable"]] = {}


class Envelope(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: str = Field(min_length=1, max_length=64)
    version: int = WIRE_VERSION
    data: Dict[str, str]

    @field_validator("version")
    @classmethod
    def _known_version(cls, value: int) -> int:
        if value != WIRE_VERSION:
            raise ValueError(f"unsupported version {value}")
        return value

    @field_validator("data")
    @classmethod
    def _hex_only(cls, value: Dict[str, str]) -> Dict[str, str]:
        for name, digits in value.items():
            if not _HEX.fullmatch(digits):
                raise ValueError(f"field {name!r} is not a canonical hex integer")
        return value


class Serializable:
    """Mixin for frozen dataclasses whose fields are all non-negative ints.

    Subclasses register under a wire ``kind``::

        @dataclass(frozen=True)
        class PublicKey(Serializable, kind="public_key"):
            ...
    """

    kind: ClassVar[str]

    def __init_subclass__(cls, kind: Optional[str] = None, **kwargs):
        super().__init_subclass__(**kwargs)
        if kind is not None:
            if kind in _REGISTRY:
                raise TypeError(f"serialization kind {kind!r} already registered")
            cls.kind = kind
            _REGISTRY[kind] = cls

    def to_string(self) -> str:
        return dumps(self)

    @classmethod
    def from_string(cls, text: str):
        return loads(text, expected=cls)

    def __str__(self) -> str:
        return dumps(self)


def dumps(entity: Serializable) -> str:
    """Return the canonical string of a registered entity."""
    if getattr(type(entity), "kind", None) not in _REGISTRY:
        raise SerializationError(f"{type(entity).__name__} is not serializable")
    fields = {f.name: format(getattr(entity, f.name), "x") for f in dataclasses.fields(entity)}
    return Envelope(kind=entity.kind, data=fields).model_dump_json()


def loads(text: str, expected: Optional[Type[Serializable]] = None) -> Serializable:
    """Parse a canonical string back into its entity.

    ``expected`` pins the accepted kind; without it any kind whose class has
    been imported is accepted.
    """
    if not isinstance(text, (str, bytes)):
        raise SerializationError(f"expected a string, got {type(text).__name__}")
    try:
        envelope = Envelope.model_validate_json(text)
    except ValidationError as exc:
        raise SerializationError(f"malformed canonical string: {exc.errors()[0]['msg']}") from exc

    cls = _REGISTRY.get(envelope.kind)
    if cls is None:
        raise SerializationError(f"unknown kind {envelope.kind!r}")
    if expected is not None and cls is not expected:
        raise SerializationError(f"expected kind {expected.kind!r}, got {envelope.kind!r}")

    names = {f.name for f in dataclasses.fields(cls)}
    if set(envelope.data) != names:
        raise SerializationError(
            f"{envelope.kind} needs fields {sorted(names)}, got {sorted(envelope.data)}"
        )
    values = {name: int(digits, 16) for name, digits in envelope.data.items()}

    logger.debug(f"Parsed {envelope.kind} from canonical string")
    return cls(**values)

