import logging

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from homocrypt.config import CORS_ORIGINS, LOG_LEVEL, MEAN_PRECISION
from homocrypt.crypto.codec import format_decimal
from homocrypt.crypto.errors import PaillierError
from homocrypt.crypto.keys import PublicKey
from homocrypt.crypto.paillier import add_const, aggregate, encrypt, encrypt_signed, mean, mul_const
from homocrypt.crypto.signature import Signature, valid_signature

logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)

UNSIGNED = r"^[0-9]+$"
SIGNED = r"^-?[0-9]+$"


app = FastAPI(
    title="Homomorphic Aggregation API",
    version="0.1.0",
)

# ── Security: CORS ───────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    allow_credentials=False,
)


# ── Security: HTTP headers ───────────────────────────────────
@app.middleware("http")
async def security_headers(request: Request, call_next):
    response: Response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Cache-Control"] = "no-store"
    return response


class EncryptRequest(BaseModel):
    public_key: str = Field(min_length=1)
    plaintext: str = Field(pattern=SIGNED)
    signed: bool = False


class AggregateRequest(BaseModel):
    public_key: str = Field(min_length=1)
    ciphertexts: list[str] = Field(default_factory=list, max_length=100_000)


class MeanRequest(AggregateRequest):
    precision: int | None = Field(default=None, ge=1)


class ConstantRequest(BaseModel):
    public_key: str = Field(min_length=1)
    ciphertext: str = Field(pattern=UNSIGNED)
    constant: str = Field(pattern=SIGNED)


class VerifyRequest(BaseModel):
    public_key: str = Field(min_length=1)
    message: str = Field(pattern=SIGNED)
    signature: str = Field(min_length=1)


def _load_public_key(text: str) -> PublicKey:
    try:
        return PublicKey.from_string(text)
    except PaillierError as e:
        raise HTTPException(status_code=400, detail=f"invalid public key: {e}")


@app.get("/health")
async def health() -> dict:
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/crypto/encrypt")
def encrypt_value(payload: EncryptRequest):
    """Encrypt a plaintext under the caller's public key (server-side fallback)."""
    pub = _load_public_key(payload.public_key)
    try:
        if payload.signed:
            ciphertext = encrypt_signed(pub, payload.plaintext)
        else:
            ciphertext = encrypt(pub, payload.plaintext)
    except PaillierError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ciphertext": format_decimal(ciphertext)}


@app.post("/aggregate/sum")
def aggregate_sum(payload: AggregateRequest):
    """Homomorphic sum of ciphertexts encrypted under one public key."""
    pub = _load_public_key(payload.public_key)
    if not payload.ciphertexts:
        return {"count": 0, "aggregate_ciphertext": None}
    try:
        agg = aggregate(pub, payload.ciphertexts)
    except PaillierError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info(f"Aggregated {len(payload.ciphertexts)} ciphertexts")
    return {"count": len(payload.ciphertexts), "aggregate_ciphertext": format_decimal(agg)}


@app.post("/aggregate/mean")
def aggregate_mean(payload: MeanRequest):
    """Encrypted mean: the caller divides the decrypted value by ``precision``."""
    pub = _load_public_key(payload.public_key)
    if not payload.ciphertexts:
        return {"count": 0, "aggregate_ciphertext": None, "precision": payload.precision or MEAN_PRECISION}
    try:
        agg, precision = mean(pub, payload.ciphertexts, payload.precision)
    except PaillierError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info(f"Averaged {len(payload.ciphertexts)} ciphertexts at precision {precision}")
    return {
        "count": len(payload.ciphertexts),
        "aggregate_ciphertext": format_decimal(agg),
        "precision": precision,
    }


@app.post("/ciphertexts/add-const")
def ciphertext_add_const(payload: ConstantRequest):
    pub = _load_public_key(payload.public_key)
    try:
        ciphertext = add_const(pub, payload.ciphertext, payload.constant)
    except PaillierError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ciphertext": format_decimal(ciphertext)}


@app.post("/ciphertexts/mul-const")
def ciphertext_mul_const(payload: ConstantRequest):
    pub = _load_public_key(payload.public_key)
    try:
        ciphertext = mul_const(pub, payload.ciphertext, payload.constant)
    except PaillierError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ciphertext": format_decimal(ciphertext)}


@app.post("/signatures/verify")
def verify_signature(payload: VerifyRequest):
    """Check a Paillier signature without any private material."""
    pub = _load_public_key(payload.public_key)
    try:
        signature = Signature.from_string(payload.signature)
        valid = valid_signature(pub, payload.message, signature)
    except PaillierError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"valid": valid}
