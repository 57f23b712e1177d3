import pytest

from homocrypt.crypto.errors import InvalidKeyMaterial, OutOfRange
from homocrypt.crypto.paillier import (
    add,
    add_const,
    aggregate,
    decrypt,
    decrypt_signed,
    encrypt,
    encrypt_signed,
    generate_keypair,
    mean,
    mul_const,
)


@pytest.mark.anyio
async def test_encrypt_decrypt_roundtrip(keypair):
    priv, pub = keypair
    x = 3
    cx = encrypt(pub, x)
    assert cx != x
    assert decrypt(priv, pub, cx) == x


@pytest.mark.anyio
async def test_roundtrip_with_decimal_strings(keypair):
    priv, pub = keypair
    cx = encrypt(pub, "3")
    assert cx != 3
    assert decrypt(priv, pub, str(cx)) == 3


@pytest.mark.anyio
async def test_encryption_is_probabilistic(keypair):
    priv, pub = keypair
    c1 = encrypt(pub, 42)
    c2 = encrypt(pub, 42)
    assert c1 != c2
    assert decrypt(priv, pub, c1) == decrypt(priv, pub, c2) == 42


@pytest.mark.anyio
async def test_explicit_randomness_is_deterministic(small_keypair):
    priv, pub = small_keypair
    assert encrypt(pub, 7, r=5) == encrypt(pub, 7, r=5)
    with pytest.raises(OutOfRange):
        encrypt(pub, 7, r=0)


@pytest.mark.anyio
async def test_homomorphic_addition(keypair):
    priv, pub = keypair
    cz = add(pub, encrypt(pub, 3), encrypt(pub, 5))
    assert decrypt(priv, pub, cz) == 8


@pytest.mark.anyio
async def test_very_large_addition(keypair):
    priv, pub = keypair
    x = 2**2047 - 10
    y = 1
    cz = add(pub, encrypt(pub, x), encrypt(pub, y))
    assert decrypt(priv, pub, cz) == x + y


@pytest.mark.anyio
async def test_const_addition(keypair):
    priv, pub = keypair
    cy = add_const(pub, encrypt(pub, 3), 2)
    assert decrypt(priv, pub, cy) == 5


@pytest.mark.anyio
async def test_negative_const_addition_subtracts(small_keypair):
    priv, pub = small_keypair
    cy = add_const(pub, encrypt(pub, 10), -4)
    assert decrypt(priv, pub, cy) == 6


@pytest.mark.anyio
async def test_signed_addition(keypair):
    priv, pub = keypair
    csum = add(pub, encrypt_signed(pub, 5), encrypt_signed(pub, -12))
    assert decrypt_signed(priv, pub, csum) == -7


@pytest.mark.anyio
async def test_const_multiply(keypair):
    priv, pub = keypair
    cy = mul_const(pub, encrypt(pub, 3), 2)
    assert decrypt(priv, pub, cy) == 6


@pytest.mark.anyio
async def test_signed_const_multiply(small_keypair):
    priv, pub = small_keypair
    cy = mul_const(pub, encrypt_signed(pub, 7), -3)
    assert decrypt_signed(priv, pub, cy) == -21


@pytest.mark.anyio
async def test_aggregate_sums_ciphertexts(small_keypair):
    priv, pub = small_keypair
    values = [1, 0, 1, 1, 0]
    agg = aggregate(pub, [encrypt(pub, v) for v in values])
    assert decrypt(priv, pub, agg) == 3
    assert decrypt(priv, pub, aggregate(pub, [])) == 0


@pytest.mark.anyio
async def test_average_with_count_known(keypair):
    priv, pub = keypair
    nums = [15, 99, 54, 252, 13, 128]
    cavg, precision = mean(pub, [encrypt(pub, i) for i in nums])
    avg = decrypt(priv, pub, cavg) / precision
    assert avg == pytest.approx(93.5, abs=1e-3)
    # round-half-up scaling with the default precision of 10**6
    assert precision == 1_000_000
    assert avg == 93.500187


@pytest.mark.anyio
async def test_mean_with_custom_precision(small_keypair):
    priv, pub = small_keypair
    cavg, precision = mean(pub, [encrypt(pub, i) for i in (1, 2)], precision=10)
    assert precision == 10
    assert decrypt(priv, pub, cavg) == 15


@pytest.mark.anyio
async def test_mean_rejects_empty_and_tiny_precision(small_keypair):
    _, pub = small_keypair
    with pytest.raises(OutOfRange):
        mean(pub, [])
    with pytest.raises(OutOfRange):
        mean(pub, [encrypt(pub, 1)] * 5, precision=2)


@pytest.mark.anyio
async def test_plaintext_out_of_range(small_keypair):
    _, pub = small_keypair
    with pytest.raises(OutOfRange):
        encrypt(pub, -1)
    with pytest.raises(OutOfRange):
        encrypt(pub, pub.n)


@pytest.mark.anyio
async def test_ciphertext_and_constant_out_of_range(small_keypair):
    priv, pub = small_keypair
    with pytest.raises(OutOfRange):
        decrypt(priv, pub, pub.n_sq)
    with pytest.raises(OutOfRange):
        decrypt(priv, pub, pub.n)
    with pytest.raises(OutOfRange):
        add_const(pub, encrypt(pub, 1), pub.n)
    with pytest.raises(OutOfRange):
        mul_const(pub, encrypt(pub, 1), -pub.n)


@pytest.mark.anyio
async def test_decrypt_with_foreign_private_key(small_keypair):
    _, pub = small_keypair
    other_priv, _ = generate_keypair(512)
    with pytest.raises(InvalidKeyMaterial):
        decrypt(other_priv, pub, encrypt(pub, 9))
