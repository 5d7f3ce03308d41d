"""
Deterministic account addressing.

An address is the SHA-256 of its seeds, a bump byte and the program id. A
candidate that is a valid secp256k1 x-coordinate is rejected: it sits in the
key space, so someone could hold a private key for it. Searching the bump from
255 downward yields the first off-curve candidate, and the (address, bump)
pair can be re-verified cheaply with ``create_program_address``.
"""

import hashlib
from typing import List, Sequence, Tuple

from ecdsa import SECP256k1

from .errors import InvalidVault

VAULT_SEED = b"vault"
PROPOSAL_SEED = b"proposal"

_DOMAIN_MARKER = b"ProgramDerivedAddress"
MAX_SEED_LEN = 128


def _as_seed(value) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    raise TypeError(f"Seed must be bytes or str, got {type(value).__name__}")


def _is_on_curve(digest: bytes) -> bool:
    """True when ``digest`` is the x-coordinate of a secp256k1 point"""
    curve = SECP256k1.curve
    p = curve.p()
    x = int.from_bytes(digest, 'big')
    if x >= p:
        return False
    rhs = (pow(x, 3, p) + curve.a() * x + curve.b()) % p
    # Euler's criterion: rhs is a square mod p
    return rhs == 0 or pow(rhs, (p - 1) // 2, p) == 1


def create_program_address(seeds: Sequence, bump: int, program_id: str) -> str:
    """Derive a single candidate address; raises if it lands on the curve"""
    if not (0 <= bump <= 255):
        raise ValueError(f"Bump out of range: {bump}")

    hasher = hashlib.sha256()
    for seed in seeds:
        raw = _as_seed(seed)
        if len(raw) > MAX_SEED_LEN:
            raise ValueError(f"Seed longer than {MAX_SEED_LEN} bytes")
        hasher.update(len(raw).to_bytes(1, 'little'))
        hasher.update(raw)
    hasher.update(bytes([bump]))
    hasher.update(_as_seed(program_id))
    hasher.update(_DOMAIN_MARKER)
    digest = hasher.digest()

    if _is_on_curve(digest):
        raise InvalidVault("Derived address lies on the curve")
    return digest.hex()


def find_program_address(seeds: Sequence, program_id: str) -> Tuple[str, int]:
    """Return the first off-curve (address, bump), searching bump 255 → 0"""
    for bump in range(255, -1, -1):
        try:
            return create_program_address(seeds, bump, program_id), bump
        except InvalidVault:
            continue
    raise InvalidVault("Unable to find a viable program address bump")


def verify_program_address(address: str, seeds: Sequence, bump: int, program_id: str) -> bool:
    try:
        return create_program_address(seeds, bump, program_id) == address
    except InvalidVault:
        return False


def vault_seeds(creator: str) -> List[bytes]:
    return [VAULT_SEED, _as_seed(creator)]


def proposal_seeds(vault_address: str, sequence_id: int) -> List[bytes]:
    return [PROPOSAL_SEED, bytes.fromhex(vault_address), sequence_id.to_bytes(8, 'little')]
