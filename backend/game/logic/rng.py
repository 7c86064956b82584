"""
Random number generation for board generation and refills.

Each room gets a cryptographic seed. Every player's board draws from its own
stream, derived from the room seed via SHA512 with domain separation, so one
player's cascades never shift another player's refills and a room can be
replayed exactly from its seed.

Streams are stdlib random.Random instances: gem sampling needs uniformity,
not cryptographic strength, and random.Random gives the engine the plain
choice() interface it uses.
"""

import hashlib
import random
import secrets

SEED_BYTES = 32  # 256 bits
_BOARD_DOMAIN_PREFIX = b"match3-board-v1:"


def validate_seed_hex(seed_hex: str) -> None:
    """Validate that a seed string is the correct hex format.

    Enforces exact length (64 hex chars = 32 bytes) and valid hex characters.
    Raises TypeError for non-string input, ValueError for invalid format.
    """
    if not isinstance(seed_hex, str):
        raise TypeError(f"Seed must be a string, got {type(seed_hex).__name__}")
    expected_length = SEED_BYTES * 2
    if len(seed_hex) != expected_length:
        raise ValueError(f"Seed must be exactly {expected_length} hex characters, got {len(seed_hex)}")
    try:
        bytes.fromhex(seed_hex)
    except ValueError:
        raise ValueError("Seed contains invalid hex characters") from None


def generate_seed() -> str:
    """Generate a cryptographic seed as a hex string (64 chars / 256 bits)."""
    return secrets.token_bytes(SEED_BYTES).hex()


def create_board_rng(seed_hex: str, player_id: str) -> random.Random:
    """
    Derive the board RNG for one player from the room seed.

    SHA512(_BOARD_DOMAIN_PREFIX + seed_bytes + player_id) seeds the stream,
    so the same (seed, player_id) pair always yields the same boards.
    """
    validate_seed_hex(seed_hex)
    derived = hashlib.sha512(_BOARD_DOMAIN_PREFIX + bytes.fromhex(seed_hex) + player_id.encode()).digest()
    return random.Random(int.from_bytes(derived, byteorder="little"))  # noqa: S311
