from __future__ import annotations

from hashlib import sha1

# 48 bits keep the quotient exactly representable, so the bucket never
# rounds up to 100.
_HASH_BYTES = 6
_HASH_SPACE = 1 << (8 * _HASH_BYTES)


def percentage_bucket(setting: str, seed: str) -> float:
    """Map a setting name and a seed to a stable point in ``[0, 100)``.

    The bucket is the leading 48 bits of the SHA-1 digest of
    ``"<seed>:<setting>"``, read as an unsigned big-endian integer and scaled
    to the percentage range. The result must stay identical across processes
    and Python versions, since rollout assignment for every seed depends on
    it.

    Including the setting name keeps rollouts of different settings
    independent: the same seed falls into unrelated buckets for each one.

    Args:
        setting: The setting being evaluated.
        seed: The normalized ``percentageSeed`` (see ``normalize_seed()``).

    Returns:
        float: A value ``b`` with ``0 <= b < 100``.

    Examples:
        >>> round(percentage_bucket("percentageSetting", "87625364382"), 4)
        1.9945
    """
    digest = sha1(f"{seed}:{setting}".encode("utf-8")).digest()
    value = int.from_bytes(digest[:_HASH_BYTES], byteorder="big", signed=False)
    return value * 100 / _HASH_SPACE
