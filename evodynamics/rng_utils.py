# SPDX-License-Identifier: MIT
from typing import Optional
import zlib

from numpy.random import Generator, PCG64, SeedSequence


def make_rng(seed: Optional[int], stream_tag: str) -> Generator:
    """
    Create an independent RNG stream from a common integer seed and a tag.
    This guarantees independence across subsystems (init vs dynamics).
    A seed of 0 or None draws fresh OS entropy.
    """
    tag = zlib.crc32(stream_tag.encode("utf-8")) & 0xffffffff
    if not seed:
        ss = SeedSequence(spawn_key=[tag])
    else:
        ss = SeedSequence(seed, spawn_key=[tag])
    return Generator(PCG64(ss))
