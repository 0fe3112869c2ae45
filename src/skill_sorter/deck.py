from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from skill_sorter.core import Skill


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    return np.random.default_rng(seed)


def shuffle_deck(catalog: Sequence[Skill], rng: Optional[np.random.Generator] = None) -> Tuple[Skill, ...]:
    """
    Working order for one session: a permutation of the whole catalog.
    The catalog itself is never modified.
    """
    if not catalog:
        return ()
    gen = rng if rng is not None else make_rng()
    order = gen.permutation(len(catalog))
    return tuple(catalog[int(i)] for i in order)


def is_permutation(deck: Sequence[Skill], catalog: Sequence[Skill]) -> bool:
    return len(deck) == len(catalog) and sorted(s.name for s in deck) == sorted(s.name for s in catalog)
