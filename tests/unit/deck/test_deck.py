from __future__ import annotations

from skill_sorter.catalog import FULL_CATALOG, SHORT_CATALOG
from skill_sorter.deck import is_permutation, make_rng, shuffle_deck


def test_shuffle_is_a_permutation_of_the_catalog():
    for catalog in (FULL_CATALOG, SHORT_CATALOG):
        for seed in range(20):
            deck = shuffle_deck(catalog, make_rng(seed))
            assert is_permutation(deck, catalog)
            assert len({s.name for s in deck}) == len(catalog)


def test_same_seed_same_order():
    a = shuffle_deck(SHORT_CATALOG, make_rng(7))
    b = shuffle_deck(SHORT_CATALOG, make_rng(7))
    assert a == b


def test_shuffle_leaves_catalog_untouched():
    before = tuple(FULL_CATALOG)
    shuffle_deck(FULL_CATALOG)
    assert FULL_CATALOG == before


def test_empty_catalog_gives_empty_deck():
    assert shuffle_deck(()) == ()
