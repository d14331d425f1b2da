from dataclasses import replace

from core.rng import PURPOSE_EVENT, PURPOSE_HEADLINE, round_rng, round_seed


def test_same_round_same_stream(start_state):
    a = round_rng(start_state, PURPOSE_EVENT, base_seed=42)
    b = round_rng(start_state, PURPOSE_EVENT, base_seed=42)
    assert [a.random() for _ in range(5)] == [b.random() for _ in range(5)]


def test_streams_are_keyed_by_purpose_round_and_seed(start_state):
    first = round_rng(start_state, PURPOSE_EVENT, base_seed=42).random()
    assert round_rng(start_state, PURPOSE_HEADLINE, base_seed=42).random() != first
    assert round_rng(replace(start_state, round=2), PURPOSE_EVENT, base_seed=42).random() != first
    assert round_rng(start_state, PURPOSE_EVENT, base_seed=43).random() != first


def test_seed_is_32_bit():
    assert 0 <= round_seed("TestCo", 1, PURPOSE_EVENT, base_seed=42) < 2**32
