"""Property-based tests for IdempotencyConfig."""

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from idempotency_kit.config import VALID_HTTP_METHODS, IdempotencyConfig

method_strategy = st.sampled_from(sorted(VALID_HTTP_METHODS))


def _random_case(draw, text: str) -> str:
    flags = draw(st.lists(st.booleans(), min_size=len(text), max_size=len(text)))
    return "".join(c.lower() if flag else c for c, flag in zip(text, flags, strict=True))


@st.composite
def mixed_case_methods(draw) -> list[str]:
    methods = draw(st.lists(method_strategy, min_size=1, max_size=5))
    return [_random_case(draw, method) for method in methods]


@given(methods=mixed_case_methods())
def test_methods_always_normalized_to_uppercase(methods: list[str]) -> None:
    config = IdempotencyConfig(methods=methods)

    assert config.methods == [m.upper() for m in methods]
    for method in methods:
        assert config.applies_to(method)


@given(ttl=st.integers(min_value=1, max_value=10**7))
def test_positive_ttl_accepted(ttl: int) -> None:
    assert IdempotencyConfig(ttl=ttl, lock_ttl=ttl).ttl == ttl


@given(ttl=st.integers(max_value=0))
def test_non_positive_ttl_rejected(ttl: int) -> None:
    with pytest.raises(ValidationError):
        IdempotencyConfig(ttl=ttl)


@given(
    word=st.text(alphabet=st.characters(whitelist_categories=("Lu",)), min_size=1, max_size=12)
)
def test_unknown_methods_rejected(word: str) -> None:
    if word.upper() in VALID_HTTP_METHODS:
        return
    with pytest.raises(ValidationError):
        IdempotencyConfig(methods=[word])
