"""
액션(Action) 헬퍼

액션은 FactsStore → FactsStore 함수다.
"""

from collections.abc import Callable
from typing import Any

from factflow.facts.store import FactsStore
from factflow.rules.base import Action


def set_fact(name: str, value: Any) -> Action:
    """name = value 로 바인딩하는 액션"""

    def _set(facts: FactsStore) -> FactsStore:
        return facts.with_fact(name, value)

    return _set


def remove_fact(name: str) -> Action:
    def _remove(facts: FactsStore) -> FactsStore:
        return facts.without(name)

    return _remove


def from_effect(effect: Callable[[FactsStore], Any]) -> Action:
    """
    부수 효과만 있는 함수를 액션으로 감싼다.

    facts는 바뀌지 않고 그대로 다음 액션으로 전달된다.
    """

    def _effect(facts: FactsStore) -> FactsStore:
        effect(facts)
        return facts

    return _effect
