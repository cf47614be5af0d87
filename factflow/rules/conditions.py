"""
조건(Condition) 조합기

조건은 FactsStore → bool 함수다. 이 모듈은 자주 쓰는 조건과
AND / OR / NOT 조합을 제공한다.
"""

from typing import Any

from factflow.facts.store import FactsStore, TypeSpec
from factflow.rules.base import Condition


def TRUE(facts: FactsStore) -> bool:
    """항상 참"""
    return True


def FALSE(facts: FactsStore) -> bool:
    """항상 거짓 (BasicRule 기본 조건)"""
    return False


def all_of(*conditions: Condition) -> Condition:
    """모든 조건이 참일 때 참 (앞에서부터 단락 평가)"""

    def _all(facts: FactsStore) -> bool:
        return all(condition(facts) for condition in conditions)

    return _all


def any_of(*conditions: Condition) -> Condition:
    """하나라도 참이면 참 (앞에서부터 단락 평가)"""

    def _any(facts: FactsStore) -> bool:
        return any(condition(facts) for condition in conditions)

    return _any


def negate(condition: Condition) -> Condition:
    def _not(facts: FactsStore) -> bool:
        return not condition(facts)

    return _not


def has_fact(name: str, expected_type: TypeSpec = object) -> Condition:
    """name fact가 존재하고 expected_type이면 참"""

    def _has(facts: FactsStore) -> bool:
        found, _ = facts.try_get(name, expected_type)
        return found

    return _has


def fact_equals(name: str, expected: Any) -> Condition:
    """name fact가 존재하고 값이 expected와 같으면 참"""

    def _equals(facts: FactsStore) -> bool:
        found, value = facts.try_get(name)
        return found and value == expected

    return _equals
