"""
Fluent RuleBuilder

코드로 규칙을 정의할 때 사용하는 빌더입니다.

    rule = (
        RuleBuilder.create("HighValueOrder")
        .priority(10)
        .when(lambda f: f.try_get("orderTotal", int)[1] >= 1000)
        .then(set_fact("discountApplied", True))
        .build()
    )
"""

from collections.abc import Callable
from typing import Any, Optional

from factflow.errors import InvalidArgument
from factflow.facts.store import FactsStore
from factflow.rules.actions import from_effect
from factflow.rules.base import (
    DEFAULT_DESCRIPTION,
    DEFAULT_NAME,
    DEFAULT_PRIORITY,
    Action,
    Condition,
)
from factflow.rules.basic import BasicRule
from factflow.rules.conditions import FALSE


class RuleBuilder:
    """
    BasicRule 빌더

    모든 설정 메서드는 self를 반환합니다 (체이닝 가능).
    조건을 지정하지 않으면 항상 거짓인 규칙이 만들어집니다.
    """

    def __init__(self, name: str = DEFAULT_NAME) -> None:
        self._name = name
        self._description = DEFAULT_DESCRIPTION
        self._priority = DEFAULT_PRIORITY
        self._condition: Condition = FALSE
        self._actions: list[Action] = []

    @classmethod
    def create(cls, name: Optional[str] = None) -> "RuleBuilder":
        return cls(name or DEFAULT_NAME)

    def name(self, name: str) -> "RuleBuilder":
        if not name:
            raise InvalidArgument("Rule name must not be empty")
        self._name = name
        return self

    def description(self, description: Optional[str]) -> "RuleBuilder":
        self._description = description or DEFAULT_DESCRIPTION
        return self

    def priority(self, priority: int) -> "RuleBuilder":
        self._priority = priority
        return self

    def when(self, condition: Condition) -> "RuleBuilder":
        """조건 지정 (이전 조건을 교체)"""
        if not callable(condition):
            raise InvalidArgument("Condition must be callable")
        self._condition = condition
        return self

    def then(self, action: Action) -> "RuleBuilder":
        """FactsStore를 반환하는 액션 추가"""
        if not callable(action):
            raise InvalidArgument("Action must be callable")
        self._actions.append(action)
        return self

    def then_effect(self, effect: Callable[[FactsStore], Any]) -> "RuleBuilder":
        """facts를 바꾸지 않는 부수 효과 액션 추가"""
        if not callable(effect):
            raise InvalidArgument("Action must be callable")
        self._actions.append(from_effect(effect))
        return self

    def clear_actions(self) -> "RuleBuilder":
        self._actions.clear()
        return self

    def build(self) -> BasicRule:
        return BasicRule(
            name=self._name,
            description=self._description,
            priority=self._priority,
            condition=self._condition,
            actions=tuple(self._actions),
        )
