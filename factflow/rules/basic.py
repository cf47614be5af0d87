"""
BasicRule: 조건 + 액션 목록으로 이루어진 불변 규칙

Rule Protocol의 기본 구현. RuleBuilder와 RuleRegistry가 이 타입을 만든다.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from factflow.errors import InvalidArgument
from factflow.facts.store import FactsStore
from factflow.rules.base import (
    DEFAULT_DESCRIPTION,
    DEFAULT_PRIORITY,
    Action,
    Condition,
)
from factflow.rules.conditions import FALSE


@dataclass(frozen=True, eq=False)
class BasicRule:
    """
    불변 규칙

    동등성/해시는 객체 identity 기준 (check() 결과 dict의 키로 쓰임).
    """
    name: str
    description: str = DEFAULT_DESCRIPTION
    priority: int = DEFAULT_PRIORITY
    condition: Condition = FALSE
    actions: Sequence[Action] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidArgument(f"Rule name must be a non-empty string, got {self.name!r}")
        if not callable(self.condition):
            raise InvalidArgument(f"Condition of rule '{self.name}' is not callable")
        for action in self.actions:
            if not callable(action):
                raise InvalidArgument(f"Action {action!r} of rule '{self.name}' is not callable")

        # 외부 리스트가 바뀌어도 규칙은 그대로 유지
        object.__setattr__(self, "actions", tuple(self.actions))
        object.__setattr__(self, "description", self.description or DEFAULT_DESCRIPTION)

    def evaluate(self, facts: FactsStore) -> bool:
        """조건만 평가 (엔진을 거치지 않는 편의 메서드)"""
        return bool(self.condition(facts))

    def execute(self, facts: FactsStore) -> FactsStore:
        """액션을 순서대로 적용한 결과 반환 (엔진을 거치지 않는 편의 메서드)"""
        for action in self.actions:
            facts = action(facts)
        return facts

    def __str__(self) -> str:
        return self.name
