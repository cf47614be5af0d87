"""
RuleRegistry: 규칙 정의 테이블

규칙 정의(메타데이터)와 규칙을 만드는 팩토리 함수를 등록 시점에 한 번
묶어 둡니다. 실행 시점에 여러 생성 방법을 시도하지 않고, 테이블에서
팩토리를 꺼내 호출하기만 합니다.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

import structlog

from factflow.errors import InvalidArgument
from factflow.rules.base import DEFAULT_DESCRIPTION, DEFAULT_PRIORITY, Rule, name_key
from factflow.rules.ruleset import RuleSet

logger = structlog.get_logger(__name__)

RuleFactory = Callable[[], Rule]


@dataclass(frozen=True)
class RuleDefinition:
    """등록된 규칙의 메타데이터 + 팩토리"""
    name: str
    factory: RuleFactory
    description: str = DEFAULT_DESCRIPTION
    priority: int = DEFAULT_PRIORITY
    enabled: bool = True
    tags: tuple[str, ...] = field(default_factory=tuple)

    def create(self) -> Rule:
        """팩토리를 호출해 규칙 인스턴스 생성"""
        return self.factory()


class RuleRegistry:
    """
    규칙 정의 레지스트리

    이름은 대소문자 무시로 유일합니다. 같은 이름으로 다시 등록하면 교체됩니다.
    """

    def __init__(self) -> None:
        self._definitions: dict[str, RuleDefinition] = {}
        self._lock = threading.Lock()

    def register(
        self,
        factory: RuleFactory,
        name: str,
        priority: int = DEFAULT_PRIORITY,
        description: Optional[str] = None,
        enabled: bool = True,
        tags: tuple[str, ...] = (),
    ) -> RuleDefinition:
        """
        팩토리 등록

        Args:
            factory: 인자 없이 호출하면 Rule을 반환하는 함수
            name: 규칙 이름
            priority: 정렬용 priority (팩토리가 만드는 규칙과 같아야 함)

        Returns:
            등록된 RuleDefinition
        """
        if not callable(factory):
            raise InvalidArgument(f"Factory for rule '{name}' is not callable")
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgument(f"Rule name must be a non-empty string, got {name!r}")

        definition = RuleDefinition(
            name=name,
            factory=factory,
            description=description or DEFAULT_DESCRIPTION,
            priority=priority,
            enabled=enabled,
            tags=tuple(tags),
        )
        with self._lock:
            self._definitions[name_key(name)] = definition
        logger.debug("rule_definition_registered", rule=name, priority=priority)
        return definition

    def definitions(self) -> list[RuleDefinition]:
        """priority → 이름(대소문자 무시) 순으로 정렬된 정의 목록"""
        with self._lock:
            items = list(self._definitions.values())
        return sorted(items, key=lambda d: (d.priority, name_key(d.name)))

    def build_ruleset(self, enabled_only: bool = True) -> RuleSet:
        """등록된 팩토리로 규칙을 만들어 RuleSet 구성"""
        rules = [
            definition.create()
            for definition in self.definitions()
            if definition.enabled or not enabled_only
        ]
        return RuleSet(rules)

    def clear(self) -> None:
        with self._lock:
            self._definitions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._definitions)
