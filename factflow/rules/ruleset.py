"""
RuleSet: 정렬되고 이름이 중복되지 않는 규칙 모음

정렬: priority 오름차순 → 이름 오름차순 (대소문자 구분, ordinal)
중복: 이름을 대소문자 무시로 비교해서 같은 이름이면 교체

두 비교 방식이 다른 것은 의도된 정책이다. 하나로 합치면
정렬 안정성과 교체 동작이 모두 바뀐다.
"""

import threading
from collections.abc import Iterable, Iterator
from typing import Optional

import structlog

from factflow.errors import InvalidArgument
from factflow.rules.base import Rule, name_key, sort_key

logger = structlog.get_logger(__name__)


class RuleSet:
    """
    규칙 모음

    등록/해제는 락으로 직렬화됩니다. 순회는 시작 시점의 스냅샷(tuple)을
    사용하므로, 실행 중에 규칙을 등록해도 진행 중인 실행에는 영향이 없습니다.
    """

    def __init__(self, rules: Optional[Iterable[Rule]] = None) -> None:
        self._rules: list[Rule] = []
        self._lock = threading.Lock()
        if rules is not None:
            self.register(*rules)

    @classmethod
    def of(cls, *rules: Rule) -> "RuleSet":
        return cls(rules)

    def register(self, *rules: Rule) -> "RuleSet":
        """
        규칙 등록

        같은 이름(대소문자 무시)의 규칙이 있으면 교체합니다.

        Returns:
            self (체이닝 가능)
        """
        for rule in rules:
            _validate_rule(rule)

        with self._lock:
            # 작업용 사본을 정렬한 뒤 교체: 도중에 실패해도 기존 목록은 그대로
            updated = list(self._rules)
            for rule in rules:
                existing = _find_in(updated, rule.name)
                if existing is not None:
                    updated.remove(existing)
                    logger.debug("rule_replaced", rule=rule.name, replaced=existing.name)
                updated.append(rule)
            updated.sort(key=sort_key)
            self._rules = updated
        return self

    def unregister(self, *rules: Rule) -> "RuleSet":
        """주어진 규칙 객체를 제거 (없으면 무시)"""
        if any(rule is None for rule in rules):
            raise InvalidArgument("One of the provided rules is None")

        with self._lock:
            for rule in rules:
                if rule in self._rules:
                    self._rules.remove(rule)
        return self

    def unregister_by_name(self, name: str) -> "RuleSet":
        """이름으로 제거 (대소문자 무시, 없으면 무시)"""
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgument(f"Rule name must be a non-empty string, got {name!r}")

        with self._lock:
            existing = self._find_locked(name)
            if existing is not None:
                self._rules.remove(existing)
        return self

    def find(self, name: str) -> Optional[Rule]:
        """이름으로 조회 (대소문자 무시)"""
        with self._lock:
            return self._find_locked(name)

    def clear(self) -> None:
        with self._lock:
            self._rules.clear()

    def snapshot(self) -> tuple[Rule, ...]:
        """현재 규칙들의 정렬된 스냅샷"""
        with self._lock:
            return tuple(self._rules)

    @property
    def is_empty(self) -> bool:
        return self.size == 0

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._rules)

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"RuleSet({[rule.name for rule in self.snapshot()]})"

    def _find_locked(self, name: str) -> Optional[Rule]:
        return _find_in(self._rules, name)


def _validate_rule(rule: Rule) -> None:
    """정렬/중복 판단에 쓰이는 name, priority 검증"""
    if rule is None:
        raise InvalidArgument("One of the provided rules is None")
    name = getattr(rule, "name", None)
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgument(f"Rule name must be a non-empty string, got {name!r}")
    priority = getattr(rule, "priority", None)
    if not isinstance(priority, int) or isinstance(priority, bool):
        raise InvalidArgument(f"Priority of rule '{name}' must be an int, got {priority!r}")


def _find_in(rules: list[Rule], name: str) -> Optional[Rule]:
    key = name_key(name)
    for rule in rules:
        if name_key(rule.name) == key:
            return rule
    return None
