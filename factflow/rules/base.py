"""
Rule 인터페이스 정의

모든 규칙은 이 Protocol을 따라야 합니다.
엔진은 규칙을 읽기 전용으로 다루며, 규칙이 어떻게 만들어졌는지
(빌더, 레지스트리, 직접 구현)에는 의존하지 않습니다.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, Union

from factflow.facts.store import FactsStore


# 규칙 기본값
DEFAULT_NAME = "rule"
DEFAULT_DESCRIPTION = ""
DEFAULT_PRIORITY = 2**31 - 2  # 기본 priority threshold 바로 아래

# 조건: FactsStore → bool (예외 가능)
Condition = Callable[[FactsStore], bool]

# 액션: FactsStore → FactsStore (예외 가능)
Action = Callable[[FactsStore], FactsStore]

# 비동기 엔진은 awaitable을 반환하는 조건/액션도 받는다
AsyncCondition = Callable[[FactsStore], Union[bool, Awaitable[bool]]]
AsyncAction = Callable[[FactsStore], Union[FactsStore, Awaitable[FactsStore]]]


class Rule(Protocol):
    """
    규칙 인터페이스 (Protocol)

    모든 규칙은 다음을 제공해야 합니다:
    - name: 규칙 이름 (RuleSet 안에서 대소문자 무시 유일 키)
    - description: 설명
    - priority: 낮을수록 먼저 평가
    - condition: 이 규칙이 발동하는지 판단
    - actions: 순서대로 실행되는 상태 변환 함수들
    """

    @property
    def name(self) -> str:
        """규칙 이름"""
        ...

    @property
    def description(self) -> str:
        ...

    @property
    def priority(self) -> int:
        ...

    @property
    def condition(self) -> Condition:
        """
        현재 facts에 대해 규칙이 발동하는지 판단

        Returns:
            True면 actions가 실행됨
        """
        ...

    @property
    def actions(self) -> Sequence[Action]:
        """
        순서대로 실행되는 액션 목록

        각 액션은 이전 액션이 만든 FactsStore를 받아 새 FactsStore를 반환합니다.
        """
        ...


def sort_key(rule: Rule) -> tuple[int, str]:
    """RuleSet 정렬 키: priority 오름차순, 이름 오름차순 (대소문자 구분)"""
    return (rule.priority, rule.name)


def name_key(name: str) -> str:
    """
    이름 중복 판단 키 (대소문자 무시)

    문자 단위 소문자 변환만 사용한다. casefold()는 "ß"와 "ss"처럼
    길이가 다른 이름까지 같은 키로 묶는다.
    """
    return name.lower()
