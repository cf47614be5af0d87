"""
Fact 정의

이름(name)과 값(value)의 쌍. FactsStore를 순회할 때 이 형태로 나온다.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Fact:
    """이름이 붙은 값 (이름은 대소문자 구분, ordinal 비교)"""
    name: str
    value: Any

    def __str__(self) -> str:
        return f"{self.name}={self.value}"
