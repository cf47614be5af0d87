"""
FactsStore: 불변 fact 컨테이너

모든 "변경" 연산(with_fact, without)은 새 FactsStore를 반환하고
원본은 절대 수정하지 않는다. 읽기 전용이므로 여러 스레드에서
동기화 없이 공유할 수 있다.

타입이 있는 읽기는 try_get()만 사용한다. 타입이 다르면 예외 대신
(False, None)을 돌려준다.

내부 구조:
    base  : 여러 store가 함께 참조하는 읽기 전용 dict
    delta : 이 store에서 base 위에 덮어쓴 변경분 (제거는 _REMOVED 표시)

변경 연산은 delta만 복사하므로 연속된 store들이 base를 공유한다.
delta가 _COMPACT_THRESHOLD를 넘으면 하나의 새 base로 합친다.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Optional, Union

from factflow.errors import InvalidArgument, MissingFact
from factflow.facts.fact import Fact

# isinstance()에 넘길 수 있는 타입 또는 타입 튜플
TypeSpec = Union[type, tuple[type, ...]]

# delta 항목 수가 이 값을 넘으면 base로 합친다
_COMPACT_THRESHOLD = 32

# delta 안에서 "base의 항목이 제거됨"을 나타내는 표시
_REMOVED = object()


def _validate_name(name: Any) -> str:
    """fact 이름 검증: 비어 있지 않은 문자열이어야 한다."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgument(f"Fact name must be a non-empty string, got {name!r}")
    return name


def _validate_entry(name: Any, value: Any) -> None:
    _validate_name(name)
    if value is None:
        raise InvalidArgument(f"Value of fact '{name}' must not be None")


class FactsStore:
    """
    이름 → 값 불변 매핑

    같은 이름의 항목은 둘 이상 존재할 수 없다.
    두 store는 같은 (이름, 값) 쌍을 가질 때 동등하다.
    """

    __slots__ = ("_base", "_delta", "_size")

    def __init__(self, facts: Optional[Mapping[str, Any]] = None) -> None:
        """
        매핑으로 store 생성

        Raises:
            InvalidArgument: 이름이 비었거나 값이 None인 항목이 있을 때
        """
        validated: dict[str, Any] = {}
        for name, value in (facts or {}).items():
            _validate_entry(name, value)
            validated[name] = value
        self._base: Mapping[str, Any] = MappingProxyType(validated)
        self._delta: dict[str, Any] = {}
        self._size = len(validated)

    @classmethod
    def _layered(cls, base: Mapping[str, Any], delta: dict[str, Any]) -> "FactsStore":
        """검증이 끝난 base + delta로 store 구성 (검증 없음)"""
        if len(delta) > _COMPACT_THRESHOLD:
            merged = dict(base)
            for name, value in delta.items():
                if value is _REMOVED:
                    merged.pop(name, None)
                else:
                    merged[name] = value
            base, delta = MappingProxyType(merged), {}

        size = len(base)
        for name, value in delta.items():
            if value is _REMOVED:
                size -= 1
            elif name not in base:
                size += 1

        store = cls.__new__(cls)
        store._base = base
        store._delta = delta
        store._size = size
        return store

    # === 생성 ===

    @classmethod
    def empty(cls) -> "FactsStore":
        """항목이 하나도 없는 store"""
        return _EMPTY

    @classmethod
    def of(cls, mapping: Optional[Mapping[str, Any]] = None, **facts: Any) -> "FactsStore":
        """
        매핑 또는 키워드 인자로 store 생성

        각 항목은 with_fact()와 같은 규칙으로 검증된다.
        """
        merged = dict(mapping or {})
        merged.update(facts)
        if not merged:
            return cls.empty()
        return cls(merged)

    # === "변경" 연산 (항상 새 인스턴스) ===

    def with_fact(self, name: str, value: Any) -> "FactsStore":
        """
        name에 value를 바인딩한 새 store 반환 (기존 바인딩은 교체)

        Raises:
            InvalidArgument: name이 비었거나 value가 None일 때
        """
        _validate_entry(name, value)

        delta = dict(self._delta)
        delta[name] = value
        return self._layered(self._base, delta)

    def with_facts(self, mapping: Mapping[str, Any]) -> "FactsStore":
        """여러 fact를 한 번에 추가/교체"""
        delta = dict(self._delta)
        for name, value in mapping.items():
            _validate_entry(name, value)
            delta[name] = value
        return self._layered(self._base, delta)

    def without(self, name: str) -> "FactsStore":
        """
        name을 제거한 새 store 반환

        name이 없으면 자기 자신을 그대로 반환한다.
        """
        _validate_name(name)
        if name not in self:
            return self

        delta = dict(self._delta)
        if name in self._base:
            delta[name] = _REMOVED
        else:
            del delta[name]
        return self._layered(self._base, delta)

    # === 읽기 ===

    def _lookup(self, name: str) -> Any:
        if name in self._delta:
            return self._delta[name]
        return self._base.get(name, _REMOVED)

    def try_get(self, name: str, expected_type: TypeSpec = object) -> tuple[bool, Any]:
        """
        타입 검사를 거친 유일한 읽기 경로

        Returns:
            (found, value). 없거나 expected_type이 아니면 (False, None)
        """
        if not isinstance(name, str):
            return False, None

        value = self._lookup(name)
        if value is _REMOVED or not isinstance(value, expected_type):
            return False, None
        return True, value

    def contains(self, name: str) -> bool:
        return name in self

    @property
    def count(self) -> int:
        """항목 수"""
        return self._size

    def _items(self) -> Iterator[tuple[str, Any]]:
        for name, value in self._base.items():
            value = self._delta.get(name, value)
            if value is not _REMOVED:
                yield name, value
        for name, value in self._delta.items():
            if name not in self._base and value is not _REMOVED:
                yield name, value

    def to_dict(self) -> dict[str, Any]:
        """일반 dict 사본"""
        return dict(self._items())

    # === 프로토콜 ===

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return self._lookup(name) is not _REMOVED

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Fact]:
        # 순서는 보장하지 않음
        return (Fact(name, value) for name, value in self._items())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FactsStore):
            return NotImplemented
        return self is other or self.to_dict() == other.to_dict()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return "[" + ", ".join(f"{k}={v}" for k, v in self._items()) + "]"


_EMPTY = FactsStore()


def require_fact(facts: FactsStore, name: str, expected_type: TypeSpec = object) -> Any:
    """
    fact 값을 꺼내거나 MissingFact를 던진다.

    규칙 어댑터가 조건/액션 인자를 바인딩할 때 사용한다.
    """
    found, value = facts.try_get(name, expected_type)
    if not found:
        raise MissingFact(name, expected_type)
    return value
