"""
데코레이터 기반 규칙 정의

클래스에 메타데이터를 붙이고, 메서드 하나를 조건으로, 나머지를 액션으로
지정합니다. 메서드 인자는 fact() 기본값으로 이름 있는 fact에 바인딩됩니다.

    @rule(name="HighValueOrder", priority=10, registry=registry)
    class HighValueOrderRule:
        @condition
        def is_high_value(self, total=fact("orderTotal", (int, float))) -> bool:
            return total >= 1000

        @action(order=1)
        def apply_discount(self, facts: FactsStore, order_id=fact("orderId", str)) -> FactsStore:
            return facts.with_fact("discountApplied", True)

바인딩 방법은 데코레이터 적용 시점에 한 번만 계산합니다. 실행 시점에는
require_fact()로 값을 꺼내기만 하므로, fact가 없으면 MissingFact가
조건/액션 예외로 엔진에 전달됩니다.
"""

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from factflow.errors import InvalidArgument
from factflow.facts.store import FactsStore, TypeSpec, require_fact
from factflow.rules.base import DEFAULT_DESCRIPTION, DEFAULT_PRIORITY, Action, Condition
from factflow.rules.basic import BasicRule
from factflow.rules.registry import RuleRegistry

_RULE_ATTR = "__factflow_rule__"
_ROLE_ATTR = "__factflow_role__"
_BINDING_ATTR = "__factflow_binding__"

# 인자 이름 → 바인딩할 fact (None이면 FactsStore 자체)
Binding = tuple[tuple[str, Optional["FactRef"]], ...]


@dataclass(frozen=True)
class FactRef:
    """메서드 인자에 바인딩할 fact 참조"""
    name: Optional[str] = None
    expected_type: TypeSpec = object


def fact(name: Optional[str] = None, expected_type: TypeSpec = object) -> Any:
    """
    인자 기본값으로 사용하는 fact 바인딩 표시

    name을 생략하면 인자 이름을 fact 이름으로 사용합니다.
    """
    if name is not None and (not isinstance(name, str) or not name.strip()):
        raise InvalidArgument(f"Fact name must be a non-empty string, got {name!r}")
    return FactRef(name, expected_type)


@dataclass(frozen=True)
class _ActionRole:
    order: int


@dataclass(frozen=True)
class RuleMetadata:
    """@rule이 클래스에 붙이는 메타데이터"""
    name: str
    description: str
    priority: int
    enabled: bool
    tags: tuple[str, ...]
    condition: str
    actions: tuple[str, ...] = field(default_factory=tuple)


def _binding_of(func: Callable[..., Any]) -> Binding:
    """self 다음 인자들의 바인딩 계산 (fact() 기본값 또는 facts 인자)"""
    parameters = list(inspect.signature(func).parameters.values())[1:]
    binding = []
    for parameter in parameters:
        default = parameter.default
        if isinstance(default, FactRef):
            ref = default if default.name else FactRef(parameter.name, default.expected_type)
            binding.append((parameter.name, ref))
        elif parameter.name == "facts" or parameter.annotation is FactsStore:
            binding.append((parameter.name, None))
        else:
            raise InvalidArgument(
                f"Parameter '{parameter.name}' of '{func.__qualname__}' is neither "
                f"bound with fact() nor a FactsStore"
            )
    return tuple(binding)


def condition(func: Callable[..., Any]) -> Callable[..., Any]:
    """조건 메서드 표시 (bool 반환, 코루틴 함수도 가능)"""
    setattr(func, _ROLE_ATTR, "condition")
    setattr(func, _BINDING_ATTR, _binding_of(func))
    return func


def action(func: Optional[Callable[..., Any]] = None, *, order: int = 0) -> Any:
    """
    액션 메서드 표시

    order가 작은 액션이 먼저 실행됩니다 (같으면 정의 순서).
    FactsStore를 반환하면 다음 액션의 입력이 되고, None을 반환하면
    facts는 그대로 전달됩니다.
    """

    def _mark(target: Callable[..., Any]) -> Callable[..., Any]:
        setattr(target, _ROLE_ATTR, _ActionRole(order))
        setattr(target, _BINDING_ATTR, _binding_of(target))
        return target

    if func is not None:
        return _mark(func)
    return _mark


def _collect(cls: type) -> tuple[str, tuple[str, ...]]:
    """클래스 계층에서 조건/액션 메서드 이름 수집 (하위 클래스가 우선)"""
    members: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        members.update(vars(klass))

    conditions = [name for name, member in members.items() if getattr(member, _ROLE_ATTR, None) == "condition"]
    actions = [
        (getattr(member, _ROLE_ATTR).order, index, name)
        for index, (name, member) in enumerate(members.items())
        if isinstance(getattr(member, _ROLE_ATTR, None), _ActionRole)
    ]

    if len(conditions) != 1:
        raise InvalidArgument(
            f"Rule class '{cls.__name__}' must define exactly one @condition method, "
            f"found {len(conditions)}"
        )
    return conditions[0], tuple(name for _, _, name in sorted(actions))


def rule(
    cls: Optional[type] = None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    priority: int = DEFAULT_PRIORITY,
    enabled: bool = True,
    tags: tuple[str, ...] = (),
    registry: Optional[RuleRegistry] = None,
) -> Any:
    """
    규칙 클래스 데코레이터

    Args:
        name: 규칙 이름 (생략하면 클래스 이름)
        priority: 정렬용 priority
        registry: 지정하면 as_rule(cls)을 팩토리로 등록

    클래스는 인자 없이 생성할 수 있어야 합니다.
    """

    def _decorate(target: type) -> type:
        condition_name, action_names = _collect(target)
        metadata = RuleMetadata(
            name=name or target.__name__,
            description=description or DEFAULT_DESCRIPTION,
            priority=priority,
            enabled=enabled,
            tags=tuple(tags),
            condition=condition_name,
            actions=action_names,
        )
        setattr(target, _RULE_ATTR, metadata)

        if registry is not None:
            register_rule_class(registry, target)
        return target

    if cls is not None:
        return _decorate(cls)
    return _decorate


def rule_metadata(target: Union[type, object]) -> RuleMetadata:
    """@rule 메타데이터 조회"""
    cls = target if isinstance(target, type) else type(target)
    metadata = getattr(cls, _RULE_ATTR, None)
    if metadata is None:
        raise InvalidArgument(f"'{cls.__name__}' is not decorated with @rule")
    return metadata


def register_rule_class(registry: RuleRegistry, cls: type) -> None:
    """@rule 클래스를 레지스트리에 팩토리로 등록"""
    metadata = rule_metadata(cls)
    registry.register(
        lambda: as_rule(cls),
        name=metadata.name,
        priority=metadata.priority,
        description=metadata.description,
        enabled=metadata.enabled,
        tags=metadata.tags,
    )


def _arguments(binding: Binding, facts: FactsStore) -> dict[str, Any]:
    return {
        parameter: facts if ref is None else require_fact(facts, ref.name, ref.expected_type)
        for parameter, ref in binding
    }


def _bound_condition(method: Callable[..., Any]) -> Condition:
    binding = getattr(method, _BINDING_ATTR)

    def _condition(facts: FactsStore) -> Any:
        return method(**_arguments(binding, facts))

    return _condition


def _bound_action(method: Callable[..., Any]) -> Action:
    binding = getattr(method, _BINDING_ATTR)

    if inspect.iscoroutinefunction(method):

        async def _async_action(facts: FactsStore) -> FactsStore:
            result = await method(**_arguments(binding, facts))
            return facts if result is None else result

        return _async_action

    def _action(facts: FactsStore) -> FactsStore:
        result = method(**_arguments(binding, facts))
        return facts if result is None else result

    return _action


def as_rule(target: Union[type, object]) -> BasicRule:
    """
    @rule 클래스(또는 인스턴스)를 BasicRule로 변환

    클래스를 넘기면 인자 없이 인스턴스를 만듭니다.
    """
    metadata = rule_metadata(target)
    instance = target() if isinstance(target, type) else target

    return BasicRule(
        name=metadata.name,
        description=metadata.description,
        priority=metadata.priority,
        condition=_bound_condition(getattr(instance, metadata.condition)),
        actions=tuple(_bound_action(getattr(instance, name)) for name in metadata.actions),
    )
