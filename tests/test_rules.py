"""
규칙 구성 요소 테스트 (Rule Tests)

테스트 대상:
- BasicRule: 불변 규칙과 입력 검증
- conditions / actions: 조건 조합기와 액션 헬퍼
- RuleBuilder: fluent 빌더
- RuleRegistry: 팩토리 테이블
"""

import pytest

from factflow.errors import InvalidArgument
from factflow.facts import FactsStore
from factflow.rules import DEFAULT_PRIORITY, BasicRule, RuleBuilder, RuleRegistry
from factflow.rules.actions import from_effect, remove_fact, set_fact
from factflow.rules.conditions import (
    FALSE,
    TRUE,
    all_of,
    any_of,
    fact_equals,
    has_fact,
    negate,
)


class TestBasicRule:
    """BasicRule 테스트"""

    def test_defaults(self) -> None:
        rule = BasicRule("plain")

        assert rule.description == ""
        assert rule.priority == DEFAULT_PRIORITY
        assert rule.evaluate(FactsStore.empty()) is False
        assert rule.actions == ()

    def test_actions_are_frozen_as_tuple(self) -> None:
        actions = [set_fact("a", 1)]
        rule = BasicRule("r", condition=TRUE, actions=actions)
        actions.append(set_fact("b", 2))

        assert len(rule.actions) == 1, "외부 리스트 변경이 규칙에 반영되면 안 됩니다"
        assert rule.execute(FactsStore.empty()).to_dict() == {"a": 1}

    def test_rules_hash_by_identity(self) -> None:
        first = BasicRule("same", priority=1)
        second = BasicRule("same", priority=1)

        assert first != second
        assert len({first, second}) == 2

    @pytest.mark.parametrize("name", ["", "  ", None])
    def test_rejects_invalid_name(self, name) -> None:
        with pytest.raises(InvalidArgument):
            BasicRule(name)

    def test_rejects_non_callable_condition(self) -> None:
        with pytest.raises(InvalidArgument):
            BasicRule("r", condition=True)

    def test_rejects_non_callable_action(self) -> None:
        with pytest.raises(InvalidArgument):
            BasicRule("r", actions=("not callable",))


class TestConditionsAndActions:
    """조건 조합기 / 액션 헬퍼 테스트"""

    def test_combinators(self) -> None:
        facts = FactsStore.of(x=1)

        assert all_of(TRUE, has_fact("x"))(facts) is True
        assert all_of(TRUE, FALSE)(facts) is False
        assert any_of(FALSE, fact_equals("x", 1))(facts) is True
        assert any_of(FALSE, fact_equals("x", 2))(facts) is False
        assert negate(has_fact("y"))(facts) is True

    def test_has_fact_checks_type(self) -> None:
        facts = FactsStore.of(x="1")

        assert has_fact("x", str)(facts) is True
        assert has_fact("x", int)(facts) is False

    def test_all_of_short_circuits(self) -> None:
        def explode(facts):
            raise AssertionError("평가되면 안 됩니다")

        assert all_of(FALSE, explode)(FactsStore.empty()) is False

    def test_set_and_remove_fact(self) -> None:
        facts = set_fact("x", 1)(FactsStore.empty())

        assert facts.to_dict() == {"x": 1}
        assert remove_fact("x")(facts) == FactsStore.empty()

    def test_from_effect_passes_facts_through(self) -> None:
        seen: list[FactsStore] = []
        facts = FactsStore.of(x=1)

        assert from_effect(seen.append)(facts) is facts
        assert seen == [facts]


class TestRuleBuilder:
    """RuleBuilder 테스트"""

    def test_builds_rule_with_all_settings(self) -> None:
        seen: list[str] = []
        rule = (
            RuleBuilder.create("HighValueOrder")
            .description("Apply discount to high value orders")
            .priority(10)
            .when(has_fact("orderTotal"))
            .then(set_fact("discountApplied", True))
            .then_effect(lambda facts: seen.append("effect"))
            .build()
        )

        assert rule.name == "HighValueOrder"
        assert rule.description == "Apply discount to high value orders"
        assert rule.priority == 10
        assert rule.evaluate(FactsStore.of(orderTotal=1500)) is True
        assert rule.execute(FactsStore.empty()).to_dict() == {"discountApplied": True}
        assert seen == ["effect"]

    def test_default_rule_never_triggers(self) -> None:
        rule = RuleBuilder.create().build()

        assert rule.name == "rule"
        assert rule.evaluate(FactsStore.of(x=1)) is False

    def test_clear_actions(self) -> None:
        rule = RuleBuilder.create("r").then(set_fact("a", 1)).clear_actions().build()

        assert rule.actions == ()

    def test_rejects_non_callables(self) -> None:
        builder = RuleBuilder.create("r")

        with pytest.raises(InvalidArgument):
            builder.when("nope")
        with pytest.raises(InvalidArgument):
            builder.then(None)
        with pytest.raises(InvalidArgument):
            builder.name("")


class TestRuleRegistry:
    """RuleRegistry 테스트"""

    def test_definitions_sorted_by_priority_then_name(self) -> None:
        registry = RuleRegistry()
        registry.register(lambda: BasicRule("b", priority=1), name="b", priority=1)
        registry.register(lambda: BasicRule("Zeta", priority=1), name="Zeta", priority=1)
        registry.register(lambda: BasicRule("a", priority=0), name="a", priority=0)

        assert [d.name for d in registry.definitions()] == ["a", "b", "Zeta"]

    def test_reregistering_same_name_replaces(self) -> None:
        registry = RuleRegistry()
        registry.register(lambda: BasicRule("rule"), name="rule", description="old")
        registry.register(lambda: BasicRule("RULE"), name="RULE", description="new")

        assert len(registry) == 1
        assert registry.definitions()[0].description == "new"

    def test_build_ruleset_creates_enabled_rules(self) -> None:
        registry = RuleRegistry()
        registry.register(lambda: BasicRule("on", priority=1), name="on", priority=1)
        registry.register(lambda: BasicRule("off", priority=2), name="off", priority=2, enabled=False)

        assert [rule.name for rule in registry.build_ruleset()] == ["on"]
        assert [rule.name for rule in registry.build_ruleset(enabled_only=False)] == ["on", "off"]

    def test_factory_called_once_per_build(self) -> None:
        calls: list[int] = []

        def factory() -> BasicRule:
            calls.append(1)
            return BasicRule("counted")

        registry = RuleRegistry()
        registry.register(factory, name="counted")

        assert calls == [], "등록 시점에는 팩토리를 호출하지 않아야 합니다"
        registry.build_ruleset()
        assert calls == [1]

    def test_rejects_invalid_registration(self) -> None:
        registry = RuleRegistry()

        with pytest.raises(InvalidArgument):
            registry.register("not callable", name="x")
        with pytest.raises(InvalidArgument):
            registry.register(lambda: BasicRule("x"), name="")

    def test_clear(self) -> None:
        registry = RuleRegistry()
        registry.register(lambda: BasicRule("x"), name="x")

        registry.clear()

        assert len(registry) == 0
