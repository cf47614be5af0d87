"""
RuleSet 테스트

정렬: priority → 이름(대소문자 구분)
중복: 이름 대소문자 무시로 교체
"""

import threading

import pytest

from factflow.errors import InvalidArgument
from factflow.rules import BasicRule, RuleSet


def make_rule(name: str, priority: int = 1) -> BasicRule:
    return BasicRule(name=name, priority=priority)


class TestRuleSetRegistration:
    """등록/해제 테스트"""

    def test_new_ruleset_is_empty(self) -> None:
        rules = RuleSet()

        assert rules.is_empty is True
        assert rules.size == 0
        assert len(rules) == 0

    def test_names_differing_only_by_case_replace_each_other(self) -> None:
        """대소문자만 다른 이름을 두 번 등록하면 두 번째 규칙만 남아야 합니다."""
        first = make_rule("discount")
        second = make_rule("DISCOUNT")

        rules = RuleSet().register(first, second)

        assert rules.size == 1
        assert list(rules) == [second]

    def test_register_rejects_none(self) -> None:
        with pytest.raises(InvalidArgument):
            RuleSet().register(make_rule("a"), None)

    def test_unregister_removes_rule(self) -> None:
        a, b = make_rule("a"), make_rule("b")
        rules = RuleSet.of(a, b)

        rules.unregister(a)

        assert list(rules) == [b]

    def test_unregister_absent_rule_is_noop(self) -> None:
        rules = RuleSet.of(make_rule("a"))

        rules.unregister(make_rule("a"))

        assert rules.size == 1, "다른 객체는 이름이 같아도 제거되지 않아야 합니다"

    def test_unregister_by_name_is_case_insensitive(self) -> None:
        rules = RuleSet.of(make_rule("HighValueOrder"), make_rule("other"))

        rules.unregister_by_name("highvalueorder")
        rules.unregister_by_name("missing")

        assert [rule.name for rule in rules] == ["other"]

    def test_find_is_case_insensitive(self) -> None:
        rule = make_rule("HighValueOrder")
        rules = RuleSet.of(rule)

        assert rules.find("HIGHVALUEORDER") is rule
        assert rules.find("nope") is None

    def test_clear(self) -> None:
        rules = RuleSet.of(make_rule("a"), make_rule("b"))

        rules.clear()

        assert rules.is_empty


class TestRuleSetOrdering:
    """정렬 순서 테스트"""

    def test_sorted_by_priority_then_name(self) -> None:
        rules = RuleSet.of(
            make_rule("c", 2),
            make_rule("b", 1),
            make_rule("a", 3),
            make_rule("a1", 1),
        )

        assert [rule.name for rule in rules] == ["a1", "b", "c", "a"]

    def test_name_tie_break_is_case_sensitive(self) -> None:
        """대문자가 소문자보다 먼저 온다 (ordinal 비교)"""
        rules = RuleSet.of(make_rule("alpha"), make_rule("Zeta"))

        assert [rule.name for rule in rules] == ["Zeta", "alpha"]

    def test_replacement_keeps_sort_order(self) -> None:
        rules = RuleSet.of(make_rule("a", 1), make_rule("b", 2))

        rules.register(make_rule("A", 3))

        assert [(rule.name, rule.priority) for rule in rules] == [("b", 2), ("A", 3)]


class TestRuleSetSnapshots:
    """순회는 시작 시점 스냅샷을 사용해야 합니다."""

    def test_registration_during_iteration_does_not_affect_iteration(self) -> None:
        rules = RuleSet.of(make_rule("a", 1), make_rule("b", 2))

        seen = []
        for rule in rules:
            seen.append(rule.name)
            rules.register(make_rule(f"late-{rule.name}", 0))

        assert seen == ["a", "b"]
        assert rules.size == 4

    def test_concurrent_registration(self) -> None:
        rules = RuleSet()

        def register_batch(offset: int) -> None:
            for i in range(50):
                rules.register(make_rule(f"rule-{offset}-{i}", i))

        threads = [threading.Thread(target=register_batch, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert rules.size == 200
        snapshot = rules.snapshot()
        assert list(snapshot) == sorted(snapshot, key=lambda r: (r.priority, r.name))


class NamedOnly:
    """Rule 계약을 흉내 낸 최소 객체 (검증 실패 확인용)"""

    def __init__(self, name, priority=1) -> None:
        self.name = name
        self.priority = priority
        self.description = ""
        self.actions = ()

    def condition(self, facts) -> bool:
        return True


class TestRuleSetValidation:
    """잘못된 규칙이 섞인 등록은 기존 목록을 바꾸지 않아야 합니다."""

    @pytest.mark.parametrize("bad", [NamedOnly(None), NamedOnly(""), NamedOnly("x", priority="1")])
    def test_failed_register_leaves_set_sorted_and_unchanged(self, bad) -> None:
        rules = RuleSet.of(make_rule("late", 5))

        with pytest.raises(InvalidArgument):
            rules.register(make_rule("early", 1), bad)

        assert [rule.name for rule in rules] == ["late"]

    def test_register_after_failure_keeps_order(self) -> None:
        rules = RuleSet.of(make_rule("late", 5))
        with pytest.raises(InvalidArgument):
            rules.register(make_rule("early", 1), NamedOnly(None))

        rules.register(make_rule("early", 1))

        assert [rule.priority for rule in rules] == [1, 5]


class TestRuleSetCaseMapping:
    """이름 비교는 문자 단위 소문자 변환만 사용합니다."""

    def test_sharp_s_is_not_folded_into_ss(self) -> None:
        rules = RuleSet.of(make_rule("Straße"), make_rule("STRASSE"))

        assert rules.size == 2

    def test_simple_case_difference_still_replaces(self) -> None:
        rules = RuleSet.of(make_rule("Straße"), make_rule("STRAßE"))

        assert [rule.name for rule in rules] == ["STRAßE"]
