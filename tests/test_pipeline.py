"""
E2E 테스트: 샘플 CLI 파이프라인 통합 검증

registry → ruleset → engine → 출력까지 한 번에 확인합니다.
"""

import pytest

from factflow.engine import LoggingEngineListener, LoggingRuleListener, SequentialEngine
from factflow.facts import FactsStore
from factflow.main import HIGH_VALUE_THRESHOLD, format_output, main, parse_args, run
from factflow.rules import BasicRule, RuleSet
from factflow.rules.actions import set_fact
from factflow.rules.conditions import TRUE


class RecordingLogger:
    """structlog 로거 대신 호출만 기록"""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict]] = []

    def _record(self, level):
        def _log(event, **kwargs):
            self.events.append((level, event, kwargs))

        return _log

    def __getattr__(self, level):
        return self._record(level)


def test_high_value_order_gets_discount_and_free_shipping():
    rules, before, after = run(parse_args([]))

    assert [rule.name for rule in rules] == ["HighValueOrder", "FreeShipping"]
    assert before.to_dict() == {"orderTotal": 1500, "orderId": "ORD-123"}
    assert after.try_get("discountApplied", bool) == (True, True)
    assert after.try_get("freeShipping", bool) == (True, True)


def test_low_value_order_is_unchanged():
    _, before, after = run(parse_args(["--order-total", str(HIGH_VALUE_THRESHOLD - 200)]))

    assert after == before
    assert "discountApplied" not in after


def test_inference_mode_reaches_same_conclusion():
    _, _, sequential = run(parse_args([]))
    _, _, inferred = run(parse_args(["--inference"]))

    assert inferred == sequential


def test_priority_threshold_skips_low_priority_rules():
    _, _, after = run(parse_args(["--priority-threshold", "15"]))

    assert after.contains("discountApplied")
    assert not after.contains("freeShipping"), "priority 20 규칙은 실행되지 않아야 합니다"


def test_fractional_total_is_kept_as_float():
    _, before, _ = run(parse_args(["--order-total", "1000.5"]))

    assert before.try_get("orderTotal", float) == (True, 1000.5)


def test_format_output_lists_rules_and_facts():
    rules, before, after = run(parse_args(["--order-id", "ORD-999"]))

    output = format_output(rules, before, after)

    assert "factflow 실행 결과" in output
    assert "HighValueOrder (priority=10)" in output
    assert "## Facts (before)" in output
    assert "orderId = 'ORD-999'" in output
    assert "discountApplied = True" in output


def test_format_output_marks_empty_facts():
    output = format_output(RuleSet(), FactsStore.empty(), FactsStore.empty())

    assert output.count("(empty)") == 2


def test_main_prints_result(capsys):
    main(["--order-total", "2000", "--log-level", "error"])

    captured = capsys.readouterr()
    assert "factflow 실행 결과" in captured.out
    assert "freeShipping = True" in captured.out


class TestLoggingListeners:
    """Logging 리스너가 규칙 전이를 기록하는지 확인"""

    def test_rule_transitions_are_logged(self):
        rule_logger = RecordingLogger()
        engine_logger = RecordingLogger()

        def broken(facts):
            raise RuntimeError("boom")

        rules = RuleSet.of(
            BasicRule("ok", priority=1, condition=TRUE, actions=(set_fact("ok", True),)),
            BasicRule("bad", priority=2, condition=broken),
        )
        engine = SequentialEngine()
        engine.register_rule_listener(LoggingRuleListener(rule_logger))
        engine.register_engine_listener(LoggingEngineListener(engine_logger))

        engine.fire(rules, FactsStore.empty())

        assert [event for _, event, _ in rule_logger.events] == [
            "rule_evaluated",
            "rule_executing",
            "rule_applied",
            "rule_evaluation_failed",
        ]
        assert rule_logger.events[-1][0] == "warning"
        assert rule_logger.events[-1][2]["rule"] == "bad"
        assert [event for _, event, _ in engine_logger.events] == ["rules_firing", "rules_fired"]

    @pytest.mark.parametrize("failing_action", [True, False])
    def test_failure_is_logged_only_for_failing_action(self, failing_action):
        logger = RecordingLogger()

        def action(facts):
            if failing_action:
                raise RuntimeError("boom")
            return facts

        engine = SequentialEngine()
        engine.register_rule_listener(LoggingRuleListener(logger))

        engine.fire(RuleSet.of(BasicRule("r", condition=TRUE, actions=(action,))), FactsStore.empty())

        events = [event for _, event, _ in logger.events]
        assert ("rule_failed" in events) is failing_action
        assert ("rule_applied" in events) is not failing_action
