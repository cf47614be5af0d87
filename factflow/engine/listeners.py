"""
리스너 계약

RuleListener   : 규칙 단위 훅 (before_evaluate는 평가 여부를 결정하는 게이트)
EngineListener : 실행(pass) 단위 훅

리스너는 등록 순서대로 동기 호출됩니다. 리스너가 던진 예외는 엔진이
잡지 않으며 fire()/check() 밖으로 그대로 전파됩니다.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

from factflow.facts.store import FactsStore
from factflow.rules.base import Rule

if TYPE_CHECKING:
    from factflow.rules.ruleset import RuleSet

# 평가 게이트: (rule, facts) → 평가할지 여부
GatePredicate = Callable[[Rule, FactsStore], bool]


class RuleListener:
    """
    규칙 단위 리스너

    필요한 훅만 오버라이드하면 됩니다. 기본 구현은 아무것도 하지 않으며
    before_evaluate는 True를 반환합니다.
    """

    def before_evaluate(self, rule: Rule, facts: FactsStore) -> bool:
        """False를 반환하면 이번 실행에서 이 규칙을 건너뜁니다."""
        return True

    def after_evaluate(self, rule: Rule, facts: FactsStore, triggered: bool) -> None:
        pass

    def on_evaluation_error(self, rule: Rule, facts: FactsStore, error: Exception) -> None:
        pass

    def before_execute(self, rule: Rule, facts: FactsStore) -> None:
        pass

    def on_success(self, rule: Rule, facts: FactsStore) -> None:
        pass

    def on_failure(self, rule: Rule, facts: FactsStore, error: Exception) -> None:
        """facts는 실패한 액션 직전의 store입니다."""
        pass


class EngineListener:
    """실행(pass) 단위 리스너. 순방향 추론 엔진에서는 반복마다 호출됩니다."""

    def before_evaluate(self, rules: "RuleSet", facts: FactsStore) -> None:
        pass

    def after_execute(self, rules: "RuleSet", facts: FactsStore) -> None:
        pass


class EvaluationGate(RuleListener):
    """일반 함수를 before_evaluate 게이트로 감싼 리스너"""

    def __init__(self, predicate: GatePredicate) -> None:
        self._predicate = predicate

    def before_evaluate(self, rule: Rule, facts: FactsStore) -> bool:
        return bool(self._predicate(rule, facts))

    def __repr__(self) -> str:
        return f"EvaluationGate({self._predicate!r})"


class LoggingRuleListener(RuleListener):
    """모든 규칙 전이를 structlog로 기록"""

    def __init__(self, logger: Any = None) -> None:
        self._logger = logger or structlog.get_logger("factflow.rules")

    def after_evaluate(self, rule: Rule, facts: FactsStore, triggered: bool) -> None:
        self._logger.debug("rule_evaluated", rule=rule.name, triggered=triggered)

    def on_evaluation_error(self, rule: Rule, facts: FactsStore, error: Exception) -> None:
        self._logger.warning("rule_evaluation_failed", rule=rule.name, error=str(error))

    def before_execute(self, rule: Rule, facts: FactsStore) -> None:
        self._logger.debug("rule_executing", rule=rule.name, priority=rule.priority)

    def on_success(self, rule: Rule, facts: FactsStore) -> None:
        self._logger.info("rule_applied", rule=rule.name, facts=repr(facts))

    def on_failure(self, rule: Rule, facts: FactsStore, error: Exception) -> None:
        self._logger.warning("rule_failed", rule=rule.name, error=str(error))


class LoggingEngineListener(EngineListener):
    """실행 시작/종료를 structlog로 기록"""

    def __init__(self, logger: Any = None) -> None:
        self._logger = logger or structlog.get_logger("factflow.engine")

    def before_evaluate(self, rules: "RuleSet", facts: FactsStore) -> None:
        self._logger.info("rules_firing", rules=len(rules), facts=repr(facts))

    def after_execute(self, rules: "RuleSet", facts: FactsStore) -> None:
        self._logger.info("rules_fired", rules=len(rules), facts=repr(facts))
