"""
SequentialEngine

RuleSet을 정렬 순서대로 한 번 훑으면서 발동한 규칙의 액션을 적용합니다.
facts는 불변이므로 실행은 fold 형태입니다:

    current = F0
    for rule in rules:
        current, stop = step(rule, current)
        if stop: break

각 규칙은 이전 규칙이 만든 facts를 입력으로 받습니다.
"""

from typing import Optional

import structlog

from factflow.engine.base import AbstractEngine, StepResult
from factflow.errors import ActionExecutionError
from factflow.facts.store import FactsStore
from factflow.rules.base import Rule
from factflow.rules.ruleset import RuleSet

logger = structlog.get_logger(__name__)


class SequentialEngine(AbstractEngine):
    """
    순차 규칙 엔진

    규칙 단위 실패(조건/액션 예외)는 리스너로 통지되고 fire() 밖으로
    나가지 않습니다. 리스너 예외는 그대로 전파됩니다.
    """

    def fire(self, rules: RuleSet, facts: FactsStore) -> FactsStore:
        """
        규칙 실행

        Args:
            rules: 실행할 규칙 모음 (시작 시점 스냅샷 사용)
            facts: 초기 facts

        Returns:
            최종 facts
        """
        self._validate(rules, facts)
        snapshot = rules.snapshot()

        self._notify_before_rules(rules, facts)
        logger.debug("firing_started", rules=len(snapshot), facts=len(facts))

        current = facts
        for rule in snapshot:
            current, stop = self._step(rule, current)
            if stop:
                logger.debug("firing_stopped", rule=rule.name)
                break

        logger.debug("firing_finished", facts=len(current))
        self._notify_after_rules(rules, current)
        return current

    def check(self, rules: RuleSet, facts: FactsStore) -> dict[Rule, bool]:
        """
        조건만 평가 (액션 실행 없음)

        모든 규칙을 원본 facts에 대해 평가합니다. 평가 예외는 False,
        게이트에서 거부된 규칙은 결과에 포함되지 않습니다.
        """
        self._validate(rules, facts)
        self._notify_before_rules(rules, facts)

        results: dict[Rule, bool] = {}
        for rule in rules.snapshot():
            if self._exceeds_threshold(rule):
                break
            if not self._should_evaluate(rule, facts):
                continue
            try:
                results[rule] = bool(rule.condition(facts))
            except Exception as exc:
                logger.debug("check_condition_failed", rule=rule.name, error=repr(exc))
                results[rule] = False

        self._notify_after_rules(rules, facts)
        return results

    # === 내부 ===

    def _step(self, rule: Rule, current: FactsStore) -> StepResult:
        """규칙 하나를 평가하고, 발동하면 액션을 실행합니다."""
        if self._exceeds_threshold(rule):
            return current, True

        if not self._should_evaluate(rule, current):
            return current, False

        try:
            triggered = bool(rule.condition(current))
        except Exception as exc:
            return self._on_condition_error(rule, current, exc)

        skipped = self._on_condition_result(rule, current, triggered)
        if skipped is not None:
            return skipped

        result, error = self._run_actions(rule, current)
        return self._on_actions_done(rule, current, result, error)

    def _run_actions(
        self, rule: Rule, facts: FactsStore
    ) -> tuple[FactsStore, Optional[ActionExecutionError]]:
        """
        액션을 순서대로 실행

        Returns:
            성공: (최종 store, None)
            실패: (실패한 액션 직전 store, 오류)
        """
        current = facts
        for index, action in enumerate(rule.actions):
            try:
                current = self._ensure_store(action(current))
            except Exception as exc:
                return current, self._action_error(rule, index, exc)
        return current, None
