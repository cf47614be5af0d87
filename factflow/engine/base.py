"""
엔진 공통 기반

파라미터와 리스너 보관, 리스너 통지, 규칙 한 단계(step)의 결과 처리를
담당합니다. 동기/비동기 엔진은 조건과 액션을 "어떻게 호출하는지"만
다르고, 호출 결과를 처리하는 규칙은 여기서 공유합니다.
"""

from collections.abc import Iterable
from typing import Optional

import structlog

from factflow.engine.listeners import EngineListener, EvaluationGate, GatePredicate, RuleListener
from factflow.engine.parameters import EngineParameters
from factflow.errors import ActionExecutionError, ConditionEvaluationError, InvalidArgument
from factflow.facts.store import FactsStore
from factflow.rules.base import Rule
from factflow.rules.ruleset import RuleSet

logger = structlog.get_logger(__name__)

# 한 단계의 결과: (다음 facts, 실행 중단 여부)
StepResult = tuple[FactsStore, bool]


class AbstractEngine:
    """
    규칙 엔진 기반 클래스

    하위 클래스가 fire()와 check()를 구현합니다.
    """

    def __init__(
        self,
        parameters: Optional[EngineParameters] = None,
        rule_listeners: Optional[list[RuleListener]] = None,
        engine_listeners: Optional[list[EngineListener]] = None,
    ) -> None:
        self._parameters = parameters or EngineParameters()
        # 위임 엔진과 같은 리스트를 공유할 수 있도록 전달받은 리스트를 그대로 사용
        self._rule_listeners: list[RuleListener] = rule_listeners if rule_listeners is not None else []
        self._engine_listeners: list[EngineListener] = (
            engine_listeners if engine_listeners is not None else []
        )

    # === 파라미터 / 리스너 ===

    @property
    def parameters(self) -> EngineParameters:
        return self._parameters

    @property
    def rule_listeners(self) -> tuple[RuleListener, ...]:
        """등록된 규칙 리스너 (읽기 전용)"""
        return tuple(self._rule_listeners)

    @property
    def engine_listeners(self) -> tuple[EngineListener, ...]:
        return tuple(self._engine_listeners)

    def register_rule_listener(self, listener: RuleListener) -> "AbstractEngine":
        if listener is None:
            raise InvalidArgument("Rule listener must not be None")
        self._rule_listeners.append(listener)
        return self

    def register_rule_listeners(self, listeners: Iterable[RuleListener]) -> "AbstractEngine":
        for listener in listeners:
            self.register_rule_listener(listener)
        return self

    def register_engine_listener(self, listener: EngineListener) -> "AbstractEngine":
        if listener is None:
            raise InvalidArgument("Engine listener must not be None")
        self._engine_listeners.append(listener)
        return self

    def register_engine_listeners(self, listeners: Iterable[EngineListener]) -> "AbstractEngine":
        for listener in listeners:
            self.register_engine_listener(listener)
        return self

    def register_gate(self, predicate: GatePredicate) -> "AbstractEngine":
        """
        평가 게이트 등록

        predicate(rule, facts)가 False면 해당 규칙은 이번 실행에서 건너뜁니다.
        다른 규칙 리스너와 같은 순서 목록에 들어갑니다.
        """
        if not callable(predicate):
            raise InvalidArgument("Gate predicate must be callable")
        return self.register_rule_listener(EvaluationGate(predicate))

    # === 입력 검증 ===

    @staticmethod
    def _validate(rules: RuleSet, facts: FactsStore) -> None:
        if not isinstance(rules, RuleSet):
            raise InvalidArgument(f"Expected a RuleSet, got {type(rules).__name__}")
        if not isinstance(facts, FactsStore):
            raise InvalidArgument(f"Expected a FactsStore, got {type(facts).__name__}")

    # === 규칙 한 단계 처리 (sync/async 공통) ===

    def _exceeds_threshold(self, rule: Rule) -> bool:
        """
        priority가 threshold를 넘으면 전체 실행 중단

        RuleSet이 priority 오름차순이므로 이후 규칙도 모두 넘는다.
        """
        if rule.priority > self._parameters.priority_threshold:
            logger.debug(
                "priority_threshold_reached",
                rule=rule.name,
                priority=rule.priority,
                threshold=self._parameters.priority_threshold,
            )
            return True
        return False

    def _on_condition_error(self, rule: Rule, facts: FactsStore, exc: Exception) -> StepResult:
        error = ConditionEvaluationError(rule.name, exc)
        logger.warning("condition_failed", rule=rule.name, error=repr(exc))
        self._notify_evaluation_error(rule, facts, error)
        return facts, self._parameters.stop_after_first_non_triggered

    def _on_condition_result(self, rule: Rule, facts: FactsStore, triggered: bool) -> Optional[StepResult]:
        """
        조건 평가 결과 통지

        Returns:
            발동하지 않았으면 단계 결과, 발동했으면 None (액션 실행으로 진행)
        """
        self._notify_after_evaluate(rule, facts, triggered)
        if not triggered:
            return facts, self._parameters.stop_after_first_non_triggered

        self._notify_before_execute(rule, facts)
        return None

    def _on_actions_done(
        self,
        rule: Rule,
        facts: FactsStore,
        result: FactsStore,
        error: Optional[ActionExecutionError],
    ) -> StepResult:
        """
        액션 실행 결과 처리

        실패 시 result는 실패한 액션 직전의 store이고, 커밋되는 facts는
        규칙 실행 전 값 그대로입니다.
        """
        if error is not None:
            logger.warning(
                "action_failed",
                rule=rule.name,
                action_index=error.action_index,
                error=repr(error.cause),
            )
            self._notify_failure(rule, result, error)
            return facts, self._parameters.stop_after_first_failed

        self._notify_success(rule, result)
        return result, self._parameters.stop_after_first_applied

    @staticmethod
    def _action_error(rule: Rule, index: int, exc: Exception) -> ActionExecutionError:
        return ActionExecutionError(rule.name, index, exc)

    @staticmethod
    def _ensure_store(value: object) -> FactsStore:
        if not isinstance(value, FactsStore):
            raise TypeError(f"Action returned {type(value).__name__}, expected FactsStore")
        return value

    # === 리스너 통지 ===

    def _should_evaluate(self, rule: Rule, facts: FactsStore) -> bool:
        for listener in self._rule_listeners:
            if not listener.before_evaluate(rule, facts):
                logger.debug("rule_skipped_by_listener", rule=rule.name)
                return False
        return True

    def _notify_after_evaluate(self, rule: Rule, facts: FactsStore, triggered: bool) -> None:
        for listener in self._rule_listeners:
            listener.after_evaluate(rule, facts, triggered)

    def _notify_evaluation_error(self, rule: Rule, facts: FactsStore, error: Exception) -> None:
        for listener in self._rule_listeners:
            listener.on_evaluation_error(rule, facts, error)

    def _notify_before_execute(self, rule: Rule, facts: FactsStore) -> None:
        for listener in self._rule_listeners:
            listener.before_execute(rule, facts)

    def _notify_success(self, rule: Rule, facts: FactsStore) -> None:
        for listener in self._rule_listeners:
            listener.on_success(rule, facts)

    def _notify_failure(self, rule: Rule, facts: FactsStore, error: Exception) -> None:
        for listener in self._rule_listeners:
            listener.on_failure(rule, facts, error)

    def _notify_before_rules(self, rules: RuleSet, facts: FactsStore) -> None:
        for listener in self._engine_listeners:
            listener.before_evaluate(rules, facts)

    def _notify_after_rules(self, rules: RuleSet, facts: FactsStore) -> None:
        for listener in self._engine_listeners:
            listener.after_execute(rules, facts)
