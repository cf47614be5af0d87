"""
비동기 엔진

SequentialEngine / ForwardChainingEngine과 같은 상태 기계를 asyncio 위에서
실행합니다. 조건과 액션은 일반 함수 또는 코루틴 함수 모두 가능하며,
awaitable을 반환하면 await합니다. 리스너 콜백은 동기로 호출됩니다.

중단(suspend) 지점은 조건 평가와 액션 실행뿐입니다.

취소는 협조적입니다. cancel 이벤트를 다음 시점에 확인합니다:
- 각 규칙 반복의 시작
- 조건 평가 직전
- 각 액션 실행 직전
취소되면 그 시점에 커밋된 facts를 담은 FiringCancelled를 던집니다.
"""

import asyncio
import inspect
from typing import Any, Optional

import structlog

from factflow.engine.base import AbstractEngine, StepResult
from factflow.engine.parameters import EngineParameters
from factflow.errors import ActionExecutionError, FiringCancelled, InvalidArgument
from factflow.facts.store import FactsStore
from factflow.rules.base import Rule
from factflow.rules.ruleset import RuleSet

logger = structlog.get_logger(__name__)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _check_cancelled(
    cancel: Optional[asyncio.Event], facts: FactsStore, rule: Optional[Rule] = None
) -> None:
    if cancel is not None and cancel.is_set():
        rule_name = rule.name if rule is not None else None
        logger.info("firing_cancelled", rule=rule_name, facts=len(facts))
        raise FiringCancelled(facts, rule_name)


class AsyncSequentialEngine(AbstractEngine):
    """비동기 순차 규칙 엔진"""

    async def fire(
        self,
        rules: RuleSet,
        facts: FactsStore,
        cancel: Optional[asyncio.Event] = None,
    ) -> FactsStore:
        """
        규칙 실행 (비동기)

        Raises:
            FiringCancelled: cancel 이벤트가 설정된 경우 (.facts = 취소 시점 facts)
        """
        self._validate(rules, facts)
        snapshot = rules.snapshot()

        self._notify_before_rules(rules, facts)
        logger.debug("async_firing_started", rules=len(snapshot), facts=len(facts))

        current = facts
        for rule in snapshot:
            _check_cancelled(cancel, current, rule)
            current, stop = await self._step(rule, current, cancel)
            if stop:
                logger.debug("async_firing_stopped", rule=rule.name)
                break

        self._notify_after_rules(rules, current)
        return current

    async def check(
        self,
        rules: RuleSet,
        facts: FactsStore,
        cancel: Optional[asyncio.Event] = None,
    ) -> dict[Rule, bool]:
        self._validate(rules, facts)
        self._notify_before_rules(rules, facts)

        results: dict[Rule, bool] = {}
        for rule in rules.snapshot():
            _check_cancelled(cancel, facts, rule)
            if self._exceeds_threshold(rule):
                break
            if not self._should_evaluate(rule, facts):
                continue
            _check_cancelled(cancel, facts, rule)
            try:
                results[rule] = bool(await _resolve(rule.condition(facts)))
            except Exception as exc:
                logger.debug("check_condition_failed", rule=rule.name, error=repr(exc))
                results[rule] = False

        self._notify_after_rules(rules, facts)
        return results

    # === 내부 ===

    async def _step(
        self, rule: Rule, current: FactsStore, cancel: Optional[asyncio.Event]
    ) -> StepResult:
        if self._exceeds_threshold(rule):
            return current, True

        if not self._should_evaluate(rule, current):
            return current, False

        _check_cancelled(cancel, current, rule)
        try:
            triggered = bool(await _resolve(rule.condition(current)))
        except Exception as exc:
            return self._on_condition_error(rule, current, exc)

        skipped = self._on_condition_result(rule, current, triggered)
        if skipped is not None:
            return skipped

        result, error = await self._run_actions(rule, current, cancel)
        return self._on_actions_done(rule, current, result, error)

    async def _run_actions(
        self, rule: Rule, facts: FactsStore, cancel: Optional[asyncio.Event]
    ) -> tuple[FactsStore, Optional[ActionExecutionError]]:
        current = facts
        for index, action in enumerate(rule.actions):
            # 취소 시 부분 적용된 액션 결과는 커밋되지 않음
            _check_cancelled(cancel, facts, rule)
            try:
                current = self._ensure_store(await _resolve(action(current)))
            except Exception as exc:
                return current, self._action_error(rule, index, exc)
        return current, None


class AsyncForwardChainingEngine(AbstractEngine):
    """비동기 순방향 추론 엔진"""

    def __init__(
        self,
        parameters: Optional[EngineParameters] = None,
        max_iterations: Optional[int] = None,
    ) -> None:
        super().__init__(parameters)
        if max_iterations is not None and max_iterations < 1:
            raise InvalidArgument(f"max_iterations must be positive, got {max_iterations}")
        self._max_iterations = max_iterations
        self._delegate = AsyncSequentialEngine(
            self._parameters,
            rule_listeners=self._rule_listeners,
            engine_listeners=self._engine_listeners,
        )

    @property
    def max_iterations(self) -> Optional[int]:
        return self._max_iterations

    async def fire(
        self,
        rules: RuleSet,
        facts: FactsStore,
        cancel: Optional[asyncio.Event] = None,
    ) -> FactsStore:
        self._validate(rules, facts)
        snapshot = rules.snapshot()

        current = facts
        iteration = 0
        while True:
            candidates = await self._select_candidates(snapshot, current, cancel)
            if not candidates:
                logger.debug("async_inference_finished", iterations=iteration)
                return current

            if self._max_iterations is not None and iteration >= self._max_iterations:
                logger.warning(
                    "inference_iteration_limit_reached",
                    max_iterations=self._max_iterations,
                    candidates=[rule.name for rule in candidates],
                )
                return current

            iteration += 1
            current = await self._delegate.fire(RuleSet(candidates), current, cancel)

    async def check(
        self,
        rules: RuleSet,
        facts: FactsStore,
        cancel: Optional[asyncio.Event] = None,
    ) -> dict[Rule, bool]:
        self._validate(rules, facts)
        return await self._delegate.check(rules, facts, cancel)

    @staticmethod
    async def _select_candidates(
        rules: tuple[Rule, ...], facts: FactsStore, cancel: Optional[asyncio.Event]
    ) -> list[Rule]:
        candidates: list[Rule] = []
        for rule in rules:
            _check_cancelled(cancel, facts, rule)
            try:
                if await _resolve(rule.condition(facts)):
                    candidates.append(rule)
            except Exception as exc:
                logger.debug("candidate_condition_failed", rule=rule.name, error=repr(exc))
        return candidates
