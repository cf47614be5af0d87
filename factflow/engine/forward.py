"""
ForwardChainingEngine (순방향 추론)

후보 규칙(현재 facts에 대해 조건이 참인 규칙)이 없을 때까지 반복합니다:
1. 후보 집합 계산 (조건 예외는 후보 아님)
2. 비어 있으면 종료
3. 후보만으로 SequentialEngine 한 번 실행, 결과를 새 facts로 채택

반복 횟수 제한은 기본적으로 없습니다. 자기 조건을 다시 만드는 규칙은
무한 반복할 수 있으므로, 필요하면 max_iterations를 지정합니다.
"""

from typing import Optional

import structlog

from factflow.engine.base import AbstractEngine
from factflow.engine.parameters import EngineParameters
from factflow.engine.sequential import SequentialEngine
from factflow.errors import InvalidArgument
from factflow.facts.store import FactsStore
from factflow.rules.base import Rule
from factflow.rules.ruleset import RuleSet

logger = structlog.get_logger(__name__)


class ForwardChainingEngine(AbstractEngine):
    """
    순방향 추론 엔진

    리스너는 내부 SequentialEngine과 공유됩니다. 따라서 EngineListener는
    전체 추론당 한 번이 아니라 반복(pass)마다 호출됩니다.
    """

    def __init__(
        self,
        parameters: Optional[EngineParameters] = None,
        max_iterations: Optional[int] = None,
    ) -> None:
        super().__init__(parameters)
        if max_iterations is not None and max_iterations < 1:
            raise InvalidArgument(f"max_iterations must be positive, got {max_iterations}")
        self._max_iterations = max_iterations
        self._delegate = SequentialEngine(
            self._parameters,
            rule_listeners=self._rule_listeners,
            engine_listeners=self._engine_listeners,
        )

    @property
    def max_iterations(self) -> Optional[int]:
        return self._max_iterations

    def fire(self, rules: RuleSet, facts: FactsStore) -> FactsStore:
        self._validate(rules, facts)
        snapshot = rules.snapshot()

        current = facts
        iteration = 0
        while True:
            candidates = self._select_candidates(snapshot, current)
            if not candidates:
                logger.debug("inference_finished", iterations=iteration, facts=len(current))
                return current

            if self._max_iterations is not None and iteration >= self._max_iterations:
                logger.warning(
                    "inference_iteration_limit_reached",
                    max_iterations=self._max_iterations,
                    candidates=[rule.name for rule in candidates],
                )
                return current

            iteration += 1
            logger.debug(
                "inference_iteration",
                iteration=iteration,
                candidates=[rule.name for rule in candidates],
            )
            current = self._delegate.fire(RuleSet(candidates), current)

    def check(self, rules: RuleSet, facts: FactsStore) -> dict[Rule, bool]:
        self._validate(rules, facts)
        return self._delegate.check(rules, facts)

    @staticmethod
    def _select_candidates(rules: tuple[Rule, ...], facts: FactsStore) -> list[Rule]:
        """현재 facts에서 조건이 참인 규칙 (정렬 순서 유지)"""
        candidates: list[Rule] = []
        for rule in rules:
            try:
                if rule.condition(facts):
                    candidates.append(rule)
            except Exception as exc:
                logger.debug("candidate_condition_failed", rule=rule.name, error=repr(exc))
        return candidates
