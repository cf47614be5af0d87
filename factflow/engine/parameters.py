"""
엔진 실행 파라미터

- stop_after_first_applied       : 첫 규칙이 적용(성공)되면 실행 종료
- stop_after_first_non_triggered : 첫 규칙이 발동하지 않으면(또는 조건 평가 실패) 종료
- stop_after_first_failed        : 첫 액션 실패 시 종료
- priority_threshold             : 이 값보다 priority가 큰 규칙은 평가하지 않음
"""

from dataclasses import dataclass, replace

# 기본 threshold: 사실상 제한 없음
DEFAULT_PRIORITY_THRESHOLD = 2**31 - 1


@dataclass(frozen=True)
class EngineParameters:
    """엔진 실행 정책 (불변)"""

    stop_after_first_applied: bool = False
    stop_after_first_non_triggered: bool = False
    stop_after_first_failed: bool = False
    priority_threshold: int = DEFAULT_PRIORITY_THRESHOLD

    def with_stop_after_first_applied(self, stop: bool = True) -> "EngineParameters":
        return replace(self, stop_after_first_applied=stop)

    def with_stop_after_first_non_triggered(self, stop: bool = True) -> "EngineParameters":
        return replace(self, stop_after_first_non_triggered=stop)

    def with_stop_after_first_failed(self, stop: bool = True) -> "EngineParameters":
        return replace(self, stop_after_first_failed=stop)

    def with_priority_threshold(self, threshold: int) -> "EngineParameters":
        return replace(self, priority_threshold=threshold)

    def __str__(self) -> str:
        return (
            "Engine parameters { "
            f"stop_after_first_applied = {self.stop_after_first_applied}, "
            f"stop_after_first_non_triggered = {self.stop_after_first_non_triggered}, "
            f"stop_after_first_failed = {self.stop_after_first_failed}, "
            f"priority_threshold = {self.priority_threshold} }}"
        )
