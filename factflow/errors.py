"""
factflow 예외 정의

규칙 엔진이 발생시키는 모든 예외는 FactflowError를 상속한다.
- InvalidArgument          : 잘못된 인자 (빈 fact 이름, None 값 등)
- MissingFact              : 필요한 fact가 없거나 타입이 다름
- ConditionEvaluationError : 규칙 조건 평가 실패
- ActionExecutionError     : 규칙 액션 실행 실패
- FiringCancelled          : 비동기 실행이 협조적으로 취소됨
"""

from typing import Any, Optional


def _type_name(expected_type: Any) -> str:
    if isinstance(expected_type, tuple):
        return " | ".join(t.__name__ for t in expected_type)
    return expected_type.__name__


class FactflowError(Exception):
    """factflow 기본 예외"""

    code: str = "FACTFLOW_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidArgument(FactflowError, ValueError):
    """규칙이나 fact를 건드리기 전에 즉시 실패하는 인자 오류"""

    code = "INVALID_ARGUMENT"


class MissingFact(FactflowError, KeyError):
    """
    규칙이 요구하는 fact가 없거나 기대한 타입이 아닐 때

    FactsStore.try_get() 계약 위에서 어댑터 계층이 사용한다.
    """

    code = "MISSING_FACT"

    def __init__(self, fact_name: str, expected_type: Any = object) -> None:
        self.fact_name = fact_name
        self.expected_type = expected_type
        type_name = _type_name(expected_type)
        super().__init__(
            f"Fact '{fact_name}' is missing or is not of type {type_name}",
            {"fact_name": fact_name, "expected_type": type_name},
        )

    def __str__(self) -> str:
        # KeyError.__str__ 는 repr을 돌려주므로 메시지를 그대로 사용
        return self.message


class ConditionEvaluationError(FactflowError):
    """규칙 조건(condition) 호출이 예외를 던졌을 때"""

    code = "CONDITION_EVALUATION_ERROR"

    def __init__(self, rule_name: str, cause: BaseException) -> None:
        self.rule_name = rule_name
        self.cause = cause
        super().__init__(
            f"Condition of rule '{rule_name}' failed: {cause!r}",
            {"rule": rule_name},
        )
        self.__cause__ = cause


class ActionExecutionError(FactflowError):
    """규칙 액션(action) 호출이 예외를 던졌거나 FactsStore가 아닌 값을 반환했을 때"""

    code = "ACTION_EXECUTION_ERROR"

    def __init__(self, rule_name: str, action_index: int, cause: BaseException) -> None:
        self.rule_name = rule_name
        self.action_index = action_index
        self.cause = cause
        super().__init__(
            f"Action #{action_index} of rule '{rule_name}' failed: {cause!r}",
            {"rule": rule_name, "action_index": action_index},
        )
        self.__cause__ = cause


class FiringCancelled(FactflowError):
    """
    비동기 실행 취소

    취소 시점에 커밋되어 있던 facts를 그대로 담는다 (F0로 롤백하지 않음).
    """

    code = "FIRING_CANCELLED"

    def __init__(self, facts: Any, rule_name: Optional[str] = None) -> None:
        self.facts = facts
        self.rule_name = rule_name
        details = {"rule": rule_name} if rule_name else {}
        super().__init__("Rule firing was cancelled", details)
