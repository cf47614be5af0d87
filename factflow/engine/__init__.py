"""
Engine 패키지

순차 엔진, 순방향 추론 엔진, 비동기 엔진, 파라미터와 리스너
"""

from factflow.engine.async_engine import AsyncForwardChainingEngine, AsyncSequentialEngine
from factflow.engine.base import AbstractEngine
from factflow.engine.forward import ForwardChainingEngine
from factflow.engine.listeners import (
    EngineListener,
    EvaluationGate,
    LoggingEngineListener,
    LoggingRuleListener,
    RuleListener,
)
from factflow.engine.parameters import DEFAULT_PRIORITY_THRESHOLD, EngineParameters
from factflow.engine.sequential import SequentialEngine

__all__ = [
    "AbstractEngine",
    "AsyncForwardChainingEngine",
    "AsyncSequentialEngine",
    "DEFAULT_PRIORITY_THRESHOLD",
    "EngineListener",
    "EngineParameters",
    "EvaluationGate",
    "ForwardChainingEngine",
    "LoggingEngineListener",
    "LoggingRuleListener",
    "RuleListener",
    "SequentialEngine",
]
