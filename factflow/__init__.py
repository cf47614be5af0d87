"""
factflow: 불변 facts 기반 순방향 추론 규칙 엔진

    from factflow import FactsStore, RuleBuilder, RuleSet, SequentialEngine
    from factflow.rules.actions import set_fact

    rules = RuleSet.of(
        RuleBuilder.create("HighValueOrder")
        .priority(10)
        .when(lambda f: f.try_get("orderTotal", int)[1] >= 1000)
        .then(set_fact("discountApplied", True))
        .build()
    )
    final = SequentialEngine().fire(rules, FactsStore.of(orderTotal=1500))
"""

from factflow.engine import (
    AsyncForwardChainingEngine,
    AsyncSequentialEngine,
    EngineListener,
    EngineParameters,
    ForwardChainingEngine,
    RuleListener,
    SequentialEngine,
)
from factflow.errors import (
    ActionExecutionError,
    ConditionEvaluationError,
    FactflowError,
    FiringCancelled,
    InvalidArgument,
    MissingFact,
)
from factflow.facts import Fact, FactsStore, require_fact
from factflow.rules import BasicRule, Rule, RuleBuilder, RuleRegistry, RuleSet

__version__ = "0.1.0"

__all__ = [
    "ActionExecutionError",
    "AsyncForwardChainingEngine",
    "AsyncSequentialEngine",
    "BasicRule",
    "ConditionEvaluationError",
    "EngineListener",
    "EngineParameters",
    "Fact",
    "FactflowError",
    "FactsStore",
    "FiringCancelled",
    "ForwardChainingEngine",
    "InvalidArgument",
    "MissingFact",
    "Rule",
    "RuleBuilder",
    "RuleListener",
    "RuleRegistry",
    "RuleSet",
    "SequentialEngine",
    "require_fact",
]
