"""
Rules 패키지

규칙 인터페이스, 기본 구현, 조건/액션 헬퍼, 데코레이터 어댑터, RuleSet
"""

from factflow.rules.base import (
    DEFAULT_DESCRIPTION,
    DEFAULT_NAME,
    DEFAULT_PRIORITY,
    Action,
    Condition,
    Rule,
)
from factflow.rules.basic import BasicRule
from factflow.rules.builder import RuleBuilder
from factflow.rules.decorators import RuleMetadata, as_rule, register_rule_class
from factflow.rules.registry import RuleDefinition, RuleRegistry
from factflow.rules.ruleset import RuleSet

__all__ = [
    "Action",
    "BasicRule",
    "Condition",
    "DEFAULT_DESCRIPTION",
    "DEFAULT_NAME",
    "DEFAULT_PRIORITY",
    "Rule",
    "RuleBuilder",
    "RuleDefinition",
    "RuleMetadata",
    "RuleRegistry",
    "RuleSet",
    "as_rule",
    "register_rule_class",
]
