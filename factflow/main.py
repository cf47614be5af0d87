"""
factflow 샘플 CLI

사용법:
    python -m factflow.main
    python -m factflow.main --order-total 800 --inference --log-level debug

주문 facts를 만들고 HighValueOrder / FreeShipping 규칙을 실행한 뒤,
실행 전/후 facts를 출력합니다.
"""

import argparse
from typing import Optional

import structlog

from factflow.engine import (
    ForwardChainingEngine,
    LoggingEngineListener,
    LoggingRuleListener,
    SequentialEngine,
)
from factflow.engine.parameters import EngineParameters
from factflow.facts.store import FactsStore
from factflow.logging import configure_logging
from factflow.rules.actions import set_fact
from factflow.rules.builder import RuleBuilder
from factflow.rules.decorators import action, condition, fact, rule
from factflow.rules.registry import RuleRegistry
from factflow.rules.ruleset import RuleSet

logger = structlog.get_logger(__name__)

# 할인 기준 금액
HIGH_VALUE_THRESHOLD = 1000


# 샘플 규칙 레지스트리 (@rule이 import 시점에 등록)
SAMPLE_RULES = RuleRegistry()


@rule(
    name="HighValueOrder",
    description="Apply discount to high value orders",
    priority=10,
    tags=("orders",),
    registry=SAMPLE_RULES,
)
class HighValueOrderRule:
    """주문 금액이 기준 이상이면 할인 적용"""

    @condition
    def is_high_value(self, facts: FactsStore, total=fact("orderTotal", (int, float))) -> bool:
        # 이미 할인된 주문은 다시 발동하지 않음 (순방향 추론 종료 조건)
        if facts.contains("discountApplied"):
            return False
        return total >= HIGH_VALUE_THRESHOLD

    @action(order=1)
    def apply_discount(self, facts: FactsStore, order_id=fact("orderId", str)) -> FactsStore:
        logger.info("discount_applied", order_id=order_id)
        return facts.with_fact("discountApplied", True)


# 할인이 적용된 주문에 무료 배송 추가 (순방향 추론에서 두 번째 반복에 발동)
SAMPLE_RULES.register(
    lambda: (
        RuleBuilder.create("FreeShipping")
        .description("Discounted orders ship for free")
        .priority(20)
        .when(lambda f: f.contains("discountApplied") and not f.contains("freeShipping"))
        .then(set_fact("freeShipping", True))
        .build()
    ),
    name="FreeShipping",
    priority=20,
    description="Discounted orders ship for free",
    tags=("orders",),
)


def format_facts(title: str, facts: FactsStore) -> str:
    """facts를 이름 순으로 정렬해 사람이 읽기 쉬운 형식으로 포맷합니다."""
    lines: list[str] = [f"## {title}"]
    for entry in sorted(facts, key=lambda f: f.name):
        lines.append(f"  - {entry.name} = {entry.value!r}")
    if not len(facts):
        lines.append("  (empty)")
    return "\n".join(lines)


def format_output(rules: RuleSet, before: FactsStore, after: FactsStore) -> str:
    """실행 결과 출력 문자열"""
    separator = "=" * 60
    lines: list[str] = [separator, "factflow 실행 결과", separator, ""]

    lines.append("## Rules")
    for item in rules:
        lines.append(f"  * {item.name} (priority={item.priority}) {item.description}")
    lines.append("")

    lines.append(format_facts("Facts (before)", before))
    lines.append("")
    lines.append(format_facts("Facts (after)", after))
    lines.append(separator)
    return "\n".join(lines)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="factflow sample: order discount rules")
    parser.add_argument("--order-total", type=float, default=1500, help="주문 금액")
    parser.add_argument("--order-id", default="ORD-123", help="주문 번호")
    parser.add_argument(
        "--inference",
        action="store_true",
        help="순방향 추론 엔진 사용 (기본: 순차 엔진)",
    )
    parser.add_argument("--priority-threshold", type=int, default=None)
    parser.add_argument("--log-level", default="warning")
    parser.add_argument("--json-logs", action="store_true")
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> tuple[RuleSet, FactsStore, FactsStore]:
    """인자대로 엔진을 구성해 실행하고 (rules, before, after) 반환"""
    parameters = EngineParameters()
    if args.priority_threshold is not None:
        parameters = parameters.with_priority_threshold(args.priority_threshold)

    engine = ForwardChainingEngine(parameters) if args.inference else SequentialEngine(parameters)
    engine.register_rule_listener(LoggingRuleListener())
    engine.register_engine_listener(LoggingEngineListener())

    rules = SAMPLE_RULES.build_ruleset()
    total = int(args.order_total) if float(args.order_total).is_integer() else args.order_total
    before = FactsStore.of(orderTotal=total, orderId=args.order_id)
    after = engine.fire(rules, before)
    return rules, before, after


def main(argv: Optional[list[str]] = None) -> None:
    """CLI 진입점"""
    args = parse_args(argv)
    configure_logging(args.log_level, json_output=args.json_logs)

    rules, before, after = run(args)
    print(format_output(rules, before, after))


if __name__ == "__main__":
    main()
