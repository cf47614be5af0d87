"""
Facts 패키지

불변 fact 컨테이너와 fact 쌍
"""

from factflow.facts.fact import Fact
from factflow.facts.store import FactsStore, require_fact

__all__ = ["Fact", "FactsStore", "require_fact"]
