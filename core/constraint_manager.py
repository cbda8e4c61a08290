from typing import Callable

from core.models import Violation


class ConstraintManager:
    def __init__(self, context):
        self.context = context
        self.rules: list[Callable] = []

    def add_rule(self, rule_func: Callable, condition: bool = True):
        """Register a rule with optional enablement condition."""
        if condition:
            self.rules.append(rule_func)

    def apply_all(self) -> list[Violation]:
        """Apply all registered rules in order and collect every violation."""
        violations: list[Violation] = []
        for rule in self.rules:
            violations.extend(rule(self.context))
        return violations
