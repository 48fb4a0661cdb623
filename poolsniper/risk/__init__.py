"""Risk rule table."""
from .rules import RiskContext, RiskRule, build_rules, evaluate_report

__all__ = ["RiskContext", "RiskRule", "build_rules", "evaluate_report"]
