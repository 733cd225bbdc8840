"""Rule engine — models, parsing, rule sets."""

from lss.rules.models import Rule
from lss.rules.parser import RuleParseError, load_default_rules, load_rules_file, parse_rules
from lss.rules.registry import RulePage, RuleSet

__all__ = [
    "Rule",
    "RulePage",
    "RuleParseError",
    "RuleSet",
    "load_default_rules",
    "load_rules_file",
    "parse_rules",
]
