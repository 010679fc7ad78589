"""Rules file loading and schema."""

from .loader import DEFAULT_RULES_PATH, extract_yaml, load_rules, parse_rules
from .models import ContentRules, OpsRules, ProjectRules, Rules, SchedulingRules

__all__ = [
    "DEFAULT_RULES_PATH",
    "extract_yaml",
    "load_rules",
    "parse_rules",
    "ContentRules",
    "OpsRules",
    "ProjectRules",
    "Rules",
    "SchedulingRules",
]
