"""oaslint - Rule-driven linter for OpenAPI contract documents.

oaslint walks the schemas and paths of an OpenAPI/Swagger document, evaluates
a declarative rule catalog against them, and reports severity-tagged violations
together with a pass/warn/fail decision for CI gating.
"""

__version__ = "0.1.0"
__author__ = "oaslint contributors"
__description__ = "Rule-driven linter for OpenAPI contract documents"

from oaslint.config import LintConfig, RuleCatalog, RuleRecord

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "LintConfig",
    "RuleCatalog",
    "RuleRecord",
]
