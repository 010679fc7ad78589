import logging
import os
import sys
from collections.abc import Mapping

from cms_versioning.rules.models import Rules

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(rules: Rules | None = None) -> None:
    """Root logging setup for the CLI and API entry points."""
    level = rules.ops.log_level if rules else "INFO"
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT)


def missing_env(rules: Rules, environ: Mapping[str, str] | None = None) -> list[str]:
    env = os.environ if environ is None else environ
    return [name for name in rules.ops.required_env if name not in env]


def validate_ops_rules(rules: Rules, environ: Mapping[str, str] | None = None) -> None:
    """
    Validate operational requirements before startup.
    Exits the process when required environment variables are missing.
    """
    missing = missing_env(rules, environ)
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    logger.info("Configuration validated (rules %s)", rules.project.rules_version)
