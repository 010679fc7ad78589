from pathlib import Path

import yaml
from pydantic import ValidationError

from cms_versioning.rules.models import Rules

DEFAULT_RULES_PATH = Path(__file__).resolve().parent / "cms_rules.yaml"


def extract_yaml(content: str) -> str:
    """
    Return the body of the first ```yaml fence, or the whole text if there
    is none.
    """
    yaml_lines = []
    in_block = False
    found_block = False

    for line in content.splitlines():
        s_line = line.strip()
        if s_line.startswith("```yaml"):
            in_block = True
            found_block = True
            continue
        if in_block and s_line.startswith("```"):
            break
        if in_block:
            yaml_lines.append(line)

    return "\n".join(yaml_lines) if found_block else content


def parse_rules(content: str) -> Rules:
    """
    Parse and validate rules text.
    Raises ValueError on YAML syntax or schema errors.
    """
    try:
        data = yaml.safe_load(extract_yaml(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e


def load_rules(path: Path | None = None) -> Rules:
    """
    Load and validate the rules file (the packaged defaults when path is None).
    Raises FileNotFoundError if file missing.
    Raises ValueError if syntax or schema invalid.
    """
    path = path or DEFAULT_RULES_PATH
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    with open(path) as f:
        return parse_rules(f.read())
