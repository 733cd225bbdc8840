"""Rule-file parsing.

Text rule files hold one rule per line::

    Name::Pattern::tag1,tag2::confidence

Only ``Name`` and ``Pattern`` are mandatory. Blank lines and lines whose
first non-whitespace character is ``#`` are skipped. YAML rule files
(``.yaml`` / ``.yml``) hold a list of mappings with the same four keys.
"""

from __future__ import annotations

import logging
import math
import re
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, List, Optional

import yaml

from lss.errors import IoError, LssError
from lss.rules.models import DEFAULT_CONFIDENCE, Rule

logger = logging.getLogger(__name__)

FIELD_DELIMITER = "::"
DEFAULT_RULES_RESOURCE = "default_rules.txt"


class RuleParseError(LssError):
    """A rule definition could not be parsed.

    Carries the rule source, the 1-based line (or entry) number and the
    offending content so the user can find it.
    """

    def __init__(self, source: str, line_no: int, content: str, reason: str) -> None:
        self.source = source
        self.line_no = line_no
        self.content = content
        self.reason = reason
        super().__init__(f"{source}:{line_no}: {reason}: {content!r}")


def _parse_tags(raw: Iterable[str]) -> frozenset[str]:
    return frozenset(t.strip() for t in raw if t and t.strip())


def _parse_confidence(raw: Any, source: str, line_no: int, content: str) -> float:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return DEFAULT_CONFIDENCE
    if isinstance(raw, bool):
        raise RuleParseError(source, line_no, content, "confidence is not a number")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise RuleParseError(source, line_no, content, f"confidence {raw!r} is not a number")
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise RuleParseError(source, line_no, content, f"confidence {value} is outside [0.0, 1.0]")
    return value


def _compile(pattern: str, source: str, line_no: int, content: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise RuleParseError(source, line_no, content, f"invalid pattern ({exc})") from exc


def build_rule(
    name: Any,
    pattern: Any,
    tags: Iterable[str] = (),
    confidence: Any = None,
    *,
    source: str = "<rules>",
    line_no: int = 0,
    content: str = "",
) -> Rule:
    """Validate raw field values and return a compiled Rule."""
    if not isinstance(name, str) or not name.strip():
        raise RuleParseError(source, line_no, content, "rule name is empty")
    if not isinstance(pattern, str) or not pattern.strip():
        raise RuleParseError(source, line_no, content, "rule pattern is empty")
    return Rule(
        name=name.strip(),
        pattern=_compile(pattern.strip(), source, line_no, content),
        tags=_parse_tags(tags),
        confidence=_parse_confidence(confidence, source, line_no, content),
    )


def parse_rule_line(line: str, *, source: str = "<rules>", line_no: int = 0) -> Optional[Rule]:
    """Parse one line. Returns None for blank and comment lines."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    parts = stripped.split(FIELD_DELIMITER)
    if len(parts) < 2:
        raise RuleParseError(source, line_no, stripped, "expected Name::Pattern")
    if len(parts) > 4:
        raise RuleParseError(source, line_no, stripped, "too many '::' fields")

    name, pattern = parts[0], parts[1]
    tags = parts[2].split(",") if len(parts) >= 3 else []
    confidence = parts[3] if len(parts) == 4 else None
    return build_rule(
        name, pattern, tags, confidence,
        source=source, line_no=line_no, content=stripped,
    )


def parse_rules(text: str, source: str = "<rules>") -> List[Rule]:
    """Parse rule-definition text. Aborts on the first bad line."""
    rules: List[Rule] = []
    for line_no, line in enumerate(text.splitlines(), 1):
        rule = parse_rule_line(line, source=source, line_no=line_no)
        if rule is not None:
            rules.append(rule)
    return rules


def parse_yaml_rules(text: str, source: str = "<rules>") -> List[Rule]:
    """Parse a YAML list of ``{name, pattern, tags, confidence}`` mappings."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RuleParseError(source, 0, "", f"invalid YAML ({exc})") from exc
    if data is None:
        return []
    if not isinstance(data, list):
        data = [data]

    rules: List[Rule] = []
    for idx, entry in enumerate(data, 1):
        if not isinstance(entry, dict):
            raise RuleParseError(source, idx, repr(entry), "rule entry is not a mapping")
        tags = entry.get("tags") or []
        if isinstance(tags, str):
            tags = tags.split(",")
        rules.append(
            build_rule(
                entry.get("name"),
                entry.get("pattern"),
                [str(t) for t in tags],
                entry.get("confidence"),
                source=source,
                line_no=idx,
                content=repr(entry),
            )
        )
    return rules


def load_rules_file(path: Path) -> List[Rule]:
    """Load a user-supplied rules file (text or YAML, chosen by suffix)."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise IoError(f"Rules file not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise IoError(f"Cannot read rules file {path}: {exc}") from exc

    if path.suffix in (".yaml", ".yml"):
        rules = parse_yaml_rules(text, source=str(path))
    else:
        rules = parse_rules(text, source=str(path))
    logger.debug("Loaded %d rule(s) from %s", len(rules), path)
    return rules


def load_default_rules() -> List[Rule]:
    """Parse the rules bundled with the package."""
    text = (
        resources.files("lss.rules.builtin")
        .joinpath(DEFAULT_RULES_RESOURCE)
        .read_text(encoding="utf-8")
    )
    return parse_rules(text, source=f"<bundled:{DEFAULT_RULES_RESOURCE}>")
