"""Per-source filter rules evaluated at sync time."""

from typing import Any, Dict, Optional, Union

from .interfaces import Content, FilterRule

Rules = Union[FilterRule, Dict[str, Any], None]


def _as_rule(rules: Rules) -> Optional[FilterRule]:
    if rules is None or isinstance(rules, FilterRule):
        return rules
    return FilterRule.from_dict(rules)


def passes(content: Content, rules: Rules) -> bool:
    """Return True if content satisfies every configured rule.

    Clauses run in order (keywords, exclude, min_length, max_length) and the
    first failing one rejects. Empty or missing clauses impose nothing.
    """
    rule = _as_rule(rules)
    if rule is None:
        return True

    body = content.processed_content or ""
    text = f"{content.title or ''} {body}".casefold()

    if rule.keywords and not any(k.casefold() in text for k in rule.keywords):
        return False

    if rule.exclude and any(k.casefold() in text for k in rule.exclude):
        return False

    if rule.min_length is not None and len(body) < rule.min_length:
        return False

    if rule.max_length is not None and len(body) > rule.max_length:
        return False

    return True
