"""Ordered matcher rules

Layered heuristics ("try pattern A, else B, else C") are expressed as a
RuleCascade of tagged MatchRules evaluated in priority order. A rule hits when
its matcher returns something truthy and its transform turns that into a
value other than None; a transform returning None acts as a format gate and
lets the cascade continue with the next rule.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, NamedTuple, Optional


class RuleMatch(NamedTuple):
    tag: str
    value: Any


def _identity(match: Any) -> Any:
    return match


@dataclass(frozen=True)
class MatchRule:
    """A tagged predicate + transform pair"""
    tag: str
    matcher: Callable[[Any], Any]
    transform: Callable[[Any], Any] = _identity

    @classmethod
    def regex(cls, tag: str, pattern: str,
              transform: Callable[[re.Match], Any] = _identity,
              flags: int = re.IGNORECASE) -> "MatchRule":
        """Rule that searches a string subject with a compiled pattern"""
        compiled = re.compile(pattern, flags)
        return cls(tag=tag, matcher=lambda text: compiled.search(text or ""),
                   transform=transform)

    def apply(self, subject: Any) -> Optional[RuleMatch]:
        hit = self.matcher(subject)
        if not hit:
            return None
        value = self.transform(hit)
        if value is None:
            return None
        return RuleMatch(self.tag, value)


class RuleCascade:
    """Evaluate rules in order; first hit wins"""

    def __init__(self, rules: Iterable[MatchRule]):
        self.rules: List[MatchRule] = list(rules)

    def first(self, subject: Any) -> Optional[RuleMatch]:
        for rule in self.rules:
            result = rule.apply(subject)
            if result is not None:
                return result
        return None
