"""Tests for the ordered matcher rule engine"""

from rpgdoc.static_analysis.rules import MatchRule, RuleCascade


class TestRuleCascade:
    """Priority-ordered tagged rules"""

    def test_first_matching_rule_wins(self):
        cascade = RuleCascade([
            MatchRule.regex("digits", r'(\d+)', lambda m: m.group(1)),
            MatchRule.regex("word", r'(\w+)', lambda m: m.group(1)),
        ])

        hit = cascade.first("abc 123")

        assert hit.tag == "digits"
        assert hit.value == "123"

    def test_failed_format_gate_falls_through(self):
        """A transform returning None lets the next rule try.

        User Outcome at Risk: A near-miss in a high-priority pattern hides a
        valid match from a lower-priority one.
        """
        cascade = RuleCascade([
            MatchRule.regex("long_number", r'(\d+)',
                            lambda m: m.group(1) if len(m.group(1)) > 5 else None),
            MatchRule.regex("any_number", r'(\d+)', lambda m: int(m.group(1))),
        ])

        hit = cascade.first("code 42")

        assert hit.tag == "any_number"
        assert hit.value == 42

    def test_no_rule_matches(self):
        cascade = RuleCascade([MatchRule.regex("digits", r'\d')])

        assert cascade.first("letters only") is None
        assert cascade.first(None) is None

    def test_predicate_rule_on_non_string_subject(self):
        rule = MatchRule("even", lambda n: n % 2 == 0, lambda hit: "even")

        assert rule.apply(4).value == "even"
        assert rule.apply(3) is None
