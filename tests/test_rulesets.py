"""
# HtmlSed: test_rulesets.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Perform unit testing for `rulesets.py`.
"""

import unittest

from htmlsed.exceptions import UncommittedApplyException
from htmlsed.rules import TagSurroundingRule
from htmlsed.rulesets import RuleSet


def make_rule(id_: str, tag_name: str) -> TagSurroundingRule:
    rule = TagSurroundingRule(id_, False)
    rule.tag_name = tag_name
    rule.commit()
    return rule


class TestRuleSet(unittest.TestCase):
    def test_empty(self):
        rule_set = RuleSet()
        self.assertEqual(len(rule_set), 0)
        self.assertFalse(rule_set.has_applicable_rules('P'))
        self.assertEqual(rule_set.applicable_rules('P'), [])

    def test_applicable_rules_order(self):
        rule_set = RuleSet()
        any_1 = make_rule('any-1', '')
        p_1 = make_rule('p-1', 'p')
        div_1 = make_rule('div-1', 'DIV')
        p_2 = make_rule('p-2', 'P')
        any_2 = make_rule('any-2', '')
        for rule in (any_1, p_1, div_1, p_2, any_2):
            rule_set.add(rule)

        self.assertEqual(len(rule_set), 5)
        self.assertEqual(rule_set.applicable_rules('p'), [p_1, p_2, any_1, any_2])
        self.assertEqual(rule_set.applicable_rules('DIV'), [div_1, any_1, any_2])
        self.assertEqual(rule_set.applicable_rules('SPAN'), [any_1, any_2])
        self.assertEqual(rule_set.applicable_rules(''), [any_1, any_2])
        self.assertEqual(list(rule_set), [any_1, any_2, p_1, p_2, div_1])

    def test_has_applicable_rules(self):
        rule_set = RuleSet()
        rule_set.add(make_rule('p', 'P'))
        self.assertTrue(rule_set.has_applicable_rules('P'))
        self.assertTrue('p' in rule_set)
        self.assertFalse(rule_set.has_applicable_rules('DIV'))

        rule_set.add(make_rule('any', ''))
        self.assertTrue(rule_set.has_applicable_rules('DIV'))
        self.assertTrue(rule_set.has_applicable_rules(''))

    def test_add_uncommitted(self):
        with self.assertRaises(UncommittedApplyException):
            RuleSet().add(TagSurroundingRule('surround', False))


if __name__ == '__main__':
    unittest.main()
