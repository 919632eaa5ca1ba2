"""
# HtmlSed: test_rules.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Perform unit testing for `bases.py` and `rules.py`.
"""

import re
import unittest
import unittest.mock

from htmlsed.core import RewritePass
from htmlsed.exceptions import CommittedMutateException, MissingAttributeException, UncommittedApplyException
from htmlsed.rules import (
    AttributeReplacementRule,
    ContentsReplacementRule,
    TagModificationRule,
    TagReplacementRule,
    TagSurroundingRule,
    UrlResolutionRule,
)
from htmlsed.rulesets import RuleSet
from htmlsed.tags import Tag, TagModifier


class Renamer(TagModifier):
    def __init__(self, name: str):
        self.name = name
        self.call_count = 0

    def modify_tag(self, tag: Tag):
        self.call_count += 1
        tag.name = self.name


class TestRuleLifecycle(unittest.TestCase):
    def test_tag_name_normalised(self):
        rule = TagReplacementRule('replace', False)
        self.assertEqual(rule.tag_name, '')
        rule.tag_name = 'div'
        self.assertEqual(rule.tag_name, 'DIV')
        rule.tag_name = None
        self.assertEqual(rule.tag_name, '')

    def test_committed_mutate(self):
        rule = TagReplacementRule('replace', False)
        rule.replacement = 'x'
        rule.commit()
        self.assertTrue(rule.is_committed)
        with self.assertRaises(CommittedMutateException):
            rule.tag_name = 'p'
        with self.assertRaises(CommittedMutateException):
            rule.replacement = 'y'
        with self.assertRaises(CommittedMutateException):
            rule.affects_opening = False

    def test_uncommitted_apply(self):
        rule = TagSurroundingRule('surround', False)
        with self.assertRaises(UncommittedApplyException):
            rule.apply(Tag('<p>'), RewritePass('', RuleSet()))

    def test_missing_attributes(self):
        with self.assertRaises(MissingAttributeException) as context:
            TagReplacementRule('replace', False).commit()
        self.assertEqual(context.exception.missing_attribute, 'replacement')

        rule = AttributeReplacementRule('attribute', False)
        rule.set_substitution('a', 'b')
        with self.assertRaises(MissingAttributeException) as context:
            rule.commit()
        self.assertEqual(context.exception.missing_attribute, 'attribute_name')

        rule = AttributeReplacementRule('attribute', False)
        rule.attribute_name = 'href'
        with self.assertRaises(MissingAttributeException) as context:
            rule.commit()
        self.assertEqual(context.exception.missing_attribute, 'substitution')

        with self.assertRaises(MissingAttributeException) as context:
            ContentsReplacementRule('contents', False).commit()
        self.assertEqual(context.exception.missing_attribute, 'substitution')

        rule = UrlResolutionRule('url', False)
        rule.attribute_name = 'href'
        with self.assertRaises(MissingAttributeException) as context:
            rule.commit()
        self.assertEqual(context.exception.missing_attribute, 'base_url')

        with self.assertRaises(MissingAttributeException) as context:
            TagModificationRule('modify', False).commit()
        self.assertEqual(context.exception.missing_attribute, 'modifier')

        TagSurroundingRule('surround', False).commit()

    def test_bad_pattern(self):
        rule = ContentsReplacementRule('contents', False)
        rule.set_substitution('(', 'x')
        with self.assertRaises(re.error):
            rule.commit()

    def test_bad_replacement(self):
        rule = AttributeReplacementRule('attribute', False)
        rule.attribute_name = 'src'
        rule.set_substitution('^', r'C:\path\\')
        with self.assertRaises(re.error):
            rule.commit()
        self.assertFalse(rule.is_committed)

        rule = ContentsReplacementRule('contents', False)
        rule.set_substitution('/', r'\\x\d')
        with self.assertRaises(re.error):
            rule.commit()

        rule = ContentsReplacementRule('contents', False)
        rule.set_substitution('a', r'\1')
        with self.assertRaises(re.error):
            rule.commit()

        rule = ContentsReplacementRule('contents', False)
        rule.set_substitution('(a)', r'[\1]\\')
        rule.commit()
        self.assertEqual(rule.substitute('cat'), 'c[a]\\t')


class TestRules(unittest.TestCase):
    def setUp(self):
        self.rewrite_pass = RewritePass('', RuleSet())

    def test_tag_replacement_rule(self):
        rule = TagReplacementRule('replace', False)
        rule.replacement = '<SECTION>'
        rule.affects_closing = False
        rule.commit()

        tag = Tag('<div>')
        self.assertTrue(rule.apply(tag, self.rewrite_pass))
        self.assertEqual(tag.to_string(), '<SECTION>')

        tag = Tag('</div>')
        self.assertTrue(rule.apply(tag, self.rewrite_pass))
        self.assertFalse(tag.is_modified)

        tag = Tag('<div/>')
        rule.apply(tag, self.rewrite_pass)
        self.assertEqual(tag.to_string(), '<SECTION>')

    def test_attribute_replacement_rule(self):
        rule = AttributeReplacementRule('attribute', False)
        rule.attribute_name = 'src'
        rule.set_substitution(r'(\w+)\.gif', r'\1.png')
        rule.commit()

        tag = Tag('<img src="a.gif b.gif">')
        self.assertTrue(rule.apply(tag, self.rewrite_pass))
        self.assertEqual(tag.attribute('src'), 'a.png b.png')

        tag = Tag('<img alt="a.gif">')
        self.assertTrue(rule.apply(tag, self.rewrite_pass))
        self.assertFalse(tag.is_modified)
        self.assertFalse(tag.has_attribute('src'))

    def test_url_resolution_rule(self):
        rule = UrlResolutionRule('url', False)
        rule.attribute_name = 'href'
        rule.base_url = 'https://example.com/dir/'
        rule.commit()

        tag = Tag('<a href="b.html">')
        self.assertTrue(rule.apply(tag, self.rewrite_pass))
        self.assertEqual(tag.attribute('href'), 'https://example.com/dir/b.html')

        tag = Tag('<a href="https://example.com/a">')
        self.assertFalse(rule.apply(tag, self.rewrite_pass))
        self.assertEqual(tag.attribute('href'), 'https://example.com/a')
        self.assertFalse(tag.is_modified)

        tag = Tag('<a name="top">')
        self.assertTrue(rule.apply(tag, self.rewrite_pass))
        self.assertEqual(tag.attribute('href'), 'https://example.com/dir/')
        self.assertEqual(tag.to_string(), '<A HREF="https://example.com/dir/" NAME="top">')

        tag = Tag('</a>')
        self.assertTrue(rule.apply(tag, self.rewrite_pass))
        self.assertEqual(tag.attribute('href'), 'https://example.com/dir/')

    def test_tag_surrounding_rule(self):
        rule = TagSurroundingRule('surround', False)
        rule.before = '<li>'
        rule.after = None
        rule.affects_opening = False
        rule.commit()

        tag = Tag('<a>')
        rule.apply(tag, self.rewrite_pass)
        self.assertFalse(tag.is_modified)

        tag = Tag('</a>')
        rule.apply(tag, self.rewrite_pass)
        self.assertEqual(tag.to_string(), '<li></A>')

    def test_tag_modification_rule(self):
        renamer = Renamer('em')
        rule = TagModificationRule('modify', False)
        rule.modifier = renamer
        rule.commit()

        tag = Tag('<i class="x">')
        self.assertTrue(rule.apply(tag, self.rewrite_pass))
        self.assertEqual(tag.to_string(), '<EM CLASS="x">')
        self.assertEqual(renamer.call_count, 1)

    def test_contents_replacement_rule_stops(self):
        rule = ContentsReplacementRule('contents', False)
        rule.set_substitution('a', 'b')
        rule.commit()

        self.assertFalse(rule.apply(Tag('<p>'), self.rewrite_pass))
        self.assertFalse(rule.apply(Tag('<p/>'), self.rewrite_pass))
        self.assertEqual(len(self.rewrite_pass.content_captures), 1)

    def test_verbose_mode(self):
        rule = TagReplacementRule('verbose', True)
        rule.replacement = 'X'
        rule.commit()

        tag = Tag('<p>')
        with unittest.mock.patch('builtins.print') as mock_print:
            rule.apply(tag, self.rewrite_pass)
        printed = [call.args[0] for call in mock_print.call_args_list]
        self.assertIn('<P>', printed)
        self.assertIn('X', printed)
        self.assertTrue(any(line.endswith(' BEFORE #verbose') for line in printed))
        self.assertTrue(any(line.endswith(' AFTER #verbose') for line in printed))


if __name__ == '__main__':
    unittest.main()
