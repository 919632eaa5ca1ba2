"""
# HtmlSed: test_tokeniser.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Perform unit testing for `tokeniser.py`.
"""

import unittest

from htmlsed.tokeniser import TagMatch, find_comment_opener, find_tag, is_comment


class TestTokeniser(unittest.TestCase):
    def test_find_tag(self):
        self.assertIsNone(find_tag(''))
        self.assertIsNone(find_tag('no tags here'))
        self.assertIsNone(find_tag('<> <!DOCTYPE html>'))
        self.assertEqual(find_tag('<p>'), TagMatch('<p>', 0))
        self.assertEqual(find_tag('abc<a href="x">def</a>'), TagMatch('<a href="x">', 3))
        self.assertEqual(find_tag('abc<a href="x">def</a>', 4), TagMatch('</a>', 18))
        self.assertEqual(find_tag('<img src="x"/>'), TagMatch('<img src="x"/>', 0))
        self.assertEqual(find_tag('x<br\n/>'), TagMatch('<br\n/>', 1))

    def test_find_tag_comment(self):
        self.assertEqual(
            find_tag('a<!-- <div>fake</div> --><div>'),
            TagMatch('<!-- <div>fake</div> -->', 1),
        )
        self.assertEqual(find_tag('<!---->'), TagMatch('<!---->', 0))
        self.assertEqual(find_tag('<p><!-- c -->'), TagMatch('<p>', 0))
        self.assertEqual(find_tag('<p><!-- c -->', 3), TagMatch('<!-- c -->', 3))

    def test_find_tag_unterminated_comment(self):
        self.assertIsNone(find_tag('text <!-- <div> never closed'))
        self.assertEqual(find_tag('<b>text <!-- <div> never closed'), TagMatch('<b>', 0))
        self.assertIsNone(find_tag('<b>text <!-- <div> never closed', 1))

    def test_find_tag_known_comment_position(self):
        html = '<p><!-- c --><i>'
        self.assertEqual(find_comment_opener(html), 3)
        self.assertEqual(find_comment_opener(html, 4), -1)
        self.assertEqual(find_tag(html, 3, comment_position=3), TagMatch('<!-- c -->', 3))
        self.assertEqual(find_tag(html, 13, comment_position=-1), TagMatch('<i>', 13))

    def test_tag_match_end(self):
        self.assertEqual(TagMatch('<p>', 5).end, 8)

    def test_is_comment(self):
        self.assertTrue(is_comment('<!-- x -->'))
        self.assertFalse(is_comment('<p>'))
        self.assertFalse(is_comment('<!DOCTYPE html>'))


if __name__ == '__main__':
    unittest.main()
