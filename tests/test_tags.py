"""
# HtmlSed: test_tags.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Perform unit testing for `tags.py`.
"""

import unittest

from htmlsed.tags import Tag, TagModifier


class TestTag(unittest.TestCase):
    def test_opening_closing(self):
        tag = Tag('<div>')
        self.assertTrue(tag.is_opening)
        self.assertFalse(tag.is_closing)

        tag = Tag('</div>')
        self.assertFalse(tag.is_opening)
        self.assertTrue(tag.is_closing)

        tag = Tag('<img src="x"/>')
        self.assertTrue(tag.is_opening)
        self.assertTrue(tag.is_closing)

        tag = Tag('  <br />  ')
        self.assertTrue(tag.is_opening)
        self.assertTrue(tag.is_closing)

    def test_name(self):
        self.assertEqual(Tag('<div>').name, 'DIV')
        self.assertEqual(Tag('</Div>').name, 'DIV')
        self.assertEqual(Tag('<h1 class="x">').name, 'H1')
        self.assertEqual(Tag('<br/>').name, 'BR')
        self.assertEqual(Tag('<a\nhref="x">').name, 'A')

    def test_unparseable(self):
        tag = Tag('<$$$>')
        self.assertEqual(tag.name, '')
        self.assertEqual(tag.attributes, {})
        self.assertEqual(Tag().name, '')

    def test_attributes(self):
        tag = Tag('''<p a="1" b='two' c=three>''')
        self.assertEqual(tag.attributes, {'A': '1', 'B': 'two', 'C': 'three'})

        tag = Tag('<a href = "x.html" title="a = b" data-id=7>')
        self.assertEqual(tag.attribute('href'), 'x.html')
        self.assertEqual(tag.attribute('TITLE'), 'a = b')
        self.assertEqual(tag.attribute('id'), '7')

        tag = Tag('<input disabled value="v">')
        self.assertFalse(tag.has_attribute('disabled'))
        self.assertEqual(tag.attribute('value'), 'v')

        tag = Tag('<p class="a" class="b">')
        self.assertEqual(tag.attribute('class'), 'b')

        tag = Tag('<p title="">')
        self.assertTrue(tag.has_attribute('title'))
        self.assertEqual(tag.attribute('title'), '')
        self.assertEqual(tag.attribute('missing'), '')

    def test_to_string(self):
        self.assertEqual(Tag('''<p a="1" b='two' c=three>''').to_string(), '<P A="1" B="two" C="three">')
        self.assertEqual(Tag('<img src="x"/>').to_string(), '<IMG SRC="x"/>')
        self.assertEqual(Tag('</div >').to_string(), '</DIV>')
        self.assertEqual(Tag('<p z="1" a="2">').to_string(), '<P A="2" Z="1">')
        self.assertEqual(str(Tag('<br>')), '<BR>')

    def test_is_modified(self):
        tag = Tag('<a href="x">')
        self.assertFalse(tag.is_modified)

        tag.set_attribute('href', 'x')
        self.assertFalse(tag.is_modified)
        tag.remove_attribute('missing')
        self.assertFalse(tag.is_modified)

        tag.set_attribute('href', 'y')
        self.assertTrue(tag.is_modified)

    def test_mutation(self):
        tag = Tag('<a href="x">')
        tag.name = 'link'
        tag.set_attribute('rel', 'next')
        tag.remove_attribute('HREF')
        tag.is_closing = True
        self.assertEqual(tag.to_string(), '<LINK REL="next"/>')

        tag.is_opening = False
        self.assertEqual(tag.to_string(), '</LINK REL="next">')

    def test_replacement_and_surroundings(self):
        tag = Tag('<div>')
        tag.set_surroundings('[', ']')
        self.assertEqual(tag.to_string(), '[<DIV>]')

        tag.replace_with('<section>')
        self.assertTrue(tag.is_replaced)
        self.assertEqual(tag.to_string(), '[<section>]')

        tag.set_surroundings(None, None)
        self.assertEqual(tag.to_string(), '<section>')

        tag.replace_with('')
        self.assertEqual(tag.to_string(), '')


class TestTagModifier(unittest.TestCase):
    def test_abstract(self):
        with self.assertRaises(TypeError):
            TagModifier()

    def test_modify_tag(self):
        class Uppercaser(TagModifier):
            def modify_tag(self, tag: Tag):
                for name, value in tag.attributes.items():
                    tag.set_attribute(name, value.upper())

        tag = Tag('<p title="hello">')
        Uppercaser().modify_tag(tag)
        self.assertEqual(tag.to_string(), '<P TITLE="HELLO">')


if __name__ == '__main__':
    unittest.main()
