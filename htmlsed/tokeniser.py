"""
# HtmlSed: tokeniser.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Tag and comment tokenisation.

This is deliberately not an HTML parser.
A tag is anything of the form `<«not ! or >»«non->»*>`,
and a comment is `<!--` up to the first following `-->`.
Everything in between (PCDATA) is skipped over.
"""

import re
from typing import NamedTuple, Optional

COMMENT_OPENER = '<!--'
COMMENT_CLOSER = '-->'

TAG_PATTERN_COMPILED = re.compile(
    pattern=r'''
        [<]
        [^!>]
        [^>]*
        [>]
    ''',
    flags=re.VERBOSE,
)


class TagMatch(NamedTuple):
    text: str
    position: int

    @property
    def end(self) -> int:
        return self.position + len(self.text)


def is_comment(text: str) -> bool:
    return text.startswith(COMMENT_OPENER)


def find_comment_opener(html: str, offset: int = 0) -> int:
    """
    Find the position of the next comment opener at or after `offset`, or -1.
    """
    return html.find(COMMENT_OPENER, offset)


def find_tag(html: str, offset: int = 0, comment_position: Optional[int] = None) -> Optional[TagMatch]:
    """
    Find the next tag or comment in `html` at or after `offset`.

    A comment wins over a tag if the comment opener comes first.
    If that comment is unterminated, there is nothing more to find,
    and None is returned (as it is when there are no more tags).

    `comment_position` is the position of the next comment opener at or after `offset`
    (-1 for none), if already known to the caller.
    """
    if comment_position is None:
        comment_position = find_comment_opener(html, offset)

    tag_match = TAG_PATTERN_COMPILED.search(html, offset)

    if comment_position != -1 and (tag_match is None or comment_position < tag_match.start()):
        comment_closer_position = html.find(COMMENT_CLOSER, comment_position)
        if comment_closer_position == -1:
            return None

        comment_end = comment_closer_position + len(COMMENT_CLOSER)
        return TagMatch(html[comment_position:comment_end], comment_position)

    if tag_match is None:
        return None

    return TagMatch(tag_match.group(), tag_match.start())
