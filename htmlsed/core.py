"""
# HtmlSed: core.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Core rewriting logic.

The HTML is rewritten in place, one tag occurrence at a time:
````
«pcdata»«tag»«pcdata»«tag»...
````
Each «tag» found by the tokeniser is parsed, has its applicable rules applied,
and is written back over its original text, after which scanning resumes
immediately after the written-back text. PCDATA is skipped over untouched,
except where it lies within the contents of a tag having a ContentsReplacementRule.
"""

from typing import Callable, NamedTuple, Optional

from htmlsed.authorities import RuleAuthority
from htmlsed.bases import Rule
from htmlsed.constants import SCRIPT_TAG_NAME
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
from htmlsed.tokeniser import TagMatch, find_comment_opener, find_tag, is_comment


class ContentCapture(NamedTuple):
    tag_name: str
    start: int


class RewritePass:
    """
    A single scan over an HTML buffer, applying a rule set.

    State:
    - `_html`: the buffer, which grows and shrinks as text is spliced in
    - `_offset`: where the next tag search begins
    - `_tag_position`: absolute position of the tag occurrence being processed
    - `_tag_data`: raw text of the tag occurrence being processed
    - `_content_captures`: stack of open content captures (absolute start offsets)
    - `_previous_tag`: the last tag occurrence processed (for false-tag detection)
    - `_comment_position`: position of the next comment opener at or after `_offset`
      (-1 for none, None for not yet known)

    Content capture start offsets are never invalidated by a splice,
    since every splice happens at or after the position being processed,
    which is after every open capture's start.
    """
    _html: str
    _rule_set: 'RuleSet'
    _offset: int
    _tag_position: int
    _tag_data: str
    _content_captures: list['ContentCapture']
    _previous_tag: 'Tag'
    _comment_position: Optional[int]
    _verbose_mode_enabled: bool

    def __init__(self, html: str, rule_set: 'RuleSet', verbose_mode_enabled: bool = False):
        self._html = html
        self._rule_set = rule_set
        self._offset = 0
        self._tag_position = 0
        self._tag_data = ''
        self._content_captures = []
        self._previous_tag = Tag()
        self._comment_position = None
        self._verbose_mode_enabled = verbose_mode_enabled

    @property
    def html(self) -> str:
        return self._html

    @property
    def content_captures(self) -> list['ContentCapture']:
        return list(self._content_captures)

    def splice(self, start: int, end: int, replacement: str) -> int:
        """
        Replace `self._html[start:end]` with `replacement`, returning the change in length.
        """
        self._html = self._html[:start] + replacement + self._html[end:]
        length_change = len(replacement) - (end - start)

        comment_position = self._comment_position
        if comment_position is not None and comment_position != -1:
            if comment_position >= end:
                self._comment_position = comment_position + length_change
            elif comment_position >= start:
                self._comment_position = None

        return length_change

    def find_next_tag(self) -> Optional['TagMatch']:
        comment_position = self._comment_position
        if comment_position is None or 0 <= comment_position < self._offset:
            self._comment_position = find_comment_opener(self._html, self._offset)

        return find_tag(self._html, self._offset, self._comment_position)

    def is_false_tag(self, tag: 'Tag') -> bool:
        """
        Whether a tag occurrence is really part of an inline script body.

        Inside `<script>...</script>`, anything but the closing script tag
        is taken to be script text that merely looks like a tag (e.g. `a<b || c>d`).
        """
        previous_tag = self._previous_tag
        return (
            previous_tag.name == SCRIPT_TAG_NAME
            and not previous_tag.is_closing
            and not (tag.name == SCRIPT_TAG_NAME and tag.is_closing)
        )

    def emitted_text(self, tag: 'Tag') -> str:
        if tag.is_modified:
            return tag.to_string()

        return self._tag_data

    def open_content_capture(self, tag: 'Tag'):
        start = self._tag_position + len(self.emitted_text(tag))
        self._content_captures.append(ContentCapture(tag.name, start))

    def close_content_capture(self, tag: 'Tag', substitute: Callable[[str], str]):
        """
        Close the innermost open content capture, if it is for the same tag name.

        The captured contents (between the end of the opening tag
        and the start of this closing tag) are substituted and spliced back in,
        and the closing tag position is moved along accordingly.
        """
        if len(self._content_captures) == 0 or self._content_captures[-1].tag_name != tag.name:
            return

        content_capture = self._content_captures.pop()
        start = content_capture.start
        end = self._tag_position

        contents = substitute(self._html[start:end])
        length_change = self.splice(start, end, contents)
        self._tag_position = end + length_change

    def apply_rules(self, tag: 'Tag'):
        if not self._rule_set.has_applicable_rules(tag.name):
            return

        for rule in self._rule_set.applicable_rules(tag.name):
            if not rule.apply(tag, self):
                break

    def run(self) -> str:
        while True:
            tag_match = self.find_next_tag()
            if tag_match is None:
                break

            self._tag_data = tag_match.text
            self._tag_position = tag_match.position

            if is_comment(tag_match.text):
                self._offset = tag_match.end
                continue

            tag = Tag(tag_match.text)

            if self.is_false_tag(tag):
                self._offset = tag_match.end
                continue

            self.apply_rules(tag)

            tag_start = self._tag_position
            tag_end = tag_start + len(self._tag_data)
            new_tag_data = self.emitted_text(tag)
            if new_tag_data is not self._tag_data:
                self.splice(tag_start, tag_end, new_tag_data)
            self._offset = tag_start + len(new_tag_data)

            self._previous_tag = tag

        if self._verbose_mode_enabled and len(self._content_captures) > 0:
            unclosed_tag_names = [
                content_capture.tag_name
                for content_capture in self._content_captures
            ]
            print(f'Unclosed content captures discarded: {unclosed_tag_names}\n\n')

        return self._html


class HtmlSed:
    """
    Rule-driven HTML rewriter.

    Rules are registered against a tag name (case-insensitive),
    or against the empty tag name to apply to every tag.
    For each tag occurrence, the rules for its name are applied
    before the rules for every tag, each in order of registration.

    ````
    html_sed = HtmlSed('<div><img src="a.png"></div>')
    html_sed.resolve_url('img', 'src', 'https://example.com/')
    html_sed.replace_tag('div', '<section>', opening_tag=True, closing_tag=False)
    html_sed.replace_tag('div', '</section>', opening_tag=False, closing_tag=True)
    html_sed.to_string()
    ````
    """
    _html: str
    _rule_set: 'RuleSet'
    _verbose_mode_enabled: bool

    def __init__(self, html: str, verbose_mode_enabled: bool = False):
        self._html = html
        self._rule_set = RuleSet()
        self._verbose_mode_enabled = verbose_mode_enabled

    def __str__(self) -> str:
        return self.to_string()

    @property
    def html(self) -> str:
        return self._html

    @property
    def rule_set(self) -> 'RuleSet':
        return self._rule_set

    @property
    def verbose_mode_enabled(self) -> bool:
        return self._verbose_mode_enabled

    def next_rule_id(self, kind: str) -> str:
        return f'{kind}-{len(self._rule_set) + 1}'

    def add_rule(self, rule: 'Rule'):
        if not rule.is_committed:
            rule.commit()

        self._rule_set.add(rule)

    def replace_tag(self, tag_name: Optional[str], replace_with: str,
                    opening_tag: bool = True, closing_tag: bool = True):
        rule = TagReplacementRule(self.next_rule_id('replace-tag'), self._verbose_mode_enabled)
        rule.tag_name = tag_name
        rule.replacement = replace_with
        rule.affects_opening = opening_tag
        rule.affects_closing = closing_tag
        self.add_rule(rule)

    def replace_attribute(self, tag_name: Optional[str], attribute: str, pattern: str, replace_with: str):
        rule = AttributeReplacementRule(self.next_rule_id('replace-attribute'), self._verbose_mode_enabled)
        rule.tag_name = tag_name
        rule.attribute_name = attribute
        rule.set_substitution(pattern, replace_with)
        self.add_rule(rule)

    def replace_contents(self, tag_name: Optional[str], pattern: str, replace_with: str):
        rule = ContentsReplacementRule(self.next_rule_id('replace-contents'), self._verbose_mode_enabled)
        rule.tag_name = tag_name
        rule.set_substitution(pattern, replace_with)
        self.add_rule(rule)

    def resolve_url(self, tag_name: Optional[str], attribute: str, base_url: str):
        rule = UrlResolutionRule(self.next_rule_id('resolve-url'), self._verbose_mode_enabled)
        rule.tag_name = tag_name
        rule.attribute_name = attribute
        rule.base_url = base_url
        self.add_rule(rule)

    def surround_tag(self, tag_name: Optional[str], before: str, after: str,
                     opening_tag: bool = True, closing_tag: bool = True):
        rule = TagSurroundingRule(self.next_rule_id('surround-tag'), self._verbose_mode_enabled)
        rule.tag_name = tag_name
        rule.before = before
        rule.after = after
        rule.affects_opening = opening_tag
        rule.affects_closing = closing_tag
        self.add_rule(rule)

    def modify_tag(self, tag_name: Optional[str], modifier: 'TagModifier'):
        rule = TagModificationRule(self.next_rule_id('modify-tag'), self._verbose_mode_enabled)
        rule.tag_name = tag_name
        rule.modifier = modifier
        self.add_rule(rule)

    def to_string(self) -> str:
        if self._verbose_mode_enabled:
            rule_ids = [
                f'#{rule.id_}'
                for rule in self._rule_set
            ]
            print(f'Rule set: {rule_ids}\n\n')

        rewrite_pass = RewritePass(self._html, self._rule_set, self._verbose_mode_enabled)
        return rewrite_pass.run()


def rewrite_html(html: str, rules: str, rules_file_name: str = '<rules>', verbose_mode_enabled: bool = False) -> str:
    """
    Rewrite HTML according to rules given in rules-file syntax.
    """
    html_sed = HtmlSed(html, verbose_mode_enabled)
    rule_authority = RuleAuthority(html_sed, rules_file_name)
    rule_authority.legislate(rules, rules_file_name)

    return html_sed.to_string()
