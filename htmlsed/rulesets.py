"""
# HtmlSed: rulesets.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Rule sets.
"""

from typing import Iterator

from htmlsed.bases import Rule
from htmlsed.constants import ANY_TAG_NAME
from htmlsed.exceptions import UncommittedApplyException
from htmlsed.tags import Tag


class RuleSet:
    """
    Ordered collection of committed rules, indexed by tag name.

    Rules for the empty tag name (ANY_TAG_NAME) apply to every tag.
    For a given tag name, the applicable rules are those filed under that name
    followed by those filed under ANY_TAG_NAME, each in order of addition.
    """
    _rules_from_tag_name: dict[str, list['Rule']]

    def __init__(self):
        self._rules_from_tag_name = {}

    def __len__(self) -> int:
        return sum(len(rules) for rules in self._rules_from_tag_name.values())

    def __iter__(self) -> Iterator['Rule']:
        for rules in self._rules_from_tag_name.values():
            yield from rules

    def __contains__(self, tag_name: str) -> bool:
        return Tag.normalise_name(tag_name) in self._rules_from_tag_name

    def add(self, rule: 'Rule'):
        if not rule.is_committed:
            raise UncommittedApplyException(f'error: cannot add rule `#{rule.id_}` before `commit()`')

        self._rules_from_tag_name.setdefault(rule.tag_name, []).append(rule)

    def has_applicable_rules(self, tag_name: str) -> bool:
        return tag_name in self or ANY_TAG_NAME in self._rules_from_tag_name

    def applicable_rules(self, tag_name: str) -> list['Rule']:
        tag_name = Tag.normalise_name(tag_name)
        if tag_name == ANY_TAG_NAME:
            return list(self._rules_from_tag_name.get(ANY_TAG_NAME, []))

        return [
            *self._rules_from_tag_name.get(tag_name, []),
            *self._rules_from_tag_name.get(ANY_TAG_NAME, []),
        ]
