"""
# HtmlSed: tags.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

The tag model.
"""

import abc
import re
from typing import Optional

from htmlsed.utilities import none_to_empty_string, strip_quotes

TAG_NAME_PATTERN_COMPILED = re.compile(
    pattern=r'''
        (?P<tag_name> [a-zA-Z0-9]+ )
        [\s/>]
    ''',
    flags=re.VERBOSE,
)
TAG_ATTRIBUTE_PATTERN_COMPILED = re.compile(
    pattern=r'''
        [a-zA-Z0-9]+
        [\s]* [=] [\s]*
        (?:
            "[^"]*"
                |
            '[^']*'
                |
            [^\s"'>]*
        )
    ''',
    flags=re.VERBOSE,
)


class Tag:
    """
    A single tag occurrence, parsed from its raw text.

    Names (of the tag and of its attributes) are normalised to upper case.
    Attribute values are stored without their quotes
    and are always written back double-quoted.

    A tag remembers whether it has been modified since parsing;
    an unmodified tag may be written back as its original raw text.
    """
    _name: str
    _attribute_from_name: dict[str, str]
    _is_opening: bool
    _is_closing: bool
    _replacement: Optional[str]
    _surround_before: str
    _surround_after: str
    _is_modified: bool

    def __init__(self, data: str = ''):
        self._name = ''
        self._attribute_from_name = {}
        self._is_opening = False
        self._is_closing = False
        self._replacement = None
        self._surround_before = ''
        self._surround_after = ''
        self._is_modified = False

        self._parse(data)

    def _parse(self, data: str):
        stripped_data = data.strip()
        if stripped_data.startswith('</'):
            self._is_closing = True
        else:
            self._is_opening = True
        if stripped_data.endswith('/>'):
            self._is_closing = True

        tag_name_match = TAG_NAME_PATTERN_COMPILED.search(data)
        if tag_name_match is None:
            return

        self._name = Tag.normalise_name(tag_name_match.group('tag_name'))

        for attribute_match in TAG_ATTRIBUTE_PATTERN_COMPILED.finditer(data, tag_name_match.end()):
            attribute = attribute_match.group()
            attribute_name, _, attribute_value = attribute.partition('=')
            attribute_name = Tag.normalise_name(attribute_name)
            attribute_value = strip_quotes(attribute_value.strip())
            self._attribute_from_name[attribute_name] = attribute_value

    @staticmethod
    def normalise_name(name: str) -> str:
        return name.strip().upper()

    def __repr__(self) -> str:
        return f'Tag({self.to_string()!r})'

    def __str__(self) -> str:
        return self.to_string()

    @property
    def is_modified(self) -> bool:
        return self._is_modified

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str):
        self._name = Tag.normalise_name(value)
        self._is_modified = True

    @property
    def is_opening(self) -> bool:
        return self._is_opening

    @is_opening.setter
    def is_opening(self, value: bool):
        self._is_opening = value
        self._is_modified = True

    @property
    def is_closing(self) -> bool:
        return self._is_closing

    @is_closing.setter
    def is_closing(self, value: bool):
        self._is_closing = value
        self._is_modified = True

    @property
    def replacement(self) -> Optional[str]:
        return self._replacement

    @replacement.setter
    def replacement(self, value: Optional[str]):
        self._replacement = value
        self._is_modified = True

    @property
    def is_replaced(self) -> bool:
        return self._replacement is not None

    @property
    def surround_before(self) -> str:
        return self._surround_before

    @surround_before.setter
    def surround_before(self, value: Optional[str]):
        self._surround_before = none_to_empty_string(value)
        self._is_modified = True

    @property
    def surround_after(self) -> str:
        return self._surround_after

    @surround_after.setter
    def surround_after(self, value: Optional[str]):
        self._surround_after = none_to_empty_string(value)
        self._is_modified = True

    @property
    def attributes(self) -> dict[str, str]:
        return dict(self._attribute_from_name)

    def attribute(self, name: str) -> str:
        return self._attribute_from_name.get(Tag.normalise_name(name), '')

    def has_attribute(self, name: str) -> bool:
        return Tag.normalise_name(name) in self._attribute_from_name

    def set_attribute(self, name: str, value: str):
        name = Tag.normalise_name(name)
        if self._attribute_from_name.get(name) == value:
            return

        self._attribute_from_name[name] = value
        self._is_modified = True

    def remove_attribute(self, name: str):
        name = Tag.normalise_name(name)
        if name not in self._attribute_from_name:
            return

        del self._attribute_from_name[name]
        self._is_modified = True

    def replace_with(self, replacement: str):
        self.replacement = replacement

    def set_surroundings(self, before: Optional[str], after: Optional[str]):
        self.surround_before = before
        self.surround_after = after

    def to_string(self) -> str:
        if self._replacement is not None:
            return self._surround_before + self._replacement + self._surround_after

        closing_slash = '/' if self._is_closing and not self._is_opening else ''
        attributes = ''.join(
            f' {name}="{self._attribute_from_name[name]}"'
            for name in sorted(self._attribute_from_name)
        )
        self_closing_slash = '/' if self._is_opening and self._is_closing else ''

        tag = f'<{closing_slash}{self._name}{attributes}{self_closing_slash}>'

        return self._surround_before + tag + self._surround_after


class TagModifier(abc.ABC):
    """
    Base class for an arbitrary, caller-supplied tag modification.

    `modify_tag(tag)` is called once per matching tag occurrence
    and may change anything about the tag through its setters.
    """
    @abc.abstractmethod
    def modify_tag(self, tag: Tag):
        raise NotImplementedError
