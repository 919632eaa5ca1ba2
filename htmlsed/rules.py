"""
# HtmlSed: rules.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Classes for rewrite rules, one per kind of transformation.
All but TagModificationRule are exposed to the user via the rules-file syntax.
"""

from typing import TYPE_CHECKING, Optional

from htmlsed.bases import Rule, RuleWithAffectedTags, RuleWithAttributeName, RuleWithSubstitution
from htmlsed.exceptions import CommittedMutateException, MissingAttributeException
from htmlsed.tags import Tag, TagModifier
from htmlsed.utilities import is_absolute_url, none_to_empty_string, resolve_url

if TYPE_CHECKING:
    from htmlsed.core import RewritePass


class TagReplacementRule(RuleWithAffectedTags, Rule):
    """
    A rule for replacing a whole tag with literal text.

    Rules-file syntax:
    ````
    TagReplacementRule: #«id»
    - tag_name: (def) ANY | «name»
    - replacement: «string» (mandatory)
    - affected_tags: (def) BOTH | OPENING | CLOSING
    ````
    """
    _replacement: Optional[str]

    def __init__(self, id_: str, verbose_mode_enabled: bool):
        super().__init__(id_, verbose_mode_enabled)
        self._replacement = None

    @property
    def attribute_names(self) -> tuple[str, ...]:
        return (
            'tag_name',
            'replacement',
            'affected_tags',
        )

    @property
    def replacement(self) -> Optional[str]:
        return self._replacement

    @replacement.setter
    def replacement(self, value: str):
        if self._is_committed:
            raise CommittedMutateException('error: cannot set `replacement` after `commit()`')

        self._replacement = value

    def _validate_mandatory_attributes(self):
        if self._replacement is None:
            raise MissingAttributeException('replacement')

    def _set_apply_method_variables(self):
        pass

    def _apply(self, tag: 'Tag', rewrite_pass: 'RewritePass') -> bool:
        if self.affects(tag):
            tag.replace_with(self._replacement)

        return True


class AttributeReplacementRule(RuleWithAttributeName, RuleWithSubstitution, Rule):
    """
    A rule for a regex substitution within the value of one attribute.

    Tags lacking the attribute are left alone.

    Rules-file syntax:
    ````
    AttributeReplacementRule: #«id»
    - tag_name: (def) ANY | «name»
    - attribute_name: «name» (mandatory)
    * "«pattern»" | '«pattern»' | «pattern»
        -->
      "«replacement»" | '«replacement»' | «replacement»
    ````
    """
    def __init__(self, id_: str, verbose_mode_enabled: bool):
        super().__init__(id_, verbose_mode_enabled)

    @property
    def attribute_names(self) -> tuple[str, ...]:
        return (
            'tag_name',
            'attribute_name',
        )

    def _validate_mandatory_attributes(self):
        self._validate_attribute_name()
        self._validate_substitution()

    def _set_apply_method_variables(self):
        self._compile_substitution()

    def _apply(self, tag: 'Tag', rewrite_pass: 'RewritePass') -> bool:
        if tag.has_attribute(self._attribute_name):
            value = tag.attribute(self._attribute_name)
            tag.set_attribute(self._attribute_name, self.substitute(value))

        return True


class ContentsReplacementRule(RuleWithSubstitution, Rule):
    """
    A rule for a regex substitution within the contents of a tag.

    The contents are everything (text and nested tags alike)
    strictly between an opening tag and its matching closing tag.
    Nesting of the same tag name is tracked with a stack,
    so that the contents of an inner occurrence are rewritten first
    and then again as part of the outer occurrence.

    Applying this rule ends rule application for the tag occurrence.

    Rules-file syntax:
    ````
    ContentsReplacementRule: #«id»
    - tag_name: (def) ANY | «name»
    * "«pattern»" | '«pattern»' | «pattern»
        -->
      "«replacement»" | '«replacement»' | «replacement»
    ````
    """
    def __init__(self, id_: str, verbose_mode_enabled: bool):
        super().__init__(id_, verbose_mode_enabled)

    @property
    def attribute_names(self) -> tuple[str, ...]:
        return (
            'tag_name',
        )

    def _validate_mandatory_attributes(self):
        self._validate_substitution()

    def _set_apply_method_variables(self):
        self._compile_substitution()

    def _apply(self, tag: 'Tag', rewrite_pass: 'RewritePass') -> bool:
        if tag.is_opening and tag.is_closing:
            return False

        if tag.is_opening:
            rewrite_pass.open_content_capture(tag)
        if tag.is_closing:
            rewrite_pass.close_content_capture(tag, self.substitute)

        return False


class UrlResolutionRule(RuleWithAttributeName, Rule):
    """
    A rule for resolving a relative URL attribute against a base URL.

    An attribute value that is already an absolute `http://` or `https://` URL
    is left alone, and ends rule application for the tag occurrence.
    A missing attribute counts as empty, and so is set to the base URL itself.

    Rules-file syntax:
    ````
    UrlResolutionRule: #«id»
    - tag_name: (def) ANY | «name»
    - attribute_name: «name» (mandatory)
    - base_url: «url» (mandatory)
    ````
    """
    _base_url: Optional[str]

    def __init__(self, id_: str, verbose_mode_enabled: bool):
        super().__init__(id_, verbose_mode_enabled)
        self._base_url = None

    @property
    def attribute_names(self) -> tuple[str, ...]:
        return (
            'tag_name',
            'attribute_name',
            'base_url',
        )

    @property
    def base_url(self) -> Optional[str]:
        return self._base_url

    @base_url.setter
    def base_url(self, value: str):
        if self._is_committed:
            raise CommittedMutateException('error: cannot set `base_url` after `commit()`')

        self._base_url = value

    def _validate_mandatory_attributes(self):
        self._validate_attribute_name()
        if self._base_url is None:
            raise MissingAttributeException('base_url')

    def _set_apply_method_variables(self):
        pass

    def _apply(self, tag: 'Tag', rewrite_pass: 'RewritePass') -> bool:
        url = tag.attribute(self._attribute_name)
        if is_absolute_url(url):
            return False

        tag.set_attribute(self._attribute_name, resolve_url(self._base_url, url))

        return True


class TagSurroundingRule(RuleWithAffectedTags, Rule):
    """
    A rule for surrounding a tag with literal text.

    Surrounding composes with replacement:
    a replaced tag is still surrounded.

    Rules-file syntax:
    ````
    TagSurroundingRule: #«id»
    - tag_name: (def) ANY | «name»
    - before: (def) «empty» | «string»
    - after: (def) «empty» | «string»
    - affected_tags: (def) BOTH | OPENING | CLOSING
    ````
    """
    _before: str
    _after: str

    def __init__(self, id_: str, verbose_mode_enabled: bool):
        super().__init__(id_, verbose_mode_enabled)
        self._before = ''
        self._after = ''

    @property
    def attribute_names(self) -> tuple[str, ...]:
        return (
            'tag_name',
            'before',
            'after',
            'affected_tags',
        )

    @property
    def before(self) -> str:
        return self._before

    @before.setter
    def before(self, value: Optional[str]):
        if self._is_committed:
            raise CommittedMutateException('error: cannot set `before` after `commit()`')

        self._before = none_to_empty_string(value)

    @property
    def after(self) -> str:
        return self._after

    @after.setter
    def after(self, value: Optional[str]):
        if self._is_committed:
            raise CommittedMutateException('error: cannot set `after` after `commit()`')

        self._after = none_to_empty_string(value)

    def _validate_mandatory_attributes(self):
        pass

    def _set_apply_method_variables(self):
        pass

    def _apply(self, tag: 'Tag', rewrite_pass: 'RewritePass') -> bool:
        if self.affects(tag):
            tag.set_surroundings(self._before, self._after)

        return True


class TagModificationRule(Rule):
    """
    A rule handing each tag occurrence to a caller-supplied TagModifier.

    Only available programmatically, as the modifier is a Python object.
    """
    _modifier: Optional['TagModifier']

    def __init__(self, id_: str, verbose_mode_enabled: bool):
        super().__init__(id_, verbose_mode_enabled)
        self._modifier = None

    @property
    def attribute_names(self) -> tuple[str, ...]:
        return (
            'tag_name',
        )

    @property
    def modifier(self) -> Optional['TagModifier']:
        return self._modifier

    @modifier.setter
    def modifier(self, value: 'TagModifier'):
        if self._is_committed:
            raise CommittedMutateException('error: cannot set `modifier` after `commit()`')

        self._modifier = value

    def _validate_mandatory_attributes(self):
        if self._modifier is None:
            raise MissingAttributeException('modifier')

    def _set_apply_method_variables(self):
        pass

    def _apply(self, tag: 'Tag', rewrite_pass: 'RewritePass') -> bool:
        self._modifier.modify_tag(tag)

        return True
