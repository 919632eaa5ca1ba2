"""
# HtmlSed: bases.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Base classes for rewrite rules.
"""

import abc
import re
from typing import TYPE_CHECKING, Optional

from htmlsed.constants import ANY_TAG_NAME, VERBOSE_MODE_DIVIDER_SYMBOL_COUNT
from htmlsed.exceptions import CommittedMutateException, MissingAttributeException, UncommittedApplyException
from htmlsed.tags import Tag

if TYPE_CHECKING:
    from htmlsed.core import RewritePass


class Rule(abc.ABC):
    """
    Base class for a rewrite rule.

    A rule is staged (its attributes set), then committed, then applied
    to every occurrence of its tag name (or of every tag, if `tag_name` is empty).

    Rules-file syntax:
    ````
    Rule: #«id»
    - tag_name: (def) ANY | «name»
    ````
    """
    _is_committed: bool
    _id: str
    _tag_name: str
    _verbose_mode_enabled: bool

    def __init__(self, id_: str, verbose_mode_enabled: bool):
        self._is_committed = False
        self._id = id_
        self._tag_name = ANY_TAG_NAME
        self._verbose_mode_enabled = verbose_mode_enabled

    @property
    @abc.abstractmethod
    def attribute_names(self) -> tuple[str, ...]:
        raise NotImplementedError

    @property
    def id_(self) -> str:
        return self._id

    @property
    def is_committed(self) -> bool:
        return self._is_committed

    @property
    def tag_name(self) -> str:
        return self._tag_name

    @tag_name.setter
    def tag_name(self, value: Optional[str]):
        if self._is_committed:
            raise CommittedMutateException('error: cannot set `tag_name` after `commit()`')

        if value is None:
            value = ANY_TAG_NAME
        self._tag_name = Tag.normalise_name(value)

    def commit(self):
        self._validate_mandatory_attributes()
        self._set_apply_method_variables()
        self._is_committed = True

    def apply(self, tag: 'Tag', rewrite_pass: 'RewritePass') -> bool:
        """
        Apply the rule to a tag occurrence.

        Returns whether the remaining rules should still be applied to this occurrence.
        """
        if not self._is_committed:
            raise UncommittedApplyException('error: cannot call `apply(tag, rewrite_pass)` before `commit()`')

        if not self._verbose_mode_enabled:
            return self._apply(tag, rewrite_pass)

        string_before = tag.to_string()
        should_continue = self._apply(tag, rewrite_pass)
        string_after = tag.to_string()

        if string_before == string_after:
            no_change_indicator = ' (no change)'
        else:
            no_change_indicator = ''

        print('<' * VERBOSE_MODE_DIVIDER_SYMBOL_COUNT + f' BEFORE #{self._id}')
        print(string_before)
        print('=' * VERBOSE_MODE_DIVIDER_SYMBOL_COUNT + no_change_indicator)
        print(string_after)
        print('>' * VERBOSE_MODE_DIVIDER_SYMBOL_COUNT + f' AFTER #{self._id}')
        print('\n')

        return should_continue

    @abc.abstractmethod
    def _validate_mandatory_attributes(self):
        """
        Ensure all mandatory attributes have been set.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def _set_apply_method_variables(self):
        """
        Set variables used in `self._apply(tag, rewrite_pass)`.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def _apply(self, tag: 'Tag', rewrite_pass: 'RewritePass') -> bool:
        """
        Apply the rule to a tag occurrence, returning whether to carry on with the remaining rules.
        """
        raise NotImplementedError


class RuleWithSubstitution(Rule, abc.ABC):
    """
    Base class for a rule with a single regex substitution.

    The substitution replaces all matches of «pattern»,
    and «replacement» may refer to groups (`\\1`, `\\g<name>`).

    Rules-file syntax:
    ````
    RuleWithSubstitution: #«id»
    * "«pattern»" | '«pattern»' | «pattern»
        -->
      "«replacement»" | '«replacement»' | «replacement»
    ````
    """
    _pattern: Optional[str]
    _replacement: Optional[str]
    _pattern_compiled: Optional[re.Pattern]

    def __init__(self, id_: str, verbose_mode_enabled: bool):
        super().__init__(id_, verbose_mode_enabled)
        self._pattern = None
        self._replacement = None
        self._pattern_compiled = None

    @property
    def pattern(self) -> Optional[str]:
        return self._pattern

    @property
    def replacement(self) -> Optional[str]:
        return self._replacement

    @property
    def has_substitution(self) -> bool:
        return self._pattern is not None

    def set_substitution(self, pattern: str, replacement: str):
        if self._is_committed:
            raise CommittedMutateException('error: cannot call `set_substitution(...)` after `commit()`')

        self._pattern = pattern
        self._replacement = replacement

    def _validate_substitution(self):
        if self._pattern is None:
            raise MissingAttributeException('substitution')

    def _compile_substitution(self):
        """
        Compile the pattern and check the replacement template against it.

        Both raise `re.error` here, at commit, rather than during a rewrite pass.
        """
        self._pattern_compiled = re.compile(self._pattern)
        self._pattern_compiled.sub(self._replacement, '')

    def substitute(self, string: str) -> str:
        return self._pattern_compiled.sub(self._replacement, string)


class RuleWithAttributeName(Rule, abc.ABC):
    """
    Base class for a rule acting on a single tag attribute.

    Rules-file syntax:
    ````
    RuleWithAttributeName: #«id»
    - attribute_name: «name» (mandatory)
    ````
    """
    _attribute_name: Optional[str]

    def __init__(self, id_: str, verbose_mode_enabled: bool):
        super().__init__(id_, verbose_mode_enabled)
        self._attribute_name = None

    @property
    def attribute_name(self) -> Optional[str]:
        return self._attribute_name

    @attribute_name.setter
    def attribute_name(self, value: str):
        if self._is_committed:
            raise CommittedMutateException('error: cannot set `attribute_name` after `commit()`')

        self._attribute_name = Tag.normalise_name(value)

    def _validate_attribute_name(self):
        if not self._attribute_name:
            raise MissingAttributeException('attribute_name')


class RuleWithAffectedTags(Rule, abc.ABC):
    """
    Base class for a rule that may apply to opening tags, closing tags, or both.

    A self-closing tag counts as both opening and closing.

    Rules-file syntax:
    ````
    RuleWithAffectedTags: #«id»
    - affected_tags: (def) BOTH | OPENING | CLOSING
    ````
    """
    _affects_opening: bool
    _affects_closing: bool

    def __init__(self, id_: str, verbose_mode_enabled: bool):
        super().__init__(id_, verbose_mode_enabled)
        self._affects_opening = True
        self._affects_closing = True

    @property
    def affects_opening(self) -> bool:
        return self._affects_opening

    @affects_opening.setter
    def affects_opening(self, value: bool):
        if self._is_committed:
            raise CommittedMutateException('error: cannot set `affects_opening` after `commit()`')

        self._affects_opening = value

    @property
    def affects_closing(self) -> bool:
        return self._affects_closing

    @affects_closing.setter
    def affects_closing(self, value: bool):
        if self._is_committed:
            raise CommittedMutateException('error: cannot set `affects_closing` after `commit()`')

        self._affects_closing = value

    def affects(self, tag: 'Tag') -> bool:
        return (
            self._affects_opening and tag.is_opening
            or self._affects_closing and tag.is_closing
        )
