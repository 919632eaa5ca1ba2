"""
# HtmlSed: authorities.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

The higher power that turns rules files into rules.
"""

import os
import re
import sys
import traceback
from typing import TYPE_CHECKING, NamedTuple, Optional

from htmlsed.bases import Rule, RuleWithAffectedTags, RuleWithSubstitution
from htmlsed.constants import GENERIC_ERROR_EXIT_CODE, RULES_SYNTAX_HELP
from htmlsed.exceptions import MissingAttributeException
from htmlsed.rules import (
    AttributeReplacementRule,
    ContentsReplacementRule,
    TagReplacementRule,
    TagSurroundingRule,
    UrlResolutionRule,
)
from htmlsed.utilities import none_to_empty_string

if TYPE_CHECKING:
    from htmlsed.core import HtmlSed


class RuleAuthority:
    """
    Object governing the parsing of rules files.

    ## `legislate`

    Parses rules-file syntax (see the constant `RULES_SYNTAX_HELP` in `constants.py`)
    and adds the resulting rules to an HtmlSed, in order of declaration.

    Terminology:
    - Class declarations are _committed_.
    - Attribute and substitution declarations are _staged_.
    """
    _html_sed: 'HtmlSed'
    _opened_file_names: list[str]
    _rule_ids: set[str]

    def __init__(self, html_sed: 'HtmlSed', rules_file_name: str):
        self._html_sed = html_sed
        self._opened_file_names = [rules_file_name]
        self._rule_ids = set()

    @staticmethod
    def print_error(message: str, rules_file_name: str, start_line_number: int, end_line_number: Optional[int] = None):
        source_file = f'`{rules_file_name}`'

        if end_line_number is None or start_line_number == end_line_number - 1:
            line_number_range = f'line {start_line_number}'
        else:
            line_number_range = f'lines {start_line_number} to {end_line_number - 1}'

        print(f'error: {source_file}, {line_number_range}: {message}', file=sys.stderr)

    @staticmethod
    def print_traceback(exception: Exception):
        traceback.print_exception(type(exception), exception, exception.__traceback__)

    @staticmethod
    def is_whitespace_only(line: str) -> bool:
        return bool(re.fullmatch(pattern=r'[\s]*', string=line, flags=re.ASCII))

    @staticmethod
    def is_comment(line: str) -> bool:
        return line.startswith('#')

    @staticmethod
    def compute_rules_inclusion_match(line: str) -> Optional[re.Match]:
        return re.fullmatch(
            pattern=r'''
                [<][ ]
                    (?:
                        [/] (?P<included_file_name> [\S][\s\S]*? )
                            |
                        (?P<included_file_name_relative> [\S][\s\S]*? )
                    )
                [\s]*
            ''',
            string=line,
            flags=re.ASCII | re.VERBOSE,
        )

    def process_rules_inclusion_line(self, rules_inclusion_match: re.Match, rules_file_name: str, line_number: int):
        included_file_name_relative = rules_inclusion_match.group('included_file_name_relative')
        if included_file_name_relative is not None:
            included_file_name = os.path.join(os.path.dirname(rules_file_name), included_file_name_relative)
        else:
            included_file_name = rules_inclusion_match.group('included_file_name')

        included_file_name = os.path.normpath(included_file_name)

        try:
            with open(included_file_name, 'r', encoding='utf-8') as included_file:
                rules = included_file.read()
        except FileNotFoundError:
            RuleAuthority.print_error(f'file `{included_file_name}` (relative to terminal) not found',
                                      rules_file_name, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        for opened_file_name in self._opened_file_names:
            if os.path.exists(opened_file_name) and os.path.samefile(opened_file_name, included_file_name):
                recursive_inclusion_string = ' includes '.join(
                    f'`{opened_file_name}`'
                    for opened_file_name in [*self._opened_file_names, included_file_name]
                )
                RuleAuthority.print_error(f'recursive inclusion: {recursive_inclusion_string}',
                                          rules_file_name, line_number)
                sys.exit(GENERIC_ERROR_EXIT_CODE)

        self._opened_file_names.append(included_file_name)
        self.legislate(rules, rules_file_name=included_file_name)
        self._opened_file_names.pop()

    @staticmethod
    def compute_class_declaration_match(line: str) -> Optional[re.Match]:
        return re.fullmatch(
            pattern=r'''
                (?P<class_name> [A-Za-z]+ ) [:]
                [\s]+
                [#] (?P<id_> [a-z0-9-.]+ )
                [\s]*
            ''',
            string=line,
            flags=re.ASCII | re.VERBOSE,
        )

    def process_class_declaration_line(self, class_declaration_match: re.Match,
                                       rules_file_name: str, line_number: int) -> 'PostClassDeclarationState':
        class_name = class_declaration_match.group('class_name')
        id_ = class_declaration_match.group('id_')
        verbose_mode_enabled = self._html_sed.verbose_mode_enabled

        if class_name == 'TagReplacementRule':
            rule = TagReplacementRule(id_, verbose_mode_enabled)
        elif class_name == 'AttributeReplacementRule':
            rule = AttributeReplacementRule(id_, verbose_mode_enabled)
        elif class_name == 'ContentsReplacementRule':
            rule = ContentsReplacementRule(id_, verbose_mode_enabled)
        elif class_name == 'UrlResolutionRule':
            rule = UrlResolutionRule(id_, verbose_mode_enabled)
        elif class_name == 'TagSurroundingRule':
            rule = TagSurroundingRule(id_, verbose_mode_enabled)
        else:
            RuleAuthority.print_error(f'unrecognised rule class `{class_name}`', rules_file_name, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        if id_ in self._rule_ids:
            RuleAuthority.print_error(f'rule already declared with id `{id_}`', rules_file_name, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        line_number_range_start = line_number

        return PostClassDeclarationState(class_name, rule, line_number_range_start)

    @staticmethod
    def compute_attribute_declaration_match(line: str) -> Optional[re.Match]:
        return re.fullmatch(
            pattern=r'''
                [-][ ] (?P<attribute_name> [a-z_]+ ) [:]
                (?P<partial_attribute_value> [\s\S]* )
            ''',
            string=line,
            flags=re.ASCII | re.VERBOSE,
        )

    @staticmethod
    def process_attribute_declaration_line(attribute_declaration_match: re.Match, class_name: str,
                                           rule: Optional['Rule'], rules_file_name: str, line_number: int,
                                           ) -> 'PostAttributeDeclarationState':
        if rule is None:
            RuleAuthority.print_error('attribute declaration without an active class declaration',
                                      rules_file_name, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        attribute_name = attribute_declaration_match.group('attribute_name')
        if attribute_name not in rule.attribute_names:
            RuleAuthority.print_error(f'unrecognised attribute `{attribute_name}` for `{class_name}`',
                                      rules_file_name, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        attribute_value = attribute_declaration_match.group('partial_attribute_value')
        line_number_range_start = line_number

        return PostAttributeDeclarationState(attribute_name, attribute_value, line_number_range_start)

    @staticmethod
    def compute_substitution_declaration_match(line: str) -> Optional[re.Match]:
        return re.fullmatch(
            pattern=r'[*][ ] (?P<partial_substitution> [\s\S]* )',
            string=line,
            flags=re.ASCII | re.VERBOSE,
        )

    @staticmethod
    def process_substitution_declaration_line(rule: Optional['Rule'], substitution_declaration_match: re.Match,
                                              rules_file_name: str, line_number: int,
                                              ) -> 'PostSubstitutionDeclarationState':
        if rule is None:
            RuleAuthority.print_error('substitution declaration without an active class declaration',
                                      rules_file_name, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        substitution = substitution_declaration_match.group('partial_substitution')
        line_number_range_start = line_number

        return PostSubstitutionDeclarationState(substitution, line_number_range_start)

    @staticmethod
    def compute_continuation_match(line: str) -> Optional[re.Match]:
        return re.fullmatch(
            pattern=r'(?P<continuation> [\s]+ [\S][\s\S]* )',
            string=line,
            flags=re.ASCII | re.VERBOSE,
        )

    @staticmethod
    def process_continuation_line(continuation_match: re.Match, attribute_name: Optional[str],
                                  attribute_value: Optional[str], substitution: Optional[str],
                                  rules_file_name: str, line_number: int,
                                  ) -> 'PostContinuationState':
        continuation = continuation_match.group('continuation')

        if attribute_name is not None:
            attribute_value = none_to_empty_string(attribute_value) + '\n' + continuation
        elif substitution is not None:
            substitution = substitution + '\n' + continuation
        else:
            RuleAuthority.print_error('continuation only allowed for attribute or substitution declarations',
                                      rules_file_name, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        return PostContinuationState(attribute_value, substitution)

    @staticmethod
    def compute_string_match(attribute_value: str) -> Optional[re.Match]:
        return re.fullmatch(
            pattern=r'''
                [\s]*
                (?:
                    "(?P<double_quoted_string> [\s\S]*? )"
                        |
                    '(?P<single_quoted_string> [\s\S]*? )'
                        |
                    (?P<bare_string> [\s\S]*? )
                )
                [\s]*
            ''',
            string=attribute_value,
            flags=re.ASCII | re.VERBOSE,
        )

    @staticmethod
    def extract_string(attribute_value: str) -> str:
        string_match = RuleAuthority.compute_string_match(attribute_value)

        double_quoted_string = string_match.group('double_quoted_string')
        if double_quoted_string is not None:
            return double_quoted_string

        single_quoted_string = string_match.group('single_quoted_string')
        if single_quoted_string is not None:
            return single_quoted_string

        return string_match.group('bare_string')

    @staticmethod
    def compute_tag_name_match(attribute_value: str) -> Optional[re.Match]:
        return re.fullmatch(
            pattern=r'''
                [\s]*
                (?:
                    (?P<any_keyword> ANY )
                        |
                    (?P<tag_name> [a-zA-Z0-9]+ )
                        |
                    (?P<invalid_value> [\s\S]*? )
                )
                [\s]*
            ''',
            string=attribute_value,
            flags=re.ASCII | re.VERBOSE,
        )

    @staticmethod
    def stage_tag_name(rule: 'Rule', attribute_value: str,
                       rules_file_name: str, line_number_range_start: int, line_number: int):
        tag_name_match = RuleAuthority.compute_tag_name_match(attribute_value)

        invalid_value = tag_name_match.group('invalid_value')
        if invalid_value is not None:
            RuleAuthority.print_error(f'invalid value `{invalid_value}` for attribute `tag_name`',
                                      rules_file_name, line_number_range_start, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        if tag_name_match.group('any_keyword') is not None:
            return

        rule.tag_name = tag_name_match.group('tag_name')

    @staticmethod
    def compute_attribute_name_match(attribute_value: str) -> Optional[re.Match]:
        return re.fullmatch(
            pattern=r'''
                [\s]*
                (?:
                    (?P<attribute_name> [a-zA-Z0-9]+ )
                        |
                    (?P<invalid_value> [\s\S]*? )
                )
                [\s]*
            ''',
            string=attribute_value,
            flags=re.ASCII | re.VERBOSE,
        )

    @staticmethod
    def stage_attribute_name(rule: 'Rule', attribute_value: str,
                             rules_file_name: str, line_number_range_start: int, line_number: int):
        attribute_name_match = RuleAuthority.compute_attribute_name_match(attribute_value)

        invalid_value = attribute_name_match.group('invalid_value')
        if invalid_value is not None:
            RuleAuthority.print_error(f'invalid value `{invalid_value}` for attribute `attribute_name`',
                                      rules_file_name, line_number_range_start, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        rule.attribute_name = attribute_name_match.group('attribute_name')

    @staticmethod
    def compute_affected_tags_match(attribute_value: str) -> Optional[re.Match]:
        return re.fullmatch(
            pattern=r'''
                [\s]*
                (?:
                    (?P<affected_tags> BOTH | OPENING | CLOSING )
                        |
                    (?P<invalid_value> [\s\S]*? )
                )
                [\s]*
            ''',
            string=attribute_value,
            flags=re.ASCII | re.VERBOSE,
        )

    @staticmethod
    def stage_affected_tags(rule: 'RuleWithAffectedTags', attribute_value: str,
                            rules_file_name: str, line_number_range_start: int, line_number: int):
        affected_tags_match = RuleAuthority.compute_affected_tags_match(attribute_value)

        invalid_value = affected_tags_match.group('invalid_value')
        if invalid_value is not None:
            RuleAuthority.print_error(f'invalid value `{invalid_value}` for attribute `affected_tags`',
                                      rules_file_name, line_number_range_start, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        affected_tags = affected_tags_match.group('affected_tags')
        rule.affects_opening = affected_tags in ('BOTH', 'OPENING')
        rule.affects_closing = affected_tags in ('BOTH', 'CLOSING')

    @staticmethod
    def compute_substitution_match(substitution: str) -> Optional[re.Match]:
        substitution_delimiters: list[str] = re.findall(pattern='[-]{2,}[>]', string=substitution)
        if len(substitution_delimiters) == 0:
            return None

        longest_substitution_delimiter = max(substitution_delimiters, key=len)
        return re.fullmatch(
            pattern=fr'''
                [\s]*
                    (?:
                        "(?P<double_quoted_pattern> [\s\S]*? )"
                            |
                        '(?P<single_quoted_pattern> [\s\S]*? )'
                            |
                        (?P<bare_pattern> [\s\S]*? )
                    )
                [\s]*
                    {re.escape(longest_substitution_delimiter)}
                    [\s]*
                    (?:
                        "(?P<double_quoted_replacement> [\s\S]*? )"
                            |
                        '(?P<single_quoted_replacement> [\s\S]*? )'
                            |
                        (?P<bare_replacement> [\s\S]*? )
                    )
                [\s]*
            ''',
            string=substitution,
            flags=re.ASCII | re.VERBOSE,
        )

    @staticmethod
    def stage_substitution(rule: 'RuleWithSubstitution', substitution: str,
                           rules_file_name: str, line_number_range_start: int, line_number: int):
        if rule.has_substitution:
            RuleAuthority.print_error(f'rule `#{rule.id_}` already has a substitution',
                                      rules_file_name, line_number_range_start, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        substitution_match = RuleAuthority.compute_substitution_match(substitution)
        if substitution_match is None:
            RuleAuthority.print_error(f'missing delimiter `-->` in substitution `{substitution}`',
                                      rules_file_name, line_number_range_start, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        double_quoted_pattern = substitution_match.group('double_quoted_pattern')
        if double_quoted_pattern is not None:
            pattern = double_quoted_pattern
        else:
            single_quoted_pattern = substitution_match.group('single_quoted_pattern')
            if single_quoted_pattern is not None:
                pattern = single_quoted_pattern
            else:
                pattern = substitution_match.group('bare_pattern')

        double_quoted_replacement = substitution_match.group('double_quoted_replacement')
        if double_quoted_replacement is not None:
            replacement = double_quoted_replacement
        else:
            single_quoted_replacement = substitution_match.group('single_quoted_replacement')
            if single_quoted_replacement is not None:
                replacement = single_quoted_replacement
            else:
                replacement = substitution_match.group('bare_replacement')

        try:
            pattern_compiled = re.compile(pattern=pattern)
        except re.error as pattern_exception:
            RuleAuthority.print_error(f'bad regex pattern `{pattern}`',
                                      rules_file_name, line_number_range_start, line_number)
            RuleAuthority.print_traceback(pattern_exception)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        try:
            re.sub(pattern=pattern_compiled, repl=replacement, string='')
        except re.error as replacement_exception:
            RuleAuthority.print_error(f'bad regex replacement `{replacement}` for pattern `{pattern}`',
                                      rules_file_name, line_number_range_start, line_number)
            RuleAuthority.print_traceback(replacement_exception)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        rule.set_substitution(pattern, replacement)

    def stage(self, class_name: str, rule: 'Rule',
              attribute_name: Optional[str], attribute_value: Optional[str], substitution: Optional[str],
              rules_file_name: str, line_number_range_start: int, line_number: int) -> 'PostStageState':
        if substitution is not None:  # staging a substitution
            if isinstance(rule, RuleWithSubstitution):
                RuleAuthority.stage_substitution(rule, substitution,
                                                 rules_file_name, line_number_range_start, line_number)
            else:
                RuleAuthority.print_error(f'class `{class_name}` does not allow substitutions',
                                          rules_file_name, line_number_range_start, line_number)
                sys.exit(GENERIC_ERROR_EXIT_CODE)

        else:  # staging an attribute declaration
            if attribute_name == 'affected_tags':
                RuleAuthority.stage_affected_tags(rule, attribute_value,
                                                  rules_file_name, line_number_range_start, line_number)
            elif attribute_name == 'after':
                rule.after = RuleAuthority.extract_string(attribute_value)
            elif attribute_name == 'attribute_name':
                RuleAuthority.stage_attribute_name(rule, attribute_value,
                                                   rules_file_name, line_number_range_start, line_number)
            elif attribute_name == 'base_url':
                rule.base_url = RuleAuthority.extract_string(attribute_value)
            elif attribute_name == 'before':
                rule.before = RuleAuthority.extract_string(attribute_value)
            elif attribute_name == 'replacement':
                rule.replacement = RuleAuthority.extract_string(attribute_value)
            elif attribute_name == 'tag_name':
                RuleAuthority.stage_tag_name(rule, attribute_value,
                                             rules_file_name, line_number_range_start, line_number)

        return PostStageState(attribute_name=None, attribute_value=None, substitution=None,
                              line_number_range_start=None)

    def commit(self, class_name: str, rule: 'Rule', rules_file_name: str, line_number: int) -> 'PostCommitState':
        try:
            rule.commit()
        except MissingAttributeException as exception:
            missing_attribute = exception.missing_attribute
            RuleAuthority.print_error(f'missing attribute `{missing_attribute}` for {class_name}',
                                      rules_file_name, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        self._rule_ids.add(rule.id_)
        self._html_sed.add_rule(rule)

        return PostCommitState(class_name=None, rule=None, attribute_name=None, attribute_value=None,
                               substitution=None, line_number_range_start=None)

    def legislate(self, rules: Optional[str], rules_file_name: str):
        if rules is None:
            return

        class_name: Optional[str] = None
        rule: Optional['Rule'] = None
        attribute_name: Optional[str] = None
        attribute_value: Optional[str] = None
        substitution: Optional[str] = None
        line_number_range_start: Optional[int] = None
        line_number: int = 0

        for line_number, line in enumerate(rules.splitlines(), start=1):
            if RuleAuthority.is_whitespace_only(line):
                if attribute_name is not None or substitution is not None:
                    attribute_name, attribute_value, substitution, line_number_range_start = (
                        self.stage(class_name, rule, attribute_name, attribute_value, substitution,
                                   rules_file_name, line_number_range_start, line_number)
                    )
                if rule is not None:
                    class_name, rule, attribute_name, attribute_value, substitution, line_number_range_start = (
                        self.commit(class_name, rule, rules_file_name, line_number)
                    )
                continue

            if RuleAuthority.is_comment(line):
                continue

            rules_inclusion_match = RuleAuthority.compute_rules_inclusion_match(line)
            if rules_inclusion_match is not None:
                if attribute_name is not None or substitution is not None:
                    attribute_name, attribute_value, substitution, line_number_range_start = (
                        self.stage(class_name, rule, attribute_name, attribute_value, substitution,
                                   rules_file_name, line_number_range_start, line_number)
                    )
                if rule is not None:
                    class_name, rule, attribute_name, attribute_value, substitution, line_number_range_start = (
                        self.commit(class_name, rule, rules_file_name, line_number)
                    )
                self.process_rules_inclusion_line(rules_inclusion_match, rules_file_name, line_number)
                continue

            class_declaration_match = RuleAuthority.compute_class_declaration_match(line)
            if class_declaration_match is not None:
                if attribute_name is not None or substitution is not None:
                    attribute_name, attribute_value, substitution, line_number_range_start = (
                        self.stage(class_name, rule, attribute_name, attribute_value, substitution,
                                   rules_file_name, line_number_range_start, line_number)
                    )
                if rule is not None:
                    class_name, rule, attribute_name, attribute_value, substitution, line_number_range_start = (
                        self.commit(class_name, rule, rules_file_name, line_number)
                    )
                class_name, rule, line_number_range_start = (
                    self.process_class_declaration_line(class_declaration_match, rules_file_name, line_number)
                )
                continue

            attribute_declaration_match = RuleAuthority.compute_attribute_declaration_match(line)
            if attribute_declaration_match is not None:
                if attribute_name is not None or substitution is not None:
                    attribute_name, attribute_value, substitution, line_number_range_start = (
                        self.stage(class_name, rule, attribute_name, attribute_value, substitution,
                                   rules_file_name, line_number_range_start, line_number)
                    )
                attribute_name, attribute_value, line_number_range_start = (
                    RuleAuthority.process_attribute_declaration_line(
                        attribute_declaration_match, class_name, rule, rules_file_name, line_number,
                    )
                )
                continue

            substitution_declaration_match = RuleAuthority.compute_substitution_declaration_match(line)
            if substitution_declaration_match is not None:
                if attribute_name is not None or substitution is not None:
                    attribute_name, attribute_value, substitution, line_number_range_start = (
                        self.stage(class_name, rule, attribute_name, attribute_value, substitution,
                                   rules_file_name, line_number_range_start, line_number)
                    )
                substitution, line_number_range_start = (
                    RuleAuthority.process_substitution_declaration_line(
                        rule, substitution_declaration_match, rules_file_name, line_number,
                    )
                )
                continue

            continuation_match = RuleAuthority.compute_continuation_match(line)
            if continuation_match is not None:
                attribute_value, substitution = (
                    RuleAuthority.process_continuation_line(
                        continuation_match, attribute_name, attribute_value, substitution,
                        rules_file_name, line_number,
                    )
                )
                continue

            RuleAuthority.print_error('invalid syntax\n\n' + RULES_SYNTAX_HELP, rules_file_name, line_number)
            sys.exit(GENERIC_ERROR_EXIT_CODE)

        # At end of file
        if attribute_name is not None or substitution is not None:
            self.stage(class_name, rule, attribute_name, attribute_value, substitution,
                       rules_file_name, line_number_range_start, line_number + 1)
        if rule is not None:
            self.commit(class_name, rule, rules_file_name, line_number + 1)


class PostClassDeclarationState(NamedTuple):
    class_name: str
    rule: 'Rule'
    line_number_range_start: int


class PostAttributeDeclarationState(NamedTuple):
    attribute_name: str
    attribute_value: str
    line_number_range_start: int


class PostSubstitutionDeclarationState(NamedTuple):
    substitution: str
    line_number_range_start: int


class PostContinuationState(NamedTuple):
    attribute_value: Optional[str]
    substitution: Optional[str]


class PostStageState(NamedTuple):
    attribute_name: Optional[str]
    attribute_value: Optional[str]
    substitution: Optional[str]
    line_number_range_start: Optional[int]


class PostCommitState(NamedTuple):
    class_name: Optional[str]
    rule: Optional['Rule']
    attribute_name: Optional[str]
    attribute_value: Optional[str]
    substitution: Optional[str]
    line_number_range_start: Optional[int]
