"""
# HtmlSed: cli.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Command-line interface.
"""

import argparse
import os
import re
import sys
from typing import Optional

from htmlsed._version import __version__
from htmlsed.authorities import RuleAuthority
from htmlsed.constants import COMMAND_LINE_ERROR_EXIT_CODE, GENERIC_ERROR_EXIT_CODE
from htmlsed.core import HtmlSed

DESCRIPTION = '''
    Rewrite HTML according to tag-based rules.
'''
HTML_FILE_NAME_HELP = '''
    name of HTML file to be rewritten
    (`-` or nothing to read from standard input and write to standard output)
'''
RULES_FILE_NAME_HELP = '''
    name of rules file (may be given more than once; rules are applied in order)
'''
OUTPUT_FILE_NAME_HELP = '''
    name of output file (only with a single HTML file;
    by default `«name».html` is written to `«name».sed.html`)
'''
VERBOSE_MODE_HELP = '''
    run in verbose mode (prints every rule applied)
'''

STANDARD_STREAM_ARGUMENT = '-'


def is_standard_stream(html_file_name_argument: str) -> bool:
    return html_file_name_argument == STANDARD_STREAM_ARGUMENT


def make_output_file_name(html_file_name: str) -> str:
    """
    Make the default output file name for an HTML file name.

    `«name».html` (or `.htm`) becomes `«name».sed.html` (or `.sed.htm`),
    and anything else has `.sed.html` appended.
    The path is normalised by resolving `./` and `../`.
    """
    html_file_name = os.path.normpath(html_file_name)
    html_match = re.fullmatch(
        pattern=r'(?P<name> [\s\S]+? ) (?P<extension> [.] html? )',
        string=html_file_name,
        flags=re.IGNORECASE | re.VERBOSE,
    )
    if html_match is None:
        return f'{html_file_name}.sed.html'

    return f'{html_match.group("name")}.sed{html_match.group("extension")}'


def parse_command_line_arguments(arguments: Optional[list[str]] = None) -> argparse.Namespace:
    argument_parser = argparse.ArgumentParser(prog='htmlsed', description=DESCRIPTION)
    argument_parser.add_argument(
        '-v', '--version',
        action='version',
        version=f'{argument_parser.prog} version {__version__}',
    )
    argument_parser.add_argument(
        '-r', '--rules',
        dest='rules_file_names',
        action='append',
        default=[],
        help=RULES_FILE_NAME_HELP,
        metavar='rules.txt',
    )
    argument_parser.add_argument(
        '-o', '--output',
        dest='output_file_name',
        default=None,
        help=OUTPUT_FILE_NAME_HELP,
        metavar='out.html',
    )
    argument_parser.add_argument(
        '-x', '--verbose',
        dest='verbose_mode_enabled',
        action='store_true',
        help=VERBOSE_MODE_HELP,
    )
    argument_parser.add_argument(
        'html_file_name_arguments',
        default=[],
        help=HTML_FILE_NAME_HELP,
        metavar='file.html',
        nargs='*',
    )

    return argument_parser.parse_args(arguments)


def read_rules(rules_file_names: list[str]) -> list[tuple[str, str]]:
    rules_sources = []
    for rules_file_name in rules_file_names:
        try:
            with open(rules_file_name, 'r', encoding='utf-8') as rules_file:
                rules_sources.append((rules_file_name, rules_file.read()))
        except FileNotFoundError:
            print(f'error: argument `{rules_file_name}`: rules file not found', file=sys.stderr)
            sys.exit(COMMAND_LINE_ERROR_EXIT_CODE)

    return rules_sources


def rewrite(html: str, rules_sources: list[tuple[str, str]], verbose_mode_enabled: bool) -> str:
    html_sed = HtmlSed(html, verbose_mode_enabled)
    for rules_file_name, rules in rules_sources:
        rule_authority = RuleAuthority(html_sed, rules_file_name)
        rule_authority.legislate(rules, rules_file_name)

    return html_sed.to_string()


def generate_html_file(html_file_name_argument: str, output_file_name: Optional[str],
                       rules_sources: list[tuple[str, str]], verbose_mode_enabled: bool):
    if is_standard_stream(html_file_name_argument):
        html = sys.stdin.read()
    else:
        try:
            with open(html_file_name_argument, 'r', encoding='utf-8') as html_file:
                html = html_file.read()
        except FileNotFoundError:
            print(f'error: argument `{html_file_name_argument}`: file not found', file=sys.stderr)
            sys.exit(COMMAND_LINE_ERROR_EXIT_CODE)

    rewritten_html = rewrite(html, rules_sources, verbose_mode_enabled)

    if output_file_name is None:
        if is_standard_stream(html_file_name_argument):
            sys.stdout.write(rewritten_html)
            return
        output_file_name = make_output_file_name(html_file_name_argument)

    try:
        with open(output_file_name, 'w', encoding='utf-8') as output_file:
            output_file.write(rewritten_html)
        print(f'success: wrote to `{output_file_name}`')
    except IOError:
        print(f'error: cannot write to `{output_file_name}`', file=sys.stderr)
        sys.exit(GENERIC_ERROR_EXIT_CODE)


def main(arguments: Optional[list[str]] = None):
    parsed_arguments = parse_command_line_arguments(arguments)
    html_file_name_arguments = parsed_arguments.html_file_name_arguments or [STANDARD_STREAM_ARGUMENT]
    output_file_name = parsed_arguments.output_file_name
    verbose_mode_enabled = parsed_arguments.verbose_mode_enabled

    if output_file_name is not None and len(html_file_name_arguments) > 1:
        print('error: option -o (or --output) cannot be used with more than one positional argument',
              file=sys.stderr)
        sys.exit(COMMAND_LINE_ERROR_EXIT_CODE)

    rules_sources = read_rules(parsed_arguments.rules_file_names)

    for html_file_name_argument in html_file_name_arguments:
        generate_html_file(html_file_name_argument, output_file_name, rules_sources, verbose_mode_enabled)


if __name__ == '__main__':
    main()
