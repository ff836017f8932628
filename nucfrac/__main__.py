#! /usr/bin/env python
# -*- coding: utf-8 -*-

# This file is part of Nucfrac.
#
# Licensed under MIT License.

""" Main functionality of Nucfrac

"""
import sys
import argparse

from nucfrac import __version__
from .cli import tags as cli_tags


USAGE = ''' %(prog)s <command> [<args>]

The most commonly used commands are:
   tags           Nuclear fraction per cell barcode from BAM region tags

'''


def main():
    if len(sys.argv) == 1:
        empty_parser = argparse.ArgumentParser(
            description='Nuclear fraction quality control for single-cell data',
            usage=USAGE,
        )
        empty_parser.print_help(sys.stderr)
        sys.exit(1)

    parser = argparse.ArgumentParser(
        description='Nuclear fraction quality control for single-cell data',
    )
    parser.add_argument('--version',
        action='version',
        version=__version__,
        default=__version__,
    )

    subparser = parser.add_subparsers(help='Sub-command help', dest='subcommand')

    ''' Parser for tags '''
    tags_parser = subparser.add_parser('tags',
        description='''Nuclear fraction per cell barcode from the region-type
                       tags of an indexed BAM file''',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    cli_tags.TagsOptions.add_arguments(tags_parser)
    tags_parser.set_defaults(func=cli_tags.run)

    args = parser.parse_args()
    if not hasattr(args, 'func'):
        parser.print_help(sys.stderr)
        sys.exit(1)
    args.func(args)

if __name__ == '__main__':
    main()
