'''
Command line interface for Nestor.

Options fall back to environment variables and then to defaults.
 * `-i/--input`: `NESTOR_INPUT`
 * `-f/--format`: `NESTOR_FORMAT`, then `json` for standard output. Only an
   explicit `-f` forces the format of files; otherwise an existing file
   keeps its format and a new one is `binary`.
 * password: `NESTOR_PASSWORD`, then an interactive prompt
'''

import sys

from os import environ
from getpass import getpass

import logging

from argparse import ArgumentParser, ArgumentDefaultsHelpFormatter

from . import commands, log
from .errors import NestorError
from .source import Source
from . import DEFAULT_FILE_FORMAT, DEFAULT_FORMAT, ENV_FORMAT, ENV_INPUT, ENV_PASSWORD, FORMATS, __version__

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

def build_parser():
    parser = ArgumentParser(prog='nestor', description='nested key-value store', formatter_class=ArgumentDefaultsHelpFormatter)

    parser.add_argument('--version', action='version', version='%(prog)s {}'.format(__version__))
    parser.add_argument('-v', '--verbose', action='count', default=0, help='log more details (repeat for debug output)')
    parser.add_argument('-i', '--input', metavar='INPUT', help='file or directory to load the store from (default: ${} or standard input)'.format(ENV_INPUT))
    parser.add_argument('-s', '--save', metavar='OUTPUT', help='file or directory to save the store to instead of INPUT')
    parser.add_argument('--force', action='store_true', help='allow OUTPUT to overwrite an existing file or directory')
    parser.add_argument('-f', '--format', metavar='FORMAT', choices=FORMATS, help='format of standard output (default: ${} or {}); also forces the format of INPUT and OUTPUT files, which otherwise keep their format or start as {}'.format(ENV_FORMAT, DEFAULT_FORMAT, DEFAULT_FILE_FORMAT))
    parser.add_argument('-p', '--password', action='store_true', help='encrypt the saved store with a password')
    parser.add_argument('--leaf-format', metavar='FORMAT', choices=FORMATS, help='encode leaf files of directory stores instead of storing raw values')

    actions = parser.add_subparsers(dest='action', metavar='ACTION')
    actions.required = True

    create = actions.add_parser('create', help='create a new value', formatter_class=ArgumentDefaultsHelpFormatter)
    create.add_argument('path', metavar='PATH', help='slash-delimited path of the value')
    create.add_argument('value', metavar='VALUE', nargs='?', help='value as text or JSON')
    create.add_argument('--from-file', metavar='FILE', help='read the value from FILE')

    read = actions.add_parser('read', help='read an existing value')
    read.add_argument('path', metavar='PATH', help='slash-delimited path of the value')

    update = actions.add_parser('update', help='replace an existing value', formatter_class=ArgumentDefaultsHelpFormatter)
    update.add_argument('path', metavar='PATH', help='slash-delimited path of the value')
    update.add_argument('value', metavar='VALUE', nargs='?', help='value as text or JSON ("{}" deletes)')
    update.add_argument('--from-file', metavar='FILE', help='read the value from FILE')

    delete = actions.add_parser('delete', help='delete an existing value')
    delete.add_argument('path', metavar='PATH', help='slash-delimited path of the value')

    dump = actions.add_parser('print', help='print the whole store')
    dump.add_argument('--pretty', action='store_true', help='indent the JSON output')

    index = actions.add_parser('list', help='list the paths of all values')
    index.add_argument('path', metavar='PATH', nargs='?', help='only list below PATH')

    return parser

def prompt_password():
    return getpass('Password: ', stream=sys.stderr)

def _value(parser, args):
    if args.from_file:
        if args.value is not None:
            parser.error('VALUE and --from-file are mutually exclusive')

        with open(args.from_file, 'rb') as f:
            return commands.value_from_bytes(f.read())
    elif args.value is None:
        parser.error('a VALUE or --from-file is required')
    else:
        return commands.parse_value(args.value)

def _source(path, args, password):
    if not path:
        return None

    return Source(path, password=password, fmt=args.format, leaf_format=args.leaf_format)

def main(argv=None, stdin=None, stdout=None, password_supplier=prompt_password):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose >= 2:
        log.configure(logging.DEBUG)
    elif args.verbose == 1:
        log.configure(logging.INFO)
    else:
        log.configure(logging.WARNING)

    if stdin is None and not sys.stdin.isatty():
        stdin = sys.stdin.buffer
    if stdout is None:
        stdout = sys.stdout.buffer

    fmt = args.format or environ.get(ENV_FORMAT, None) or DEFAULT_FORMAT
    if fmt not in FORMATS:
        parser.error('invalid ${}: {}'.format(ENV_FORMAT, fmt))

    password = environ.get(ENV_PASSWORD, None)
    if password is None and args.password:
        password = password_supplier()

    source = _source(args.input or environ.get(ENV_INPUT, None), args, password)
    output = _source(args.save, args, password)

    session = commands.Session(source, output, fmt=fmt, stdin=stdin, stdout=stdout,
                               password_supplier=password_supplier, overwrite=args.force)

    try:
        if args.action == 'create':
            session.create(args.path, _value(parser, args))
        elif args.action == 'read':
            session.read(args.path)
        elif args.action == 'update':
            session.update(args.path, _value(parser, args))
        elif args.action == 'delete':
            session.delete(args.path)
        elif args.action == 'print':
            session.dump('pretty' if args.pretty else fmt)
        elif args.action == 'list':
            session.list(args.path)
    except NestorError as exc:
        logger.error('{} failed: {}'.format(args.action, exc))
        return 1
    except OSError as exc:
        logger.error('{} failed: {}'.format(args.action, exc))
        return 1

    return 0

if __name__ == '__main__':
    sys.exit(main())
