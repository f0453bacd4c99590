'''
Store commands: load a tree, apply one operation, persist the result.

A `Session` describes where the tree of a single command comes from and
where it goes. Without a source, the tree is read from `stdin` (if
given) and mutated trees are written to `stdout`.
'''

import logging

from . import coders, paths
from .core import Container, Leaf
from .errors import CodecError, CredentialRequired
from .source import decode_blob
from . import DEFAULT_FORMAT

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

def parse_value(text):
    '''
    Interpret a command line value.

    JSON objects become containers and JSON strings become text leaves.
    Any other input, including numbers and invalid JSON, is stored as
    the literal text.
    '''

    try:
        return coders.decode(text.encode('utf-8'), 'json')
    except CodecError:
        return Leaf(text)

def value_from_bytes(data):
    '''
    Make a leaf from raw bytes, as text if they are valid UTF-8.
    '''

    try:
        return Leaf(data.decode('utf-8'))
    except UnicodeDecodeError:
        return Leaf(data)

class Session(object):
    '''
    One store command from load to write-back.

    `password_supplier`, if given, is called without arguments to obtain
    a password when an encrypted source is loaded without one.
    '''

    def __init__(self, source=None, output=None, fmt=DEFAULT_FORMAT, stdin=None, stdout=None,
                 password_supplier=None, overwrite=False):
        self.source = source
        self.output = output
        self.fmt = fmt
        self.stdin = stdin
        self.stdout = stdout
        self.password_supplier = password_supplier
        self.overwrite = overwrite

    def load(self, fresh=False):
        '''
        Load the tree for this command.

        If `fresh`, a missing source is an empty tree.
        '''

        if self.source is not None:
            if fresh and not self.source.exists():
                logger.info('starting new store at "{}"'.format(self.source.path))
                root = Container()
            else:
                root = self._load_source()
        elif self.stdin is not None:
            data = self.stdin.read()
            root = Container() if not data.strip() else self._decode_stdin(data)
        else:
            root = Container()

        if not root.is_container():
            raise CodecError('input does not hold a tree')

        # sources may contain empty directories or objects
        root.cull()
        return root

    def _load_source(self):
        try:
            return self.source.load()
        except CredentialRequired:
            if self.password_supplier is None:
                raise

        # remember the password for the write-back
        self.source.password = self.password_supplier()
        return self.source.load()

    def _decode_stdin(self, data):
        try:
            return decode_blob(data)
        except CredentialRequired:
            if self.password_supplier is None:
                raise

        return decode_blob(data, password=self.password_supplier())

    def persist(self, root):
        '''
        Write a mutated tree to the output, the source, or `stdout`.
        '''

        if self.output is not None:
            overwrite = self.overwrite or (self.source is not None and self.source.path == self.output.path)
            self.output.save(root, overwrite=overwrite)
        elif self.source is not None:
            self.source.save(root)
        else:
            self.emit(root)

    def emit(self, node, fmt=None):
        '''
        Write `node` to `stdout` encoded with `fmt`.
        '''

        fmt = fmt or self.fmt
        data = coders.encode(node, fmt)
        if fmt != 'binary':
            data += b'\n'

        self.stdout.write(data)
        self.stdout.flush()

    def create(self, path, value):
        root = self.load(fresh=True)
        paths.create(root, path, value)
        self.persist(root)
        return root

    def read(self, path):
        node = paths.get(self.load(), path)
        self.emit(node)
        return node

    def update(self, path, value):
        root = self.load()
        paths.update(root, path, value)
        self.persist(root)
        return root

    def delete(self, path):
        root = self.load()
        paths.delete(root, path)
        self.persist(root)
        return root

    def dump(self, fmt=None):
        '''
        Write the whole tree to `stdout`.
        '''

        root = self.load()
        self.emit(root, fmt)
        return root

    def list(self, path=None):
        '''
        Write the paths of all leaves below `path` to `stdout`, one per line.

        If `path` is a leaf, its own path is written.
        '''

        node = paths.get(self.load(), path)
        if node.is_leaf():
            keys = [paths.join(paths.split(path) if isinstance(path, str) else path)]
        else:
            keys = sorted(node.flatten(paths.SEPARATOR).keys())

        self.stdout.write(''.join(k + '\n' for k in keys if k).encode('utf-8'))
        self.stdout.flush()
        return keys

def create(path, value, source=None, **kwargs):
    return Session(source, **kwargs).create(path, value)

def read(path, source=None, **kwargs):
    return Session(source, **kwargs).read(path)

def update(path, value, source=None, **kwargs):
    return Session(source, **kwargs).update(path, value)

def delete(path, source=None, **kwargs):
    return Session(source, **kwargs).delete(path)
