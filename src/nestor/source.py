'''
Persistence of trees to files and directories.

A file source holds the whole tree encoded with one of the formats of
`nestor.coders`, optionally encrypted. A directory source mirrors the
tree: sub-directories are containers and files are leaves. A leaf file
is named after its key plus the source's leaf suffix (`.leaf` unless
configured otherwise); files without the suffix are loaded under their
full name.
'''

import os
import shutil

import logging

from . import coders
from .core import Container, Leaf
from .crypter import Crypter, is_encrypted
from .errors import CodecError, CredentialRequired, SourceUnavailable, TypeMismatch
from . import DEFAULT_FILE_FORMAT, DEFAULT_LEAF_SUFFIX, FORMATS

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

class Source(object):
    '''
    Descriptor of a file or directory holding a tree.

    If `kind is None`, the source is a directory if `path` names an
    existing directory or ends with a path separator, and a file
    otherwise.

    `fmt` is the format written to a file source; when loading, `None`
    detects the format. The format of the last load is kept in
    `loaded_fmt` and written back when `fmt is None`, so an existing file
    keeps its format. New files default to `binary`.

    `leaf_format` selects how leaf files of a directory source are
    stored: `None` stores the raw value, a format name stores the leaf
    encoded with that format. `password`, if set, encrypts the file or
    each leaf file.
    '''

    FILE = 'file'
    DIRECTORY = 'directory'

    def __init__(self, path, kind=None, password=None, fmt=None, leaf_format=None, leaf_suffix=DEFAULT_LEAF_SUFFIX):
        self.path = os.fspath(path)
        self.kind = kind or self._detect(self.path)
        self.password = password
        self.fmt = fmt
        self.loaded_fmt = None
        self.leaf_format = leaf_format
        self.leaf_suffix = leaf_suffix or ''

        if self.kind not in (Source.FILE, Source.DIRECTORY):
            raise ValueError('unknown source kind: {}'.format(self.kind))
        for f in (self.fmt, self.leaf_format):
            if f is not None and f not in FORMATS:
                raise ValueError('unknown format: {}'.format(f))

    @staticmethod
    def _detect(path):
        if os.path.isdir(path) or path.endswith(('/', os.sep)):
            return Source.DIRECTORY
        else:
            return Source.FILE

    def exists(self):
        return os.path.exists(self.path)

    def is_directory(self):
        return self.kind == Source.DIRECTORY

    def load(self, password=None):
        return load(self, password)

    def save(self, root, password=None, overwrite=True):
        return save(root, self, password, overwrite)

    def __repr__(self):
        return 'Source({!r}, kind={!r})'.format(self.path, self.kind)

def _decrypt(data, password):
    if is_encrypted(data):
        if password is None:
            raise CredentialRequired('data is encrypted and needs a password')

        data = Crypter(password).decrypt(data)

    return data

def decode_blob(data, fmt=None, password=None):
    '''
    Decrypt `data` if needed and decode it into a node.
    '''

    return coders.decode(_decrypt(data, password), fmt)

def encode_blob(node, fmt, password=None):
    '''
    Encode `node` and encrypt it if `password is not None`.
    '''

    data = coders.encode(node, fmt)
    if password is not None:
        data = Crypter(password).encrypt(data)

    return data

def load(source, password=None):
    '''
    Load the tree stored in `source`.

    An empty file is an empty tree. Empty directories load as empty
    containers; it is up to the caller to cull them.
    '''

    if password is None:
        password = source.password

    logger.info('loading {} "{}"'.format(source.kind, source.path))

    if source.is_directory():
        if not os.path.isdir(source.path):
            raise SourceUnavailable('not a directory: "{}"'.format(source.path))
        return _read_directory(source, source.path, password)

    data = _read_file(source.path)
    if not data:
        return Container()

    data = _decrypt(data, password)
    source.loaded_fmt = source.fmt or coders.detect(data)

    root = coders.decode(data, source.loaded_fmt)
    if not root.is_container():
        raise CodecError('"{}" does not hold a tree'.format(source.path))

    return root

def save(root, source, password=None, overwrite=True):
    '''
    Save the tree `root` to `source`.

    A directory source is made to mirror `root` exactly: entries that
    are not in the tree are removed. If not `overwrite`, an existing
    destination is refused.
    '''

    if not root.is_container():
        raise TypeMismatch('only a container can be saved')
    if password is None:
        password = source.password

    if not overwrite and source.exists():
        raise SourceUnavailable('destination exists: "{}"'.format(source.path))

    logger.info('saving {} "{}"'.format(source.kind, source.path))

    if source.is_directory():
        _write_directory(root, source, source.path, password)
    else:
        _write_file(source.path, encode_blob(root, source.fmt or source.loaded_fmt or DEFAULT_FILE_FORMAT, password))

def _read_file(path):
    try:
        with open(path, 'rb') as f:
            return f.read()
    except OSError as exc:
        raise SourceUnavailable('cannot read "{}": {}'.format(path, exc.strerror or exc))

def _write_file(path, data):
    try:
        if os.path.isdir(path):
            # a container was replaced by a leaf
            shutil.rmtree(path)

        with open(path, 'wb') as f:
            f.write(data)
    except OSError as exc:
        raise SourceUnavailable('cannot write "{}": {}'.format(path, exc.strerror or exc))

def _remove(path):
    logger.debug('removing stale "{}"'.format(path))

    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.remove(path)

def _leaf_key(source, name):
    if source.leaf_suffix and name.endswith(source.leaf_suffix) and len(name) > len(source.leaf_suffix):
        return name[:-len(source.leaf_suffix)]
    return name

def _check_name(key):
    if key in ('.', '..') or '/' in key or os.sep in key or '\0' in key:
        raise SourceUnavailable('key cannot be stored as a file name: "{}"'.format(key))

def _read_leaf(source, path, password):
    data = _read_file(path)

    if is_encrypted(data):
        if password is None:
            raise CredentialRequired('"{}" is encrypted and needs a password'.format(path))

        data = Crypter(password).decrypt(data)

    if source.leaf_format is not None:
        leaf = coders.decode(data, source.leaf_format)
        if not leaf.is_leaf():
            raise CodecError('"{}" does not hold a leaf'.format(path))
        return leaf

    try:
        return Leaf(data.decode('utf-8'))
    except UnicodeDecodeError:
        return Leaf(data)

def _read_directory(source, path, password):
    container = Container()

    try:
        names = sorted(os.listdir(path))
    except OSError as exc:
        raise SourceUnavailable('cannot list "{}": {}'.format(path, exc.strerror or exc))

    for name in names:
        entry = os.path.join(path, name)

        if os.path.isdir(entry):
            key = name
            node = _read_directory(source, entry, password)
        else:
            key = _leaf_key(source, name)
            node = _read_leaf(source, entry, password)

        if key in container:
            raise CodecError('duplicate key "{}" in "{}"'.format(key, path))

        container.insert_child(key, node)

    return container

def _write_leaf(source, leaf, path, password):
    if source.leaf_format is not None:
        data = coders.encode(leaf, source.leaf_format)
    elif isinstance(leaf.value, str):
        data = leaf.value.encode('utf-8')
    else:
        data = leaf.value

    if password is not None:
        data = Crypter(password).encrypt(data)

    _write_file(path, data)

def _write_directory(container, source, path, password):
    try:
        if os.path.exists(path) and not os.path.isdir(path):
            # a leaf was replaced by a container
            os.remove(path)
        os.makedirs(path, exist_ok=True)
    except OSError as exc:
        raise SourceUnavailable('cannot create "{}": {}'.format(path, exc.strerror or exc))

    names = set()
    for (key, child) in container.children().items():
        _check_name(key)

        name = key if child.is_container() else key + source.leaf_suffix
        if name in names:
            raise SourceUnavailable('keys collide on file name "{}" in "{}"'.format(name, path))
        names.add(name)

        if child.is_container():
            _write_directory(child, source, os.path.join(path, name), password)
        else:
            _write_leaf(source, child, os.path.join(path, name), password)

    try:
        # mirror exactly by removing entries absent from the tree
        for name in os.listdir(path):
            if name not in names:
                _remove(os.path.join(path, name))
    except OSError as exc:
        raise SourceUnavailable('cannot clean "{}": {}'.format(path, exc.strerror or exc))
