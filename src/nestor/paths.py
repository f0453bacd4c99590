r'''
Path-addressed operations on a tree.

Paths are sequences of keys. A string path is split on forward slashes
(`/`). A backslash (`\`) makes the next character literal, so `a\/b`
addresses the single key `a/b` and `a\\` the key `a\`. Thus
`some/data/here` addresses the key `here` in the container `data` in
the container `some`.

Every mutation leaves the tree without empty containers: containers
are created only as the parents of a value being stored, and any
container emptied by a removal is removed from its own parent in turn,
up to the root.
'''

import re

import logging

from .core import Container, Node, escape_key
from .errors import (AlreadyExists, EmptyValue, NestorError, NotFound,
                     PathNotFound, PathThroughLeaf, TypeMismatch)

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

SEPARATOR = '/'
# escaped character, separator, or a run of plain text (a trailing backslash is literal)
_token = re.compile(r'\\(.)|(/)|([^\\/]+|\\$)', re.DOTALL)

CREATE = 'create'
UPDATE = 'update'

def split(key):
    '''
    Split a string path into its keys, dropping empty keys.
    '''

    keys = ['']
    for (escaped, separator, text) in _token.findall(key):
        if separator:
            keys.append('')
        else:
            keys[-1] += escaped or text

    return [k for k in keys if len(k)]

def join(path):
    '''
    Inverse of `split`.
    '''

    return SEPARATOR.join(escape_key(k, SEPARATOR) for k in path)

def _normalize(path):
    # split the key into parts if it is a string path
    if path is None:
        return []
    elif isinstance(path, str):
        return split(path)
    else:
        return list(path)

def _descend(root, path):
    '''
    Walk `path` from `root` through containers only.

    Returns the stack of containers visited, starting with `root`.
    '''

    stack = [root]
    for (i, key) in enumerate(path):
        try:
            node = stack[-1].child_at(key)
        except NotFound:
            raise PathNotFound('not found: "{}"'.format(join(path[:i + 1])), path[:i + 1])

        if node.is_leaf():
            raise PathThroughLeaf('value at "{}" has no children'.format(join(path[:i + 1])), path[:i + 1])

        stack.append(node)

    return stack

def _prepare(value):
    # take ownership of the value and drop any empty containers inside it
    node = Node.from_obj(value)
    node.cull()
    return node

def get(root, path=None):
    '''
    Get the node at `path`.

    The empty path refers to `root` itself. Raises `PathNotFound` for a
    missing key and `PathThroughLeaf` if the path continues past a leaf.
    '''

    path = _normalize(path)
    logger.debug('get: "{}"'.format(join(path)))

    if not path:
        return root

    parent = _descend(root, path[:-1])[-1]
    try:
        return parent.child_at(path[-1])
    except NotFound:
        raise PathNotFound('not found: "{}"'.format(join(path)), path)

def exists(root, path=None):
    '''
    Test if `path` refers to a node.
    '''

    try:
        get(root, path)
    except NestorError:
        return False
    else:
        return True

def put(root, path, value, mode=CREATE):
    '''
    Store `value` at `path`.

    With `mode=CREATE`, nothing may exist at `path` yet and any missing
    parent containers are created. With `mode=UPDATE`, something must
    already exist at `path` and is replaced. Updating with an empty
    container deletes `path`.

    `value` may be a `Node` or its plain Python representation. It is
    copied before being attached to the tree.
    '''

    if mode == CREATE:
        _create(root, _normalize(path), _prepare(value))
    elif mode == UPDATE:
        _update(root, _normalize(path), _prepare(value))
    else:
        raise ValueError('unknown mode: {}'.format(mode))

def create(root, path, value):
    '''
    Convenience function for creation.  See `put`.
    '''

    put(root, path, value, mode=CREATE)

def update(root, path, value):
    '''
    Convenience function for update.  See `put`.
    '''

    put(root, path, value, mode=UPDATE)

def _create(root, path, node):
    logger.debug('create: "{}"'.format(join(path)))

    if node.is_empty_container():
        raise EmptyValue('cannot create an empty container at "{}"'.format(join(path)))

    if not path:
        if not root.is_empty_container():
            raise AlreadyExists('root is not empty', path)
        if node.is_leaf():
            raise TypeMismatch('root must be a container')

        for (k, child) in node.children().items():
            root.insert_child(k, child)
        return

    parent = root
    for (i, key) in enumerate(path):
        try:
            child = parent.child_at(key)
        except NotFound:
            # build the missing containers bottom-up and attach them at once
            for k in reversed(path[i + 1:]):
                node = Container({k: node})

            parent.insert_child(key, node)
            return

        if i == len(path) - 1:
            raise AlreadyExists('already exists: "{}"'.format(join(path)), path)
        if child.is_leaf():
            raise PathThroughLeaf('value at "{}" has no children'.format(join(path[:i + 1])), path[:i + 1])

        parent = child

def _update(root, path, node):
    logger.debug('update: "{}"'.format(join(path)))

    # the path must resolve
    if not path and root.is_empty_container():
        raise PathNotFound('root is empty', path)
    get(root, path)

    if node.is_empty_container():
        _delete(root, path)
    elif not path:
        if node.is_leaf():
            raise TypeMismatch('root must be a container')

        root.clear()
        for (k, child) in node.children().items():
            root.insert_child(k, child)
    else:
        get(root, path[:-1]).insert_child(path[-1], node)

def delete(root, path=None):
    '''
    Delete the node at `path` and any containers left empty by its removal.

    Deleting the empty path clears `root`. Raises `PathNotFound` if
    there is nothing to delete.
    '''

    _delete(root, _normalize(path))

def _delete(root, path):
    logger.debug('delete: "{}"'.format(join(path)))

    if not path:
        if root.is_empty_container():
            raise PathNotFound('root is empty', path)

        root.clear()
        return

    stack = _descend(root, path[:-1])
    if stack[-1].remove_child(path[-1]) is None:
        raise PathNotFound('not found: "{}"'.format(join(path)), path)

    # prune upwards until a container still has children
    for depth in range(len(stack) - 1, 0, -1):
        if not stack[depth].is_empty_container():
            break

        logger.debug('prune: "{}"'.format(join(path[:depth])))
        stack[depth - 1].remove_child(path[depth - 1])
