'''
Core tree components of Nestor.
'''

from types import MappingProxyType

import logging

from .errors import NotFound, TypeMismatch

logger = logging.getLogger(__name__)  # pylint: disable=invalid-name

LEAF_TYPES = (str, bytes)

def escape_key(key, separator='/'):
    '''
    Escape backslashes and `separator` in `key` with a backslash.
    '''

    return key.replace('\\', '\\\\').replace(separator, '\\' + separator)

class Node(object):
    '''
    A node of the tree: either a `Leaf` or a `Container`.

    Operations that only make sense on a `Container` raise
    `TypeMismatch` when called on a `Leaf`.
    '''

    def is_leaf(self):
        return False

    def is_container(self):
        return False

    def is_empty_container(self):
        return False

    def children(self):
        raise TypeMismatch('a leaf has no children')

    def child_at(self, key):
        raise TypeMismatch('a leaf has no children')

    def insert_child(self, key, node):
        raise TypeMismatch('a leaf cannot hold child "{}"'.format(key))

    def remove_child(self, key):
        raise TypeMismatch('a leaf has no children')

    def cull(self):
        '''
        Remove empty containers below this node.

        Returns `True` if this node is now an empty container itself.
        '''

        return False

    @staticmethod
    def from_obj(obj):
        '''
        Construct a node from its plain Python representation.

        A `dict` becomes a `Container` and `str` or `bytes` becomes a
        `Leaf`. Nodes are copied.
        '''

        if isinstance(obj, Node):
            return obj.copy()

        try:
            # check if there are subkeys or not
            keys = obj.keys()
        except AttributeError:
            return Leaf(obj)
        else:
            container = Container()
            # recurse through the subkeys
            for k in keys:
                container.insert_child(k, Node.from_obj(obj[k]))
            return container

    def __ne__(self, other):
        return not self == other

    __hash__ = None

class Leaf(Node):
    '''
    Terminal node holding text (`str`) or binary (`bytes`) data.
    '''

    def __init__(self, value):
        if not isinstance(value, LEAF_TYPES):
            raise TypeMismatch('unsupported leaf value type: {}'.format(type(value).__name__))

        self.value = value

    def is_leaf(self):
        return True

    def to_obj(self):
        return self.value

    def copy(self):
        # values are immutable
        return Leaf(self.value)

    def flatten(self, separator='/'):  # pylint: disable=unused-argument
        return {'': self.value}

    def __eq__(self, other):
        if not isinstance(other, Leaf):
            return NotImplemented

        # text and binary never compare equal
        return type(self.value) is type(other.value) and self.value == other.value

    def __repr__(self):
        return 'Leaf({!r})'.format(self.value)

class Container(Node):
    '''
    Node mapping string keys to child nodes.

    A `Container` exclusively owns its children. Only the tree root
    is ever left empty by the path operations in `nestor.paths`.
    '''

    def __init__(self, children=None):
        self._children = {}

        if children:
            for (k, v) in children.items():
                self.insert_child(k, v if isinstance(v, Node) else Node.from_obj(v))

    def is_container(self):
        return True

    def is_empty_container(self):
        return not self._children

    def children(self):
        '''
        Read-only view of the key to child mapping.
        '''

        return MappingProxyType(self._children)

    def child_at(self, key):
        '''
        Get the child at `key`.

        Raises `NotFound` if there is no such child.
        '''

        try:
            return self._children[key]
        except KeyError:
            raise NotFound(key)

    def insert_child(self, key, node):
        '''
        Set or replace the child at `key`.
        '''

        if not isinstance(key, str) or not key:
            raise TypeMismatch('invalid key: {!r}'.format(key))
        if not isinstance(node, Node):
            raise TypeMismatch('child "{}" is not a node: {}'.format(key, type(node).__name__))

        self._children[key] = node

    def remove_child(self, key):
        '''
        Remove and return the child at `key`.

        Returns `None` if there is no such child.
        '''

        return self._children.pop(key, None)

    def clear(self):
        self._children.clear()

    def cull(self):
        # cull all children
        for k in list(self._children.keys()):
            if self._children[k].cull():
                logger.debug('cull: "{}"'.format(k))
                del self._children[k]

        # check if this container should be culled
        return len(self._children) == 0

    def to_obj(self):
        '''
        Construct a dictionary representation of this `Container`.
        '''

        return {k: c.to_obj() for (k, c) in self._children.items()}

    def copy(self):
        '''
        Make a structural copy of this `Container`.
        '''

        container = Container()
        container._children = {k: c.copy() for (k, c) in self._children.items()}  # pylint: disable=protected-access
        return container

    def flatten(self, separator='/'):
        '''
        Return a dictionary of all leaf values below this `Container`.

        The key is the complete path of the value with keys escaped by
        `escape_key`.
        '''

        result = {}
        # recursively flatten
        for (k, child) in self._children.items():
            k = escape_key(k, separator)

            if child.is_leaf():
                result[k] = child.value
            else:
                result.update({k + separator + p: v for (p, v) in child.flatten(separator).items()})

        return result

    def __len__(self):
        return len(self._children)

    def __iter__(self):
        return iter(self._children)

    def __contains__(self, key):
        return key in self._children

    def __eq__(self, other):
        if not isinstance(other, Container):
            return NotImplemented

        return self._children == other._children  # pylint: disable=protected-access

    def __repr__(self):
        return 'Container({!r})'.format(self._children)
