# pylint: disable=line-too-long,missing-docstring,invalid-name,protected-access

from unittest import TestCase

from nestor.core import Container, Leaf, Node
from nestor.errors import NotFound, TypeMismatch

class Leaf_Basics(TestCase):

    def setUp(self):
        self.leaf = Leaf('value')

    def test_leaf_classification(self):
        self.assertTrue(self.leaf.is_leaf())
        self.assertFalse(self.leaf.is_container())
        self.assertFalse(self.leaf.is_empty_container())

    def test_leaf_children(self):
        with self.assertRaises(TypeMismatch):
            self.leaf.children()

    def test_leaf_insert_child(self):
        with self.assertRaises(TypeMismatch):
            self.leaf.insert_child('a', Leaf('b'))

    def test_leaf_child_at(self):
        with self.assertRaises(TypeMismatch):
            self.leaf.child_at('a')

    def test_leaf_binary(self):
        self.assertEqual(Leaf(b'\x00\xff').value, b'\x00\xff')

    def test_leaf_text_binary_differ(self):
        self.assertNotEqual(Leaf('a'), Leaf(b'a'))

    def test_leaf_bad_value(self):
        with self.assertRaises(TypeMismatch):
            Leaf(4)
        with self.assertRaises(TypeMismatch):
            Leaf(None)

    def tearDown(self):
        pass

class Container_Children(TestCase):

    def setUp(self):
        self.container = Container({'a': 'x', 'b': {'c': 'y'}})

    def test_container_classification(self):
        self.assertTrue(self.container.is_container())
        self.assertFalse(self.container.is_leaf())
        self.assertFalse(self.container.is_empty_container())
        self.assertTrue(Container().is_empty_container())

    def test_container_child_at(self):
        self.assertEqual(self.container.child_at('a'), Leaf('x'))
        self.assertEqual(self.container.child_at('b'), Container({'c': 'y'}))

    def test_container_child_at_missing(self):
        with self.assertRaises(NotFound):
            self.container.child_at('missing')

    def test_container_child_at_missing_is_keyerror(self):
        with self.assertRaises(KeyError):
            self.container.child_at('missing')

    def test_container_children_readonly(self):
        children = self.container.children()
        self.assertEqual(set(children.keys()), {'a', 'b'})
        with self.assertRaises(TypeError):
            children['z'] = Leaf('z')

    def test_container_insert_child(self):
        self.container.insert_child('z', Leaf('z'))
        self.assertEqual(self.container.child_at('z'), Leaf('z'))

    def test_container_insert_child_replace(self):
        self.container.insert_child('b', Leaf('replaced'))
        self.assertEqual(self.container.to_obj(), {'a': 'x', 'b': 'replaced'})

    def test_container_insert_child_bad_key(self):
        with self.assertRaises(TypeMismatch):
            self.container.insert_child('', Leaf('z'))
        with self.assertRaises(TypeMismatch):
            self.container.insert_child(4, Leaf('z'))

    def test_container_insert_child_not_node(self):
        with self.assertRaises(TypeMismatch):
            self.container.insert_child('z', 'z')

    def test_container_remove_child(self):
        self.assertEqual(self.container.remove_child('a'), Leaf('x'))
        self.assertNotIn('a', self.container)

    def test_container_remove_child_missing(self):
        self.assertIsNone(self.container.remove_child('missing'))
        self.assertEqual(len(self.container), 2)

    def test_container_becomes_empty(self):
        self.container.remove_child('a')
        self.container.remove_child('b')
        self.assertTrue(self.container.is_empty_container())

    def tearDown(self):
        pass

class Node_Conversion(TestCase):

    def test_from_obj(self):
        node = Node.from_obj({'a': {'b': 'c'}, 'd': b'\x01'})
        self.assertEqual(node, Container({'a': Container({'b': Leaf('c')}), 'd': Leaf(b'\x01')}))

    def test_from_obj_leaf(self):
        self.assertEqual(Node.from_obj('text'), Leaf('text'))

    def test_from_obj_bad_type(self):
        with self.assertRaises(TypeMismatch):
            Node.from_obj({'a': [1, 2]})

    def test_to_obj(self):
        obj = {'a': {'b': 'c'}, 'd': b'\x01'}
        self.assertDictEqual(Node.from_obj(obj).to_obj(), obj)

    def test_from_obj_copies_nodes(self):
        inner = Container({'b': 'c'})
        node = Node.from_obj(inner)
        self.assertEqual(node, inner)
        self.assertIsNot(node, inner)

class Container_Cull(TestCase):

    def setUp(self):
        self.container = Container({
            'value': 'v',
            'empty': {},
            'empty_nested': {
                'a': {
                    'b': {}
                }
            },
            'nested': {
                'a': 'x',
                'empty': {},
            },
        })

    def test_container_cull(self):
        self.assertFalse(self.container.cull())
        self.assertDictEqual(self.container.to_obj(), {'value': 'v', 'nested': {'a': 'x'}})

    def test_container_cull_all(self):
        self.assertTrue(Container({'a': {'b': {}}}).cull())

    def test_leaf_cull(self):
        self.assertFalse(Leaf('x').cull())

    def tearDown(self):
        pass

class Container_Copy(TestCase):

    def setUp(self):
        self.container = Container({'a': {'b1': 'x', 'b2': {'c': 'y'}}})

    def test_container_copy(self):
        copy = self.container.copy()
        self.assertEqual(copy, self.container)
        self.assertIsNot(copy.child_at('a'), self.container.child_at('a'))

    def test_container_copy_independent(self):
        copy = self.container.copy()
        copy.child_at('a').remove_child('b1')
        self.assertIn('b1', self.container.child_at('a'))

    def tearDown(self):
        pass

class Container_Flatten(TestCase):

    def setUp(self):
        self.container = Container({
            'a': {
                'b1': 'x',
                'b2': b'y',
                'b3': {'c': 'z'},
            },
            'd/e': 'w',
        })

    def test_container_flatten(self):
        self.assertDictEqual(self.container.flatten(), {'a/b1': 'x', 'a/b2': b'y', 'a/b3/c': 'z', 'd\\/e': 'w'})

    def test_container_flatten_empty(self):
        self.assertDictEqual(Container().flatten(), {})

    def test_container_flatten_backslash(self):
        container = Container({'x\\': {'y': 'v'}})
        self.assertDictEqual(container.flatten(), {'x\\\\/y': 'v'})

    def tearDown(self):
        pass
