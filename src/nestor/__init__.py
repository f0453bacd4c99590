'''

# Nestor

A nested key-value store that lives in a file, in a directory tree, or on a pipe.

## Design

The store is a tree. Every node is either a `Leaf` holding text or binary data,
or a `Container` mapping string keys to further nodes. Nodes are addressed with
forward-slash (`/`) delimited paths much like a UNIX file path. The delimiter
can be escaped with a preceding backslash (`\\`).

The store supports four primary operations.
 - `create`: store a value at a path that is not yet occupied
 - `read`: retrieve a value
 - `update`: replace the value at an existing path
 - `delete`: remove a value
Containers are created on demand when creating deeply nested values and are
removed automatically once their last child is deleted. Consequently, the tree
never holds an empty container and updating a path with an empty container is
the same as deleting it.

### Example

Suppose the store starts empty.
```
{}
```
After creating the value `"4"` at path `a/b/c`, the store creates the
necessary structure to contain the nested keys `a`, `b`, and `c`.
```
{
    'a': {
        'b': {
            'c': '4'
        }
    }
}
```
Deleting `a/b/c` removes `c`, then the now empty `b` and `a`, leaving the
store empty again.

## Sources

The tree is persisted to a `Source`, which is either
 - a single file holding the whole tree encoded as msgpack or JSON and
   optionally encrypted with a password, or
 - a directory whose sub-directories are containers and whose files are leaves.

Without a source, the tree is read from standard input and written to
standard output.

## Usage

```
from nestor.source import Source
from nestor.commands import Session

session = Session(Source('secrets.db', password='hunter2'))
session.create('mail/work', 'correct horse battery staple')
```
The same is available on the command line.
```
nestor -i secrets.db create mail/work 'correct horse battery staple'
nestor -i secrets.db read mail/work
```
'''

__version__ = '0.3.0'

FORMATS = ('binary', 'json', 'pretty')

DEFAULT_FORMAT = 'json'
DEFAULT_FILE_FORMAT = 'binary'
DEFAULT_LEAF_SUFFIX = '.leaf'

ENV_INPUT = 'NESTOR_INPUT'
ENV_FORMAT = 'NESTOR_FORMAT'
ENV_PASSWORD = 'NESTOR_PASSWORD'
