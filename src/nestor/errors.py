'''
Exceptions raised by the store.

Each error also derives from the closest builtin so callers may catch
`KeyError`, `TypeError`, `ValueError` or `IOError` as usual.
'''

class NestorError(Exception):
    '''
    Base class of all store errors.
    '''

    def __str__(self):
        # KeyError quotes its message
        return Exception.__str__(self)

class NotFound(NestorError, KeyError):
    '''A container has no child with the requested key.'''

class PathError(NestorError, KeyError):
    '''
    A path could not be applied to a tree.

    The offending path is kept as `path`.
    '''

    def __init__(self, message, path=None):
        super(PathError, self).__init__(message)
        self.path = path

class PathNotFound(PathError):
    pass

class PathThroughLeaf(PathError):
    pass

class AlreadyExists(PathError):
    pass

class TypeMismatch(NestorError, TypeError):
    '''A leaf was used as a container or vice versa.'''

class EmptyValue(NestorError, ValueError):
    '''An empty container cannot be stored.'''

class CredentialError(NestorError):
    pass

class CredentialRequired(CredentialError):
    pass

class CredentialInvalid(CredentialError):
    pass

class SourceUnavailable(NestorError, IOError):
    '''A source could not be read or written.'''

class CodecError(NestorError, ValueError):
    '''Bytes could not be decoded into a tree.'''
