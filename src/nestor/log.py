'''
Utility classes and functions for logging.
'''

import sys

import logging

from rainbow_logging_handler import RainbowLoggingHandler

FORMAT = '%(asctime)s\t[%(name)s] %(pathname)s:%(lineno)d\t%(levelname)s:\t%(message)s'

class LevelFilter(logging.Filter):
    '''
    Python logging filter to replicate `logging.Logger.setLevel()` functionality
    at the `logging.Handler` level.

    This is relevant because setting levels for loggers prevents
    filtered messages from reaching any handlers. Thus, all handlers
    are bound by the same level filters. Doing the filtering at the
    handler level allows each handler to have a separate level filtering
    scheme.
    '''

    def __init__(self, *args, **kwargs):
        super(LevelFilter, self).__init__(*args, **kwargs)
        self._rules = []

    def filter(self, record):
        '''
        Implement Python `logging.Filter` interface.
        '''
        # the most specific namespace decides
        for (namespace, level) in self._rules:
            if record.name == namespace or record.name.startswith(namespace + '.') or not namespace:
                return record.levelno >= level

        return False

    def add(self, namespace, level):
        '''
        Add a new module namespace level filter.
        '''
        self.remove(namespace)
        self._rules.append((namespace, level))
        # keep the rules in reverse sorted order for easy filtering
        self._rules.sort(reverse=True)

    def remove(self, namespace):
        '''
        Remove a module namespace level filter.
        '''
        self._rules = [x for x in self._rules if x[0] != namespace]

def configure(level=logging.WARNING, stream=None):
    '''
    Send log records to `stream` (default `sys.stderr`) in color.

    Records from `nestor` pass at `level` and above, records from any
    other library only at WARNING and above. Returns the handler.
    '''

    root = logging.getLogger()

    # replace a handler from an earlier call
    for old in list(root.handlers):
        if getattr(old, 'nestor_console', False):
            root.removeHandler(old)

    handler = RainbowLoggingHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(FORMAT))
    handler.nestor_console = True

    rules = LevelFilter()
    rules.add('', logging.WARNING)
    rules.add('nestor', level)
    handler.addFilter(rules)

    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    return handler
