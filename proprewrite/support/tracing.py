# Inspired by code suggested by Vincent Fenet,
# https://stackoverflow.com/q/8315389/

import sys
from functools import wraps
import pprint


class trace(object):
    """Implements a decorator @trace(...) on functions that should be traced.
    Parenthesis must be used also when there are no arguments. Typical
    candidates are the recursive matching methods:

    >>> import io
    >>> stream = io.StringIO()
    >>> @trace(stream=stream)
    ... def depth(n):
    ...     return 0 if n == 0 else 1 + depth(n - 1)
    >>> depth(1)
    1
    >>> print(stream.getvalue(), end='')
    --> depth(1)
      --> depth(0)
      <-- depth == 0
    <-- depth == 1
    """

    cur_indent = 0
    """The indentation level is shared between different traced functions, in
    case they call each other.
    """

    def __init__(self, stream=None, indent_step=2, show_ret=True,
                 pretty=False):
        self.indent_step = indent_step
        self.pretty = pretty
        self.show_ret = show_ret
        self.stream = stream

    def __call__(self, fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            stream = self.stream or sys.stdout
            indent = ' ' * trace.cur_indent
            L = []
            for a in args:
                L.append(self._format(a))
            for a, b in kwargs.items():
                L.append('%s=%s' % (a, self._format(b)))
            arg_str = ', '.join(L)
            stream.write(f'{indent}--> {fn.__qualname__}({arg_str})\n')
            trace.cur_indent += self.indent_step
            try:
                ret = fn(*args, **kwargs)
            finally:
                trace.cur_indent -= self.indent_step
            if self.show_ret:
                stream.write(f'{indent}<-- {fn.__qualname__} == {self._format(ret)}\n')
            return ret
        return wrapper

    def _format(self, obj) -> str:
        return pprint.pformat(obj) if self.pretty else repr(obj)
