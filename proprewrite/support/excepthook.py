import sys
from typing import Any, Optional
from types import TracebackType


class NoTraceException(Exception):
    """An exception that prints an error message and exits without a
    traceback. This can be used in situations that do not require inspection
    of the code. An example is a rewrite that exceeds its step limit, which is
    a normal situation during interactive use since termination of the rule
    catalogs is not guaranteed in general. Such an exception typically comes
    with a short but informative error message for the user.
    """
    pass


def handler(exc: NoTraceException, tb: Optional[TracebackType]):
    print(f'{type(exc).__name__}: {exc}', file=sys.stderr, flush=True)


# Python shell

def excepthook(exc_type: type[BaseException], exc: BaseException, tb: Optional[TracebackType]):
    if isinstance(exc, NoTraceException):
        handler(exc, tb)
    else:
        sys_excepthook(exc_type, exc, tb)


# To be executed at import:

sys_excepthook = sys.excepthook
sys.excepthook = excepthook


# IPython:

def ipy_custom_exec(ipy: Any, exc_type: type[NoTraceException],
                    exc: NoTraceException, tb: TracebackType, tb_offset=None):
    handler(exc, tb)


# To be executed at import:

try:
    import IPython
except ImportError:
    ipy = None
else:
    ipy = IPython.get_ipython()

if ipy is not None:
    ipy.set_custom_exc((NoTraceException,), ipy_custom_exec)
