from __future__ import annotations
from typing import Literal
from logging import Logger

from LazySeq.conf import get_setting


_Levels = Literal['debug', 'info', 'error', 'critical', 'warning', 'exception', None]


def conditional_log(logger: Logger, *args, normal_level: _Levels = 'critical', test_level: _Levels = 'info', **kwargs):
    """
    Logs at normal_level, unless TESTING_MODE is set, in which case we log at test_level. A level of None suppresses
    the message. This is used for conditions that tests trigger on purpose.
    """
    if get_setting('TESTING_MODE'):
        if test_level:
            getattr(logger, test_level)(*args, **kwargs)
    else:  # pragma: no cover
        if normal_level:
            getattr(logger, normal_level)(*args, **kwargs)
