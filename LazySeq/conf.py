"""
Access to the settings that influence lazy sequences.
We read them from django.conf.settings. If no settings module is configured (e.g. LazySeq is used outside a Django
project), the defaults below are used.
"""
from __future__ import annotations
from typing import Any, Dict, Final

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

DEFAULTS: Final[Dict[str, Any]] = {
    'TESTING_MODE': False,
    'LAZY_SEQUENCE_DEFAULT_BOUND': None,
    'LAZY_SEQUENCE_THREAD_SAFE': True,
}


def get_setting(name: str, /) -> Any:
    """
    Returns the setting name, falling back to its default. Raises KeyError for settings we do not know about.
    """
    default = DEFAULTS[name]
    try:
        return getattr(settings, name, default)
    except ImproperlyConfigured:
        return default
