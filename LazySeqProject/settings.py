"""
Default settings used when running the test suite (see runtests.py and LazySeq/conftest.py).
Applications embedding LazySeq into a Django project put the LAZY_SEQUENCE_* keys into their own settings instead.
"""

SECRET_KEY = 'lazyseq-tests-only'

INSTALLED_APPS = []

DATABASES = {}

# Set to True by the test runners. Only affects log levels, see LazySeqProject.conditional_log
TESTING_MODE = False

# Bound for sequences that are created without an explicit one. None means unbounded.
LAZY_SEQUENCE_DEFAULT_BOUND = None

# Whether sequences protect their cache against concurrent readers by default.
LAZY_SEQUENCE_THREAD_SAFE = True

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
        },
    },
    'loggers': {
        'lazyseq': {
            'handlers': ['console'],
            'level': 'WARNING',
        },
    },
}
