"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~anidex.exceptions.AnidexError` subclass.
Shell wrappers can inspect the exit code to tell a rate-limit rejection
from a network outage without parsing stderr.

Example::

    $ anidex search naruto
    $ echo $?
    7   # EXIT_RATE_LIMITED -- the API answered HTTP 429
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an unusable endpoint."""

EXIT_NOT_FOUND = 4
"""The requested record or asset could not be retrieved."""

EXIT_SERVER_ERROR = 5
"""The remote API answered with an unexpected HTTP status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_RATE_LIMITED = 7
"""The remote API rejected the request with HTTP 429."""

EXIT_DECODING_ERROR = 8
"""The response body did not match the expected shape."""

EXIT_STORE_ERROR = 10
"""The local favorites store could not be opened."""
