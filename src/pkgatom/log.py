"""Logging for pkgatom.

Everything in the package reports through :data:`logger`, named ``pkgatom``.
Hosts tune it like any other logger; raising its level to ``ERROR`` silences
the warnings about partially supported EAPIs.
"""

__all__ = ("logger",)

import logging

# warnings reach stderr even when the host never set up logging; this is a
# noop once the root logger has handlers
logging.basicConfig()

logger = logging.getLogger(__package__)
