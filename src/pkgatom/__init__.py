"""Gentoo package atom parsing and PMS version ordering.

Convenience entry points wrapping :mod:`pkgatom.ebuild`; the classes there
remain the primary API.
"""

__all__ = (
    "parse_cpn", "parse_cpv", "parse_dep", "parse_version",
    "compare_versions", "serialize",
)

__title__ = 'pkgatom'
__version__ = '0.1.0'

from .ebuild.atom import atom
from .ebuild.cpv import CPN, CPV
from .ebuild.version import Version, ver_cmp


def parse_cpn(text):
    """Parse an unversioned ``category/package`` string."""
    return CPN(text)


def parse_cpv(text):
    """Parse a ``category/package-version`` string."""
    return CPV(text)


def parse_dep(text, eapi=None):
    """Parse a full package atom, optionally restricted to an EAPI's syntax."""
    return atom(text, eapi=eapi)


def parse_version(text, offset=0):
    """Parse a bare version string such as ``1.2.3_rc1-r2``.

    :param offset: added to the offset of any reported error
    """
    return Version(text, offset=offset)


def compare_versions(a, b):
    """Compare two versions (objects or strings); returns -1, 0 or 1."""
    if isinstance(a, str):
        a = Version(a)
    if isinstance(b, str):
        b = Version(b)
    return ver_cmp(a, b)


def serialize(value):
    """Render any parsed value back to its canonical string form."""
    return str(value)
