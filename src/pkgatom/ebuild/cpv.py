"""gentoo category/package and category/package-version classes"""

__all__ = ("CPN", "CPV", "InvalidCPV", "isvalid_pkg_name")

import re

from snakeoil import klass
from snakeoil.compatibility import cmp

from . import atom
from .errors import InvalidCPV, MalformedVersion
from .version import Version, ver_cmp

# Unanchored so that a match's end marks the first offending character.
_cat_re = re.compile(r"[a-zA-Z0-9_][-a-zA-Z0-9+._]*")
_pkg_re = re.compile(r"[a-zA-Z0-9_][-a-zA-Z0-9+_]*")

# a package name must not end in a chunk matching these
isvalid_version_re = re.compile(
    r"^[0-9]+(?:\.[0-9]+)*[a-z]?(?:_(?:alpha|beta|pre|rc|p)[0-9]*)*$")
isvalid_rev_re = re.compile(r"^r[0-9]+$")


def _check_name(regex, name, source, offset, kind):
    if not name:
        raise InvalidCPV(source, offset, f'empty {kind}')
    m = regex.match(name)
    bad = m.end() if m is not None else 0
    if bad != len(name):
        raise InvalidCPV(
            source, offset + bad, f'invalid {kind} {name!r}: unexpected {name[bad]!r}')


def _version_tail(chunks):
    """Return how many trailing hyphen chunks form a version, 0 if none do."""
    if len(chunks) > 2 and isvalid_rev_re.match(chunks[-1]) and \
            isvalid_version_re.match(chunks[-2]):
        return 2
    if len(chunks) > 1 and isvalid_version_re.match(chunks[-1]):
        return 1
    return 0


def _validate_pkg(pkg, source, offset):
    # a version-like tail is reported before any character error inside it
    chunks = pkg.split('-')
    tail = _version_tail(chunks)
    if tail:
        pos = len('-'.join(chunks[:-tail])) + 1
        raise InvalidCPV(
            source, offset + pos,
            f"invalid package name {pkg!r}: ends with version {'-'.join(chunks[-tail:])!r}")
    _check_name(_pkg_re, pkg, source, offset, 'package name')
    # empty chunks are only allowed as a single trailing hyphen
    idx = pkg.find('--')
    if idx != -1:
        raise InvalidCPV(source, offset + idx + 1, f'invalid package name {pkg!r}')


def isvalid_pkg_name(pkg):
    try:
        _validate_pkg(pkg, pkg, 0)
    except InvalidCPV:
        return False
    return True


def _split_cp(source, start, end):
    """Split ``source[start:end]`` on its category separator.

    :return: category, package(-version) text and the offset of the latter
    """
    cp = source[start:end]
    slash = cp.find('/')
    if slash == -1:
        raise InvalidCPV(source, start, 'missing category/package separator')
    extra = cp.find('/', slash + 1)
    if extra != -1:
        raise InvalidCPV(
            source, start + extra, 'category and package take exactly one separator')
    category = cp[:slash]
    _check_name(_cat_re, category, source, start, 'category')
    return category, cp[slash + 1:], start + slash + 1


class CPN:
    """unversioned ebuild package class

    :ivar category: str category
    :ivar package: str package
    :ivar key: strkey (cat/pkg)
    :ivar cpvstr: canonical string form, same as key here
    """

    __slots__ = ("category", "package", "key", "cpvstr")

    # unversioned; CPV overrides these
    ver = version = revision = fullver = None

    def __init__(self, *args, source=None, offset=0):
        """
        Can be called with one string or with two string args.

        If called with one arg that is the ``category/package`` string; with
        two args they are the category and package respectively.

        :keyword source: full string the cpn was sliced from, errors are
            reported relative to it
        :keyword offset: index of the cpn within ``source``
        """
        for x in args:
            if not isinstance(x, str):
                raise TypeError(f"all args must be strings, got {args!r}")
        text = self._join_args(args)
        if source is None:
            source, offset = text, 0
        self._parse(source, offset, offset + len(text))

    def _join_args(self, args):
        if len(args) == 1:
            return args[0]
        elif len(args) == 2:
            return f"{args[0]}/{args[1]}"
        raise TypeError(f"CPN takes 1 arg (cpnstr) or 2 (cat, pkg): got {args!r}")

    def _parse(self, source, start, end):
        category, package, pkg_start = _split_cp(source, start, end)
        _validate_pkg(package, source, pkg_start)
        sf = object.__setattr__
        sf(self, 'category', category)
        sf(self, 'package', package)
        sf(self, 'key', f"{category}/{package}")
        sf(self, 'cpvstr', self.key)

    def __setattr__(self, attr, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    def __delattr__(self, attr):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    def __hash__(self):
        return hash((self.category, self.package, self.ver))

    def __repr__(self):
        return '<%s cpvstr=%s @%#8x>' % (
            self.__class__.__name__, getattr(self, 'cpvstr', None), id(self))

    def __str__(self):
        return getattr(self, 'cpvstr', 'None')

    def __reduce__(self):
        return (self.__class__, (self.cpvstr,))

    def __eq__(self, other):
        if not isinstance(other, CPN):
            return False
        return self.__cmp__(other) == 0

    def __ne__(self, other):
        return not self.__eq__(other)

    def __cmp__(self, other):
        if not isinstance(other, CPN):
            raise TypeError(
                f"comparison not supported between instances of "
                f"{self.__class__.__name__!r} and {other.__class__.__name__!r}")
        c = cmp(self.category, other.category)
        if c:
            return c
        c = cmp(self.package, other.package)
        if c:
            return c
        if self.ver is None or other.ver is None:
            # unversioned sorts first
            return cmp(self.ver is not None, other.ver is not None)
        return ver_cmp(self.ver, other.ver)

    klass.inject_richcmp_methods_from_cmp(locals())

    @property
    def unversioned_atom(self):
        return atom.atom(self.key)


class CPV(CPN):
    """versioned ebuild package class

    :ivar ver: :obj:`Version` instance
    :ivar version: str version, without revision
    :ivar revision: :obj:`Revision`
    :ivar fullver: str version including any revision
    :ivar versioned_atom: atom matching this exact version
    :ivar unversioned_atom: atom matching all versions of this package
    """

    __slots__ = ("ver",)

    def _join_args(self, args):
        if len(args) == 1:
            return args[0]
        elif len(args) == 3:
            return f"{args[0]}/{args[1]}-{args[2]}"
        raise TypeError(
            f"CPV takes 1 arg (cpvstr) or 3 (cat, pkg, ver): got {args!r}")

    def _parse(self, source, start, end):
        category, pkgver, pkgver_start = _split_cp(source, start, end)
        chunks = pkgver.split('-')
        if len(chunks) == 1:
            raise MalformedVersion(source, end, 'missing package version')
        if len(chunks) > 2 and isvalid_rev_re.match(chunks[-1]):
            # needs at least ('pkg', 'ver', 'rev')
            package = '-'.join(chunks[:-2])
        else:
            package = '-'.join(chunks[:-1])
        _validate_pkg(package, source, pkgver_start)
        ver_start = pkgver_start + len(package) + 1
        ver = Version(source[ver_start:end], source, ver_start)

        sf = object.__setattr__
        sf(self, 'category', category)
        sf(self, 'package', package)
        sf(self, 'key', f"{category}/{package}")
        sf(self, 'ver', ver)
        sf(self, 'cpvstr', f"{self.key}-{ver}")

    @property
    def version(self):
        return self.ver.base

    @property
    def revision(self):
        return self.ver.revision

    @property
    def fullver(self):
        return self.ver.fullver

    @property
    def versioned_atom(self):
        return atom.atom(f"={self.cpvstr}")
