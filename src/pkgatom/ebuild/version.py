"""PMS version parsing and ordering

A version looks like ``1.2.3b_alpha4_p5-r6``: dotted numeric components, an
optional letter, any number of release suffixes and an optional revision.
Ordering follows the version comparison algorithm of the Package Manager
Specification.
"""

__all__ = ("Version", "Revision", "Suffix", "ver_cmp", "suffix_rank")

import re
from collections import UserString, namedtuple
from itertools import zip_longest

from snakeoil import klass
from snakeoil.compatibility import cmp
from snakeoil.mappings import ImmutableDict

from .errors import MalformedVersion

_numbers_re = re.compile(r'[0-9]+(?:\.[0-9]+)*')
_letter_re = re.compile(r'[a-z]')
# 'pre' must be tried before 'p'
_suffix_re = re.compile(r'_(alpha|beta|pre|rc|p)([0-9]*)')
_revision_re = re.compile(r'-r([0-9]+)')

# None stands for "no suffix", which sorts between rc and p.
suffix_rank = ImmutableDict({
    "alpha": 0, "beta": 1, "pre": 2, "rc": 3, None: 4, "p": 5,
})


class Revision(UserString):
    """Internal revision class storing revisions as strings and comparing as integers."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.data:
            self._revint = int(self.data)
        else:
            self._revint = 0

    def __int__(self):
        return self._revint

    def __hash__(self):
        return hash(self._revint)

    def _coerce(self, other):
        if isinstance(other, Revision):
            return other._revint
        elif isinstance(other, int):
            return other
        elif other is None:
            return 0
        return None

    def __eq__(self, other):
        o = self._coerce(other)
        if o is None:
            return self.data == other
        return self._revint == o

    def __ne__(self, other):
        return not self == other

    def __lt__(self, other):
        o = self._coerce(other)
        if o is None:
            return self.data < other
        return self._revint < o

    def __le__(self, other):
        o = self._coerce(other)
        if o is None:
            return self.data <= other
        return self._revint <= o

    def __gt__(self, other):
        o = self._coerce(other)
        if o is None:
            return self.data > other
        return self._revint > o

    def __ge__(self, other):
        o = self._coerce(other)
        if o is None:
            return self.data >= other
        return self._revint >= o


class Suffix(namedtuple('Suffix', ('tag', 'number'))):
    """Release suffix such as ``_rc2``; ``number`` is the raw digit string or None."""

    __slots__ = ()

    @property
    def value(self):
        return int(self.number) if self.number else 0

    @property
    def key(self):
        return (suffix_rank[self.tag], self.value)

    def __str__(self):
        return f"_{self.tag}{self.number or ''}"


# virtual suffix used to pad the shorter suffix list during comparison
_no_suffix = Suffix(None, None)


def _parse(ver, source, offset):
    """Split a version string into its components.

    :param ver: the version text, no operator or trailing atom clauses
    :param source: string used for error reporting, ``ver`` is a slice of it
    :param offset: index of ``ver`` within ``source``
    """
    m = _numbers_re.match(ver)
    if m is None:
        raise MalformedVersion(source, offset, 'missing numeric version component')
    numbers = tuple(m.group().split('.'))
    pos = m.end()

    letter = None
    m = _letter_re.match(ver, pos)
    if m is not None:
        letter = m.group()
        pos = m.end()

    suffixes = []
    while ver.startswith('_', pos):
        m = _suffix_re.match(ver, pos)
        if m is None:
            raise MalformedVersion(
                source, offset + pos, f'invalid version suffix {ver[pos:]!r}')
        suffixes.append(Suffix(m.group(1), m.group(2) or None))
        pos = m.end()

    revision = ''
    if ver.startswith('-', pos):
        m = _revision_re.match(ver, pos)
        if m is None:
            raise MalformedVersion(
                source, offset + pos, f'invalid revision {ver[pos:]!r}')
        revision = m.group(1)
        pos = m.end()

    if pos != len(ver):
        raise MalformedVersion(
            source, offset + pos, f'unexpected {ver[pos]!r} in version {ver!r}')
    return numbers, letter, tuple(suffixes), Revision(revision)


class Version:
    """Parsed package version.

    :ivar numbers: tuple of the dotted numeric components, as strings
    :ivar letter: optional trailing letter, or None
    :ivar suffixes: tuple of :obj:`Suffix`
    :ivar revision: :obj:`Revision`, empty when no ``-r`` part was given
    """

    __slots__ = ("numbers", "letter", "suffixes", "revision", "_str", "_hash")

    def __init__(self, ver, source=None, offset=0):
        """
        :param ver: version string, e.g. ``1.0_rc1-r2``
        :keyword source: full string ``ver`` was sliced from; errors report
            positions within it
        :keyword offset: index of ``ver`` within ``source``
        """
        if not isinstance(ver, str):
            raise TypeError(f"version must be a string, got {ver!r}")
        if source is None:
            source = ver
        numbers, letter, suffixes, revision = _parse(ver, source, offset)
        sf = object.__setattr__
        sf(self, 'numbers', numbers)
        sf(self, 'letter', letter)
        sf(self, 'suffixes', suffixes)
        sf(self, 'revision', revision)
        sf(self, '_str', self._render())
        sf(self, '_hash', hash(self._normalized()))

    def __setattr__(self, attr, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    def __delattr__(self, attr):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    def _render(self, revision=True):
        s = '.'.join(self.numbers)
        if self.letter:
            s += self.letter
        s += ''.join(map(str, self.suffixes))
        if revision and self.revision.data:
            s += f'-r{self.revision.data}'
        return s

    def _normalized(self):
        # Equal versions normalize identically; the first component is always
        # numeric, later ones with a leading zero compare as stripped strings.
        numbers = [int(self.numbers[0])]
        numbers.extend(
            ('0', x.rstrip('0')) if x[0] == '0' else int(x)
            for x in self.numbers[1:])
        # trailing zero components don't count: 1.0.0 == 1
        while len(numbers) > 1 and numbers[-1] == ('0', ''):
            numbers.pop()
        return (
            tuple(numbers), self.letter,
            tuple(x.key for x in self.suffixes), int(self.revision))

    @property
    def base(self):
        """Version string without the revision."""
        return self._render(revision=False)

    @property
    def fullver(self):
        return self._str

    def without_revision(self):
        """Return a new version with the revision dropped."""
        if not self.revision.data:
            return self
        return self.__class__(self.base)

    def __str__(self):
        return self._str

    def __repr__(self):
        return f'<{self.__class__.__name__} {self._str!r} @{id(self):#8x}>'

    def __hash__(self):
        return self._hash

    def __reduce__(self):
        return (self.__class__, (self._str,))

    def __eq__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return ver_cmp(self, other) == 0

    def __ne__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return ver_cmp(self, other) != 0

    def __cmp__(self, other):
        if not isinstance(other, Version):
            raise TypeError(
                f"other isn't of {Version!r} type, is {other.__class__}")
        return ver_cmp(self, other)

    klass.inject_richcmp_methods_from_cmp(locals())


def _numbers_cmp(parts1, parts2):
    # The leading component is always compared as an integer.
    c = cmp(int(parts1[0]), int(parts2[0]))
    if c:
        return c

    # the shorter side is padded with zero components: 1 == 1.0
    for v1, v2 in zip_longest(parts1[1:], parts2[1:], fillvalue='0'):
        # If the string components are equal, the numerical
        # components will be equal too.
        if v1 == v2:
            continue

        # If one of the components begins with a "0" then they
        # are compared as floats so that 1.1 > 1.02; else ints.
        if v1[0] != "0" and v2[0] != "0":
            c = cmp(int(v1), int(v2))
        else:
            # handle the 0.060 == 0.06 case.
            c = cmp(v1.rstrip("0"), v2.rstrip("0"))
        if c:
            return c
    return 0


def ver_cmp(ver1, ver2):
    """Compare two :obj:`Version` instances, returning -1, 0 or 1."""
    # identical text, identical version
    if ver1._str == ver2._str:
        return 0

    c = _numbers_cmp(ver1.numbers, ver2.numbers)
    if c:
        return c

    # no letter sorts before any letter
    c = cmp(ver1.letter or '', ver2.letter or '')
    if c:
        return c

    for s1, s2 in zip_longest(ver1.suffixes, ver2.suffixes, fillvalue=_no_suffix):
        c = cmp(s1.key, s2.key)
        if c:
            return c

    # Our versions had different strings but ended up being equal.
    # The revision holds the final difference.
    return cmp(int(ver1.revision), int(ver2.revision))
