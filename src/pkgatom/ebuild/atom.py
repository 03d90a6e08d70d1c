"""
gentoo ebuild atom parsing

An atom is laid out as::

    [!|!!][op]category/package[-version][*][:slot][[use,...]...][::repo]

Parsing is a single left to right pass; the first failing segment raises the
matching :mod:`pkgatom.ebuild.errors` exception.
"""

__all__ = ("atom", "Blocker", "SlotDep", "UseDep")

import enum
import re

from snakeoil import klass
from snakeoil.compatibility import cmp

from . import cpv, errors
from .eapi import EAPI, eapi_extended, get_eapi
from .version import ver_cmp

# Each clause is the longest run of characters it may contain; what the run
# stops on decides the next clause.
_cpv_run = re.compile(r'[A-Za-z0-9+_.*/-]*')
_slot_run = re.compile(r'[A-Za-z0-9+_./=*-]*')
_repo_run = re.compile(r'[A-Za-z0-9_-]*')

_slot_name_re = re.compile(r'[A-Za-z0-9_][A-Za-z0-9+_.-]*')
_use_dep_re = re.compile(
    r'(?P<prefix>[!-])?'
    r'(?P<flag>[A-Za-z0-9][A-Za-z0-9+_@-]*)'
    r'(?:\((?P<default>[+-])\))?'
    r'(?P<suffix>[?=])?')


def _resolve_eapi(eapi):
    if eapi is None:
        return eapi_extended
    if isinstance(eapi, EAPI):
        return eapi
    magic = str(eapi)
    resolved = get_eapi(magic, suppress_unsupported=False)
    if resolved is None:
        raise ValueError(f"unsupported EAPI {magic!r}")
    return resolved


class Blocker(enum.Enum):
    """Blocker strength of an atom."""

    none = ''
    weak = '!'
    strong = '!!'

    def __str__(self):
        return self.value


class SlotDep(metaclass=klass.generic_equality):
    """Slot dependency clause, ``:slot[/subslot][=]``, ``:=`` or ``:*``.

    :ivar slot: slot name or None
    :ivar subslot: subslot name or None; never set without a slot
    :ivar operator: ``'='``, ``'*'`` or None
    """

    __slots__ = ("slot", "subslot", "operator")
    __attr_comparison__ = __slots__

    def __init__(self, slot=None, subslot=None, operator=None):
        if subslot is not None and slot is None:
            raise ValueError("subslot requires a slot")
        if operator not in (None, '=', '*'):
            raise ValueError(f"invalid slot operator: {operator!r}")
        if operator == '*' and slot is not None:
            raise ValueError("the '*' slot operator doesn't take a slot")
        if slot is None and operator is None:
            raise ValueError("empty slot dep")
        sf = object.__setattr__
        sf(self, "slot", slot)
        sf(self, "subslot", subslot)
        sf(self, "operator", operator)

    def __setattr__(self, attr, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    @classmethod
    def parse(cls, source, start, end, eapi=eapi_extended):
        """Parse ``source[start:end]``, the text following the ``:``."""
        text = source[start:end]
        if not text:
            raise errors.MalformedSlot(source, start, "empty slot targets aren't allowed")
        if not eapi.options.slot_deps:
            raise errors.MalformedSlot(
                source, start - 1, f"slot deps aren't allowed in EAPI {eapi}")

        if text in ('=', '*'):
            if not eapi.options.slot_operators:
                raise errors.MalformedSlot(
                    source, start, f"slot operators aren't allowed in EAPI {eapi}")
            return cls(operator=text)

        operator = None
        if text.endswith('='):
            if not eapi.options.slot_operators:
                raise errors.MalformedSlot(
                    source, end - 1, f"slot operators aren't allowed in EAPI {eapi}")
            operator = '='
            text = text[:-1]

        slots = text.split('/')
        if len(slots) > 2:
            raise errors.MalformedSlot(
                source, start + len(slots[0]) + len(slots[1]) + 1,
                'only one subslot is allowed')
        if len(slots) == 2 and not eapi.options.sub_slotting:
            raise errors.MalformedSlot(
                source, start + len(slots[0]), f"subslots aren't allowed in EAPI {eapi}")

        pos = start
        for chunk in slots:
            if not chunk:
                raise errors.MalformedSlot(
                    source, pos, "empty slot targets aren't allowed")
            m = _slot_name_re.match(chunk)
            bad = m.end() if m is not None else 0
            if bad != len(chunk):
                if chunk[bad] in '*=':
                    err = "slot operators '*' and '=' must stand alone or end the slot dep"
                elif bad == 0:
                    err = f"slot names must not start with {chunk[0]!r}"
                else:
                    err = f"invalid character in slot target: {chunk[bad]!r}"
                raise errors.MalformedSlot(source, pos + bad, err)
            pos += len(chunk) + 1

        subslot = slots[1] if len(slots) == 2 else None
        return cls(slots[0], subslot, operator)

    def __hash__(self):
        return hash((self.slot, self.subslot, self.operator))

    def __str__(self):
        s = ':'
        if self.slot is not None:
            s += self.slot
            if self.subslot is not None:
                s += f'/{self.subslot}'
        if self.operator is not None:
            s += self.operator
        return s

    def __repr__(self):
        return f'<{self.__class__.__name__} {str(self)!r} @{id(self):#8x}>'


class UseDep(metaclass=klass.generic_equality):
    """Single USE dependency from an atom's ``[...]`` list.

    Valid forms are ``flag``, ``-flag``, ``flag?``, ``!flag?``, ``flag=`` and
    ``!flag=``. The conditional forms may carry a ``(+)``/``(-)`` default
    after the flag, e.g. ``!flag(-)?``.

    :ivar flag: USE flag name
    :ivar prefix: ``'-'``, ``'!'`` or ``''``
    :ivar default: ``'+'``, ``'-'`` or None
    :ivar suffix: ``'?'``, ``'='`` or ``''``
    """

    __slots__ = ("flag", "prefix", "default", "suffix")
    __attr_comparison__ = __slots__

    def __init__(self, flag, prefix='', default=None, suffix=''):
        if prefix not in ('', '-', '!'):
            raise ValueError(f"invalid use dep prefix: {prefix!r}")
        if suffix not in ('', '?', '='):
            raise ValueError(f"invalid use dep suffix: {suffix!r}")
        if default not in (None, '+', '-'):
            raise ValueError(f"invalid use dep default: {default!r}")
        if prefix == '!' and not suffix:
            raise ValueError("'!' requires a '?' or '=' suffix")
        if prefix == '-' and suffix:
            raise ValueError("'-' can't be combined with a '?' or '=' suffix")
        if default is not None and not suffix:
            raise ValueError("a default requires a '?' or '=' suffix")
        sf = object.__setattr__
        sf(self, "flag", flag)
        sf(self, "prefix", prefix)
        sf(self, "default", default)
        sf(self, "suffix", suffix)

    def __setattr__(self, attr, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    @classmethod
    def parse(cls, source, start, end, eapi=eapi_extended):
        """Parse the single use dep at ``source[start:end]``."""
        text = source[start:end]
        if not text:
            raise errors.MalformedUseDep(source, start, 'empty use dep detected')
        m = _use_dep_re.match(text)
        if m is None:
            raise errors.MalformedUseDep(
                source, start, f'invalid USE flag: {text!r}')
        if m.end() != len(text):
            raise errors.MalformedUseDep(
                source, start + m.end(), f'malformed use flag: {text!r}')
        prefix, flag, default, suffix = m.group('prefix', 'flag', 'default', 'suffix')
        prefix = prefix or ''
        suffix = suffix or ''
        if prefix == '!' and not suffix:
            raise errors.MalformedUseDep(
                source, start + len(text), f"'!' requires a trailing '?' or '=': {text!r}")
        if prefix == '-' and suffix:
            raise errors.MalformedUseDep(
                source, start, f"'-' can't be used with conditional use deps: {text!r}")
        if default is not None and not eapi.options.use_dep_defaults:
            raise errors.MalformedUseDep(
                source, start + len(prefix) + len(flag),
                f"use dep defaults aren't allowed in EAPI {eapi}")
        if default is not None and not suffix:
            raise errors.MalformedUseDep(
                source, start + len(prefix) + len(flag),
                f"defaults are only allowed on conditional use deps: {text!r}")
        return cls(flag, prefix, default, suffix)

    @property
    def enabled(self):
        """True for a plain ``flag`` dep."""
        return not self.suffix and not self.prefix

    @property
    def disabled(self):
        return self.prefix == '-'

    @property
    def negated(self):
        return self.prefix == '!'

    @property
    def conditional(self):
        return self.suffix == '?'

    @property
    def transitive(self):
        """True when the dep depends on the parent package's USE state."""
        return bool(self.suffix)

    def __hash__(self):
        return hash((self.flag, self.prefix, self.default, self.suffix))

    def __str__(self):
        default = f'({self.default})' if self.default else ''
        return f'{self.prefix}{self.flag}{default}{self.suffix}'

    def __repr__(self):
        return f'<{self.__class__.__name__} {str(self)!r} @{id(self):#8x}>'


class atom(metaclass=klass.generic_equality):
    """Currently implements gentoo ebuild atom parsing."""

    __slots__ = (
        "blocks", "blocks_strongly", "op", "cpvstr", "slot_dep", "use",
        "repo_id", "_use_groups", "_cpv", "_hash",
    )

    __attr_comparison__ = (
        "cpvstr", "op", "blocks", "blocks_strongly",
        "use", "_use_groups", "slot_dep", "repo_id")

    klass.inject_richcmp_methods_from_cmp(locals())
    # hack; combine these 2 metaclasses at some point...
    locals().pop("__eq__", None)
    locals().pop("__ne__", None)

    def __init__(self, atom, eapi=None):
        """
        :param atom: string, see gentoo ebuild atom syntax
        :keyword eapi: EAPI object or identifier controlling which syntax is
            allowed; by default every extension is accepted
        """
        if not isinstance(atom, str):
            raise TypeError(f"atom must be a string, got {atom!r}")
        eapi = _resolve_eapi(eapi)
        sf = object.__setattr__
        orig_atom = atom
        pos = 0

        # blockers; !! has to be tried first
        if atom.startswith('!!'):
            if not eapi.options.strong_blockers:
                raise errors.MalformedOperator(
                    orig_atom, 0, f"strong blockers aren't allowed in EAPI {eapi}")
            blocks, blocks_strongly = True, True
            pos = 2
        elif atom.startswith('!'):
            blocks, blocks_strongly = True, False
            pos = 1
        else:
            blocks = blocks_strongly = False
        sf(self, "blocks", blocks)
        sf(self, "blocks_strongly", blocks_strongly)

        op_start = pos
        if atom[pos:pos + 2] in ('<=', '>='):
            op = atom[pos:pos + 2]
        elif atom[pos:pos + 1] in ('<', '>', '=', '~'):
            op = atom[pos]
        else:
            op = ''
        pos += len(op)

        cpv_start = pos
        cpv_end = _cpv_run.match(atom, pos).end()
        cpv_text = atom[cpv_start:cpv_end]
        star = cpv_text.find('*')
        if star != -1:
            if star != len(cpv_text) - 1:
                raise errors.MalformedOperator(
                    orig_atom, cpv_start + star, "'*' may only directly follow the version")
            elif op != '=':
                raise errors.MalformedOperator(
                    orig_atom, op_start,
                    "the '*' version glob is only valid with the '=' operator")
            op = '=*'
            cpv_text = cpv_text[:-1]
        sf(self, "op", op)

        if op:
            try:
                parsed = cpv.CPV(cpv_text, source=orig_atom, offset=cpv_start)
            except errors.MalformedVersion as e:
                if op == '=*' and e.offset >= cpv_start + len(cpv_text):
                    raise errors.MalformedOperator(
                        orig_atom, op_start, "the '*' version glob requires a version") from e
                raise
            if op == '~' and parsed.revision.data:
                raise errors.MalformedOperator(
                    orig_atom, op_start,
                    "~ revision operator cannot be combined with a revision")
        else:
            parsed = cpv.CPN(cpv_text, source=orig_atom, offset=cpv_start)
        sf(self, "_cpv", parsed)
        sf(self, "cpvstr", parsed.cpvstr)
        pos = cpv_end

        slot_dep = None
        if atom.startswith(':', pos) and not atom.startswith('::', pos):
            slot_end = _slot_run.match(atom, pos + 1).end()
            slot_dep = SlotDep.parse(orig_atom, pos + 1, slot_end, eapi)
            pos = slot_end
        sf(self, "slot_dep", slot_dep)

        # one or more [...] groups; the grouping is kept for rendering
        use_groups = []
        while atom.startswith('[', pos):
            if not eapi.options.use_deps:
                raise errors.MalformedUseDep(
                    orig_atom, pos, f"use deps aren't allowed in EAPI {eapi}")
            use_end = atom.find(']', pos)
            if use_end == -1:
                raise errors.MalformedUseDep(
                    orig_atom, len(atom), "use restriction isn't completed")
            group = []
            start = pos + 1
            for chunk in atom[pos + 1:use_end].split(','):
                group.append(UseDep.parse(orig_atom, start, start + len(chunk), eapi))
                start += len(chunk) + 1
            use_groups.append(tuple(group))
            pos = use_end + 1
        sf(self, "_use_groups", tuple(use_groups))
        sf(self, "use", tuple(u for g in use_groups for u in g) or None)

        repo_id = None
        if atom.startswith('::', pos):
            if not eapi.options.repo_ids:
                raise errors.MalformedRepo(
                    orig_atom, pos, f"repo_id atoms aren't supported for EAPI {eapi}")
            repo_start = pos + 2
            repo_end = _repo_run.match(atom, repo_start).end()
            repo_id = atom[repo_start:repo_end]
            if not repo_id:
                raise errors.MalformedRepo(
                    orig_atom, repo_start, "repo_id must not be empty")
            elif repo_id[0] == '-':
                raise errors.MalformedRepo(
                    orig_atom, repo_start,
                    f"invalid first char of repo_id '{repo_id}' (must not begin with a hyphen)")
            chunks = repo_id.split('-')
            tail = cpv._version_tail(chunks)
            if tail:
                raise errors.MalformedRepo(
                    orig_atom, repo_start + len('-'.join(chunks[:-tail])) + 1,
                    f"repo_id must not end with a version: {repo_id!r}")
            pos = repo_end
        sf(self, "repo_id", repo_id)

        if pos != len(atom):
            raise errors.TrailingInput(orig_atom, pos)

        sf(self, "_hash", hash(str(self)))

    def __setattr__(self, attr, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    __getattr__ = klass.GetAttrProxy("_cpv")
    __dir__ = klass.DirProxy("_cpv")

    @property
    def blocker(self):
        if self.blocks_strongly:
            return Blocker.strong
        elif self.blocks:
            return Blocker.weak
        return Blocker.none

    @property
    def blocks_temp_ignorable(self):
        return self.blocks and not self.blocks_strongly

    weak_blocker = klass.alias_attr("blocks_temp_ignorable")

    @property
    def slot(self):
        return None if self.slot_dep is None else self.slot_dep.slot

    @property
    def subslot(self):
        return None if self.slot_dep is None else self.slot_dep.subslot

    @property
    def slot_operator(self):
        return None if self.slot_dep is None else self.slot_dep.operator

    @property
    def is_simple(self):
        """True for a bare ``category/package`` atom."""
        return not (self.op or self.blocks or self.slot_dep or self.use or self.repo_id)

    def _render(self, blocker=True, use=True):
        if self.op == '=*':
            s = f"={self.cpvstr}*"
        else:
            s = self.op + self.cpvstr
        if blocker:
            s = str(self.blocker) + s
        if self.slot_dep is not None:
            s += str(self.slot_dep)
        if use:
            s += self._render_use()
        if self.repo_id:
            s += f"::{self.repo_id}"
        return s

    def _render_use(self):
        return ''.join(f"[{','.join(map(str, g))}]" for g in self._use_groups)

    def __str__(self):
        return self._render()

    def __repr__(self):
        return '<%s %s @#%x>' % (self.__class__.__name__, self, id(self))

    def __reduce__(self):
        return (atom, (str(self),))

    __hash__ = klass.reflective_hash('_hash')

    def __cmp__(self, other):
        if not isinstance(other, atom):
            raise TypeError(
                f"other isn't of {atom!r} type, is {other.__class__}")

        c = cmp(self.category, other.category)
        if c:
            return c

        c = cmp(self.package, other.package)
        if c:
            return c

        c = cmp(self.op, other.op)
        if c:
            return c

        if self.ver is not None and other.ver is not None:
            c = ver_cmp(self.ver, other.ver)
        else:
            c = cmp(self.ver is not None, other.ver is not None)
        if c:
            return c

        c = cmp(self.blocks, other.blocks)
        if c:
            # invert it; cmp(True, False) == 1
            # want non blockers then blockers.
            return -c

        c = cmp(self.blocks_strongly, other.blocks_strongly)
        if c:
            # want !! prior to !
            return c

        def f(v):
            return '' if v is None else str(v)
        c = cmp(f(self.slot_dep), f(other.slot_dep))
        if c:
            return c

        c = cmp(
            tuple(tuple(map(str, g)) for g in self._use_groups),
            tuple(tuple(map(str, g)) for g in other._use_groups))
        if c:
            return c

        return cmp(f(self.repo_id), f(other.repo_id))

    @property
    def unversioned_atom(self):
        """Return atom object stripped of operator and version."""
        s = f'{self.key}'
        if self.blocks:
            s = str(self.blocker) + s
        if self.slot_dep is not None:
            s += str(self.slot_dep)
        s += self._render_use()
        if self.repo_id:
            s += f"::{self.repo_id}"
        return atom(s)

    @property
    def no_usedeps(self):
        """Return atom object stripped of USE dependencies."""
        if not self.use:
            return self
        return atom(self._render(use=False))

    @property
    def without_blocker(self):
        """Return atom object stripped of its blocker."""
        if not self.blocks:
            return self
        return atom(self._render(blocker=False))

