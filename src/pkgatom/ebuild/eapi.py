"""EAPI definitions controlling which atom syntax is allowed."""

__all__ = ("EAPI", "get_eapi", "eapi_extended")

import re
from functools import partial

from snakeoil import klass, mappings

from ..log import logger

_valid_EAPI_regex = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9+_.-]*$")


eapi_optionals = mappings.ImmutableDict({
    # Controls whether atoms may carry a :slot dependency; see PMS.
    "slot_deps": False,

    # Controls whether !! strong blockers are allowed; see PMS EAPI 2.
    "strong_blockers": False,

    # Controls whether [use] dependencies are allowed in atoms, including the
    # conditional ?/= forms; see PMS EAPI 2.
    "use_deps": False,

    # Controls whether USE dependency defaults, (+) and (-), are supported; see PMS.
    "use_dep_defaults": False,

    # Controls whether SLOT values can actually be multi-part; see PMS EAPI 5.
    # This is related to ABI breakage detection.
    "sub_slotting": False,

    # Controls whether the := and :* slot operators are allowed; see PMS EAPI 5.
    "slot_operators": False,

    # Controls whether ::repo dependencies are allowed. No EAPI supports
    # these, they're only accepted outside of ebuild context.
    "repo_ids": False,

    # Controls whether or not pkgatom actually fully supports this EAPI.
    "is_supported": True,
})


class _optionals_cls(mappings.ImmutableDict):

    mappings.inject_getitem_as_getattr(locals())


class EAPI(metaclass=klass.immutable_instance):

    known_eapis = {}
    unknown_eapis = {}

    def __init__(self, magic, parent=None, optionals=None):
        sf = object.__setattr__
        sf(self, "_magic", str(magic))
        sf(self, "_parent", parent)
        if optionals is None:
            optionals = {}
        sf(self, "options", _optionals_cls(optionals))

    @classmethod
    def register(cls, *args, **kwds):
        eapi = cls(*args, **kwds)
        pre_existing = cls.known_eapis.get(eapi._magic)
        if pre_existing is not None:
            raise ValueError(
                f"EAPI '{eapi}' is already known/instantiated- {pre_existing!r}")
        cls.known_eapis[eapi._magic] = eapi
        return eapi

    @klass.jit_attr
    def is_supported(self):
        """Check if an EAPI is supported."""
        if EAPI.known_eapis.get(self._magic) is not None:
            if not self.options.is_supported:
                logger.warning(f"EAPI '{self}' isn't fully supported")
            return True
        return False

    @klass.jit_attr
    def atom_kls(self):
        from .atom import atom
        return partial(atom, eapi=self)

    @property
    def inherits(self):
        """Yield an EAPI's inheritance tree.

        Note that this assumes a simple, linear inheritance tree.
        """
        yield self
        parent = self._parent
        while parent is not None:
            yield parent
            parent = parent._parent

    def __str__(self):
        return self._magic

    def __repr__(self):
        return f'<{self.__class__.__name__} {self._magic!r} @{id(self):#8x}>'


def get_eapi(magic, suppress_unsupported=True):
    """Return EAPI object for a given identifier."""
    if _valid_EAPI_regex.match(magic) is None:
        eapi_str = f" {magic!r}" if magic else ''
        raise ValueError(f'invalid EAPI{eapi_str}')
    eapi = EAPI.known_eapis.get(magic)
    if eapi is None and suppress_unsupported:
        eapi = EAPI.unknown_eapis.get(magic)
        if eapi is None:
            eapi = EAPI(magic=magic, optionals=dict(eapi_optionals, is_supported=False))
            EAPI.unknown_eapis[eapi._magic] = eapi
    return eapi


def _combine_dicts(*mappings):
    return {k: v for d in mappings for k, v in d.items()}


eapi0 = EAPI.register(
    magic="0",
    parent=None,
    optionals=eapi_optionals,
)

eapi1 = EAPI.register(
    magic="1",
    parent=eapi0,
    optionals=_combine_dicts(eapi0.options, dict(
        slot_deps=True,
    )),
)

eapi2 = EAPI.register(
    magic="2",
    parent=eapi1,
    optionals=_combine_dicts(eapi1.options, dict(
        strong_blockers=True,
        use_deps=True,
    )),
)

eapi3 = EAPI.register(
    magic="3",
    parent=eapi2,
    optionals=eapi2.options,
)

eapi4 = EAPI.register(
    magic="4",
    parent=eapi3,
    optionals=_combine_dicts(eapi3.options, dict(
        use_dep_defaults=True,
    )),
)

eapi5 = EAPI.register(
    magic="5",
    parent=eapi4,
    optionals=_combine_dicts(eapi4.options, dict(
        sub_slotting=True,
        slot_operators=True,
    )),
)

eapi6 = EAPI.register(
    magic="6",
    parent=eapi5,
    optionals=eapi5.options,
)

eapi7 = EAPI.register(
    magic="7",
    parent=eapi6,
    optionals=eapi6.options,
)

eapi8 = EAPI.register(
    magic="8",
    parent=eapi7,
    optionals=eapi7.options,
)

# Used when parsing atoms outside of ebuild context: everything the latest
# EAPI supports plus repository deps. Never returned by get_eapi().
eapi_extended = EAPI(
    magic="extended",
    parent=eapi8,
    optionals=_combine_dicts(eapi8.options, dict(
        repo_ids=True,
    )),
)
