"""
atom exceptions
"""

__all__ = (
    "ParseError", "MalformedAtom", "MalformedVersion", "MalformedOperator",
    "MalformedCpn", "InvalidCPV", "MalformedSlot", "MalformedUseDep",
    "MalformedRepo", "TrailingInput",
)

from ..exceptions import PkgatomUserException


class ParseError(ValueError, PkgatomUserException):
    """Generic parsing failure.

    :ivar text: the full string being parsed
    :ivar offset: index of the first offending character in ``text``
    :ivar segment: name of the grammar segment that failed
    :ivar err: human readable reason, may be None
    """

    segment = 'input'

    def __init__(self, text, offset=0, err=None, segment=None):
        self.text = text
        self.offset = offset
        self.err = err
        if segment is not None:
            self.segment = segment
        super().__init__(str(self))

    def __str__(self):
        msg = f'invalid {self.segment}: {self.text!r}'
        if self.err:
            msg += f': {self.err}'
        return f'{msg} (at offset {self.offset})'

    def __reduce__(self):
        return (self.__class__, (self.text, self.offset, self.err, self.segment))


class MalformedAtom(ParseError):
    """Package atom doesn't follow required specifications."""

    segment = 'package atom'


class MalformedVersion(MalformedAtom):
    """Version segment doesn't match the numeric/letter/suffix/revision grammar."""

    segment = 'version'


class MalformedOperator(MalformedAtom):
    """Version operator is contextually invalid."""

    segment = 'operator'


class MalformedCpn(MalformedAtom):
    """Category or package name violates naming rules."""

    segment = 'category/package'


# older name for the same failure
InvalidCPV = MalformedCpn


class MalformedSlot(MalformedAtom):
    """Slot clause violates the slot/subslot/operator grammar."""

    segment = 'slot dep'


class MalformedUseDep(MalformedAtom):
    """USE dependency violates flag or modifier rules."""

    segment = 'use dep'


class MalformedRepo(MalformedAtom):
    """Repository identifier violates naming rules."""

    segment = 'repo id'


class TrailingInput(MalformedAtom):
    """Input remains after all recognized segments were consumed."""

    segment = 'package atom'

    def __init__(self, text, offset=0, err=None, segment=None):
        if err is None:
            err = f'trailing garbage {text[offset:]!r}'
        super().__init__(text, offset, err, segment)
