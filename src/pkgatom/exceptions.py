"""Base pkgatom exceptions."""

from snakeoil.cli.exceptions import UserException


class PkgatomException(Exception):
    """Generic pkgatom exception."""


class PkgatomUserException(PkgatomException, UserException):
    """Generic pkgatom exception with a sane string for non-debug, user-facing output."""
