"""Gentoo ebuild specific parsing: versions, cpvs and atoms."""
