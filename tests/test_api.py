import pytest

import pkgatom
from pkgatom.ebuild import errors
from pkgatom.ebuild.atom import UseDep, atom
from pkgatom.ebuild.cpv import CPN, CPV
from pkgatom.ebuild.version import Version


def test_parse_cpn():
    cpn = pkgatom.parse_cpn("dev-lang/rust-")
    assert isinstance(cpn, CPN)
    assert cpn.package == "rust-"
    with pytest.raises(errors.MalformedCpn):
        pkgatom.parse_cpn("dev-lang/rust-1")


def test_parse_cpv():
    cpv = pkgatom.parse_cpv("dev-lang/rust-1.70.0-r1")
    assert isinstance(cpv, CPV)
    assert cpv.version == "1.70.0"
    assert cpv.revision == 1
    with pytest.raises(errors.MalformedVersion):
        pkgatom.parse_cpv("dev-lang/rust")
    # only ascii digits form versions
    with pytest.raises(errors.MalformedVersion):
        pkgatom.parse_cpv("cat/pkg-١")


def test_parse_dep():
    dep = pkgatom.parse_dep(">=dev-lang/rust-1.75.0:0/1=[llvm_targets_AMDGPU]::gentoo")
    assert isinstance(dep, atom)
    assert dep.op == ">="
    assert dep.ver.numbers == ("1", "75", "0")
    assert (dep.slot, dep.subslot, dep.slot_operator) == ("0", "1", "=")
    assert dep.use == (UseDep("llvm_targets_AMDGPU"),)
    assert dep.repo_id == "gentoo"
    assert pkgatom.parse_dep("cat/pkg[a][b?]").use == (UseDep("a"), UseDep("b", suffix="?"))
    with pytest.raises(errors.MalformedUseDep):
        pkgatom.parse_dep("cat/pkg[foo(+)]")
    with pytest.raises(errors.MalformedRepo):
        pkgatom.parse_dep("dev-lang/rust::gentoo", eapi="8")
    with pytest.raises(errors.MalformedVersion):
        pkgatom.parse_dep(">=dev-lang/rust-")


def test_parse_version():
    ver = pkgatom.parse_version("1.2.3b_rc4-r5")
    assert isinstance(ver, Version)
    assert ver.letter == "b"
    with pytest.raises(errors.MalformedVersion):
        pkgatom.parse_version("1.2.3B")
    with pytest.raises(errors.MalformedVersion) as excinfo:
        pkgatom.parse_version("1.x", offset=5)
    assert excinfo.value.offset == 6
    with pytest.raises(errors.MalformedVersion):
        pkgatom.parse_version("١.٠")


@pytest.mark.parametrize(("a", "b", "result"), (
    ("1.0", "1.0", 0),
    ("1.0-r0", "1.0", 0),
    ("1.010", "1.01", 0),
    ("1.01", "1.1", -1),
    ("1.0_rc1", "1.0", -1),
    ("1.0_p1", "1.0", 1),
    ("1.0a", "1.0", 1),
    ("1.0", "1", 0),
    ("1.0.1", "1", 1),
    ("1_alpha", "1.0", -1),
))
def test_compare_versions(a, b, result):
    assert pkgatom.compare_versions(a, b) == result
    assert pkgatom.compare_versions(b, a) == -result
    assert pkgatom.compare_versions(Version(a), b) == result


@pytest.mark.parametrize("text", (
    "dev-util/diffball",
    "!!<=dev-util/diffball-01.2_p03-r00:0/1=[a,-b,!c(+)?,d(-)=]::gentoo",
    "=dev-util/diffball-1.2*",
    "cat/pkg:1[a][-b,c?]",
))
def test_serialize(text):
    dep = pkgatom.parse_dep(text)
    assert pkgatom.serialize(dep) == text
    assert pkgatom.parse_dep(pkgatom.serialize(dep)) == dep
    if dep.ver is None:
        assert pkgatom.serialize(pkgatom.parse_cpn(dep.cpvstr)) == dep.cpvstr
    else:
        assert pkgatom.serialize(pkgatom.parse_cpv(dep.cpvstr)) == dep.cpvstr
        assert pkgatom.serialize(dep.ver) == dep.fullver
