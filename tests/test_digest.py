import os
import sys
import subprocess

from pytest import raises

from glslbake.digest import Digest, compute_digest


VERT = b"#version 150\nvoid main(){gl_Position=vec4(1.0);}\n"
FRAG = b"#version 150\nout vec4 c;void main(){c=vec4(0.5);}\n"


def test_digest_is_deterministic():
    d1 = compute_digest(VERT, FRAG)
    d2 = compute_digest(bytes(VERT), bytearray(FRAG))
    assert d1 == d2
    assert hash(d1) == hash(d2)
    assert len(str(d1)) == 16
    assert int(d1) == int(str(d1), 16)


def test_digest_accepts_str():
    assert compute_digest(VERT.decode(), FRAG.decode()) == compute_digest(VERT, FRAG)


def test_digest_single_byte_sensitivity():
    ref = compute_digest(VERT, FRAG)
    for i in range(len(VERT)):
        vert = bytearray(VERT)
        vert[i] ^= 0x01
        assert compute_digest(vert, FRAG) != ref
    for i in range(len(FRAG)):
        frag = bytearray(FRAG)
        frag[i] ^= 0x80
        assert compute_digest(VERT, frag) != ref


def test_digest_order_and_boundary():
    assert compute_digest(VERT, FRAG) != compute_digest(FRAG, VERT)
    assert compute_digest(b"ab", b"c") != compute_digest(b"a", b"bc")
    assert compute_digest(b"", b"") != compute_digest(b"\x00", b"")


def test_digest_large_input():
    # Makes sure that the numpy code does not raise on integer wrap-around
    data = os.urandom(1 << 20)
    d1 = compute_digest(data, data[:1000])
    d2 = compute_digest(data, data[:1000])
    assert d1 == d2


def test_digest_is_stable_across_processes():
    code = (
        "from glslbake.digest import compute_digest; "
        "print(compute_digest(b'vertex code', b'fragment code'))"
    )
    root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    results = set()
    for seed in ("0", "1", "random"):
        env = dict(os.environ, PYTHONHASHSEED=seed)
        p = subprocess.run(
            [sys.executable, "-c", code], cwd=root, env=env, capture_output=True
        )
        assert p.returncode == 0, p.stderr.decode()
        results.add(p.stdout.decode().strip())
    assert results == {str(compute_digest(b"vertex code", b"fragment code"))}


def test_digest_object():
    d = Digest(0xDEADBEEF)
    assert str(d) == "00000000deadbeef"
    assert repr(d) == "<Digest 00000000deadbeef>"
    assert Digest.from_hex(str(d)) == d
    assert d != Digest(1)
    assert int(Digest(2**64 - 1)) == 2**64 - 1

    with raises(ValueError):
        Digest(-1)
    with raises(ValueError):
        Digest(2**64)
