import numpy as np
import pytest

from reskernels.stdfile_space import StdFileSpace


@pytest.fixture
def space(tmp_path):
    return StdFileSpace(str(tmp_path))


def test_allocate_uses_default_path(space, tmp_path):
    accessor = space.allocate(16, "data.bin")
    assert accessor.size == 16
    assert accessor.full_path() == str(tmp_path / "data.bin")


def test_checkpoint_and_restore_round_trip(space, tmp_path):
    host = np.arange(8, dtype=np.int64)
    accessor = space.allocate(host.nbytes, "a.bin")
    space.register_mirror("a", host, accessor)
    assert space.checkpoint_views() == 1
    assert (tmp_path / "a.bin").read_bytes() == host.tobytes()
    saved = host.copy()
    host[:] = 0
    assert space.restore_all_views() == 1
    np.testing.assert_array_equal(host, saved)


def test_restore_single_view(space):
    first = bytearray(b"first")
    second = bytearray(b"other")
    acc1 = space.allocate(len(first), "one.bin")
    acc2 = space.allocate(len(second), "two.bin")
    space.register_mirror("one", first, acc1)
    space.register_mirror("two", second, acc2)
    space.checkpoint_views()
    first[:] = b"xxxxx"
    second[:] = b"yyyyy"
    assert space.restore_view("one") is True
    assert bytes(first) == b"first"
    assert bytes(second) == b"yyyyy"


def test_restore_unknown_label(space):
    assert space.restore_view("missing") is False


def test_restore_short_file_fills_prefix(space, tmp_path):
    host = bytearray(b"abcdef")
    accessor = space.allocate(len(host), "short.bin")
    space.register_mirror("s", host, accessor)
    (tmp_path / "short.bin").write_bytes(b"XY")
    space.restore_all_views()
    assert bytes(host) == b"XYcdef"


def test_create_view_targets_makes_empty_files(space, tmp_path):
    (tmp_path / "t.bin").write_bytes(b"old content")
    host = bytearray(4)
    space.register_mirror("t", host, space.allocate(4, "t.bin"))
    assert space.checkpoint_create_view_targets() == 1
    assert (tmp_path / "t.bin").read_bytes() == b""


def test_empty_space_does_nothing(space):
    assert space.checkpoint_views() == 0
    assert space.restore_all_views() == 0
    assert space.checkpoint_create_view_targets() == 0


def test_deallocate_forgets_mirrors(space):
    host = bytearray(3)
    accessor = space.allocate(3, "d.bin")
    space.register_mirror("d", host, accessor)
    space.deallocate(accessor)
    assert space.mirrors == {}
    assert space.restore_view("d") is False