"""Tests for the asynchronous filesystem primitives."""

import pytest

from mirror_backup.sync import fs

BASE_NS = 1_600_000_000 * 10**9


class TestListChildren:
    """Test suite for list_children."""

    @pytest.mark.asyncio
    async def test_lists_names_with_directory_flags(self, tmp_path, make_file):
        make_file(tmp_path / "a.txt")
        (tmp_path / "sub").mkdir()

        assert await fs.list_children(str(tmp_path)) == {"a.txt": False, "sub": True}

    @pytest.mark.asyncio
    async def test_missing_directory_is_empty(self, tmp_path):
        assert await fs.list_children(str(tmp_path / "missing")) == {}

    @pytest.mark.asyncio
    async def test_unlistable_path_is_empty(self, tmp_path, make_file):
        path = make_file(tmp_path / "file.txt", "not a directory")

        assert await fs.list_children(str(path)) == {}


class TestStatNode:
    """Test suite for stat_node."""

    @pytest.mark.asyncio
    async def test_file(self, tmp_path, make_file):
        path = make_file(tmp_path / "a.txt", "x" * 100, mtime_ns=BASE_NS)

        st = await fs.stat_node(str(path))

        assert st.is_file is True
        assert st.is_directory is False
        assert st.size == 100
        assert st.modified_ns == BASE_NS

    @pytest.mark.asyncio
    async def test_directory(self, tmp_path):
        st = await fs.stat_node(str(tmp_path))

        assert st.is_directory is True
        assert st.is_file is False

    @pytest.mark.asyncio
    async def test_missing_is_none(self, tmp_path):
        assert await fs.stat_node(str(tmp_path / "missing")) is None


class TestCopyAndMove:
    """Test suite for copy_file, move_node and create_directory."""

    @pytest.mark.asyncio
    async def test_copy_keeps_content_and_mtime(self, tmp_path, make_file):
        src = make_file(tmp_path / "src.bin", b"\x00\x01payload", mtime_ns=BASE_NS)
        dst = tmp_path / "dst.bin"

        await fs.copy_file(str(src), str(dst))

        assert dst.read_bytes() == b"\x00\x01payload"
        assert dst.stat().st_mtime_ns == BASE_NS

    @pytest.mark.asyncio
    async def test_move_directory(self, tmp_path, make_file):
        make_file(tmp_path / "tree" / "inner" / "f.txt", "data")

        await fs.move_node(str(tmp_path / "tree"), str(tmp_path / "moved"))

        assert not (tmp_path / "tree").exists()
        assert (tmp_path / "moved" / "inner" / "f.txt").read_text() == "data"

    @pytest.mark.asyncio
    async def test_create_directory(self, tmp_path):
        await fs.create_directory(str(tmp_path / "a" / "b"), recursive=True)
        await fs.create_directory(str(tmp_path / "a" / "b"), recursive=True)
        await fs.create_directory(str(tmp_path / "flat"))

        assert (tmp_path / "a" / "b").is_dir()
        assert (tmp_path / "flat").is_dir()
        with pytest.raises(FileExistsError):
            await fs.create_directory(str(tmp_path / "flat"))
