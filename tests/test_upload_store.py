"""Tests for the local upload store."""

import re
from unittest.mock import patch

import pytest

from vitrine.lib.storage import PLACEHOLDER_NAME, LocalUploadStore, UploadStore, generate_filename


class TestGenerateFilename:
    def test_shape(self):
        name = generate_filename("Lamp Photo.JPG")
        assert re.fullmatch(r"LampPhoto-\d+-\d+\.JPG", name)

    def test_strips_unsafe_characters(self):
        name = generate_filename("ch@ir (v2)!.png")
        assert name.startswith("chirv2-")
        assert name.endswith(".png")

    def test_truncates_long_base(self):
        name = generate_filename("a" * 80 + ".webp")
        assert name.split("-")[0] == "a" * 40

    def test_falls_back_when_nothing_survives(self):
        name = generate_filename("###.gif")
        assert name.startswith("media-")
        assert name.endswith(".gif")

    def test_drops_directories(self):
        name = generate_filename("../../etc/passwd")
        assert "/" not in name
        assert name.startswith("passwd-")

    def test_names_differ(self):
        assert generate_filename("a.png") != generate_filename("a.png")


class TestLocalUploadStore:
    def test_satisfies_protocol(self, upload_store):
        assert isinstance(upload_store, UploadStore)

    def test_url_prefix_normalized(self, tmp_path):
        assert LocalUploadStore(tmp_path, url_prefix="uploads/").url_prefix == "/uploads"

    @pytest.mark.asyncio
    async def test_store_writes_bytes(self, upload_store):
        filename = await upload_store.store("sofa.png", b"\x89PNG")

        assert (upload_store.base_path / filename).read_bytes() == b"\x89PNG"
        assert upload_store.url_for(filename) == f"/uploads/{filename}"

    @pytest.mark.asyncio
    async def test_delete_missing_file_is_success(self, upload_store):
        assert await upload_store.delete("never-there.png") is True

    @pytest.mark.asyncio
    async def test_delete_rejects_path_traversal(self, upload_store, tmp_path):
        outside = tmp_path / "keep.txt"
        outside.write_text("x")

        assert await upload_store.delete("../keep.txt") is False
        assert outside.exists()

    @pytest.mark.asyncio
    async def test_delete_failure_is_logged_not_raised(self, upload_store, upload_names, caplog):
        filename = await upload_store.store("a.png", b"a")

        with patch.object(LocalUploadStore, "_unlink", side_effect=PermissionError("denied")):
            assert await upload_store.delete(filename) is False

        assert "Failed to remove upload" in caplog.text
        assert filename in upload_names()

    @pytest.mark.asyncio
    async def test_delete_many(self, upload_store, upload_names):
        names = [await upload_store.store(f"{n}.png", b"x") for n in "abc"]

        await upload_store.delete_many(names[:2] + names[:1])

        assert upload_names() == {names[2]}

    @pytest.mark.asyncio
    async def test_list_skips_placeholder_and_directories(self, upload_store):
        (upload_store.base_path / PLACEHOLDER_NAME).write_text("")
        (upload_store.base_path / "nested").mkdir()
        filename = await upload_store.store("a.png", b"a")

        assert await upload_store.list() == [filename]

    @pytest.mark.asyncio
    async def test_list_missing_directory(self, tmp_path):
        store = LocalUploadStore(tmp_path / "nope")
        assert await store.list() == []


class TestFilenameFromSrc:
    @pytest.mark.parametrize(
        "src,expected",
        [
            ("/uploads/lamp-1-2.png", "lamp-1-2.png"),
            ("/uploads/", None),
            (f"/uploads/{PLACEHOLDER_NAME}", None),
            ("https://cdn.example.com/lamp.png", None),
            ("/static/lamp.png", None),
            ("/uploadsx/lamp.png", None),
            ("/uploads/sub/lamp.png", None),
            ("/uploads/..", None),
            (None, None),
        ],
    )
    def test_mapping(self, upload_store, src, expected):
        assert upload_store.filename_from_src(src) == expected

    def test_configured_prefix(self, tmp_path):
        store = LocalUploadStore(tmp_path, url_prefix="media/")
        assert store.filename_from_src("/media/x.png") == "x.png"
        assert store.filename_from_src("/uploads/x.png") is None
