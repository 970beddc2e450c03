"""
Media Resolver Tests
====================
Tests for reference classification, storage / HTTP fetching and the
never-raise failure policy. HTTP is faked with httpx.MockTransport.
"""
import asyncio
import base64

import httpx
import pytest

from bugscope.media.resolver import BUCKET, EXTERNAL, INTERNAL, MediaResolver, classify
from bugscope.media.storage import FilesystemBlobStore, InMemoryBlobStore

PNG = b"\x89PNG\r\n\x1a\nfake"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _run(coro):
    return asyncio.run(coro)


def _http(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class _BrokenStore:
    async def get(self, key):
        raise RuntimeError("bucket offline")


class TestClassify:
    def test_internal_prefix(self):
        loc = classify("/api/media/bugs/shot.png")
        assert (loc.kind, loc.target) == (INTERNAL, "bugs/shot.png")

    def test_bucket_url(self):
        loc = classify("https://pub-123.r2.dev/bugs/shot.png")
        assert (loc.kind, loc.target) == (BUCKET, "bugs/shot.png")

    def test_uploads_url(self):
        loc = classify("https://cdn.example.com/uploads/shot.png?v=2")
        assert (loc.kind, loc.target) == (BUCKET, "uploads/shot.png")

    def test_external_url(self):
        loc = classify("https://imgur.com/shot.png")
        assert (loc.kind, loc.target) == (EXTERNAL, "https://imgur.com/shot.png")


class TestResolveStorage:
    def test_internal_found(self):
        resolver = MediaResolver(storage=InMemoryBlobStore({"bugs/shot.png": PNG}))
        result = _run(resolver.resolve("/api/media/bugs/shot.png"))
        assert result == base64.b64encode(PNG).decode("ascii")

    def test_bucket_found(self):
        resolver = MediaResolver(storage=InMemoryBlobStore({"uploads/shot.png": PNG}))
        result = _run(resolver.resolve("https://cdn.example.com/uploads/shot.png"))
        assert base64.b64decode(result) == PNG

    def test_object_stored_after_construction(self):
        store = InMemoryBlobStore()
        resolver = MediaResolver(storage=store)
        assert _run(resolver.resolve("/api/media/late/shot.png")) is None

        store.put("late/shot.png", PNG)
        assert base64.b64decode(_run(resolver.resolve("/api/media/late/shot.png"))) == PNG

    def test_missing_object_returns_none(self):
        resolver = MediaResolver(storage=InMemoryBlobStore())
        assert _run(resolver.resolve("/api/media/missing.png")) is None

    def test_no_storage_returns_none(self):
        assert _run(MediaResolver().resolve("/api/media/bugs/shot.png")) is None

    def test_storage_exception_returns_none(self):
        resolver = MediaResolver(storage=_BrokenStore())
        assert _run(resolver.resolve("/api/media/bugs/shot.png")) is None

    def test_empty_ref_returns_none(self):
        assert _run(MediaResolver().resolve("")) is None


class TestResolveExternal:
    def test_success(self):
        resolver = MediaResolver(http_client=_http(lambda req: httpx.Response(200, content=PNG)))
        result = _run(resolver.resolve("https://imgur.com/shot.png"))
        assert base64.b64decode(result) == PNG

    def test_non_success_returns_none(self):
        resolver = MediaResolver(http_client=_http(lambda req: httpx.Response(404)))
        assert _run(resolver.resolve("https://imgur.com/shot.png")) is None

    def test_network_error_returns_none(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        resolver = MediaResolver(http_client=_http(handler))
        assert _run(resolver.resolve("https://imgur.com/shot.png")) is None


class TestFilesystemBlobStore:
    def test_reads_file_under_root(self, tmp_path):
        (tmp_path / "bugs").mkdir()
        (tmp_path / "bugs" / "shot.png").write_bytes(PNG)
        resolver = MediaResolver(storage=FilesystemBlobStore(str(tmp_path)))
        result = _run(resolver.resolve("/api/media/bugs/shot.png"))
        assert base64.b64decode(result) == PNG

    def test_rejects_path_traversal(self, tmp_path):
        root = tmp_path / "media"
        root.mkdir()
        (tmp_path / "secret.txt").write_bytes(b"secret")
        store = FilesystemBlobStore(str(root))
        assert _run(store.get("../secret.txt")) is None

    @pytest.mark.parametrize("key", ["nope.png", "bugs/"])
    def test_missing_file(self, tmp_path, key):
        (tmp_path / "bugs").mkdir()
        assert _run(FilesystemBlobStore(str(tmp_path)).get(key)) is None
