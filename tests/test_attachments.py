"""Tests for data-URI encoding of uploads."""

from __future__ import annotations

import base64

import pytest
from pathlib import Path

from memoledger.attachments import decode_data_uri, encode_upload, guess_content_type
from memoledger.errors import AttachmentError
from memoledger.models import Upload


class TestEncodeUpload:
    @pytest.mark.asyncio
    async def test_in_memory_content(self):
        encoded = await encode_upload(Upload(name="doc.pdf", content=b"%PDF-1.4", content_type="application/pdf"))
        assert encoded.name == "doc.pdf"
        assert encoded.content_type == "application/pdf"
        assert encoded.data_uri == "data:application/pdf;base64," + base64.b64encode(b"%PDF-1.4").decode()

    @pytest.mark.asyncio
    async def test_path_content(self, tmp_path: Path):
        path = tmp_path / "scan.png"
        path.write_bytes(b"\x89PNG\r\n")
        encoded = await encode_upload(Upload.from_path(path))
        assert encoded.name == "scan.png"
        assert encoded.content_type == "image/png"
        assert decode_data_uri(encoded.data_uri) == ("image/png", b"\x89PNG\r\n")

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(AttachmentError):
            await encode_upload(Upload.from_path(tmp_path / "gone.pdf"))

    @pytest.mark.asyncio
    async def test_upload_without_source_raises(self):
        with pytest.raises(AttachmentError):
            await encode_upload(Upload(name="empty.pdf"))

    @pytest.mark.asyncio
    async def test_string_path_is_accepted(self, tmp_path: Path):
        path = tmp_path / "note.txt"
        path.write_bytes(b"hello")
        upload = Upload(name="note.txt", path=str(path))
        assert isinstance(upload.path, Path)
        encoded = await encode_upload(upload)
        assert decode_data_uri(encoded.data_uri) == ("text/plain", b"hello")

    @pytest.mark.asyncio
    async def test_missing_string_path_raises(self, tmp_path: Path):
        with pytest.raises(AttachmentError):
            await encode_upload(Upload(name="x.pdf", path=str(tmp_path / "missing.pdf")))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["text, not bytes", 3.5])
    async def test_non_bytes_content_raises(self, content):
        with pytest.raises(AttachmentError):
            await encode_upload(Upload(name="x.txt", content=content))

    @pytest.mark.asyncio
    async def test_empty_file_is_valid(self):
        encoded = await encode_upload(Upload(name="blank.txt", content=b""))
        assert encoded.data_uri == "data:text/plain;base64,"


class TestContentType:
    def test_explicit_type_wins(self):
        assert guess_content_type(Upload(name="a.pdf", content_type="text/x-custom")) == "text/x-custom"

    def test_unknown_extension(self):
        assert guess_content_type(Upload(name="blob.zzzunknown")) == "application/octet-stream"


class TestDecodeDataUri:
    def test_rejects_non_data_uri(self):
        with pytest.raises(AttachmentError):
            decode_data_uri("https://example.com/file.pdf")

    def test_rejects_non_base64(self):
        with pytest.raises(AttachmentError):
            decode_data_uri("data:text/plain,hello")

    def test_rejects_corrupt_payload(self):
        with pytest.raises(AttachmentError):
            decode_data_uri("data:text/plain;base64,@@@")
