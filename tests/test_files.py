"""Tests for the license file store."""

from __future__ import annotations

import io

import pytest
from fastapi import UploadFile

from app.services.files import LicenseFileStore


def _upload(data: bytes, name: str = "license.lic") -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=name)


@pytest.mark.asyncio
async def test_stage_copies_content(file_store: LicenseFileStore):
    path = await file_store.stage(_upload(b"\x00\x01LICENSE"))
    assert path.parent == file_store.upload_dir
    assert path.read_bytes() == b"\x00\x01LICENSE"
    # Client-supplied names never reach the filesystem
    assert path.name != "license.lic"


@pytest.mark.asyncio
async def test_staged_cleans_up_on_success(file_store: LicenseFileStore):
    async with file_store.staged(_upload(b"a"), _upload(b"b")) as paths:
        assert len(paths) == 2
        assert all(p.is_file() for p in paths)
    assert not any(p.exists() for p in paths)
    assert list(file_store.upload_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_staged_cleans_up_on_error(file_store: LicenseFileStore):
    with pytest.raises(RuntimeError):
        async with file_store.staged(_upload(b"a")) as paths:
            raise RuntimeError("wizard blew up")
    assert not paths[0].exists()


@pytest.mark.asyncio
async def test_staged_cleans_up_partial_staging(file_store: LicenseFileStore, monkeypatch):
    calls = []
    original = file_store.stage

    async def flaky_stage(upload):
        if calls:
            raise OSError("disk full")
        calls.append(await original(upload))
        return calls[-1]

    monkeypatch.setattr(file_store, "stage", flaky_stage)
    with pytest.raises(OSError):
        async with file_store.staged(_upload(b"a"), _upload(b"b")):
            pass
    assert not calls[0].exists()


def test_request_path(file_store: LicenseFileStore):
    a = file_store.request_path("update")
    b = file_store.request_path("update")
    assert a != b
    assert a.parent == file_store.request_dir
    assert a.name.startswith("update_request_")
    assert a.suffix == ".req"
    assert not a.exists()


def test_discard_is_best_effort(file_store: LicenseFileStore, tmp_path):
    target = tmp_path / "gone.req"
    target.write_bytes(b"x")
    file_store.discard(target)
    assert not target.exists()
    # Missing files, directories and None never raise
    file_store.discard(target)
    file_store.discard(tmp_path)
    file_store.discard(None)
