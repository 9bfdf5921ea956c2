"""
test_spooled_uploads.py - multipart part 처리 테스트

DoD:
- 비어 있는 file input (파일 이름 없음)은 버림
- part는 제출 순서대로 tmp_dir에 spool, 끝나면 삭제
"""

import asyncio
import io
from pathlib import Path

import pytest
from starlette.datastructures import UploadFile

from vellum.app.services.uploads import split_form_items, spooled_uploads


def make_part(data: bytes, filename: str | None) -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename)


class TestSplitFormItems:
    def test_separates_values_and_files(self):
        part = make_part(b"x", "a.png")

        values, files = split_form_items([("content[title]", "Home"), ("content[hero]", part)])

        assert values == [("content[title]", "Home")]
        assert files == [("content[hero]", part)]

    def test_drops_empty_file_inputs(self):
        values, files = split_form_items([("content[hero]", make_part(b"", ""))])

        assert values == []
        assert files == []


class TestSpooledUploads:
    def test_spools_and_cleans_up(self, tmp_path: Path):
        files = [
            ("content[photos][]", make_part(b"first", "one.png")),
            ("content[photos][]", make_part(b"second", "two.gif")),
        ]

        async def run() -> list[Path]:
            async with spooled_uploads(files, tmp_path / "tmp") as uploads:
                assert [u.filename for u in uploads] == ["one.png", "two.gif"]
                assert [u.path.read_bytes() for u in uploads] == [b"first", b"second"]
                assert uploads[1].path.suffix == ".gif"
                return [u.path for u in uploads]

        paths = asyncio.run(run())

        assert not any(p.exists() for p in paths)

    def test_cleans_up_on_error(self, tmp_path: Path):
        files = [("content[hero]", make_part(b"data", "a.png"))]
        seen: list[Path] = []

        async def run() -> None:
            async with spooled_uploads(files, tmp_path / "tmp") as uploads:
                seen.extend(u.path for u in uploads)
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            asyncio.run(run())

        assert seen
        assert not seen[0].exists()
