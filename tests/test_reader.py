"""Tests for listfiles.reader."""

from pathlib import Path

import pytest

from listfiles.reader import (
    ReadError,
    describe_binary,
    format_entry,
    format_size,
    is_binary_file,
    mask_java_imports,
    read_text,
)


class TestBinaryDetection:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("app.exe", True),
            ("photo.PNG", True),
            ("archive.tar.gz", True),
            ("Cargo.lock", True),
            ("module.pyc", True),
            ("main.rs", False),
            ("README", False),
            ("notes.txt", False),
        ],
    )
    def test_is_binary_file(self, name: str, expected: bool) -> None:
        assert is_binary_file(Path(name)) is expected

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, "0 bytes"),
            (1023, "1023 bytes"),
            (1024, "1.0 KB"),
            (1536, "1.5 KB"),
            (5 * 1024**2, "5.0 MB"),
            (3 * 1024**3, "3.0 GB"),
        ],
    )
    def test_format_size(self, size: int, expected: str) -> None:
        assert format_size(size) == expected

    @pytest.mark.parametrize(
        ("name", "kind"),
        [
            ("app.exe", "Binary file"),
            ("logo.png", "Image file"),
            ("clip.mp4", "Video file"),
            ("song.mp3", "Audio file"),
            ("bundle.zip", "Archive file"),
            ("report.pdf", "Document file"),
            ("data.sqlite", "Binary file"),
        ],
    )
    def test_describe_binary_kinds(self, tmp_path: Path, name: str, kind: str) -> None:
        path = tmp_path / name
        path.write_bytes(b"\x00" * 10)
        assert describe_binary(path) == f"[{kind}: 10 bytes]"

    def test_describe_binary_without_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "blob"
        path.write_bytes(b"\x00" * 2048)
        assert describe_binary(path) == "[Binary file - Size: 2.0 KB]"

    def test_describe_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ReadError, match="metadata"):
            describe_binary(tmp_path / "gone.exe")


class TestReadText:
    @pytest.mark.parametrize(
        ("raw", "text", "lines"),
        [
            (b"", "", 0),
            (b"one", "one\n", 1),
            (b"one\ntwo\n", "one\ntwo\n", 2),
            (b"one\r\ntwo\r\n", "one\ntwo\n", 2),
            (b"one\n\n", "one\n\n", 2),
        ],
    )
    def test_line_normalization(self, tmp_path: Path, raw: bytes, text: str, lines: int) -> None:
        path = tmp_path / "f.txt"
        path.write_bytes(raw)
        assert read_text(path) == (text, lines)

    def test_invalid_utf8_is_replaced(self, tmp_path: Path) -> None:
        path = tmp_path / "f.txt"
        path.write_bytes(b"ok \xff\n")
        text, lines = read_text(path)
        assert text == "ok �\n"
        assert lines == 1

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ReadError, match="cannot read"):
            read_text(tmp_path / "missing.txt")


class TestMaskJavaImports:
    def test_imports_collapse_at_first_import(self) -> None:
        source = "package a;\nimport a.b.C;\nimport a.b.D;\npublic class Example {\n}\n"
        assert mask_java_imports(source) == "package a;\nimport ...\npublic class Example {\n}\n"

    def test_indented_imports_are_masked(self) -> None:
        assert mask_java_imports("  import x.Y;\nclass Z {}\n") == "import ...\nclass Z {}\n"

    def test_no_imports_unchanged(self) -> None:
        source = "class Z {}\n"
        assert mask_java_imports(source) is source

    def test_identifier_starting_with_import_is_kept(self) -> None:
        source = "importer.run();\n"
        assert mask_java_imports(source) == source


def test_format_entry() -> None:
    assert format_entry("src/main.rs", "fn main() {}\n") == "src/main.rs\nfn main() {}\n\n\n"
