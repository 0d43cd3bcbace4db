"""测试输入路径分类与目录扫描。"""

from __future__ import annotations

from pathlib import Path

import pytest

from image_resizer.core.exceptions import SetupError
from image_resizer.core.models import PathKind
from image_resizer.core.scanner import classify, collect_work_items, is_eligible_extension


@pytest.mark.parametrize("ext", ["jpg", "JPG", "jpeg", "JpEg", "png", "PNG", "webp", "ico", "pgm", ".jpg", ".PNG"])
@pytest.mark.parametrize("allow_gif", [True, False])
def test_eligible_extensions(ext: str, allow_gif: bool) -> None:
    assert is_eligible_extension(ext, allow_gif)


@pytest.mark.parametrize("ext", ["gif", "GIF", ".Gif"])
def test_gif_depends_on_allow_gif(ext: str) -> None:
    assert is_eligible_extension(ext, True)
    assert not is_eligible_extension(ext, False)


@pytest.mark.parametrize("ext", ["", "txt", "bmp", "tiff", "jpgx", "heic"])
def test_other_extensions_rejected(ext: str) -> None:
    assert not is_eligible_extension(ext, True)


def test_classify(tmp_path: Path) -> None:
    file_path = tmp_path / "a.png"
    file_path.write_bytes(b"")

    assert classify(tmp_path) is PathKind.DIRECTORY
    assert classify(file_path) is PathKind.FILE

    with pytest.raises(SetupError):
        classify(tmp_path / "missing")


def test_collect_in_place(tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()
    (tmp_path / "a.JPG").write_bytes(b"")
    (tmp_path / "sub" / "b.png").write_bytes(b"")
    (tmp_path / "notes.txt").write_text("hello")

    items = collect_work_items(tmp_path, None, allow_gif=False)

    assert [item.input_path for item in items] == [tmp_path / "a.JPG", tmp_path / "sub" / "b.png"]
    assert all(item.output_path is None for item in items)
    assert all(item.destination == item.input_path for item in items)


def test_collect_mirrors_output_tree(tmp_path: Path) -> None:
    source = tmp_path / "input"
    output = tmp_path / "output"
    (source / "x" / "y").mkdir(parents=True)
    (source / "x" / "y" / "deep.webp").write_bytes(b"")
    (source / "top.jpeg").write_bytes(b"")

    items = collect_work_items(source, output, allow_gif=False)

    mapping = {item.input_path: item.output_path for item in items}
    assert mapping == {
        source / "top.jpeg": output / "top.jpeg",
        source / "x" / "y" / "deep.webp": output / "x" / "y" / "deep.webp",
    }


def test_gif_not_enumerated_without_allow_gif(tmp_path: Path) -> None:
    (tmp_path / "a.png").write_bytes(b"")
    (tmp_path / "b.gif").write_bytes(b"")

    without_gif = collect_work_items(tmp_path, None, allow_gif=False)
    with_gif = collect_work_items(tmp_path, None, allow_gif=True)

    assert [item.input_path.name for item in without_gif] == ["a.png"]
    assert [item.input_path.name for item in with_gif] == ["a.png", "b.gif"]


def test_file_links_collected_directory_links_not_followed(tmp_path: Path) -> None:
    source = tmp_path / "input"
    outside = tmp_path / "outside"
    source.mkdir()
    outside.mkdir()
    real = source / "real.png"
    real.write_bytes(b"")
    (outside / "far.png").write_bytes(b"")
    file_link = source / "link.png"
    dir_link = source / "linked_dir"
    try:
        file_link.symlink_to(real)
        dir_link.symlink_to(outside, target_is_directory=True)
    except OSError:
        pytest.skip("当前平台不支持符号链接")

    items = collect_work_items(source, tmp_path / "output", allow_gif=False)

    assert [item.input_path for item in items] == [file_link, real]
    assert items[0].output_path == tmp_path / "output" / "link.png"
