"""测试命令行入口的端到端行为。"""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image
from typer.testing import CliRunner

from image_resizer.cli.main import app
from image_resizer.processing import pipeline

runner = CliRunner()


def make_image(path: Path, size: tuple[int, int] = (400, 200)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, "green").save(path)
    return path


def test_resize_single_jpeg_in_place(tmp_path: Path) -> None:
    photo = make_image(tmp_path / "photo.jpg", (3840, 2160))

    result = runner.invoke(app, [str(photo), "--side-maximum", "1920"])

    assert result.exit_code == 0, result.output
    assert f"{photo.resolve()} 已完成缩放。" in result.output
    with Image.open(photo) as img:
        assert img.size == (1920, 1080)


def test_directory_with_aliases(tmp_path: Path) -> None:
    source = tmp_path / "input"
    output = tmp_path / "output"
    make_image(source / "a.png")
    make_image(source / "nested" / "b.jpeg")

    result = runner.invoke(
        app,
        [str(source), "-o", str(output), "--max", "50", "-s", "-q", "80", "--4:2:0", "--no-sharpen", "--shrink"],
    )

    assert result.exit_code == 0, result.output
    with Image.open(output / "nested" / "b.jpeg") as img:
        assert img.size == (50, 25)
    assert result.output.count("已完成缩放") == 2


def test_declined_overwrite_exits_zero(tmp_path: Path) -> None:
    photo = make_image(tmp_path / "photo.png")
    target = make_image(tmp_path / "existing.png", (10, 10))
    before = target.read_bytes()

    result = runner.invoke(app, [str(photo), "-o", str(target), "-m", "100"], input="n\n")

    assert result.exit_code == 0, result.output
    assert "是否覆盖" in result.output
    assert "已完成缩放" not in result.output
    assert target.read_bytes() == before


def test_corrupted_file_does_not_change_exit_code(tmp_path: Path) -> None:
    source = tmp_path / "input"
    make_image(source / "good.png")
    (source / "bad.png").write_text("nope")

    result = runner.invoke(app, [str(source), "-m", "100", "--single-thread"])

    assert result.exit_code == 0
    assert f"[error-identify] {source / 'bad.png'}" in result.output
    assert result.output.count("已完成缩放") == 1


@pytest.mark.parametrize(
    "extra",
    [
        ["--quality", "150"],
        ["--quality", "-1"],
        ["--side-maximum", "0"],
        ["--side-maximum", "70000"],
        ["--ppi", "0"],
        ["--ppi", "-3.5"],
    ],
)
def test_invalid_numbers_fail_before_traversal(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, extra: list[str]
) -> None:
    source = tmp_path / "input"
    make_image(source / "a.png")
    calls: list[Path] = []
    monkeypatch.setattr(pipeline, "collect_work_items", lambda root, *args: calls.append(root) or [])

    args = [str(source), "-m", "100", *extra]
    result = runner.invoke(app, args)

    assert result.exit_code == 1
    assert calls == []
    with Image.open(source / "a.png") as img:
        assert img.size == (400, 200)


def test_missing_input_is_fatal(tmp_path: Path) -> None:
    result = runner.invoke(app, [str(tmp_path / "nothing.jpg"), "-m", "100"])

    assert result.exit_code == 1
    assert "路径不存在" in result.output


def test_file_input_with_directory_output_is_fatal(tmp_path: Path) -> None:
    photo = make_image(tmp_path / "photo.png")
    folder = tmp_path / "folder"
    folder.mkdir()

    result = runner.invoke(app, [str(photo), "-o", str(folder), "-m", "100"])

    assert result.exit_code == 1
    with Image.open(photo) as img:
        assert img.size == (400, 200)


def test_side_maximum_is_required(tmp_path: Path) -> None:
    photo = make_image(tmp_path / "photo.png")

    result = runner.invoke(app, [str(photo)])

    assert result.exit_code != 0
