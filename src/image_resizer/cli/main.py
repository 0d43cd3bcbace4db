"""命令行入口。"""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from image_resizer.core.config import DEFAULT_QUALITY, JobConfig, RunConfig
from image_resizer.core.exceptions import ImageResizerError
from image_resizer.processing.pipeline import echo_outcome, process_batch
from image_resizer.utils.logging import setup_logging

LOGGER = logging.getLogger(__name__)

EXAMPLES = """\
示例:

  image-resizer /path/to/image -m 1920                          # 原地缩放单张图片

  image-resizer /path/to/folder -m 1920                         # 原地缩放目录内所有图片

  image-resizer /path/to/image -o /path/to/image2 -m 1920       # 缩放后保存为 /path/to/image2

  image-resizer /path/to/folder -o /path/to/folder2 -m 1920     # 缩放目录内图片并保存到 /path/to/folder2

  image-resizer /path/to/folder -o /path/to/folder2 -f -m 1920  # 同上，但不做覆盖确认

  image-resizer /path/to/folder --allow-gif -r -m 1920          # 包含 GIF，并保留色彩配置文件

  image-resizer /path/to/image -m 1920 --shrink                 # 只缩小，不放大

  image-resizer /path/to/image -m 1920 -q 75                    # 有损压缩质量设为 75

  image-resizer /path/to/image -m 1920 --4:2:0                  # 使用 4:2:0 色度抽样以减小文件

  image-resizer /path/to/image -m 1920 --no-sharpen             # 不自动锐化

  image-resizer /path/to/image -m 1920 --ppi 150                # 将 PPI 设为 150
"""

app = typer.Typer(help="批量缩放图片（保持宽高比）并适度锐化。", epilog=EXAMPLES)

err_console = Console(stderr=True, highlight=False, soft_wrap=True)


def _version_callback(value: bool) -> None:
    if not value:
        return
    try:
        typer.echo(version("image-resizer"))
    except PackageNotFoundError:
        typer.echo("unknown")
    raise typer.Exit()


@app.command("run")
def run_cli(  # noqa: PLR0913
    source: Path = typer.Argument(..., help="需要缩放的图片文件或目录"),
    side_maximum: int = typer.Option(
        ..., "--side-maximum", "-m", "--max", help="每条边的最大像素数（保持宽高比）"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="输出位置，根据输入为文件或目录而定"
    ),
    single_thread: bool = typer.Option(False, "--single-thread", "-s", help="只使用一个线程"),
    force: bool = typer.Option(False, "--force", "-f", help="直接覆盖已存在的文件"),
    allow_gif: bool = typer.Option(False, "--allow-gif", help="同时处理 GIF"),
    remain_profile: bool = typer.Option(False, "--remain-profile", "-r", help="保留图片的色彩配置文件与元数据"),
    only_shrink: bool = typer.Option(False, "--only-shrink", "--shrink", help="只缩小，不放大"),
    no_sharpen: bool = typer.Option(False, "--no-sharpen", help="禁用自动锐化"),
    quality: int = typer.Option(DEFAULT_QUALITY, "--quality", "-q", help="有损压缩质量 (0~100)"),
    ppi: Optional[float] = typer.Option(None, "--ppi", help="设置像素密度 (ppi)"),
    chroma_quartered: bool = typer.Option(
        False, "--chroma-quartered", "--4:2:0", help="在支持的格式上使用 4:2:0 色度抽样以减小文件"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
    show_version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="显示版本号"
    ),
) -> None:
    """缩放单张图片或目录内的所有图片。"""

    setup_logging(logging.DEBUG if verbose else logging.WARNING)
    LOGGER.debug("CLI 参数解析完成")

    options = RunConfig(
        side_maximum=side_maximum,
        allow_gif=allow_gif,
        remain_profile=remain_profile,
        force=force,
        only_shrink=only_shrink,
        sharpen=not no_sharpen,
        quality=quality,
        ppi=ppi,
        chroma_quartered=chroma_quartered,
    )
    job = JobConfig(
        source=source.expanduser().absolute(),
        output=output.expanduser().absolute() if output else None,
        options=options,
        single_thread=single_thread,
    )

    try:
        result = process_batch(job, reporter=echo_outcome)
    except ImageResizerError as exc:
        err_console.print(f"[bold red]错误：[/bold red]{escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    LOGGER.info(
        "处理完成：成功 %d 张，跳过 %d 张，失败 %d 张。",
        len(result.succeeded),
        len(result.skipped),
        len(result.failed),
    )


if __name__ == "__main__":
    app()
