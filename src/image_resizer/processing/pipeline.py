"""处理流水线：路径检查、扫描与并发执行。"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Optional

import typer

from image_resizer.core.config import JobConfig, RunConfig, validate_run_config
from image_resizer.core.exceptions import PromptError, SetupError
from image_resizer.core.models import BatchResult, FileOutcome, PathKind, WorkItem
from image_resizer.core.output_manager import OverwriteGate
from image_resizer.core.scanner import classify, collect_work_items
from image_resizer.processing.worker import run_item

LOGGER = logging.getLogger(__name__)


OutcomeReporter = Optional[Callable[[FileOutcome], None]]


def echo_outcome(outcome: FileOutcome) -> None:
    """默认输出：成功写 stdout，失败写 stderr，跳过不输出。"""

    if outcome.is_success:
        typer.echo(f"{_display_path(outcome.output_path)} 已完成缩放。")
    elif not outcome.is_skip:
        typer.echo(f"[{outcome.status}] {outcome.source_path}: {outcome.message}", err=True)


def prepare_items(config: JobConfig) -> list[WorkItem]:
    """校验输入/输出路径并生成任务列表，失败时抛出 SetupError。"""

    validate_run_config(config.options)
    source = config.source
    output = config.output
    kind = classify(source)

    if kind is PathKind.FILE:
        if output is not None and output.is_dir():
            raise SetupError(f"{output} 是一个目录。")
        return [WorkItem(input_path=source, output_path=output)]

    if output is not None:
        if output.exists() and not output.is_dir():
            raise SetupError(f"{output} 不是一个目录。")
        try:
            output.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SetupError(f"无法创建输出目录: {output}") from exc

    return collect_work_items(source, output, config.options.allow_gif)


def process_batch(
    config: JobConfig,
    gate: Optional[OverwriteGate] = None,
    reporter: OutcomeReporter = echo_outcome,
) -> BatchResult:
    """批量处理入口：扫描后按单线程或线程池执行。"""

    items = prepare_items(config)
    LOGGER.info("发现 %d 个候选图片文件", len(items))

    gate = gate or OverwriteGate()
    result = BatchResult(succeeded=[], skipped=[], failed=[])

    if config.single_thread or len(items) <= 1:
        for item in items:
            _record(_run_guarded(item, config.options, gate), result, reporter)
        return result

    workers = config.worker_count()
    LOGGER.debug("使用 %d 个工作线程", workers)
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="resizer")
    try:
        futures = [executor.submit(_run_guarded, item, config.options, gate) for item in items]
        for future in as_completed(futures):
            try:
                outcome = future.result()
            except PromptError:
                executor.shutdown(wait=True, cancel_futures=True)
                raise
            _record(outcome, result, reporter)
    finally:
        executor.shutdown(wait=True)

    return result


def _run_guarded(item: WorkItem, options: RunConfig, gate: OverwriteGate) -> FileOutcome:
    """单个任务的兜底：意外异常只影响当前文件，PromptError 继续向上抛出。"""

    try:
        return run_item(item, options, gate)
    except PromptError:
        raise
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("任务执行异常：%s", item.input_path)
        return FileOutcome(source_path=item.input_path, status="error-worker", message=str(exc))


def _record(outcome: FileOutcome, result: BatchResult, reporter: OutcomeReporter) -> None:
    result.record(outcome)
    if reporter:
        reporter(outcome)


def _display_path(path: Optional[Path]) -> str:
    if path is None:
        return ""
    try:
        return str(path.resolve(strict=True))
    except OSError:
        return str(path)

