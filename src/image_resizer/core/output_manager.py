"""输出路径准备与覆盖确认。"""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path
from typing import Optional, TextIO

from image_resizer.core.exceptions import OutputDirectoryError, PromptError
from image_resizer.core.models import Decision

LOGGER = logging.getLogger(__name__)


class OverwriteGate:
    """进程内共享的覆盖确认入口。

    所有工作线程共用同一把锁和同一个标准输入。锁覆盖完整的
    “打印提示 → 刷新 → 读取 → 判定”循环，保证终端上每个文件的问答
    不会与其他文件的问答交错。
    """

    def __init__(self, input_stream: Optional[TextIO] = None, output_stream: Optional[TextIO] = None) -> None:
        self._input = input_stream
        self._output = output_stream
        self._lock = threading.Lock()

    @property
    def input_stream(self) -> TextIO:
        return self._input if self._input is not None else sys.stdin

    @property
    def output_stream(self) -> TextIO:
        return self._output if self._output is not None else sys.stdout

    def resolve(self, output_path: Path, force: bool) -> Decision:
        """决定是否可以写入 ``output_path``。"""

        if not output_path.exists():
            parent = output_path.parent
            try:
                parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise OutputDirectoryError(f"无法创建目录: {parent}") from exc
            return Decision.PROCEED

        if force:
            return Decision.PROCEED

        with self._lock:
            return self._prompt(output_path)

    def _prompt(self, output_path: Path) -> Decision:
        while True:
            try:
                self.output_stream.write(f"{output_path} 已存在，是否覆盖？[Y/N] ")
                self.output_stream.flush()
                line = self.input_stream.readline()
            except (OSError, ValueError) as exc:
                raise PromptError(f"无法读取覆盖确认: {output_path}") from exc

            if not line:
                # 输入结束，按“不覆盖”处理
                LOGGER.debug("标准输入已结束，跳过 %s", output_path)
                return Decision.SKIP

            token = line.strip().lower()
            if token.startswith("y"):
                return Decision.PROCEED
            if token.startswith("n"):
                return Decision.SKIP
