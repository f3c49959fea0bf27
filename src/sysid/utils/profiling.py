"""前処理ステップの処理時間計測ユーティリティ。"""

from __future__ import annotations

import functools
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from loguru import logger


@dataclass
class TimingResult:
    """タイミング測定の結果。"""

    name: str
    start_time: datetime
    end_time: datetime
    duration_seconds: float


class StepTimer:
    """処理ステップを追跡するためのタイマー。"""

    def __init__(self):
        self.steps: List[TimingResult] = []
        self._current_step: Optional[str] = None
        self._step_start: Optional[datetime] = None
        self._perf_start: float = 0.0

    def start_step(self, name: str) -> "StepTimer":
        """ステップのタイミング測定を開始する。

        Args:
            name: ステップ名。

        Returns:
            チェーン用の自身。
        """
        if self._current_step:
            self.end_step()

        self._current_step = name
        self._step_start = datetime.now()
        self._perf_start = time.perf_counter()
        logger.debug(f"ステップを開始: {name}")
        return self

    def end_step(self) -> Optional[TimingResult]:
        """現在のステップを終了する。

        Returns:
            ステップのタイミング結果。実行中のステップがなければNone。
        """
        if not self._current_step or not self._step_start:
            return None

        result = TimingResult(
            name=self._current_step,
            start_time=self._step_start,
            end_time=datetime.now(),
            duration_seconds=time.perf_counter() - self._perf_start,
        )

        self.steps.append(result)
        logger.debug(f"ステップ '{self._current_step}' を完了: {result.duration_seconds:.4f}秒")

        self._current_step = None
        self._step_start = None

        return result

    @contextmanager
    def step(self, name: str):
        """ステップのタイミング測定用コンテキストマネージャ。"""
        self.start_step(name)
        try:
            yield
        finally:
            self.end_step()

    def summary(self) -> Dict[str, Any]:
        """タイミングサマリーを取得する。"""
        if not self.steps:
            return {"total_seconds": 0, "steps": []}

        total = sum(s.duration_seconds for s in self.steps)

        return {
            "total_seconds": total,
            "steps": [
                {
                    "name": s.name,
                    "duration_seconds": s.duration_seconds,
                    "percent": (s.duration_seconds / total * 100) if total > 0 else 0,
                }
                for s in self.steps
            ],
        }


def time_it(func: Callable = None, *, name: str = None):
    """関数実行時間をDEBUGログに出力するデコレータ。

    Args:
        func: デコレートする関数。
        name: ログ用のオプション名。
    """
    def decorator(f):
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            func_name = name or f.__name__
            start = time.perf_counter()
            try:
                result = f(*args, **kwargs)
            except Exception as e:
                logger.error(f"{func_name} が {time.perf_counter() - start:.4f}秒 後に失敗: {e}")
                raise
            logger.debug(f"{func_name} が {time.perf_counter() - start:.4f}秒 で完了")
            return result
        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
