"""設定に基づく前処理パイプライン（切り出し → 欠損値補間 → トレンド除去）"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd
from loguru import logger

from sysid.config import PreprocessingConfig
from sysid.frame import IdentificationFrame, ensure_frame
from sysid.preprocessing.impute import fill_missing, get_missing_report
from sysid.preprocessing.slicing import data_slice
from sysid.preprocessing.trend import TrendInfo, TrendType, detrend
from sysid.utils.logging import LogContext
from sysid.utils.profiling import StepTimer, TimingResult, time_it


@dataclass
class PreprocessingResult:
    """前処理パイプラインの結果。"""

    frame: IdentificationFrame
    trend: Optional[TrendInfo]
    missing_report: pd.DataFrame
    timings: List[TimingResult] = field(default_factory=list)

    @property
    def steps(self) -> List[str]:
        """実行したステップ名"""
        return [t.name for t in self.timings]


@time_it(name="preprocess_frame")
def preprocess_frame(
    frame: IdentificationFrame,
    config: Optional[PreprocessingConfig] = None,
    trend: Optional[TrendInfo] = None,
    name: str = "frame",
) -> PreprocessingResult:
    """設定に従ってフレームを前処理

    ``trend`` を指定した場合はトレンドを再推定せずにそのまま適用する。
    学習データで得たトレンドを検証データに適用する場合に使う。

    Args:
        frame: 入力フレーム
        config: 前処理設定。Noneの場合はデフォルト設定
        trend: 適用するTrendInfo（Noneの場合は設定に従って推定）
        name: ログ用のフレーム名

    Returns:
        PreprocessingResult
    """
    frame = ensure_frame(frame)
    config = config or PreprocessingConfig()
    timer = StepTimer()
    result_trend: Optional[TrendInfo] = None

    with LogContext(frame=name):
        logger.info(
            f"{name}: 前処理を開始（{frame.n_samples}サンプル、"
            f"出力{frame.n_output_series}ch、入力{frame.n_input_series}ch）"
        )

        if not config.slice.is_identity:
            with timer.step("slice"):
                frame = data_slice(
                    frame,
                    start=config.slice.start,
                    end=config.slice.end,
                    freq=config.slice.freq,
                )

        missing_report = get_missing_report(frame)
        n_missing = int(missing_report["missing_count"].sum())

        if config.impute.method != "none" and n_missing > 0:
            with timer.step("impute"):
                frame = fill_missing(frame, method=config.impute.method, order=config.impute.order)
        elif n_missing > 0:
            logger.warning(f"{name}: {n_missing}個の欠損値が補間されずに残っています")

        if trend is not None:
            with timer.step("detrend"):
                frame, result_trend = detrend(frame, trend)
        elif config.detrend.type != "none":
            with timer.step("detrend"):
                frame, result_trend = detrend(frame, TrendType.coerce(config.detrend.type))

        logger.info(f"{name}: 前処理が完了しました（ステップ: {[s.name for s in timer.steps]}）")

    return PreprocessingResult(
        frame=frame,
        trend=result_trend,
        missing_report=missing_report,
        timings=list(timer.steps),
    )
