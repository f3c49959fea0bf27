"""同定フレームの欠損値補間ユーティリティ"""

from __future__ import annotations

import importlib.util
from typing import Literal

import numpy as np
import pandas as pd
from loguru import logger

from sysid.exceptions import InvalidArgumentError, MissingDependencyError
from sysid.frame import IdentificationFrame, ensure_frame

InterpMethod = Literal["linear", "spline", "pchip", "akima"]

# scipyが必要な補間方法
_SCIPY_METHODS = {"spline", "pchip", "akima"}


def _require_backend(method: str) -> None:
    if method in _SCIPY_METHODS and importlib.util.find_spec("scipy") is None:
        raise MissingDependencyError("scipy", f"'{method}'補間")


def interpolate_missing(
    series: pd.Series,
    method: InterpMethod = "linear",
    order: int = 3,
) -> pd.Series:
    """1チャネルの内部欠損を補間

    両側に既知の値がある欠損のみを補間し、先頭と末尾の欠損は外挿せずに残す。
    開始時刻・終了時刻・サンプリング間隔は系列のインデックスから取得する。

    Args:
        series: 時刻インデックスを持つ入力系列
        method: 補間方法:
            - 'linear': 時刻に対する線形補間
            - 'spline': スプライン補間（scipyが必要）
            - 'pchip': 区分的3次エルミート補間（scipyが必要）
            - 'akima': 秋間補間（scipyが必要）
        order: スプライン補間の次数

    Returns:
        内部の欠損値が補間された系列

    Raises:
        InvalidArgumentError: 不明な補間方法
        MissingDependencyError: 補間方法に必要なライブラリがない
    """
    if method not in {"linear"} | _SCIPY_METHODS:
        raise InvalidArgumentError(f"不明な補間方法: {method}")
    _require_backend(method)

    n_missing = int(series.isna().sum())
    if n_missing == 0:
        return series.copy()

    logger.debug(f"{series.name}: {method}を使用して{n_missing}個の欠損値を補間しています")

    if method == "linear":
        return series.interpolate(method="index", limit_area="inside")

    n_valid = len(series) - n_missing
    min_points = order + 1 if method == "spline" else 2
    if n_valid < min_points:
        raise InvalidArgumentError(
            f"{series.name}: '{method}'補間には{min_points}点以上の有効なサンプルが必要です（{n_valid}点）"
        )

    kwargs = {"order": order} if method == "spline" else {}
    return series.interpolate(method=method, limit_area="inside", **kwargs)


def _fill_side(data: pd.DataFrame, method: InterpMethod, order: int) -> pd.DataFrame:
    return pd.DataFrame(
        {col: interpolate_missing(data[col], method=method, order=order) for col in data.columns},
        index=data.index,
    )


def fill_missing(
    frame: IdentificationFrame,
    method: InterpMethod = "linear",
    order: int = 3,
) -> IdentificationFrame:
    """同定フレームの全チャネルの欠損値を補間

    各チャネルを独立に補間する。時間軸は変更しない。

    Args:
        frame: 入力フレーム
        method: 補間方法（``interpolate_missing`` を参照）
        order: スプライン補間の次数

    Returns:
        欠損値が補間された新しいフレーム
    """
    frame = ensure_frame(frame)
    if method not in {"linear"} | _SCIPY_METHODS:
        raise InvalidArgumentError(f"不明な補間方法: {method}")
    _require_backend(method)

    result = frame
    if frame.n_output_series:
        result = result.with_output(_fill_side(frame.output, method, order))
    if frame.n_input_series:
        result = result.with_input(_fill_side(frame.input, method, order))

    remaining = int(result.output.isna().sum().sum() + result.input.isna().sum().sum())
    if remaining:
        logger.debug(f"先頭または末尾の{remaining}個の欠損値は補間されずに残っています")

    return result


def get_series_missing_report(series: pd.Series) -> dict:
    """系列の欠損値に関するレポートを生成

    Args:
        series: 入力系列

    Returns:
        欠損値統計を含む辞書
    """
    total = len(series)
    is_missing = series.isna().to_numpy()
    missing = int(is_missing.sum())

    # ギャップ長を検索
    gaps = []
    gap_start = None

    for i, is_na in enumerate(is_missing):
        if is_na and gap_start is None:
            gap_start = i
        elif not is_na and gap_start is not None:
            gaps.append(i - gap_start)
            gap_start = None

    if gap_start is not None:
        gaps.append(total - gap_start)

    valid = np.flatnonzero(~is_missing)
    if len(valid) == 0:
        leading, trailing = total, 0
    else:
        leading = int(valid[0])
        trailing = int(total - 1 - valid[-1])

    return {
        "total_count": total,
        "missing_count": missing,
        "missing_rate": missing / total if total > 0 else 0.0,
        "num_gaps": len(gaps),
        "max_gap": max(gaps) if gaps else 0,
        "leading_missing": leading,
        "trailing_missing": trailing,
        "interior_missing": missing - leading - trailing,
    }


def get_missing_report(frame: IdentificationFrame) -> pd.DataFrame:
    """フレームの全チャネルの欠損値レポートを生成

    Args:
        frame: 入力フレーム

    Returns:
        チャネルごとの欠損値統計（列: side, channel, total_count, ...）
    """
    frame = ensure_frame(frame)
    rows = []
    for side, data in (("output", frame.output), ("input", frame.input)):
        for col in data.columns:
            rows.append({"side": side, "channel": col, **get_series_missing_report(data[col])})

    columns = [
        "side", "channel", "total_count", "missing_count", "missing_rate", "num_gaps",
        "max_gap", "leading_missing", "trailing_missing", "interior_missing",
    ]
    return pd.DataFrame(rows, columns=columns)
