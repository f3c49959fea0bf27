"""同定フレームの時間範囲の切り出しとリサンプリング"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import pandas as pd
from loguru import logger

from sysid.exceptions import InvalidArgumentError
from sysid.frame import IdentificationFrame, TimeBase, ensure_frame

# 時刻比較の相対許容誤差（サンプリング間隔に対する比）
_TIME_TOL = 1e-9


def _window_positions(
    time_base: TimeBase,
    start: Optional[float],
    end: Optional[float],
) -> Tuple[int, int]:
    """start <= t <= end を満たす最初と最後のサンプル位置を返す"""
    if time_base.length == 0:
        raise InvalidArgumentError("空のフレームは切り出せません")

    lo = time_base.start if start is None else float(start)
    hi = time_base.end if end is None else float(end)

    if lo > hi:
        raise InvalidArgumentError(f"開始時刻 ({lo:g}) が終了時刻 ({hi:g}) より後です")

    tol = _TIME_TOL * time_base.interval
    if lo > time_base.end + tol or hi < time_base.start - tol:
        raise InvalidArgumentError(
            f"指定範囲 [{lo:g}, {hi:g}] がフレームの時間範囲 "
            f"[{time_base.start:g}, {time_base.end:g}] と重なりません"
        )

    # 範囲外の指定は時間範囲にクランプ
    lo = max(lo, time_base.start)
    hi = min(hi, time_base.end)

    first = int(np.ceil((lo - time_base.start) / time_base.interval - _TIME_TOL))
    last = int(np.floor((hi - time_base.start) / time_base.interval + _TIME_TOL))
    if last < first:
        raise InvalidArgumentError(f"指定範囲 [{lo:g}, {hi:g}] にサンプルが含まれません")

    return first, last


def _decimation_step(freq: float) -> Optional[int]:
    """1/freq が整数なら間引き幅を返す"""
    ratio = 1.0 / freq
    step = int(round(ratio))
    if step >= 1 and abs(ratio - step) <= _TIME_TOL * ratio:
        return step
    return None


def _interp_side(data: pd.DataFrame, times: np.ndarray, grid: np.ndarray) -> np.ndarray:
    values = np.empty((len(grid), data.shape[1]))
    for i, col in enumerate(data.columns):
        values[:, i] = np.interp(grid, times, data[col].to_numpy(dtype=float))
    return values


def data_slice(
    frame: IdentificationFrame,
    start: Optional[float] = None,
    end: Optional[float] = None,
    freq: Optional[float] = None,
) -> IdentificationFrame:
    """同定フレームを時間範囲で切り出し、必要ならリサンプリング

    出力側と入力側は同じ範囲・同じ周波数で処理されるため、呼び出し後も
    時刻は揃ったままになる。チャネル名と順序は保持される。

    Args:
        frame: 入力フレーム
        start: 開始時刻（Noneの場合は最初のサンプル）。範囲外ならクランプ
        end: 終了時刻（Noneの場合は最後のサンプル）。範囲外ならクランプ
        freq: 元のサンプリング周波数に対する比（例: 0.5で間隔が2倍）。
            1/freq が整数ならサンプルを間引き、それ以外は新しい等間隔の
            時刻に線形補間する。Noneの場合は元の間隔のまま

    Returns:
        切り出された新しいフレーム

    Raises:
        FrameTypeError: frameがIdentificationFrameではない
        InvalidArgumentError: start > end、サンプルを含まない範囲、freq <= 0

    Example:
        >>> sub = data_slice(frame, start=200, end=400)
        >>> half = data_slice(frame, freq=0.5)
    """
    frame = ensure_frame(frame)
    if freq is not None and (not np.isfinite(freq) or freq <= 0):
        raise InvalidArgumentError(f"freqは正の値である必要があります: {freq}")

    tb = frame.time_base
    first, last = _window_positions(tb, start, end)
    window_start = tb.start + first * tb.interval

    step = 1 if freq is None else _decimation_step(freq)

    if step is not None:
        positions = np.arange(first, last + 1, step)
        new_tb = TimeBase(start=window_start, interval=tb.interval * step, length=len(positions))
        output = frame.output.to_numpy()[positions]
        inputs = frame.input.to_numpy()[positions]
    else:
        new_interval = tb.interval / freq
        span = (last - first) * tb.interval
        length = int(np.floor(span / new_interval + _TIME_TOL)) + 1
        new_tb = TimeBase(start=window_start, interval=new_interval, length=length)

        times = frame.time()[first:last + 1]
        grid = new_tb.times()
        output = _interp_side(frame.output.iloc[first:last + 1], times, grid)
        inputs = _interp_side(frame.input.iloc[first:last + 1], times, grid)

    logger.debug(
        f"フレームを切り出しました: [{new_tb.start:g}, {new_tb.end:g}] "
        f"間隔={new_tb.interval:g}、{tb.length}→{new_tb.length}サンプル"
    )

    return frame.with_time_base(new_tb, output=output, input=inputs)


def split_frame(frame: IdentificationFrame, at: float) -> Tuple[IdentificationFrame, IdentificationFrame]:
    """フレームを時刻 ``at`` で学習用と検証用に分割

    Args:
        frame: 入力フレーム
        at: 分割時刻。t <= at が学習用、t > at が検証用

    Returns:
        (学習用フレーム, 検証用フレーム) のタプル
    """
    frame = ensure_frame(frame)
    tb = frame.time_base
    n_train = int(np.sum(frame.time() <= at + _TIME_TOL * tb.interval))
    if n_train == 0 or n_train >= tb.length:
        raise InvalidArgumentError(
            f"分割時刻 {at:g} はフレームの時間範囲 [{tb.start:g}, {tb.end:g}) の内側である必要があります"
        )

    train = data_slice(frame, end=tb.start + (n_train - 1) * tb.interval)
    test = data_slice(frame, start=tb.start + n_train * tb.interval)
    return train, test
