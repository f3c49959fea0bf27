"""オフセットと線形トレンドの除去・再適用"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple, Union

import numpy as np
import pandas as pd
import statsmodels.api as sm
from loguru import logger

from sysid.exceptions import InvalidArgumentError
from sysid.frame import IdentificationFrame, ensure_frame


class TrendType(Enum):
    """フィットするトレンドの種類"""

    MEAN = 0
    LINEAR = 1

    @classmethod
    def coerce(cls, value: Any) -> "TrendType":
        """TrendType、0/1（0.0/1.0 も可）、"mean"/"linear" を TrendType に変換"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        elif isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, (bool, np.bool_)):
            # 整数値の浮動小数点数のみ（NaN・無限大・0.5などは不可）
            if not np.isfinite(value) or not float(value).is_integer():
                raise InvalidArgumentError(f"不正なトレンド種別です (invalid trend type): {value!r}")
            try:
                return cls(int(value))
            except ValueError:
                pass
        raise InvalidArgumentError(f"不正なトレンド種別です (invalid trend type): {value!r}")


def _frozen_array(values: Any) -> np.ndarray:
    arr = np.array(values, dtype=float).reshape(-1)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class TrendInfo:
    """チャネルごとのトレンド係数（オフセットと傾き）。

    ``detrend`` がデータから計算するか、呼び出し側が指定して同じトレンドを
    別のデータ区間に適用するために使う。作成後は変更されない。

    Attributes:
        input_offset: 入力チャネルごとのオフセット
        input_slope: 入力チャネルごとの傾き
        output_offset: 出力チャネルごとのオフセット
        output_slope: 出力チャネルごとの傾き
    """

    input_offset: np.ndarray = field(default_factory=lambda: np.zeros(0))
    input_slope: np.ndarray = field(default_factory=lambda: np.zeros(0))
    output_offset: np.ndarray = field(default_factory=lambda: np.zeros(0))
    output_slope: np.ndarray = field(default_factory=lambda: np.zeros(0))

    def __post_init__(self):
        for name in ("input_offset", "input_slope", "output_offset", "output_slope"):
            object.__setattr__(self, name, _frozen_array(getattr(self, name)))

        if len(self.input_offset) != len(self.input_slope):
            raise InvalidArgumentError(
                f"入力のオフセット数 ({len(self.input_offset)}) と傾き数 ({len(self.input_slope)}) が一致しません"
            )
        if len(self.output_offset) != len(self.output_slope):
            raise InvalidArgumentError(
                f"出力のオフセット数 ({len(self.output_offset)}) と傾き数 ({len(self.output_slope)}) が一致しません"
            )

    @property
    def n_input_series(self) -> int:
        return len(self.input_offset)

    @property
    def n_output_series(self) -> int:
        return len(self.output_offset)

    def to_dict(self) -> Dict[str, list]:
        """辞書に変換する。"""
        return {
            "input_offset": self.input_offset.tolist(),
            "input_slope": self.input_slope.tolist(),
            "output_offset": self.output_offset.tolist(),
            "output_slope": self.output_slope.tolist(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrendInfo":
        """辞書から作成する。"""
        return cls(
            input_offset=data.get("input_offset", []),
            input_slope=data.get("input_slope", []),
            output_offset=data.get("output_offset", []),
            output_slope=data.get("output_slope", []),
        )


DetrendMode = Union[TrendType, TrendInfo, int, str]


def _resolve_mode(mode: DetrendMode) -> Union[TrendType, TrendInfo]:
    if isinstance(mode, TrendInfo):
        return mode
    return TrendType.coerce(mode)


def _trend_matrix(t: np.ndarray, offset: np.ndarray, slope: np.ndarray) -> np.ndarray:
    """各チャネルのトレンド offset + slope * t を行列として返す"""
    return offset[np.newaxis, :] + slope[np.newaxis, :] * t[:, np.newaxis]


def _fit_mean(data: pd.DataFrame) -> Tuple[np.ndarray, np.ndarray]:
    offset = data.mean(axis=0, skipna=True).to_numpy(dtype=float)
    return offset, np.zeros(data.shape[1])


def _fit_linear(data: pd.DataFrame, t: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """各チャネルを時刻に対して最小二乗回帰する（チャネル間は独立）"""
    X = sm.add_constant(t, has_constant="add")
    offset = np.empty(data.shape[1])
    slope = np.empty(data.shape[1])

    for i, col in enumerate(data.columns):
        y = data[col].to_numpy(dtype=float)
        n_valid = int(np.isfinite(y).sum())
        if n_valid < 2:
            raise InvalidArgumentError(
                f"チャネル '{col}' の線形トレンド推定には2点以上の有効なサンプルが必要です（{n_valid}点）"
            )
        fit = sm.OLS(y, X, missing="drop").fit()
        offset[i], slope[i] = fit.params

    return offset, slope


def _check_channels(side: str, n_data: int, n_trend: int) -> None:
    if n_data != n_trend:
        raise InvalidArgumentError(
            f"{side}のチャネル数 ({n_data}) がトレンド情報のチャネル数 ({n_trend}) と一致しません"
        )


def detrend(
    frame: IdentificationFrame,
    mode: DetrendMode = TrendType.MEAN,
) -> Tuple[IdentificationFrame, TrendInfo]:
    """同定フレームからオフセットまたは線形トレンドを除去

    Args:
        frame: 入力フレーム
        mode: 除去するトレンド:
            - TrendType.MEAN (0, "mean"): 各チャネルの平均値を引く
            - TrendType.LINEAR (1, "linear"): 時刻に対する最小二乗直線を引く
            - TrendInfo: 指定されたトレンドを引く（再推定はしない）

    Returns:
        (トレンド除去後のフレーム, 使用したTrendInfo) のタプル

    Raises:
        InvalidArgumentError: 不正なトレンド種別、またはチャネル数の不一致

    Example:
        >>> train, test = split_frame(frame, at=450.0)
        >>> ztrain, tr = detrend(train)
        >>> ztest, _ = detrend(test, tr)
    """
    frame = ensure_frame(frame)
    resolved = _resolve_mode(mode)
    t = frame.time()

    if isinstance(resolved, TrendInfo):
        if frame.n_output_series:
            _check_channels("出力", frame.n_output_series, resolved.n_output_series)
        if frame.n_input_series:
            _check_channels("入力", frame.n_input_series, resolved.n_input_series)
        trend = resolved
        logger.debug(
            f"指定されたトレンドを適用しています（出力{frame.n_output_series}ch、入力{frame.n_input_series}ch）"
        )
    else:
        fits = {}
        for side, data in (("output", frame.output), ("input", frame.input)):
            if data.shape[1] == 0:
                fits[side] = (np.zeros(0), np.zeros(0))
            elif resolved is TrendType.MEAN:
                fits[side] = _fit_mean(data)
            else:
                fits[side] = _fit_linear(data, t)

        trend = TrendInfo(
            input_offset=fits["input"][0],
            input_slope=fits["input"][1],
            output_offset=fits["output"][0],
            output_slope=fits["output"][1],
        )
        logger.debug(
            f"{resolved.name}トレンドを推定しました（出力{frame.n_output_series}ch、入力{frame.n_input_series}ch）"
        )

    result = frame
    if frame.n_output_series:
        fit = _trend_matrix(t, trend.output_offset, trend.output_slope)
        result = result.with_output(frame.output.to_numpy() - fit)
    if frame.n_input_series:
        fit = _trend_matrix(t, trend.input_offset, trend.input_slope)
        result = result.with_input(frame.input.to_numpy() - fit)

    return result, trend


def retrend(frame: IdentificationFrame, trend: TrendInfo) -> IdentificationFrame:
    """除去済みのトレンドをフレームに加え戻す

    トレンド除去後のデータで得た予測値などを元の物理量に戻すために使う。

    Args:
        frame: トレンド除去済みのフレーム
        trend: ``detrend`` が返したTrendInfo

    Returns:
        トレンドを加えたフレーム
    """
    frame = ensure_frame(frame)
    if not isinstance(trend, TrendInfo):
        raise InvalidArgumentError(f"TrendInfoが必要です: {type(trend).__name__}")

    t = frame.time()
    result = frame
    if frame.n_output_series:
        _check_channels("出力", frame.n_output_series, trend.n_output_series)
        fit = _trend_matrix(t, trend.output_offset, trend.output_slope)
        result = result.with_output(frame.output.to_numpy() + fit)
    if frame.n_input_series:
        _check_channels("入力", frame.n_input_series, trend.n_input_series)
        fit = _trend_matrix(t, trend.input_offset, trend.input_slope)
        result = result.with_input(frame.input.to_numpy() + fit)

    return result
