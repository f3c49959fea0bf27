"""入出力測定データのコンテナ（同定フレーム）"""

from __future__ import annotations

from dataclasses import FrozenInstanceError, dataclass
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from sysid.exceptions import FrameTypeError, InvalidArgumentError

ArrayLike = Union[pd.DataFrame, pd.Series, np.ndarray, Sequence[float], Sequence[Sequence[float]]]

# インデックス照合の許容誤差（サンプリング間隔に対する比）
_INDEX_TOL = 1e-9


@dataclass(frozen=True)
class TimeBase:
    """等間隔の時間軸（開始時刻、サンプリング間隔、サンプル数）"""

    start: float
    interval: float
    length: int

    def __post_init__(self):
        if not np.isfinite(self.interval) or self.interval <= 0:
            raise InvalidArgumentError(f"サンプリング間隔は正の値である必要があります: {self.interval}")
        if self.length < 0:
            raise InvalidArgumentError(f"サンプル数は0以上である必要があります: {self.length}")
        object.__setattr__(self, "start", float(self.start))
        object.__setattr__(self, "interval", float(self.interval))
        object.__setattr__(self, "length", int(self.length))

    @property
    def end(self) -> float:
        """最後のサンプルの時刻"""
        return self.start + (self.length - 1) * self.interval

    @property
    def frequency(self) -> float:
        """サンプリング周波数"""
        return 1.0 / self.interval

    def times(self) -> np.ndarray:
        """各サンプルの時刻を返す"""
        return self.start + np.arange(self.length) * self.interval

    def index(self) -> pd.Index:
        """DataFrame用の時刻インデックスを返す"""
        return pd.Index(self.times(), dtype=float, name="time")


def _as_channels(
    data: Optional[ArrayLike],
    index: pd.Index,
    names: Optional[Sequence[str]],
    prefix: str,
) -> pd.DataFrame:
    """配列やDataFrameを時刻インデックス付きのチャネル行列に変換"""
    if data is None:
        return pd.DataFrame(index=index, dtype=float)

    if isinstance(data, pd.Series):
        data = data.to_frame(name=data.name if data.name is not None else f"{prefix}1")

    if isinstance(data, pd.DataFrame):
        values = data.to_numpy()
        columns = [str(c) for c in data.columns]
    else:
        values = np.asarray(data)
        if values.ndim == 1:
            values = values.reshape(-1, 1)
        elif values.ndim != 2:
            raise InvalidArgumentError(f"チャネルデータは1次元または2次元である必要があります: ndim={values.ndim}")
        columns = [f"{prefix}{i + 1}" for i in range(values.shape[1])]

    if values.shape[1] == 0:
        return pd.DataFrame(index=index, dtype=float)

    if names is not None:
        if len(names) != values.shape[1]:
            raise InvalidArgumentError(
                f"チャネル名の数 ({len(names)}) がチャネル数 ({values.shape[1]}) と一致しません"
            )
        columns = [str(n) for n in names]

    if values.shape[0] != len(index):
        raise InvalidArgumentError(
            f"サンプル数 ({values.shape[0]}) が時間軸の長さ ({len(index)}) と一致しません"
        )

    try:
        values = values.astype(float)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"チャネルデータを数値に変換できません: {e}") from e

    return pd.DataFrame(values, index=index, columns=columns)


def _check_index(data: Optional[ArrayLike], time_base: TimeBase, side: str) -> None:
    """DataFrame/Seriesの時刻インデックスが時間軸と一致することを確認"""
    if not isinstance(data, (pd.DataFrame, pd.Series)) or len(data) != time_base.length:
        return

    try:
        times = np.asarray(data.index, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"{side}のインデックスを時刻に変換できません: {e}") from e

    if not np.allclose(times, time_base.times(), rtol=0.0, atol=_INDEX_TOL * time_base.interval):
        raise InvalidArgumentError(
            f"{side}のインデックスが時間軸 [{time_base.start:g}, {time_base.end:g}] "
            f"(間隔={time_base.interval:g}) と一致しません"
        )


class IdentificationFrame:
    """出力チャネル行列と入力チャネル行列が1つの時間軸を共有するコンテナ。

    各サイドは時刻インデックスを持つDataFrameで、列が1チャネルに対応する。
    どちらのサイドも0チャネルでよい。フレームは不変で、``output`` と
    ``input`` はコピーを返す。変換関数は常に新しいフレームを返す。

    Args:
        output: 出力チャネル行列（DataFrameの場合はインデックスが時間軸と一致すること）
        input: 入力チャネル行列（同上）
        time_base: 共有する時間軸
        time_unit: 時間の単位
    """

    __slots__ = ("_output", "_input", "_time_base", "_time_unit")

    def __init__(
        self,
        output: Optional[ArrayLike],
        input: Optional[ArrayLike],
        time_base: TimeBase,
        time_unit: str = "seconds",
    ):
        if not isinstance(time_base, TimeBase):
            raise InvalidArgumentError(f"TimeBaseが必要です: {type(time_base).__name__}")

        _check_index(output, time_base, "output")
        _check_index(input, time_base, "input")

        index = time_base.index()
        outputs = _as_channels(output, index, None, "y")
        inputs = _as_channels(input, index, None, "u")

        for side, df in (("output", outputs), ("input", inputs)):
            if df.columns.has_duplicates:
                dup = df.columns[df.columns.duplicated()].tolist()
                raise InvalidArgumentError(f"{side}のチャネル名が重複しています: {dup}")

        object.__setattr__(self, "_output", outputs)
        object.__setattr__(self, "_input", inputs)
        object.__setattr__(self, "_time_base", time_base)
        object.__setattr__(self, "_time_unit", str(time_unit))

    def __setattr__(self, name, value):
        raise FrozenInstanceError(f"cannot assign to field '{name}'")

    def __delattr__(self, name):
        raise FrozenInstanceError(f"cannot delete field '{name}'")

    def __repr__(self) -> str:
        return (
            f"IdentificationFrame(n_samples={self.n_samples}, outputs={self.output_names}, "
            f"inputs={self.input_names}, time_base={self._time_base!r}, time_unit={self._time_unit!r})"
        )

    @property
    def output(self) -> pd.DataFrame:
        """出力チャネル行列（コピー）"""
        return self._output.copy()

    @property
    def input(self) -> pd.DataFrame:
        """入力チャネル行列（コピー）"""
        return self._input.copy()

    @property
    def time_base(self) -> TimeBase:
        return self._time_base

    @property
    def time_unit(self) -> str:
        return self._time_unit

    @classmethod
    def from_arrays(
        cls,
        output: Optional[ArrayLike] = None,
        input: Optional[ArrayLike] = None,
        interval: float = 1.0,
        start: float = 0.0,
        output_names: Optional[Sequence[str]] = None,
        input_names: Optional[Sequence[str]] = None,
        time_unit: str = "seconds",
    ) -> "IdentificationFrame":
        """配列から同定フレームを作成

        Args:
            output: 出力データ（サンプル×チャネル、または1次元）
            input: 入力データ（サンプル×チャネル、または1次元）
            interval: サンプリング間隔
            start: 最初のサンプルの時刻
            output_names: 出力チャネル名（デフォルト: y1, y2, ...）
            input_names: 入力チャネル名（デフォルト: u1, u2, ...）
            time_unit: 時間の単位

        Returns:
            IdentificationFrame
        """
        lengths = [len(d) for d in (output, input) if d is not None]
        if not lengths:
            raise InvalidArgumentError("出力または入力のどちらかのデータが必要です")
        if len(set(lengths)) != 1:
            raise InvalidArgumentError(f"出力と入力のサンプル数が一致しません: {lengths}")

        time_base = TimeBase(start=start, interval=interval, length=lengths[0])
        index = time_base.index()
        return cls(
            output=_as_channels(output, index, output_names, "y"),
            input=_as_channels(input, index, input_names, "u"),
            time_base=time_base,
            time_unit=time_unit,
        )

    @property
    def n_samples(self) -> int:
        return self.time_base.length

    @property
    def n_output_series(self) -> int:
        return self._output.shape[1]

    @property
    def n_input_series(self) -> int:
        return self._input.shape[1]

    @property
    def output_names(self) -> List[str]:
        return list(self._output.columns)

    @property
    def input_names(self) -> List[str]:
        return list(self._input.columns)

    def output_data(self) -> pd.DataFrame:
        """出力チャネル行列のコピーを返す"""
        return self._output.copy()

    def input_data(self) -> pd.DataFrame:
        """入力チャネル行列のコピーを返す"""
        return self._input.copy()

    def time(self) -> np.ndarray:
        """時刻座標を返す"""
        return self.time_base.times()

    def with_output(self, data: Optional[ArrayLike]) -> "IdentificationFrame":
        """出力チャネル行列を置き換えた新しいフレームを返す"""
        return IdentificationFrame(
            output=_replacement(data, self._output, self.time_base, "output"),
            input=self._input,
            time_base=self.time_base,
            time_unit=self.time_unit,
        )

    def with_input(self, data: Optional[ArrayLike]) -> "IdentificationFrame":
        """入力チャネル行列を置き換えた新しいフレームを返す"""
        return IdentificationFrame(
            output=self._output,
            input=_replacement(data, self._input, self.time_base, "input"),
            time_base=self.time_base,
            time_unit=self.time_unit,
        )

    def with_time_base(
        self,
        time_base: TimeBase,
        output: Optional[ArrayLike],
        input: Optional[ArrayLike],
    ) -> "IdentificationFrame":
        """新しい時間軸上のフレームを作成（チャネル名と単位は引き継ぐ）"""
        index = time_base.index()
        return IdentificationFrame(
            output=_as_channels(output, index, self.output_names if self.n_output_series else None, "y"),
            input=_as_channels(input, index, self.input_names if self.n_input_series else None, "u"),
            time_base=time_base,
            time_unit=self.time_unit,
        )

    def summary(self) -> str:
        """フレームの概要文字列を生成"""
        tb = self.time_base
        lines = [
            "=== Identification Frame ===",
            f"Samples: {tb.length:,}",
            f"Time range: {tb.start:g} to {tb.end:g} {self.time_unit} (interval={tb.interval:g})",
            f"Outputs ({self.n_output_series}): {self.output_names}",
            f"Inputs ({self.n_input_series}): {self.input_names}",
        ]
        return "\n".join(lines)


def _replacement(
    data: Optional[ArrayLike],
    current: pd.DataFrame,
    time_base: TimeBase,
    side: str,
) -> pd.DataFrame:
    _check_index(data, time_base, side)
    index = time_base.index()
    prefix = "y" if side == "output" else "u"
    # 列数が同じ配列なら既存のチャネル名を引き継ぐ
    if data is not None and not isinstance(data, (pd.DataFrame, pd.Series)):
        values = np.asarray(data)
        n_cols = 1 if values.ndim == 1 else values.shape[1]
        if n_cols == current.shape[1]:
            return _as_channels(values, index, list(current.columns), prefix)
    return _as_channels(data, index, None, prefix)


def ensure_frame(obj: object) -> IdentificationFrame:
    """オブジェクトがIdentificationFrameであることを確認"""
    if not isinstance(obj, IdentificationFrame):
        raise FrameTypeError(f"IdentificationFrameではありません: {type(obj).__name__}")
    return obj
