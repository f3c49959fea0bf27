"""同定フレームの前処理モジュール"""

from sysid.preprocessing.trend import (
    TrendType,
    TrendInfo,
    detrend,
    retrend,
)
from sysid.preprocessing.impute import (
    interpolate_missing,
    fill_missing,
    get_series_missing_report,
    get_missing_report,
)
from sysid.preprocessing.slicing import (
    data_slice,
    split_frame,
)
from sysid.preprocessing.pipeline import (
    PreprocessingResult,
    preprocess_frame,
)

__all__ = [
    "TrendType",
    "TrendInfo",
    "detrend",
    "retrend",
    "interpolate_missing",
    "fill_missing",
    "get_series_missing_report",
    "get_missing_report",
    "data_slice",
    "split_frame",
    "PreprocessingResult",
    "preprocess_frame",
]
