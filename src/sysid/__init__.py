"""sysid - システム同定用の入出力データ前処理（トレンド除去、欠損値補間、切り出し）"""

__version__ = "0.1.0"
__author__ = "SysId Preprocessing Team"

from sysid.config import (
    SysIdConfig,
    PreprocessingConfig,
    SliceConfig,
    ImputeConfig,
    DetrendConfig,
    LoggingConfig,
    load_config,
)
from sysid.exceptions import (
    InvalidArgumentError,
    FrameTypeError,
    MissingDependencyError,
)
from sysid.frame import IdentificationFrame, TimeBase
from sysid.preprocessing import (
    TrendType,
    TrendInfo,
    detrend,
    retrend,
    fill_missing,
    data_slice,
    split_frame,
    preprocess_frame,
)

__all__ = [
    "__version__",
    "SysIdConfig",
    "PreprocessingConfig",
    "SliceConfig",
    "ImputeConfig",
    "DetrendConfig",
    "LoggingConfig",
    "load_config",
    "InvalidArgumentError",
    "FrameTypeError",
    "MissingDependencyError",
    "IdentificationFrame",
    "TimeBase",
    "TrendType",
    "TrendInfo",
    "detrend",
    "retrend",
    "fill_missing",
    "data_slice",
    "split_frame",
    "preprocess_frame",
]
