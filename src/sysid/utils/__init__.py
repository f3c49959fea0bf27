"""システム同定前処理のユーティリティモジュール"""

from sysid.utils.logging import setup_logger, setup_logger_from_config, shutdown_logger, get_logger, LogContext
from sysid.utils.profiling import StepTimer, TimingResult, time_it

__all__ = [
    "setup_logger",
    "setup_logger_from_config",
    "shutdown_logger",
    "get_logger",
    "LogContext",
    "StepTimer",
    "TimingResult",
    "time_it",
]
