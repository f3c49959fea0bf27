"""前処理パイプラインのロギングユーティリティ。"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from loguru import logger

if TYPE_CHECKING:
    from sysid.config import LoggingConfig

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(
    log_file: Optional[Path] = None,
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: str = "7 days",
    console: bool = True,
) -> dict[str, int]:
    """loguru ロガーを設定する。

    既存のハンドラはすべて削除される。

    Args:
        log_file: ログファイルへのパス。Noneの場合、ファイルログは無効化される。
        level: ログレベル（DEBUG、INFO、WARNING、ERROR）。
        rotation: ログローテーション設定。
        retention: ログ保持設定。
        console: コンソールログを有効化するかどうか。

    Returns:
        シンク名からシンクIDへの辞書（``shutdown_logger`` に渡す）。
    """
    logger.remove()

    sink_ids: dict[str, int] = {}

    if console:
        sink_ids["console"] = logger.add(
            sys.stderr,
            level=level,
            format=_CONSOLE_FORMAT,
            colorize=True,
        )

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        sink_ids["file"] = logger.add(
            log_file,
            level=level,
            format=_FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            encoding="utf-8",
        )

    return sink_ids


def setup_logger_from_config(config: "LoggingConfig", console: bool = True) -> dict[str, int]:
    """LoggingConfig からロガーを設定する。"""
    return setup_logger(log_file=config.log_file, level=config.level, console=console)


def get_logger(name: str = None):
    """ロガーインスタンスを取得する。

    Args:
        name: ロガー名（コンテキスト用）。

    Returns:
        ロガーインスタンス。
    """
    if name:
        return logger.bind(name=name)
    return logger


def shutdown_logger(sink_ids: dict[str, int] | None = None) -> None:
    """シンクを削除してファイルハンドルを閉じる。

    Args:
        sink_ids: ``setup_logger``が返す辞書。
    """
    if not sink_ids:
        return

    for sink_id in sink_ids.values():
        try:
            logger.remove(sink_id)
        except ValueError:
            # 既に削除済みのシンク
            continue


class LogContext:
    """ログメッセージにコンテキスト（フレーム名、ステップ名など）を追加するコンテキストマネージャ。"""

    def __init__(self, **context):
        self.context = context
        self._token = None

    def __enter__(self):
        self._token = logger.contextualize(**self.context)
        self._token.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token:
            self._token.__exit__(exc_type, exc_val, exc_tb)
        return False
