"""システム同定前処理の例外クラス"""

from __future__ import annotations


class InvalidArgumentError(ValueError):
    """不正な引数（トレンド種別、スライス範囲、チャネル数の不一致など）"""


class FrameTypeError(InvalidArgumentError, TypeError):
    """IdentificationFrame以外のオブジェクトが渡された"""


class MissingDependencyError(ImportError):
    """補間に必要なライブラリが利用できない"""

    def __init__(self, package: str, purpose: str = ""):
        self.package = package
        message = f"パッケージ '{package}' が必要です"
        if purpose:
            message += f"（{purpose}）"
        message += "。インストールしてください。"
        super().__init__(message, name=package)
