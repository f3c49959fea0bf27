"""Pydanticベースの前処理設定モデル"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


class SliceConfig(BaseModel):
    """時間範囲の切り出しとリサンプリングの設定"""

    start: Optional[float] = Field(default=None, description="開始時刻（Noneの場合は先頭）")
    end: Optional[float] = Field(default=None, description="終了時刻（Noneの場合は末尾）")
    freq: Optional[float] = Field(
        default=None,
        description="元のサンプリング周波数に対する比（0.5で間隔が2倍）。Noneの場合は変更なし",
    )

    @field_validator("freq")
    @classmethod
    def check_freq(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError(f"freqは正の値である必要があります: {v}")
        return v

    @property
    def is_identity(self) -> bool:
        """切り出しもリサンプリングも行わない設定かどうか"""
        return self.start is None and self.end is None and self.freq is None


class ImputeConfig(BaseModel):
    """欠損値補間の設定"""

    method: Literal["linear", "spline", "pchip", "akima", "none"] = Field(
        default="linear", description="欠損値の補間方法"
    )
    order: int = Field(default=3, ge=1, description="スプライン補間の次数")


class DetrendConfig(BaseModel):
    """トレンド除去の設定"""

    type: Literal["mean", "linear", "none"] = Field(default="mean", description="除去するトレンドの種類")


class PreprocessingConfig(BaseModel):
    """前処理パイプラインの設定（切り出し → 欠損値補間 → トレンド除去）"""

    slice: SliceConfig = Field(default_factory=SliceConfig)
    impute: ImputeConfig = Field(default_factory=ImputeConfig)
    detrend: DetrendConfig = Field(default_factory=DetrendConfig)


class LoggingConfig(BaseModel):
    """ログ出力の設定"""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="ログレベル")
    log_file: Optional[Path] = Field(default=None, description="ログファイルのパス（Noneの場合はコンソールのみ）")

    @field_validator("log_file", mode="before")
    @classmethod
    def convert_to_path(cls, v: Any) -> Optional[Path]:
        if isinstance(v, str):
            return Path(v)
        return v


class SysIdConfig(BaseModel):
    """システム同定前処理のメイン設定モデル"""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "SysIdConfig":
        """YAMLファイルから設定を読み込む"""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"設定ファイルが見つかりません: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    def to_yaml(self, path: Path | str) -> None:
        """設定をYAMLファイルに保存"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False, allow_unicode=True)

    def merge_with(self, override: Dict[str, Any]) -> "SysIdConfig":
        """現在の設定とオーバーライド辞書をマージ"""
        current = self.model_dump()
        _deep_merge(current, override)
        return SysIdConfig.model_validate(current)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """オーバーライド辞書をベース辞書に深くマージ"""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def load_config(path: Optional[Path | str] = None, overrides: Optional[Dict[str, Any]] = None) -> SysIdConfig:
    """ファイルから設定を読み込み、オプションでオーバーライドを適用

    Args:
        path: YAML設定ファイルのパス。Noneの場合はデフォルト設定を使用
        overrides: オーバーライド値の辞書

    Returns:
        SysIdConfigインスタンス
    """
    if path is not None:
        config = SysIdConfig.from_yaml(path)
    else:
        config = SysIdConfig()

    if overrides:
        config = config.merge_with(overrides)

    return config
