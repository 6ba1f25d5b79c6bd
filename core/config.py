"""
配置管理系统

支持:
1. 环境变量读取
2. .env 文件
3. 类型验证
4. 敏感信息脱敏
"""
from functools import lru_cache
from typing import Optional, List, Tuple
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """大语言模型配置"""
    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        extra="ignore"
    )

    api_key: Optional[str] = Field(default=None, description="API 密钥")
    base_url: Optional[str] = Field(default=None, description="兼容 OpenAI 的服务地址（覆盖默认）")
    model: str = Field(default="gpt-4o", description="模型名称")
    timeout: float = Field(default=30.0, gt=0, le=600, description="单次请求超时（秒）")
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0, description="采样温度")
    fallback_answer: str = Field(default="No answer provided", description="回复无法解析时的兜底回答")


class LoggingSettings(BaseSettings):
    """日志配置"""
    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        extra="ignore"
    )

    level: str = Field(default="INFO", description="日志级别")
    format: str = Field(default="json", description="日志格式: json, console")
    file_path: Optional[str] = Field(default=None, description="日志文件路径")
    max_size_mb: int = Field(default=100, ge=1, le=1000, description="日志文件最大大小 (MB)")
    backup_count: int = Field(default=7, ge=1, le=30, description="保留日志文件数")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in allowed:
            raise ValueError(f"日志级别必须是 {allowed} 之一")
        return v


class ViewerSettings(BaseSettings):
    """3D 查看器配置"""
    model_config = SettingsConfigDict(
        env_prefix="VIEWER_",
        extra="ignore"
    )

    atom_radius: float = Field(default=0.5, gt=0, description="原子球半径")
    bond_radius: float = Field(default=0.1, gt=0, description="化学键圆柱半径")
    bond_color: int = Field(default=0xCCCCCC, ge=0, le=0xFFFFFF, description="化学键颜色")
    lone_pair_radius: float = Field(default=0.15, gt=0, description="孤对电子标记半径")
    lone_pair_color: int = Field(default=0xFFFF00, ge=0, le=0xFFFFFF, description="孤对电子标记颜色")
    angle_color: int = Field(default=0x00FF00, ge=0, le=0xFFFFFF, description="键角弧线颜色")
    arc_radius_fraction: float = Field(default=0.3, gt=0, le=1.0, description="键角弧半径占较短键长的比例")
    background: int = Field(default=0x000000, ge=0, le=0xFFFFFF, description="背景色")
    sphere_resolution: int = Field(default=32, ge=8, le=128, description="球体分辨率")
    window_width: int = Field(default=1024, ge=200, description="窗口宽度")
    window_height: int = Field(default=768, ge=200, description="窗口高度")

    bond_length_factor: float = Field(default=1.0, gt=0, description="默认键长缩放因子")
    bond_length_factor_min: float = Field(default=0.5, gt=0, description="滑块最小值")
    bond_length_factor_max: float = Field(default=2.0, gt=0, description="滑块最大值")

    @model_validator(mode="after")
    def validate_factor_range(self) -> "ViewerSettings":
        if not self.bond_length_factor_min <= self.bond_length_factor <= self.bond_length_factor_max:
            raise ValueError("bond_length_factor 必须位于滑块范围内")
        return self

    @property
    def window_size(self) -> Tuple[int, int]:
        return (self.window_width, self.window_height)


class Settings(BaseSettings):
    """
    主配置类

    层级:
    1. 环境变量 (最高优先级)
    2. .env 文件
    3. 默认值 (最低优先级)

    使用示例:
    >>> settings = Settings()
    >>> print(settings.llm.model)
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 应用基础配置
    app_name: str = Field(default="MolView", description="应用名称")
    app_version: str = Field(default="0.1.0", description="应用版本")
    debug: bool = Field(default=False, description="调试模式")
    environment: str = Field(default="development", description="运行环境: development, staging, production")

    # API 配置
    api_host: str = Field(default="0.0.0.0", description="API 监听地址")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API 监听端口")
    api_prefix: str = Field(default="/api", description="API 路径前缀")
    cors_origins: str = Field(default="*", description="CORS 允许的源，逗号分隔")

    # 启动时是否写入内置分子（水、甲烷）
    seed_predefined: bool = Field(default=True, description="启动时载入内置分子")

    # 子配置
    llm: LLMSettings = Field(default_factory=LLMSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    viewer: ViewerSettings = Field(default_factory=ViewerSettings)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "staging", "production"}
        v = v.lower()
        if v not in allowed:
            raise ValueError(f"环境必须是 {allowed} 之一")
        return v

    @property
    def cors_origin_list(self) -> List[str]:
        """解析 CORS 源列表"""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def display_config(self) -> dict:
        """返回脱敏后的配置（用于日志/调试）"""
        return {
            "app_name": self.app_name,
            "app_version": self.app_version,
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "api_prefix": self.api_prefix,
            "llm_model": self.llm.model,
            "llm_base_url": self.llm.base_url,
            "llm_timeout": self.llm.timeout,
            "llm_api_key_set": bool(self.llm.api_key),
        }


@lru_cache()
def get_settings() -> Settings:
    """获取配置单例（缓存）"""
    return Settings()
