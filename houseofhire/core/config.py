"""
应用配置模块

使用 pydantic-settings 管理环境变量和应用配置
"""
from functools import lru_cache
from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
import json

# 项目根目录
BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """应用配置类"""
    
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )
    
    # 应用基础配置
    app_name: str = "HouseOfHire-API"
    app_env: str = "development"
    debug: bool = True
    
    # 数据库配置
    database_url: str = f"sqlite+aiosqlite:///{BASE_DIR / 'data' / 'houseofhire.db'}"
    
    # CORS 配置
    cors_origins: List[str] = ["*"]
    
    # 邮件服务配置（mail_base_url 为空时只在日志中输出邮件）
    mail_base_url: str = ""
    mail_timeout: float = 10.0
    
    # 平台信息（用于邮件模板）
    platform_name: str = "HouseOfHire"
    login_url: str = "http://localhost:3000/login"
    
    # 管理员代注册账号的临时密码长度
    temp_password_length: int = 12
    
    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v
    
    @field_validator("database_url", mode="before")
    @classmethod
    def fix_database_path(cls, v):
        if isinstance(v, str) and "./data/" in v:
            return v.replace("./data/", str(BASE_DIR / "data") + "/")
        return v
    
    @field_validator("mail_base_url", mode="before")
    @classmethod
    def strip_mail_base_url(cls, v):
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v
    
    @property
    def is_development(self) -> bool:
        """是否为开发环境"""
        return self.app_env == "development"


@lru_cache
def get_settings() -> Settings:
    """获取配置单例"""
    return Settings()


# 全局配置实例
settings = get_settings()
