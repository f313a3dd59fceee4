# -*- coding: utf-8 -*-
"""
邮件模板加载器模块。

提供 YAML 格式邮件模板的加载、缓存和模板变量替换功能。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml
from loguru import logger


class TemplateLoader:
    """
    邮件模板加载器。
    
    支持：
    - YAML 模板文件加载
    - 模板变量替换（{variable} 语法，CSS 中的花括号需写成 {{ }}）
    - 内置缓存机制
    """

    def __init__(self, base_path: Path | str | None = None):
        """
        初始化加载器。
        
        Args:
            base_path: YAML 文件所在目录，默认为当前模块目录
        """
        if base_path is None:
            base_path = Path(__file__).parent
        self.base_path = Path(base_path)
        self._cache: Dict[str, Dict[str, Any]] = {}

    def load(self, name: str) -> Dict[str, Any]:
        """
        加载指定名称的 YAML 模板文件。
        
        Args:
            name: 模板文件名（不含 .yaml 后缀）
            
        Returns:
            解析后的模板字典
            
        Raises:
            FileNotFoundError: 模板文件不存在
            yaml.YAMLError: YAML 解析失败
        """
        if name in self._cache:
            return self._cache[name]

        file_path = self.base_path / f"{name}.yaml"
        if not file_path.exists():
            raise FileNotFoundError(f"邮件模板文件不存在: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            self._cache[name] = data
            return data
        except yaml.YAMLError as e:
            logger.error("解析 YAML 失败 {}: {}", file_path, e)
            raise


    def get_raw(self, name: str, key: str) -> Any:
        """按点号分隔的键取出原始值"""
        value: Any = self.load(name)
        for part in key.split("."):
            if not isinstance(value, dict):
                raise KeyError(f"无法在 {name} 中访问 '{key}': 中间值不是字典")
            if part not in value:
                raise KeyError(f"模板键不存在: {name}.{key}")
            value = value[part]
        return value

    def get(self, name: str, key: str, **kwargs) -> str:
        """
        获取指定的模板并进行变量替换。
        
        与 prompt 不同，邮件模板缺少变量时直接抛出 KeyError，
        避免把未替换的占位符发给用户
        
        Args:
            name: 模板文件名（不含 .yaml 后缀）
            key: 模板键名（支持点号分隔的嵌套键，如 "account_status.approved.subject"）
            **kwargs: 模板变量的值
        """
        value = self.get_raw(name, key)
        if not isinstance(value, str):
            raise TypeError(f"期望字符串类型的模板，但 {name}.{key} 是 {type(value).__name__}")

        try:
            return value.format(**kwargs)
        except KeyError as e:
            logger.error("邮件模板变量缺失: {} in {}.{}", e, name, key)
            raise


# ========== 全局单例 ==========

_loader: TemplateLoader | None = None


def get_template_loader() -> TemplateLoader:
    """
    获取全局 TemplateLoader 单例。
    
    模板在首次使用时读取并缓存；派发任务中不再访问文件系统
    """
    global _loader
    if _loader is None:
        _loader = TemplateLoader()
    return _loader
