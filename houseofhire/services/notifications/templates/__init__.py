# -*- coding: utf-8 -*-
"""
邮件模板包。
"""

from .loader import TemplateLoader, get_template_loader

__all__ = [
    "TemplateLoader",
    "get_template_loader",
]
