# -*- coding: utf-8 -*-
"""
通知消息模块

NotificationRequest 只携带事件类型、收件人和渲染所需的上下文，
真正的渲染（render_notification）在派发任务中执行，
渲染失败只会影响这一封邮件
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from houseofhire.core.config import settings
from .templates import TemplateLoader, get_template_loader

TEMPLATE_FILE = "emails"


class NotificationEvent(str, Enum):
    """通知事件类型"""
    ACCOUNT_STATUS = "account_status"            # 注册审核结果
    ACCOUNT_CREDENTIALS = "account_credentials"  # 管理员代注册的登录凭据
    INTERVIEW_OUTCOME = "interview_outcome"      # 面试轮次结果
    APPLICATION_STATUS = "application_status"    # 申请状态变更


@dataclass(frozen=True)
class NotificationRequest:
    """一封待发送的通知"""
    event: NotificationEvent
    recipient: str
    context: Dict[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        """日志中使用的摘要（不含上下文，避免输出密码）"""
        return f"{self.event.value} -> {self.recipient}"


@dataclass(frozen=True)
class RenderedMail:
    """渲染完成的邮件"""
    to: str
    subject: str
    html: str


def _escape_context(context: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: html.escape(value) if isinstance(value, str) else value
        for key, value in context.items()
    }


def _template_keys(request: NotificationRequest) -> tuple[str, str, Optional[str]]:
    """返回 (模板前缀, 强调色, 正文消息键)"""
    event = request.event
    ctx = request.context
    if event is NotificationEvent.ACCOUNT_STATUS:
        status = ctx["status"]
        accent = "positive" if status == "approved" else "negative"
        return f"{event.value}.{status}", accent, None
    if event is NotificationEvent.INTERVIEW_OUTCOME:
        return event.value, "default", f"{event.value}.messages.{ctx['outcome']}"
    if event is NotificationEvent.APPLICATION_STATUS:
        return event.value, "default", f"{event.value}.messages.{ctx['status']}"
    return event.value, "default", None


def render_notification(
    request: NotificationRequest,
    loader: Optional[TemplateLoader] = None,
) -> RenderedMail:
    """
    渲染通知邮件
    
    Raises:
        KeyError: 模板或模板变量缺失
    """
    loader = loader or get_template_loader()
    values = _escape_context(request.context)
    values.setdefault("platform_name", html.escape(settings.platform_name))
    values.setdefault("login_url", html.escape(settings.login_url))
    if not values.get("narration"):
        values["narration"] = "Not specified."
    values["year"] = datetime.now(timezone.utc).year

    prefix, accent, message_key = _template_keys(request)
    if message_key is not None:
        values["message"] = loader.get(TEMPLATE_FILE, message_key, **values)

    subject = html.unescape(loader.get(TEMPLATE_FILE, f"{prefix}.subject", **values))
    headline = loader.get(TEMPLATE_FILE, f"{prefix}.headline", **values)
    body = loader.get(TEMPLATE_FILE, f"{prefix}.body", **values)
    page = loader.get(
        TEMPLATE_FILE,
        "layout.html",
        title=headline,
        headline=headline,
        accent=loader.get_raw(TEMPLATE_FILE, f"layout.accents.{accent}"),
        body=body,
        platform_name=values["platform_name"],
        year=values["year"],
    )
    return RenderedMail(to=request.recipient, subject=subject, html=page)
