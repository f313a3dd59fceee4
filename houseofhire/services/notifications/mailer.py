# -*- coding: utf-8 -*-
"""
邮件发送客户端模块

- HttpMailClient: 调用外部邮件服务 POST {mail_base_url}/mail/triggerMail
- ConsoleMailClient: 未配置邮件服务时只把邮件输出到日志（开发环境）
"""

from __future__ import annotations

from typing import Optional, Protocol

import httpx
from loguru import logger

from houseofhire.core.config import settings
from .messages import RenderedMail


class MailDeliveryError(Exception):
    """邮件服务调用失败"""


class MailClient(Protocol):
    """邮件发送协议"""

    async def send(self, mail: RenderedMail) -> None:
        ...


class HttpMailClient:
    """
    外部邮件服务客户端。
    
    请求体: {"formatType": "html", "message": ..., "subject": ..., "to": ...}
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/mail/triggerMail"

    async def send(self, mail: RenderedMail) -> None:
        """
        发送一封邮件
        
        Raises:
            MailDeliveryError: 网络错误或非 2xx 响应
        """
        payload = {
            "formatType": "html",
            "message": mail.html,
            "subject": mail.subject,
            "to": mail.to,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(self.endpoint, json=payload)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "邮件服务调用失败: status={}, response={}",
                    exc.response.status_code,
                    exc.response.text[:500],
                )
                raise MailDeliveryError(f"邮件服务返回 {exc.response.status_code}") from exc
            except httpx.HTTPError as exc:
                logger.error("邮件服务调用异常: {}", exc)
                raise MailDeliveryError(str(exc)) from exc


class ConsoleMailClient:
    """开发环境邮件客户端：只记录日志，不真正发送"""

    async def send(self, mail: RenderedMail) -> None:
        logger.info(
            "\n{}\n📧 EMAIL (console)\nTo: {}\nSubject: {}\n{}\n{}",
            "=" * 60,
            mail.to,
            mail.subject,
            "-" * 60,
            mail.html,
        )


def build_mail_client() -> MailClient:
    """根据配置创建邮件客户端"""
    if settings.mail_base_url:
        logger.info("Mail client: HTTP ({})", settings.mail_base_url)
        return HttpMailClient(settings.mail_base_url, timeout=settings.mail_timeout)
    logger.warning("MAIL_BASE_URL 未配置，邮件只输出到日志")
    return ConsoleMailClient()
