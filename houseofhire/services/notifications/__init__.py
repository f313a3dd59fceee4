# -*- coding: utf-8 -*-
"""
通知服务包。

生命周期操作提交后派发邮件通知，发送失败不影响已提交的状态变更。
"""

from .messages import NotificationEvent, NotificationRequest, RenderedMail, render_notification
from .mailer import MailClient, HttpMailClient, ConsoleMailClient, MailDeliveryError, build_mail_client
from .dispatcher import NotificationDispatcher, DeliveryTicket, get_dispatcher

__all__ = [
    "NotificationEvent",
    "NotificationRequest",
    "RenderedMail",
    "render_notification",
    "MailClient",
    "HttpMailClient",
    "ConsoleMailClient",
    "MailDeliveryError",
    "build_mail_client",
    "NotificationDispatcher",
    "DeliveryTicket",
    "get_dispatcher",
]
