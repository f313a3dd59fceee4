# -*- coding: utf-8 -*-
"""
通知派发模块

dispatch() 立即返回，渲染与发送在独立的 asyncio 任务中执行：
- 不重试，失败只记录日志
- 持有任务引用，防止任务被提前回收
- drain() 用于关闭应用或测试时等待所有在途通知
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from typing import Optional, Set

from loguru import logger

from .mailer import MailClient, build_mail_client
from .messages import NotificationRequest, render_notification
from .templates import TemplateLoader


@dataclass
class DeliveryTicket:
    """
    派发凭据
    
    调用方可以选择观察发送结果（wait / delivered / error），
    但结果永远不会影响已提交的状态变更
    """
    id: int
    event: str
    recipient: str
    delivered: bool = False
    error: Optional[str] = None
    _task: Optional[asyncio.Task] = field(default=None, repr=False, compare=False)

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def wait(self) -> bool:
        """等待发送结束，返回是否成功"""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)
        return self.delivered


class NotificationDispatcher:
    """通知派发器（fire-and-forget，至多一次）"""

    def __init__(self, mail_client: MailClient, loader: Optional[TemplateLoader] = None):
        self.mail_client = mail_client
        self.loader = loader
        self._tasks: Set[asyncio.Task] = set()
        self._counter = itertools.count(1)
        self.sent_count = 0
        self.failed_count = 0

    def dispatch(self, request: NotificationRequest) -> DeliveryTicket:
        """
        派发一条通知，不等待发送结果
        
        必须在事件循环中调用
        """
        ticket = DeliveryTicket(
            id=next(self._counter),
            event=request.event.value,
            recipient=request.recipient,
        )
        task = asyncio.create_task(self._deliver(ticket, request))
        ticket._task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("通知已派发: #{} {}", ticket.id, request.describe())
        return ticket

    async def _deliver(self, ticket: DeliveryTicket, request: NotificationRequest) -> None:
        try:
            mail = render_notification(request, self.loader)
            await self.mail_client.send(mail)
        except asyncio.CancelledError:
            ticket.error = "cancelled"
            logger.warning("通知发送被取消: #{} {}", ticket.id, request.describe())
            raise
        except Exception as exc:
            self.failed_count += 1
            ticket.error = f"{type(exc).__name__}: {exc}"
            logger.opt(exception=exc).error("通知发送失败: #{} {}", ticket.id, request.describe())
            return
        ticket.delivered = True
        self.sent_count += 1
        logger.info("通知发送成功: #{} {}", ticket.id, request.describe())

    @property
    def pending(self) -> int:
        """在途通知数量"""
        return len(self._tasks)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """等待所有在途通知完成；超时后取消剩余任务"""
        if not self._tasks:
            return
        tasks = list(self._tasks)
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        if pending:
            logger.warning("仍有 {} 封通知未发送完成，已取消", len(pending))
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)


# ========== 全局单例 ==========

_dispatcher: NotificationDispatcher | None = None


def get_dispatcher() -> NotificationDispatcher:
    """获取全局 NotificationDispatcher 单例（FastAPI 依赖）"""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher(build_mail_client())
    return _dispatcher
