"""
测试公共工具

固定的操作者身份与记录型邮件客户端，供 conftest 和各测试模块共用
"""
from typing import List

from houseofhire.services.lifecycle import Actor, ActorRole
from houseofhire.services.notifications import RenderedMail
from houseofhire.services.notifications.mailer import MailDeliveryError


ADMIN = Actor(id="admin-1", role=ActorRole.ADMIN)


def actor_headers(actor_id: str, role: str) -> dict:
    """构造操作者身份请求头"""
    return {"X-Actor-Id": actor_id, "X-Actor-Role": role}


ADMIN_HEADERS = actor_headers(ADMIN.id, "admin")


class RecordingMailClient:
    """
    测试用邮件客户端
    
    记录所有发送的邮件；fail=True 时模拟邮件服务故障
    """
    
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[RenderedMail] = []
        self.attempts = 0
    
    async def send(self, mail: RenderedMail) -> None:
        self.attempts += 1
        if self.fail:
            raise MailDeliveryError("mail service unavailable")
        self.sent.append(mail)
    
    def to(self, recipient: str) -> List[RenderedMail]:
        return [m for m in self.sent if m.to == recipient]
    
    def clear(self) -> None:
        self.sent.clear()
        self.attempts = 0
