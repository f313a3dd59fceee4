"""
注册记录 CRUD 操作
"""
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.models.base import utcnow
from houseofhire.models.registration import Registration, AccountType
from .base import CRUDBase


class CRUDRegistration(CRUDBase[Registration]):
    """注册记录 CRUD 操作类"""
    
    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[Registration]:
        """根据邮箱获取注册记录（不区分大小写）"""
        result = await db.execute(
            select(self.model).where(self.model.email == email.lower())
        )
        return result.scalar_one_or_none()
    
    def _list_filters(self, account_type: Optional[AccountType], pending_only: bool) -> list:
        filters = []
        if account_type:
            filters.append(self.model.account_type == account_type)
        if pending_only:
            filters.append(self.model.approved == False)
            filters.append(self.model.cancelled == False)
        return filters
    
    async def list_registrations(
        self,
        db: AsyncSession,
        *,
        account_type: Optional[AccountType] = None,
        pending_only: bool = False,
        skip: int = 0,
        limit: int = 100
    ) -> List[Registration]:
        """注册列表；pending_only 时只返回待审核记录"""
        return await self.get_multi(
            db,
            skip=skip,
            limit=limit,
            filters=self._list_filters(account_type, pending_only),
        )
    
    async def count_registrations(
        self,
        db: AsyncSession,
        *,
        account_type: Optional[AccountType] = None,
        pending_only: bool = False
    ) -> int:
        return await self.count(db, filters=self._list_filters(account_type, pending_only))
    
    async def decide(
        self,
        db: AsyncSession,
        *,
        db_obj: Registration,
        approve: bool,
        narration: Optional[str],
        decided_by: str
    ) -> bool:
        """
        写入审核结果
        
        只有 approved 与 cancelled 均未置位时才会命中，
        并发的两次审核只有一次返回 True
        """
        return await self.conditional_update(
            db,
            db_obj=db_obj,
            conditions=[self.model.approved == False, self.model.cancelled == False],
            values={
                "approved": approve,
                "cancelled": not approve,
                "decision_narration": narration,
                "decided_by": decided_by,
                "decided_at": utcnow(),
            },
        )
    
    async def deactivate(
        self,
        db: AsyncSession,
        *,
        db_obj: Registration,
        reason: str
    ) -> bool:
        """停用账号；已停用时返回 False"""
        return await self.conditional_update(
            db,
            db_obj=db_obj,
            conditions=[self.model.is_active == True],
            values={
                "is_active": False,
                "deactivation_reason": reason,
                "deactivated_at": utcnow(),
            },
        )


registration_crud = CRUDRegistration(Registration)
