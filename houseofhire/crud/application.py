"""
投递申请 CRUD 操作
"""
from typing import Optional, List
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.models.application import (
    JobApplication,
    ApplicationStatus,
    ApplicationStatusHistory,
    TERMINAL_STATUSES,
)
from .base import CRUDBase


class CRUDApplication(CRUDBase[JobApplication]):
    """投递申请 CRUD 操作类"""
    
    async def get_active_for_pair(
        self,
        db: AsyncSession,
        job_id: str,
        applicant_id: str
    ) -> Optional[JobApplication]:
        """获取 (岗位, 求职者) 当前的非终态申请"""
        result = await db.execute(
            select(self.model)
            .where(
                self.model.job_id == job_id,
                self.model.applicant_id == applicant_id,
                self.model.status.not_in(list(TERMINAL_STATUSES)),
            )
        )
        return result.scalar_one_or_none()
    
    async def next_application_no(self, db: AsyncSession) -> int:
        """下一个申请编号（唯一约束兜底并发）"""
        result = await db.execute(select(func.max(self.model.application_no)))
        return (result.scalar() or 0) + 1
    
    def _list_filters(
        self,
        job_id: Optional[str],
        applicant_id: Optional[str],
        status: Optional[ApplicationStatus]
    ) -> list:
        filters = []
        if job_id:
            filters.append(self.model.job_id == job_id)
        if applicant_id:
            filters.append(self.model.applicant_id == applicant_id)
        if status:
            filters.append(self.model.status == status)
        return filters
    
    async def list_applications(
        self,
        db: AsyncSession,
        *,
        job_id: Optional[str] = None,
        applicant_id: Optional[str] = None,
        status: Optional[ApplicationStatus] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[JobApplication]:
        """按岗位/求职者/状态筛选申请"""
        return await self.get_multi(
            db,
            skip=skip,
            limit=limit,
            order_by=self.model.application_no.desc(),
            filters=self._list_filters(job_id, applicant_id, status),
        )
    
    async def count_applications(
        self,
        db: AsyncSession,
        *,
        job_id: Optional[str] = None,
        applicant_id: Optional[str] = None,
        status: Optional[ApplicationStatus] = None
    ) -> int:
        return await self.count(db, filters=self._list_filters(job_id, applicant_id, status))
    
    async def compare_and_set_status(
        self,
        db: AsyncSession,
        *,
        db_obj: JobApplication,
        expected: ApplicationStatus,
        target: ApplicationStatus,
        narration: Optional[str]
    ) -> bool:
        """仅当状态仍为 expected 时改为 target"""
        return await self.conditional_update(
            db,
            db_obj=db_obj,
            conditions=[self.model.status == expected],
            values={"status": target, "status_narration": narration},
        )
    
    async def add_history(
        self,
        db: AsyncSession,
        *,
        application_id: str,
        from_status: Optional[ApplicationStatus],
        to_status: ApplicationStatus,
        actor_id: str,
        actor_role: str,
        narration: Optional[str] = None
    ) -> ApplicationStatusHistory:
        """追加一条状态流转记录"""
        record = ApplicationStatusHistory(
            application_id=application_id,
            from_status=from_status,
            to_status=to_status,
            actor_id=actor_id,
            actor_role=actor_role,
            narration=narration,
        )
        db.add(record)
        await db.flush()
        return record
    
    async def get_history(
        self,
        db: AsyncSession,
        application_id: str
    ) -> List[ApplicationStatusHistory]:
        """获取申请的完整流转记录（按时间正序）"""
        result = await db.execute(
            select(ApplicationStatusHistory)
            .where(ApplicationStatusHistory.application_id == application_id)
            .order_by(ApplicationStatusHistory.created_at.asc())
        )
        return list(result.scalars().all())


application_crud = CRUDApplication(JobApplication)
