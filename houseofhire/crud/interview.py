"""
面试轮次 CRUD 操作
"""
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.models.base import utcnow
from houseofhire.models.interview import InterviewSession, RoundStatus, RoundOutcome
from .base import CRUDBase


class CRUDInterview(CRUDBase[InterviewSession]):
    """面试轮次 CRUD 操作类"""
    
    async def get_rounds(
        self,
        db: AsyncSession,
        job_id: str,
        applicant_id: str
    ) -> List[InterviewSession]:
        """获取 (岗位, 求职者) 的全部轮次（按申请先后、轮次正序）"""
        result = await db.execute(
            select(self.model)
            .where(self.model.job_id == job_id, self.model.applicant_id == applicant_id)
            .order_by(self.model.created_at.asc(), self.model.round_number.asc())
        )
        return list(result.scalars().all())
    
    async def get_latest_round(
        self,
        db: AsyncSession,
        application_id: str
    ) -> Optional[InterviewSession]:
        """获取该申请最近一轮面试"""
        result = await db.execute(
            select(self.model)
            .where(self.model.application_id == application_id)
            .order_by(self.model.round_number.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
    
    def _list_filters(
        self,
        job_id: Optional[str],
        applicant_id: Optional[str],
        status: Optional[RoundStatus]
    ) -> list:
        filters = []
        if job_id:
            filters.append(self.model.job_id == job_id)
        if applicant_id:
            filters.append(self.model.applicant_id == applicant_id)
        if status:
            filters.append(self.model.status == status)
        return filters
    
    async def list_sessions(
        self,
        db: AsyncSession,
        *,
        job_id: Optional[str] = None,
        applicant_id: Optional[str] = None,
        status: Optional[RoundStatus] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[InterviewSession]:
        return await self.get_multi(
            db,
            skip=skip,
            limit=limit,
            order_by=self.model.scheduled_at.asc(),
            filters=self._list_filters(job_id, applicant_id, status),
        )
    
    async def count_sessions(
        self,
        db: AsyncSession,
        *,
        job_id: Optional[str] = None,
        applicant_id: Optional[str] = None,
        status: Optional[RoundStatus] = None
    ) -> int:
        return await self.count(db, filters=self._list_filters(job_id, applicant_id, status))
    
    async def close(
        self,
        db: AsyncSession,
        *,
        db_obj: InterviewSession,
        outcome: RoundOutcome,
        closing_narration: str,
        closed_by: str
    ) -> bool:
        """结束面试；只有仍为 SCHEDULED 的轮次会命中"""
        return await self.conditional_update(
            db,
            db_obj=db_obj,
            conditions=[self.model.status == RoundStatus.SCHEDULED],
            values={
                "status": RoundStatus(outcome.value),
                "closing_narration": closing_narration,
                "closed_by": closed_by,
                "closed_at": utcnow(),
            },
        )


interview_crud = CRUDInterview(InterviewSession)
