"""
岗位 CRUD 操作
"""
from datetime import date
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.models.job import JobPosting, JobStatus
from .base import CRUDBase


class CRUDJob(CRUDBase[JobPosting]):
    """岗位 CRUD 操作类"""
    
    def _list_filters(self, open_only: bool, recruiter_id: Optional[str]) -> list:
        filters = []
        if open_only:
            filters.append(self.model.status == JobStatus.OPEN)
            filters.append(self.model.deadline >= date.today())
        if recruiter_id:
            filters.append(self.model.recruiter_id == recruiter_id)
        return filters
    
    async def list_jobs(
        self,
        db: AsyncSession,
        *,
        open_only: bool = False,
        recruiter_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[JobPosting]:
        """岗位列表；open_only 时只返回开放且未过截止日期的岗位"""
        return await self.get_multi(
            db,
            skip=skip,
            limit=limit,
            filters=self._list_filters(open_only, recruiter_id),
        )
    
    async def count_jobs(
        self,
        db: AsyncSession,
        *,
        open_only: bool = False,
        recruiter_id: Optional[str] = None
    ) -> int:
        return await self.count(db, filters=self._list_filters(open_only, recruiter_id))
    
    async def close(self, db: AsyncSession, *, db_obj: JobPosting) -> bool:
        """关闭岗位；已关闭时返回 False"""
        return await self.conditional_update(
            db,
            db_obj=db_obj,
            conditions=[self.model.status == JobStatus.OPEN],
            values={"status": JobStatus.CLOSED},
        )


job_crud = CRUDJob(JobPosting)
