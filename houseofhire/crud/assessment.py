"""
评估项与评估记录 CRUD 操作
"""
from typing import Optional, List, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from houseofhire.models.assessment import Assessment, AssessmentType
from .base import CRUDBase


class CRUDAssessmentType(CRUDBase[AssessmentType]):
    """评估项字典 CRUD 操作类"""
    
    async def get_by_name(self, db: AsyncSession, name: str) -> Optional[AssessmentType]:
        result = await db.execute(
            select(self.model).where(self.model.name == name)
        )
        return result.scalar_one_or_none()
    
    async def list_all(self, db: AsyncSession) -> List[AssessmentType]:
        """按名称排序的全部评估项"""
        result = await db.execute(select(self.model).order_by(self.model.name.asc()))
        return list(result.scalars().all())


class CRUDAssessment(CRUDBase[Assessment]):
    """评估记录 CRUD 操作类（联合主键，不使用基类的 get）"""
    
    async def get_for_type(
        self,
        db: AsyncSession,
        interview_id: str,
        assessment_type_id: int
    ) -> Optional[Assessment]:
        return await db.get(self.model, (interview_id, assessment_type_id))
    
    async def get_by_interview(
        self,
        db: AsyncSession,
        interview_id: str
    ) -> List[Tuple[Assessment, str]]:
        """获取某轮面试的全部评估（附评估项名称）"""
        result = await db.execute(
            select(self.model, AssessmentType.name)
            .join(AssessmentType, AssessmentType.id == self.model.assessment_type_id)
            .where(self.model.interview_id == interview_id)
            .order_by(AssessmentType.name.asc())
        )
        return [(row[0], row[1]) for row in result.all()]


assessment_type_crud = CRUDAssessmentType(AssessmentType)
assessment_crud = CRUDAssessment(Assessment)
