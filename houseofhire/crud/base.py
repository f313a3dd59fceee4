"""
CRUD 基类模块 - SQLModel 简化版

直接使用 SQLModel 对象，无需 model_dump() 转换；
状态类字段的修改统一走 conditional_update，以 WHERE 条件保证并发下只有一方生效
"""
from typing import Generic, TypeVar, Type, Optional, List, Any, Dict
from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from houseofhire.models.base import utcnow

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=SQLModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=SQLModel)


class CRUDBase(Generic[ModelType]):
    """
    CRUD 基类 - 简化版
    
    直接操作 SQLModel 对象，减少样板代码
    """
    
    def __init__(self, model: Type[ModelType]):
        self.model = model
    
    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """根据 ID 获取单条记录"""
        result = await db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()
    
    async def get_multi(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 100,
        order_by: Any = None,
        filters: Optional[List[Any]] = None
    ) -> List[ModelType]:
        """获取多条记录（分页）"""
        query = select(self.model)
        if filters:
            query = query.where(*filters)
        if order_by is not None:
            query = query.order_by(order_by)
        else:
            query = query.order_by(self.model.created_at.desc())
        query = query.offset(skip).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())
    
    async def count(self, db: AsyncSession, *, filters: Optional[List[Any]] = None) -> int:
        """获取总记录数"""
        query = select(func.count()).select_from(self.model)
        if filters:
            query = query.where(*filters)
        result = await db.execute(query)
        return result.scalar() or 0
    
    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: CreateSchemaType | Dict[str, Any]
    ) -> ModelType:
        """
        创建记录
        
        SQLModel 可以直接从 Schema 创建 Model
        """
        # 如果传入的是 dict，直接使用；否则转换
        if isinstance(obj_in, dict):
            db_obj = self.model(**obj_in)
        else:
            db_obj = self.model.model_validate(obj_in)
        
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj
    
    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: UpdateSchemaType | Dict[str, Any]
    ) -> ModelType:
        """
        更新记录
        
        支持传入 Schema 或 dict
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)
        
        for field, value in update_data.items():
            if value is not None:
                setattr(db_obj, field, value)
        if hasattr(db_obj, "updated_at"):
            db_obj.updated_at = utcnow()
        
        await db.flush()
        await db.refresh(db_obj)
        return db_obj
    
    async def conditional_update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        conditions: List[Any],
        values: Dict[str, Any]
    ) -> bool:
        """
        条件更新（compare-and-set）
        
        仅当记录仍满足 conditions 时写入 values；返回是否命中。
        命中后刷新 db_obj，未命中时 db_obj 也会刷新为数据库最新值
        """
        if "updated_at" in self.model.model_fields:
            values = {**values, "updated_at": utcnow()}
        result = await db.execute(
            update(self.model)
            .where(self.model.id == db_obj.id, *conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await db.refresh(db_obj)
        return result.rowcount == 1
