"""
测试配置文件

提供测试用的 fixtures：内存数据库、测试客户端、记录型邮件客户端、测试数据工厂等
"""
import os

# 必须在导入应用之前设置，避免创建本地数据库文件
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("MAIL_BASE_URL", "")

from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator, Optional
from dataclasses import dataclass, field

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from houseofhire import models  # noqa: F401  注册所有表
from houseofhire.core.database import get_db
from houseofhire.core.security import hash_password
from houseofhire.crud import assessment_type_crud, job_crud, registration_crud
from houseofhire.main import create_app
from houseofhire.models.job import JobStatus
from houseofhire.models.registration import AccountType
from houseofhire.services.lifecycle import LifecycleOrchestrator
from houseofhire.services.notifications import NotificationDispatcher, get_dispatcher

from tests.support import ADMIN_HEADERS, RecordingMailClient, actor_headers


# ========== 数据库 ==========

@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """每个测试使用独立的内存数据库"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    为每个测试函数提供独立的数据库会话
    """
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


# ========== 通知 ==========

@pytest_asyncio.fixture
async def mailbox() -> RecordingMailClient:
    return RecordingMailClient()


@pytest_asyncio.fixture
async def dispatcher(mailbox: RecordingMailClient) -> AsyncGenerator[NotificationDispatcher, None]:
    """测试结束时等待所有在途通知，避免任务泄漏到下一个测试"""
    dispatcher = NotificationDispatcher(mailbox)
    yield dispatcher
    await dispatcher.drain(timeout=5)


@pytest_asyncio.fixture
async def orchestrator(db_session: AsyncSession, dispatcher: NotificationDispatcher) -> LifecycleOrchestrator:
    return LifecycleOrchestrator(db_session, dispatcher)


# ========== HTTP 客户端 ==========

@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    dispatcher: NotificationDispatcher,
) -> AsyncGenerator[AsyncClient, None]:
    """
    提供测试用的 HTTP 客户端
    
    覆盖 get_db 与 get_dispatcher 依赖，使用测试数据库和记录型邮件客户端
    """
    app = create_app()
    
    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise
    
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac
    
    app.dependency_overrides.clear()


# ========== 测试数据工厂（HTTP） ==========

@dataclass
class DataFactory:
    """
    测试数据工厂类
    
    集中管理测试数据创建，避免各测试文件重复代码
    字段变更时只需修改此处
    """
    client: AsyncClient
    _counter: int = field(default=0, repr=False)
    
    def _next_id(self) -> str:
        """生成唯一后缀，避免数据冲突"""
        self._counter += 1
        return str(self._counter)
    
    async def create_registration(self, account_type: str = "seeker", approve: bool = True, **overrides) -> dict:
        """自助注册，默认同时审核通过"""
        suffix = self._next_id()
        data = {
            "account_type": account_type,
            "full_name": f"测试用户{suffix}",
            "email": f"user{suffix}@example.com",
            "mobile_no": f"138{suffix.zfill(8)}",
            "password": "secret123",
            **overrides
        }
        if account_type == "recruiter":
            data.setdefault("company_name", f"测试公司{suffix}")
        resp = await self.client.post("/api/v1/registrations", json=data)
        assert resp.status_code == 200, f"注册失败: {resp.text}"
        registration = resp.json()["data"]
        if approve:
            resp = await self.client.post(
                f"/api/v1/registrations/{registration['id']}/approve",
                json={},
                headers=ADMIN_HEADERS,
            )
            assert resp.status_code == 200, f"审核失败: {resp.text}"
            registration = resp.json()["data"]
        return registration
    
    async def create_seeker(self, **overrides) -> dict:
        return await self.create_registration("seeker", **overrides)
    
    async def create_recruiter(self, **overrides) -> dict:
        return await self.create_registration("recruiter", **overrides)
    
    async def create_job(self, recruiter_id: Optional[str] = None, **overrides) -> dict:
        """创建岗位，未指定招聘方时自动创建"""
        if recruiter_id is None:
            recruiter = await self.create_recruiter()
            recruiter_id = recruiter["id"]
        suffix = self._next_id()
        data = {
            "title": f"测试岗位{suffix}",
            "company_name": f"测试公司{suffix}",
            "location": "上海",
            "salary": "20-30K",
            "description": "测试用岗位描述",
            "deadline": (date.today() + timedelta(days=30)).isoformat(),
            **overrides
        }
        resp = await self.client.post(
            "/api/v1/jobs", json=data, headers=actor_headers(recruiter_id, "recruiter")
        )
        assert resp.status_code == 200, f"创建岗位失败: {resp.text}"
        return resp.json()["data"]
    
    async def submit_application(
        self,
        job_id: Optional[str] = None,
        applicant_id: Optional[str] = None,
        **overrides
    ) -> dict:
        """求职者本人投递，自动创建依赖的岗位和求职者"""
        if job_id is None:
            job_id = (await self.create_job())["id"]
        if applicant_id is None:
            applicant_id = (await self.create_seeker())["id"]
        data = {
            "job_id": job_id,
            "applicant_id": applicant_id,
            "resume_ref": f"/uploads/resume_{applicant_id}.pdf",
            "fit_justification": "五年 Python 后端经验，熟悉 FastAPI 与异步编程。",
            **overrides
        }
        resp = await self.client.post(
            "/api/v1/applications", json=data, headers=actor_headers(applicant_id, "seeker")
        )
        assert resp.status_code == 200, f"投递失败: {resp.text}"
        return resp.json()["data"]
    
    async def create_assessment_type(self, name: Optional[str] = None) -> dict:
        data = {"name": name or f"评估项{self._next_id()}"}
        resp = await self.client.post("/api/v1/assessment-types", json=data, headers=ADMIN_HEADERS)
        assert resp.status_code == 200, f"创建评估项失败: {resp.text}"
        return resp.json()["data"]
    
    async def schedule_round(self, application: dict, round_number: int = 1, **overrides):
        """安排面试，返回原始响应以便断言错误"""
        data = {
            "job_id": application["job_id"],
            "applicant_id": application["applicant_id"],
            "round_number": round_number,
            "interviewer_name": "张面试官",
            "scheduled_at": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
            **overrides
        }
        return await self.client.post("/api/v1/interviews", json=data, headers=ADMIN_HEADERS)
    
    async def close_round(self, interview_id: str, outcome: str, narration: str = "面试结束"):
        return await self.client.post(
            f"/api/v1/interviews/{interview_id}/close",
            json={"outcome": outcome, "closing_narration": narration},
            headers=ADMIN_HEADERS,
        )


@pytest_asyncio.fixture
async def factory(client: AsyncClient) -> DataFactory:
    """提供测试数据工厂实例"""
    return DataFactory(client=client)


# ========== 测试数据工厂（服务层） ==========

@dataclass
class SeedFactory:
    """
    服务层测试的数据准备
    
    直接写库并提交，提交后的数据不受被测操作回滚的影响
    """
    db: AsyncSession
    _counter: int = field(default=0, repr=False)
    
    def _next_id(self) -> str:
        self._counter += 1
        return str(self._counter)
    
    async def registration(
        self,
        account_type: AccountType = AccountType.SEEKER,
        approved: bool = True,
        **overrides
    ) -> str:
        suffix = self._next_id()
        values = {
            "account_type": account_type,
            "full_name": f"Seed User {suffix}",
            "email": f"seed{suffix}@example.com",
            "password_hash": hash_password("secret123"),
            "approved": approved,
            **overrides
        }
        registration = await registration_crud.create(self.db, obj_in=values)
        await self.db.commit()
        return registration.id
    
    async def job(
        self,
        recruiter_id: Optional[str] = None,
        deadline: Optional[date] = None,
        status: JobStatus = JobStatus.OPEN,
        **overrides
    ) -> str:
        if recruiter_id is None:
            recruiter_id = await self.registration(AccountType.RECRUITER, company_name="Acme")
        suffix = self._next_id()
        values = {
            "title": f"Backend Engineer {suffix}",
            "company_name": "Acme",
            "deadline": deadline or date.today() + timedelta(days=30),
            "recruiter_id": recruiter_id,
            "status": status,
            **overrides
        }
        job = await job_crud.create(self.db, obj_in=values)
        await self.db.commit()
        return job.id
    
    async def assessment_type(self, name: Optional[str] = None) -> int:
        assessment_type = await assessment_type_crud.create(
            self.db, obj_in={"name": name or f"Skill {self._next_id()}"}
        )
        await self.db.commit()
        return assessment_type.id


@pytest_asyncio.fixture
async def seed(db_session: AsyncSession) -> SeedFactory:
    return SeedFactory(db=db_session)
