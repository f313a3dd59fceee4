"""
岗位 API 测试
"""
from datetime import date, timedelta

import pytest
from httpx import AsyncClient

from tests.support import ADMIN_HEADERS, actor_headers


@pytest.mark.asyncio
async def test_recruiter_publishes_job(client: AsyncClient, factory):
    recruiter = await factory.create_recruiter()
    job = await factory.create_job(recruiter_id=recruiter["id"])
    assert job["recruiter_id"] == recruiter["id"]
    assert job["status"] == "OPEN"
    
    response = await client.get(f"/api/v1/jobs/{job['id']}")
    assert response.status_code == 200
    assert response.json()["data"]["title"] == job["title"]


@pytest.mark.asyncio
async def test_seeker_cannot_publish(client: AsyncClient, factory):
    seeker = await factory.create_seeker()
    response = await client.post(
        "/api/v1/jobs",
        json={"title": "x", "company_name": "y", "deadline": date.today().isoformat()},
        headers=actor_headers(seeker["id"], "seeker"),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_open_only_listing(client: AsyncClient, factory):
    recruiter = await factory.create_recruiter()
    open_job = await factory.create_job(recruiter_id=recruiter["id"])
    await factory.create_job(
        recruiter_id=recruiter["id"],
        deadline=(date.today() - timedelta(days=1)).isoformat(),
    )
    closed = await factory.create_job(recruiter_id=recruiter["id"])
    response = await client.post(
        f"/api/v1/jobs/{closed['id']}/close", headers=actor_headers(recruiter["id"], "recruiter")
    )
    assert response.status_code == 200
    
    response = await client.get("/api/v1/jobs", params={"open_only": True})
    data = response.json()["data"]
    assert data["total"] == 1
    assert data["items"][0]["id"] == open_job["id"]
    
    response = await client.get("/api/v1/jobs", params={"recruiter_id": recruiter["id"]})
    assert response.json()["data"]["total"] == 3


@pytest.mark.asyncio
async def test_closed_job_refuses_applications(client: AsyncClient, factory):
    job = await factory.create_job()
    await client.post(f"/api/v1/jobs/{job['id']}/close", headers=ADMIN_HEADERS)
    
    response = await client.post(f"/api/v1/jobs/{job['id']}/close", headers=ADMIN_HEADERS)
    assert response.status_code == 409
    
    seeker = await factory.create_seeker()
    response = await client.post(
        "/api/v1/applications",
        json={
            "job_id": job["id"],
            "applicant_id": seeker["id"],
            "resume_ref": "/uploads/cv.pdf",
            "fit_justification": "I have shipped three hiring platforms end to end.",
        },
        headers=actor_headers(seeker["id"], "seeker"),
    )
    assert response.status_code == 409
    assert response.json()["data"]["error"] == "JobClosed"
