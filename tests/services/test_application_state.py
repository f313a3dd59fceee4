"""
投递申请状态机测试

覆盖投递校验、流转表以及数据库层的重复投递兜底
"""
from datetime import date, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from houseofhire.core.exceptions import (
    ActorNotPermitted,
    DeadlinePassed,
    DuplicateApplication,
    InvalidTransition,
    JobClosed,
    MissingResume,
    NotFoundException,
)
from houseofhire.crud import application_crud
from houseofhire.models.application import ApplicationStatus, ApplicationSubmit, JobApplication
from houseofhire.models.job import JobStatus
from houseofhire.models.registration import AccountType
from houseofhire.services.lifecycle import Actor, ActorRole, ALLOWED_TRANSITIONS, check_transition

from tests.support import ADMIN

S = ApplicationStatus


def _submit(job_id: str, applicant_id: str, **overrides) -> ApplicationSubmit:
    data = {
        "job_id": job_id,
        "applicant_id": applicant_id,
        "resume_ref": "/uploads/resume.pdf",
        "fit_justification": "Seven years building recruitment platforms.",
        **overrides,
    }
    return ApplicationSubmit(**data)


def _seeker(applicant_id: str) -> Actor:
    return Actor(id=applicant_id, role=ActorRole.SEEKER)


# ==================== 流转表 ====================

@pytest.mark.parametrize("current,target", [
    (S.APPLIED, S.IN_PROGRESS),
    (S.APPLIED, S.ACCEPTED),
    (S.APPLIED, S.REJECTED),
    (S.IN_PROGRESS, S.HOLD),
    (S.HOLD, S.IN_PROGRESS),
    (S.HOLD, S.REJECTED),
    (S.IN_PROGRESS, S.ACCEPTED),
])
def test_allowed_transitions(current, target):
    assert check_transition(current, target) == target


@pytest.mark.parametrize("current,target", [
    (S.APPLIED, S.APPLIED),
    (S.APPLIED, S.HOLD),
    (S.HOLD, S.APPLIED),
    (S.ACCEPTED, S.REJECTED),
    (S.REJECTED, S.IN_PROGRESS),
    (S.REJECTED, S.REJECTED),
])
def test_rejected_transitions(current, target):
    with pytest.raises(InvalidTransition) as exc_info:
        check_transition(current, target)
    assert exc_info.value.data["error"] == "InvalidTransition"


def test_terminal_states_have_no_exits():
    assert ALLOWED_TRANSITIONS[S.ACCEPTED] == frozenset()
    assert ALLOWED_TRANSITIONS[S.REJECTED] == frozenset()
    for status in (S.APPLIED, S.IN_PROGRESS, S.HOLD):
        assert {S.ACCEPTED, S.REJECTED} <= ALLOWED_TRANSITIONS[status]


def test_unknown_status_string_is_invalid_transition():
    with pytest.raises(InvalidTransition):
        check_transition(S.APPLIED, "SHORTLISTED")
    assert check_transition(S.APPLIED, "in_progress") == S.IN_PROGRESS


# ==================== 投递 ====================

@pytest.mark.asyncio
async def test_submit_creates_applied_application(orchestrator, seed, db_session):
    job_id = await seed.job()
    seeker_id = await seed.registration()
    
    result = await orchestrator.submit_application(_seeker(seeker_id), _submit(job_id, seeker_id))
    application = result.entity
    
    assert application.status == S.APPLIED
    assert application.application_no == 1
    assert application.submitted_by == seeker_id
    assert result.notifications == []
    
    history = await application_crud.get_history(db_session, application.id)
    assert [(h.from_status, h.to_status) for h in history] == [(None, S.APPLIED)]


@pytest.mark.asyncio
async def test_application_numbers_are_sequential(orchestrator, seed):
    job_id = await seed.job()
    first = await seed.registration()
    second = await seed.registration()
    
    a = await orchestrator.submit_application(_seeker(first), _submit(job_id, first))
    b = await orchestrator.submit_application(_seeker(second), _submit(job_id, second))
    assert (a.entity.application_no, b.entity.application_no) == (1, 2)


@pytest.mark.asyncio
@pytest.mark.parametrize("resume_ref", [None, "", "   "])
async def test_submit_without_resume_creates_nothing(orchestrator, seed, db_session, resume_ref):
    job_id = await seed.job()
    seeker_id = await seed.registration()
    
    with pytest.raises(MissingResume):
        await orchestrator.submit_application(
            _seeker(seeker_id), _submit(job_id, seeker_id, resume_ref=resume_ref)
        )
    assert await application_crud.count(db_session) == 0


@pytest.mark.asyncio
async def test_duplicate_submission_rejected(orchestrator, seed, db_session):
    job_id = await seed.job()
    seeker_id = await seed.registration()
    actor = _seeker(seeker_id)
    
    first = await orchestrator.submit_application(actor, _submit(job_id, seeker_id))
    first_no = first.entity.application_no
    with pytest.raises(DuplicateApplication) as exc_info:
        await orchestrator.submit_application(actor, _submit(job_id, seeker_id))
    
    assert exc_info.value.data["application_no"] == first_no
    assert await application_crud.count(db_session) == 1


@pytest.mark.asyncio
async def test_resubmit_allowed_after_terminal(orchestrator, seed):
    job_id = await seed.job()
    seeker_id = await seed.registration()
    actor = _seeker(seeker_id)
    
    first = await orchestrator.submit_application(actor, _submit(job_id, seeker_id))
    await orchestrator.transition_application(ADMIN, first.entity.id, S.REJECTED, "Position filled")
    
    second = await orchestrator.submit_application(actor, _submit(job_id, seeker_id))
    assert second.entity.status == S.APPLIED
    assert second.entity.application_no == first.entity.application_no + 1


@pytest.mark.asyncio
async def test_deadline_in_past_rejected(orchestrator, seed, db_session):
    job_id = await seed.job(deadline=date.today() - timedelta(days=1))
    seeker_id = await seed.registration()
    
    with pytest.raises(DeadlinePassed):
        await orchestrator.submit_application(_seeker(seeker_id), _submit(job_id, seeker_id))
    assert await application_crud.count(db_session) == 0


@pytest.mark.asyncio
async def test_deadline_today_still_open(orchestrator, seed):
    job_id = await seed.job(deadline=date.today())
    seeker_id = await seed.registration()
    
    result = await orchestrator.submit_application(_seeker(seeker_id), _submit(job_id, seeker_id))
    assert result.entity.status == S.APPLIED


@pytest.mark.asyncio
async def test_closed_job_rejected(orchestrator, seed):
    job_id = await seed.job(status=JobStatus.CLOSED)
    seeker_id = await seed.registration()
    
    with pytest.raises(JobClosed):
        await orchestrator.submit_application(_seeker(seeker_id), _submit(job_id, seeker_id))


@pytest.mark.asyncio
async def test_unknown_job_not_found(orchestrator, seed):
    seeker_id = await seed.registration()
    with pytest.raises(NotFoundException):
        await orchestrator.submit_application(_seeker(seeker_id), _submit("missing", seeker_id))


@pytest.mark.asyncio
async def test_unapproved_seeker_cannot_apply(orchestrator, seed):
    job_id = await seed.job()
    seeker_id = await seed.registration(approved=False)
    
    with pytest.raises(ActorNotPermitted):
        await orchestrator.submit_application(_seeker(seeker_id), _submit(job_id, seeker_id))


@pytest.mark.asyncio
async def test_seeker_cannot_apply_for_someone_else(orchestrator, seed):
    job_id = await seed.job()
    seeker_id = await seed.registration()
    other_id = await seed.registration()
    
    with pytest.raises(ActorNotPermitted):
        await orchestrator.submit_application(_seeker(other_id), _submit(job_id, seeker_id))


@pytest.mark.asyncio
async def test_admin_applies_on_behalf_of_seeker(orchestrator, seed):
    job_id = await seed.job()
    seeker_id = await seed.registration()
    
    result = await orchestrator.submit_application(ADMIN, _submit(job_id, seeker_id))
    assert result.entity.applicant_id == seeker_id
    assert result.entity.submitted_by == ADMIN.id


# ==================== 状态流转 ====================

@pytest.mark.asyncio
async def test_applied_to_accepted_dispatches_exactly_one_notification(orchestrator, seed, dispatcher, mailbox):
    job_id = await seed.job(title="Data Engineer")
    seeker_id = await seed.registration(email="jane@example.com")
    submitted = await orchestrator.submit_application(_seeker(seeker_id), _submit(job_id, seeker_id))
    
    result = await orchestrator.transition_application(ADMIN, submitted.entity.id, S.ACCEPTED)
    
    assert result.entity.status == S.ACCEPTED
    assert len(result.notifications) == 1
    await dispatcher.drain()
    assert len(mailbox.sent) == 1
    assert mailbox.sent[0].to == "jane@example.com"
    assert "Data Engineer" in mailbox.sent[0].subject


@pytest.mark.asyncio
async def test_hold_then_in_progress_recorded_separately(orchestrator, seed, db_session):
    job_id = await seed.job()
    seeker_id = await seed.registration()
    submitted = await orchestrator.submit_application(_seeker(seeker_id), _submit(job_id, seeker_id))
    application_id = submitted.entity.id
    
    for status in (S.IN_PROGRESS, S.HOLD, S.IN_PROGRESS):
        await orchestrator.transition_application(ADMIN, application_id, status)
    
    history = await application_crud.get_history(db_session, application_id)
    assert [h.to_status for h in history] == [S.APPLIED, S.IN_PROGRESS, S.HOLD, S.IN_PROGRESS]


@pytest.mark.asyncio
async def test_same_status_transition_is_rejected_without_notification(orchestrator, seed, dispatcher, mailbox):
    job_id = await seed.job()
    seeker_id = await seed.registration()
    submitted = await orchestrator.submit_application(_seeker(seeker_id), _submit(job_id, seeker_id))
    
    with pytest.raises(InvalidTransition):
        await orchestrator.transition_application(ADMIN, submitted.entity.id, S.APPLIED)
    await dispatcher.drain()
    assert mailbox.sent == []


@pytest.mark.asyncio
async def test_terminal_application_cannot_transition(orchestrator, seed):
    job_id = await seed.job()
    seeker_id = await seed.registration()
    submitted = await orchestrator.submit_application(_seeker(seeker_id), _submit(job_id, seeker_id))
    application_id = submitted.entity.id
    await orchestrator.transition_application(ADMIN, application_id, S.REJECTED)
    
    with pytest.raises(InvalidTransition):
        await orchestrator.transition_application(ADMIN, application_id, S.IN_PROGRESS)


@pytest.mark.asyncio
async def test_owning_recruiter_may_transition(orchestrator, seed):
    recruiter_id = await seed.registration(AccountType.RECRUITER)
    job_id = await seed.job(recruiter_id=recruiter_id)
    seeker_id = await seed.registration()
    submitted = await orchestrator.submit_application(_seeker(seeker_id), _submit(job_id, seeker_id))
    
    recruiter = Actor(id=recruiter_id, role=ActorRole.RECRUITER)
    result = await orchestrator.transition_application(recruiter, submitted.entity.id, S.IN_PROGRESS)
    assert result.entity.status == S.IN_PROGRESS


@pytest.mark.asyncio
async def test_other_recruiter_and_seeker_may_not_transition(orchestrator, seed):
    job_id = await seed.job()
    other_recruiter = await seed.registration(AccountType.RECRUITER)
    seeker_id = await seed.registration()
    submitted = await orchestrator.submit_application(_seeker(seeker_id), _submit(job_id, seeker_id))
    application_id = submitted.entity.id
    
    with pytest.raises(ActorNotPermitted):
        await orchestrator.transition_application(
            Actor(id=other_recruiter, role=ActorRole.RECRUITER), application_id, S.HOLD
        )
    with pytest.raises(ActorNotPermitted):
        await orchestrator.transition_application(_seeker(seeker_id), application_id, S.ACCEPTED)


# ==================== 数据库兜底 ====================

@pytest.mark.asyncio
async def test_store_rejects_second_active_application_for_pair(seed, db_session):
    """绕过状态机直接写库，部分唯一索引仍然拒绝第二条非终态申请"""
    job_id = await seed.job()
    seeker_id = await seed.registration()
    
    def make(no: int, status: ApplicationStatus) -> JobApplication:
        return JobApplication(
            application_no=no,
            job_id=job_id,
            applicant_id=seeker_id,
            submitted_by=seeker_id,
            status=status,
            resume_ref="/r.pdf",
            fit_justification="Backstop check for duplicate submissions.",
        )
    
    db_session.add(make(1, S.REJECTED))
    db_session.add(make(2, S.APPLIED))
    await db_session.commit()
    
    db_session.add(make(3, S.HOLD))
    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()
