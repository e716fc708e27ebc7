from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from src.taskboard.application.session import TrackerSession
from src.taskboard.domain.models import SessionState
from src.taskboard.presentation.schemas import (
    AddTaskRequest,
    CredentialsRequest,
    SourceRequest,
    UpdateStatusRequest,
    ViewCriteriaRequest,
)

router = APIRouter(tags=["tasks"])


def get_session(request: Request) -> TrackerSession:
    return request.app.state.session


@router.get("/state", response_model=SessionState, summary="Current session state")
async def read_state(session: TrackerSession = Depends(get_session)):
    return session.state()


@router.post(
    "/tasks",
    response_model=SessionState,
    summary="Add a task",
    description=(
        "Local mode shows the task immediately. Remote mode sends it to the store; "
        "it appears once the live subscription delivers the next snapshot."
    ),
)
async def add_task(body: AddTaskRequest, session: TrackerSession = Depends(get_session)):
    await session.add_task(body.title, body.due_date)
    return session.state()


@router.patch("/tasks/{task_id}", response_model=SessionState, summary="Change task status")
async def update_status(
    task_id: str,
    body: UpdateStatusRequest,
    session: TrackerSession = Depends(get_session),
):
    await session.update_status(task_id, body.status)
    return session.state()


@router.delete("/tasks/{task_id}", response_model=SessionState, summary="Delete a task")
async def remove_task(task_id: str, session: TrackerSession = Depends(get_session)):
    await session.remove_task(task_id)
    return session.state()


@router.put("/view", response_model=SessionState, summary="Update filter, sort or search")
async def update_view(body: ViewCriteriaRequest, session: TrackerSession = Depends(get_session)):
    if body.filter is not None:
        session.set_filter(body.filter)
    if "sort" in body.model_fields_set:
        session.set_sort(body.sort)
    if body.search is not None:
        session.set_search(body.search)
    return session.state()


@router.post("/errors/simulate", response_model=SessionState, summary="Trigger a test error")
async def simulate_error(session: TrackerSession = Depends(get_session)):
    session.simulate_error()
    return session.state()


@router.delete("/errors", response_model=SessionState, summary="Dismiss the current error")
async def clear_error(session: TrackerSession = Depends(get_session)):
    session.clear_error()
    return session.state()


@router.post("/source/toggle", response_model=SessionState, summary="Toggle local/remote mode")
async def toggle_source(session: TrackerSession = Depends(get_session)):
    session.toggle_source()
    return session.state()


@router.put("/source", response_model=SessionState, summary="Select the data source mode")
async def set_source(body: SourceRequest, session: TrackerSession = Depends(get_session)):
    session.set_mode(body.mode)
    return session.state()


@router.post("/auth/sign-in", response_model=SessionState, summary="Sign in")
async def sign_in(body: CredentialsRequest, session: TrackerSession = Depends(get_session)):
    await session.sign_in(body.email, body.password)
    return session.state()


@router.post("/auth/sign-up", response_model=SessionState, summary="Create an account")
async def sign_up(body: CredentialsRequest, session: TrackerSession = Depends(get_session)):
    await session.sign_up(body.email, body.password)
    return session.state()


@router.post("/auth/sign-out", response_model=SessionState, summary="Sign out")
async def sign_out(session: TrackerSession = Depends(get_session)):
    await session.sign_out()
    return session.state()
