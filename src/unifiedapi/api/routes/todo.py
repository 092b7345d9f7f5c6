"""To-do list endpoints. Every route requires a bearer token.

GET    /api/todo/lists                → [{name}]
GET    /api/todo/lists/{list}/tasks   → [{id, text, completed}]
POST   /api/todo/lists/{list}/tasks   → {success}
PUT    /api/todo/tasks/{id}           → {success}
DELETE /api/todo/tasks/{id}           → {success}  (soft delete)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict

from unifiedapi.api.auth import get_current_user
from unifiedapi.api.deps import get_db
from unifiedapi.infra.db import Database
from unifiedapi.infra.repositories import todo_repository

router = APIRouter(
    prefix="/api/todo",
    tags=["todo"],
    dependencies=[Depends(get_current_user)],
)


class CreateTaskRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str = ""


class UpdateTaskRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    completed: bool


@router.get("/lists")
def get_lists(db: Database = Depends(get_db)) -> list[dict]:
    with db.txn() as cur:
        names = todo_repository.list_names(cur)
    return [{"name": n} for n in names]


@router.get("/lists/{list_name}/tasks")
def get_tasks(list_name: str, db: Database = Depends(get_db)) -> list[dict]:
    with db.txn() as cur:
        return todo_repository.list_tasks(cur, list_name)


@router.post("/lists/{list_name}/tasks")
def create_task(list_name: str, body: CreateTaskRequest, db: Database = Depends(get_db)) -> dict:
    text = body.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Task text is required")

    with db.txn() as cur:
        todo_repository.insert_task(cur, list_name, text)
    return {"success": True}


@router.put("/tasks/{task_id}")
def update_task(task_id: int, body: UpdateTaskRequest, db: Database = Depends(get_db)) -> dict:
    with db.txn() as cur:
        updated = todo_repository.set_done(cur, task_id, body.completed)
    if updated == 0:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"success": True}


@router.delete("/tasks/{task_id}")
def delete_task(task_id: int, db: Database = Depends(get_db)) -> dict:
    with db.txn() as cur:
        hidden = todo_repository.hide_task(cur, task_id)
    if hidden == 0:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"success": True}
