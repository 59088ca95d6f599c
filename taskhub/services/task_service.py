"""Task service - create/read/update/delete for tasks and their subtasks."""

from typing import Any, Optional, Type, TypeVar, Union
from datetime import date, datetime, time, timezone
from pydantic import BaseModel
from taskhub.models.task import (
    Subtask,
    SubtaskCreate,
    SubtaskUpdate,
    Task,
    TaskCreate,
    TaskStatus,
    TaskUpdate,
)
from taskhub.services.supabase_client import (
    CREATE_TASK_WITH_SUBTASKS_RPC,
    SUBTASKS_TABLE,
    TASKS_TABLE,
    SupabaseClient,
    embed_subtasks,
)
from taskhub.utils.errors import EntityMissing, SupabaseError, TaskServiceError, wrap_error
from taskhub.utils.logging import get_structured_logger, mask_identifier, timed

logger = get_structured_logger(__name__)

# Hyphenated spelling accepted from callers for TaskStatus.IN_PROGRESS
HYPHENATED_IN_PROGRESS = "in-progress"

ModelT = TypeVar("ModelT", bound=BaseModel)


def normalize_status(status: Any) -> Any:
    """Rewrite 'in-progress' to the 'in_progress' enum value; pass anything else through."""
    if isinstance(status, TaskStatus):
        return status.value
    if status == HYPHENATED_IN_PROGRESS:
        return TaskStatus.IN_PROGRESS.value
    return status


def parse_due_date(value: Union[datetime, date, str, None]) -> Optional[str]:
    """
    Parse a due date into an ISO-8601 timestamp string.

    Date-only values become midnight UTC and naive datetimes are taken as
    UTC. Empty values yield None. Raises ValueError for unparseable input.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        if "T" in text or " " in text:
            parsed = datetime.fromisoformat(text)
        else:
            parsed = datetime.combine(date.fromisoformat(text), time.min)
    else:
        raise ValueError(f"Invalid due date: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.isoformat()


def _coerce(model: Type[ModelT], data: Union[ModelT, dict]) -> ModelT:
    if isinstance(data, model):
        return data
    return model.model_validate(data)


def _to_subtask(row: dict) -> Subtask:
    return Subtask.model_validate(row)


def _to_task(row: dict) -> Task:
    """Build a Task from a row carrying an embedded subtask list."""
    row = dict(row)
    subtask_rows = row.pop(SUBTASKS_TABLE, None) or []
    subtask_rows = sorted(
        subtask_rows,
        key=lambda sub: (sub.get("created_at") or "", str(sub.get("id")))
    )
    row["subtasks"] = [_to_subtask(sub) for sub in subtask_rows]
    return Task.model_validate(row)


def _first_row(data: Any) -> Optional[dict]:
    """First row of a query or RPC result, or None."""
    if isinstance(data, list):
        return data[0] if data else None
    return data or None


def _fail(operation: str, entity: str, error: Exception, **context: Any) -> TaskServiceError:
    """Wrap and log a failed operation."""
    wrapped = wrap_error(operation, entity, error)
    logger.error(
        str(wrapped),
        operation=operation,
        entity=entity,
        error_type=type(wrapped).__name__,
        cause_type=type(error).__name__,
        **context
    )
    return wrapped


def _fetch_task_row(client, task_id: str, with_subtasks: bool = True) -> Optional[dict]:
    columns = embed_subtasks() if with_subtasks else "*"
    result = client.table(TASKS_TABLE).select(columns).eq("id", task_id).execute()
    return _first_row(result.data)


# Task operations
@timed("tasks.list_tasks", logger=logger)
async def list_tasks() -> list[Task]:
    """Get all tasks with their subtasks, newest first."""
    try:
        async with SupabaseClient() as client:
            result = (
                client.table(TASKS_TABLE)
                .select(embed_subtasks())
                .order("created_at", desc=True)
                .execute()
            )
            return [_to_task(row) for row in result.data or []]
    except Exception as e:
        raise _fail("retrieving", "tasks", e) from e


@timed("tasks.get_task", logger=logger)
async def get_task(task_id: str) -> Task:
    """Get a task by ID with its subtasks."""
    try:
        async with SupabaseClient() as client:
            row = _fetch_task_row(client, task_id)
            if row is None:
                raise EntityMissing("task")
            return _to_task(row)
    except Exception as e:
        raise _fail("retrieving", "task", e, task_id=task_id) from e


@timed("tasks.create_task", logger=logger)
async def create_task(task_data: Union[TaskCreate, dict]) -> Task:
    """
    Create a task together with its initial subtasks.

    The task row and every subtask are inserted by a single database
    function call, so either all of them exist afterwards or none do.
    """
    try:
        data = _coerce(TaskCreate, task_data)
        task_payload = {
            "title": data.title,
            "description": data.description,
            "status": normalize_status(data.status),
            "priority": data.priority,
            "due_date": parse_due_date(data.due_date),
            "assigned_to": data.assigned_to or None,
        }
        subtask_payloads = [
            {
                "title": sub.title,
                "description": sub.description,
                "completed": bool(sub.completed),
            }
            for sub in data.subtasks
        ]

        async with SupabaseClient() as client:
            result = client.rpc(
                CREATE_TASK_WITH_SUBTASKS_RPC,
                {"task_data": task_payload, "subtask_data": subtask_payloads}
            ).execute()
            row = _first_row(result.data)
            if row is None:
                raise SupabaseError("no data returned")

        task = _to_task(row)
        logger.info(
            "Task created",
            task_id=task.id,
            status=task.status.value,
            subtask_count=len(task.subtasks),
            assigned_to=mask_identifier(task.assigned_to),
        )
        return task
    except Exception as e:
        raise _fail("creating", "task", e) from e


@timed("tasks.update_task", logger=logger)
async def update_task(task_id: str, update_data: Union[TaskUpdate, dict]) -> Task:
    """
    Apply a partial update to a task.

    Only the fields present in update_data are written. Raises NotFoundError
    when the task does not exist.
    """
    try:
        updates = _coerce(TaskUpdate, update_data).model_dump(exclude_unset=True)

        if "status" in updates:
            updates["status"] = normalize_status(updates["status"])
        if "due_date" in updates:
            updates["due_date"] = parse_due_date(updates["due_date"])

        async with SupabaseClient() as client:
            existing = _fetch_task_row(client, task_id, with_subtasks=False)
            if existing is None:
                raise EntityMissing("task")

            if updates:
                client.table(TASKS_TABLE).update(updates).eq("id", task_id).execute()

            row = _fetch_task_row(client, task_id)
            if row is None:
                # Deleted between the update and the reload
                raise EntityMissing("task")

        logger.info("Task updated", task_id=task_id, fields=sorted(updates))
        return _to_task(row)
    except Exception as e:
        raise _fail("updating", "task", e, task_id=task_id) from e


@timed("tasks.delete_task", logger=logger)
async def delete_task(task_id: str) -> Task:
    """Delete a task (subtasks cascade) and return its last state."""
    try:
        async with SupabaseClient() as client:
            existing = _fetch_task_row(client, task_id)
            if existing is None:
                raise EntityMissing("task")

            client.table(TASKS_TABLE).delete().eq("id", task_id).execute()

        task = _to_task(existing)
        logger.info("Task deleted", task_id=task_id, subtask_count=len(task.subtasks))
        return task
    except Exception as e:
        raise _fail("deleting", "task", e, task_id=task_id) from e


# Subtask operations
@timed("tasks.get_subtask", logger=logger)
async def get_subtask(subtask_id: str) -> Subtask:
    """Get a subtask by ID."""
    try:
        async with SupabaseClient() as client:
            result = client.table(SUBTASKS_TABLE).select("*").eq("id", subtask_id).execute()
            row = _first_row(result.data)
            if row is None:
                raise EntityMissing("subtask")
            return _to_subtask(row)
    except Exception as e:
        raise _fail("retrieving", "subtask", e, subtask_id=subtask_id) from e


@timed("tasks.create_subtask", logger=logger)
async def create_subtask(task_id: str, subtask_data: Union[SubtaskCreate, dict]) -> Subtask:
    """
    Create a subtask under a task.

    The owning task is not looked up first; the foreign key rejects an
    unknown task_id and that surfaces as OperationFailedError.
    """
    try:
        data = _coerce(SubtaskCreate, subtask_data)
        payload = {
            "task_id": task_id,
            "title": data.title,
            "description": data.description,
            "completed": bool(data.completed),
        }

        async with SupabaseClient() as client:
            result = client.table(SUBTASKS_TABLE).insert(payload).execute()
            row = _first_row(result.data)
            if row is None:
                raise SupabaseError("no data returned")

        logger.info("Subtask created", task_id=task_id, subtask_id=row.get("id"))
        return _to_subtask(row)
    except Exception as e:
        raise _fail("creating", "subtask", e, task_id=task_id) from e


@timed("tasks.update_subtask", logger=logger)
async def update_subtask(subtask_id: str, update_data: Union[SubtaskUpdate, dict]) -> Subtask:
    """Apply a partial update to a subtask."""
    try:
        updates = _coerce(SubtaskUpdate, update_data).model_dump(exclude_unset=True)

        async with SupabaseClient() as client:
            if updates:
                result = client.table(SUBTASKS_TABLE).update(updates).eq("id", subtask_id).execute()
            else:
                result = client.table(SUBTASKS_TABLE).select("*").eq("id", subtask_id).execute()
            row = _first_row(result.data)
            if row is None:
                raise SupabaseError(f"no subtask matched id {subtask_id}")

        logger.info("Subtask updated", subtask_id=subtask_id, fields=sorted(updates))
        return _to_subtask(row)
    except Exception as e:
        raise _fail("updating", "subtask", e, subtask_id=subtask_id) from e


@timed("tasks.delete_subtask", logger=logger)
async def delete_subtask(subtask_id: str) -> Subtask:
    """Delete a subtask and return the deleted row."""
    try:
        async with SupabaseClient() as client:
            result = client.table(SUBTASKS_TABLE).delete().eq("id", subtask_id).execute()
            row = _first_row(result.data)
            if row is None:
                raise SupabaseError(f"no subtask matched id {subtask_id}")

        logger.info("Subtask deleted", subtask_id=subtask_id, task_id=row.get("task_id"))
        return _to_subtask(row)
    except Exception as e:
        raise _fail("deleting", "subtask", e, subtask_id=subtask_id) from e
