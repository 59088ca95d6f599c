"""Task and Subtask models."""

from enum import Enum
from typing import Optional, Union
from datetime import date, datetime
from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Task status values (matches the task_status database enum)."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Task priority values (matches the task_priority database enum)."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


DueDateInput = Union[datetime, date, str, None]


class Subtask(BaseModel):
    """Subtask model - a child item of exactly one task."""
    id: str = Field(..., description="Subtask ID (assigned by the store)")
    task_id: str = Field(..., description="Owning task ID")
    title: str = Field(..., description="Subtask title")
    description: Optional[str] = Field(None, description="Subtask description")
    completed: bool = Field(default=False, description="Completion flag")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Task(BaseModel):
    """Task model with its subtasks."""
    id: str = Field(..., description="Task ID (assigned by the store)")
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Status: pending, in_progress, completed")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Priority: low, medium, high")
    due_date: Optional[datetime] = Field(None, description="Due timestamp")
    assigned_to: Optional[str] = Field(None, description="Assignee reference")
    subtasks: list[Subtask] = Field(default_factory=list, description="Subtasks owned by this task")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubtaskCreate(BaseModel):
    """Input record for a new subtask."""
    title: str = Field(..., description="Subtask title")
    description: Optional[str] = Field(None, description="Subtask description")
    completed: Optional[bool] = Field(default=False, description="Completion flag (null treated as false)")


class TaskCreate(BaseModel):
    """Input record for a new task, optionally seeded with subtasks."""
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    status: str = Field(
        default=TaskStatus.PENDING.value,
        description="Status; 'in-progress' is accepted and stored as 'in_progress'"
    )
    priority: str = Field(default=TaskPriority.MEDIUM.value, description="Priority: low, medium, high")
    due_date: DueDateInput = Field(None, description="Due date (ISO string, date or datetime)")
    assigned_to: Optional[str] = Field(None, description="Assignee reference")
    subtasks: list[SubtaskCreate] = Field(default_factory=list, description="Subtasks created with the task")


class TaskUpdate(BaseModel):
    """
    Partial update for a task.

    Only fields the caller actually set are written; an explicit None
    clears the column, an omitted field is left untouched.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: DueDateInput = None
    assigned_to: Optional[str] = None


class SubtaskUpdate(BaseModel):
    """Partial update for a subtask. The owning task cannot be changed."""
    title: Optional[str] = None
    description: Optional[str] = None
    completed: Optional[bool] = None
