"""Task service - business logic for team tasks."""
import logging
from datetime import datetime
from typing import Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from app.errors import InvalidAssigneeError, StorageUnavailableError, TaskNotFoundError
from app.models.task import Task, TaskCreate, TaskUpdate
from app.services.user_service import UserService
from app.utils.clock import Clock

logger = logging.getLogger(__name__)


def _task_id(task_id: str) -> ObjectId:
    if not ObjectId.is_valid(task_id):
        raise TaskNotFoundError()
    return ObjectId(task_id)


def _visible_to(user_id: str) -> dict:
    """Tasks a user created or was assigned."""
    return {"$or": [{"user_id": user_id}, {"assigned_to": user_id}]}


class TaskService:
    """Service for creating, assigning and completing tasks."""

    def __init__(self, db, clock: Clock):
        """Initialize service with database connection and clock."""
        self.db = db
        self.clock = clock
        self.tasks = db["tasks"]
        self.members = db["team_members"]
        self.users = UserService(db)

    def _doc_to_task(self, doc: dict) -> Task:
        """
        Convert database document to Task model.

        Due dates are stored as midnight datetimes.
        """
        due = doc.get("due_date")
        return Task(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            title=doc["title"],
            description=doc.get("description", ""),
            priority=doc.get("priority", "medium"),
            due_date=due.date() if isinstance(due, datetime) else due,
            completed=doc.get("completed", False),
            assigned_to=doc.get("assigned_to"),
            assigned_to_email=doc.get("assigned_to_email"),
            assigned_to_name=doc.get("assigned_to_name"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def _resolve_assignee(self, user_id: str, assignee_id: Optional[str]) -> dict:
        """
        Look up who a task is being assigned to.

        Creators may assign to themselves or to an active member of their
        own team.

        Raises:
            InvalidAssigneeError: If the assignee is outside the team
        """
        if not assignee_id:
            return {"assigned_to": None, "assigned_to_email": None, "assigned_to_name": None}

        if assignee_id == user_id:
            user = await self.users.get_user(user_id)
            return {
                "assigned_to": user_id,
                "assigned_to_email": user.email if user else None,
                "assigned_to_name": user.name if user else None,
            }

        try:
            member = await self.members.find_one({
                "team_owner_id": user_id,
                "member_id": assignee_id,
                "status": "active",
            })
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        if not member:
            raise InvalidAssigneeError()

        return {
            "assigned_to": assignee_id,
            "assigned_to_email": member["member_email"],
            "assigned_to_name": member["member_name"],
        }

    async def create_task(self, user_id: str, task_create: TaskCreate) -> Task:
        """
        Create a new task.

        Args:
            user_id: Creating user's ID
            task_create: Task creation data

        Returns:
            Created task

        Raises:
            InvalidAssigneeError: If assigned_to is not the creator or a team member
        """
        assignee = await self._resolve_assignee(user_id, task_create.assigned_to)
        now = self.clock.now()

        task_doc = {
            "user_id": user_id,
            "title": task_create.title,
            "description": task_create.description,
            "priority": task_create.priority.value,
            "due_date": None,
            "completed": False,
            **assignee,
            "created_at": now,
            "updated_at": now,
        }
        if task_create.due_date:
            task_doc["due_date"] = datetime.combine(task_create.due_date, datetime.min.time())

        try:
            result = await self.tasks.insert_one(task_doc)
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        task_doc["_id"] = result.inserted_id
        return self._doc_to_task(task_doc)

    async def list_tasks(
        self,
        user_id: str,
        completed: Optional[bool] = None,
    ) -> list[Task]:
        """
        List tasks the user created or was assigned, newest first.

        Args:
            user_id: User ID
            completed: Optional completion filter
        """
        query = _visible_to(user_id)
        if completed is not None:
            query["completed"] = completed

        try:
            cursor = self.tasks.find(query).sort("created_at", -1)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        return [self._doc_to_task(doc) for doc in docs]

    async def get_task(self, user_id: str, task_id: str) -> Task:
        """
        Get a task the user created or was assigned.

        Raises:
            TaskNotFoundError: If no such task is visible to the user
        """
        try:
            doc = await self.tasks.find_one({"_id": _task_id(task_id), **_visible_to(user_id)})
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        if not doc:
            raise TaskNotFoundError()

        return self._doc_to_task(doc)

    async def update_task(
        self,
        user_id: str,
        task_id: str,
        task_update: TaskUpdate,
    ) -> Task:
        """
        Update a task. Only its creator may edit or reassign it.

        Raises:
            TaskNotFoundError: If the user did not create the task
            InvalidAssigneeError: If the new assignee is outside the team
        """
        update_doc = {}
        if task_update.title is not None:
            update_doc["title"] = task_update.title
        if task_update.description is not None:
            update_doc["description"] = task_update.description
        if task_update.priority is not None:
            update_doc["priority"] = task_update.priority.value
        if task_update.due_date is not None:
            update_doc["due_date"] = datetime.combine(task_update.due_date, datetime.min.time())
        if "assigned_to" in task_update.model_fields_set:
            update_doc.update(await self._resolve_assignee(user_id, task_update.assigned_to))

        update_doc["updated_at"] = self.clock.now()

        try:
            doc = await self.tasks.find_one_and_update(
                {"_id": _task_id(task_id), "user_id": user_id},
                {"$set": update_doc},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        if not doc:
            raise TaskNotFoundError()

        return self._doc_to_task(doc)

    async def toggle_completed(self, user_id: str, task_id: str) -> Task:
        """
        Flip a task between open and completed.

        The creator and the assignee may both do this. The flip happens in
        one update, so two concurrent toggles cancel out instead of both
        writing the same value.

        Raises:
            TaskNotFoundError: If no such task is visible to the user
        """
        try:
            doc = await self.tasks.find_one_and_update(
                {"_id": _task_id(task_id), **_visible_to(user_id)},
                [{"$set": {
                    "completed": {"$not": ["$completed"]},
                    "updated_at": self.clock.now(),
                }}],
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        if not doc:
            raise TaskNotFoundError()

        logger.info("Task %s completed=%s by %s", task_id, doc["completed"], user_id)
        return self._doc_to_task(doc)

    async def delete_task(self, user_id: str, task_id: str) -> dict:
        """
        Delete a task. Only its creator may delete it.

        Returns:
            Dictionary with deleted_count

        Raises:
            TaskNotFoundError: If the user did not create the task
        """
        try:
            result = await self.tasks.delete_one({"_id": _task_id(task_id), "user_id": user_id})
        except PyMongoError as e:
            raise StorageUnavailableError(str(e)) from e

        if result.deleted_count == 0:
            raise TaskNotFoundError()

        return {"deleted_count": result.deleted_count}
