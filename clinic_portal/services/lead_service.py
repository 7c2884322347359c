"""
Service layer for lead tasks, lead notes and user notifications.

Assigning a lead task to another staff member drops a notification in
their inbox.
"""
import logging
from typing import Any, Dict, List, Optional

from repositories import LeadNoteRepository, LeadTaskRepository, NotificationRepository, ProfileRepository
from schemas.lead import (
    LeadNotesResponse,
    LeadTaskCreate,
    LeadTaskResponse,
    LeadTaskUpdate,
    NotificationResponse,
)
from core.exceptions import NotFoundError, TaskNotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)

NOTIFICATION_LIMIT = 50


def _person_name(profile: Optional[Dict[str, Any]]) -> Optional[str]:
    """'First Last'; 'Unknown' when both are blank; None without a profile."""
    if profile is None:
        return None
    name = " ".join(
        part.strip() for part in (profile.get("first_name"), profile.get("last_name")) if part and part.strip()
    )
    return name or "Unknown"


class LeadService:
    """Tasks and notes attached to a lead (a prospect in the pipeline)."""

    def __init__(
        self,
        task_repository: LeadTaskRepository,
        note_repository: LeadNoteRepository,
        notification_repository: NotificationRepository,
        profile_repository: ProfileRepository,
    ):
        self._task_repo = task_repository
        self._note_repo = note_repository
        self._notification_repo = notification_repository
        self._profile_repo = profile_repository

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    def _to_responses(self, tasks: List[Dict[str, Any]]) -> List[LeadTaskResponse]:
        people = self._profile_repo.get_many(
            [t.get("created_by_id") for t in tasks] + [t.get("assigned_to_id") for t in tasks]
        )
        return [
            LeadTaskResponse(
                **task,
                created_by_name=_person_name(people.get(task.get("created_by_id"))),
                assigned_to_name=_person_name(people.get(task.get("assigned_to_id"))),
            )
            for task in tasks
        ]

    def _notify_assignee(self, task: Dict[str, Any], actor_id: str) -> None:
        assignee = task.get("assigned_to_id")
        if not assignee or assignee == actor_id:
            return
        self._notification_repo.add({
            "user_id": assignee,
            "type": "task_assigned",
            "title": f"Task assigned: {task['title']}",
            "body": task.get("description"),
            "link": f"/patient-pipeline/patient-profile/{task['lead_id']}",
            "entity_type": "lead_task",
            "entity_id": task["id"],
        })
        logger.info(f"Notified {assignee} of task assignment (task={task['id']})")

    def _check_assignee(self, assignee_id: Optional[str]) -> None:
        if assignee_id and self._profile_repo.get_by_id(assignee_id) is None:
            raise ValidationFailedError("Assigned staff member not found", assigned_to_id=assignee_id)

    def _get_task(self, task_id: str) -> Dict[str, Any]:
        task = self._task_repo.get_by_id(task_id)
        if task is None:
            raise TaskNotFoundError(task_id=task_id)
        return task

    def list_tasks(self, lead_id: str) -> List[LeadTaskResponse]:
        return self._to_responses(self._task_repo.list_for_lead(lead_id))

    def create_task(self, lead_id: str, data: LeadTaskCreate, actor_id: str) -> LeadTaskResponse:
        self._check_assignee(data.assigned_to_id)
        values = data.model_dump()
        values.update({"lead_id": lead_id, "created_by_id": actor_id})
        task = self._task_repo.add(values)
        logger.info(f"Lead task created (id={task['id']}, lead={lead_id})")
        self._notify_assignee(task, actor_id)
        return self._to_responses([task])[0]

    def update_task(self, task_id: str, data: LeadTaskUpdate, actor_id: str) -> LeadTaskResponse:
        """
        Apply the fields that were sent. Re-assigning notifies the new assignee.

        Raises:
            TaskNotFoundError: Unknown id.
        """
        current = self._get_task(task_id)
        changes = data.model_dump(exclude_unset=True)
        self._check_assignee(changes.get("assigned_to_id"))
        task = self._task_repo.update(task_id, changes)
        if "assigned_to_id" in changes and changes["assigned_to_id"] != current.get("assigned_to_id"):
            self._notify_assignee(task, actor_id)
        return self._to_responses([task])[0]

    def update_status(self, task_id: str, status: str) -> LeadTaskResponse:
        self._get_task(task_id)
        task = self._task_repo.update(task_id, {"status": status})
        return self._to_responses([task])[0]

    def delete_task(self, task_id: str) -> None:
        """
        Raises:
            TaskNotFoundError: Unknown id.
        """
        if not self._task_repo.delete(task_id):
            raise TaskNotFoundError(task_id=task_id)
        logger.info(f"Lead task deleted (id={task_id})")

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    def get_notes(self, lead_id: str) -> LeadNotesResponse:
        note = self._note_repo.get(lead_id)
        if note is None:
            return LeadNotesResponse(lead_id=lead_id, notes="")
        return LeadNotesResponse(**note)

    def save_notes(self, lead_id: str, notes: str, actor_id: str) -> LeadNotesResponse:
        return LeadNotesResponse(**self._note_repo.upsert(lead_id, notes, actor_id))


class NotificationService:
    """The acting user's notification inbox."""

    def __init__(self, notification_repository: NotificationRepository):
        self._repo = notification_repository

    def list_mine(self, user_id: str) -> List[NotificationResponse]:
        return [NotificationResponse(**n) for n in self._repo.list_for_user(user_id, NOTIFICATION_LIMIT)]

    def mark_read(self, notification_id: str, user_id: str) -> None:
        """
        Raises:
            NotFoundError: Unknown id, or the notification is someone else's.
        """
        if not self._repo.mark_read(notification_id, user_id):
            raise NotFoundError("Notification not found", notification_id=notification_id)
