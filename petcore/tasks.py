# tasks.py

import logging
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from petcore.activity_constraints import cooldown_seconds, is_activity_allowed, time_remaining
from petcore.decay import NORMAL_SPEED, tick
from petcore.ledger import give
from petcore.progression import award_experience
from petcore.state import EvolutionEvent, IncomeRecord, Pet, RewardSource, StoredModel, now_ms

logger = logging.getLogger(__name__)


class Task(StoredModel):
    id: str
    name: str
    description: str = ''
    emoji: str = ''
    coins: int
    xp: int
    stat_changes: Dict[str, int] = Field(default_factory=dict)
    category: str

    @property
    def cooldown_seconds(self) -> int:
        return cooldown_seconds(self.id)


class TaskState(StoredModel):
    task_id: str
    last_completed_at: Optional[int] = None
    in_progress: bool = False


class TaskOutcome(BaseModel):
    success: bool
    pet: Pet
    task_state: List[TaskState]
    income: Optional[IncomeRecord] = None
    evolution: Optional[EvolutionEvent] = None
    message: str = ''


TASKS = (
    Task(id='clean_room', name="Clean your pet's room", description="Tidy up your pet's living space",
         emoji='🧹', coins=15, xp=2, stat_changes={'cleanliness': 8, 'happiness': 3}, category='chore'),
    Task(id='training', name='Do training with your pet', description='Practice tricks and commands',
         emoji='🎓', coins=18, xp=3, stat_changes={'happiness': 5, 'energy': -2}, category='training'),
    Task(id='pet_walking', name='Pet walking task', description='Take your pet for a walk',
         emoji='🚶', coins=20, xp=2, stat_changes={'happiness': 6, 'energy': -3, 'health': 2},
         category='walking'),
    Task(id='grooming', name='Grooming session', description='Brush and groom your pet',
         emoji='💇', coins=15, xp=2, stat_changes={'cleanliness': 10, 'happiness': 4}, category='chore'),
)


def get_task(task_id: str) -> Optional[Task]:
    return next((task for task in TASKS if task.id == task_id), None)


def state_for(task_id: str, task_states: Sequence[TaskState]) -> Optional[TaskState]:
    return next((state for state in task_states if state.task_id == task_id), None)


def can_do_task(task: Task, state: Optional[TaskState], now: Optional[int] = None) -> bool:
    now = now_ms() if now is None else now
    last = state.last_completed_at if state else None
    return is_activity_allowed(task.id, last, now)


def seconds_until_ready(task: Task, state: Optional[TaskState], now: Optional[int] = None) -> int:
    now = now_ms() if now is None else now
    return time_remaining(task.id, state.last_completed_at if state else None, now)


def complete_task(pet: Pet, task_id: str, task_states: Sequence[TaskState], now: Optional[int] = None) -> TaskOutcome:
    """Pay out a task's reward and start its cooldown."""
    now = now_ms() if now is None else now
    task_states = list(task_states)
    pet = tick(pet, now, NORMAL_SPEED)

    task = get_task(task_id)
    if task is None:
        return TaskOutcome(success=False, pet=pet, task_state=task_states, message=f"Unknown task: {task_id}")

    state = state_for(task_id, task_states)
    if not can_do_task(task, state, now):
        remaining = seconds_until_ready(task, state, now)
        return TaskOutcome(success=False, pet=pet, task_state=task_states,
                           message=f"{task.name} is on cooldown for {remaining}s.")

    pet, income = give(pet, task.coins, RewardSource.TASK, now=now)
    pet = pet.model_copy(update={'stats': pet.stats.adjust(**task.stat_changes), 'last_updated': now})
    pet, evolution = award_experience(pet, task.xp)

    updated = TaskState(task_id=task_id, last_completed_at=now, in_progress=False)
    task_states = [s for s in task_states if s.task_id != task_id] + [updated]
    logger.info("Task %s completed for pet %s (+%s coins)", task_id, pet.id, task.coins)
    return TaskOutcome(
        success=True,
        pet=pet,
        task_state=task_states,
        income=income,
        evolution=evolution,
        message=f"Completed task: {task.name}",
    )
