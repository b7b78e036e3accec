# quests.py

import logging
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from petcore.activity_constraints import today_key
from petcore.state import StoredModel, now_ms

logger = logging.getLogger(__name__)

# Stored progress of a claimed quest; older saves rely on it.
CLAIMED_PROGRESS = -1

ACTION_QUESTS = {
    'feed': 'feed_pet',
    'play': 'play_pet',
    'clean': 'clean_pet',
    'visit_vet': 'health_check',
}


class QuestStatus(str, Enum):
    IN_PROGRESS = 'in_progress'
    READY = 'ready'
    CLAIMED = 'claimed'


class Quest(StoredModel):
    id: str
    goal: int = Field(ge=1)
    progress: int = 0
    reward_coins: int = 0
    reward_xp: int = 0
    completed_at: Optional[int] = None

    @property
    def status(self) -> QuestStatus:
        if self.completed_at is not None or self.progress == CLAIMED_PROGRESS:
            return QuestStatus.CLAIMED
        if self.progress >= self.goal:
            return QuestStatus.READY
        return QuestStatus.IN_PROGRESS


class QuestBoard(StoredModel):
    daily: List[Quest] = Field(default_factory=list)
    last_reset: str = ''


class QuestClaim(BaseModel):
    coins: int
    xp: int
    board: QuestBoard


def default_quests(today: str) -> QuestBoard:
    return QuestBoard(
        daily=[
            Quest(id='clean_pet', goal=1, reward_coins=20, reward_xp=1),
            Quest(id='play_pet', goal=2, reward_coins=30, reward_xp=2),
            Quest(id='feed_pet', goal=3, reward_coins=30, reward_xp=3),
            Quest(id='health_check', goal=1, reward_coins=45, reward_xp=5),
        ],
        last_reset=today,
    )


def current_quests(board, now: Optional[int] = None) -> QuestBoard:
    """Today's board. Anything missing, unreadable or from an earlier day starts fresh.

    `board` may be a QuestBoard or the raw value stored in a slot.
    """
    now = now_ms() if now is None else now
    today = today_key(now)
    if not board:
        return default_quests(today)
    if not isinstance(board, QuestBoard):
        if not isinstance(board, dict):
            # Old saves kept a bare list here with no reset date.
            return default_quests(today)
        try:
            board = QuestBoard.model_validate(board)
        except ValueError:
            logger.warning("Discarding unreadable quest board")
            return default_quests(today)
    if board.last_reset != today or not board.daily:
        return default_quests(today)
    return board


def _replace(board: QuestBoard, quest: Quest) -> QuestBoard:
    daily = [quest if q.id == quest.id else q for q in board.daily]
    return board.model_copy(update={'daily': daily})


def record_progress(board: QuestBoard, action: str) -> QuestBoard:
    """Count one completed action toward its quest, never past the goal."""
    quest_id = ACTION_QUESTS.get(action)
    if quest_id is None:
        return board
    quest = next((q for q in board.daily if q.id == quest_id), None)
    if quest is None or quest.status is not QuestStatus.IN_PROGRESS:
        return board
    return _replace(board, quest.model_copy(update={'progress': quest.progress + 1}))


def claim_reward(board: QuestBoard, quest_id: str, now: Optional[int] = None) -> Optional[QuestClaim]:
    """Mark a ready quest claimed. Returns None if it is missing, unfinished or already claimed."""
    quest = next((q for q in board.daily if q.id == quest_id), None)
    if quest is None or quest.status is not QuestStatus.READY:
        return None
    now = now_ms() if now is None else now
    claimed = quest.model_copy(update={'progress': CLAIMED_PROGRESS, 'completed_at': now})
    return QuestClaim(coins=quest.reward_coins, xp=quest.reward_xp, board=_replace(board, claimed))


def ready_quests(board: QuestBoard) -> List[str]:
    return [q.id for q in board.daily if q.status is QuestStatus.READY]


def claimed_count(board: QuestBoard) -> int:
    return sum(1 for q in board.daily if q.status is QuestStatus.CLAIMED)
