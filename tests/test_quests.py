"""Tests for the daily quest board."""
from petcore.activity_constraints import today_key
from petcore.quests import (
    QuestStatus,
    claim_reward,
    claimed_count,
    current_quests,
    default_quests,
    ready_quests,
    record_progress,
)

from conftest import DAY, T0


def quest(board, quest_id):
    return next(q for q in board.daily if q.id == quest_id)


class TestBoard:
    def test_default_board(self):
        board = default_quests('2024-01-01')
        assert [(q.id, q.goal, q.reward_coins, q.reward_xp) for q in board.daily] == [
            ('clean_pet', 1, 20, 1),
            ('play_pet', 2, 30, 2),
            ('feed_pet', 3, 30, 3),
            ('health_check', 1, 45, 5),
        ]

    def test_missing_board_starts_fresh(self):
        assert current_quests(None, T0) == default_quests(today_key(T0))

    def test_legacy_list_starts_fresh(self):
        assert current_quests([], T0).last_reset == today_key(T0)

    def test_same_day_keeps_progress(self):
        board = record_progress(current_quests(None, T0), 'clean')
        assert current_quests(board, T0) == board

    def test_new_day_resets(self):
        board = record_progress(current_quests(None, T0), 'clean')
        fresh = current_quests(board, T0 + DAY)
        assert quest(fresh, 'clean_pet').progress == 0
        assert fresh.last_reset == today_key(T0 + DAY)

    def test_reads_stored_form(self):
        board = record_progress(current_quests(None, T0), 'play')
        stored = board.model_dump(mode='json', by_alias=True)
        assert 'lastReset' in stored
        assert current_quests(stored, T0) == board


class TestProgress:
    def test_actions_map_to_quests(self):
        board = current_quests(None, T0)
        for action in ('feed', 'play', 'clean', 'visit_vet'):
            board = record_progress(board, action)
        assert [q.progress for q in board.daily] == [1, 1, 1, 1]

    def test_unrelated_action_is_ignored(self):
        board = current_quests(None, T0)
        assert record_progress(board, 'rest') == board

    def test_progress_never_passes_goal(self):
        board = current_quests(None, T0)
        for _ in range(5):
            board = record_progress(board, 'feed')
        assert quest(board, 'feed_pet').progress == 3
        assert quest(board, 'feed_pet').status is QuestStatus.READY
        assert ready_quests(board) == ['feed_pet']


class TestClaim:
    def test_claim_once(self):
        board = record_progress(current_quests(None, T0), 'visit_vet')
        claim = claim_reward(board, 'health_check', now=T0)
        assert (claim.coins, claim.xp) == (45, 5)
        claimed = quest(claim.board, 'health_check')
        assert claimed.status is QuestStatus.CLAIMED
        assert claimed.completed_at == T0
        assert claim_reward(claim.board, 'health_check', now=T0) is None
        assert claimed_count(claim.board) == 1

    def test_unfinished_quest_cannot_be_claimed(self):
        board = record_progress(current_quests(None, T0), 'feed')
        assert claim_reward(board, 'feed_pet', now=T0) is None

    def test_unknown_quest(self):
        assert claim_reward(current_quests(None, T0), 'nope', now=T0) is None

    def test_claimed_quest_stops_counting(self):
        board = record_progress(current_quests(None, T0), 'clean')
        board = claim_reward(board, 'clean_pet', now=T0).board
        again = record_progress(board, 'clean')
        assert quest(again, 'clean_pet').status is QuestStatus.CLAIMED
