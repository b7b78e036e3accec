"""Tests for XP stages and evolution events."""
import pytest

from petcore.progression import (
    acknowledge_evolution,
    add_experience,
    award_experience,
    check_evolution,
    evolution_id,
    stage_for_xp,
    stage_label,
)
from petcore.state import XP_CEILING, PetType, create_pet

from conftest import T0


class TestStages:
    @pytest.mark.parametrize('xp, stage', [
        (0, 0), (19, 0), (20, 1), (59, 1), (60, 2), (119, 2), (120, 3), (9999, 3),
    ])
    def test_stage_for_xp(self, xp, stage):
        assert stage_for_xp(xp) == stage

    def test_labels(self):
        assert [stage_label(s) for s in range(4)] == ['Baby', 'Young', 'Adult', 'Mature']

    def test_new_pet_has_no_pending_evolution(self, pet):
        assert pet.age_stage == 0
        assert pet.evolved is False
        assert check_evolution(pet) == (pet, None)

    def test_xp_is_capped(self, pet):
        assert add_experience(pet, 20000).xp == XP_CEILING


class TestEvolutionEvents:
    def test_crossing_threshold_emits_event(self, pet):
        evolved, event = award_experience(pet, 20)
        assert evolved.age_stage == 1
        assert evolved.evolved is True
        assert event.from_stage == 0
        assert event.to_stage == 1
        assert event.at_xp == 20
        assert event.id == evolution_id(pet.id, 0, 1, 20)

    def test_event_id_is_stable(self):
        first = create_pet('Mochi', PetType.CAT, now=T0).model_copy(update={'id': 'pet-1', 'xp': 20})
        second = create_pet('Mochi', PetType.CAT, now=T0 + 5000).model_copy(update={'id': 'pet-1', 'xp': 20})
        _, a = check_evolution(first)
        _, b = check_evolution(second)
        assert a.id == b.id == 'pet-1-0-1-20'

    def test_acknowledged_event_is_suppressed(self, pet):
        _, event = award_experience(pet, 20)
        acked = acknowledge_evolution(pet.model_copy(update={'xp': 20}), event.id)
        synced, again = check_evolution(acked)
        assert again is None
        assert synced.age_stage == 1

    def test_acknowledge_clears_pending_flag(self, pet):
        evolved, event = award_experience(pet, 20)
        acked = acknowledge_evolution(evolved, event.id)
        assert acked.evolved is False
        assert acked.last_evolution_ack_id == event.id

    def test_no_event_without_stage_change(self, pet):
        _, event = award_experience(pet, 5)
        assert event is None

    def test_skipping_stages(self, pet):
        evolved, event = award_experience(pet, 130)
        assert evolved.age_stage == 3
        assert (event.from_stage, event.to_stage) == (0, 3)
