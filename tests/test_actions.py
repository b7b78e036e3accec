"""Tests for player actions."""
import pytest

from petcore import actions
from petcore.decay import tick
from petcore.state import ExpenseType

from conftest import MINUTE, T0, with_stats


class TestRegistry:
    def test_every_activity_is_loaded(self):
        expected = {'feed', *actions.PAID_ACTIVITIES, *actions.FREE_ACTIVITIES}
        assert set(actions.ACTIVITIES) == expected

    def test_unknown_activity(self, pet):
        with pytest.raises(KeyError, match='Unknown activity: dance'):
            actions.perform('dance', pet)

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            actions.ACTIVITIES['dance'] = None


class TestVetVisit:
    def test_paid_visit(self, pet):
        sick = with_stats(pet, health=50)
        result = actions.visit_vet(sick, cost=50, health_restore=15, now=T0)
        assert result.success
        assert result.pet.stats.health == 65
        assert result.pet.coins == 950
        assert len(result.pet.expenses) == 1
        entry = result.pet.expenses[0]
        assert entry.amount == 50
        assert entry.category is ExpenseType.HEALTHCARE

    def test_happiness_bonus_tier(self, pet):
        sad = with_stats(pet, happiness=50)
        result = actions.visit_vet(sad, cost=80, health_restore=25, happiness_bonus=5, now=T0)
        assert result.pet.stats.happiness == 55

    def test_no_bonus_costs_a_little_happiness(self, pet):
        result = actions.visit_vet(pet, cost=50, now=T0)
        assert result.pet.stats.happiness == 99

    def test_there_is_no_free_visit(self, pet):
        result = actions.visit_vet(pet, cost=None, now=T0)
        assert not result.success
        assert result.pet.coins == 1000
        assert result.pet.expenses == []

    @pytest.mark.parametrize('cost', [0.5, 0.4])
    def test_fraction_of_a_coin_is_rejected(self, pet, cost):
        result = actions.visit_vet(pet, cost=cost, now=T0)
        assert not result.success
        assert result.message == f'Invalid cost: {cost}. Cost must be greater than 0.'
        assert result.pet.coins == 1000
        assert result.pet.expenses == []

    def test_fractional_cost_charges_and_journals_the_same_coins(self, pet):
        poor = pet.model_copy(update={'coins': 50})
        result = actions.visit_vet(poor, cost=50.7, now=T0)
        assert result.success
        assert result.pet.coins == 0
        assert result.pet.expenses[0].amount == 50

    def test_not_enough_coins(self, pet):
        broke = pet.model_copy(update={'coins': 10})
        result = actions.visit_vet(broke, cost=50, now=T0)
        assert not result.success
        assert result.message == 'Not enough coins for health care. You need 50 coins but only have 10.'


class TestFeed:
    def test_no_food_in_inventory(self, pet):
        now = T0 + 3 * MINUTE
        result = actions.feed(pet, item_id=1, now=now)
        assert not result.success
        assert result.pet == tick(pet, now)
        assert 'No food available' in result.message

    def test_zero_quantity(self, pet):
        empty = pet.model_copy(update={'inventory': {1: 0}})
        result = actions.feed(empty, item_id=1, now=T0)
        assert not result.success
        assert result.pet.inventory == {1: 0}

    def test_consumes_one_unit(self, pet):
        stocked = with_stats(pet.model_copy(update={'inventory': {1: 2}}), hunger=50, happiness=50)
        result = actions.feed(stocked, item_id=1, now=T0)
        assert result.success
        assert result.pet.inventory == {1: 1}
        assert result.pet.stats.hunger == 70
        assert result.pet.stats.happiness == 52
        assert result.pet.stats.cleanliness == 98
        assert result.pet.xp == 2
        # already journaled when it was bought
        assert result.pet.expenses == []
        assert result.pet.coins == 1000

    def test_premium_food(self, pet):
        stocked = with_stats(pet.model_copy(update={'inventory': {2: 1}}), hunger=50, happiness=50)
        result = actions.feed(stocked, item_id=2, now=T0)
        assert result.pet.stats.hunger == 85
        assert result.pet.stats.happiness == 58

    def test_non_food_item(self, pet):
        stocked = pet.model_copy(update={'inventory': {3: 1}})
        result = actions.feed(stocked, item_id=3, now=T0)
        assert not result.success
        assert 'Invalid food item' in result.message
        assert result.pet.inventory == {3: 1}


class TestPaidActions:
    @pytest.mark.parametrize('name, cost, category, deltas, xp', [
        ('play', 30, ExpenseType.TOY, {'happiness': 25, 'energy': -10, 'cleanliness': -5}, 1),
        ('rest', 20, ExpenseType.CARE, {'energy': 25, 'hunger': -3}, 1),
        ('clean', 25, ExpenseType.SUPPLIES, {'cleanliness': 30, 'happiness': 2}, 1),
        ('spa_day', 15, ExpenseType.ACTIVITY, {'happiness': 30, 'cleanliness': 25, 'health': 5}, 2),
        ('training_class', 10, ExpenseType.ACTIVITY, {'happiness': 20, 'energy': 10}, 3),
        ('park_trip', 12, ExpenseType.ACTIVITY, {'happiness': 25, 'energy': -5, 'health': 3}, 2),
    ])
    def test_fixed_effects(self, pet, name, cost, category, deltas, xp):
        start = with_stats(pet, hunger=50, happiness=50, health=50, energy=50, cleanliness=50)
        result = actions.perform(name, start, now=T0)
        assert result.success
        assert result.pet.coins == 1000 - cost
        assert result.pet.xp == xp
        assert [(e.amount, e.category) for e in result.pet.expenses] == [(cost, category)]
        for stat, delta in deltas.items():
            assert getattr(result.pet.stats, stat) == 50 + delta

    def test_stats_are_clamped(self, pet):
        result = actions.clean(pet, now=T0)
        assert result.pet.stats.cleanliness == 100

    def test_not_enough_coins(self, pet):
        broke = pet.model_copy(update={'coins': 10})
        result = actions.play(broke, now=T0)
        assert not result.success
        assert result.pet.coins == 10
        assert result.message.startswith('Not enough coins!')

    def test_zero_cost_is_rejected(self, pet):
        result = actions.play(pet, cost=0, now=T0)
        assert not result.success
        assert result.pet.expenses == []

    def test_decay_is_applied_first(self, pet):
        now = T0 + 10 * MINUTE
        result = actions.rest(pet, now=now)
        assert result.pet.last_tick_at == now
        # 12 lost to decay, 3 to resting
        assert result.pet.stats.hunger == pytest.approx(85)

    def test_evolution_is_reported(self, pet):
        almost = pet.model_copy(update={'xp': 19})
        result = actions.play(almost, now=T0)
        assert result.evolution is not None
        assert result.evolution.to_stage == 1
        assert result.pet.age_stage == 1


class TestFreeActions:
    @pytest.mark.parametrize('name', ['feed_at_home', 'clean_free', 'rest_free', 'health_check_free'])
    def test_cost_nothing(self, pet, name):
        result = actions.perform(name, with_stats(pet, hunger=50, energy=50, cleanliness=50), now=T0)
        assert result.success
        assert result.pet.coins == 1000
        assert result.pet.expenses == []
        assert result.pet.xp > 0

    def test_health_check_helps_more_when_unwell(self, pet):
        assert actions.health_check_free(with_stats(pet, health=40), now=T0).pet.stats.health == 55
        assert actions.health_check_free(with_stats(pet, health=80), now=T0).pet.stats.health == 85
