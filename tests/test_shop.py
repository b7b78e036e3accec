"""Tests for the shop catalog and purchases."""
from petcore.shop import CATALOG, ShopItem, buy_item, expense_type_for, get_item, items_in_category
from petcore.state import ExpenseType

from conftest import T0, with_stats


class TestCatalog:
    def test_lookup(self):
        assert get_item(1).name == 'Basic Food'
        assert get_item(999) is None

    def test_food_items(self):
        assert [item.id for item in items_in_category('food')] == [1, 2]

    def test_ids_are_unique(self):
        assert len({item.id for item in CATALOG}) == len(CATALOG)

    def test_unknown_category_is_a_purchase(self):
        item = ShopItem(id=99, name='Hat', price=5, category='fashion')
        assert expense_type_for(item) is ExpenseType.PURCHASE


class TestBuyItem:
    def test_buying_food_stocks_inventory(self, pet):
        result = buy_item(pet, get_item(1), now=T0)
        assert result.success
        assert result.pet.coins == 975
        assert result.pet.inventory == {1: 1}
        entry = result.pet.expenses[0]
        assert (entry.amount, entry.category, entry.item_name) == (25, ExpenseType.FOOD, 'Basic Food')

    def test_buying_twice_stacks(self, pet):
        once = buy_item(pet, get_item(1), now=T0).pet
        twice = buy_item(once, get_item(1), now=T0).pet
        assert twice.inventory == {1: 2}
        assert len(twice.expenses) == 2

    def test_purchase_effect_applies_immediately(self, pet):
        result = buy_item(with_stats(pet, happiness=50), get_item(8), now=T0)
        assert result.pet.stats.happiness == 60
        assert result.pet.expenses[0].category is ExpenseType.TOY

    def test_not_enough_coins(self, pet):
        broke = pet.model_copy(update={'coins': 20})
        result = buy_item(broke, get_item(5), now=T0)
        assert not result.success
        assert result.pet == broke
        assert result.message == 'Not enough coins! You need 100 but only have 20.'
