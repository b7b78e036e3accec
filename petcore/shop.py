# shop.py

import logging
from typing import Dict, Optional, Sequence

from pydantic import BaseModel, Field

from petcore.ledger import log_expense, spend
from petcore.state import ExpenseType, Pet, StoredModel, now_ms

logger = logging.getLogger(__name__)


class ShopItem(StoredModel):
    id: int
    name: str
    price: int = Field(gt=0)
    category: str
    emoji: str = ''
    description: str = ''
    effect: str = ''
    hunger_restore: Optional[int] = None
    happiness_bonus: Optional[int] = None
    # Stat deltas applied the moment the item is bought
    purchase_effect: Dict[str, int] = Field(default_factory=dict)


CATALOG = (
    ShopItem(id=1, name='Basic Food', price=25, category='food', emoji='🍖',
             description='Basic nutrition for your pet',
             effect='Restores hunger +20 when consumed',
             hunger_restore=20, happiness_bonus=2),
    ShopItem(id=2, name='Premium Food', price=50, category='food', emoji='🥩',
             description='High-quality nutrition',
             effect='Restores hunger +35, happiness +8 when consumed',
             hunger_restore=35, happiness_bonus=8),
    ShopItem(id=3, name='Cleaning Supplies', price=20, category='supplies', emoji='🧴',
             description='Keeps pet clean', effect='Increases cleanliness +15',
             purchase_effect={'cleanliness': 15}),
    ShopItem(id=4, name='Grooming Kit', price=35, category='supplies', emoji='✂️',
             description='Complete grooming set', effect='Increases cleanliness +25',
             purchase_effect={'cleanliness': 25}),
    ShopItem(id=5, name='Vet Visit', price=100, category='health', emoji='🏥',
             description='Professional health check', effect='Increases health +40',
             purchase_effect={'health': 40}),
    ShopItem(id=6, name='Medicine', price=60, category='health', emoji='💊',
             description='Restores health', effect='Increases health +30',
             purchase_effect={'health': 30}),
    ShopItem(id=7, name='Checkup Package', price=80, category='health', emoji='📋',
             description='Complete health checkup', effect='Increases health +25, happiness +5',
             purchase_effect={'health': 25, 'happiness': 5}),
    ShopItem(id=8, name='Chew Toy', price=15, category='toys', emoji='🦴',
             description='Fun playtime activity', effect='Increases happiness +10',
             purchase_effect={'happiness': 10}),
    ShopItem(id=9, name='Ball', price=20, category='toys', emoji='⚽',
             description='Interactive play toy', effect='Increases happiness +15',
             purchase_effect={'happiness': 15}),
    ShopItem(id=10, name='Puzzle Toy', price=30, category='toys', emoji='🧩',
             description='Mental stimulation', effect='Increases happiness +20, XP +2',
             purchase_effect={'happiness': 20}),
    ShopItem(id=11, name='Spa Ticket', price=15, category='activity', emoji='🎫',
             description='Ticket for spa day activity', effect='Use in Activities tab',
             purchase_effect={'happiness': 2}),
    ShopItem(id=12, name='Park Ticket', price=12, category='activity', emoji='🎟️',
             description='Ticket for park trip activity', effect='Use in Activities tab',
             purchase_effect={'happiness': 2}),
)

CATEGORY_EXPENSE_TYPES = {
    'food': ExpenseType.FOOD,
    'toys': ExpenseType.TOY,
    'health': ExpenseType.HEALTHCARE,
    'supplies': ExpenseType.SUPPLIES,
    'activity': ExpenseType.ACTIVITY,
}


class PurchaseResult(BaseModel):
    success: bool
    pet: Pet
    message: str


def get_item(item_id: int, catalog: Sequence[ShopItem] = CATALOG) -> Optional[ShopItem]:
    return next((item for item in catalog if item.id == item_id), None)


def items_in_category(category: str, catalog: Sequence[ShopItem] = CATALOG):
    return [item for item in catalog if item.category == category]


def expense_type_for(item: ShopItem) -> ExpenseType:
    return CATEGORY_EXPENSE_TYPES.get(item.category, ExpenseType.PURCHASE)


def buy_item(pet: Pet, item: ShopItem, now: Optional[int] = None) -> PurchaseResult:
    """Buy one unit of an item.

    The cost is journaled here, at purchase time; consuming food later is free.
    """
    now = now_ms() if now is None else now
    paid = spend(pet, item.price, f"Purchase {item.name}", now=now)
    if not paid.ok:
        return PurchaseResult(success=False, pet=pet, message=paid.message)

    inventory = dict(paid.pet.inventory)
    inventory[item.id] = inventory.get(item.id, 0) + 1
    bought = paid.pet.model_copy(update={
        'inventory': inventory,
        'stats': paid.pet.stats.adjust(**item.purchase_effect),
    })
    bought = log_expense(bought, expense_type_for(item), item.price,
                         f"Purchased {item.name}", item_name=item.name, now=now)
    logger.info("Pet %s bought %s for %s coins", pet.id, item.name, item.price)
    return PurchaseResult(success=True, pet=bought, message=f"Successfully purchased {item.name}!")
