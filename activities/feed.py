# activities/feed.py

from petcore.progression import award_experience
from petcore.shop import CATALOG, get_item
from petcore.state import ActionResult

DEFAULT_HUNGER_RESTORE = 20
DEFAULT_HAPPINESS_BONUS = 2


def run(pet, now, item_id=1, catalog=CATALOG):
    """
    Activity: Feed
    Description: The pet eats one unit of food bought earlier from the shop.
    The food was paid for (and journaled) at purchase time, so nothing is
    charged here.
    """
    quantity = pet.inventory.get(item_id, 0)
    if quantity <= 0:
        return ActionResult(
            success=False,
            pet=pet,
            message='No food available. Please purchase food from the Store first.',
        )

    item = get_item(item_id, catalog)
    if item is None or item.category != 'food':
        return ActionResult(
            success=False,
            pet=pet,
            message='Invalid food item. Please use a food item from the Store.',
        )

    hunger_restore = item.hunger_restore or DEFAULT_HUNGER_RESTORE
    happiness_bonus = item.happiness_bonus or DEFAULT_HAPPINESS_BONUS

    inventory = dict(pet.inventory)
    inventory[item_id] = quantity - 1
    fed = pet.model_copy(update={
        'inventory': inventory,
        'stats': pet.stats.adjust(hunger=hunger_restore, happiness=happiness_bonus, cleanliness=-2),
        'last_updated': now,
    })
    fed, evolution = award_experience(fed, 2)
    return ActionResult(
        success=True,
        pet=fed,
        message=f"Fed pet! Hunger +{hunger_restore}, Happiness +{happiness_bonus}",
        evolution=evolution,
    )
