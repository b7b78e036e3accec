# activities/spa_day.py

from petcore.care import paid_care
from petcore.state import ExpenseType


def run(pet, now, cost=15):
    """
    Activity: Pet Spa Day
    Description: A pampering session that boosts happiness and cleanliness.
    """
    return paid_care(
        pet, now, cost, 'Pet Spa Day', ExpenseType.ACTIVITY, xp=2,
        message='Pet enjoyed the spa day! Happiness and cleanliness increased.',
        happiness=30, cleanliness=25, health=5,
    )
