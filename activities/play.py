# activities/play.py

from petcore.care import paid_care
from petcore.state import ExpenseType


def run(pet, now, cost=30):
    """
    Activity: Play
    Description: A paid play session that lifts happiness at the cost of some energy and cleanliness.
    """
    return paid_care(
        pet, now, cost, 'Play with pet', ExpenseType.TOY, xp=1,
        message='Playtime! Happiness +25',
        happiness=25, energy=-10, cleanliness=-5,
    )
