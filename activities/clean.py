# activities/clean.py

from petcore.care import paid_care
from petcore.state import ExpenseType


def run(pet, now, cost=25):
    """
    Activity: Clean
    Description: A bath with bought supplies.
    """
    return paid_care(
        pet, now, cost, 'Clean pet', ExpenseType.SUPPLIES, xp=1,
        message='Squeaky clean! Cleanliness +30',
        cleanliness=30, happiness=2,
    )
