# activities/rest.py

from petcore.care import paid_care
from petcore.state import ExpenseType


def run(pet, now, cost=20):
    """
    Activity: Rest
    Description: The pet rests in a paid bed to restore energy; time passes so it gets a little hungry.
    """
    return paid_care(
        pet, now, cost, 'Pet rest', ExpenseType.CARE, xp=1,
        message='Your pet feels rested. Energy +25',
        energy=25, hunger=-3,
    )
