# activities/park_trip.py

from petcore.care import paid_care
from petcore.state import ExpenseType


def run(pet, now, cost=12):
    """
    Activity: Park Trip
    Description: An outing to the park; tiring but good for health.
    """
    return paid_care(
        pet, now, cost, 'Park Trip', ExpenseType.ACTIVITY, xp=2,
        message='Park trip was fun! Pet is happy and healthy.',
        happiness=25, energy=-5, health=3,
    )
