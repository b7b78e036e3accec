# activities/training_class.py

from petcore.care import paid_care
from petcore.state import ExpenseType


def run(pet, now, cost=10):
    """
    Activity: Training Class
    """
    return paid_care(
        pet, now, cost, 'Training Class', ExpenseType.ACTIVITY, xp=3,
        message='Training class completed! Pet learned new tricks.',
        happiness=20, energy=10,
    )
