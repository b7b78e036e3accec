# activities/clean_free.py

from petcore.care import free_care


def run(pet, now):
    """
    Activity: Brush
    Description: Free brushing at home.
    """
    return free_care(pet, now, xp=1, message='All brushed! Cleanliness +30',
                     cleanliness=30, happiness=2)
