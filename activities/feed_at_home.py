# activities/feed_at_home.py

from petcore.care import free_care


def run(pet, now):
    """
    Activity: Feed at Home
    Description: Free home-cooked meal. No inventory is used and nothing is journaled.
    """
    return free_care(pet, now, xp=2, message='Home-cooked meal! Hunger +20',
                     hunger=20, happiness=3, cleanliness=-2)
