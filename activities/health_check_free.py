# activities/health_check_free.py

from petcore.care import free_care

LOW_HEALTH = 70


def run(pet, now):
    """
    Activity: Health Check
    Description: A free check at home. Helps more when the pet is unwell; nobody enjoys a checkup.
    """
    restore = 15 if pet.stats.health < LOW_HEALTH else 5
    return free_care(pet, now, xp=1, message=f"Health check done. Health +{restore}",
                     health=restore, happiness=-1)
