# activities/rest_free.py

from petcore.care import free_care


def run(pet, now):
    """
    Activity: Nap
    Description: The pet takes a free nap to restore energy.
    """
    return free_care(pet, now, xp=1, message='Nap time! Energy +25',
                     energy=25, hunger=-3)
