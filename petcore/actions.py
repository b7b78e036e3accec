# actions.py

from types import MappingProxyType

from petcore.activity_loader import load_activities

# Loaded once; read-only afterwards.
ACTIVITIES = MappingProxyType(load_activities())

PAID_ACTIVITIES = ('play', 'rest', 'clean', 'visit_vet', 'spa_day', 'training_class', 'park_trip')
FREE_ACTIVITIES = ('feed_at_home', 'clean_free', 'rest_free', 'health_check_free')


def perform(name, pet, now=None, **kwargs):
    """Run a named activity against `pet`. Unknown names raise KeyError."""
    try:
        activity = ACTIVITIES[name]
    except KeyError:
        raise KeyError(f"Unknown activity: {name}") from None
    return activity(pet, now=now, **kwargs)


def feed(pet, item_id=1, now=None, **kwargs):
    return perform('feed', pet, now=now, item_id=item_id, **kwargs)


def play(pet, cost=30, now=None):
    return perform('play', pet, now=now, cost=cost)


def rest(pet, cost=20, now=None):
    return perform('rest', pet, now=now, cost=cost)


def clean(pet, cost=25, now=None):
    return perform('clean', pet, now=now, cost=cost)


def visit_vet(pet, cost, health_restore=15, happiness_bonus=0, now=None):
    return perform('visit_vet', pet, now=now, cost=cost,
                   health_restore=health_restore, happiness_bonus=happiness_bonus)


def spa_day(pet, cost=15, now=None):
    return perform('spa_day', pet, now=now, cost=cost)


def training_class(pet, cost=10, now=None):
    return perform('training_class', pet, now=now, cost=cost)


def park_trip(pet, cost=12, now=None):
    return perform('park_trip', pet, now=now, cost=cost)


def feed_at_home(pet, now=None):
    return perform('feed_at_home', pet, now=now)


def clean_free(pet, now=None):
    return perform('clean_free', pet, now=now)


def rest_free(pet, now=None):
    return perform('rest_free', pet, now=now)


def health_check_free(pet, now=None):
    return perform('health_check_free', pet, now=now)
