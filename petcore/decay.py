# decay.py

import logging

from petcore.state import Pet, Stats, clamp

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60000
MAX_ELAPSED_MINUTES = 10.0

# Per-minute decay at multiplier 1.0
HUNGER_RATE = 1.2
ENERGY_RATE = 0.9
CLEANLINESS_RATE = 0.6
HAPPINESS_RATE = 0.4

# Extra happiness loss per minute while a need sits below NEGLECT_THRESHOLD
NEGLECT_THRESHOLD = 30
HUNGER_PENALTY_RATE = 0.6
ENERGY_PENALTY_RATE = 0.5
CLEANLINESS_PENALTY_RATE = 0.4

HEALTHY_THRESHOLD = 50
NEGLECT_WEIGHTS = {
    'hunger': 0.4,
    'energy': 0.3,
    'cleanliness': 0.2,
    'happiness': 0.1,
}
HEALTH_NEGLECT_SCALE = 0.03

WELL_CARED_THRESHOLD = 60
HEALTH_RECOVERY_RATE = 0.20
RECOVERY_DAMPING = 0.6

NORMAL_SPEED = 1.0
DEMO_SPEED = 2.0


def multiplier_for(demo: bool) -> float:
    return DEMO_SPEED if demo else NORMAL_SPEED


def elapsed_minutes(pet: Pet, now: int) -> float:
    """Fractional minutes since the pet's last tick, not floored."""
    return (now - pet.tick_marker) / MS_PER_MINUTE


def neglect_score(stats: Stats) -> float:
    """Weighted distance of the core needs below the healthy threshold."""
    return sum(
        weight * max(0.0, HEALTHY_THRESHOLD - getattr(stats, name))
        for name, weight in NEGLECT_WEIGHTS.items()
    )


def decay_stats(stats: Stats, minutes: float, multiplier: float = NORMAL_SPEED) -> Stats:
    """Decay stats over `minutes` already capped by the caller."""
    scale = minutes * multiplier

    hunger = clamp(stats.hunger - HUNGER_RATE * scale)
    energy = clamp(stats.energy - ENERGY_RATE * scale)
    cleanliness = clamp(stats.cleanliness - CLEANLINESS_RATE * scale)

    # Penalties read the values decayed in this same tick.
    happiness_loss = HAPPINESS_RATE * scale
    if hunger < NEGLECT_THRESHOLD:
        happiness_loss += HUNGER_PENALTY_RATE * scale
    if energy < NEGLECT_THRESHOLD:
        happiness_loss += ENERGY_PENALTY_RATE * scale
    if cleanliness < NEGLECT_THRESHOLD:
        happiness_loss += CLEANLINESS_PENALTY_RATE * scale
    happiness = clamp(stats.happiness - happiness_loss)

    decayed = Stats(
        hunger=hunger,
        happiness=happiness,
        health=stats.health,
        energy=energy,
        cleanliness=cleanliness,
    )

    health = clamp(stats.health - neglect_score(decayed) * HEALTH_NEGLECT_SCALE * scale)
    if (hunger >= WELL_CARED_THRESHOLD
            and energy >= WELL_CARED_THRESHOLD
            and cleanliness >= WELL_CARED_THRESHOLD):
        health = clamp(health + HEALTH_RECOVERY_RATE * scale * RECOVERY_DAMPING)

    return decayed.model_copy(update={'health': health}).clamped()


def tick(pet: Pet, now: int, decay_multiplier: float = NORMAL_SPEED) -> Pet:
    """Advance a pet's condition to `now`.

    This is the only place decay is applied. At most MAX_ELAPSED_MINUTES of
    decay are applied per call, so a long absence costs the same as ten
    minutes. When no time has passed the stats are left alone and the tick
    marker never moves backwards.
    """
    if decay_multiplier is None or decay_multiplier <= 0:
        logger.warning("tick: invalid decay multiplier %r, using %s", decay_multiplier, NORMAL_SPEED)
        decay_multiplier = NORMAL_SPEED

    previous = pet.tick_marker
    minutes = elapsed_minutes(pet, now)
    if minutes <= 0:
        marker = max(previous, now)
        if marker == pet.last_tick_at:
            return pet
        return pet.model_copy(update={'last_tick_at': marker})

    minutes = min(minutes, MAX_ELAPSED_MINUTES)
    stats = decay_stats(pet.stats, minutes, decay_multiplier)
    return pet.model_copy(update={
        'stats': stats,
        'last_tick_at': now,
        'last_updated': now,
    })
