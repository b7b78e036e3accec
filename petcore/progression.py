# progression.py

import logging
import math
from typing import Optional, Tuple

from petcore.state import XP_CEILING, EvolutionEvent, Pet

logger = logging.getLogger(__name__)

# (minimum xp, stage), highest first
STAGE_THRESHOLDS = (
    (120, 3),
    (60, 2),
    (20, 1),
    (0, 0),
)

AGE_LABELS = {
    0: 'Baby',
    1: 'Young',
    2: 'Adult',
    3: 'Mature',
}


def stage_for_xp(xp: float) -> int:
    for minimum, stage in STAGE_THRESHOLDS:
        if xp >= minimum:
            return stage
    return 0


def stage_label(stage: int) -> str:
    return AGE_LABELS.get(stage, AGE_LABELS[0])


def evolution_id(pet_id: str, from_stage: int, to_stage: int, xp: float) -> str:
    # Derived from state only, so recomputing from the same state yields the same id.
    return f"{pet_id}-{from_stage}-{to_stage}-{math.floor(xp)}"


def check_evolution(pet: Pet) -> Tuple[Pet, Optional[EvolutionEvent]]:
    """Sync the stored stage with XP and report a transition if there is one.

    The stage is always rewritten from XP. An event is only returned when the
    stored stage differed and the transition has not been acknowledged yet.
    """
    computed = stage_for_xp(pet.xp)
    current = pet.age_stage
    if computed == current:
        return pet, None

    synced = pet.model_copy(update={'age_stage': computed, 'evolved': True})
    event_id = evolution_id(pet.id, current, computed, pet.xp)
    if pet.last_evolution_ack_id == event_id:
        logger.debug("Evolution %s already acknowledged", event_id)
        return synced, None

    logger.info("Pet %s evolved from %s to %s at %s XP",
                pet.id, stage_label(current), stage_label(computed), pet.xp)
    return synced, EvolutionEvent(id=event_id, from_stage=current, to_stage=computed, at_xp=pet.xp)


def award_experience(pet: Pet, amount: int) -> Tuple[Pet, Optional[EvolutionEvent]]:
    """Add XP (capped) and return the updated pet with any evolution it caused."""
    xp = min(XP_CEILING, pet.xp + amount)
    return check_evolution(pet.model_copy(update={'xp': max(0, xp)}))


def add_experience(pet: Pet, amount: int) -> Pet:
    pet, _ = award_experience(pet, amount)
    return pet


def acknowledge_evolution(pet: Pet, event_id: str) -> Pet:
    return pet.model_copy(update={'last_evolution_ack_id': event_id, 'evolved': False})
