# petcore/activity_decorator.py

import logging
from functools import wraps

from petcore.decay import NORMAL_SPEED, tick
from petcore.state import ActionResult, now_ms

logger = logging.getLogger(__name__)


def activity_wrapper(func, name=None):
    """Wrap an activity's `run(pet, now, **kwargs)` with the shared action steps.

    Pending decay is applied first at normal speed; game-speed modes are the
    session's concern, not the action's. The wrapped activity receives the
    ticked pet and must return an ActionResult carrying a valid pet whether
    it succeeds or not.
    """
    activity_name = name or func.__module__.split('.')[-1]

    @wraps(func)
    def wrapper(pet, now=None, **kwargs):
        now = now_ms() if now is None else now
        pet = tick(pet, now, NORMAL_SPEED)

        state_before = pet.stats.model_dump()
        result = func(pet, now, **kwargs)
        if result is None:
            result = ActionResult(success=True, pet=pet)

        if not result.success:
            logger.info("Activity %s rejected: %s", activity_name, result.message)
            return result

        state_after = result.pet.stats.model_dump()
        state_changes = {
            key: round(state_after[key] - state_before[key], 2)
            for key in state_after
            if state_after[key] != state_before.get(key)
        }
        logger.info("Activity %s completed: %s", activity_name, state_changes)
        return result

    wrapper.activity_name = activity_name
    return wrapper
