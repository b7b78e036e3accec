# main.py

import asyncio
import logging
import os
from functools import wraps
from typing import Optional

import uvicorn
from dotenv import load_dotenv

from petcore import actions
from petcore.badges import award_badges, evaluate_badges
from petcore.decay import multiplier_for, tick
from petcore.demo import DEMO_SEED_VERSION, create_demo_data
from petcore.ledger import give
from petcore.memory import SlotBundle, SlotMemory, check_slot
from petcore.progression import acknowledge_evolution as ack_evolution
from petcore.progression import award_experience
from petcore.quests import claim_reward, claimed_count, current_quests, record_progress
from petcore.rewards import claim_allowance as pay_allowance
from petcore.rewards import MiniGameReward, apply_minigame_reward, claim_daily_check_in
from petcore.shop import CATALOG, PurchaseResult, buy_item, get_item
from petcore.state import ActionResult, PetType, RewardSource, create_demo_pet, now_ms
from petcore.state import create_pet as new_pet
from petcore.tasks import TaskOutcome, complete_task as finish_task
from petcore.validation import validate_pet_name

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL = 10.0


class NoPetError(LookupError):
    pass


def state_changed(before, after) -> bool:
    """Whether a tick moved anything worth writing back."""
    return (
        before.last_tick_at != after.last_tick_at
        or before.stats.hunger != after.stats.hunger
        or before.stats.energy != after.stats.energy
        or before.stats.cleanliness != after.stats.cleanliness
    )


def serialized(method):
    """Run one load-transform-save step at a time per session."""
    @wraps(method)
    async def wrapper(self, *args, **kwargs):
        async with self._lock:
            return await method(self, *args, **kwargs)
    return wrapper


class SessionOrchestrator:
    """Owns the session: which slot is active and the periodic decay task.

    Everything else is loaded from the slot, transformed by the pure core
    functions and saved back.
    """

    def __init__(self, memory: SlotMemory, interval: float = DEFAULT_TICK_INTERVAL, clock=now_ms):
        self.memory = memory
        self.interval = interval
        self.clock = clock
        self.active_slot: Optional[int] = None
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    def _now(self, now=None):
        return self.clock() if now is None else now

    def _require_slot(self) -> int:
        if self.active_slot is None:
            raise NoPetError("No save slot selected.")
        return self.active_slot

    async def _load_pet(self, slot) -> SlotBundle:
        bundle = await self.memory.load(slot)
        if bundle is None or bundle.pet is None:
            raise NoPetError("No pet found. Please create a pet first.")
        return bundle

    async def start(self, slot=None) -> Optional[SlotBundle]:
        if slot is None:
            slot = await self.memory.get_active_slot() or 1
        return await self.switch_slot(slot)

    async def switch_slot(self, slot) -> Optional[SlotBundle]:
        """Make `slot` active, catch it up and restart the periodic tick against it."""
        check_slot(slot)
        self._cancel_loop()
        self.active_slot = slot
        await self.memory.set_active_slot(slot)
        logger.info("Active slot is now %s", slot)
        bundle = await self.refresh()
        self._task = asyncio.create_task(self._tick_loop(slot))
        return bundle

    def _cancel_loop(self):
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def stop(self):
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("Session stopped")

    async def _tick_loop(self, slot):
        while True:
            await asyncio.sleep(self.interval)
            if slot != self.active_slot:
                return
            try:
                await self.refresh(slot=slot)
            except Exception:
                logger.exception("Periodic tick for slot %s failed", slot)

    @serialized
    async def refresh(self, now=None, slot=None) -> Optional[SlotBundle]:
        """Load the slot, apply pending decay and save only when something moved."""
        slot = slot or self._require_slot()
        bundle = await self.memory.load(slot)
        if bundle is None or bundle.pet is None:
            return bundle
        now = self._now(now)
        ticked = tick(bundle.pet, now, multiplier_for(bundle.meta.demo))
        if not state_changed(bundle.pet, ticked):
            logger.debug("Tick for slot %s changed nothing", slot)
            return bundle
        await self.memory.save(slot, ticked, now=now)
        return bundle.model_copy(update={'pet': ticked})

    async def on_visibility_regained(self, now=None) -> Optional[SlotBundle]:
        return await self.refresh(now=now)

    async def snapshot(self) -> Optional[SlotBundle]:
        return await self.memory.load(self._require_slot())

    def _with_badges(self, pet, board):
        earned = evaluate_badges(pet, completed_quests=claimed_count(board))
        if earned:
            logger.info("Pet %s earned badges %s", pet.id, earned)
        return award_badges(pet, earned)

    @serialized
    async def create_pet(self, name, pet_type=PetType.CAT, demo=False, now=None):
        """Create a pet in the active slot. Invalid names raise ValueError."""
        slot = self._require_slot()
        checked = validate_pet_name(name)
        if not checked.is_valid:
            raise ValueError(checked.error)
        now = self._now(now)
        if demo:
            pet = create_demo_pet(name, pet_type, now=now)
        else:
            pet = new_pet(name, pet_type, now=now)
        await self.memory.save(slot, pet, quests=current_quests(None, now), demo=demo, now=now)
        logger.info("Created %s %s in slot %s", pet.pet_type.value, pet.name, slot)
        return pet

    @serialized
    async def perform(self, action, now=None, **kwargs) -> ActionResult:
        slot = self._require_slot()
        bundle = await self._load_pet(slot)
        now = self._now(now)
        result = actions.perform(action, bundle.pet, now=now, **kwargs)
        if not result.success:
            return result

        board = record_progress(current_quests(bundle.quests, now), action)
        pet = self._with_badges(result.pet, board)
        await self.memory.save(slot, pet, quests=board, now=now)
        return result.model_copy(update={'pet': pet})

    @serialized
    async def purchase(self, item_id, now=None) -> PurchaseResult:
        slot = self._require_slot()
        bundle = await self._load_pet(slot)
        item = get_item(item_id, CATALOG)
        if item is None:
            raise KeyError(f"Unknown item: {item_id}")
        now = self._now(now)
        result = buy_item(tick(bundle.pet, now), item, now=now)
        if result.success:
            board = current_quests(bundle.quests, now)
            pet = self._with_badges(result.pet, board)
            await self.memory.save(slot, pet, now=now)
            result = result.model_copy(update={'pet': pet})
        return result

    @serialized
    async def complete_task(self, task_id, now=None) -> TaskOutcome:
        slot = self._require_slot()
        bundle = await self._load_pet(slot)
        now = self._now(now)
        outcome = finish_task(bundle.pet, task_id, bundle.task_state, now=now)
        if outcome.success:
            await self.memory.save(slot, outcome.pet, income=[outcome.income] if outcome.income else None,
                                   task_state=outcome.task_state, now=now)
        return outcome

    @serialized
    async def claim_quest(self, quest_id, now=None) -> Optional[ActionResult]:
        """Pay out a ready quest. None when it cannot be claimed."""
        slot = self._require_slot()
        bundle = await self._load_pet(slot)
        now = self._now(now)
        claim = claim_reward(current_quests(bundle.quests, now), quest_id, now=now)
        if claim is None:
            return None
        pet = tick(bundle.pet, now)
        pet, income = give(pet, claim.coins, RewardSource.QUEST, now=now)
        pet, evolution = award_experience(pet, claim.xp)
        pet = self._with_badges(pet, claim.board)
        await self.memory.save(slot, pet, income=[income] if income else None, quests=claim.board, now=now)
        return ActionResult(success=True, pet=pet, evolution=evolution,
                            message=f"Quest complete! +{claim.coins} coins, +{claim.xp} XP")

    @serialized
    async def claim_allowance(self, now=None):
        slot = self._require_slot()
        bundle = await self._load_pet(slot)
        now = self._now(now)
        result = pay_allowance(bundle.pet, now, bundle.meta.last_allowance_claim)
        if result is not None:
            await self.memory.save(slot, result.pet, income=[result.income],
                                   last_allowance_claim=result.claimed_at, now=now)
        return result

    @serialized
    async def claim_check_in(self, now=None, rng=None):
        slot = self._require_slot()
        bundle = await self._load_pet(slot)
        now = self._now(now)
        result = claim_daily_check_in(bundle.pet, now, bundle.meta.last_check_in, rng=rng)
        if result is not None:
            await self.memory.save(slot, result.pet, income=[result.income],
                                   last_check_in=result.claimed_at, now=now)
        return result

    @serialized
    async def acknowledge_evolution(self, event_id, now=None):
        slot = self._require_slot()
        bundle = await self._load_pet(slot)
        pet = ack_evolution(bundle.pet, event_id)
        await self.memory.save(slot, pet, now=self._now(now))
        return pet

    @serialized
    async def claim_minigame(self, reward: MiniGameReward, now=None):
        slot = self._require_slot()
        bundle = await self._load_pet(slot)
        now = self._now(now)
        result = apply_minigame_reward(tick(bundle.pet, now), reward, now=now)
        await self.memory.save(slot, result.pet, income=[result.income] if result.income else None, now=now)
        return result

    async def start_demo(self, slot=1, now=None, rng=None) -> Optional[SlotBundle]:
        """Seed `slot` with demo data and make it active.

        A slot already seeded at the current demo version is left as it is.
        """
        check_slot(slot)
        existing = await self.memory.load(slot)
        if existing and existing.meta.demo and existing.meta.demo_seed_version == DEMO_SEED_VERSION:
            logger.info("Demo data already seeded in slot %s", slot)
        else:
            await self._seed_demo(slot, now, rng)
        return await self.switch_slot(slot)

    async def reset_demo(self, slot=1, now=None, rng=None) -> Optional[SlotBundle]:
        check_slot(slot)
        await self._seed_demo(slot, now, rng)
        return await self.switch_slot(slot)

    async def exit_demo(self, slot=1):
        """Remove the demo slot. Slots holding a regular pet are refused."""
        existing = await self.memory.load(check_slot(slot))
        if existing is not None and not existing.meta.demo:
            raise ValueError(f"Slot {slot} is not in demo mode.")
        await self.delete_slot(slot)

    @serialized
    async def _seed_demo(self, slot, now=None, rng=None):
        now = self._now(now)
        seed = create_demo_data(now, rng)
        await self.memory.delete_slot(slot)
        await self.memory.save(
            slot, seed.pet, income=seed.income, quests=current_quests(None, now), task_state=[],
            demo=True, demo_seed_version=DEMO_SEED_VERSION, last_check_in=seed.last_check_in, now=now,
        )
        logger.info("Demo mode started in slot %s", slot)

    @serialized
    async def delete_slot(self, slot):
        await self.memory.delete_slot(slot)
        if slot == self.active_slot:
            self._cancel_loop()
            self.active_slot = None
            await self.memory.clear_active_slot()


async def run_server(orchestrator, host, port):
    from petcore.server import create_app

    config = uvicorn.Config(app=create_app(orchestrator), host=host, port=port,
                            log_level="info", lifespan="off")
    server = uvicorn.Server(config)
    await server.serve()


async def main():
    load_dotenv()
    logging.basicConfig(
        level=os.getenv('PETCORE_LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    memory = SlotMemory(os.getenv('PETCORE_DB_PATH', 'pet_slots.db'))
    await memory.initialize()

    orchestrator = SessionOrchestrator(memory, interval=float(os.getenv('PETCORE_TICK_INTERVAL', DEFAULT_TICK_INTERVAL)))
    await orchestrator.start()
    try:
        await run_server(orchestrator, os.getenv('PETCORE_HOST', '0.0.0.0'), int(os.getenv('PETCORE_PORT', '8000')))
    finally:
        await orchestrator.stop()


def cli():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("Program interrupted by user.")


if __name__ == "__main__":
    cli()
