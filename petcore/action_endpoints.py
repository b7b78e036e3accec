# action_endpoints.py

import logging
import os
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from petcore.main import NoPetError
from petcore.memory import InvalidSlotError
from petcore.mood import MOOD_EMOJI, care_score, mood_for
from petcore.quests import current_quests, ready_quests
from petcore.rewards import MiniGameReward, can_claim_allowance, is_check_in_available, time_until_allowance
from petcore.shop import CATALOG, items_in_category
from petcore.state import PetType

logger = logging.getLogger(__name__)


async def check_api_key(request: Request):
    """Verify the X-API-KEY header when PETCORE_API_KEY is set."""
    expected = os.getenv('PETCORE_API_KEY')
    if expected is None:
        return
    if request.headers.get('X-API-KEY') != expected:
        raise HTTPException(status_code=401, detail="Invalid or missing API key.")


def get_orchestrator(request: Request):
    return request.app.state.orchestrator


async def call(coro):
    """Await an orchestrator call, mapping its errors onto HTTP statuses."""
    try:
        return await coro
    except NoPetError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except KeyError as e:
        raise HTTPException(status_code=404, detail=e.args[0] if e.args else str(e))
    except (InvalidSlotError, ValueError, TypeError) as e:
        raise HTTPException(status_code=400, detail=str(e))


def pet_view(pet):
    if pet is None:
        return None
    mood = mood_for(pet.stats)
    return {
        **pet.to_dict(),
        'mood': mood.value,
        'moodEmoji': MOOD_EMOJI[mood],
        'careScore': round(care_score(pet.stats), 1),
    }


def result_view(result):
    if result is None:
        raise HTTPException(status_code=409, detail="Nothing to claim right now.")
    data = result.model_dump(mode='json', by_alias=True, exclude={'pet'})
    data['pet'] = pet_view(result.pet)
    return data


def bundle_view(bundle):
    if bundle is None:
        return {'pet': None}
    data = bundle.model_dump(mode='json', by_alias=True, exclude={'pet'})
    data['pet'] = pet_view(bundle.pet)
    return data


def status_view(bundle, now):
    """What can be claimed right now in this slot."""
    if bundle is None or bundle.pet is None:
        return None
    meta = bundle.meta
    return {
        'allowance': time_until_allowance(now, meta.last_allowance_claim),
        'allowanceAvailable': can_claim_allowance(now, meta.last_allowance_claim),
        'checkInAvailable': is_check_in_available(now, meta.last_check_in),
        'readyQuests': ready_quests(current_quests(bundle.quests, now)),
        'demo': meta.demo,
    }


router = APIRouter()


@router.get("/slots")
async def list_slots(orchestrator=Depends(get_orchestrator)):
    slots = await orchestrator.memory.list_slots()
    return {'active': orchestrator.active_slot, 'slots': [s.model_dump() for s in slots]}


@router.post("/slots/{slot}/activate")
async def activate_slot(slot: int, orchestrator=Depends(get_orchestrator)):
    return bundle_view(await call(orchestrator.switch_slot(slot)))


@router.delete("/slots/{slot}")
async def delete_slot(slot: int, orchestrator=Depends(get_orchestrator)):
    await call(orchestrator.delete_slot(slot))
    return {'status': 'deleted', 'slot': slot}


@router.post("/pet")
async def create_pet(
    name: str = Body(..., embed=True),
    pet_type: PetType = Body(PetType.CAT, embed=True),
    demo: bool = Body(False, embed=True),
    orchestrator=Depends(get_orchestrator),
):
    pet = await call(orchestrator.create_pet(name, pet_type, demo=demo))
    return pet_view(pet)


@router.get("/pet")
async def get_pet(orchestrator=Depends(get_orchestrator)):
    bundle = await call(orchestrator.snapshot())
    return {**bundle_view(bundle), 'status': status_view(bundle, orchestrator.clock())}


@router.post("/actions/{name}")
async def perform_action(
    name: str,
    params: Optional[Dict[str, Any]] = Body(None, embed=True),
    orchestrator=Depends(get_orchestrator),
):
    return result_view(await call(orchestrator.perform(name, **(params or {}))))


@router.get("/shop")
async def list_items(category: Optional[str] = None):
    items = CATALOG if category is None else items_in_category(category)
    return [item.model_dump(mode='json', by_alias=True) for item in items]


@router.post("/shop/{item_id}")
async def purchase(item_id: int, orchestrator=Depends(get_orchestrator)):
    return result_view(await call(orchestrator.purchase(item_id)))


@router.post("/tasks/{task_id}")
async def complete_task(task_id: str, orchestrator=Depends(get_orchestrator)):
    return result_view(await call(orchestrator.complete_task(task_id)))


@router.post("/quests/{quest_id}/claim")
async def claim_quest(quest_id: str, orchestrator=Depends(get_orchestrator)):
    return result_view(await call(orchestrator.claim_quest(quest_id)))


@router.post("/rewards/allowance")
async def claim_allowance(orchestrator=Depends(get_orchestrator)):
    return result_view(await call(orchestrator.claim_allowance()))


@router.post("/rewards/check-in")
async def claim_check_in(orchestrator=Depends(get_orchestrator)):
    return result_view(await call(orchestrator.claim_check_in()))


@router.post("/rewards/minigame")
async def claim_minigame(reward: MiniGameReward, orchestrator=Depends(get_orchestrator)):
    return result_view(await call(orchestrator.claim_minigame(reward)))


@router.post("/demo/{slot}/start")
async def start_demo(slot: int, orchestrator=Depends(get_orchestrator)):
    return bundle_view(await call(orchestrator.start_demo(slot)))


@router.post("/demo/{slot}/reset")
async def reset_demo(slot: int, orchestrator=Depends(get_orchestrator)):
    return bundle_view(await call(orchestrator.reset_demo(slot)))


@router.delete("/demo/{slot}")
async def exit_demo(slot: int, orchestrator=Depends(get_orchestrator)):
    await call(orchestrator.exit_demo(slot))
    return {'status': 'deleted', 'slot': slot}


@router.post("/evolution/{event_id}/ack")
async def acknowledge_evolution(event_id: str, orchestrator=Depends(get_orchestrator)):
    return pet_view(await call(orchestrator.acknowledge_evolution(event_id)))


@router.post("/session/visibility")
async def visibility_regained(orchestrator=Depends(get_orchestrator)):
    return bundle_view(await call(orchestrator.on_visibility_regained()))
