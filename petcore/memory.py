# memory.py

import asyncio
import datetime
import json
import logging
import uuid
from typing import Any, Dict, List, Optional

import aiosqlite
from pydantic import BaseModel, Field

from petcore.progression import stage_for_xp, stage_label
from petcore.state import (
    ExpenseEntry,
    ExpenseType,
    IncomeRecord,
    Pet,
    PetType,
    RewardSource,
    StoredModel,
    coerce_timestamp,
    now_ms,
)
from petcore.tasks import TaskState
from petcore.validation import SLOT_NUMBERS, validate_save_slot

logger = logging.getLogger(__name__)

CURRENT_SLOT_KEY = 'tama_current_slot'
MAX_RECORDS = 1000

LEGACY_SPECIES = {
    'cat': PetType.CAT,
    'dog': PetType.DOG,
    'rabbit': PetType.RABBIT,
    'fire': PetType.CAT,
    'fireling': PetType.CAT,
    'water': PetType.DOG,
    'aquapup': PetType.DOG,
    'earth': PetType.RABBIT,
    'budhorn': PetType.RABBIT,
    'leafkit': PetType.RABBIT,
}

LEGACY_STAGES = {
    'baby': 0,
    'teen': 1,
    'mature': 2,
    'final': 3,
}

EXPENSE_TYPE_VALUES = {t.value for t in ExpenseType}
PET_TYPE_VALUES = {t.value for t in PetType}


class InvalidSlotError(ValueError):
    pass


class SlotMeta(StoredModel):
    slot_number: int
    created_at: Optional[str] = None
    last_played: Optional[str] = None
    demo: bool = False
    demo_seed_version: Optional[Any] = None
    last_allowance_claim: Optional[int] = None
    last_check_in: Optional[str] = None


class SlotBundle(StoredModel):
    pet: Optional[Pet] = None
    expenses: List[ExpenseEntry] = Field(default_factory=list)
    income: List[IncomeRecord] = Field(default_factory=list)
    # Kept exactly as stored; petcore.quests interprets it.
    quests: Any = Field(default_factory=list)
    badges: List[str] = Field(default_factory=list)
    task_state: List[TaskState] = Field(default_factory=list)
    guide_checklist: Optional[Dict[str, Any]] = None
    meta: SlotMeta


class SlotSummary(BaseModel):
    slot_number: int
    exists: bool
    pet_name: Optional[str] = None
    pet_stage: Optional[str] = None
    pet_xp: Optional[int] = None
    last_played: Optional[str] = None


def check_slot(slot) -> int:
    checked = validate_save_slot(slot)
    if not checked.is_valid:
        raise InvalidSlotError(checked.error)
    return slot


def slot_key(slot) -> str:
    return f"tama_slot_{check_slot(slot)}"


def iso_timestamp(ms: int) -> str:
    moment = datetime.datetime.fromtimestamp(ms / 1000, tz=datetime.timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def prune_records(records, max_records=MAX_RECORDS):
    """Keep the newest `max_records`, oldest first."""
    if len(records) <= max_records:
        return list(records)
    newest = sorted(records, key=lambda r: r.timestamp, reverse=True)[:max_records]
    return list(reversed(newest))


def migrate_legacy_pet(raw: Dict[str, Any], now: Optional[int] = None) -> Dict[str, Any]:
    """Rewrite an older stored pet into the current shape.

    Handles `species`/`stage` from before pet types and age stages existed,
    and backfills markers and collections that older saves did not write.
    """
    pet = dict(raw)
    species = pet.pop('species', None)
    if pet.get('petType') not in PET_TYPE_VALUES:
        guess = str(pet.get('petType') or species or 'cat').lower()
        pet['petType'] = LEGACY_SPECIES.get(guess, PetType.CAT).value

    stage = pet.pop('stage', None)
    age_stage = pet.get('ageStage')
    if isinstance(age_stage, (int, float)) and not isinstance(age_stage, bool):
        age_stage = int(age_stage)
    elif isinstance(stage, str) and stage.isdigit():
        age_stage = int(stage)
    else:
        age_stage = LEGACY_STAGES.get(str(stage).lower(), 0)
    pet['ageStage'] = min(max(age_stage, 0), 3)

    fallback = now_ms() if now is None else now
    created = coerce_timestamp(pet.get('createdAt'))
    updated = coerce_timestamp(pet.get('lastUpdated'))
    ticked = coerce_timestamp(pet.get('lastTickAt'))
    pet['createdAt'] = created or updated or fallback
    pet['lastUpdated'] = updated or pet['createdAt']
    pet['lastTickAt'] = ticked or pet['lastUpdated']
    pet['inventory'] = pet.get('inventory') or {}
    pet['tricks'] = [t for t in pet.get('tricks') or [] if isinstance(t, str)]
    pet['badges'] = [b for b in pet.get('badges') or [] if isinstance(b, str)]
    pet['stats'] = pet.get('stats') if isinstance(pet.get('stats'), dict) else {}
    pet['id'] = _text(pet.get('id')) or f"{pet['createdAt']}-{uuid.uuid4().hex[:9]}"
    pet['name'] = _text(pet.get('name')) or 'Pet'
    if not isinstance(pet.get('lastEvolutionAckId'), str):
        pet['lastEvolutionAckId'] = None
    return pet


def _record_id(prefix, timestamp):
    return f"{prefix}_{timestamp}_{uuid.uuid4().hex[:9]}"


def _positive(entry) -> bool:
    try:
        amount = float(entry.get('amount'))
    except (TypeError, ValueError):
        return False
    return amount > 0 and amount != float('inf')


def _whole_amount(entry) -> int:
    return max(1, int(round(float(entry['amount']))))


def _text(value) -> str:
    if value is None:
        return ''
    return value if isinstance(value, str) else str(value)


def _entry_timestamp(entry) -> int:
    timestamp = coerce_timestamp(entry.get('timestamp'))
    if timestamp is None:
        logger.warning("Unusable timestamp %r on journal entry, using 0", entry.get('timestamp'))
        return 0
    return timestamp


def normalize_expenses(entries) -> List[Dict[str, Any]]:
    normalized = []
    for entry in entries or []:
        if not isinstance(entry, dict) or not _positive(entry):
            logger.warning("Dropping unusable expense entry %r", entry)
            continue
        entry = dict(entry)
        entry['timestamp'] = _entry_timestamp(entry)
        entry['amount'] = _whole_amount(entry)
        entry['id'] = str(entry.get('id') or _record_id('expense', entry['timestamp']))
        entry['description'] = _text(entry.get('description'))
        if not isinstance(entry.get('itemName'), str):
            entry['itemName'] = None
        if entry.get('type') not in EXPENSE_TYPE_VALUES:
            entry['type'] = ExpenseType.CARE.value
        normalized.append(entry)
    return normalized


def normalize_income(entries) -> List[Dict[str, Any]]:
    normalized = []
    for entry in entries or []:
        if not isinstance(entry, dict) or not _positive(entry):
            logger.warning("Dropping unusable income entry %r", entry)
            continue
        entry = dict(entry)
        entry['timestamp'] = _entry_timestamp(entry)
        entry['amount'] = _whole_amount(entry)
        entry['id'] = str(entry.get('id') or _record_id('income', entry['timestamp']))
        entry['description'] = _text(entry.get('description'))
        entry['source'] = _text(entry.get('source')) or RewardSource.BONUS.value
        entry['type'] = 'income'
        normalized.append(entry)
    return normalized


def normalize_slot(data: Dict[str, Any], slot: int) -> SlotBundle:
    """Repair a stored slot document and validate it into a SlotBundle."""
    data = dict(data)
    data['expenses'] = normalize_expenses(data.get('expenses'))
    data['income'] = normalize_income(data.get('income'))
    data['meta'] = {**(data.get('meta') or {}), 'slotNumber': slot}
    data['badges'] = data.get('badges') or []
    data['taskState'] = data.get('taskState') or []
    if data.get('quests') is None:
        data['quests'] = []

    if data.get('pet'):
        pet = migrate_legacy_pet(data['pet'])
        if data['expenses']:
            pet['expenses'] = [e for e in data['expenses'] if e['type'] != ExpenseType.EARNING.value]
        else:
            pet['expenses'] = normalize_expenses(pet.get('expenses'))
        data['pet'] = pet
    else:
        data['pet'] = None
    return SlotBundle.model_validate(data)


class SlotMemory:
    def __init__(self, db_name='pet_slots.db'):
        self.db_name = db_name
        self._locks = {}

    def get_db_connection(self):
        return aiosqlite.connect(self.db_name)

    def _lock_for(self, slot):
        if slot not in self._locks:
            self._locks[slot] = asyncio.Lock()
        return self._locks[slot]

    async def initialize(self):
        async with self.get_db_connection() as db:
            await db.execute('''
                CREATE TABLE IF NOT EXISTS slots (
                    slot_key TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    updated_at INTEGER
                )
            ''')
            await db.execute('''
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            ''')
            await db.commit()

    async def read_raw(self, slot) -> Optional[str]:
        async with self.get_db_connection() as db:
            cursor = await db.execute('SELECT data FROM slots WHERE slot_key = ?', (slot_key(slot),))
            row = await cursor.fetchone()
        return row[0] if row else None

    async def write_raw(self, slot, data: str, now: Optional[int] = None):
        now = now_ms() if now is None else now
        async with self.get_db_connection() as db:
            await db.execute('''
                INSERT OR REPLACE INTO slots (slot_key, data, updated_at)
                VALUES (?, ?, ?)
            ''', (slot_key(slot), data, now))
            await db.execute('''
                INSERT OR REPLACE INTO settings (key, value)
                VALUES (?, ?)
            ''', (CURRENT_SLOT_KEY, str(slot)))
            await db.commit()

    async def load(self, slot) -> Optional[SlotBundle]:
        """Read and repair a slot. Empty or unreadable slots load as None.

        Never applies decay.
        """
        check_slot(slot)
        try:
            stored = await self.read_raw(slot)
            if not stored:
                return None
            return normalize_slot(json.loads(stored), slot)
        except (aiosqlite.Error, ValueError, TypeError, AttributeError) as e:
            logger.warning("Could not load slot %s: %s", slot, e)
            return None

    async def save(
        self,
        slot,
        pet: Optional[Pet],
        expenses=None,
        income=None,
        quests=None,
        badges=None,
        task_state=None,
        demo=None,
        last_allowance_claim=None,
        last_check_in=None,
        demo_seed_version=None,
        now=None,
    ):
        """Merge this state into the slot.

        Every argument left as None keeps what the slot already holds.
        Journal entries are added only when their id is not stored yet.
        Passing demo=False also clears the demo seed version.
        """
        check_slot(slot)
        now = now_ms() if now is None else now
        async with self._lock_for(slot):
            existing = await self.load(slot)
            document = self._merge(slot, existing, pet, expenses, income, quests, badges, task_state,
                                   demo, last_allowance_claim, last_check_in, demo_seed_version, now)
            try:
                await self.write_raw(slot, json.dumps(document), now)
            except (aiosqlite.Error, TypeError, ValueError) as e:
                logger.error("Could not save slot %s: %s", slot, e)
                return
        logger.debug("Saved slot %s", slot)

    def _merge(self, slot, existing, pet, expenses, income, quests, badges, task_state,
               demo, last_allowance_claim, last_check_in, demo_seed_version, now):
        stored_expenses = list(existing.expenses) if existing else []
        stored_income = list(existing.income) if existing else []

        seen = {entry.id for entry in stored_expenses}
        new_expenses = []
        for entry in [*(pet.expenses if pet else []), *(expenses or [])]:
            entry = ExpenseEntry.model_validate(entry)
            if entry.id not in seen:
                seen.add(entry.id)
                new_expenses.append(entry)

        seen = {record.id for record in stored_income}
        new_income = []
        for record in income or []:
            record = IncomeRecord.model_validate(record)
            if record.id not in seen:
                seen.add(record.id)
                new_income.append(record)

        if quests is None:
            quests = existing.quests if existing else []
        elif isinstance(quests, BaseModel):
            quests = quests.model_dump(mode='json', by_alias=True)

        if badges is None:
            badges = pet.badges if pet else (existing.badges if existing else [])
        if task_state is None:
            task_state = existing.task_state if existing else []

        meta = existing.meta if existing else SlotMeta(slot_number=slot)
        if demo_seed_version is None and demo is not False:
            demo_seed_version = meta.demo_seed_version
        if pet:
            created_at = iso_timestamp(pet.created_at)
        else:
            created_at = meta.created_at or iso_timestamp(now)
        meta = meta.model_copy(update={
            'slot_number': slot,
            'created_at': created_at,
            'last_played': iso_timestamp(now),
            'demo': meta.demo if demo is None else bool(demo),
            'demo_seed_version': demo_seed_version,
            'last_allowance_claim': meta.last_allowance_claim if last_allowance_claim is None else last_allowance_claim,
            'last_check_in': meta.last_check_in if last_check_in is None else last_check_in,
        })

        return {
            'pet': pet.model_copy(update={'expenses': []}).to_dict() if pet else None,
            'expenses': [e.model_dump(mode='json', by_alias=True)
                         for e in prune_records(stored_expenses + new_expenses)],
            'income': [r.model_dump(mode='json', by_alias=True)
                       for r in prune_records(stored_income + new_income)],
            'quests': quests,
            'badges': list(badges),
            'taskState': [TaskState.model_validate(t).model_dump(mode='json', by_alias=True)
                          for t in task_state],
            'guideChecklist': existing.guide_checklist if existing else None,
            'meta': meta.model_dump(mode='json', by_alias=True),
        }

    async def delete_slot(self, slot):
        async with self._lock_for(check_slot(slot)):
            async with self.get_db_connection() as db:
                await db.execute('DELETE FROM slots WHERE slot_key = ?', (slot_key(slot),))
                await db.commit()
        logger.info("Deleted slot %s", slot)

    async def list_slots(self) -> List[SlotSummary]:
        summaries = []
        for slot in SLOT_NUMBERS:
            bundle = await self.load(slot)
            if bundle and bundle.pet:
                summaries.append(SlotSummary(
                    slot_number=slot,
                    exists=True,
                    pet_name=bundle.pet.name,
                    pet_stage=stage_label(stage_for_xp(bundle.pet.xp)),
                    pet_xp=bundle.pet.xp,
                    last_played=bundle.meta.last_played,
                ))
            else:
                summaries.append(SlotSummary(slot_number=slot, exists=False))
        return summaries

    async def get_active_slot(self) -> Optional[int]:
        try:
            async with self.get_db_connection() as db:
                cursor = await db.execute('SELECT value FROM settings WHERE key = ?', (CURRENT_SLOT_KEY,))
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.warning("Could not read active slot: %s", e)
            return None
        if not row:
            return None
        try:
            return check_slot(int(row[0]))
        except ValueError:
            return None

    async def set_active_slot(self, slot):
        async with self.get_db_connection() as db:
            await db.execute('''
                INSERT OR REPLACE INTO settings (key, value)
                VALUES (?, ?)
            ''', (CURRENT_SLOT_KEY, str(check_slot(slot))))
            await db.commit()

    async def clear_active_slot(self):
        async with self.get_db_connection() as db:
            await db.execute('DELETE FROM settings WHERE key = ?', (CURRENT_SLOT_KEY,))
            await db.commit()
