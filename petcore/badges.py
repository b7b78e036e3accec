# badges.py

from typing import Iterable, List, Optional

from petcore.ledger import care_cost_by_category, total_care_cost
from petcore.progression import stage_for_xp
from petcore.state import ExpenseEntry, Pet, StoredModel, now_ms


class Badge(StoredModel):
    id: str
    name: str
    description: str
    emoji: str
    category: str


BADGES = {
    badge.id: badge for badge in (
        Badge(id='first_purchase', name='First Purchase', description='Spent any coins',
              emoji='🛒', category='financial'),
        Badge(id='budget_starter', name='Budget Starter', description='Total spend >= 100 coins',
              emoji='💰', category='financial'),
        Badge(id='healthy_pet', name='Healthy Pet', description='Health >= 90',
              emoji='💚', category='care'),
        Badge(id='clean_freak', name='Clean Freak', description='Cleanliness >= 95',
              emoji='✨', category='care'),
        Badge(id='task_master', name='Task Master', description='Complete 5 daily quests',
              emoji='✅', category='milestone'),
        Badge(id='growing_up', name='Growing Up', description='Reach Young stage',
              emoji='🌱', category='evolution'),
        Badge(id='smart_shopper', name='Smart Shopper', description='Buy 3 different categories',
              emoji='🛍️', category='financial'),
    )
}


def evaluate_badges(pet: Pet, expenses: Optional[Iterable[ExpenseEntry]] = None,
                    completed_quests: int = 0) -> List[str]:
    """Badge ids the pet has earned but does not hold yet."""
    expenses = list(pet.expenses if expenses is None else expenses)
    spent = total_care_cost(expenses)
    categories = [name for name, total in care_cost_by_category(expenses).items() if total > 0]

    earned = {
        'first_purchase': spent > 0,
        'budget_starter': spent >= 100,
        'smart_shopper': len(categories) >= 3,
        'clean_freak': pet.stats.cleanliness >= 95,
        'healthy_pet': pet.stats.health >= 90,
        'task_master': completed_quests >= 5,
        'growing_up': stage_for_xp(pet.xp) >= 1,
    }
    held = set(pet.badges)
    return [badge_id for badge_id, ok in earned.items() if ok and badge_id not in held]


def award_badges(pet: Pet, badge_ids: Iterable[str], now: Optional[int] = None) -> Pet:
    held = set(pet.badges)
    new = [badge_id for badge_id in dict.fromkeys(badge_ids) if badge_id not in held]
    if not new:
        return pet
    now = now_ms() if now is None else now
    return pet.model_copy(update={'badges': [*pet.badges, *new], 'last_updated': now})
