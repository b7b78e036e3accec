# mood.py

from enum import Enum

from petcore.state import Stats, clamp


class Mood(str, Enum):
    HAPPY = 'happy'
    SAD = 'sad'
    SICK = 'sick'
    ENERGETIC = 'energetic'
    TIRED = 'tired'
    ANGRY = 'angry'
    NEUTRAL = 'neutral'


MOOD_EMOJI = {
    Mood.HAPPY: '😊',
    Mood.SAD: '😢',
    Mood.SICK: '🤒',
    Mood.ENERGETIC: '😎',
    Mood.TIRED: '😴',
    Mood.ANGRY: '😡',
    Mood.NEUTRAL: '😐',
}


def mood_for(stats: Stats) -> Mood:
    """Derive mood from stats, most urgent condition first."""
    if stats.health < 30:
        return Mood.SICK
    if stats.happiness < 30 or stats.hunger < 20:
        return Mood.SAD
    if stats.energy > 70 and stats.happiness > 70:
        return Mood.ENERGETIC
    return Mood.HAPPY


def care_score(stats: Stats) -> float:
    values = stats.model_dump().values()
    return clamp(sum(values) / len(values))
