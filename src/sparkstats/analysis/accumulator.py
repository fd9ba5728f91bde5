"""
Stat Accumulator - single pass over every character's match list.

Groups active matches by the AI strategy they were played against and sums
every tracked counter at three levels:

- AI strategy totals
- AI x character totals (kept for character filtering)
- AI / AI x character build-type and capsule buckets
"""

import logging
from collections.abc import Iterable

from sparkstats.analysis.models import (
    AIAccumulator,
    CharacterAggregate,
    match_is_active,
)
from sparkstats.core.constants import (
    PLACEHOLDER_AI_NAMES,
    STRATEGY_NAME_PATTERNS,
    UNKNOWN_AI_NAME,
    StrategyType,
)
from sparkstats.core.schemas import CharacterAggregateDict, MatchRecord

logger = logging.getLogger(__name__)


def categorize_ai_strategy(name: str | None) -> StrategyType:
    """
    Classify an AI strategy by its name.

    Placeholder names (empty, "Unknown", "Com", "Player", "Default") are
    never a real strategy and always map to OTHER.
    """
    if not name or name in PLACEHOLDER_AI_NAMES:
        return StrategyType.OTHER

    lowered = name.lower()
    for fragment, strategy_type in STRATEGY_NAME_PATTERNS:
        if fragment in lowered:
            return strategy_type
    return StrategyType.OTHER


def resolve_ai_name(match: MatchRecord) -> str:
    name = match.get("aiStrategy")
    return str(name) if name else UNKNOWN_AI_NAME


def as_character_aggregate(item: CharacterAggregate | CharacterAggregateDict) -> CharacterAggregate:
    """Accept either the dataclass or the raw JSON dict."""
    if isinstance(item, CharacterAggregate):
        return item
    return CharacterAggregate.from_dict(item)


class StatAccumulator:
    """
    Accumulates match records into per-AI totals.

    Usage:
        accumulator = StatAccumulator()
        for character in characters:
            accumulator.add_character(character)
        totals = accumulator.ai_totals
    """

    def __init__(self) -> None:
        self._ais: dict[str, AIAccumulator] = {}
        self.skipped_matches = 0

    def ai(self, name: str) -> AIAccumulator:
        """Get or create the accumulator for an AI strategy."""
        accumulator = self._ais.get(name)
        if accumulator is None:
            accumulator = self._ais[name] = AIAccumulator(
                name=name, strategy_type=categorize_ai_strategy(name)
            )
        return accumulator

    def add_match(self, character_name: str, match: MatchRecord) -> bool:
        """
        Fold a single match into the AI and AI x character totals.

        Returns:
            False if the match was skipped (no positive battle time)
        """
        if not isinstance(match, dict) or not match_is_active(match):
            self.skipped_matches += 1
            return False

        ai = self.ai(resolve_ai_name(match))
        ai.record(match)
        ai.character(character_name).record(match)
        return True

    def add_character(self, character: CharacterAggregate | CharacterAggregateDict) -> None:
        aggregate = as_character_aggregate(character)
        for match in aggregate.matches:
            self.add_match(aggregate.name, match)

    @property
    def ai_totals(self) -> dict[str, AIAccumulator]:
        return self._ais


def accumulate_matches(
    characters: Iterable[CharacterAggregate | CharacterAggregateDict],
) -> dict[str, AIAccumulator]:
    """
    Run the accumulation pass over a character corpus.

    Args:
        characters: Character aggregates (dataclasses or JSON dicts)

    Returns:
        Mapping of AI strategy name to its accumulator, in first-seen order
    """
    accumulator = StatAccumulator()
    for character in characters or []:
        accumulator.add_character(character)

    if accumulator.skipped_matches:
        logger.debug(f"Skipped {accumulator.skipped_matches} matches without battle time")
    logger.debug(f"Accumulated {len(accumulator.ai_totals)} AI strategies")
    return accumulator.ai_totals
