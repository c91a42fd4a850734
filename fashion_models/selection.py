"""
Fashion model selection for virtual try-on.

Every candidate gets an additive score against the target gender and the
garment category; the highest score wins. The scoring function is pure and
the weight table is plain configuration (``ScoringWeights``), overridable
through ``settings.FASHION_MODEL_SELECTION['weights']``.
"""

import logging
import random
from dataclasses import dataclass, fields, replace
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

CATEGORIES = ('general', 'formal', 'casual', 'athletic', 'evening')

# Checked in order; the first category with a matching keyword wins.
CATEGORY_KEYWORDS = (
    ('formal', ('suit', 'blazer', 'formal')),
    ('evening', ('dress', 'gown', 'evening')),
    ('athletic', ('sport', 'gym', 'athletic')),
    ('casual', ('casual', 't-shirt', 'jeans')),
)

# model category -> garment category -> partial compatibility bonus
CATEGORY_COMPATIBILITY = {
    'formal': {'evening': 15, 'general': 10},
    'evening': {'formal': 15, 'general': 10},
    'casual': {'general': 15, 'athletic': 10},
    'athletic': {'casual': 10, 'general': 8},
    'general': {'formal': 10, 'evening': 10, 'casual': 10, 'athletic': 8},
}
DEFAULT_COMPATIBILITY = 5

WOMEN_ALIASES = ('women', 'woman', 'female')
MEN_ALIASES = ('men', 'man', 'male')


@dataclass(frozen=True)
class ScoringWeights:
    gender_match: float = 100
    gender_unisex: float = 80
    gender_mismatch: float = 20
    category_match: float = 60
    category_general: float = 35
    success_rate_max: float = 30
    recent_usage_per_use: float = 2
    recent_usage_max: float = 15
    overuse_threshold: int = 50
    overuse_penalty: float = 5
    featured: float = 20
    interaction_factor: float = 0.1
    interaction_max: float = 15
    sort_order_max: float = 15
    legacy_usage_factor: float = 0.05
    legacy_usage_max: float = 10
    jitter_max: float = 3

    @classmethod
    def from_config(cls, overrides=None):
        """Build weights from a dict, ignoring unknown keys."""
        if not overrides:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            logger.warning("Ignoring unknown selection weight keys: %s", ', '.join(sorted(unknown)))
        return replace(cls(), **{k: v for k, v in overrides.items() if k in known})


DEFAULT_WEIGHTS = ScoringWeights()


def normalize_gender(value: Optional[str]) -> str:
    """Map loose gender input (``female``, ``Male`` ...) to men/women/unisex."""
    g = (value or 'unisex').strip().lower()
    if g in WOMEN_ALIASES:
        return 'women'
    if g in MEN_ALIASES:
        return 'men'
    return 'unisex'


def map_garment_to_category(garment_type: Optional[str]) -> str:
    """Map a free-text garment label to a fashion model category."""
    garment = (garment_type or '').lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in garment for keyword in keywords):
            return category
    return 'general'


def category_compatibility(model_category: str, garment_category: str) -> float:
    return CATEGORY_COMPATIBILITY.get(model_category, {}).get(garment_category, DEFAULT_COMPATIBILITY)


def score_model(model, target_gender: str, target_category: str,
                weights: ScoringWeights = DEFAULT_WEIGHTS, jitter: float = 0.0) -> float:
    """
    Score one candidate. ``target_gender`` and ``target_category`` must
    already be normalized. ``jitter`` is added as-is so callers control
    the randomness.
    """
    score = 0.0

    if model.gender == target_gender:
        score += weights.gender_match
    elif model.gender == 'unisex':
        score += weights.gender_unisex
    else:
        score += weights.gender_mismatch

    if model.category == target_category:
        score += weights.category_match
    elif model.category == 'general':
        score += weights.category_general
    else:
        score += category_compatibility(model.category, target_category)

    success_rate = float(model.success_rate or 0)
    if success_rate > 0:
        score += (min(success_rate, 100.0) / 100.0) * weights.success_rate_max

    recent_usage = model.recent_usage or 0
    total_usage = model.usage or 0
    if recent_usage > 0:
        score += min(weights.recent_usage_max, recent_usage * weights.recent_usage_per_use)
        if total_usage > weights.overuse_threshold:
            score -= weights.overuse_penalty

    if model.is_featured:
        score += weights.featured

    score += min(weights.interaction_max, (model.total_interactions or 0) * weights.interaction_factor)
    score += max(0, weights.sort_order_max - (model.sort_order or 0))
    score += min(weights.legacy_usage_max, total_usage * weights.legacy_usage_factor)

    return score + jitter


def rank_models(models: Iterable, gender: Optional[str], garment_type: Optional[str],
                weights: ScoringWeights = DEFAULT_WEIGHTS,
                rng: Optional[random.Random] = None) -> List[Tuple[object, float]]:
    """Score all candidates and return ``(model, score)`` pairs, best first."""
    rng = rng or random.Random()
    target_gender = normalize_gender(gender)
    target_category = map_garment_to_category(garment_type)

    scored = [
        (model, score_model(model, target_gender, target_category, weights,
                            jitter=rng.uniform(0, weights.jitter_max)))
        for model in models
    ]
    scored.sort(key=lambda item: item[1], reverse=True)
    return scored


def select_model(active_models: Iterable, gender: Optional[str], garment_type: Optional[str],
                 pinned_model_id=None, catalog=None,
                 weights: ScoringWeights = DEFAULT_WEIGHTS,
                 rng: Optional[random.Random] = None):
    """
    Return the best fashion model for the garment, or None when there are
    no candidates.

    A pinned model id bypasses scoring and is resolved through the catalog;
    an unknown or inactive id raises FashionModelNotFound.
    """
    if pinned_model_id:
        if catalog is None:
            raise ValueError("A catalog is required to resolve a pinned fashion model")
        model = catalog.get(pinned_model_id, active_only=True)
        logger.info("Using pinned fashion model: %s (%s)", model.name, model.gender)
        return model

    scored = rank_models(active_models, gender, garment_type, weights, rng)
    if not scored:
        return None

    logger.info(
        "Fashion model selection for gender=%s garment=%s (category=%s):",
        normalize_gender(gender),
        garment_type,
        map_garment_to_category(garment_type)
    )
    for position, (model, score) in enumerate(scored[:3], start=1):
        logger.info(
            "  %d. %s (%s, %s): %.1f [success=%s%%, recent=%s, total=%s]",
            position, model.name, model.gender, model.category, score,
            model.success_rate, model.recent_usage, model.usage
        )
    return scored[0][0]
