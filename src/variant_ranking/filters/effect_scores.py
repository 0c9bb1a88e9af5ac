"""Default pathogenicity per variant effect, used when no prediction is available."""

from variant_ranking.model.variant import VariantEffect

DEFAULT_PATHOGENICITY_SCORES: dict[VariantEffect, float] = {
    VariantEffect.MISSENSE: 0.60,
    VariantEffect.FS_INSERTION: 0.95,
    VariantEffect.FS_DELETION: 0.95,
    VariantEffect.FS_SUBSTITUTION: 0.95,
    VariantEffect.FS_DUPLICATION: 0.95,
    VariantEffect.NON_FS_INSERTION: 0.85,
    VariantEffect.NON_FS_DELETION: 0.85,
    VariantEffect.NON_FS_SUBSTITUTION: 0.85,
    VariantEffect.NON_FS_DUPLICATION: 0.85,
    VariantEffect.STOPGAIN: 0.95,
    VariantEffect.SPLICING: 0.90,
    VariantEffect.SYNONYMOUS: 0.10,
    VariantEffect.STOPLOSS: 0.70,
    VariantEffect.START_LOSS: 0.95,
}


def default_pathogenicity_score(effect: VariantEffect) -> float:
    """Default score for an effect class; 0.0 for anything not listed."""
    return DEFAULT_PATHOGENICITY_SCORES.get(effect, 0.0)
