"""Advisory meal and correction bolus suggestion. Not a prescription."""

import structlog

from insight_core.config import BolusSettings, TargetRange
from insight_core.domain.metrics import BolusSuggestion
from insight_core.services.glucose_metrics import round_half_up

logger = structlog.get_logger(__name__)


def suggest_bolus(
    current_glucose: float,
    carbs_grams: float,
    settings: BolusSettings,
    insulin_on_board: float = 0.0,
    targets: TargetRange | None = None,
) -> BolusSuggestion:
    """
    Suggest a dose from carbs, current glucose and insulin still active.

    carb dose = carbs / carb ratio
    correction = (glucose - target) / sensitivity factor
    total = max(0, carb dose + correction - IOB), to one decimal

    The correction target is ``settings.target_mg_dl`` or, when unset, the
    midpoint of ``targets``.
    """
    if current_glucose <= 0:
        raise ValueError("current_glucose must be positive")
    if carbs_grams < 0 or insulin_on_board < 0:
        raise ValueError("carbs_grams and insulin_on_board cannot be negative")

    target = settings.target_mg_dl
    if target is None:
        target = (targets or TargetRange()).midpoint

    carb_dose = carbs_grams / settings.carb_ratio
    correction = (current_glucose - target) / settings.sensitivity_factor
    before_iob = carb_dose + correction
    recommended = max(0.0, before_iob - insulin_on_board)

    suggestion = BolusSuggestion(
        carb_dose=round_half_up(carb_dose, 1),
        correction_dose=round_half_up(correction, 1),
        insulin_on_board=round_half_up(insulin_on_board, 1),
        total_before_iob=round_half_up(before_iob, 1),
        recommended_units=round_half_up(recommended, 1),
    )
    logger.debug(
        "bolus_suggested",
        target=target,
        recommended_units=suggestion.recommended_units,
    )
    return suggestion
