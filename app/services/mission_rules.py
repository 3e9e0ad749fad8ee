"""
Business rules of the mission lifecycle.

Pure functions, no database access: the net weight derivation, the weight
ordering rule and the status state machine. MissionService calls them on
every write so that a stored mission always satisfies them.
"""
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status

from app.db.schema import MissionStatus


KG_PER_TON = 1000

# Forward-only moves. validated -> completed goes through unvalidate().
ALLOWED_TRANSITIONS = {
    MissionStatus.DRAFT: {MissionStatus.DRAFT, MissionStatus.COMPLETED, MissionStatus.VALIDATED},
    MissionStatus.COMPLETED: {MissionStatus.COMPLETED, MissionStatus.VALIDATED},
    MissionStatus.VALIDATED: {MissionStatus.VALIDATED},
}


def compute_net_weight_tons(empty_weight_kg: float, loaded_weight_kg: float) -> float:
    """
    Net load in metric tons.

    Example: empty=2000, loaded=35752 -> 33.752 (displayed as 33.75).
    """
    return (loaded_weight_kg - empty_weight_kg) / KG_PER_TON


def ensure_weight_order(empty_weight_kg: float, loaded_weight_kg: float) -> None:
    """
    Rejects a weighing pair whose net load would be zero or negative.

    Raises:
        HTTPException(422): If a weight is negative or loaded <= empty.
    """
    if empty_weight_kg < 0 or loaded_weight_kg < 0:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Weights must be non-negative numbers."
        )

    if loaded_weight_kg <= empty_weight_kg:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="The loaded weight must be greater than the empty weight."
        )


def transition_status(current: MissionStatus, target: MissionStatus) -> MissionStatus:
    """
    Applies the mission state machine: draft -> completed -> validated.

    A mission may jump straight from draft to validated. Backward moves are
    refused here; the only supported one is MissionService.unvalidate_mission.

    Raises:
        HTTPException(422): On a backward move (e.g. validated -> draft).
    """
    if target not in ALLOWED_TRANSITIONS[current]:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Cannot move a mission from '{current.value}' to '{target.value}'."
        )
    return target


def resolve_validated_at(
    target: MissionStatus,
    previous_validated_at: Optional[datetime],
    now: Optional[datetime] = None
) -> Optional[datetime]:
    """
    The validation stamp is set once, the first time a mission becomes
    validated, and kept on later updates.
    """
    if previous_validated_at is not None:
        return previous_validated_at
    if target == MissionStatus.VALIDATED:
        return now or datetime.utcnow()
    return None
