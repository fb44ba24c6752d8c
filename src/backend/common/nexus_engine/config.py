from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

UNRESOLVED_JURISDICTION = "N/A"


class NexusEngineConfig(BaseModel):
    """Tunable knobs for aggregation and risk evaluation.

    Defaults reproduce the firm's standard report; clients rarely override them.
    """

    # Proximity (actual / threshold) at or above which a row is flagged MEDIUM ("approaching").
    medium_proximity_ratio: Decimal = Field(default=Decimal("0.8"), gt=0, le=1)
    # Bucket for transactions with neither a shipping nor a billing jurisdiction.
    unresolved_jurisdiction: str = Field(default=UNRESOLVED_JURISDICTION, min_length=1)
