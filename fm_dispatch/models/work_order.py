"""
Work order context — the subject of a dispatch recommendation.

``WorkOrderContext`` carries only the attributes the scoring factors read:
the asset category (for required skills and vendor specialty matching), the
asset's free-text location and the site name (for location proximity).
It is fetched once per recommendation request and never mutated.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class WorkOrderContext(BaseModel):
    """Read-only snapshot of a work order for scoring.

    Attributes:
        organization_id:   Owning organization.
        work_order_id:     Work order PK.
        asset_category_id: FK to ``asset_categories``; ``None`` if the work
            order has no asset or the asset is uncategorised.
        category_name:     Display name of the asset category, e.g. ``"HVAC"``.
        asset_location:    Free-text location of the asset, e.g.
            ``"Building A Floor 2"``.
        site_name:         Name of the site the work order belongs to.
    """

    model_config = ConfigDict(frozen=True)

    organization_id: int
    work_order_id: int
    asset_category_id: Optional[int] = None
    category_name: Optional[str] = None
    asset_location: Optional[str] = None
    site_name: Optional[str] = None
