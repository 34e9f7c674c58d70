"""District reference data endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from playmatch.api.models import DistrictDetailResponse, DistrictResponse
from playmatch.api.routes import get_services
from playmatch.bootstrap import MatchingServices
from playmatch.core.districts import ZONE_LABELS
from playmatch.core.types import District, Zone

router = APIRouter()


def _district_to_response(district: District, lang: str) -> dict:
    return {
        "id": district.id,
        "name": district.name,
        "name_fr": district.name_fr,
        "zone": district.zone.value,
        "zone_label": ZONE_LABELS[district.zone].get(lang, ZONE_LABELS[district.zone]["en"]),
        "neighborhoods": list(district.neighborhoods),
    }


@router.get("/districts", response_model=list[DistrictResponse])
def list_districts(
    zone: Zone | None = Query(None, description="Filter by zone"),
    lang: str = Query("fr", description="Label language ('fr' or 'en')"),
    services: MatchingServices = Depends(get_services),
):
    """List all districts, optionally restricted to one zone."""
    graph = services.scorer.graph
    districts = graph.by_zone(zone) if zone else graph.all()
    return [_district_to_response(d, lang) for d in districts]


@router.get("/districts/{district_id}", response_model=DistrictDetailResponse)
def get_district(
    district_id: str,
    lang: str = Query("fr"),
    services: MatchingServices = Depends(get_services),
):
    """Get a district and its adjacent districts."""
    graph = services.scorer.graph
    district = graph.get(district_id)
    if not district:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="District not found")

    data = _district_to_response(district, lang)
    data["adjacent"] = sorted(graph.neighbors(district_id))
    return data
