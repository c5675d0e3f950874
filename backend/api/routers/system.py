"""
System router - Health checks and reference data.
"""

from fastapi import APIRouter

from api.schemas import MaterialsResponse
from simulation.materials import list_materials

router = APIRouter()


@router.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "InfraSim Simulation Backend"}


@router.get("/materials", response_model=MaterialsResponse)
def get_materials():
    """Catalogue of materials with their base wear rates."""
    return {"materials": [m.to_dict() for m in list_materials()]}
