from fastapi import APIRouter, HTTPException

from app.core.networks import NETWORKS, get_network_config
from app.models.schemas import NetworkOut

router = APIRouter(prefix="/v2/networks", tags=["networks"])


@router.get("", response_model=list[NetworkOut])
def list_networks():
    return [config.as_dict() for config in NETWORKS.values()]


@router.get("/{chain_id}", response_model=NetworkOut)
def get_network(chain_id: int):
    config = get_network_config(chain_id)
    if config is None:
        raise HTTPException(status_code=404, detail=f"Unsupported network: chain id {chain_id}")
    return config.as_dict()
