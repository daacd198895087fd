from fastapi import APIRouter, Depends, Query, Response
from typing import Any, Dict

from app.api.schemas.deployments import (
    DeployRequest,
    UpdateRequest,
    DeployResponse,
    DeploymentListResponse,
    DeploymentStatusResponse,
    UpdateResponse,
    DeleteResponse,
    ReconcileResponse,
)
from app.config import settings
from app.core.exceptions import DeploymentNotFoundError
from app.dependencies import get_deployment_reconciler
from app.services.deployment_reconciler import DeploymentReconciler

router = APIRouter(prefix="/deployments", tags=["deployments"])

NOT_FOUND_MESSAGE = str(DeploymentNotFoundError(""))


def _with_status(result: Dict[str, Any], response: Response) -> Dict[str, Any]:
    """Code HTTP dérivé du résultat structuré du réconciliateur"""
    if not result.get("success"):
        response.status_code = 404 if result.get("error") == NOT_FOUND_MESSAGE else 502
    return result


@router.post("", response_model=DeployResponse)
def deploy_worker(
    request: DeployRequest,
    response: Response,
    reconciler: DeploymentReconciler = Depends(get_deployment_reconciler)
):
    """Déploie un worker dans le namespace de dispatch"""
    result = reconciler.deploy_from_meta_mcp(
        request.server_id,
        request.worker_name,
        request.script_content,
        [binding.to_payload() for binding in request.bindings]
    )
    return _with_status(result, response)


@router.get("", response_model=DeploymentListResponse)
def list_deployments(
    response: Response,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    reconciler: DeploymentReconciler = Depends(get_deployment_reconciler)
):
    """Liste les déploiements, les plus récents d'abord"""
    return _with_status(reconciler.list_deployments(limit=limit, offset=offset), response)


@router.post("/reconcile", response_model=ReconcileResponse)
def reconcile_deployments(
    response: Response,
    reconciler: DeploymentReconciler = Depends(get_deployment_reconciler)
):
    """Passe en échec les déploiements bloqués en 'deploying'"""
    result = reconciler.reconcile_stale_deployments(settings.STALE_DEPLOYMENT_SECONDS)
    return _with_status(result, response)


@router.get("/{deployment_id}", response_model=DeploymentStatusResponse)
def get_deployment_status(
    deployment_id: str,
    response: Response,
    reconciler: DeploymentReconciler = Depends(get_deployment_reconciler)
):
    """Statut d'un déploiement"""
    return _with_status(reconciler.get_deployment_status(deployment_id), response)


@router.put("/{deployment_id}", response_model=UpdateResponse)
def update_deployment(
    deployment_id: str,
    request: UpdateRequest,
    response: Response,
    reconciler: DeploymentReconciler = Depends(get_deployment_reconciler)
):
    """Republie le code d'un worker existant"""
    return _with_status(reconciler.update_deployment(deployment_id, request.script_content), response)


@router.delete("/{deployment_id}", response_model=DeleteResponse)
def delete_deployment(
    deployment_id: str,
    response: Response,
    reconciler: DeploymentReconciler = Depends(get_deployment_reconciler)
):
    """Supprime le worker de la plateforme puis du ledger"""
    return _with_status(reconciler.delete_deployment(deployment_id), response)
