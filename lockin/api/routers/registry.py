"""
/registry — list and delete distracting domains and tabs.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ...api.schemas import DistractingTabOut, DomainListOut, TabListOut

router = APIRouter(prefix="/registry", tags=["registry"])


def _get_registry(request: Request):
    return request.app.state.services["registry"]


@router.get("/domains", response_model=DomainListOut)
def list_domains(registry=Depends(_get_registry)):
    return DomainListOut(domains=registry.domains())


@router.get("/domains/{domain}")
def check_domain(domain: str, registry=Depends(_get_registry)):
    return {"domain": domain, "distracting": registry.is_domain_distracting(domain)}


@router.delete("/domains/{domain}")
def delete_domain(domain: str, registry=Depends(_get_registry)):
    if not registry.delete_domain(domain):
        raise HTTPException(status_code=404, detail="Domain not found")
    return {"status": "removed"}


@router.get("/tabs", response_model=TabListOut)
def list_tabs(registry=Depends(_get_registry)):
    return TabListOut(tabs=[DistractingTabOut(**t) for t in registry.tabs()])


@router.delete("/tabs")
def delete_tab(url: str = Query(...), registry=Depends(_get_registry)):
    if not registry.delete_tab(url):
        raise HTTPException(status_code=404, detail="Tab not found")
    return {"status": "removed"}
