"""Fleet collection endpoint."""

from __future__ import annotations

import asyncio
from functools import partial

from fastapi import APIRouter, Depends, HTTPException

from switchmac.auth import require_api_key
from switchmac.config import settings
from switchmac.models.commands import Credential
from switchmac.models.report import Report
from switchmac.models.responses import CollectRequest
from switchmac.services.collector import FleetCollector
from switchmac.services.command_filter import check_exec_command
from switchmac.services.trust import decider_for_policy

router = APIRouter(tags=["collect"], dependencies=[Depends(require_api_key)])


def build_collector() -> FleetCollector:
    """Collector for HTTP callers; nobody is there to answer a key prompt."""
    return FleetCollector(
        decider=decider_for_policy(settings.trust_policy, interactive=False),
    )


@router.post("/collect", response_model=Report)
async def collect_tables(
    req: CollectRequest,
    collector: FleetCollector = Depends(build_collector),
) -> Report:
    """Run the command set on every host and return the merged report."""
    for cmd in req.commands or []:
        filt = check_exec_command(cmd)
        if not filt.allowed:
            raise HTTPException(status_code=403, detail=f"{cmd}: {filt.reason}")

    credential = Credential(username=req.username, password=req.password)
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None,
        partial(collector.collect, req.hosts, credential, req.commands),
    )
