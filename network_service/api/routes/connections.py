"""
Connection routes - network statistics and connection queries
"""
from fastapi import APIRouter, Depends
from typing import List

from ...domain.models import User
from ...schemas import UserSummary, NetworkStats, DataResponse, MessageResponse
from ...application.graph_service import GraphService
from ..dependencies import get_graph_service, get_current_user
from .users import split_csv


router = APIRouter(prefix="/api/connections", tags=["Connections"])


@router.get("/stats", response_model=DataResponse[NetworkStats])
async def get_stats(
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    """Relationship counts of the current user"""
    return DataResponse[NetworkStats](data=await graph_service.stats(current_user.id))


@router.get("/mutual/{user_id}", response_model=DataResponse[List[UserSummary]])
async def get_mutual_connections(
    user_id: str,
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    """Connections shared with another user"""
    mutual = await graph_service.mutual_connections(current_user.id, user_id)
    return DataResponse[List[UserSummary]](data=mutual)


@router.get("/suggestions", response_model=DataResponse[List[UserSummary]])
async def get_suggestions(
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    """Second-degree connections ranked by shared connections"""
    suggestions = await graph_service.suggestions(current_user.id, ranked=True)
    return DataResponse[List[UserSummary]](data=suggestions)


@router.get("/company/{company}", response_model=DataResponse[List[UserSummary]])
async def get_connections_by_company(
    company: str,
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    connections = await graph_service.filter_connections(current_user.id, company=company)
    return DataResponse[List[UserSummary]](data=connections)


@router.get("/location/{location}", response_model=DataResponse[List[UserSummary]])
async def get_connections_by_location(
    location: str,
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    connections = await graph_service.filter_connections(current_user.id, location=location)
    return DataResponse[List[UserSummary]](data=connections)


@router.get("/skills/{skills}", response_model=DataResponse[List[UserSummary]])
async def get_connections_by_skills(
    skills: str,
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    """Connections having any of the comma-separated skills"""
    connections = await graph_service.filter_connections(current_user.id, skills=split_csv(skills))
    return DataResponse[List[UserSummary]](data=connections)


@router.get("/sent-requests", response_model=DataResponse[List[UserSummary]])
async def get_sent_requests(
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    """Connection requests the current user is waiting on"""
    sent = await graph_service.summaries(await graph_service.sent_request_ids(current_user.id))
    return DataResponse[List[UserSummary]](data=sent)


@router.delete("/cancel-request/{user_id}", response_model=MessageResponse)
async def cancel_request(
    user_id: str,
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    await graph_service.cancel_connection_request(current_user.id, user_id)
    return MessageResponse(message="Connection request cancelled")


@router.delete("/{user_id}", response_model=MessageResponse)
async def remove_connection(
    user_id: str,
    current_user: User = Depends(get_current_user),
    graph_service: GraphService = Depends(get_graph_service)
):
    await graph_service.remove_connection(current_user.id, user_id)
    return MessageResponse(message="Connection removed")
