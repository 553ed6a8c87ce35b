from fastapi import Request

from katori.services.estimation_service import EstimationService


def get_estimation_service(request: Request) -> EstimationService:
    return request.app.state.estimation_service
