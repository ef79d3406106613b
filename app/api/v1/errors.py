from fastapi import HTTPException

from app.application.exceptions import LLMContractError, LLMUpstreamError, SchedulingError


def to_http(e: SchedulingError | LLMUpstreamError | LLMContractError) -> HTTPException:
    if isinstance(e, SchedulingError):
        return HTTPException(status_code=e.status_code, detail={"code": e.code, "message": e.message})
    return HTTPException(status_code=502, detail={"code": "llm_unavailable", "message": str(e)})
