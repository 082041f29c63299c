"""FastAPI dependencies for progress tracking.

Provides dependency injection for:
- Progress service
- Completion workflow
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import ProgressService
from .workflow import CompletionWorkflow


async def get_progress_service(request: Request) -> ProgressService:
    """Get progress service from app state.

    Args:
        request: FastAPI request

    Returns:
        ProgressService instance
    """
    service = getattr(request.app.state, "progress_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Progress service not available",
        )
    return service


async def get_completion_workflow(request: Request) -> CompletionWorkflow:
    """Get completion workflow from app state."""
    workflow = getattr(request.app.state, "completion_workflow", None)
    if workflow is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Progress service not available",
        )
    return workflow


# Type aliases for dependency injection
ProgressServiceDep = Annotated[ProgressService, Depends(get_progress_service)]
CompletionWorkflowDep = Annotated[CompletionWorkflow, Depends(get_completion_workflow)]
