"""
Policy reconciliation endpoint.
"""

from fastapi import APIRouter
from tenjin_core.api.models import ErrorResponse, PolicyDiffRequest, StatementsResponse
from tenjin_core.lib.rls import diff_schema_policies
from tenjin_core.lib.schema import Schema

router = APIRouter()

@router.post("/policy-diff", response_model=StatementsResponse, responses={400: {"model": ErrorResponse}})
async def policy_diff(request: PolicyDiffRequest):
    """Return the DROP POLICY / CREATE POLICY statements that turn old_schema's policies into new_schema's."""
    old = Schema.from_dict(request.old_schema)
    new = Schema.from_dict(request.new_schema)

    return StatementsResponse(statements=diff_schema_policies(old, new))
