"""User profile, follow-graph and account admin routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from inkwell.api.deps import (
    get_current_claims,
    get_follow_service,
    get_pagination,
    get_user_service,
    require_admin,
    require_auth,
)
from inkwell.api.responses import ok, paginated
from inkwell.schemas.common import APIResponse
from inkwell.schemas.user import (
    FollowRequest,
    FollowResponse,
    FollowStatsRead,
    FollowStatusResponse,
    UserMe,
    UserSummary,
    UserWithFollowStatus,
)
from inkwell.services.auth import TokenClaims
from inkwell.services.follow_service import FollowService
from inkwell.services.pagination import Pagination
from inkwell.services.user_service import UserService

router = APIRouter()


@router.get("/me", response_model=APIResponse[UserMe])
def get_me(
    claims: TokenClaims = Depends(require_auth),
    users: UserService = Depends(get_user_service),
) -> APIResponse:
    """Return the authenticated user's own profile."""
    return ok("User retrieved successfully", UserMe.model_validate(users.get_user(claims.user_id)))


@router.get("", response_model=APIResponse[list[UserSummary]])
def list_users(
    page: Pagination = Depends(get_pagination),
    users: UserService = Depends(get_user_service),
    _auth: TokenClaims = Depends(require_auth),
) -> APIResponse:
    items, total = users.list_users(page)
    return paginated(
        "Users retrieved successfully", [UserSummary.model_validate(u) for u in items], total, page
    )


@router.post("/follow", response_model=APIResponse[FollowResponse])
def follow_user(
    body: FollowRequest,
    claims: TokenClaims = Depends(require_auth),
    follows: FollowService = Depends(get_follow_service),
) -> APIResponse:
    follows.follow(claims.user_id, body.user_id)
    return ok(
        "Successfully followed user",
        FollowResponse(is_following=True, message="Successfully followed user"),
    )


@router.delete("/{user_id}/follow", response_model=APIResponse[FollowResponse])
def unfollow_user(
    user_id: int,
    claims: TokenClaims = Depends(require_auth),
    follows: FollowService = Depends(get_follow_service),
) -> APIResponse:
    follows.unfollow(claims.user_id, user_id)
    return ok(
        "Successfully unfollowed user",
        FollowResponse(is_following=False, message="Successfully unfollowed user"),
    )


@router.get("/{user_id}/follow-status", response_model=APIResponse[FollowStatusResponse])
def follow_status(
    user_id: int,
    claims: TokenClaims = Depends(require_auth),
    follows: FollowService = Depends(get_follow_service),
) -> APIResponse:
    """Whether the caller follows ``user_id``."""
    is_following = follows.is_following(claims.user_id, user_id)
    return ok(
        "Follow status retrieved successfully",
        FollowStatusResponse(user_id=user_id, is_following=is_following),
    )


@router.get("/{user_id}/followers", response_model=APIResponse[list[UserSummary]])
def list_followers(
    user_id: int,
    page: Pagination = Depends(get_pagination),
    follows: FollowService = Depends(get_follow_service),
) -> APIResponse:
    items, total = follows.get_followers(user_id, page)
    return paginated(
        "Followers retrieved successfully",
        [UserSummary.model_validate(u) for u in items],
        total,
        page,
    )


@router.get("/{user_id}/following", response_model=APIResponse[list[UserSummary]])
def list_following(
    user_id: int,
    page: Pagination = Depends(get_pagination),
    follows: FollowService = Depends(get_follow_service),
) -> APIResponse:
    items, total = follows.get_following(user_id, page)
    return paginated(
        "Following retrieved successfully",
        [UserSummary.model_validate(u) for u in items],
        total,
        page,
    )


@router.get("/{user_id}/follow-stats", response_model=APIResponse[FollowStatsRead])
def follow_stats(
    user_id: int,
    follows: FollowService = Depends(get_follow_service),
) -> APIResponse:
    stats = follows.get_follow_stats(user_id)
    return ok("Follow stats retrieved successfully", FollowStatsRead.model_validate(stats))


@router.post("/{user_id}/follow-stats/recompute", response_model=APIResponse[FollowStatsRead])
def recompute_follow_stats(
    user_id: int,
    follows: FollowService = Depends(get_follow_service),
    _admin: TokenClaims = Depends(require_admin),
) -> APIResponse:
    """Repair a user's denormalized follow counters from the follow table."""
    stats = follows.update_follow_counts(user_id)
    return ok("Follow counts updated successfully", FollowStatsRead.model_validate(stats))


@router.get("/{user_id}/mutual-follows", response_model=APIResponse[list[UserSummary]])
def mutual_follows(
    user_id: int,
    claims: TokenClaims = Depends(require_auth),
    follows: FollowService = Depends(get_follow_service),
) -> APIResponse:
    """Users followed by both the caller and ``user_id``."""
    users = follows.get_mutual_follows(claims.user_id, user_id)
    return ok(
        "Mutual follows retrieved successfully", [UserSummary.model_validate(u) for u in users]
    )


@router.get("/{user_id}", response_model=APIResponse[UserWithFollowStatus])
def get_user(
    user_id: int,
    claims: TokenClaims | None = Depends(get_current_claims),
    follows: FollowService = Depends(get_follow_service),
) -> APIResponse:
    """Public profile, with ``is_following`` set for authenticated callers."""
    viewer_id = claims.user_id if claims else None
    user, is_following = follows.get_user_with_follow_status(user_id, viewer_id)
    data = UserWithFollowStatus.model_validate(user).model_copy(
        update={"is_following": is_following}
    )
    return ok("User retrieved successfully", data)


@router.delete("/{user_id}", response_model=APIResponse[None])
def delete_user(
    user_id: int,
    admin: TokenClaims = Depends(require_admin),
    users: UserService = Depends(get_user_service),
) -> APIResponse:
    """Soft delete an account. Super admins only."""
    users.delete_user(user_id, admin)
    return ok("User deleted successfully")
