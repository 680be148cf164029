from fastapi import APIRouter, Depends

from autodetail.api.v1.schemas import ProfileUpdateSchema, UserSchema
from autodetail.domain.entities.user import Identity
from autodetail.wiring.dependencies import Container, get_container, get_identity

router = APIRouter(prefix="/me")


@router.get("", response_model=UserSchema)
def me(identity: Identity | None = Depends(get_identity), container: Container = Depends(get_container)):
    container.users.resolve(identity)
    return UserSchema.model_validate(container.users.current_user(identity))


@router.patch("", response_model=UserSchema)
def update_me(
    req: ProfileUpdateSchema,
    identity: Identity | None = Depends(get_identity),
    container: Container = Depends(get_container),
):
    actor = container.users.resolve(identity)
    user = container.users.update_profile(actor, name=req.name, phone=req.phone)
    return UserSchema.model_validate(user)
