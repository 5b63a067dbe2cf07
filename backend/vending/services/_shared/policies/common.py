def is_owner(*, actor_id, owner_id) -> bool:
    """Return True if the actor owns the resource."""
    return actor_id is not None and str(actor_id) == str(owner_id)


def has_role(*, role, required) -> bool:
    """Return True if ``role`` equals ``required`` (enum or raw value)."""
    return getattr(role, "value", role) == getattr(required, "value", required)
