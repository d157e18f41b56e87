from uuid import UUID

from shared.core.exceptions import ValidationError


def as_uuid(value, field: str = "id") -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{field} is not a valid identifier", field=field)
