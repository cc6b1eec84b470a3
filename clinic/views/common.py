from rest_framework.exceptions import NotFound, ValidationError


def parse_id(raw, label: str) -> int:
    try:
        pk = int(str(raw))
    except (TypeError, ValueError):
        pk = 0
    if pk <= 0:
        raise ValidationError(f'Invalid {label} id.')
    return pk


def get_row(qs, raw_id, label: str):
    """Fetch one row by a path id; 400 on a malformed id and 404 when missing."""
    row = qs.filter(id=parse_id(raw_id, label)).first()
    if row is None:
        raise NotFound(f'{label.capitalize()} not found.')
    return row


def iso(value):
    return value.isoformat() if value else None
