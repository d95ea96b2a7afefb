# backend/hd_core/common/db.py
from __future__ import annotations

from django.db import IntegrityError, transaction

from hd_core.common.api.exceptions import ConflictError


def save_or_conflict(obj, *, message: str, **save_kwargs) -> None:
    """
    Save inside a savepoint so a unique-index violation becomes a ConflictError
    without poisoning the surrounding transaction.
    """
    try:
        with transaction.atomic():
            obj.save(**save_kwargs)
    except IntegrityError:
        raise ConflictError(message)
