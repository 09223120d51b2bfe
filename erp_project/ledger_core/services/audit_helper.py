from django.forms.models import model_to_dict

from ..models import AuditLog


def snapshot(instance, fields):
    """JSON-safe dict of the given fields, for before/after change records."""
    return {
        key: (str(value) if value is not None else None)
        for key, value in model_to_dict(instance, fields=fields).items()
    }


def log_action(
    *,
    action: str,
    instance,
    user=None,
    changes: dict | None = None,
):
    """
    Central audit logger.
    Runs inside the caller's transaction so the log row rolls back with it.
    """
    AuditLog.objects.create(
        user=user,
        action=action,
        object_type=instance.__class__.__name__,
        object_id=str(instance.pk),
        changes=changes,
    )
