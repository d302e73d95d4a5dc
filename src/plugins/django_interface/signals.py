from django.db.models.signals import pre_save
from django.dispatch import receiver

from convenio_core.core.domain.exceptions import ValidationError

from .models import Commission

PAID_IMMUTABLE = ("affiliate_id", "source_user_id", "amount")


@receiver(pre_save, sender=Commission)
def freeze_paid_commission(sender, instance: Commission, **kwargs):
    """Depois de paga, afiliado, usuário de origem e valor não mudam mais."""
    if instance._state.adding or instance.pk is None:
        return
    stored = (
        Commission.objects.filter(pk=instance.pk)
        .values("status", *PAID_IMMUTABLE)
        .first()
    )
    if stored is None or stored["status"] != Commission.Status.PAID:
        return
    changed = [f for f in PAID_IMMUTABLE if stored[f] != getattr(instance, f)]
    if changed or instance.status != Commission.Status.PAID:
        raise ValidationError(
            "Comissão paga não pode ser alterada.", error="COMMISSION_PAID_IMMUTABLE"
        )
