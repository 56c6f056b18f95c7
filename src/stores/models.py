"""Models for the stores app."""
from django.db import models

from core.models import TimeStampedModel


class Store(TimeStampedModel):
    """A physical point of sale whose monthly quota is split among sellers."""

    class Zone(models.TextChoices):
        NORTE = "NORTE", "Norte"
        CENTRO = "CENTRO", "Centro"
        SUR = "SUR", "Sur"
        LIMA = "LIMA", "Lima"

    name = models.CharField("nombre", max_length=255)
    code = models.CharField("codigo", max_length=50, unique=True)
    zone = models.CharField(
        "zona",
        max_length=20,
        choices=Zone.choices,
        blank=True,
        default="",
    )
    address = models.TextField("direccion", blank=True, default="")
    is_active = models.BooleanField("activa", default=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "Tienda"
        verbose_name_plural = "Tiendas"

    def __str__(self):
        return f"{self.name} ({self.code})"
