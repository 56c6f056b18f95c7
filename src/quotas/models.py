"""Models for store and seller (HC) quotas."""
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.models import TimeStampedModel
from quotas.distribution import QuotaSnapshot, prorate


class QuotaStatus(models.TextChoices):
    DRAFT = "draft", "Borrador"
    PENDING_APPROVAL = "pending_approval", "Pendiente de aprobacion"
    APPROVED = "approved", "Aprobada"
    ARCHIVED = "archived", "Archivada"


EDITABLE_STATUSES = (QuotaStatus.DRAFT, QuotaStatus.PENDING_APPROVAL)


class StoreQuota(TimeStampedModel):
    """Monthly SS quota target for a store.

    Business rule: once approved, the quota and its HC distribution are
    immutable. Only the scheme-level archival transition touches them again.
    """

    class Source(models.TextChoices):
        ENTEL = "entel", "Entel"
        MANUAL = "manual", "Manual"

    store = models.ForeignKey(
        "stores.Store",
        on_delete=models.CASCADE,
        related_name="store_quotas",
        verbose_name="tienda",
    )
    year = models.PositiveSmallIntegerField(
        "anio",
        validators=[MinValueValidator(2020), MaxValueValidator(2100)],
    )
    month = models.PositiveSmallIntegerField(
        "mes",
        validators=[MinValueValidator(1), MaxValueValidator(12)],
    )
    ss_quota = models.PositiveIntegerField("cuota SS")
    quota_breakdown = models.JSONField("desglose de cuota", default=dict, blank=True)
    source = models.CharField(
        "origen",
        max_length=20,
        choices=Source.choices,
        default=Source.MANUAL,
    )
    original_store_name = models.CharField(
        "nombre original de tienda", max_length=255, blank=True, default="",
    )
    status = models.CharField(
        "estado",
        max_length=20,
        choices=QuotaStatus.choices,
        default=QuotaStatus.DRAFT,
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_store_quotas",
    )
    approved_at = models.DateTimeField("aprobada el", null=True, blank=True)
    approval_notes = models.TextField("notas de aprobacion", blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_store_quotas",
    )

    class Meta:
        verbose_name = "cuota de tienda"
        verbose_name_plural = "cuotas de tienda"
        ordering = ["-year", "-month", "store__name"]
        constraints = [
            models.UniqueConstraint(
                fields=["store", "year", "month"],
                name="uniq_store_quota_period",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.store} - {self.period} ({self.ss_quota})"

    @property
    def period(self) -> str:
        return f"{self.year}-{self.month:02d}"

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES


class HcQuota(TimeStampedModel):
    """A seller's share of a store quota, with date-based proration."""

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="hc_quotas",
        verbose_name="vendedor",
    )
    store_quota = models.ForeignKey(
        StoreQuota,
        on_delete=models.CASCADE,
        related_name="hc_quotas",
        verbose_name="cuota de tienda",
    )
    store = models.ForeignKey(
        "stores.Store",
        on_delete=models.CASCADE,
        related_name="hc_quotas",
        verbose_name="tienda",
    )
    year = models.PositiveSmallIntegerField("anio")
    month = models.PositiveSmallIntegerField("mes")
    ss_quota = models.PositiveIntegerField("cuota SS")
    quota_breakdown = models.JSONField("desglose de cuota", default=dict, blank=True)
    start_date = models.DateField("fecha de inicio", null=True, blank=True)
    proration_factor = models.DecimalField(
        "factor de prorrateo",
        max_digits=5,
        decimal_places=4,
        default=Decimal("1"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
    )
    prorated_ss_quota = models.DecimalField(
        "cuota SS prorrateada",
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
    )
    status = models.CharField(
        "estado",
        max_length=20,
        choices=QuotaStatus.choices,
        default=QuotaStatus.DRAFT,
    )
    distributed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="distributed_hc_quotas",
    )
    distributed_at = models.DateTimeField("distribuida el", null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_hc_quotas",
    )
    approved_at = models.DateTimeField("aprobada el", null=True, blank=True)
    notes = models.TextField("notas", blank=True, default="")

    class Meta:
        verbose_name = "cuota HC"
        verbose_name_plural = "cuotas HC"
        ordering = ["-year", "-month"]
        constraints = [
            models.UniqueConstraint(
                fields=["store_quota", "seller"],
                name="uniq_hc_quota_per_store_quota",
            ),
        ]
        indexes = [
            models.Index(fields=["seller", "year", "month"], name="hcquota_seller_period_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.seller} - {self.year}-{self.month:02d} ({self.ss_quota})"

    @property
    def effective_quota(self) -> Decimal:
        if self.prorated_ss_quota is not None:
            return self.prorated_ss_quota
        return prorate(self.ss_quota, self.proration_factor)

    def to_snapshot(self) -> QuotaSnapshot:
        """Freeze this row into the value the commission engine consumes."""
        return QuotaSnapshot(
            ss_quota=Decimal(self.ss_quota),
            proration_factor=Decimal(self.proration_factor),
            prorated_ss_quota=self.prorated_ss_quota,
            quota_breakdown={
                key: Decimal(str(value))
                for key, value in (self.quota_breakdown or {}).items()
                if value is not None
            },
            start_date=self.start_date,
        )
