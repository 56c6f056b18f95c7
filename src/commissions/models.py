"""Models for commission schemes and their items, locks, restrictions and scales."""
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from commissions.categories import CalculationType, ItemCategory, default_calculation_type
from commissions.types import LockType, RestrictionType
from core.models import TimeStampedModel


class SchemeStatus(models.TextChoices):
    OFICIAL = "oficial", "Oficial"
    DRAFT = "draft", "Borrador"
    APROBADO = "aprobado", "Aprobado"
    ARCHIVADO = "archivado", "Archivado"


class CommissionScheme(TimeStampedModel):
    """Monthly commission scheme for one kind of seller.

    Business rule: only drafts are editable. An approved scheme is changed by
    cloning it into a new draft (``parent_scheme`` points back).
    """

    class SchemeType(models.TextChoices):
        ASESOR = "asesor", "Asesor"
        SUPERVISOR = "supervisor", "Supervisor"
        ENCARGADO = "encargado", "Encargado"

    class Source(models.TextChoices):
        ENTEL = "entel", "Entel"
        SOCIO = "socio", "Socio"

    name = models.CharField("nombre", max_length=255)
    code = models.CharField("codigo", max_length=50, unique=True)
    description = models.TextField("descripcion", blank=True, default="")
    scheme_type = models.CharField(
        "tipo de esquema",
        max_length=20,
        choices=SchemeType.choices,
        default=SchemeType.ASESOR,
    )
    year = models.PositiveSmallIntegerField(
        "anio",
        validators=[MinValueValidator(2020), MaxValueValidator(2100)],
    )
    month = models.PositiveSmallIntegerField(
        "mes",
        validators=[MinValueValidator(1), MaxValueValidator(12)],
    )
    status = models.CharField(
        "estado",
        max_length=20,
        choices=SchemeStatus.choices,
        default=SchemeStatus.DRAFT,
    )
    source = models.CharField(
        "origen",
        max_length=20,
        choices=Source.choices,
        default=Source.SOCIO,
    )
    parent_scheme = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="branches",
        verbose_name="esquema padre",
    )
    fixed_salary = models.DecimalField(
        "sueldo fijo", max_digits=12, decimal_places=2, default=Decimal("0.00"),
    )
    variable_salary = models.DecimalField(
        "sueldo variable", max_digits=12, decimal_places=2, default=Decimal("0.00"),
    )
    total_ss_quota = models.PositiveIntegerField("cuota SS total", default=0)
    default_min_fulfillment = models.DecimalField(
        "cumplimiento minimo",
        max_digits=5,
        decimal_places=4,
        null=True,
        blank=True,
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_commission_schemes",
    )
    approved_at = models.DateTimeField("aprobado el", null=True, blank=True)
    approval_notes = models.TextField("notas de aprobacion", blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_commission_schemes",
    )

    class Meta:
        verbose_name = "esquema de comisiones"
        verbose_name_plural = "esquemas de comisiones"
        ordering = ["-year", "-month", "name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.year}-{self.month:02d})"

    @property
    def is_editable(self) -> bool:
        return self.status == SchemeStatus.DRAFT


class SchemeItem(TimeStampedModel):
    """One commissionable line (partida) of a scheme."""

    scheme = models.ForeignKey(
        CommissionScheme,
        on_delete=models.CASCADE,
        related_name="items",
        verbose_name="esquema",
    )
    item_code = models.CharField("codigo de partida", max_length=50)
    custom_name = models.CharField("nombre personalizado", max_length=255, blank=True, default="")
    category = models.CharField(
        "categoria",
        max_length=20,
        choices=ItemCategory.choices,
        default=ItemCategory.PRINCIPAL,
    )
    calculation_type = models.CharField(
        "tipo de calculo",
        max_length=20,
        choices=CalculationType.choices,
        blank=True,
        default="",
    )
    quota = models.DecimalField("cuota", max_digits=10, decimal_places=2, null=True, blank=True)
    weight = models.DecimalField(
        "peso", max_digits=5, decimal_places=4, default=Decimal("0"),
    )
    mix_factor = models.DecimalField(
        "factor mix", max_digits=6, decimal_places=4, null=True, blank=True,
    )
    variable_amount = models.DecimalField(
        "monto variable", max_digits=12, decimal_places=2, default=Decimal("0.00"),
    )
    min_fulfillment = models.DecimalField(
        "cumplimiento minimo", max_digits=5, decimal_places=4, null=True, blank=True,
    )
    has_cap = models.BooleanField("tiene tope", default=False)
    cap_percentage = models.DecimalField(
        "tope porcentual", max_digits=6, decimal_places=4, null=True, blank=True,
    )
    cap_amount = models.DecimalField(
        "tope en monto", max_digits=12, decimal_places=2, null=True, blank=True,
    )
    is_active = models.BooleanField("activa", default=True)
    display_order = models.PositiveIntegerField("orden", default=0)
    notes = models.TextField("notas", blank=True, default="")

    class Meta:
        verbose_name = "partida"
        verbose_name_plural = "partidas"
        ordering = ["display_order", "id"]

    def __str__(self) -> str:
        return self.key

    @property
    def key(self) -> str:
        """Name sales are reported under: custom name, else the item code."""
        return self.custom_name or self.item_code

    @property
    def resolved_calculation_type(self) -> str:
        return self.calculation_type or default_calculation_type(self.category)


class ItemLock(TimeStampedModel):
    """Condition another item must satisfy before ``item`` pays."""

    item = models.ForeignKey(
        SchemeItem,
        on_delete=models.CASCADE,
        related_name="locks",
        verbose_name="partida",
    )
    required_item = models.ForeignKey(
        SchemeItem,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="dependent_locks",
        verbose_name="partida requerida",
    )
    lock_type = models.CharField("tipo de candado", max_length=20, choices=LockType.choices)
    required_value = models.DecimalField("valor requerido", max_digits=12, decimal_places=4)
    is_active = models.BooleanField("activo", default=True)
    description = models.CharField("descripcion", max_length=255, blank=True, default="")

    class Meta:
        verbose_name = "candado"
        verbose_name_plural = "candados"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.item} <- {self.get_lock_type_display()} {self.required_value}"


class SchemeRestriction(TimeStampedModel):
    """Limit on how many plan/operator-tagged sales count toward items."""

    scheme = models.ForeignKey(
        CommissionScheme,
        on_delete=models.CASCADE,
        related_name="restrictions",
        verbose_name="esquema",
    )
    item = models.ForeignKey(
        SchemeItem,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="restrictions",
        verbose_name="partida",
        help_text="Vacio: aplica a todas las partidas del esquema.",
    )
    restriction_type = models.CharField(
        "tipo de restriccion", max_length=20, choices=RestrictionType.choices,
    )
    plan_code = models.CharField("codigo de plan", max_length=50, blank=True, default="")
    operator_code = models.CharField("codigo de operador", max_length=50, blank=True, default="")
    max_percentage = models.DecimalField(
        "porcentaje maximo", max_digits=5, decimal_places=4, null=True, blank=True,
    )
    max_quantity = models.PositiveIntegerField("cantidad maxima", null=True, blank=True)
    min_percentage = models.DecimalField(
        "porcentaje minimo", max_digits=5, decimal_places=4, null=True, blank=True,
    )
    is_active = models.BooleanField("activa", default=True)
    description = models.CharField("descripcion", max_length=255, blank=True, default="")

    class Meta:
        verbose_name = "restriccion"
        verbose_name_plural = "restricciones"
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.get_restriction_type_display()} ({self.plan_code or self.operator_code or '*'})"


class PxqScale(models.Model):
    """One tier of a PxQ item: ``[min_fulfillment, max_fulfillment)``."""

    item = models.ForeignKey(
        SchemeItem,
        on_delete=models.CASCADE,
        related_name="pxq_scales",
        verbose_name="partida",
    )
    min_fulfillment = models.DecimalField("cumplimiento desde", max_digits=6, decimal_places=4)
    max_fulfillment = models.DecimalField(
        "cumplimiento hasta", max_digits=6, decimal_places=4, null=True, blank=True,
    )
    amount_per_unit = models.DecimalField("monto por unidad", max_digits=10, decimal_places=2)
    display_order = models.PositiveIntegerField("orden", default=0)
    created_at = models.DateTimeField("creado el", auto_now_add=True)

    class Meta:
        verbose_name = "tramo PxQ"
        verbose_name_plural = "tramos PxQ"
        ordering = ["display_order", "min_fulfillment"]

    def __str__(self) -> str:
        upper = self.max_fulfillment if self.max_fulfillment is not None else "+"
        return f"[{self.min_fulfillment}, {upper}) x {self.amount_per_unit}"
