from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CommissionScheme",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="creado el")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="actualizado el")),
                ("name", models.CharField(max_length=255, verbose_name="nombre")),
                ("code", models.CharField(max_length=50, unique=True, verbose_name="codigo")),
                ("description", models.TextField(blank=True, default="", verbose_name="descripcion")),
                (
                    "scheme_type",
                    models.CharField(
                        choices=[("asesor", "Asesor"), ("supervisor", "Supervisor"), ("encargado", "Encargado")],
                        default="asesor",
                        max_length=20,
                        verbose_name="tipo de esquema",
                    ),
                ),
                (
                    "year",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(2020),
                            django.core.validators.MaxValueValidator(2100),
                        ],
                        verbose_name="anio",
                    ),
                ),
                (
                    "month",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(12),
                        ],
                        verbose_name="mes",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("oficial", "Oficial"),
                            ("draft", "Borrador"),
                            ("aprobado", "Aprobado"),
                            ("archivado", "Archivado"),
                        ],
                        default="draft",
                        max_length=20,
                        verbose_name="estado",
                    ),
                ),
                (
                    "source",
                    models.CharField(
                        choices=[("entel", "Entel"), ("socio", "Socio")],
                        default="socio",
                        max_length=20,
                        verbose_name="origen",
                    ),
                ),
                (
                    "fixed_salary",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12, verbose_name="sueldo fijo"),
                ),
                (
                    "variable_salary",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12, verbose_name="sueldo variable"),
                ),
                ("total_ss_quota", models.PositiveIntegerField(default=0, verbose_name="cuota SS total")),
                (
                    "default_min_fulfillment",
                    models.DecimalField(
                        blank=True, decimal_places=4, max_digits=5, null=True, verbose_name="cumplimiento minimo",
                    ),
                ),
                ("approved_at", models.DateTimeField(blank=True, null=True, verbose_name="aprobado el")),
                ("approval_notes", models.TextField(blank=True, default="", verbose_name="notas de aprobacion")),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="approved_commission_schemes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_commission_schemes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "parent_scheme",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="branches",
                        to="commissions.commissionscheme",
                        verbose_name="esquema padre",
                    ),
                ),
            ],
            options={
                "verbose_name": "esquema de comisiones",
                "verbose_name_plural": "esquemas de comisiones",
                "ordering": ["-year", "-month", "name"],
            },
        ),
        migrations.CreateModel(
            name="SchemeItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="creado el")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="actualizado el")),
                ("item_code", models.CharField(max_length=50, verbose_name="codigo de partida")),
                ("custom_name", models.CharField(blank=True, default="", max_length=255, verbose_name="nombre personalizado")),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("principal", "Principal"),
                            ("adicional", "Adicional"),
                            ("pxq", "PxQ"),
                            ("postventa", "Postventa"),
                            ("bono", "Bono"),
                        ],
                        default="principal",
                        max_length=20,
                        verbose_name="categoria",
                    ),
                ),
                (
                    "calculation_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("percentage", "Porcentaje"),
                            ("pxq", "PxQ"),
                            ("binary", "Binario"),
                            ("fixed", "Fijo"),
                        ],
                        default="",
                        max_length=20,
                        verbose_name="tipo de calculo",
                    ),
                ),
                ("quota", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, verbose_name="cuota")),
                ("weight", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=5, verbose_name="peso")),
                ("mix_factor", models.DecimalField(blank=True, decimal_places=4, max_digits=6, null=True, verbose_name="factor mix")),
                (
                    "variable_amount",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12, verbose_name="monto variable"),
                ),
                (
                    "min_fulfillment",
                    models.DecimalField(blank=True, decimal_places=4, max_digits=5, null=True, verbose_name="cumplimiento minimo"),
                ),
                ("has_cap", models.BooleanField(default=False, verbose_name="tiene tope")),
                (
                    "cap_percentage",
                    models.DecimalField(blank=True, decimal_places=4, max_digits=6, null=True, verbose_name="tope porcentual"),
                ),
                (
                    "cap_amount",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, verbose_name="tope en monto"),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="activa")),
                ("display_order", models.PositiveIntegerField(default=0, verbose_name="orden")),
                ("notes", models.TextField(blank=True, default="", verbose_name="notas")),
                (
                    "scheme",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="commissions.commissionscheme",
                        verbose_name="esquema",
                    ),
                ),
            ],
            options={
                "verbose_name": "partida",
                "verbose_name_plural": "partidas",
                "ordering": ["display_order", "id"],
            },
        ),
        migrations.CreateModel(
            name="ItemLock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="creado el")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="actualizado el")),
                (
                    "lock_type",
                    models.CharField(
                        choices=[
                            ("min_quantity", "Cantidad minima"),
                            ("min_amount", "Monto minimo"),
                            ("min_percentage", "Cumplimiento minimo de partida"),
                            ("min_fulfillment", "Cumplimiento global minimo"),
                        ],
                        max_length=20,
                        verbose_name="tipo de candado",
                    ),
                ),
                ("required_value", models.DecimalField(decimal_places=4, max_digits=12, verbose_name="valor requerido")),
                ("is_active", models.BooleanField(default=True, verbose_name="activo")),
                ("description", models.CharField(blank=True, default="", max_length=255, verbose_name="descripcion")),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="locks",
                        to="commissions.schemeitem",
                        verbose_name="partida",
                    ),
                ),
                (
                    "required_item",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="dependent_locks",
                        to="commissions.schemeitem",
                        verbose_name="partida requerida",
                    ),
                ),
            ],
            options={
                "verbose_name": "candado",
                "verbose_name_plural": "candados",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="SchemeRestriction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="creado el")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="actualizado el")),
                (
                    "restriction_type",
                    models.CharField(
                        choices=[
                            ("max_percentage", "Porcentaje maximo"),
                            ("max_quantity", "Cantidad maxima"),
                            ("min_percentage", "Porcentaje minimo"),
                            ("operator_origin", "Operador de origen"),
                        ],
                        max_length=20,
                        verbose_name="tipo de restriccion",
                    ),
                ),
                ("plan_code", models.CharField(blank=True, default="", max_length=50, verbose_name="codigo de plan")),
                ("operator_code", models.CharField(blank=True, default="", max_length=50, verbose_name="codigo de operador")),
                (
                    "max_percentage",
                    models.DecimalField(blank=True, decimal_places=4, max_digits=5, null=True, verbose_name="porcentaje maximo"),
                ),
                ("max_quantity", models.PositiveIntegerField(blank=True, null=True, verbose_name="cantidad maxima")),
                (
                    "min_percentage",
                    models.DecimalField(blank=True, decimal_places=4, max_digits=5, null=True, verbose_name="porcentaje minimo"),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="activa")),
                ("description", models.CharField(blank=True, default="", max_length=255, verbose_name="descripcion")),
                (
                    "item",
                    models.ForeignKey(
                        blank=True,
                        help_text="Vacio: aplica a todas las partidas del esquema.",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="restrictions",
                        to="commissions.schemeitem",
                        verbose_name="partida",
                    ),
                ),
                (
                    "scheme",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="restrictions",
                        to="commissions.commissionscheme",
                        verbose_name="esquema",
                    ),
                ),
            ],
            options={
                "verbose_name": "restriccion",
                "verbose_name_plural": "restricciones",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="PxqScale",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("min_fulfillment", models.DecimalField(decimal_places=4, max_digits=6, verbose_name="cumplimiento desde")),
                (
                    "max_fulfillment",
                    models.DecimalField(blank=True, decimal_places=4, max_digits=6, null=True, verbose_name="cumplimiento hasta"),
                ),
                ("amount_per_unit", models.DecimalField(decimal_places=2, max_digits=10, verbose_name="monto por unidad")),
                ("display_order", models.PositiveIntegerField(default=0, verbose_name="orden")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="creado el")),
                (
                    "item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pxq_scales",
                        to="commissions.schemeitem",
                        verbose_name="partida",
                    ),
                ),
            ],
            options={
                "verbose_name": "tramo PxQ",
                "verbose_name_plural": "tramos PxQ",
                "ordering": ["display_order", "min_fulfillment"],
            },
        ),
    ]
