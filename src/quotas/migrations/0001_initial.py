from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ("draft", "Borrador"),
    ("pending_approval", "Pendiente de aprobacion"),
    ("approved", "Aprobada"),
    ("archived", "Archivada"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("stores", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="StoreQuota",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="creado el")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="actualizado el")),
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
                ("ss_quota", models.PositiveIntegerField(verbose_name="cuota SS")),
                ("quota_breakdown", models.JSONField(blank=True, default=dict, verbose_name="desglose de cuota")),
                (
                    "source",
                    models.CharField(
                        choices=[("entel", "Entel"), ("manual", "Manual")],
                        default="manual",
                        max_length=20,
                        verbose_name="origen",
                    ),
                ),
                (
                    "original_store_name",
                    models.CharField(blank=True, default="", max_length=255, verbose_name="nombre original de tienda"),
                ),
                (
                    "status",
                    models.CharField(choices=STATUS_CHOICES, default="draft", max_length=20, verbose_name="estado"),
                ),
                ("approved_at", models.DateTimeField(blank=True, null=True, verbose_name="aprobada el")),
                ("approval_notes", models.TextField(blank=True, default="", verbose_name="notas de aprobacion")),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="approved_store_quotas",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_store_quotas",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "store",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="store_quotas",
                        to="stores.store",
                        verbose_name="tienda",
                    ),
                ),
            ],
            options={
                "verbose_name": "cuota de tienda",
                "verbose_name_plural": "cuotas de tienda",
                "ordering": ["-year", "-month", "store__name"],
            },
        ),
        migrations.AddConstraint(
            model_name="storequota",
            constraint=models.UniqueConstraint(fields=("store", "year", "month"), name="uniq_store_quota_period"),
        ),
        migrations.CreateModel(
            name="HcQuota",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="creado el")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="actualizado el")),
                ("year", models.PositiveSmallIntegerField(verbose_name="anio")),
                ("month", models.PositiveSmallIntegerField(verbose_name="mes")),
                ("ss_quota", models.PositiveIntegerField(verbose_name="cuota SS")),
                ("quota_breakdown", models.JSONField(blank=True, default=dict, verbose_name="desglose de cuota")),
                ("start_date", models.DateField(blank=True, null=True, verbose_name="fecha de inicio")),
                (
                    "proration_factor",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("1"),
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("1")),
                        ],
                        verbose_name="factor de prorrateo",
                    ),
                ),
                (
                    "prorated_ss_quota",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=10, null=True, verbose_name="cuota SS prorrateada",
                    ),
                ),
                (
                    "status",
                    models.CharField(choices=STATUS_CHOICES, default="draft", max_length=20, verbose_name="estado"),
                ),
                ("distributed_at", models.DateTimeField(blank=True, null=True, verbose_name="distribuida el")),
                ("approved_at", models.DateTimeField(blank=True, null=True, verbose_name="aprobada el")),
                ("notes", models.TextField(blank=True, default="", verbose_name="notas")),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="approved_hc_quotas",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "distributed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="distributed_hc_quotas",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "seller",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="hc_quotas",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="vendedor",
                    ),
                ),
                (
                    "store",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="hc_quotas",
                        to="stores.store",
                        verbose_name="tienda",
                    ),
                ),
                (
                    "store_quota",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="hc_quotas",
                        to="quotas.storequota",
                        verbose_name="cuota de tienda",
                    ),
                ),
            ],
            options={
                "verbose_name": "cuota HC",
                "verbose_name_plural": "cuotas HC",
                "ordering": ["-year", "-month"],
            },
        ),
        migrations.AddConstraint(
            model_name="hcquota",
            constraint=models.UniqueConstraint(fields=("store_quota", "seller"), name="uniq_hc_quota_per_store_quota"),
        ),
        migrations.AddIndex(
            model_name="hcquota",
            index=models.Index(fields=["seller", "year", "month"], name="hcquota_seller_period_idx"),
        ),
    ]
