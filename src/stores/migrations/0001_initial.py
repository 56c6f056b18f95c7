from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Store",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="creado el")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="actualizado el")),
                ("name", models.CharField(max_length=255, verbose_name="nombre")),
                ("code", models.CharField(max_length=50, unique=True, verbose_name="codigo")),
                (
                    "zone",
                    models.CharField(
                        blank=True,
                        choices=[("NORTE", "Norte"), ("CENTRO", "Centro"), ("SUR", "Sur"), ("LIMA", "Lima")],
                        default="",
                        max_length=20,
                        verbose_name="zona",
                    ),
                ),
                ("address", models.TextField(blank=True, default="", verbose_name="direccion")),
                ("is_active", models.BooleanField(default=True, verbose_name="activa")),
            ],
            options={
                "verbose_name": "Tienda",
                "verbose_name_plural": "Tiendas",
                "ordering": ["name"],
            },
        ),
    ]
