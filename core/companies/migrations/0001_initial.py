import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("audit", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Company",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255, unique=True)),
                ("website", models.URLField(blank=True, default="")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "companies",
                "ordering": ["name"],
                "verbose_name_plural": "companies",
            },
        ),
        migrations.CreateModel(
            name="CompanyHistory",
            fields=[
                ("pk", models.CompositePrimaryKey("entity_id", "revision_id", blank=True, editable=False, primary_key=True, serialize=False)),
                ("entity_id", models.BigIntegerField()),
                ("revision", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="+", to="audit.revision")),
                ("change_kind", models.CharField(choices=[("CREATED", "Created"), ("UPDATED", "Updated"), ("DELETED", "Deleted")], max_length=7)),
                ("name", models.CharField(max_length=255)),
                ("website", models.URLField(blank=True, default="")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "verbose_name": "company history",
                "db_table": "companies_aud",
            },
        ),
    ]
