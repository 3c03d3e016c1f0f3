from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Revision",
            fields=[
                ("revision_id", models.BigIntegerField(primary_key=True, serialize=False)),
                ("timestamp", models.DateTimeField(db_index=True)),
                ("actor", models.CharField(max_length=255)),
            ],
            options={
                "db_table": "revinfo",
                "ordering": ["revision_id"],
            },
        ),
        migrations.CreateModel(
            name="RevisionSequence",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
            ],
            options={"db_table": "revinfo_seq"},
        ),
    ]
