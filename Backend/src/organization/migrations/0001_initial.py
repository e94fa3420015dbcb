from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Partner",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100, unique=True)),
                ("logo", models.URLField(blank=True, max_length=500)),
                ("website", models.URLField(blank=True, max_length=500)),
                (
                    "type",
                    models.CharField(
                        choices=[("INSTITUTIONAL", "Institutionnel"), ("PRIVATE", "Privé")],
                        default="INSTITUTIONAL",
                        max_length=20,
                    ),
                ),
                ("description", models.TextField(blank=True, max_length=1000)),
                ("order", models.PositiveIntegerField(default=0)),
            ],
            options={"verbose_name": "Partenaire", "ordering": ["order", "name"]},
        ),
        migrations.CreateModel(
            name="Antenne",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("city", models.CharField(max_length=100, unique=True)),
                ("name", models.CharField(blank=True, max_length=150)),
                ("responsable", models.CharField(max_length=100)),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("address", models.TextField(blank=True, max_length=500)),
            ],
            options={"verbose_name": "Antenne", "ordering": ["city"]},
        ),
        migrations.CreateModel(
            name="ExecutiveMember",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100)),
                ("position", models.CharField(max_length=100)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("photo", models.URLField(blank=True, max_length=500)),
                ("bio", models.TextField(blank=True, max_length=1000)),
                ("order", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "verbose_name": "Membre du bureau",
                "verbose_name_plural": "Membres du bureau",
                "ordering": ["order", "name"],
            },
        ),
    ]
