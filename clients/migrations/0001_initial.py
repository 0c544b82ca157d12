import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Client",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("address", models.CharField(max_length=200)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("vm_ip", models.CharField(blank=True, max_length=64, null=True)),
                ("vm_password", models.CharField(blank=True, max_length=255, null=True)),
            ],
            options={
                "db_table": "client",
                "ordering": ["created_at"],
            },
        ),
    ]
