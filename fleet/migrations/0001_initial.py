import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("clients", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Drone",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150)),
            ],
            options={
                "db_table": "drone",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Payload",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150)),
            ],
            options={
                "db_table": "payload",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="ClientDroneAssignment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("client", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="drone_assignments",
                    to="clients.client",
                )),
                ("drone", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="assignments",
                    to="fleet.drone",
                )),
            ],
            options={
                "db_table": "client_drone_assignment",
                "ordering": ["drone_id", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(quantity__gte=1),
                        name="assignment_quantity_at_least_one",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DronePayloadAssignment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("assignment", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="payload_assignments",
                    to="fleet.clientdroneassignment",
                )),
                ("payload", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="assignments",
                    to="fleet.payload",
                )),
            ],
            options={
                "db_table": "drone_payload_assignment",
                "unique_together": {("assignment", "payload")},
            },
        ),
    ]
