from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("booking", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="bookingsession",
            name="selection_version",
            field=models.PositiveIntegerField(default=0),
        ),
    ]
