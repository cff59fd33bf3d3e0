from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("ingest", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="category",
            name="name",
            field=models.TextField(unique=True),
        ),
        migrations.AlterField(
            model_name="chapter",
            name="name",
            field=models.TextField(),
        ),
        migrations.AlterField(
            model_name="categoryprocessing",
            name="category_name",
            field=models.TextField(unique=True),
        ),
    ]
