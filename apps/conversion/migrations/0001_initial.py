import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='CachedConversion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('key', models.CharField(help_text='Cache key, e.g. ap_conversion_<article id>', max_length=191, unique=True, verbose_name='Key')),
                ('content', models.TextField(help_text='Converted HTML', verbose_name='Content')),
                ('expires_at', models.DateTimeField(db_index=True, help_text='Entry reads as absent from this moment on', verbose_name='Expires At')),
            ],
            options={
                'verbose_name': 'Cached Conversion',
                'verbose_name_plural': 'Cached Conversions',
                'db_table': 'cached_conversions',
                'ordering': ['-created_at'],
                'permissions': [('clear_conversion_cache', 'Can clear the conversion cache')],
                'abstract': False,
            },
        ),
    ]
