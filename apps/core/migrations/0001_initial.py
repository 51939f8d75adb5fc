import uuid

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='ConverterSettings',
            fields=[
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
                ('api_key', models.CharField(blank=True, help_text='Text-generation API key (https://platform.openai.com/api-keys)', max_length=255, verbose_name='API Key')),
                ('model', models.CharField(blank=True, choices=[('gpt-4o-mini', 'GPT-4o Mini (Recommended)'), ('gpt-4o', 'GPT-4o')], default='gpt-4o-mini', help_text='Model used for AP style conversions', max_length=100, verbose_name='AI Model')),
                ('is_active', models.BooleanField(default=True, help_text='Whether these settings are currently in use', verbose_name='Active')),
            ],
            options={
                'verbose_name': 'Converter Settings',
                'verbose_name_plural': 'Converter Settings',
                'db_table': 'converter_settings',
                'ordering': ['-updated_at'],
            },
        ),
    ]
