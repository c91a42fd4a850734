import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='FashionModel',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(help_text="Descriptive name, e.g. 'Sophia - Professional Model'", max_length=255)),
                ('gender', models.CharField(choices=[('men', 'Men'), ('women', 'Women'), ('unisex', 'Unisex')], db_index=True, max_length=10)),
                ('body_type', models.CharField(default='average', help_text='slim, average, athletic, plus_size', max_length=30)),
                ('ethnicity', models.CharField(default='diverse', max_length=30)),
                ('age_range', models.CharField(default='adult', help_text='young_adult, adult, mature', max_length=30)),
                ('pose', models.CharField(default='front', help_text='front, side, three_quarter', max_length=30)),
                ('category', models.CharField(choices=[('general', 'General'), ('formal', 'Formal'), ('casual', 'Casual'), ('athletic', 'Athletic'), ('evening', 'Evening')], db_index=True, default='general', max_length=20)),
                ('height', models.PositiveIntegerField(blank=True, help_text='Height in cm', null=True)),
                ('skin_tone', models.CharField(default='medium', max_length=20)),
                ('hair_style', models.CharField(default='short', max_length=20)),
                ('tags', models.JSONField(blank=True, default=list, help_text='Free-form searchable tags')),
                ('image_url', models.URLField(help_text='Public URL of the model image', max_length=500)),
                ('thumbnail_url', models.URLField(blank=True, max_length=500, null=True)),
                ('storage_reference', models.CharField(blank=True, help_text='Remote path of the image in object storage', max_length=500, null=True)),
                ('has_transparent_background', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(db_index=True, default=True, help_text='Eligible for try-on selection')),
                ('is_featured', models.BooleanField(default=False, help_text='Receives a selection bonus')),
                ('sort_order', models.IntegerField(default=0, help_text='Lower sorts first')),
                ('usage', models.PositiveIntegerField(default=0, help_text='Cumulative try-on usage')),
                ('recent_usage', models.PositiveIntegerField(default=0, help_text='Try-on attempts within the trailing recent-usage window')),
                ('success_rate', models.DecimalField(decimal_places=2, default=0, help_text='Percentage of try-on attempts that completed successfully', max_digits=5)),
                ('total_interactions', models.PositiveIntegerField(default=0, help_text='Any tracked event')),
                ('tryon_attempts', models.PositiveIntegerField(default=0)),
                ('tryon_successes', models.PositiveIntegerField(default=0)),
                ('average_processing_ms', models.PositiveIntegerField(default=0)),
                ('last_used_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Fashion Model',
                'verbose_name_plural': 'Fashion Models',
                'ordering': ['sort_order', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='FashionModelEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_type', models.CharField(choices=[('view', 'View'), ('select', 'Select'), ('ai_process', 'AI Process'), ('tryon_success', 'Try-On Success'), ('tryon_failure', 'Try-On Failure')], db_index=True, max_length=20)),
                ('context', models.JSONField(blank=True, default=dict)),
                ('processing_time_ms', models.PositiveIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('fashion_model', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='events', to='fashion_models.fashionmodel')),
            ],
            options={
                'verbose_name': 'Fashion Model Event',
                'verbose_name_plural': 'Fashion Model Events',
                'ordering': ['-created_at'],
            },
        ),
    ]
