import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('fashion_models', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='TryonRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('garment_image_url', models.URLField(max_length=500)),
                ('garment_category', models.CharField(blank=True, default='', max_length=100)),
                ('gender', models.CharField(default='unisex', max_length=20)),
                ('remove_background', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('processing', 'Processing'), ('completed', 'Completed'), ('degraded', 'Degraded'), ('skipped', 'Skipped'), ('failed', 'Failed'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=20)),
                ('reason', models.CharField(blank=True, help_text='Why the try-on degraded or was skipped', max_length=50, null=True)),
                ('processed_image_url', models.URLField(blank=True, max_length=500, null=True)),
                ('message', models.TextField(blank=True, null=True)),
                ('provider_job_id', models.CharField(blank=True, max_length=255, null=True)),
                ('task_id', models.CharField(blank=True, help_text='Celery task ID for tracking', max_length=255, null=True)),
                ('processing_time_ms', models.PositiveIntegerField(blank=True, null=True)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('pinned_model', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='pinned_tryon_requests', to='fashion_models.fashionmodel')),
                ('selected_model', models.ForeignKey(blank=True, help_text='Fashion model the try-on ran against', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='tryon_requests', to='fashion_models.fashionmodel')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='tryon_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
    ]
