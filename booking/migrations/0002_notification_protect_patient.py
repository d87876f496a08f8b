import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('booking', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='queue',
            name='patient',
            field=models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='queue_entries', to=settings.AUTH_USER_MODEL),
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('notification_id', models.CharField(editable=False, max_length=32, unique=True)),
                ('type', models.CharField(choices=[('new_appointment', 'New appointment'), ('schedule_update', 'Schedule update'), ('system_alert', 'System alert')], max_length=32)),
                ('message', models.TextField()),
                ('link', models.CharField(blank=True, max_length=255)),
                ('target_roles', models.JSONField(blank=True, default=list)),
                ('is_read', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('queue', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='notifications', to='booking.queue')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['is_read', 'created_at'], name='booking_not_is_read_4b7e12_idx'),
                ],
            },
        ),
    ]
