import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('role', models.CharField(choices=[('super_admin', 'Super Admin'), ('admin', 'Administrator'), ('doctor', 'Doctor'), ('staff', 'Staff'), ('patient', 'Patient')], db_index=True, default='patient', max_length=20)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('specialization', models.CharField(blank=True, max_length=100)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'abstract': False,
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Polyclinic',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('polyclinic_id', models.CharField(editable=False, max_length=32, unique=True)),
                ('name', models.CharField(max_length=255)),
                ('department', models.CharField(choices=[('Umum', 'Umum'), ('Spesialis', 'Spesialis'), ('Gigi', 'Gigi'), ('Mata', 'Mata'), ('THT', 'THT'), ('Kulit', 'Kulit'), ('Jantung', 'Jantung'), ('Paru', 'Paru'), ('Saraf', 'Saraf'), ('Bedah', 'Bedah'), ('Kandungan', 'Kandungan'), ('Anak', 'Anak'), ('Psikiatri', 'Psikiatri'), ('Gizi', 'Gizi'), ('Rehabilitasi', 'Rehabilitasi')], default='Umum', max_length=32)),
                ('description', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('Active', 'Active'), ('Maintenance', 'Maintenance'), ('Closed', 'Closed')], default='Active', max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name='Schedule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('schedule_id', models.CharField(editable=False, max_length=32, unique=True)),
                ('date', models.DateField(db_index=True)),
                ('start_time', models.CharField(max_length=5)),
                ('end_time', models.CharField(max_length=5)),
                ('total_slots', models.PositiveIntegerField(default=20)),
                ('booked_slots', models.PositiveIntegerField(default=0)),
                ('available_slots', models.IntegerField(default=20)),
                ('status', models.CharField(choices=[('Active', 'Active'), ('Cancelled', 'Cancelled'), ('Completed', 'Completed')], db_index=True, default='Active', max_length=16)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='schedules_created', to=settings.AUTH_USER_MODEL)),
                ('doctor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='schedules', to=settings.AUTH_USER_MODEL)),
                ('polyclinic', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='schedules', to='booking.polyclinic')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='schedules_updated', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['doctor', 'date'], name='booking_sch_doctor__3f0c1a_idx'),
                    models.Index(fields=['polyclinic', 'date'], name='booking_sch_polycli_8b7d2e_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('booked_slots__lte', models.F('total_slots'))), name='schedule_booked_within_total'),
                    models.CheckConstraint(condition=models.Q(('available_slots', models.F('total_slots') - models.F('booked_slots'))), name='schedule_available_matches_counters'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Queue',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('queue_id', models.CharField(editable=False, max_length=32, unique=True)),
                ('queue_number', models.PositiveIntegerField()),
                ('queue_date', models.DateField(db_index=True)),
                ('appointment_time', models.CharField(blank=True, max_length=5)),
                ('status', models.CharField(choices=[('Waiting', 'Waiting'), ('In Progress', 'In Progress'), ('Completed', 'Completed'), ('Cancelled', 'Cancelled'), ('No Show', 'No Show')], db_index=True, default='Waiting', max_length=16)),
                ('priority', models.CharField(choices=[('Normal', 'Normal'), ('Urgent', 'Urgent'), ('Emergency', 'Emergency')], default='Normal', max_length=16)),
                ('registration_time', models.DateTimeField(default=django.utils.timezone.now)),
                ('called_time', models.DateTimeField(blank=True, null=True)),
                ('start_consultation_time', models.DateTimeField(blank=True, null=True)),
                ('end_consultation_time', models.DateTimeField(blank=True, null=True)),
                ('estimated_wait_time', models.PositiveIntegerField(blank=True, null=True)),
                ('actual_wait_time', models.PositiveIntegerField(blank=True, null=True)),
                ('consultation_duration', models.PositiveIntegerField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('complaints', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('doctor', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='doctor_queue_entries', to=settings.AUTH_USER_MODEL)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='queue_entries', to=settings.AUTH_USER_MODEL)),
                ('polyclinic', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='queue_entries', to='booking.polyclinic')),
                ('schedule', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='queues', to='booking.schedule')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['queue_date', 'status'], name='booking_que_queue_d_5a9e41_idx'),
                    models.Index(fields=['polyclinic', 'queue_date'], name='booking_que_polycli_c2d7f0_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('schedule', 'queue_number'), name='queue_number_unique_per_schedule'),
                ],
            },
        ),
        migrations.CreateModel(
            name='QueueTransition',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('from_status', models.CharField(blank=True, max_length=16, null=True)),
                ('to_status', models.CharField(max_length=16)),
                ('timestamp', models.DateTimeField(auto_now_add=True)),
                ('reason', models.CharField(blank=True, max_length=255)),
                ('operator', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='queue_transitions', to=settings.AUTH_USER_MODEL)),
                ('queue', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='transitions', to='booking.queue')),
            ],
        ),
        migrations.CreateModel(
            name='AuditEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(max_length=64)),
                ('object_type', models.CharField(blank=True, max_length=64, null=True)),
                ('object_id', models.BigIntegerField(blank=True, null=True)),
                ('detail', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['action', 'created_at'], name='booking_aud_action_7e21b3_idx'),
                    models.Index(fields=['object_type', 'object_id', 'created_at'], name='booking_aud_object__9d4c60_idx'),
                ],
            },
        ),
    ]
