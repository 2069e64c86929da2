import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Gym',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('gym_id', models.CharField(db_index=True, max_length=64, unique=True)),
                ('name', models.CharField(blank=True, default='', max_length=128)),
                ('owner_id', models.CharField(blank=True, default='', max_length=64)),
                ('member_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name='ServiceOrder',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('user_id', models.CharField(db_index=True, max_length=64)),
                ('payment_status', models.CharField(default='completed', max_length=16)),
                ('payment_method', models.CharField(default='uddoktapay', max_length=32)),
                ('transaction_id', models.CharField(blank=True, default='', max_length=128)),
                ('invoice_id', models.CharField(max_length=128, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('trainer_id', models.CharField(db_index=True, max_length=64)),
                ('service_type', models.CharField(default='Training Service', max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('package_type', models.CharField(default='basic', max_length=32)),
                ('session_count', models.PositiveIntegerField(default=1)),
                ('session_duration', models.PositiveIntegerField(default=0)),
                ('delivery_days', models.PositiveIntegerField(default=0)),
                ('urgent_delivery', models.BooleanField(default=False)),
                ('booking_type', models.CharField(default='online', max_length=16)),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('in_progress', 'In progress'), ('delivered', 'Delivered'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=16)),
                ('notes', models.TextField(blank=True, default='')),
            ],
            options={
                'ordering': ('-created_at',),
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='TrainerBooking',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('user_id', models.CharField(db_index=True, max_length=64)),
                ('payment_status', models.CharField(default='completed', max_length=16)),
                ('payment_method', models.CharField(default='uddoktapay', max_length=32)),
                ('transaction_id', models.CharField(blank=True, default='', max_length=128)),
                ('invoice_id', models.CharField(max_length=128, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('trainer_id', models.CharField(db_index=True, max_length=64)),
                ('service_type', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('scheduled_date', models.DateField(blank=True, null=True)),
                ('scheduled_time', models.TimeField(blank=True, null=True)),
                ('booking_type', models.CharField(default='online', max_length=16)),
                ('session_count', models.PositiveIntegerField(default=1)),
                ('package_type', models.CharField(default='basic', max_length=32)),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('status', models.CharField(choices=[('confirmed', 'Confirmed'), ('completed', 'Completed'), ('cancelled', 'Cancelled'), ('no_show', 'No show')], db_index=True, default='confirmed', max_length=16)),
            ],
            options={
                'ordering': ('-created_at',),
                'abstract': False,
            },
        ),
        migrations.CreateModel(
            name='GymMembership',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('user_id', models.CharField(db_index=True, max_length=64)),
                ('payment_status', models.CharField(default='completed', max_length=16)),
                ('payment_method', models.CharField(default='uddoktapay', max_length=32)),
                ('transaction_id', models.CharField(blank=True, default='', max_length=128)),
                ('invoice_id', models.CharField(max_length=128, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('gym_id', models.CharField(db_index=True, max_length=64)),
                ('plan_id', models.CharField(blank=True, default='', max_length=64)),
                ('amount_paid', models.DecimalField(decimal_places=2, max_digits=12)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('status', models.CharField(choices=[('active', 'Active'), ('expired', 'Expired'), ('cancelled', 'Cancelled')], db_index=True, default='active', max_length=16)),
            ],
            options={
                'ordering': ('-created_at',),
                'abstract': False,
            },
        ),
    ]
