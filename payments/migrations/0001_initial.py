from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_type', models.CharField(choices=[('service_order', 'Service order'), ('gym_membership', 'Gym membership'), ('trainer_booking', 'Trainer booking')], max_length=20)),
                ('order_id', models.CharField(db_index=True, max_length=64)),
                ('invoice_id', models.CharField(max_length=128, unique=True)),
                ('payment_session_id', models.CharField(blank=True, default='', max_length=128)),
                ('user_id', models.CharField(db_index=True, max_length=64)),
                ('trainer_id', models.CharField(blank=True, db_index=True, default='', max_length=64)),
                ('gym_id', models.CharField(blank=True, db_index=True, default='', max_length=64)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('commission', models.DecimalField(decimal_places=2, max_digits=12)),
                ('net_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('payment_method', models.CharField(default='uddoktapay', max_length=32)),
                ('status', models.CharField(default='completed', max_length=16)),
                ('description', models.CharField(blank=True, default='', max_length=255)),
                ('transaction_date', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ('-transaction_date',),
            },
        ),
        migrations.CreateModel(
            name='PostCommitAction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('ledger', 'Ledger entry'), ('notify', 'Notifications'), ('increment_member_count', 'Increment gym member count')], max_length=32)),
                ('invoice_id', models.CharField(db_index=True, max_length=128)),
                ('payload', models.JSONField(default=dict)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('done', 'Done'), ('failed', 'Failed')], db_index=True, default='pending', max_length=16)),
                ('attempts', models.PositiveIntegerField(default=0)),
                ('last_error', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('processed_at', models.DateTimeField(blank=True, null=True)),
            ],
            options={
                'ordering': ('created_at',),
            },
        ),
        migrations.AddConstraint(
            model_name='postcommitaction',
            constraint=models.UniqueConstraint(fields=('invoice_id', 'kind'), name='uniq_action_per_invoice'),
        ),
    ]
