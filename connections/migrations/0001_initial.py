import django.db.models.deletion
import django.db.models.functions.comparison
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Connection',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted')], default='pending', max_length=10)),
                ('friend', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='connections_received', to=settings.AUTH_USER_MODEL)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='connections_sent', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'constraints': [
                    models.UniqueConstraint(
                        django.db.models.functions.comparison.Least('user', 'friend'),
                        django.db.models.functions.comparison.Greatest('user', 'friend'),
                        name='unique_connection_pair',
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('user', models.F('friend')), _negated=True),
                        name='connection_not_self',
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('status__in', ['pending', 'accepted'])),
                        name='connection_status_valid',
                    ),
                ],
            },
        ),
    ]
