import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import accounts.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='UserProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('timezone', models.CharField(choices=accounts.models.TIMEZONE_CHOICES, default='UTC', help_text="User's timezone for streaks and today's reflection date", max_length=50)),
                ('weekly_summary_enabled', models.BooleanField(default=True, help_text='Include this user in the weekly summary batch')),
                ('coach_name', models.CharField(blank=True, max_length=120)),
                ('coach_email', models.EmailField(blank=True, max_length=254)),
                ('share_weekly_summary', models.BooleanField(default=False, help_text='Email each new weekly summary to the coach')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='profile', to=settings.AUTH_USER_MODEL)),
            ],
        ),
    ]
